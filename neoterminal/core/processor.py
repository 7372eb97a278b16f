"""
NEOTERMINAL Command Processor

Turns one line of player input into exactly one CommandResult.

The line is offered to an ordered chain of resolvers, from the most
specific to the most permissive:

    1. NumericChoiceResolver  - digit-only input picks a narrative choice
    2. NamedCommandResolver   - ordinary ``name args...`` commands
    3. FallbackResolver       - multi-word narrative triggers
    4. ResponseResolver       - free-text catch-all

Each resolver either returns a definitive result or NOT_APPLICABLE, in
which case the next one is tried. Every call to ``process`` is recorded as
one CommandExecutionContext and broadcast to listeners.

Author: NEOTERMINAL Team
Version: 1.0.0
"""

import asyncio
import re
import time
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional, List, Union, TYPE_CHECKING

from neoterminal.core.config_loader import ShellConfig
from neoterminal.core.registry import CommandRegistry
from neoterminal.exceptions import (
    CommandTimeoutError,
    FileSystemException,
    ShellException,
)
from neoterminal.logger import get_logger
from neoterminal.shell.command import Command, CommandOptions, CommandResult
from neoterminal.shell.parser import CommandParser

if TYPE_CHECKING:
    from neoterminal.filesystem.vfs import VirtualFileSystem


NUMERIC_INPUT = re.compile(r'[0-9]+')


class _NotApplicable:
    """Sentinel type returned by a resolver that declines the input."""

    _instance: Optional['_NotApplicable'] = None

    def __new__(cls) -> '_NotApplicable':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'NOT_APPLICABLE'

    def __bool__(self) -> bool:
        return False


NOT_APPLICABLE = _NotApplicable()

Resolution = Union[CommandResult, _NotApplicable]


@dataclass
class CommandExecutionContext:
    """Telemetry record for one processed line."""
    command: str
    args: List[str]
    timestamp: datetime
    execution_time_ms: float
    successful: bool
    error_message: Optional[str] = None
    output: Optional[str] = None
    resolved_by: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Event payload in the shape consumed by skill tracking."""
        return {
            'command': self.command,
            'args': list(self.args),
            'timestamp': self.timestamp.isoformat(),
            'executionTimeMs': self.execution_time_ms,
            'successful': self.successful,
            'errorMessage': self.error_message,
            'output': self.output,
        }


@dataclass
class ResolutionRequest:
    """A line of input as seen by the resolvers."""
    line: str
    command: str
    args: List[str] = field(default_factory=list)

    @property
    def tokens(self) -> List[str]:
        return [self.command, *self.args]


ExecutionListener = Callable[[CommandExecutionContext], None]


class Resolver(ABC):
    """One stage of the resolution chain."""

    name: str = "resolver"

    @abstractmethod
    async def resolve(
        self,
        request: ResolutionRequest,
        processor: 'CommandProcessor'
    ) -> Resolution:
        """Return a definitive result or NOT_APPLICABLE."""


class ReservedCommandResolver(Resolver):
    """
    Base for stages that delegate to a command registered under a
    reserved name. A missing command makes the stage a no-op.
    """

    def __init__(self, command_name: str):
        self.command_name = command_name

    def _handler(self, processor: 'CommandProcessor') -> Optional[Command]:
        return processor.registry.lookup(self.command_name)

    @staticmethod
    def _final(result: CommandResult, request: ResolutionRequest) -> CommandResult:
        """A declined result from a final stage reads as an unknown command."""
        if not result.applicable:
            return CommandResult.fail(f"Command not found: {request.command}")
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(command_name={self.command_name!r})"


class NumericChoiceResolver(ReservedCommandResolver):
    """
    Routes digit-only input to the numeric-choice handler.

    The handler's result is final whether or not it succeeded; numbers
    never fall through to ordinary command lookup while a handler exists.
    """

    name = "numeric"

    async def resolve(self, request, processor):
        if not NUMERIC_INPUT.fullmatch(request.line.strip()):
            return NOT_APPLICABLE

        handler = self._handler(processor)
        if handler is None:
            return NOT_APPLICABLE

        result = await processor.execute_command(
            handler, [], original_command=request.line
        )
        return self._final(result, request)


class NamedCommandResolver(Resolver):
    """Looks the first token up in the registry and runs that command."""

    name = "named"

    async def resolve(self, request, processor):
        command = processor.registry.lookup(request.command)
        if command is None:
            return NOT_APPLICABLE

        return await processor.execute_command(command, request.args)


class FallbackResolver(ReservedCommandResolver):
    """
    Offers the whole line to the fallback handler.

    The handler declines with ``CommandResult.not_applicable()``; any other
    result, including a failure, is final.
    """

    name = "fallback"

    async def resolve(self, request, processor):
        handler = self._handler(processor)
        if handler is None:
            return NOT_APPLICABLE

        result = await processor.execute_command(
            handler, request.tokens, original_command=request.line
        )
        if not result.applicable:
            return NOT_APPLICABLE
        return result


class ResponseResolver(ReservedCommandResolver):
    """
    Catch-all: the response handler's result is always final.

    A handler that declines anyway yields "Command not found".
    """

    name = "response"

    async def resolve(self, request, processor):
        handler = self._handler(processor)
        if handler is None:
            return NOT_APPLICABLE

        result = await processor.execute_command(
            handler, request.tokens, original_command=request.line
        )
        return self._final(result, request)


class CommandProcessor:
    """
    Parses, resolves and executes command lines.

    Holds no state between calls apart from the command history. Handlers
    are awaited one at a time, so the filesystem never sees concurrent
    mutation.

    Example:
        >>> processor = CommandProcessor(registry, filesystem)
        >>> result = await processor.process('ls -la')
    """

    def __init__(
        self,
        registry: CommandRegistry,
        filesystem: 'VirtualFileSystem',
        config: Optional[ShellConfig] = None,
        env: Optional[dict[str, str]] = None,
        terminal: Optional[Any] = None,
        parser: Optional[CommandParser] = None
    ):
        self._config = config or ShellConfig()
        self._registry = registry
        self._filesystem = filesystem
        self._env: dict[str, str] = dict(env or {})
        self._terminal = terminal
        self._parser = parser or CommandParser()
        self._logger = get_logger('processor')
        self._listeners: List[ExecutionListener] = []
        self._history: deque[str] = deque(maxlen=self._config.history_size)
        self._resolvers: List[Resolver] = [
            NumericChoiceResolver(self._config.numeric_command),
            NamedCommandResolver(),
            FallbackResolver(self._config.fallback_command),
            ResponseResolver(self._config.response_command),
        ]

    @property
    def registry(self) -> CommandRegistry:
        return self._registry

    @property
    def filesystem(self) -> 'VirtualFileSystem':
        return self._filesystem

    @property
    def env(self) -> dict[str, str]:
        return self._env

    @property
    def terminal(self) -> Optional[Any]:
        return self._terminal

    @terminal.setter
    def terminal(self, value: Optional[Any]) -> None:
        self._terminal = value

    @property
    def resolvers(self) -> List[Resolver]:
        return list(self._resolvers)

    def add_resolver(self, resolver: Resolver, index: Optional[int] = None) -> None:
        """Insert a resolver into the chain (appended by default)."""
        if index is None:
            self._resolvers.append(resolver)
        else:
            self._resolvers.insert(index, resolver)

    def remove_resolver(self, name: str) -> bool:
        """Remove every resolver with the given stage name."""
        before = len(self._resolvers)
        self._resolvers = [r for r in self._resolvers if r.name != name]
        return len(self._resolvers) != before

    # Listeners

    def on_command_executed(self, listener: ExecutionListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ExecutionListener) -> bool:
        if listener in self._listeners:
            self._listeners.remove(listener)
            return True
        return False

    def _emit_execution(self, context: CommandExecutionContext) -> None:
        for listener in list(self._listeners):
            try:
                listener(context)
            except Exception as e:
                self._logger.error(
                    f"Error in command listener: {e}",
                    context={'command': context.command}
                )

    # History

    def get_history(self) -> List[str]:
        return list(self._history)

    def clear_history(self) -> None:
        self._history.clear()

    # Execution

    def build_options(self, original_command: Optional[str] = None) -> CommandOptions:
        """Build the per-call execution context."""
        current = self._filesystem.get_current_path()
        env = dict(self._env)
        env['PWD'] = current

        return CommandOptions(
            current_directory=current,
            filesystem=self._filesystem,
            env=env,
            terminal=self._terminal,
            original_command=original_command,
        )

    async def execute_command(
        self,
        command: Command,
        args: List[str],
        original_command: Optional[str] = None
    ) -> CommandResult:
        """
        Run one handler, converting every failure into a CommandResult.
        """
        options = self.build_options(original_command)
        timeout = self._config.command_timeout

        try:
            if timeout:
                result = await self._run_with_deadline(command, args, options, timeout)
            else:
                result = await command.execute(args, options)
        except CommandTimeoutError as e:
            self._logger.warning(e.message, context={'command': command.name})
            return CommandResult.fail(e.message)
        except (FileSystemException, ShellException) as e:
            return CommandResult.fail(e.message)
        except Exception as e:
            self._logger.exception(
                f"Command '{command.name}' raised {type(e).__name__}",
                exc=e
            )
            return CommandResult.fail(str(e) or type(e).__name__)

        if not isinstance(result, CommandResult):
            self._logger.error(
                "Command returned an invalid result",
                context={'command': command.name, 'type': type(result).__name__}
            )
            return CommandResult.fail(f"{command.name}: invalid command result")

        return result

    async def _run_with_deadline(
        self,
        command: Command,
        args: List[str],
        options: CommandOptions,
        timeout: float
    ) -> Any:
        """
        Await a handler for at most ``timeout`` seconds.

        Only an expired deadline raises CommandTimeoutError; exceptions
        raised by the handler itself propagate unchanged.
        """
        task = asyncio.ensure_future(command.execute(args, options))
        done, _ = await asyncio.wait({task}, timeout=timeout)

        if task not in done:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            raise CommandTimeoutError(command.name, timeout)

        return task.result()

    async def _resolve(self, request: ResolutionRequest) -> tuple[CommandResult, Optional[str]]:
        for resolver in self._resolvers:
            outcome = await resolver.resolve(request, self)
            if outcome is NOT_APPLICABLE:
                continue
            return outcome, resolver.name

        return CommandResult.fail(f"Command not found: {request.command}"), None

    async def process(self, line: str) -> CommandResult:
        """
        Process one line of input.

        Never raises: every outcome, including unknown commands and
        handler crashes, is returned as a CommandResult.
        """
        start = time.perf_counter()
        timestamp = datetime.now()
        command_name = ""
        args: List[str] = []
        resolved_by: Optional[str] = None

        try:
            tokens = self._parser.tokenize(line) if line and line.strip() else []

            if not tokens:
                result = CommandResult.ok("")
                resolved_by = "empty"
            else:
                self._history.append(line.strip())
                command_name, args = tokens[0], tokens[1:]
                request = ResolutionRequest(line=line, command=command_name, args=args)
                result, resolved_by = await self._resolve(request)
        except Exception as e:
            self._logger.exception("Unexpected error while processing input", exc=e)
            result = CommandResult.fail(str(e) or type(e).__name__)

        elapsed_ms = (time.perf_counter() - start) * 1000

        self._logger.debug(
            "Processed command",
            context={
                'command': command_name,
                'stage': resolved_by,
                'success': result.success,
                'ms': round(elapsed_ms, 3),
            }
        )

        self._emit_execution(CommandExecutionContext(
            command=command_name,
            args=args,
            timestamp=timestamp,
            execution_time_ms=elapsed_ms,
            successful=result.success,
            error_message=result.error,
            output=result.output,
            resolved_by=resolved_by,
        ))

        return result
