"""
Command Contract Module

Defines what every command handler looks like to the processor:
identity metadata, the options it is executed with, and the result it
returns.

Author: NEOTERMINAL Team
Version: 1.0.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Optional, Any, List, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from neoterminal.filesystem.vfs import VirtualFileSystem


class CommandCategory(str, Enum):
    """Command categories, used by help listings and skill tracking."""
    NAVIGATION = "navigation"
    FILE_OPERATIONS = "file_operations"
    SYSTEM_INFO = "system_info"
    TEXT_PROCESSING = "text_processing"
    NETWORK = "network"
    UTILITY = "utility"
    ADVANCED = "advanced"


class SkillLevel(IntEnum):
    """Player skill tiers a command is introduced at."""
    INITIATE = 1
    OPERATOR = 2
    NETRUNNER = 3
    GHOST = 4
    ARCHITECT = 5


@dataclass
class CommandOptions:
    """
    Per-invocation execution context handed to ``Command.execute``.

    ``original_command`` carries the raw, un-tokenized input line; it is
    only set for the numeric-choice, fallback and response stages.
    """
    current_directory: str
    filesystem: 'VirtualFileSystem'
    env: dict[str, str] = field(default_factory=dict)
    terminal: Optional[Any] = None
    original_command: Optional[str] = None


@dataclass
class CommandResult:
    """
    Outcome of one command execution.

    ``output`` is text for the terminal; ``error`` is the failure reason.
    ``applicable`` is False only when a handler declines the input
    altogether, letting the processor try the next resolver.
    """
    success: bool
    output: Optional[str] = None
    error: Optional[str] = None
    applicable: bool = True

    @classmethod
    def ok(cls, output: Optional[str] = None) -> 'CommandResult':
        return cls(success=True, output=output)

    @classmethod
    def fail(cls, error: str, output: Optional[str] = None) -> 'CommandResult':
        return cls(success=False, output=output, error=error)

    @classmethod
    def not_applicable(cls, reason: Optional[str] = None) -> 'CommandResult':
        """The handler does not recognise this input."""
        return cls(success=False, error=reason, applicable=False)


class Command(ABC):
    """
    Base class for every command handler.

    Subclasses set the identity attributes and implement ``execute``.
    ``execute`` is a coroutine so handlers may await I/O; the processor
    awaits each call before handling the next line.

    Example:
        >>> class PwdCommand(Command):
        ...     name = "pwd"
        ...     async def execute(self, args, options):
        ...         return CommandResult.ok(options.filesystem.get_current_path())
    """

    name: str = ""
    aliases: Sequence[str] = ()
    category: CommandCategory = CommandCategory.UTILITY
    description: str = ""
    usage: str = ""
    examples: Sequence[str] = ()
    skill_level: SkillLevel = SkillLevel.INITIATE

    @abstractmethod
    async def execute(self, args: List[str], options: CommandOptions) -> CommandResult:
        """
        Run the command.

        Args:
            args: Arguments after the command name
            options: Execution context

        Returns:
            The command's result
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
