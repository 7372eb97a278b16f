"""
NEOTERMINAL Session Module

Wires the parts of one terminal session together.

A Session owns its configuration, filesystem, command registry and
processor; nothing is shared through module-level state, so several
sessions can live in the same process.

Author: NEOTERMINAL Team
Version: 1.0.0
"""

from dataclasses import dataclass
from typing import Optional

from neoterminal.core.config_loader import Config
from neoterminal.core.processor import CommandProcessor
from neoterminal.core.registry import CommandRegistry
from neoterminal.filesystem.vfs import VirtualFileSystem
from neoterminal.logger import Logger, LogLevel, get_logger
from neoterminal.shell.builtins import register_builtins
from neoterminal.shell.command import CommandResult


@dataclass
class Session:
    """One player's terminal session."""
    config: Config
    filesystem: VirtualFileSystem
    registry: CommandRegistry
    processor: CommandProcessor

    async def execute(self, line: str) -> CommandResult:
        """Shortcut for ``processor.process``."""
        return await self.processor.process(line)


def configure_logging(config: Config) -> None:
    """Apply the logging section of a configuration."""
    Logger.initialize(
        level=LogLevel.from_name(config.logging.level),
        log_file=config.logging.log_file,
        use_colors=config.logging.use_colors,
        console_output=config.logging.console_output,
    )


def create_session(
    config: Optional[Config] = None,
    with_builtins: bool = True,
    init_logging: bool = True
) -> Session:
    """
    Build a ready-to-use session.

    Args:
        config: Configuration, defaults when omitted
        with_builtins: Whether to register the built-in commands
        init_logging: Whether to (re)configure logging from ``config``

    Returns:
        The new session
    """
    config = config or Config()

    if init_logging:
        configure_logging(config)

    filesystem = VirtualFileSystem(config.filesystem)
    registry = CommandRegistry()
    processor = CommandProcessor(
        registry,
        filesystem,
        config=config.shell,
        env=config.environment,
    )

    if with_builtins:
        register_builtins(registry, processor)

    get_logger('shell').info(
        "Session created",
        context={'commands': len(registry), 'cwd': filesystem.get_current_path()}
    )

    return Session(
        config=config,
        filesystem=filesystem,
        registry=registry,
        processor=processor,
    )
