"""
NEOTERMINAL Command Registry

Name and alias lookup table for command handlers.
Provides:
- Command registration under a name and any number of aliases
- Lookup by name first, then by alias
- Unregistration that also drops every alias of the command
- Category listings for help output

Each session owns its own registry.

Author: NEOTERMINAL Team
Version: 1.0.0
"""

from typing import Optional, List

from neoterminal.exceptions import CommandRegistrationError
from neoterminal.logger import get_logger
from neoterminal.shell.command import Command, CommandCategory


class CommandRegistry:
    """
    Registry of command handlers.

    Two maps back the registry: ``name -> command`` and
    ``alias -> canonical name``. The last registration for a given name or
    alias wins.

    Example:
        >>> registry = CommandRegistry()
        >>> registry.register(LsCommand())
        >>> registry.lookup('dir') is registry.lookup('ls')
        True
    """

    def __init__(self):
        self._commands: dict[str, Command] = {}
        self._aliases: dict[str, str] = {}
        self._logger = get_logger('registry')

    def register(self, command: Command) -> None:
        """
        Register a command under its name and aliases.

        Raises:
            CommandRegistrationError: If the command has no name
        """
        name = getattr(command, 'name', None)
        if not name or not isinstance(name, str):
            raise CommandRegistrationError(
                "Command must have a non-empty name",
                command=repr(command)
            )

        if name in self._commands:
            self._logger.debug(f"Replacing command '{name}'")

        self._commands[name] = command

        for alias in command.aliases or ():
            previous = self._aliases.get(alias)
            if previous is not None and previous != name:
                self._logger.debug(
                    f"Alias '{alias}' reassigned",
                    context={'from': previous, 'to': name}
                )
            self._aliases[alias] = name

        self._logger.debug(
            f"Registered command '{name}'",
            context={'aliases': list(command.aliases or ())}
        )

    def unregister(self, name: str) -> bool:
        """
        Remove a command and every alias that points to it.

        Returns:
            False if no command with that name was registered
        """
        if name not in self._commands:
            return False

        del self._commands[name]

        stale = [alias for alias, target in self._aliases.items() if target == name]
        for alias in stale:
            del self._aliases[alias]

        self._logger.debug(f"Unregistered command '{name}'")
        return True

    def lookup(self, name_or_alias: str) -> Optional[Command]:
        """Find a command by name, falling back to aliases."""
        command = self._commands.get(name_or_alias)
        if command is not None:
            return command

        target = self._aliases.get(name_or_alias)
        if target is not None:
            return self._commands.get(target)

        return None

    def has_command(self, name_or_alias: str) -> bool:
        return self.lookup(name_or_alias) is not None

    def get_all_commands(self) -> List[Command]:
        """All registered commands, in registration order."""
        return list(self._commands.values())

    def get_commands_by_category(self, category: CommandCategory) -> List[Command]:
        return [cmd for cmd in self._commands.values() if cmd.category == category]

    def list_aliases(self, name: str) -> List[str]:
        """Aliases currently resolving to ``name``."""
        return [alias for alias, target in self._aliases.items() if target == name]

    def __contains__(self, name_or_alias: str) -> bool:
        return self.has_command(name_or_alias)

    def __len__(self) -> int:
        return len(self._commands)
