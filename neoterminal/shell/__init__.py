"""
NEOTERMINAL Shell Module

Provides the command-line layer:
- Command contract (Command, CommandOptions, CommandResult)
- Command parsing
- Built-in commands
- The interactive shell
"""

from .parser import CommandParser, ParsedCommand
from .command import (
    Command,
    CommandCategory,
    CommandOptions,
    CommandResult,
    SkillLevel,
)
from .builtins import register_builtins
from .shell import Shell, create_shell

__all__ = [
    'CommandParser',
    'ParsedCommand',
    'Command',
    'CommandCategory',
    'CommandOptions',
    'CommandResult',
    'SkillLevel',
    'register_builtins',
    'Shell',
    'create_shell',
]
