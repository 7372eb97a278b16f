"""
NEOTERMINAL - A narrative hacker shell simulation

This package provides the core of a terminal game session: an in-memory
virtual filesystem and a command resolution pipeline, implemented in
Python 3.10+ using only the standard library.
"""

__version__ = "1.0.0"
__author__ = "NEOTERMINAL Team"

# Import main components for convenience
from .core import (
    CommandProcessor,
    CommandRegistry,
    Config,
    Session,
    create_session,
    load_config,
)
from .filesystem import VirtualFileSystem
from .shell import Command, CommandOptions, CommandResult, Shell, create_shell

__all__ = [
    'CommandProcessor',
    'CommandRegistry',
    'Config',
    'Session',
    'create_session',
    'load_config',
    'VirtualFileSystem',
    'Command',
    'CommandOptions',
    'CommandResult',
    'Shell',
    'create_shell',
]
