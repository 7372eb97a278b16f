"""
NEOTERMINAL Core Module

Contains the session-level machinery:
- Configuration loading
- Command registry
- Command processor and its resolver chain
- Session wiring
"""

from .config_loader import (
    Config,
    ConfigLoader,
    FilesystemConfig,
    LoggingConfig,
    ShellConfig,
    load_config,
)
from .registry import CommandRegistry
from .processor import (
    NOT_APPLICABLE,
    CommandExecutionContext,
    CommandProcessor,
    FallbackResolver,
    NamedCommandResolver,
    NumericChoiceResolver,
    ResolutionRequest,
    Resolver,
    ResponseResolver,
)
from .session import Session, create_session

__all__ = [
    # Config
    'Config',
    'ConfigLoader',
    'FilesystemConfig',
    'LoggingConfig',
    'ShellConfig',
    'load_config',
    # Registry
    'CommandRegistry',
    # Processor
    'NOT_APPLICABLE',
    'CommandExecutionContext',
    'CommandProcessor',
    'FallbackResolver',
    'NamedCommandResolver',
    'NumericChoiceResolver',
    'ResolutionRequest',
    'Resolver',
    'ResponseResolver',
    # Session
    'Session',
    'create_session',
]
