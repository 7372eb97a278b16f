"""
NEOTERMINAL Exception Hierarchy

Architecture:
    FileSystemException
    ├── FileNotFoundError
    ├── FileExistsError
    ├── NotAFileError
    ├── NotADirectoryError
    ├── InvalidPathError
    ├── RootOperationError
    └── InvalidPermissionError
    ShellException
    ├── CommandRegistrationError
    ├── CommandTimeoutError
    └── ConfigValidationError
"""

from .fs_exceptions import (
    FileSystemException,
    FileNotFoundError,
    FileExistsError,
    NotAFileError,
    NotADirectoryError,
    InvalidPathError,
    RootOperationError,
    InvalidPermissionError,
)

from .shell_exceptions import (
    ShellException,
    CommandRegistrationError,
    CommandTimeoutError,
    ConfigValidationError,
)

__all__ = [
    # Filesystem exceptions
    "FileSystemException",
    "FileNotFoundError",
    "FileExistsError",
    "NotAFileError",
    "NotADirectoryError",
    "InvalidPathError",
    "RootOperationError",
    "InvalidPermissionError",
    # Shell exceptions
    "ShellException",
    "CommandRegistrationError",
    "CommandTimeoutError",
    "ConfigValidationError",
]
