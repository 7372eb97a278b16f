"""
Filesystem Exceptions

Exceptions raised by the virtual filesystem and its node model.
Commands catch these and turn ``message`` into a failed CommandResult.

Author: NEOTERMINAL Team
Version: 1.0.0
"""

from typing import Optional, Any


class FileSystemException(Exception):
    """
    Base exception for all filesystem-related errors.

    Attributes:
        message: Human-readable error description, shown to the player
        path: File path associated with the error (if applicable)
        error_code: Numeric error code for programmatic handling
        context: Additional key/value details for logging
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        error_code: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.error_code = error_code or 4000
        self.context = context or {}
        if path:
            self.context["path"] = path

    def __str__(self) -> str:
        base = f"[Error {self.error_code}] {self.message}"
        if self.path:
            base = f"{base} (path={self.path})"
        return base


class FileNotFoundError(FileSystemException):
    """
    The specified file or directory does not exist.

    Example:
        >>> raise FileNotFoundError("/home/user/missing.txt")
    """

    def __init__(
        self,
        path: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=f"No such file or directory: {path}",
            path=path,
            error_code=4001,
            context=context
        )


class FileExistsError(FileSystemException):
    """
    The target of a create/move/copy already exists.

    Example:
        >>> raise FileExistsError("/home/user/notes.txt")
    """

    def __init__(
        self,
        path: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=f"File exists: {path}",
            path=path,
            error_code=4002,
            context=context
        )


class NotAFileError(FileSystemException):
    """
    Path is not a regular file.

    Raised when a file operation (read, write) is attempted on a directory.

    Example:
        >>> raise NotAFileError("/home/user", actual_type="directory")
    """

    def __init__(
        self,
        path: str,
        actual_type: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if actual_type:
            ctx["actual_type"] = actual_type
        super().__init__(
            message=f"Not a file: {path}",
            path=path,
            error_code=4008,
            context=ctx
        )
        self.actual_type = actual_type


class NotADirectoryError(FileSystemException):
    """
    Path is not a directory.

    Raised for directory operations on a file, and when a file sits where
    a path needs an intermediate directory.

    Example:
        >>> raise NotADirectoryError("/home/user/README.txt")
    """

    def __init__(
        self,
        path: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=f"Not a directory: {path}",
            path=path,
            error_code=4009,
            context=context
        )


class InvalidPathError(FileSystemException):
    """
    The path cannot be used for the requested operation.

    Examples: writing a file at ``/``, or copying a directory into itself.

    Example:
        >>> raise InvalidPathError("/", reason="missing file name")
    """

    def __init__(
        self,
        path: str,
        reason: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if reason:
            ctx["reason"] = reason
        message = f"Invalid path: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(
            message=message,
            path=path,
            error_code=4010,
            context=ctx
        )
        self.reason = reason


class RootOperationError(FileSystemException):
    """
    The root directory cannot be deleted, moved or renamed.

    Example:
        >>> raise RootOperationError(operation="delete")
    """

    def __init__(
        self,
        operation: str = "delete",
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        ctx["operation"] = operation
        super().__init__(
            message=f"Cannot {operation} root directory",
            path="/",
            error_code=4011,
            context=ctx
        )
        self.operation = operation


class InvalidPermissionError(FileSystemException):
    """
    A permission string or mode could not be parsed.

    Example:
        >>> raise InvalidPermissionError("rwxrwx")
    """

    def __init__(
        self,
        value: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=f"Invalid permission string: {value}",
            error_code=4012,
            context=context
        )
        self.value = value
