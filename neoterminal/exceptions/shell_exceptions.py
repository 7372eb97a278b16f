"""
Shell Exceptions

Exceptions raised by the command layer: registry, processor and
configuration loading.

Author: NEOTERMINAL Team
Version: 1.0.0
"""

from typing import Optional, Any


class ShellException(Exception):
    """
    Base exception for command-layer errors.

    Attributes:
        message: Human-readable error description
        error_code: Numeric error code for programmatic handling
        context: Additional context about the error

    Example:
        >>> raise ShellException("Shell failure", error_code=5000)
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or 5000
        self.context = context or {}

    def __str__(self) -> str:
        base = f"[Error {self.error_code}] {self.message}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base = f"{base} ({context_str})"
        return base

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code})"
        )


class CommandRegistrationError(ShellException):
    """
    A command object cannot be registered.

    Raised for commands without a usable name.
    """

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if command is not None:
            ctx["command"] = command
        super().__init__(message, error_code=5001, context=ctx)
        self.command = command


class CommandTimeoutError(ShellException):
    """
    A command did not finish within the configured deadline.

    Example:
        >>> raise CommandTimeoutError("ask", timeout=5.0)
    """

    def __init__(
        self,
        command: str,
        timeout: float,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        ctx["timeout"] = timeout
        super().__init__(
            f"{command}: timed out after {timeout:g}s",
            error_code=5002,
            context=ctx
        )
        self.command = command
        self.timeout = timeout


class ConfigValidationError(ShellException):
    """Raised when configuration loading or validation fails."""

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if key:
            ctx["key"] = key
        super().__init__(message, error_code=5003, context=ctx)
        self.key = key
