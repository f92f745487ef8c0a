"""
Custom exception classes for the file drone.

Provides specific exception types for the failure modes of watching a
directory, enumerating its contents and configuring filters, so callers can
react to each one (choose another directory, retry later, fix a pattern).
"""

from typing import Any


class BaseError(Exception):
    """
    Root of the file drone's exception hierarchy.

    Carries a stable ``error_code`` for callers that branch on the failure
    kind, a ``context`` dict with the path, pattern or operation involved,
    and the OS or regex error that triggered it as ``cause``.
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.cause = cause

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, error_code={self.error_code!r}, context={self.context!r})"


class ConfigurationError(BaseError):
    """Raised when there are configuration or settings issues."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        expected_type: str | None = None,
        actual_value: Any | None = None,
        error_code: str = "CONFIG_ERROR",
        underlying_error: Exception | None = None,
    ):
        context = {}
        if config_key:
            context["config_key"] = config_key
        if expected_type:
            context["expected_type"] = expected_type
        if actual_value is not None:
            context["actual_value"] = str(actual_value)

        super().__init__(message, error_code=error_code, context=context, cause=underlying_error)


class FilterConfigurationError(ConfigurationError):
    """Raised when a filter pattern cannot be compiled."""

    def __init__(
        self,
        message: str,
        filter_name: str | None = None,
        pattern: str | None = None,
        underlying_error: Exception | None = None,
    ):
        super().__init__(
            message,
            config_key=filter_name,
            expected_type="regular expression",
            actual_value=pattern,
            error_code="FILTER_CONFIG_ERROR",
            underlying_error=underlying_error,
        )


class MonitoringError(BaseError):
    """Raised when directory surveillance operations fail."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        operation: str | None = None,
        underlying_error: Exception | None = None,
        error_code: str = "MONITORING_ERROR",
    ):
        context = {}
        if path:
            context["path"] = path
        if operation:
            context["operation"] = operation

        super().__init__(
            message,
            error_code=error_code,
            context=context,
            cause=underlying_error,
        )


class WatchSetupError(MonitoringError):
    """Raised when the OS-level watch on a directory cannot be acquired."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        underlying_error: Exception | None = None,
    ):
        super().__init__(
            message,
            path=path,
            operation="start",
            underlying_error=underlying_error,
            error_code="WATCH_SETUP_ERROR",
        )


class EnumerationError(MonitoringError):
    """Raised when a directory cannot be listed during a refresh."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        underlying_error: Exception | None = None,
    ):
        super().__init__(
            message,
            path=path,
            operation="enumerate",
            underlying_error=underlying_error,
            error_code="ENUMERATION_ERROR",
        )
