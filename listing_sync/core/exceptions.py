"""
Exceptions raised by the listing sync job.

Exception Hierarchy:
    SyncError (base)
    ├── ConfigurationError   missing required settings, fatal at startup
    ├── SourceFetchError     source provider unreachable or returned garbage
    └── HubDBError           any failed destination store call
"""

from typing import Any, Dict, Optional


class SyncError(Exception):
    """
    Base exception for sync errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (endpoint, table, listing, ...)
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        base_msg = f"{self.__class__.__name__}: {self.message}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"
        return base_msg


class ConfigurationError(SyncError):
    """Raised when a required setting is absent or blank."""


class SourceFetchError(SyncError):
    """Raised when the source provider cannot be read."""


class HubDBError(SyncError):
    """
    Raised when a destination store call fails.

    ``status_code`` is None for transport failures and timeouts, where no
    response was received.
    """

    def __init__(
        self,
        message: str,
        *,
        method: str,
        url: str,
        status_code: Optional[int] = None,
        payload: Any = None,
        response_body: Optional[str] = None,
    ):
        context: Dict[str, Any] = {"method": method, "url": url}
        if status_code is not None:
            context["status_code"] = status_code
        super().__init__(message, context)
        self.method = method
        self.url = url
        self.status_code = status_code
        self.payload = payload
        self.response_body = response_body
