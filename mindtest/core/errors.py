"""
Application exceptions.

Every error that reaches the HTTP boundary is rendered as ``{"error": message}``;
``details`` and ``original_error`` stay server side and are only logged.
"""

from typing import Any


class MindtestError(Exception):
    """Base exception for all mindtest errors."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def to_dict(self) -> dict[str, str]:
        """Public error envelope."""
        return {"error": self.message}


class StorageError(MindtestError):
    """Raised when a storage transaction or query fails."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        table: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        details = {}
        if operation:
            details["operation"] = operation
        if table:
            details["table"] = table
        super().__init__(message, details, original_error)


class SessionRequiredError(MindtestError):
    """Raised when a session-scoped read arrives without a session cookie."""

    status_code = 400

    def __init__(self, message: str = "Session ID required") -> None:
        super().__init__(message)
