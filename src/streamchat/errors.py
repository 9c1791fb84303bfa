"""Exception hierarchy shared by the storage, chat and API layers.

This module defines the exception hierarchy for chat-related errors,
providing structured error handling with status codes and error codes.
"""

from typing import Optional


class ChatError(Exception):
    """Base exception for all chat-related errors.

    Attributes:
        code: Machine-readable error code
        message: Human-readable error message
        status_code: HTTP status code for API responses
    """

    def __init__(self, message: str, code: str, status_code: int) -> None:
        """Initialize chat error.

        Args:
            message: Human-readable error description
            code: Machine-readable error code
            status_code: HTTP status code (400, 500, etc.)
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class InvalidInputError(ChatError):
    """Raised when a request field is missing or malformed.

    The caller can correct the request and try again.
    """

    def __init__(self, message: str, code: str = "invalid_input") -> None:
        """Initialize invalid input error.

        Args:
            message: Description of the validation failure
            code: Machine-readable code (e.g. "invalid_model")
        """
        super().__init__(message=message, code=code, status_code=400)


class NotFoundError(ChatError):
    """Raised when a mutation targets a conversation absent from the index."""

    def __init__(self, conversation_id: str) -> None:
        """Initialize not found error.

        Args:
            conversation_id: The unknown conversation identifier
        """
        super().__init__(
            message=f"Conversation {conversation_id} not found",
            code="not_found",
            status_code=404,
        )
        self.conversation_id = conversation_id


class ConflictError(ChatError):
    """Raised when a conditional write loses a race with another writer."""

    def __init__(self, key: str) -> None:
        """Initialize conflict error.

        Args:
            key: Storage key whose revision changed underneath the writer
        """
        super().__init__(
            message=f"Concurrent modification of {key}; reload and retry",
            code="conflict",
            status_code=409,
        )
        self.key = key


class UpstreamError(ChatError):
    """Raised when the completion provider rejects or fails a request.

    Attributes:
        upstream_status: HTTP status reported by the provider, if any
        is_quota: True for quota exhaustion and rate limiting
    """

    def __init__(
        self,
        message: str,
        upstream_status: Optional[int] = None,
        is_quota: bool = False,
    ) -> None:
        """Initialize upstream error.

        Args:
            message: Provider error message
            upstream_status: Provider status code when available
            is_quota: Whether the failure is a quota/rate-limit condition
        """
        super().__init__(
            message=message,
            code="quota_exceeded" if is_quota else "upstream_error",
            status_code=429 if is_quota else 502,
        )
        self.upstream_status = upstream_status
        self.is_quota = is_quota


class NotConfiguredError(ChatError):
    """Raised when required credentials are absent.

    Checked before any storage access so a misconfigured deployment fails fast.
    """

    def __init__(self, message: str) -> None:
        """Initialize not configured error.

        Args:
            message: Description of the missing configuration
        """
        super().__init__(message=message, code="not_configured", status_code=500)


class StorageCorruptError(ChatError):
    """Raised internally when persisted JSON cannot be decoded.

    Never propagated past the store; callers receive defaults instead.
    """

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(
            message=f"Corrupt blob at {key}: {reason}",
            code="storage_corrupt",
            status_code=500,
        )
        self.key = key
