from typing import Any


class TimelineException(Exception):
    """
    Base exception for all Timeline of Me errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable error code for API responses
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


# Entry store exceptions
class EntryNotFoundError(TimelineException):
    """Timeline entry not found for this user"""

    def __init__(self, entry_id: str):
        super().__init__(
            f"Entry not found: {entry_id}",
            "ENTRY_NOT_FOUND",
            {"entry_id": entry_id},
        )


class EntryStoreError(TimelineException):
    """Entry store (Cosmos DB / SQL) operation failed"""

    def __init__(self, operation: str, reason: str):
        super().__init__(
            f"Failed to {operation} timeline entry",
            "ENTRY_STORE_ERROR",
            {"operation": operation, "reason": reason},
        )


# Storage exceptions
class StorageException(TimelineException):
    """Base exception for blob storage operations"""

    pass


class StorageUploadError(StorageException):
    """Blob upload failed"""

    def __init__(self, blob_name: str, reason: str):
        super().__init__(
            f"Failed to upload blob: {blob_name}",
            "STORAGE_UPLOAD_ERROR",
            {"blob_name": blob_name, "reason": reason},
        )


class StorageDeleteError(StorageException):
    """Blob deletion failed"""

    def __init__(self, blob_name: str, reason: str):
        super().__init__(
            f"Failed to delete blob: {blob_name}",
            "STORAGE_DELETE_ERROR",
            {"blob_name": blob_name, "reason": reason},
        )



# Cognitive service exceptions
class CognitiveServiceError(TimelineException):
    """Hosted AI service call failed (network, auth, quota, bad response)"""

    def __init__(self, service: str, reason: str):
        super().__init__(
            f"{service} request failed: {reason}",
            "COGNITIVE_SERVICE_ERROR",
            {"service": service, "reason": reason},
        )
