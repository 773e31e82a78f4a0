"""
Storage service protocols for timeline media.

Provides the interface the upload and entry routes depend on, so the blob
backend can be swapped (or faked in tests) without touching route logic.
"""
from typing import BinaryIO, Optional, Protocol


class IStorageService(Protocol):
    """
    Protocol for media blob storage backends (DIP compliance).

    Implementations:
    - AzureBlobStorageService: Azure Blob Storage with read-only SAS URLs
    """

    container_name: str

    async def upload(
        self,
        file_data: BinaryIO | bytes,
        blob_name: str,
        content_type: Optional[str] = None,
    ) -> str:
        """
        Upload media to storage.

        Args:
            file_data: File-like object (binary mode) or raw bytes
            blob_name: Blob path (e.g., "{user_id}/{entry_id}/photo.jpg")
            content_type: MIME type stored on the blob

        Returns:
            str: Plain (unsigned) blob URL to persist on the entry

        Raises:
            StorageUploadError: If upload fails
        """
        ...

    async def delete(self, blob_url: str) -> bool:
        """
        Delete the blob a stored media URL points at.

        Returns:
            bool: True if deleted, False if it didn't exist

        Raises:
            StorageDeleteError: If deletion fails
        """
        ...

    def get_file_url(self, blob_name: str) -> str:
        """Plain URL of a blob in the configured container"""
        ...

    def generate_read_sas_url(self, blob_name: str, hours: int) -> Optional[str]:
        """
        Generate a read-only signed URL.

        Returns:
            str | None: Signed URL, or None when credentials are unavailable
            or signing fails
        """
        ...
