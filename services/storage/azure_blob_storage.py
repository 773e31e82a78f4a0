"""
Azure Blob Storage implementation for timeline media.

Security Features:
- Container stays private; clients read through short-lived SAS URLs
- Read-only, HTTPS-only SAS with a clock-skew margin on the start time
- Entries persist the plain blob URL, never a signed one

Blob Layout:
{container}/{user_id}/{entry_id}/{filename}
"""

from datetime import UTC, datetime, timedelta
from typing import BinaryIO, Optional
from urllib.parse import quote, unquote, urlparse

from azure.core.exceptions import AzureError, ResourceExistsError, ResourceNotFoundError
from azure.storage.blob import BlobSasPermissions, ContentSettings, generate_blob_sas
from azure.storage.blob.aio import BlobServiceClient

from core.exceptions import StorageDeleteError, StorageUploadError
from core.logging import get_logger

logger = get_logger(__name__)

# Start SAS validity slightly in the past to tolerate clock skew
SAS_CLOCK_SKEW = timedelta(minutes=5)


def split_blob_url(blob_url: str) -> tuple[str | None, str]:
    """
    Split a blob URL into (container, blob path).

    The first path segment is the container and the remainder, percent-decoded,
    is the blob path. Container is None when the URL has no path segment.
    """
    path_parts = urlparse(blob_url).path.split("/")
    container = path_parts[1] if len(path_parts) > 1 and path_parts[1] else None
    blob_path = unquote("/".join(path_parts[2:]))
    return container, blob_path


class AzureBlobStorageService:
    """
    Azure Blob Storage with read-only SAS URLs.

    Credentials:
    - account name + key (required for SAS generation), or
    - a connection string (e.g. Azurite for local development)
    """

    def __init__(
        self,
        account_name: str,
        account_key: str,
        container_name: str,
        connection_string: Optional[str] = None,
        service_client: Optional[BlobServiceClient] = None,
    ):
        """
        Initialize blob storage service.

        Args:
            account_name: Storage account name
            account_key: Storage account key (enables SAS signing)
            container_name: Container holding timeline media
            connection_string: Optional connection string (overrides name/key for I/O)
            service_client: Optional preconfigured client (for testing/DI)
        """
        self.account_name = account_name
        self.account_key = account_key
        self.container_name = container_name
        self._container_ready = False

        self.service: Optional[BlobServiceClient] = None
        if service_client is not None:
            self.service = service_client
        elif connection_string:
            self.service = BlobServiceClient.from_connection_string(connection_string)
        elif account_name and account_key:
            self.service = BlobServiceClient(
                account_url=f"https://{account_name}.blob.core.windows.net",
                credential={"account_name": account_name, "account_key": account_key},
            )

    @classmethod
    def from_settings(cls, settings) -> "AzureBlobStorageService":
        return cls(
            account_name=settings.azure_storage_account,
            account_key=settings.azure_storage_key,
            container_name=settings.azure_storage_container,
            connection_string=settings.azure_storage_connection_string,
        )

    async def _ensure_container(self) -> None:
        """Create the (private) media container if it doesn't exist"""
        if self._container_ready:
            return

        container_client = self.service.get_container_client(self.container_name)
        try:
            await container_client.create_container()
            logger.info(f'Container "{self.container_name}" created')
        except ResourceExistsError:
            pass
        self._container_ready = True

    async def upload(
        self,
        file_data: BinaryIO | bytes,
        blob_name: str,
        content_type: Optional[str] = None,
    ) -> str:
        """
        Upload media and return its plain blob URL.

        Raises:
            StorageUploadError: If credentials are missing or the upload fails
        """
        if self.service is None:
            raise StorageUploadError(blob_name, "Storage credentials are not configured")

        try:
            await self._ensure_container()

            blob_client = self.service.get_blob_client(
                container=self.container_name, blob=blob_name
            )
            await blob_client.upload_blob(
                file_data,
                overwrite=True,
                content_settings=ContentSettings(content_type=content_type),
            )
            logger.info(f"Blob uploaded: {blob_name}")
            return self.get_file_url(blob_name)

        except AzureError as e:
            raise StorageUploadError(blob_name, str(e)) from e

    async def delete(self, blob_url: str) -> bool:
        """
        Delete the blob a stored media URL points at.

        Returns:
            bool: True if deleted, False if it didn't exist

        Raises:
            StorageDeleteError: If deletion fails
        """
        if self.service is None:
            raise StorageDeleteError(blob_url, "Storage credentials are not configured")

        container, blob_path = split_blob_url(blob_url)
        if not container or not blob_path:
            raise StorageDeleteError(blob_url, "URL does not address a blob")

        try:
            blob_client = self.service.get_blob_client(
                container=container, blob=blob_path
            )
            await blob_client.delete_blob()
            return True
        except ResourceNotFoundError:
            return False
        except AzureError as e:
            raise StorageDeleteError(blob_path, str(e)) from e

    def get_file_url(self, blob_name: str) -> str:
        """Plain URL of a blob in the configured container"""
        return (
            f"https://{self.account_name}.blob.core.windows.net/"
            f"{self.container_name}/{quote(blob_name)}"
        )

    def generate_read_sas_url(self, blob_name: str, hours: int = 1) -> Optional[str]:
        """
        Generate a read-only SAS URL for an existing blob.

        Returns:
            str | None: SAS URL, or None when credentials are missing or signing fails
        """
        if not self.account_name or not self.account_key:
            logger.warning("Storage credentials not available for SAS generation")
            return None

        try:
            now = datetime.now(UTC)
            sas_token = generate_blob_sas(
                account_name=self.account_name,
                container_name=self.container_name,
                blob_name=blob_name,
                account_key=self.account_key,
                permission=BlobSasPermissions(read=True),
                start=now - SAS_CLOCK_SKEW,
                expiry=now + timedelta(hours=hours),
                protocol="https",
            )
        except (ValueError, TypeError, AzureError) as e:
            logger.warning(f"Failed to generate read SAS URL for blob {blob_name}: {e}")
            return None

        return f"{self.get_file_url(blob_name)}?{sas_token}"

    async def close(self) -> None:
        if self.service is not None:
            await self.service.close()
