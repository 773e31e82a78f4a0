"""Storage service implementations for timeline media."""

from services.storage.azure_blob_storage import AzureBlobStorageService, split_blob_url

__all__ = ["AzureBlobStorageService", "split_blob_url"]
