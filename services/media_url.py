"""Rewrites stored media URLs into short-lived signed URLs on read."""
from urllib.parse import urlparse

from core.logging import get_logger
from core.storage_protocols import IStorageService
from schemas.entry import TimelineEntry
from services.storage.azure_blob_storage import split_blob_url

logger = get_logger(__name__)


class MediaUrlSigner:
    """
    Signs media URLs that point into our own container.

    URLs into any other container (or anything unparseable) pass through
    unchanged. When signing fails the plain origin + path is returned, without
    any stale query string.
    """

    def __init__(self, storage: IStorageService, ttl_hours: int = 1):
        self.storage = storage
        self.ttl_hours = ttl_hours

    def sign(self, media_url: str) -> str:
        try:
            parsed = urlparse(media_url)
            if not parsed.scheme or not parsed.netloc:
                return media_url
            container, blob_path = split_blob_url(media_url)
        except ValueError:
            return media_url

        if container != self.storage.container_name:
            return media_url

        sas_url = self.storage.generate_read_sas_url(blob_path, self.ttl_hours)
        if sas_url:
            return sas_url

        logger.debug(f"Falling back to plain blob URL for {parsed.path}")
        return f"{parsed.scheme}://{parsed.netloc}{parsed.path}"

    def is_own_media_url(self, media_url: str) -> bool:
        """True only for blob URLs inside our container on our storage account"""
        try:
            container, blob_path = split_blob_url(media_url)
        except ValueError:
            return False
        if container != self.storage.container_name or not blob_path:
            return False
        return media_url.startswith(self.storage.get_file_url(""))

    def sign_entry(self, entry: TimelineEntry) -> TimelineEntry:
        if not entry.media_url:
            return entry
        return entry.model_copy(update={"media_url": self.sign(entry.media_url)})

    def sign_entries(self, entries: list[TimelineEntry]) -> list[TimelineEntry]:
        return [self.sign_entry(entry) for entry in entries]
