"""
Cosmos DB (SQL API) entry store.

Documents keep the front end's camelCase shape and are partitioned by
/userId, so every read, replace and delete here is a single-partition call.
"""
from datetime import UTC, datetime
from typing import Any

from azure.core.exceptions import AzureError
from azure.cosmos import PartitionKey
from azure.cosmos.aio import ContainerProxy, CosmosClient
from azure.cosmos.exceptions import CosmosResourceNotFoundError

from core.exceptions import EntryStoreError
from core.logging import get_logger
from schemas.entry import TimelineEntry

logger = get_logger(__name__)

INDEXING_POLICY = {
    "indexingMode": "consistent",
    "includedPaths": [{"path": "/*"}],
    "excludedPaths": [{"path": '/"_etag"/?'}],
}

LIST_QUERY = "SELECT * FROM c WHERE c.userId = @userId ORDER BY c.date DESC"
SEARCH_QUERY = (
    "SELECT * FROM c WHERE c.userId = @userId AND ("
    "CONTAINS(c.title, @searchTerm, true) OR "
    "CONTAINS(c.description, @searchTerm, true) OR "
    "ARRAY_CONTAINS(c.aiTags, @searchTerm, true)"
    ") ORDER BY c.date DESC"
)


class CosmosEntryRepository:
    """Timeline entries as Cosmos DB items"""

    def __init__(
        self,
        client: CosmosClient,
        database_id: str,
        container_id: str,
    ) -> None:
        self.client = client
        self.database_id = database_id
        self.container_id = container_id
        self._container: ContainerProxy | None = None

    @classmethod
    def from_settings(cls, settings) -> "CosmosEntryRepository":
        client = CosmosClient(settings.cosmos_endpoint, credential=settings.cosmos_key)
        return cls(client, settings.cosmos_database, settings.cosmos_container)

    async def _get_container(self) -> ContainerProxy:
        """Create database and container on first use"""
        if self._container is not None:
            return self._container

        try:
            database = await self.client.create_database_if_not_exists(
                id=self.database_id
            )
            logger.info(f'Database "{self.database_id}" is ready')

            self._container = await database.create_container_if_not_exists(
                id=self.container_id,
                partition_key=PartitionKey(path="/userId"),
                indexing_policy=INDEXING_POLICY,
            )
            logger.info(f'Container "{self.container_id}" is ready')
        except AzureError as e:
            logger.error(f"Error ensuring Cosmos container exists: {e}")
            raise EntryStoreError("reach", str(e)) from e

        return self._container

    async def _query(
        self, query: str, parameters: list[dict[str, Any]], user_id: str
    ) -> list[TimelineEntry]:
        container = await self._get_container()
        items = container.query_items(
            query=query, parameters=parameters, partition_key=user_id
        )
        return [TimelineEntry.model_validate(item) async for item in items]

    async def create(self, entry: TimelineEntry) -> TimelineEntry:
        container = await self._get_container()
        try:
            created = await container.create_item(body=entry.to_document())
        except AzureError as e:
            logger.error(f"Error creating timeline entry: {e}")
            raise EntryStoreError("create", str(e)) from e
        return TimelineEntry.model_validate(created)

    async def list_by_user(self, user_id: str) -> list[TimelineEntry]:
        try:
            return await self._query(
                LIST_QUERY, [{"name": "@userId", "value": user_id}], user_id
            )
        except AzureError as e:
            logger.error(f"Error fetching timeline entries: {e}")
            raise EntryStoreError("fetch", str(e)) from e

    async def search(self, user_id: str, term: str) -> list[TimelineEntry]:
        try:
            return await self._query(
                SEARCH_QUERY,
                [
                    {"name": "@userId", "value": user_id},
                    {"name": "@searchTerm", "value": term},
                ],
                user_id,
            )
        except AzureError as e:
            logger.error(f"Error searching timeline entries: {e}")
            raise EntryStoreError("search", str(e)) from e

    async def _read(self, user_id: str, entry_id: str) -> dict[str, Any] | None:
        container = await self._get_container()
        try:
            return await container.read_item(item=entry_id, partition_key=user_id)
        except CosmosResourceNotFoundError:
            return None

    async def get(self, user_id: str, entry_id: str) -> TimelineEntry | None:
        try:
            item = await self._read(user_id, entry_id)
        except AzureError as e:
            raise EntryStoreError("read", str(e)) from e
        return TimelineEntry.model_validate(item) if item else None

    async def update(
        self, user_id: str, entry_id: str, changes: dict[str, Any]
    ) -> TimelineEntry | None:
        try:
            existing = await self._read(user_id, entry_id)
            if existing is None:
                return None

            merged = TimelineEntry.model_validate(existing).model_copy(
                update={**changes, "updated_at": datetime.now(UTC)}
            )
            # Keep Cosmos system properties (_etag etc.) alongside our fields
            body = {**existing, **merged.to_document()}

            container = await self._get_container()
            replaced = await container.replace_item(item=entry_id, body=body)
        except AzureError as e:
            logger.error(f"Error updating timeline entry: {e}")
            raise EntryStoreError("update", str(e)) from e
        return TimelineEntry.model_validate(replaced)

    async def delete(self, user_id: str, entry_id: str) -> TimelineEntry | None:
        try:
            existing = await self._read(user_id, entry_id)
            if existing is None:
                return None

            container = await self._get_container()
            await container.delete_item(item=entry_id, partition_key=user_id)
        except CosmosResourceNotFoundError:
            return None
        except AzureError as e:
            logger.error(f"Error deleting timeline entry: {e}")
            raise EntryStoreError("delete", str(e)) from e
        return TimelineEntry.model_validate(existing)

    async def ping(self) -> bool:
        container = await self._get_container()
        await container.read()
        return True

    async def close(self) -> None:
        await self.client.close()
