"""Async Notion client singleton with data source discovery.

The item store lives in one Notion database. Its data_source_id is
discovered on first use (required by Notion API 2025-09-03) and cached.
"""

from notion_client import AsyncClient

from mollymemo.config import get_settings
from mollymemo.errors import ConfigurationError

_client: AsyncClient | None = None
_data_source_id: str | None = None


async def get_notion_client() -> AsyncClient:
    """Return a cached async Notion client instance.

    Raises:
        ConfigurationError: notion_api_key is not configured.
    """
    global _client
    if _client is None:
        settings = get_settings()
        if not settings.notion_api_key:
            raise ConfigurationError("NOTION_API_KEY not configured")
        _client = AsyncClient(auth=settings.notion_api_key)
    return _client


async def get_data_source_id() -> str:
    """Discover and cache the data_source_id of the items database.

    Raises:
        ConfigurationError: the database has no data sources.
    """
    global _data_source_id
    if _data_source_id is None:
        client = await get_notion_client()
        settings = get_settings()
        db = await client.databases.retrieve(database_id=settings.notion_database_id)
        data_sources = db.get("data_sources", [])
        if not data_sources:
            raise ConfigurationError(
                f"No data sources found for database {settings.notion_database_id}"
            )
        _data_source_id = data_sources[0]["id"]
    return _data_source_id


def reset_client() -> None:
    """Reset cached client and data_source_id. Used for testing."""
    global _client, _data_source_id
    _client = None
    _data_source_id = None
