"""Item store backed by a Notion data source.

Each item is one page. Items are addressed by page id; every write is a
``pages.update`` that replaces the written properties. Notion API errors
surface as UpstreamRejection; the orchestrator and the HTTP layer decide
what to do with them.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Protocol

from notion_client import errors as notion_errors

from mollymemo.errors import UpstreamRejection
from mollymemo.models.item import Item, ItemStatus, ItemUpdate, NewItem
from mollymemo.store.client import get_data_source_id, get_notion_client
from mollymemo.store.properties import (
    CAPTURED,
    PROCESSING_STARTED,
    SOURCE,
    STATUS,
    USER,
    build_insert_properties,
    build_update_properties,
    parse_item,
)

logger = logging.getLogger(__name__)

_PAGE_SIZE = 100


def _rejection(exc: notion_errors.APIResponseError) -> UpstreamRejection:
    return UpstreamRejection("notion", exc.status, str(exc))


class ItemStore(Protocol):
    """Operations the pipeline needs from item persistence."""

    async def insert(self, item: NewItem) -> str: ...

    async def get(self, item_id: str) -> Item | None: ...

    async def update(self, item_id: str, update: ItemUpdate) -> None: ...

    async def find_recent_by_url(
        self, user_id: str, url: str, window: timedelta
    ) -> Item | None: ...

    async def find_stale(self, older_than: datetime) -> list[Item]: ...


class NotionItemStore:
    """ItemStore implementation over the configured Notion database."""

    async def insert(self, item: NewItem) -> str:
        client = await get_notion_client()
        ds_id = await get_data_source_id()
        try:
            page = await client.pages.create(
                parent={"type": "data_source_id", "data_source_id": ds_id},
                properties=build_insert_properties(item),
            )
        except notion_errors.APIResponseError as exc:
            raise _rejection(exc) from exc
        logger.info(
            "Item inserted",
            extra={"item_id": page["id"], "url": item.source_url, "status": "pending"},
        )
        return page["id"]

    async def get(self, item_id: str) -> Item | None:
        client = await get_notion_client()
        try:
            page = await client.pages.retrieve(page_id=item_id)
        except notion_errors.APIResponseError as exc:
            if exc.code == notion_errors.APIErrorCode.ObjectNotFound:
                return None
            raise _rejection(exc) from exc
        return parse_item(page)

    async def update(self, item_id: str, update: ItemUpdate) -> None:
        properties = build_update_properties(update)
        if not properties:
            return
        client = await get_notion_client()
        try:
            await client.pages.update(page_id=item_id, properties=properties)
        except notion_errors.APIResponseError as exc:
            raise _rejection(exc) from exc

    async def find_recent_by_url(
        self, user_id: str, url: str, window: timedelta
    ) -> Item | None:
        """Most recent item for ``user_id`` with source ``url`` captured within ``window``."""
        client = await get_notion_client()
        ds_id = await get_data_source_id()
        since = datetime.now(timezone.utc) - window

        try:
            response = await client.data_sources.query(
                data_source_id=ds_id,
                filter={
                    "and": [
                        {"property": SOURCE, "url": {"equals": url}},
                        {"property": USER, "rich_text": {"equals": user_id}},
                        {"property": CAPTURED, "date": {"on_or_after": since.isoformat()}},
                    ]
                },
                sorts=[{"property": CAPTURED, "direction": "descending"}],
                page_size=1,
            )
        except notion_errors.APIResponseError as exc:
            raise _rejection(exc) from exc
        if not response["results"]:
            return None
        return parse_item(response["results"][0])

    async def find_stale(self, older_than: datetime) -> list[Item]:
        """Items stuck before ``older_than``.

        Pending items are judged by capture time. Processing items are judged
        by when processing started, so an old item that is being reprocessed
        right now is not picked up. Processing rows without a start time fall
        back to capture time.
        """
        client = await get_notion_client()
        ds_id = await get_data_source_id()
        cutoff = older_than.isoformat()
        pending = {"property": STATUS, "select": {"equals": ItemStatus.PENDING.value}}
        processing = {"property": STATUS, "select": {"equals": ItemStatus.PROCESSING.value}}
        query_filter = {
            "or": [
                {"and": [pending, {"property": CAPTURED, "date": {"before": cutoff}}]},
                {
                    "and": [
                        processing,
                        {"property": PROCESSING_STARTED, "date": {"before": cutoff}},
                    ]
                },
                {
                    "and": [
                        processing,
                        {"property": PROCESSING_STARTED, "date": {"is_empty": True}},
                        {"property": CAPTURED, "date": {"before": cutoff}},
                    ]
                },
            ]
        }

        items: list[Item] = []
        cursor = None
        while True:
            kwargs = {"data_source_id": ds_id, "filter": query_filter, "page_size": _PAGE_SIZE}
            if cursor:
                kwargs["start_cursor"] = cursor
            try:
                response = await client.data_sources.query(**kwargs)
            except notion_errors.APIResponseError as exc:
                raise _rejection(exc) from exc
            items.extend(parse_item(page) for page in response["results"])
            if not response.get("has_more"):
                break
            cursor = response.get("next_cursor")
        return items
