"""Item store: Notion-backed persistence for captured items."""

from mollymemo.store.client import get_data_source_id, get_notion_client, reset_client
from mollymemo.store.properties import build_insert_properties, build_update_properties, parse_item
from mollymemo.store.service import ItemStore, NotionItemStore
from mollymemo.store.urls import is_valid_capture_url, normalize_url

__all__ = [
    "build_insert_properties",
    "build_update_properties",
    "get_data_source_id",
    "get_notion_client",
    "is_valid_capture_url",
    "ItemStore",
    "normalize_url",
    "NotionItemStore",
    "parse_item",
    "reset_client",
]
