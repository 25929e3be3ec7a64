"""Shared test fixtures."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from tenacity import wait_none

from mollymemo.app import app
from mollymemo.config import get_settings
from mollymemo.http import send_request
from mollymemo.llm import client as llm_client
from mollymemo.llm.calls import generate_text
from mollymemo.models.item import Item, ItemStatus, ItemUpdate, NewItem
from mollymemo.slack import client as slack_client
from mollymemo.store import client as store_client

_CREDENTIALS = (
    "GEMINI_API_KEY",
    "XAI_API_KEY",
    "ELEVENLABS_API_KEY",
    "GITHUB_TOKEN",
    "NOTION_API_KEY",
    "NOTION_DATABASE_ID",
    "SLACK_BOT_TOKEN",
    "API_SECRET_KEY",
    "SCHEDULER_SECRET",
)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Start every test with all upstreams unconfigured and no cached clients."""
    for name in _CREDENTIALS:
        monkeypatch.setenv(name, "")
    get_settings.cache_clear()
    llm_client.reset_client()
    slack_client.reset_client()
    store_client.reset_client()
    yield
    get_settings.cache_clear()
    llm_client.reset_client()
    slack_client.reset_client()
    store_client.reset_client()


@pytest.fixture(autouse=True)
def no_retry_wait(monkeypatch):
    """Retries still happen, but without backoff sleeps."""
    monkeypatch.setattr(send_request.retry, "wait", wait_none())
    monkeypatch.setattr(generate_text.retry, "wait", wait_none())


@pytest.fixture
def configure(monkeypatch):
    """Set settings values by field name, e.g. configure(gemini_api_key="k")."""

    def _configure(**values):
        for key, value in values.items():
            monkeypatch.setenv(key.upper(), str(value))
        get_settings.cache_clear()

    return _configure


@pytest.fixture(scope="session")
def client() -> TestClient:
    """Create a TestClient for the FastAPI app."""
    return TestClient(app)


class InMemoryItemStore:
    """ItemStore fake that records every update it receives."""

    def __init__(self) -> None:
        self.items: dict[str, Item] = {}
        self.updates: list[tuple[str, ItemUpdate]] = []
        self.fail_updates_with: Exception | None = None
        self.fail_status: ItemStatus | None = None

    async def insert(self, item: NewItem) -> str:
        item_id = f"item-{len(self.items) + 1}"
        self.items[item_id] = Item(id=item_id, status=ItemStatus.PENDING, **item.model_dump())
        return item_id

    async def get(self, item_id: str) -> Item | None:
        item = self.items.get(item_id)
        return item.model_copy() if item else None

    async def update(self, item_id: str, update: ItemUpdate) -> None:
        if self.fail_updates_with is not None:
            raise self.fail_updates_with
        if self.fail_status is not None and update.status == self.fail_status:
            raise RuntimeError(f"store rejected {update.status.value} write")
        self.updates.append((item_id, update))
        self.items[item_id] = self.items[item_id].model_copy(update=update.set_fields())

    async def find_recent_by_url(self, user_id: str, url: str, window: timedelta) -> Item | None:
        cutoff = datetime.now(timezone.utc) - window
        matches = [
            i
            for i in self.items.values()
            if i.user_id == user_id and i.source_url == url and i.captured_at >= cutoff
        ]
        return max(matches, key=lambda i: i.captured_at) if matches else None

    async def find_stale(self, older_than: datetime) -> list[Item]:
        stale = []
        for i in self.items.values():
            if i.status == ItemStatus.PENDING:
                since = i.captured_at
            elif i.status == ItemStatus.PROCESSING:
                since = i.processing_started_at or i.captured_at
            else:
                continue
            if since < older_than:
                stale.append(i)
        return stale

    def add(self, **fields) -> Item:
        """Seed an item directly, bypassing capture."""
        item_id = fields.pop("id", f"item-{len(self.items) + 1}")
        defaults = {
            "user_id": "user-1",
            "source_url": "https://example.com/post",
            "captured_at": datetime.now(timezone.utc),
        }
        defaults.update(fields)
        item = Item(id=item_id, **defaults)
        self.items[item_id] = item
        return item

    def updates_for(self, item_id: str) -> list[ItemUpdate]:
        return [u for i, u in self.updates if i == item_id]


@pytest.fixture
def memory_store() -> InMemoryItemStore:
    return InMemoryItemStore()
