"""Shared test fixtures and Notion record builders."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import pytest

from app.services.notion_client import NotionClient
from app.widgets.api_client import SiteApiClient
from app.widgets.storage import CityStorage


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _title(text: str) -> Dict[str, Any]:
    return {"type": "title", "title": [{"plain_text": text}] if text else []}


def _rich_text(text: str) -> Dict[str, Any]:
    return {"type": "rich_text", "rich_text": [{"plain_text": text}] if text else []}


def _select(name: Optional[str]) -> Dict[str, Any]:
    return {"type": "select", "select": {"name": name} if name else None}


def make_link_page(
    page_id: str,
    name: str = "Example",
    url: Optional[str] = "https://example.com",
    category1: Optional[str] = "工具",
    category2: Optional[str] = "在线",
    tags: Optional[List[str]] = None,
    created: str = "2024-01-01T00:00:00.000Z",
    desc: str = "",
    drop: Tuple[str, ...] = (),
) -> Dict[str, Any]:
    properties = {
        "Name": _title(name),
        "URL": {"type": "url", "url": url},
        "desc": _rich_text(desc),
        "category1": _select(category1),
        "category2": _select(category2),
        "Tags": {"type": "multi_select", "multi_select": [{"name": t} for t in (tags or [])]},
        "iconfile": {"type": "files", "files": []},
        "iconlink": {"type": "url", "url": None},
        "Created": {"type": "created_time", "created_time": created},
    }
    for key in drop:
        properties.pop(key, None)
    return {"object": "page", "id": page_id, "properties": properties}


def make_category_page(page_id: str, name: str, order: int = 0, icon: str = "") -> Dict[str, Any]:
    return {
        "object": "page",
        "id": page_id,
        "properties": {
            "Name": _title(name),
            "IconName": _rich_text(icon),
            "Order": {"type": "number", "number": order},
            "Enabled": {"type": "checkbox", "checkbox": True},
        },
    }


def make_config_page(key: str, value: str) -> Dict[str, Any]:
    return {
        "object": "page",
        "id": f"cfg-{key}",
        "properties": {"Name": _title(key), "Value": _rich_text(value)},
    }


class FakeNotionClient(NotionClient):
    """按数据库 id 返回预置分页，并记录每次查询。"""

    def __init__(
        self,
        pages: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        database: Optional[Dict[str, Any]] = None,
        failing: Tuple[str, ...] = (),
    ) -> None:
        super().__init__(token="test-token")
        self.pages = pages or {}
        self.database = database or {}
        self.failing = failing
        self.queries: List[Tuple[str, Optional[str]]] = []

    async def query_database(self, database_id, start_cursor=None, sorts=None, filter=None):
        self.queries.append((database_id, start_cursor))
        if database_id in self.failing:
            raise RuntimeError(f"query failed: {database_id}")
        pages = self.pages.get(database_id, [{"results": [], "has_more": False, "next_cursor": None}])
        index = 0 if start_cursor is None else int(start_cursor)
        return pages[index]

    async def retrieve_database(self, database_id):
        if database_id in self.failing:
            raise RuntimeError(f"retrieve failed: {database_id}")
        return self.database


def paginate(records: List[Dict[str, Any]], page_size: int) -> List[Dict[str, Any]]:
    chunks = [records[i : i + page_size] for i in range(0, len(records), page_size)] or [[]]
    pages = []
    for i, chunk in enumerate(chunks):
        has_more = i < len(chunks) - 1
        pages.append({"results": chunk, "has_more": has_more, "next_cursor": str(i + 1) if has_more else None})
    return pages


class FakeSiteApi(SiteApiClient):
    """按路径返回预置的 `(status, data)`；值为异常时抛出。"""

    def __init__(self, routes: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(base_url="http://nav.test")
        self.routes = routes or {}
        self.calls: List[Tuple[str, Optional[Dict[str, Any]]]] = []

    async def _get_json(self, path, params=None):
        self.calls.append((path, params))
        response = self.routes.get(path)
        if response is None:
            return 404, {"error": "not found"}
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return await response(params)
        return response

    def paths(self) -> List[str]:
        return [path for path, _ in self.calls]


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock(1000.0)


@pytest.fixture
def city_storage(tmp_path) -> CityStorage:
    return CityStorage(tmp_path / "widget_state.json")
