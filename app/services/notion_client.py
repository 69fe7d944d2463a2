"""
本文件用于封装 Notion REST 接口的最小调用集（数据库查询与数据库元信息读取）。
主要类/对象:
- `NotionClient`: 基于 aiohttp 的 Notion 客户端
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import aiohttp

from app.core.config import get_settings
from app.core.exceptions import NotionAPIError
from app.core.logger import setup_logger

settings = get_settings()
logger = setup_logger("NotionClient")


class NotionClient:
    """
    输入:
    - `token`: Notion 集成 token（默认读取配置）

    输出:
    - 原始 JSON 响应（dict）

    作用:
    - 统一处理鉴权头、版本头与非 2xx 响应到 `NotionAPIError` 的转换
    """

    def __init__(
        self,
        token: Optional[str] = None,
        api_base: Optional[str] = None,
        version: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.token = token if token is not None else settings.NOTION_TOKEN
        self.api_base = (api_base or settings.NOTION_API_BASE).rstrip("/")
        self.version = version or settings.NOTION_VERSION
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token or ''}",
            "Notion-Version": self.version,
            "Content-Type": "application/json",
        }

    async def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.api_base}{path}"
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(headers=self._headers(), timeout=timeout) as session:
            async with session.request(method, url, json=payload) as resp:
                try:
                    data = await resp.json(content_type=None)
                except ValueError:
                    data = None
                if resp.status != 200 or not isinstance(data, dict):
                    data = data if isinstance(data, dict) else {}
                    raise NotionAPIError(resp.status, data.get("code", ""), data.get("message", ""))
                return data

    async def query_database(
        self,
        database_id: str,
        start_cursor: Optional[str] = None,
        sorts: Optional[List[Dict[str, Any]]] = None,
        filter: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        输入:
        - `database_id`: 数据库 id
        - `start_cursor`: 分页游标（首页为 None）
        - `sorts` / `filter`: Notion 查询条件

        输出:
        - 单页查询结果（含 `results`/`has_more`/`next_cursor`）
        """

        payload: Dict[str, Any] = {}
        if start_cursor:
            payload["start_cursor"] = start_cursor
        if sorts:
            payload["sorts"] = sorts
        if filter:
            payload["filter"] = filter
        logger.debug(f"查询 Notion 数据库 {database_id} cursor={start_cursor}")
        return await self._request("POST", f"/databases/{database_id}/query", payload)

    async def retrieve_database(self, database_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/databases/{database_id}")
