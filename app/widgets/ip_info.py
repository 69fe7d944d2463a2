"""
本文件用于实现 IP 信息小组件：同时探测本机出口 IP（候选地址协商）与代理 IP（公共回显服务），并补充地理位置。
主要函数/类:
- `discover_local_ip`: 从候选地址中选出本机 IP（公网优先，内网兜底，8 秒超时）
- `discover_proxy_ip`: 通过公共回显服务获取代理出口 IP
- `lookup_ip_location`: 查询 IP 的“城市, 国家”描述
- `IPInfoWidget`: 两路探测各自独立的状态与错误
"""

from __future__ import annotations

import asyncio
from contextlib import aclosing
from typing import Callable, List, Optional

from app.core.exceptions import IPDiscoveryNotSupportedError, LocalIPTimeoutError, ProxyIPError
from app.core.logger import setup_logger
from app.schemas.weather import UNKNOWN_LOCATION
from app.schemas.widgets import UNAVAILABLE_TEXT, IPData
from app.utils.tools import extract_ipv4, is_private_ipv4
from app.widgets.api_client import SiteApiClient
from app.widgets.ice import CandidateSource, StunCandidateSource

logger = setup_logger("IPInfoWidget")

LOCAL_IP_TIMEOUT = 8.0
PROXY_IP_URL = "https://api.ipify.org?format=json"
IP_LOCATION_URL = "https://ipapi.co/{ip}/json/"


async def discover_local_ip(source: Optional[CandidateSource], timeout: float = LOCAL_IP_TIMEOUT) -> str:
    """
    输入:
    - `source`: 候选地址来源（None 表示当前环境不支持）
    - `timeout`: 等待上限（秒）

    输出:
    - 本机 IP：第一个非内网候选立即返回；否则在超时或收集结束时返回第一个内网候选

    作用:
    - 无任何可用候选时抛出 `LocalIPTimeoutError`；来源在返回前总会被关闭
    """

    if source is None or not source.supported:
        raise IPDiscoveryNotSupportedError("当前环境不支持候选地址协商")

    fallback: List[str] = []

    async def scan() -> Optional[str]:
        async with aclosing(source.candidates()) as candidates:
            async for line in candidates:
                ip = extract_ipv4(line)
                if not ip:
                    continue
                if not is_private_ipv4(ip):
                    return ip
                if not fallback:
                    fallback.append(ip)
        return None

    try:
        ip = await asyncio.wait_for(scan(), timeout)
    except asyncio.TimeoutError:
        ip = None
    finally:
        await source.close()

    if ip:
        return ip
    if fallback:
        return fallback[0]
    raise LocalIPTimeoutError("获取本地IP超时")


async def discover_proxy_ip(api: SiteApiClient) -> str:
    try:
        status, data = await api.get_json(PROXY_IP_URL)
    except Exception as e:
        raise ProxyIPError(f"获取代理IP失败: {e}") from e
    if not 200 <= status < 300:
        raise ProxyIPError(f"获取代理IP失败: HTTP {status}")
    ip = data.get("ip") if isinstance(data, dict) else None
    if not ip:
        raise ProxyIPError("获取代理IP失败: 返回数据缺少 ip")
    return ip


async def lookup_ip_location(api: SiteApiClient, ip: str) -> str:
    try:
        status, data = await api.get_json(IP_LOCATION_URL.format(ip=ip))
    except Exception as e:
        logger.warning(f"⚠️ 查询 IP 位置失败 {ip}: {e}")
        return UNKNOWN_LOCATION
    if not 200 <= status < 300 or not isinstance(data, dict):
        return UNKNOWN_LOCATION
    city, country = data.get("city"), data.get("country_name")
    if city and country:
        return f"{city}, {country}"
    return UNKNOWN_LOCATION


class IPInfoWidget:
    """
    输入:
    - `api`: 接口客户端（代理 IP 与位置查询）
    - `source_factory`: 每次探测创建一个新的候选地址来源

    输出:
    - `current_ip` / `proxy_ip`（`IPData`）及各自的错误信息

    作用:
    - 两路探测并发执行，一路失败不影响另一路展示
    """

    def __init__(
        self,
        api: Optional[SiteApiClient] = None,
        source_factory: Optional[Callable[[], Optional[CandidateSource]]] = None,
        local_timeout: float = LOCAL_IP_TIMEOUT,
    ) -> None:
        self.api = api or SiteApiClient()
        self.source_factory = source_factory or StunCandidateSource
        self.local_timeout = local_timeout
        self.loading = True
        self._reset()

    def _reset(self) -> None:
        self.current_ip = IPData()
        self.proxy_ip = IPData()
        self.current_ip_error: Optional[str] = None
        self.proxy_ip_error: Optional[str] = None

    async def _refresh_current(self) -> None:
        try:
            ip = await discover_local_ip(self.source_factory(), self.local_timeout)
            self.current_ip = IPData(ip=ip, location=await lookup_ip_location(self.api, ip))
        except Exception as e:
            logger.warning(f"⚠️ 获取当前IP失败: {e}")
            self.current_ip_error = str(e) or "获取当前IP失败"
            self.current_ip = IPData(ip=UNAVAILABLE_TEXT, location=UNAVAILABLE_TEXT)

    async def _refresh_proxy(self) -> None:
        try:
            ip = await discover_proxy_ip(self.api)
            self.proxy_ip = IPData(ip=ip, location=await lookup_ip_location(self.api, ip))
        except Exception as e:
            logger.warning(f"⚠️ 获取代理IP失败: {e}")
            self.proxy_ip_error = str(e) or "获取代理IP失败"
            self.proxy_ip = IPData(ip=UNAVAILABLE_TEXT, location=UNAVAILABLE_TEXT)

    async def refresh(self) -> None:
        self.loading = True
        self.current_ip_error = None
        self.proxy_ip_error = None
        try:
            await asyncio.gather(self._refresh_current(), self._refresh_proxy())
        finally:
            self.loading = False
        logger.info(f"🌐 IP 信息: 当前 {self.current_ip.ip} / 代理 {self.proxy_ip.ip}")

    async def retry(self) -> None:
        self._reset()
        await self.refresh()

    async def start(self) -> None:
        await self.refresh()

    async def stop(self) -> None:
        return None
