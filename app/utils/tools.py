"""
本文件用于提供通用工具函数：IPv4 提取与分类、子分类 id 生成、emoji 图标转换等。
主要函数:
- `extract_ipv4`: 从候选地址描述中提取首个合法 IPv4
- `is_private_ipv4`: 判断是否为内网地址（按前缀判断）
- `is_reserved_client_ip`: 判断请求来源是否为本地/保留地址
- `slugify_sub_category`: 子分类名称转 id
- `emoji_favicon`: 将 emoji 转为内联 SVG data URI
"""

from __future__ import annotations

import re
from typing import Optional

_IPV4_PATTERN = re.compile(r"([0-9]{1,3}(\.[0-9]{1,3}){3})")

PRIVATE_IPV4_PREFIXES = ("192.168.", "10.", "172.")


def extract_ipv4(text: str) -> Optional[str]:
    """
    输入:
    - `text`: 候选地址描述（如 `candidate:1 1 udp 2122260223 192.168.1.5 54321 typ host`）

    输出:
    - 首个 IPv4 形态的片段，且四段均在 0-255 之间；否则 None

    作用:
    - 只校验第一个匹配项，与协商通道的候选格式保持一致
    """

    if not text:
        return None
    match = _IPV4_PATTERN.search(text)
    if not match:
        return None
    ip = match.group(1)
    parts = ip.split(".")
    if len(parts) == 4 and all(0 <= int(p) <= 255 for p in parts):
        return ip
    return None


def is_private_ipv4(ip: str) -> bool:
    return ip.startswith(PRIVATE_IPV4_PREFIXES)


def is_reserved_client_ip(ip: str) -> bool:
    return (
        ip in {"127.0.0.1", "localhost", "::1", "未知IP"}
        or ip.startswith("192.168.")
        or ip.startswith("10.")
    )


def slugify_sub_category(name: str) -> str:
    return re.sub(r"\s+", "-", name.lower())


def emoji_favicon(emoji: str) -> str:
    return (
        "data:image/svg+xml,<svg xmlns=%22http://www.w3.org/2000/svg%22 viewBox=%220 0 100 100%22>"
        f"<text y=%22.9em%22 font-size=%2290%22>{emoji}</text></svg>"
    )
