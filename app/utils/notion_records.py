"""
本文件用于校验 Notion 原始页面记录并映射为领域模型。
校验与映射是两组独立的纯函数：校验返回带标签的结果，映射负责填充字段默认值。
主要函数:
- `check_link_page` / `check_category_page` / `check_config_page`: 按记录类型校验必需属性
- `to_link` / `to_category` / `to_config_item`: 原始记录到领域模型的映射
- `database_icon_to_favicon`: 数据库图标（emoji/file/external）转网站图标
- `extract_*`: Notion 属性值提取
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from app.schemas.notion import DEFAULT_CATEGORY1, DEFAULT_CATEGORY2, Category, Link
from app.utils.tools import emoji_favicon

DEFAULT_FAVICON = "/favicon.ico"

LINK_PROPERTIES = ("Name", "URL", "desc", "category1", "category2", "Tags", "iconfile", "iconlink", "Created")
CATEGORY_PROPERTIES = ("Name", "IconName", "Order", "Enabled")
CONFIG_PROPERTIES = ("Name", "Value")


@dataclass(frozen=True)
class RecordCheck:
    ok: bool
    reason: str = ""


def is_page_object(record: Any) -> bool:
    return (
        isinstance(record, dict)
        and record.get("object") == "page"
        and isinstance(record.get("properties"), dict)
    )


def _check_properties(record: Any, required: Sequence[str]) -> RecordCheck:
    if not is_page_object(record):
        return RecordCheck(False, "不是 page 对象")
    missing = [name for name in required if name not in record["properties"]]
    if missing:
        return RecordCheck(False, f"缺少属性: {', '.join(missing)}")
    return RecordCheck(True)


def check_link_page(record: Any) -> RecordCheck:
    return _check_properties(record, LINK_PROPERTIES)


def check_category_page(record: Any) -> RecordCheck:
    return _check_properties(record, CATEGORY_PROPERTIES)


def check_config_page(record: Any) -> RecordCheck:
    return _check_properties(record, CONFIG_PROPERTIES)


# ---- 属性值提取 ----

def _first_plain_text(items: Any) -> str:
    if not isinstance(items, list) or not items:
        return ""
    first = items[0]
    if not isinstance(first, dict):
        return ""
    return first.get("plain_text") or ""


def extract_title(prop: Any) -> str:
    return _first_plain_text((prop or {}).get("title")) if isinstance(prop, dict) else ""


def extract_rich_text(prop: Any) -> str:
    return _first_plain_text((prop or {}).get("rich_text")) if isinstance(prop, dict) else ""


def extract_url(prop: Any) -> str:
    if not isinstance(prop, dict):
        return ""
    return prop.get("url") or ""


def extract_select(prop: Any) -> str:
    if not isinstance(prop, dict):
        return ""
    select = prop.get("select")
    if not isinstance(select, dict):
        return ""
    return select.get("name") or ""


def extract_multi_select(prop: Any) -> List[str]:
    if not isinstance(prop, dict):
        return []
    items = prop.get("multi_select") or []
    return [item.get("name", "") for item in items if isinstance(item, dict)]


def extract_file_url(prop: Any) -> str:
    """
    输入:
    - `prop`: files 类型属性

    输出:
    - 第一个文件的地址（external 或 Notion 托管 file），无则空字符串
    """

    if not isinstance(prop, dict):
        return ""
    files = prop.get("files")
    if not isinstance(files, list) or not files or not isinstance(files[0], dict):
        return ""
    return _hosted_url(files[0]) or ""


def _hosted_url(obj: Dict[str, Any]) -> Optional[str]:
    kind = obj.get("type")
    if kind == "external" and obj.get("external"):
        return obj["external"].get("url")
    if kind == "file" and obj.get("file"):
        return obj["file"].get("url")
    return None


def extract_number(prop: Any) -> int:
    if not isinstance(prop, dict):
        return 0
    value = prop.get("number")
    return int(value) if value else 0


def extract_checkbox(prop: Any) -> bool:
    return bool(prop.get("checkbox")) if isinstance(prop, dict) else False


# ---- 映射 ----

def to_link(record: Dict[str, Any]) -> Link:
    props = record["properties"]
    return Link(
        id=record.get("id", ""),
        name=extract_title(props["Name"]),
        created=(props["Created"] or {}).get("created_time") or record.get("created_time", ""),
        desc=extract_rich_text(props["desc"]),
        url=extract_url(props["URL"]) or "#",
        category1=extract_select(props["category1"]) or DEFAULT_CATEGORY1,
        category2=extract_select(props["category2"]) or DEFAULT_CATEGORY2,
        iconfile=extract_file_url(props["iconfile"]),
        iconlink=extract_url(props["iconlink"]),
        tags=extract_multi_select(props["Tags"]),
    )


def to_category(record: Dict[str, Any]) -> Category:
    props = record["properties"]
    return Category(
        id=record.get("id", ""),
        name=extract_title(props["Name"]),
        icon_name=extract_rich_text(props["IconName"]),
        order=extract_number(props["Order"]),
        enabled=extract_checkbox(props["Enabled"]),
    )


def to_config_item(record: Dict[str, Any]) -> Optional[Tuple[str, str]]:
    """配置行映射为 (大写 key, value)；key 为空时返回 None。"""

    props = record["properties"]
    key = extract_title(props["Name"])
    if not key:
        return None
    return key.upper(), extract_rich_text(props["Value"])


def database_icon_to_favicon(database: Dict[str, Any]) -> str:
    icon = database.get("icon") if isinstance(database, dict) else None
    if not isinstance(icon, dict):
        return DEFAULT_FAVICON
    if icon.get("type") == "emoji" and icon.get("emoji"):
        return emoji_favicon(icon["emoji"])
    return _hosted_url(icon) or DEFAULT_FAVICON
