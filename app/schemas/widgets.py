"""
本文件用于定义热搜与 IP 信息小组件的数据模型。
主要类:
- `HotNewsItem`: 单条热搜
- `IPData`: IP 与其位置描述
"""

from pydantic import BaseModel

LOADING_TEXT = "获取中..."
UNAVAILABLE_TEXT = "未获取到"


class HotNewsItem(BaseModel):
    title: str
    url: str = ""
    views: str = ""
    platform: str = ""


class IPData(BaseModel):
    ip: str = LOADING_TEXT
    location: str = LOADING_TEXT
