"""
本文件用于持久化小组件客户端的本地状态（对应浏览器 localStorage 中的单个键）。
主要类:
- `CityStorage`: 读写“最近一次手动选择的天气城市”
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from app.core.config import get_settings
from app.utils.config_io import load_json_dict, save_json_dict

settings = get_settings()

CITY_STORAGE_KEY = "weatherCity"


class CityStorage:
    def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
        self.path = Path(path or settings.WIDGET_STATE_PATH)

    def get_city(self) -> Optional[str]:
        value = load_json_dict(self.path).get(CITY_STORAGE_KEY)
        return value if isinstance(value, str) and value else None

    def set_city(self, city: str) -> None:
        data = load_json_dict(self.path)
        data[CITY_STORAGE_KEY] = city
        save_json_dict(self.path, data)

    def clear_city(self) -> None:
        data = load_json_dict(self.path)
        if data.pop(CITY_STORAGE_KEY, None) is not None:
            save_json_dict(self.path, data)
