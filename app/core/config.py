"""
本文件用于加载项目运行配置：`config.yaml` 为主，环境变量与 `.env` 可覆盖同名项。
主要函数/类:
- `Settings`: 运行时配置模型（支持类型校验与默认值）
- `get_settings`: 获取配置单例（带缓存）
- `reload_settings`: 清除缓存并重新加载配置
- `get_missing_config_keys`: 计算关键配置缺失项（用于页面提示）
- `_normalize_yaml_config`: 将 YAML 配置键标准化为大写
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.utils.config_io import load_yaml_dict

BASE_DIR = Path(__file__).resolve().parents[2]
CONFIG_PATH = BASE_DIR / "config.yaml"


def _normalize_yaml_config(data: Dict[str, Any]) -> Dict[str, Any]:
    return {str(k).upper(): v for k, v in (data or {}).items()}


class Settings(BaseSettings):
    """
    输入:
    - `config.yaml`、环境变量与 `.env` 文件中的配置项

    输出:
    - 统一的运行时配置对象

    作用:
    - 集中管理导航站服务端与小组件客户端所需的配置，并提供默认值与类型校验
    """

    APP_NAME: str = "NotionNav"
    VERSION: str = "0.3.0"
    DEBUG: bool = False
    ENV: str = "production"
    LOG_LEVEL: str = "INFO"
    PORT: int = 3000

    # Notion 内容源
    NOTION_TOKEN: Optional[str] = None
    NOTION_API_BASE: str = "https://api.notion.com/v1"
    NOTION_VERSION: str = "2022-06-28"
    NOTION_LINKS_DB_ID: Optional[str] = None
    NOTION_WEBSITE_CONFIG_ID: Optional[str] = None
    NOTION_CATEGORIES_DB_ID: Optional[str] = None
    REVALIDATE_TIME: int = 43200

    # 天气（和风天气）
    QWEATHER_API_KEY: Optional[str] = None
    QWEATHER_API_HOST: str = "devapi.qweather.com"
    QWEATHER_GEO_HOST: str = "geoapi.qweather.com"
    DEFAULT_CITY: str = "杭州"

    # 热搜
    HOT_NEWS_API_BASE: str = "https://api-hot.imsyy.top"
    HOT_NEWS_PLATFORMS: List[str] = ["weibo", "baidu", "bilibili", "toutiao", "douyin"]
    HOT_NEWS_LIMIT: int = 20
    HOT_NEWS_SERVER_CACHE_SECONDS: int = 300

    # 小组件客户端
    SITE_BASE_URL: str = "http://localhost:3000"
    WIDGET_STATE_PATH: str = str(BASE_DIR / "data" / "widget_state.json")
    WIDGET_LATITUDE: Optional[float] = None
    WIDGET_LONGITUDE: Optional[float] = None
    STUN_SERVERS: List[str] = [
        "stun.l.google.com:19302",
        "stun1.l.google.com:19302",
        "stun2.l.google.com:19302",
        "stun.cloudflare.com:3478",
        "stun.nextcloud.com:443",
        "stun.sipgate.net:3478",
    ]

    HTTP_TIMEOUT_SECONDS: float = 15.0

    @field_validator("HOT_NEWS_PLATFORMS", "STUN_SERVERS", mode="before")
    @classmethod
    def _split_comma_list(cls, value: Any) -> Any:
        # YAML 中允许写成 "weibo, baidu"
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        def yaml_settings():
            return _normalize_yaml_config(load_yaml_dict(CONFIG_PATH))

        return (
            init_settings,
            env_settings,
            dotenv_settings,
            yaml_settings,
            file_secret_settings,
        )


REQUIRED_KEYS = ("NOTION_TOKEN", "NOTION_LINKS_DB_ID", "NOTION_WEBSITE_CONFIG_ID")


def get_missing_config_keys(settings: Settings) -> List[str]:
    missing: List[str] = []
    for key in REQUIRED_KEYS:
        value = getattr(settings, key, None)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(key)
    return missing


@lru_cache()
def get_settings() -> Settings:
    """
    输入:
    - 无

    输出:
    - `Settings` 单例实例

    作用:
    - 通过缓存避免重复解析配置文件与环境变量
    """

    return Settings()


def reload_settings() -> Settings:
    get_settings.cache_clear()
    return get_settings()
