"""
本文件用于统一导航站服务端与小组件客户端的日志输出。
主要函数:
- `configure_logging`: 配置根 logger（只安装一次 stdout handler，可重复调用以调整等级）
- `setup_logger`: 获取命名 logger，首次调用时自动完成根配置
"""

import logging
import sys
from typing import Optional

from app.core.config import get_settings

settings = get_settings()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# INFO 级别下这些库只输出警告以上
NOISY_LOGGERS = (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "asyncio",
    "aiohttp.client",
    "aiohttp.access",
    "aiohttp.internal",
)

_stream_handler: Optional[logging.Handler] = None


def _resolve_level(level: Optional[str]) -> int:
    if settings.DEBUG and not level:
        return logging.DEBUG
    return getattr(logging, (level or settings.LOG_LEVEL or "").upper(), logging.INFO)


def configure_logging(level: Optional[str] = None) -> int:
    """
    输入:
    - `level`: 覆盖配置中的 `LOG_LEVEL`（如脚本调试时传入 DEBUG）

    输出:
    - 生效的日志等级

    作用:
    - 根 logger 输出到 stdout；第三方库在 INFO 下被压到 WARNING，DEBUG 下保持一致
    """

    global _stream_handler
    log_level = _resolve_level(level)
    root = logging.getLogger()

    if _stream_handler is None and not root.handlers:
        _stream_handler = logging.StreamHandler(sys.stdout)
        _stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(_stream_handler)
    if _stream_handler is not None:
        _stream_handler.setLevel(log_level)
    root.setLevel(log_level)

    third_party_level = logging.WARNING if log_level == logging.INFO else log_level
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)
    return log_level


def setup_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logging.getLogger().handlers:
        configure_logging()
    return logger
