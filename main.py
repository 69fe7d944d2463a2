"""
本文件用于启动 FastAPI 应用并注册页面路由、API 路由与生命周期任务。
主要函数/类:
- `lifespan`: 应用生命周期管理（检查配置、预热导航数据）
- `page_index`: 首页渲染
"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse

from app.api.api import api_router
from app.api.deps import get_notion_service, settings, templates
from app.core.config import get_missing_config_keys
from app.core.exceptions import WebsiteConfigError
from app.core.logger import configure_logging, setup_logger
from app.services.notion_service import NotionService

STARTUP_ERROR: str | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    输入:
    - `app`: FastAPI 应用实例

    输出:
    - 生命周期上下文（启动后进入、退出时清理）

    作用:
    - 启动时检查关键配置并预热导航数据；预热失败只记录，不阻止服务启动
    """

    global STARTUP_ERROR
    lifespan_logger = setup_logger("lifespan")
    missing_keys = get_missing_config_keys(settings)
    if missing_keys:
        STARTUP_ERROR = f"缺少配置: {', '.join(missing_keys)}"
        lifespan_logger.warning("=" * 60)
        lifespan_logger.warning(f"⚠️  {STARTUP_ERROR}")
        lifespan_logger.warning("⚠️  请在 config.yaml 或环境变量中补全 Notion 配置")
        lifespan_logger.warning("=" * 60)
    else:
        try:
            await get_notion_service().get_navigation()
            STARTUP_ERROR = None
        except WebsiteConfigError as e:
            STARTUP_ERROR = str(e)
            lifespan_logger.error(f"❌ 导航数据预热失败: {e}")
    yield


configure_logging()
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    lifespan=lifespan,
    debug=settings.DEBUG,
)
app.include_router(api_router)


@app.get("/", response_class=HTMLResponse)
async def page_index(request: Request, service: NotionService = Depends(get_notion_service)):
    """
    输入:
    - `request`: FastAPI 请求对象
    - `service`: 内容聚合服务（依赖注入）

    输出:
    - 首页 HTML 响应

    作用:
    - 渲染分类导航与链接；网站配置不可用时返回 503 错误页
    - 导航数据恢复可用后清除启动阶段记录的错误
    """

    global STARTUP_ERROR
    missing_keys = get_missing_config_keys(settings)
    try:
        navigation = await service.get_navigation()
    except WebsiteConfigError as e:
        return templates.TemplateResponse(
            request,
            "index.html",
            {"navigation": None, "error": str(e), "missing_keys": missing_keys},
            status_code=503,
        )

    STARTUP_ERROR = None
    widget_names = [s.strip() for s in navigation.config.get("WIDGET_CONFIG", "").split(",") if s.strip()]
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "navigation": navigation,
            "config": navigation.config,
            "widget_names": widget_names,
            "error": None,
            "missing_keys": missing_keys,
        },
    )


if __name__ == "__main__":
    log_level = (settings.LOG_LEVEL or "info").lower()
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.PORT,
        log_level=log_level,
        access_log=log_level in {"debug", "info"},
    )
