"""
本文件用于提供热搜榜单接口，一次返回全部平台数据。
主要函数:
- `api_hot_news`: `GET /api/hot-news`
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.api.deps import get_hot_news_service
from app.core.exceptions import HotNewsError
from app.services.hot_news_service import HotNewsService

router = APIRouter(prefix="/api", tags=["hot-news"])


@router.get("/hot-news")
async def api_hot_news(refresh: bool = False, service: HotNewsService = Depends(get_hot_news_service)):
    try:
        mapping = await service.get_hot_news(force_refresh=refresh)
    except HotNewsError as e:
        return JSONResponse(status_code=502, content={"error": str(e)})
    return {platform: [item.model_dump() for item in items] for platform, items in mapping.items()}
