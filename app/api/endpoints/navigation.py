"""
本文件用于提供导航内容相关 API：组装后的导航数据、链接、分类与网站配置。
主要函数:
- `api_navigation`: 首页所需的完整导航数据
- `api_links`: 排序后的全部链接
- `api_categories`: 已启用分类
- `api_website_config`: 合并默认值后的网站配置
- `api_app_info`: 应用名称与版本
"""

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_notion_service, settings
from app.core.exceptions import WebsiteConfigError
from app.services.notion_service import NotionService

router = APIRouter(prefix="/api", tags=["navigation"])


@router.get("/app_info")
async def api_app_info():
    return {"app_name": settings.APP_NAME, "version": settings.VERSION}


@router.get("/navigation")
async def api_navigation(refresh: bool = False, service: NotionService = Depends(get_notion_service)):
    """
    输入:
    - `refresh`: 是否跳过重验证缓存
    - `service`: 内容聚合服务（依赖注入）

    输出:
    - 网站配置、有链接的启用分类（含子分类）与过滤后的链接

    作用:
    - 网站配置获取失败视为致命错误，返回 503
    """

    try:
        navigation = await service.get_navigation(force_refresh=refresh)
    except WebsiteConfigError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return navigation.model_dump(by_alias=True)


@router.get("/links")
async def api_links(service: NotionService = Depends(get_notion_service)):
    links = await service.get_links()
    return [link.model_dump() for link in links]


@router.get("/categories")
async def api_categories(service: NotionService = Depends(get_notion_service)):
    categories = await service.get_categories()
    return [c.model_dump(by_alias=True) for c in categories]


@router.get("/config")
async def api_website_config(service: NotionService = Depends(get_notion_service)):
    try:
        return await service.get_website_config()
    except WebsiteConfigError as e:
        raise HTTPException(status_code=503, detail=str(e))
