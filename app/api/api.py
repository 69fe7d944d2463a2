"""
本文件用于聚合各模块路由，并提供统一的 `api_router` 给主应用注册。
主要对象:
- `api_router`: API 路由聚合器
"""

from fastapi import APIRouter

from app.api.endpoints import hot_news, navigation, weather

api_router = APIRouter()
api_router.include_router(navigation.router)
api_router.include_router(weather.router)
api_router.include_router(hot_news.router)
