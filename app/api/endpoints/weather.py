"""
本文件用于提供天气小组件依赖的服务端接口：城市天气、空气质量、逆地理编码与 IP 定位。
主要函数:
- `api_weather`: `GET /api/weather?city=`
- `api_air_quality`: `GET /api/weather/air?location=` 或 `?lat=&lon=`
- `api_reverse_geocode`: `GET /api/weather/geo?lat=&lon=`
- `api_ip_location`: `GET /api/weather/ip`
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.api.deps import get_client_ip, get_ip_location_service, get_weather_service, settings
from app.core.exceptions import CityNotFoundError, IPLocationError, WeatherConfigError, WeatherError
from app.core.logger import setup_logger
from app.schemas.weather import UNKNOWN_LOCATION
from app.services.ip_location_service import IPLocationService
from app.services.weather_service import WeatherService
from app.utils.tools import is_reserved_client_ip

router = APIRouter(prefix="/api/weather", tags=["weather"])
logger = setup_logger("WeatherAPI")

DEV_FALLBACK_IP = "8.8.8.8"


def _weather_error_response(e: WeatherError) -> JSONResponse:
    if isinstance(e, CityNotFoundError):
        status = 404
    elif isinstance(e, WeatherConfigError):
        status = 500
    else:
        status = 502
    return JSONResponse(status_code=status, content={"error": str(e)})


@router.get("")
async def api_weather(city: str = "", service: WeatherService = Depends(get_weather_service)):
    city = city.strip()
    if not city:
        return JSONResponse(status_code=400, content={"error": "缺少 city 参数"})
    try:
        return await service.get_weather(city)
    except WeatherError as e:
        logger.warning(f"⚠️ 天气查询失败 {city}: {e}")
        return _weather_error_response(e)


@router.get("/air")
async def api_air_quality(
    location: Optional[str] = None,
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    service: WeatherService = Depends(get_weather_service),
):
    if (lat is None or lon is None) and not location:
        return JSONResponse(status_code=400, content={"error": "缺少 location 或 lat/lon 参数"})
    try:
        return await service.get_air_quality(lat=lat, lon=lon, location=location)
    except WeatherError as e:
        logger.warning(f"⚠️ 空气质量查询失败 {location or (lat, lon)}: {e}")
        return _weather_error_response(e)


@router.get("/geo")
async def api_reverse_geocode(lat: float, lon: float, service: WeatherService = Depends(get_weather_service)):
    try:
        return {"location": await service.reverse_geocode(lat, lon)}
    except WeatherError as e:
        logger.warning(f"⚠️ 逆地理编码失败 ({lat}, {lon}): {e}")
        return JSONResponse(status_code=502, content={"error": str(e), "location": UNKNOWN_LOCATION})


@router.get("/ip")
async def api_ip_location(request: Request, service: IPLocationService = Depends(get_ip_location_service)):
    """
    输入:
    - `request`: 用于获取客户端 IP
    - `service`: IP 定位服务（依赖注入）

    输出:
    - `{ip, location, country, latitude, longitude}`；全部定位服务失败时返回 500

    作用:
    - 开发环境下本地/保留地址替换为公共地址，便于调试
    """

    ip = get_client_ip(request)
    if is_reserved_client_ip(ip) and settings.ENV == "development":
        ip = DEV_FALLBACK_IP
    try:
        return await service.locate(ip)
    except IPLocationError as e:
        return JSONResponse(status_code=500, content={"error": str(e), "location": UNKNOWN_LOCATION})
