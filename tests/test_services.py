from __future__ import annotations

from typing import Any, Dict

import pytest

from app.core.exceptions import CityNotFoundError, IPLocationError, WeatherConfigError
from app.services.ip_location_service import DEFAULT_PROVIDERS, IPLocationService
from app.services.weather_service import WeatherService


class ScriptedIPService(IPLocationService):
    def __init__(self, responses: Dict[str, Any]) -> None:
        super().__init__(providers=DEFAULT_PROVIDERS)
        self.responses = responses
        self.tried = []

    async def _fetch(self, provider, ip):
        self.tried.append(provider.name)
        response = self.responses[provider.name]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.mark.asyncio
async def test_ip_location_uses_first_provider() -> None:
    service = ScriptedIPService({"ipapi.co": {"ip": "8.8.8.8", "city": "Mountain View", "country_name": "United States"}})

    result = await service.locate("8.8.8.8")

    assert result["location"] == "Mountain View"
    assert result["country"] == "United States"
    assert service.tried == ["ipapi.co"]


@pytest.mark.asyncio
async def test_ip_location_falls_back_to_second_provider() -> None:
    service = ScriptedIPService(
        {
            "ipapi.co": IPLocationError("ipapi.co 服务响应错误: 429 Too Many Requests"),
            "ip-api.com": {"status": "success", "query": "1.1.1.1", "city": "Sydney", "country": "Australia", "lat": -33.8, "lon": 151.2},
        }
    )

    result = await service.locate("1.1.1.1")

    assert result == {"ip": "1.1.1.1", "location": "Sydney", "country": "Australia", "latitude": -33.8, "longitude": 151.2}
    assert service.tried == ["ipapi.co", "ip-api.com"]


@pytest.mark.asyncio
async def test_ip_location_reports_last_error_when_all_fail() -> None:
    service = ScriptedIPService(
        {
            "ipapi.co": IPLocationError("ipapi.co 服务响应错误: 500"),
            "ip-api.com": {"status": "fail", "message": "reserved range"},
        }
    )

    with pytest.raises(IPLocationError, match="IP定位失败: .*reserved range"):
        await service.locate("10.0.0.1")


@pytest.mark.asyncio
async def test_weather_service_requires_api_key() -> None:
    with pytest.raises(WeatherConfigError):
        await WeatherService(api_key="").get_weather("杭州")


class ScriptedWeatherService(WeatherService):
    def __init__(self, responses: Dict[str, Dict[str, Any]]) -> None:
        super().__init__(api_key="k", api_host="api.test", geo_host="geo.test")
        self.responses = responses
        self.urls = []

    async def _get_json(self, url, params=None):
        self.urls.append(url)
        for suffix, data in self.responses.items():
            if url.endswith(suffix):
                return data
        raise AssertionError(f"unexpected url {url}")


@pytest.mark.asyncio
async def test_get_weather_combines_now_and_daily() -> None:
    service = ScriptedWeatherService(
        {
            "/v2/city/lookup": {"code": "200", "location": [{"id": "101210101", "name": "杭州", "lat": "30.29", "lon": "120.15"}]},
            "/v7/weather/now": {"code": "200", "now": {"temp": "21", "text": "多云", "icon": "101"}},
            "/v7/weather/3d": {"code": "200", "daily": [{"tempMin": "15", "tempMax": "24.5"}]},
        }
    )

    data = await service.get_weather("杭州")

    assert data == {"location": "杭州", "temp": 21, "text": "多云", "icon": "101", "tempMin": 15, "tempMax": 24.5}


@pytest.mark.asyncio
async def test_get_weather_unknown_city() -> None:
    service = ScriptedWeatherService({"/v2/city/lookup": {"code": "404"}})
    with pytest.raises(CityNotFoundError, match="找不到城市 火星 的天气数据"):
        await service.get_weather("火星")


@pytest.mark.asyncio
async def test_air_quality_by_city_name_looks_up_coordinates() -> None:
    service = ScriptedWeatherService(
        {
            "/v2/city/lookup": {"code": "200", "location": [{"id": "1", "name": "杭州", "lat": "30.29", "lon": "120.15"}]},
            "/30.29/120.15": {"indexes": [{"aqi": 45, "aqiDisplay": "45", "level": "1", "category": "优"}]},
        }
    )

    data = await service.get_air_quality(location="杭州")

    assert data["aqi"] == 45
    assert data["category"] == "优"
    assert service.urls[-1] == "https://api.test/airquality/v1/current/30.29/120.15"


@pytest.mark.asyncio
async def test_reverse_geocode_prefers_district() -> None:
    service = ScriptedWeatherService(
        {"/v2/city/lookup": {"code": "200", "location": [{"name": "西湖", "adm2": "杭州"}]}}
    )
    assert await service.reverse_geocode(30.25, 120.14) == "杭州"

    service.responses = {"/v2/city/lookup": {"code": "404"}}
    assert await service.reverse_geocode(0, 0) == "未知位置"
