"""
本文件用于定义天气小组件相关的数据模型。
主要类:
- `GeoCoordinates`: 经纬度
- `ResolvedLocation`: 定位链的解析结果
- `AqiColor` / `PrimaryPollutant`: 空气质量附加字段
- `WeatherData`: 天气 + 空气质量合并后的视图模型
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN_LOCATION = "未知位置"


class GeoCoordinates(BaseModel):
    latitude: float
    longitude: float


class ResolvedLocation(BaseModel):
    location: str
    coords: Optional[GeoCoordinates] = None


class AqiColor(BaseModel):
    red: int = 0
    green: int = 0
    blue: int = 0
    alpha: float = 1


class PrimaryPollutant(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code: str = ""
    name: str = ""
    full_name: Optional[str] = Field(None, alias="fullName")


class WeatherData(BaseModel):
    """
    输入:
    - 天气接口字段与（可能为空的）空气质量字段

    输出:
    - 小组件展示用视图模型

    作用:
    - 空气质量字段全部可选，缺失表示“空气质量不可用”而非错误
    """

    model_config = ConfigDict(populate_by_name=True)

    location: str
    temperature: Optional[float] = None
    condition: str = ""
    icon: str = ""
    temp_min: Optional[float] = Field(None, alias="tempMin")
    temp_max: Optional[float] = Field(None, alias="tempMax")

    aqi: Optional[float] = None
    aqi_display: Optional[str] = Field(None, alias="aqiDisplay")
    aqi_level: Optional[str] = Field(None, alias="aqiLevel")
    aqi_category: Optional[str] = Field(None, alias="aqiCategory")
    aqi_color: Optional[AqiColor] = Field(None, alias="aqiColor")
    primary_pollutant: Optional[PrimaryPollutant] = Field(None, alias="primaryPollutant")

    @property
    def has_air_quality(self) -> bool:
        return self.aqi is not None
