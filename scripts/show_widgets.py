import asyncio
import os
import sys

# Add the project root to sys.path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.core.logger import configure_logging
from app.widgets import HotNewsWidget, IPInfoWidget, SiteApiClient, WeatherWidget
from app.widgets.clock import clock_snapshot


async def show_widgets():
    """
    小组件调试脚本
    作用：
    1. 连接正在运行的导航站（SITE_BASE_URL），按自动定位加载一次天气
    2. 探测本机 IP 与代理 IP
    3. 拉取一次热搜并打印当前平台前 5 条
    注意：只读操作，不会修改已保存的城市。
    """
    configure_logging()
    api = SiteApiClient()

    now = clock_snapshot()
    print(f"🕒 {now.date} {now.weekday} {now.time}")

    weather = WeatherWidget(api=api)
    data = await weather.load()
    if data:
        aqi = f" AQI {data.aqi_display} {data.aqi_category}" if data.has_air_quality else ""
        print(f"🌤️ {data.location}: {data.temperature}° {data.condition}{aqi}")
    else:
        print(f"❌ 天气: {weather.error}")

    ip_info = IPInfoWidget(api=api)
    await ip_info.refresh()
    print(f"🌐 当前IP: {ip_info.current_ip.ip} ({ip_info.current_ip.location})")
    print(f"🌐 代理IP: {ip_info.proxy_ip.ip} ({ip_info.proxy_ip.location})")

    hot_news = HotNewsWidget(api=api)
    await hot_news.fetch()
    if hot_news.error:
        print(f"❌ 热搜: {hot_news.error}")
    for item in hot_news.news[:5]:
        print(f"🔥 [{item.platform}] {item.title} {item.views}")


if __name__ == "__main__":
    asyncio.run(show_widgets())
