from __future__ import annotations

from datetime import datetime

from app.widgets.clock import clock_snapshot
from app.widgets.home import HomeWidgets, parse_widget_config
from app.widgets.hot_news import HotNewsWidget
from app.widgets.weather import WeatherWidget
from conftest import FakeSiteApi


def test_parse_widget_config_trims_and_skips_blanks() -> None:
    assert parse_widget_config(" 天气, ,热搜,") == ["天气", "热搜"]
    assert parse_widget_config(None) == []


def test_home_widgets_skips_unknown_names() -> None:
    widgets = HomeWidgets({"WIDGET_CONFIG": "简易时钟,天气,日历,热搜"}, api=FakeSiteApi())

    assert widgets.names == ["简易时钟", "天气", "热搜"]
    assert isinstance(widgets.get("天气"), WeatherWidget)
    assert isinstance(widgets.get("热搜"), HotNewsWidget)
    assert widgets.get("IP信息") is None


def test_clock_snapshot() -> None:
    snapshot = clock_snapshot(datetime(2024, 2, 10, 8, 5, 9))
    assert snapshot.date == "2024年2月10日"
    assert snapshot.weekday == "星期六"
    assert snapshot.time == "08:05:09"
