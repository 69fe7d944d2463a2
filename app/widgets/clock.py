"""
本文件用于生成简易时钟小组件的展示数据（日期、星期、时分秒）。
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

WEEKDAYS = ["星期一", "星期二", "星期三", "星期四", "星期五", "星期六", "星期日"]


@dataclass(frozen=True)
class ClockSnapshot:
    date: str
    weekday: str
    time: str


def clock_snapshot(now: Optional[datetime] = None) -> ClockSnapshot:
    now = now or datetime.now()
    return ClockSnapshot(
        date=f"{now.year}年{now.month}月{now.day}日",
        weekday=WEEKDAYS[now.weekday()],
        time=now.strftime("%H:%M:%S"),
    )


class SimpleClockWidget:
    async def start(self) -> None:
        return None

    async def stop(self) -> None:
        return None

    def snapshot(self, now: Optional[datetime] = None) -> ClockSnapshot:
        return clock_snapshot(now)
