"""
本文件用于提供可取消的周期任务，供小组件的定时刷新与平台轮播使用。
主要类:
- `PeriodicTask`: 按固定间隔调用异步回调，由创建它的组件负责启动与释放
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

from app.core.logger import setup_logger

logger = setup_logger("Scheduler")


class PeriodicTask:
    """
    输入:
    - `interval`: 调用间隔（秒），首次调用发生在一个间隔之后
    - `callback`: 无参异步回调
    - `name`: 任务名称（用于日志）

    输出:
    - 后台循环任务

    作用:
    - 替代环境级定时器句柄；回调异常只记录日志，不会终止循环
    """

    def __init__(self, interval: float, callback: Callable[[], Awaitable[None]], name: str = "periodic") -> None:
        self.interval = interval
        self.callback = callback
        self.name = name
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name=self.name)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.callback()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"❌ 周期任务 {self.name} 执行异常: {e}")

    async def cancel(self) -> None:
        task = self._task
        self._task = None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def restart(self) -> None:
        await self.cancel()
        self.start()
