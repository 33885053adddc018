"""
显式取消句柄。

精确分词是系统中唯一会挂起的操作。每个批次都携带一个 `CancelToken`：
编排层发起新批次前取消旧句柄，适配器在处理每段文本前检查它，
HTTP 后端则在请求与取消之间竞速。

句柄可以在事件循环线程和工作线程之间共享（批次在 `asyncio.to_thread` 中执行）。
"""

from __future__ import annotations

import asyncio
import threading
from typing import Callable

from token_studio.errors import TokenizationCancelled


class CancelToken:
    """一次性的取消句柄。"""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """取消。重复调用无副作用。"""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise TokenizationCancelled()

    def add_callback(self, callback: Callable[[], None]) -> None:
        """注册取消回调；已取消时立即调用。"""
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def remove_callback(self, callback: Callable[[], None]) -> None:
        """注销回调；未注册或已触发时无操作。"""
        with self._lock:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass

    async def wait(self) -> None:
        """
        挂起直到被取消。

        退出时（包括等待任务本身被取消）注销唤醒回调，
        句柄因此可以比创建它的事件循环活得更久。
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future[None] = loop.create_future()

        def _wake() -> None:
            if loop.is_closed():
                return
            try:
                loop.call_soon_threadsafe(_resolve)
            except RuntimeError:
                # 检查与调度之间循环被关闭
                pass

        def _resolve() -> None:
            if not future.done():
                future.set_result(None)

        self.add_callback(_wake)
        try:
            await future
        finally:
            self.remove_callback(_wake)
