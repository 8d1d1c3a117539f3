"""流式调用的取消机制。

CancelToken 在会话级别创建一次，每次 dispatch 前 reset 后复用，
并显式传给 Provider。InterruptListener 只在一次流式调用进行期间
接管 SIGINT：收到 Ctrl-C 时取消 token，并抛出 StreamCancelled
打断阻塞中的网络读取。调用结束后恢复原来的信号处理器。
"""

from __future__ import annotations

import signal
import threading
from contextlib import contextmanager
from typing import Iterator

from relay_core.domain.exceptions import StreamCancelled


class CancelToken:
    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def reset(self) -> None:
        self._event.clear()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class InterruptListener:
    """在流式调用期间把 SIGINT 转换为取消。"""

    def __init__(self, signum: int = signal.SIGINT):
        self._signum = signum

    @contextmanager
    def armed(self, token: CancelToken) -> Iterator[CancelToken]:
        # signal.signal 只能在主线程调用
        if threading.current_thread() is not threading.main_thread():
            yield token
            return

        def _handler(signum, frame):  # noqa: ANN001
            token.cancel()
            raise StreamCancelled()

        previous = signal.signal(self._signum, _handler)
        try:
            yield token
        finally:
            signal.signal(self._signum, previous)
