from __future__ import annotations

import sys
import threading
import time
from typing import Optional, TextIO


class Spinner:
    """等待首个响应片段时显示的状态指示器。

    start(label) 在后台线程中刷新帧；stop_and_clear() 停止并清除整行，
    可重复调用，必须在输出任何模型文本之前调用。
    """

    frames = ("|", "/", "-", "\\")

    def __init__(self, stream: Optional[TextIO] = None, interval_seconds: float = 0.1):
        self.stream = stream
        self.interval_seconds = interval_seconds
        self.label = ""
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._start_time = 0.0
        self._width = 0

    @property
    def running(self) -> bool:
        return self._thread is not None

    def start(self, label: str = "") -> None:
        self.stop_and_clear()
        self.label = label
        self._stop.clear()
        self._start_time = time.time()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def stop_and_clear(self) -> None:
        thread = self._thread
        if thread is None:
            return
        self._stop.set()
        thread.join(timeout=1)
        self._thread = None
        self._write("\r" + " " * self._width + "\r")

    def _run(self) -> None:
        idx = 0
        while True:
            elapsed = int(time.time() - self._start_time)
            msg = f"{self.frames[idx]} {self.label} {elapsed}s"
            self._width = max(self._width, len(msg))
            self._write("\r" + msg)
            idx = (idx + 1) % len(self.frames)
            if self._stop.wait(self.interval_seconds):
                break

    def _write(self, text: str) -> None:
        stream = self.stream or sys.stderr
        with self._lock:
            stream.write(text)
            stream.flush()


__all__ = ["Spinner"]
