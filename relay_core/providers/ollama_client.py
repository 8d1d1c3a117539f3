"""Ollama /api/chat 流式客户端。

本模块负责：

1. 接收统一的 ChatRequest，序列化为 /api/chat 请求体（stream 恒为 true）。
2. 通过 httpx 发起一次流式 HTTP 请求。
3. 将 NDJSON 响应逐行解析为 ChatStreamChunk，并按约定处理错误：
   - 单行超过 MAX_LINE_BYTES -> BufferOverflowError；
   - 行不是合法 JSON 对象，或字段类型不符 -> DecodeError；
   - 行内 {"error": "..."} 非空 -> ServerError（先于状态码检查）；
   - 状态码 >= 400 且没有错误信息 -> StatusError。
4. 遇到 done=true、响应结束或出错时停止；取消时优雅返回而不是报错。
"""

import json
import logging
import platform
from typing import Any, Dict, Iterable, Iterator, Optional

import httpx

from relay_core import __version__
from relay_core.config.settings import settings
from relay_core.domain.exceptions import (
    BufferOverflowError,
    DecodeError,
    NetworkError,
    ServerError,
    StatusError,
    StreamCancelled,
)
from relay_core.domain.models import ChatRequest, ChatStreamChunk
from relay_core.infrastructure.interrupts import CancelToken
from relay_core.infrastructure.logging.logger import logger


DEFAULT_HOST = "http://localhost:11434"
CHAT_PATH = "/api/chat"
MAX_LINE_BYTES = 512 * 1000


def iter_ndjson_lines(chunks: Iterable[bytes], limit: int = MAX_LINE_BYTES) -> Iterator[bytes]:
    """把字节块切分为行，单行超过 limit 字节时抛出 BufferOverflowError。

    未结束的行在缓冲区内超过 limit 时立即报错，不会无限增长。
    """

    buf = bytearray()
    # buf[:scanned] 已确认不含换行符
    scanned = 0
    for chunk in chunks:
        buf.extend(chunk)
        while True:
            idx = buf.find(b"\n", scanned)
            if idx < 0:
                scanned = len(buf)
                break
            line = bytes(buf[:idx]).rstrip(b"\r")
            del buf[: idx + 1]
            scanned = 0
            _check_line_size(len(line), limit)
            yield line
        _check_line_size(len(buf), limit)
    if buf:
        yield bytes(buf).rstrip(b"\r")


def _check_line_size(size: int, limit: int) -> None:
    if size > limit:
        raise BufferOverflowError(
            code="BUFFER_OVERFLOW",
            message=f"response line exceeds {limit} bytes",
            line_size=size,
        )


def _check_unit_fields(data: Dict[str, Any]) -> None:
    """字段类型与 ResponseUnit 不符时抛出 DecodeError（缺失或 null 视为默认值）。"""

    def fail(detail: str) -> None:
        raise DecodeError(code="DECODE_ERROR", message=f"unmarshal: {detail}")

    for key in ("model", "created_at"):
        if data.get(key) is not None and not isinstance(data[key], str):
            fail(f"field {key!r} is not a string")
    done = data.get("done")
    if done is not None and not isinstance(done, bool):
        fail("field 'done' is not a boolean")
    message = data.get("message")
    if message is None:
        return
    if not isinstance(message, dict):
        fail("field 'message' is not an object")
    for key in ("role", "content"):
        if message.get(key) is not None and not isinstance(message[key], str):
            fail(f"field 'message.{key}' is not a string")


class OllamaClient:
    """Ollama 提供方客户端实现。

    - name: Provider 名称（供日志/调试使用）。
    - chat_stream: 对外统一调用入口，逐个 yield ChatStreamChunk。
    """

    name = "ollama"

    def __init__(self, cfg=settings):
        # Settings 里包含 host、超时等配置
        self._settings = cfg

    def chat_stream(
        self,
        req: ChatRequest,
        cancel: Optional[CancelToken] = None,
    ) -> Iterator[ChatStreamChunk]:
        """执行一次流式对话调用，逐步 yield ChatStreamChunk。

        cancel 被触发时（逐行检查，或读取过程中收到 StreamCancelled），
        关闭响应并正常返回；已经 yield 的单元不受影响。
        """

        base = getattr(self._settings, "host", None) or DEFAULT_HOST
        url = f"{base.rstrip('/')}{CHAT_PATH}"
        log_ctx: Dict[str, Any] = {"provider": self.name, "model": req.model}
        self._log(logging.INFO, "Calling provider (stream)", log_ctx, message_count=len(req.messages))

        lines = 0
        done = False
        try:
            with httpx.Client(timeout=self._settings.http_timeout, trust_env=False) as client:
                with client.stream("POST", url, json=req.to_payload(), headers=self._headers()) as resp:
                    for line in iter_ndjson_lines(resp.iter_bytes()):
                        if cancel is not None and cancel.cancelled:
                            break
                        if not line.strip():
                            continue
                        chunk = self._parse_line(line, resp)
                        lines += 1
                        yield chunk
                        if chunk.done:
                            done = True
                            self._log(logging.INFO, "Token usage", log_ctx, **chunk.telemetry.as_dict())
                            break
                    if lines == 0 and resp.status_code >= 400 and not (cancel and cancel.cancelled):
                        raise StatusError(resp.status_code, self._status_text(resp))
        except httpx.RequestError as e:
            # 网络错误：DNS 失败、连接被拒、读取超时等
            raise NetworkError(code="NETWORK_ERROR", message=str(e), url=url)
        except StreamCancelled:
            if cancel is not None:
                cancel.cancel()

        if cancel is not None and cancel.cancelled:
            self._log(logging.WARNING, "Stream cancelled", log_ctx, lines=lines)
            return
        self._log(logging.INFO, "Stream finished", log_ctx, lines=lines, done=done)

    def _parse_line(self, line: bytes, resp: httpx.Response) -> ChatStreamChunk:
        """解析单行 NDJSON。错误字段先于状态码检查。"""

        try:
            data = json.loads(line)
        except ValueError as e:
            raise DecodeError(code="DECODE_ERROR", message=f"unmarshal: {e}")
        if not isinstance(data, dict):
            raise DecodeError(code="DECODE_ERROR", message="unmarshal: response line is not a JSON object")

        error = data.get("error")
        if error is not None and not isinstance(error, str):
            raise DecodeError(code="DECODE_ERROR", message="unmarshal: error field is not a string")
        if error:
            raise ServerError(code="SERVER_ERROR", message=error, http_status=resp.status_code)

        if resp.status_code >= 400:
            raise StatusError(resp.status_code, self._status_text(resp))

        _check_unit_fields(data)
        return ChatStreamChunk.from_payload(data)

    @staticmethod
    def _status_text(resp: httpx.Response) -> str:
        return f"{resp.status_code} {resp.reason_phrase or ''}".strip()

    @staticmethod
    def _headers() -> Dict[str, str]:
        user_agent = (
            f"relay-chat/{__version__} ({platform.machine()} {platform.system().lower()}) "
            f"Python/{platform.python_version()}"
        )
        return {
            "Content-Type": "application/json",
            "Accept": "application/x-ndjson",
            "User-Agent": user_agent,
            "Connection": "keep-alive",
        }

    @staticmethod
    def _log(level: int, message: str, log_ctx: Dict[str, Any], **fields: Any) -> None:
        payload = dict(log_ctx)
        payload.update(fields)
        logger.log(level, message, extra={"extra": payload})
