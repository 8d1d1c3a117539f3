"""会话引擎核心模块。

在一个或多个模型之间轮流发言：

- submit(role, content): 外部输入追加到所有历史，然后让当前模型回答。
- continue_turn(): 不追加新输入，直接让当前模型继续。
- dispatch(): 用当前模型自己的历史构造请求，流式渲染回答；
  正常结束后把回答写入自己的历史、把角色反转后的副本写入其他历史，
  并把发言权交给下一个模型（严格轮转）。

取消（Ctrl-C）不是错误：本轮已经渲染的内容不会写入任何历史，下标也不推进。
其他错误原样抛给会话循环，历史保持不变。
"""

import logging
import shutil
import time
from contextlib import nullcontext
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
from uuid import uuid4

from relay_core.config.model_config import ModelRecord
from relay_core.domain.conversation import ConversationState
from relay_core.domain.exceptions import StreamCancelled, ValidationError
from relay_core.domain.models import ROLES, ChatMessage, ChatRequest
from relay_core.infrastructure.interrupts import CancelToken, InterruptListener
from relay_core.infrastructure.logging.logger import logger
from relay_core.providers.base import ProviderClient
from relay_core.ui.renderer import StreamRenderer


def terminal_width() -> int:
    return shutil.get_terminal_size().columns


class ConversationEngine:
    def __init__(
        self,
        provider_client: ProviderClient,
        models: Sequence[ModelRecord],
        renderer: Optional[StreamRenderer] = None,
        status: Optional[Any] = None,
        cancel_token: Optional[CancelToken] = None,
        interrupt_listener: Optional[InterruptListener] = None,
        width_provider: Callable[[], int] = terminal_width,
    ):
        if not models:
            raise ValidationError(code="NO_MODELS", message="at least one model is required")
        self._provider_client = provider_client
        self._models = list(models)
        self._state = ConversationState(model_count=len(self._models))
        self._renderer = renderer or StreamRenderer()
        self._status = status
        self._cancel = cancel_token or CancelToken()
        self._listener = interrupt_listener
        self._width_provider = width_provider

    @property
    def models(self) -> List[ModelRecord]:
        return list(self._models)

    @property
    def active_index(self) -> int:
        return self._state.active

    @property
    def active_model(self) -> ModelRecord:
        return self._models[self._state.active]

    def history(self, index: int) -> Tuple[ChatMessage, ...]:
        return self._state.history(index)

    def submit(self, role: str, content: str) -> Optional[ChatMessage]:
        """追加一条外部输入到所有历史，并立即让当前模型回答。"""

        if role not in ROLES:
            raise ValidationError(code="INVALID_ROLE", message=f"invalid role: {role!r}")
        self._state.append_external(ChatMessage(role=role, content=content))  # type: ignore[arg-type]
        return self.dispatch()

    def continue_turn(self) -> Optional[ChatMessage]:
        return self.dispatch()

    def dispatch(self) -> Optional[ChatMessage]:
        """执行当前模型的一轮回答。

        Returns:
            正常结束时返回写入作者历史的消息；被取消时返回 None。
        """

        start_time = time.time()
        author = self._state.active
        model = self._models[author]
        log_ctx: Dict[str, Any] = {
            "trace_id": f"tr-{uuid4().hex}",
            "model": model.name,
            "model_index": author,
        }
        req = ChatRequest(model=model.name, messages=self._state.active_history)

        pieces: List[str] = []
        role: Optional[str] = None
        self._cancel.reset()
        armed = self._listener.armed(self._cancel) if self._listener else nullcontext()
        try:
            with armed:
                if self._status is not None:
                    self._status.start(model.name)
                for chunk in self._provider_client.chat_stream(req, cancel=self._cancel):
                    self._stop_status()
                    role = chunk.message.role or role
                    content = chunk.message.content
                    if content:
                        pieces.append(content)
                        self._renderer.feed(content, width=self._width_provider())
        except StreamCancelled:
            self._cancel.cancel()
        except Exception:
            self._stop_status()
            self._renderer.abort()
            raise
        self._stop_status()

        if self._cancel.cancelled:
            self._renderer.abort()
            self._log(
                logging.WARNING,
                "Turn cancelled",
                log_ctx,
                discarded_chars=sum(len(p) for p in pieces),
            )
            return None

        self._renderer.end_turn()
        message = ChatMessage(role=role or "assistant", content="".join(pieces))  # type: ignore[arg-type]
        self._state.commit_turn(message)
        self._log(
            logging.INFO,
            "Completed turn",
            log_ctx,
            role=message.role,
            content_chars=len(message.content),
            history_length=len(self._state.history(author)),
            next_index=self._state.active,
            elapsed_seconds=round(time.time() - start_time, 2),
        )
        return message

    def _stop_status(self) -> None:
        if self._status is not None:
            self._status.stop_and_clear()

    @staticmethod
    def _log(level: int, message: str, log_ctx: Dict[str, Any], **fields: Any) -> None:
        payload = dict(log_ctx)
        payload.update(fields)
        logger.log(level, message, extra={"extra": payload})
