"""统一的对话与流式响应数据模型。

本模块定义了会话引擎与 Provider 之间共享的标准数据结构：

- ChatMessage: 一条对话消息（system/user/assistant），写入历史后不可变。
- ChatRequest: 发给 /api/chat 的完整请求。
- ChatStreamChunk: NDJSON 响应中解码出的一行（一个 ResponseUnit）。

Provider 适配器只依赖这些模型，并负责在 JSON 与模型之间做转换。
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional, Sequence, get_args


# 消息角色类型（与 Ollama /api/chat 的 role 字段对应）
Role = Literal["system", "user", "assistant"]
ROLES: tuple = get_args(Role)


@dataclass(frozen=True)
class ChatMessage:
    """一条对话消息，既可用于请求，也可用于响应。"""

    role: Role
    content: str

    def to_payload(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}

    @classmethod
    def from_payload(cls, payload: Optional[Dict[str, Any]]) -> "ChatMessage":
        payload = payload or {}
        return cls(role=payload.get("role") or "", content=payload.get("content") or "")


@dataclass
class ChatRequest:
    """一次完整的聊天请求。stream 恒为 True。"""

    model: str
    messages: Sequence[ChatMessage]
    stream: bool = True

    def to_payload(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [m.to_payload() for m in self.messages],
            "stream": self.stream,
        }


@dataclass
class ChatTelemetry:
    """服务端返回的性能计数，仅透传用于日志。"""

    total_duration: int = 0
    load_duration: int = 0
    prompt_eval_count: int = 0
    prompt_eval_duration: int = 0
    eval_count: int = 0
    eval_duration: int = 0

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ChatTelemetry":
        return cls(
            total_duration=payload.get("total_duration") or 0,
            load_duration=payload.get("load_duration") or 0,
            prompt_eval_count=payload.get("prompt_eval_count") or 0,
            prompt_eval_duration=payload.get("prompt_eval_duration") or 0,
            eval_count=payload.get("eval_count") or 0,
            eval_duration=payload.get("eval_duration") or 0,
        )

    def as_dict(self) -> Dict[str, int]:
        return {
            "total_duration": self.total_duration,
            "load_duration": self.load_duration,
            "prompt_eval_count": self.prompt_eval_count,
            "prompt_eval_duration": self.prompt_eval_duration,
            "eval_count": self.eval_count,
            "eval_duration": self.eval_duration,
        }


@dataclass
class ChatStreamChunk:
    """流式对话的单个增量。

    - message.content 是本次增量文本，message.role 为服务端声明的角色。
    - done=True 表示本轮回答的最后一个单元。
    - raw: 原始响应 JSON，用于调试或日志记录。
    """

    model: str
    message: ChatMessage
    done: bool = False
    created_at: str = ""
    telemetry: ChatTelemetry = field(default_factory=ChatTelemetry)
    raw: Optional[dict] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ChatStreamChunk":
        return cls(
            model=payload.get("model") or "",
            message=ChatMessage.from_payload(payload.get("message")),
            done=payload.get("done") is True,
            created_at=payload.get("created_at") or "",
            telemetry=ChatTelemetry.from_payload(payload),
            raw=payload,
        )

