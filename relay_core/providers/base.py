"""Provider 抽象接口。

上层 ConversationEngine 不直接依赖具体服务的 HTTP 细节，而是依赖此协议：

- 每个服务实现一个 ProviderClient（如 OllamaClient）。
- 负责：将 ChatRequest 转成具体 API 请求，并把流式响应解析为 ChatStreamChunk。

这样测试可以用假的 Provider 替换真实网络调用。
"""

from typing import Iterable, Optional, Protocol

from relay_core.domain.models import ChatRequest, ChatStreamChunk
from relay_core.infrastructure.interrupts import CancelToken


class ProviderClient(Protocol):
    """LLM Provider 客户端协议。

    实现者需要提供：
    - name: Provider 名称，用于日志/统计。
    - chat_stream(req, cancel): 执行一次流式对话调用，逐步产出增量；
      cancel 被触发时应正常结束迭代而不是抛出异常。
    """

    name: str

    def chat_stream(self, req: ChatRequest, cancel: Optional[CancelToken] = None) -> Iterable[ChatStreamChunk]:
        ...
