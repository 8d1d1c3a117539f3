"""LLM Provider 集成层。

该包下的模块负责：
- 定义 Provider 抽象接口 (base)。
- 提供具体实现 (ollama_client)。
"""

from typing import Optional

from relay_core.config.settings import settings
from relay_core.providers.base import ProviderClient
from relay_core.providers.ollama_client import OllamaClient


def create_provider(cfg=None, host: Optional[str] = None) -> ProviderClient:
    """根据配置创建 Provider 实例；host 非空时覆盖配置中的服务地址。"""

    cfg = cfg or settings
    if host:
        cfg = cfg.model_copy(update={"host": host.rstrip("/")})
    return OllamaClient(cfg)
