"""Relay Core 顶层包。

该包提供一个终端聊天客户端的核心实现：流式调用 Ollama 兼容的
/api/chat 接口、在多个模型之间轮流转述对话（角色反转），
以及在终端里按单词增量换行地渲染输出。
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
