"""领域层模型与协议。

包含：
- models: 统一的 ChatMessage / ChatRequest / ChatStreamChunk 模型。
- conversation: 多模型会话状态与角色反转。
- exceptions: 业务异常类型定义。
"""
