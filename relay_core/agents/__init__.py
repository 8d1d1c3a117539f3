"""会话引擎：多模型轮转与角色反转。"""
