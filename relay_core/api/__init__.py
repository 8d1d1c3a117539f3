"""对外服务：引擎装配与交互式会话循环。"""
