"""配置层：进程设置（settings）与模型列表（model_config）。"""
