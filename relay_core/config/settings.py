"""配置管理模块。

支持从环境变量（RELAY_ 前缀）、.env 以及 YAML 配置文件加载进程级配置。
模型列表不在这里，而是由 model_config.load_model_config 单独加载。
"""

import os
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)


def _settings_file() -> Path:
    """YAML 配置文件路径：RELAY_SETTINGS_FILE 优先，否则当前目录下的 relay.yaml。"""

    explicit = os.getenv("RELAY_SETTINGS_FILE")
    if explicit:
        return Path(explicit).expanduser()
    return Path.cwd() / "relay.yaml"


class Settings(BaseSettings):
    """配置设置（使用 Pydantic）。"""

    # ---- 服务端 ----
    host: str = Field(
        default="http://localhost:11434",
        description="Ollama 兼容服务地址，/api/chat 会拼接在其后",
    )
    http_timeout: float = Field(default=300.0, ge=1.0, description="HTTP 超时时间（秒）")

    # ---- 模型列表 ----
    models_config_path: Optional[str] = Field(
        default=None,
        description="模型配置文件路径（JSON/YAML），命令行 --config-path 优先",
    )

    # ---- 日志 ----
    log_dir: str = Field(default="logs", description="日志目录")
    log_level: str = Field(default="INFO", description="日志级别")
    log_redact_content: bool = Field(default=False, description="是否脱敏日志内容")

    model_config = SettingsConfigDict(
        env_prefix="RELAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("host")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        return v.upper()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=_settings_file()),
            file_secret_settings,
        )


settings = Settings()
