"""模型列表配置。

配置文件是一个有序的模型列表（JSON 或 YAML 均可）::

    [
      {"name": "llama3", "description": "first speaker"},
      {"name": "mistral", "description": "second speaker"}
    ]

也接受 ``{"models": [...]}`` 形式。列表顺序即轮转顺序，下标 0 先发言。
任何问题（缺失、不可读、解析失败、校验失败）都抛出 ConfigError，由 CLI 终止进程。
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from relay_core.domain.exceptions import ConfigError


class ModelRecord(BaseModel):
    """单个模型的配置。name 即 /api/chat 请求中的 model 字段。"""

    name: str = Field(min_length=1)
    description: str = Field(min_length=1)

    @field_validator("name", "description")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("cannot be empty")
        return v


_MODELS_ADAPTER = TypeAdapter(List[ModelRecord])


def load_model_config(path: Optional[str | Path]) -> List[ModelRecord]:
    if not path:
        raise ConfigError(code="CONFIG_MISSING", message="config path is required (--config-path)")
    file_path = Path(path).expanduser()
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(code="CONFIG_UNREADABLE", message=f"could not open config file: {exc}")

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(code="CONFIG_PARSE_ERROR", message=f"could not parse config file: {exc}")

    return validate_models(data)


def validate_models(data) -> List[ModelRecord]:
    """校验已解析的配置数据，返回非空的 ModelRecord 列表。"""

    if isinstance(data, dict):
        data = data.get("models")
    if not data:
        raise ConfigError(code="CONFIG_INVALID", message="config validation failed: models cannot be empty")
    try:
        return _MODELS_ADAPTER.validate_python(data)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        where = ".".join(str(p) for p in first.get("loc", ()))
        raise ConfigError(
            code="CONFIG_INVALID",
            message=f"config validation failed: {where}: {first.get('msg')}",
        )
