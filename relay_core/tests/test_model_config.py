import json

import pytest

from relay_core.config.model_config import ModelRecord, load_model_config
from relay_core.domain.exceptions import ConfigError


def test_load_json_list(tmp_path):
    path = tmp_path / "models.json"
    path.write_text(
        json.dumps(
            [
                {"name": "llama3", "description": "first"},
                {"name": "mistral", "description": "second"},
            ]
        ),
        encoding="utf-8",
    )
    models = load_model_config(path)
    assert models == [
        ModelRecord(name="llama3", description="first"),
        ModelRecord(name="mistral", description="second"),
    ]


def test_load_yaml_mapping(tmp_path):
    path = tmp_path / "models.yaml"
    path.write_text("models:\n  - name: qwen\n    description: solo\n", encoding="utf-8")
    assert [m.name for m in load_model_config(str(path))] == ["qwen"]


@pytest.mark.parametrize(
    "content",
    [
        "[]",
        '{"models": []}',
        '[{"name": "", "description": "d"}]',
        '[{"name": "m", "description": "   "}]',
        '[{"name": "m"}]',
    ],
)
def test_invalid_config(tmp_path, content):
    path = tmp_path / "models.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError) as exc:
        load_model_config(path)
    assert exc.value.code == "CONFIG_INVALID"


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError) as exc:
        load_model_config(tmp_path / "nope.json")
    assert exc.value.code == "CONFIG_UNREADABLE"


def test_missing_path():
    with pytest.raises(ConfigError) as exc:
        load_model_config(None)
    assert exc.value.code == "CONFIG_MISSING"


def test_unparseable_file(tmp_path):
    path = tmp_path / "models.json"
    path.write_text("[{", encoding="utf-8")
    with pytest.raises(ConfigError) as exc:
        load_model_config(path)
    assert exc.value.code == "CONFIG_PARSE_ERROR"
