import json

import pytest

from relay_core import cli


def test_missing_config_is_fatal(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(["--config-path", str(tmp_path / "missing.json")])
    assert exc.value.code == 1
    assert "fatal:" in capsys.readouterr().err


def test_main_runs_session(tmp_path, monkeypatch):
    path = tmp_path / "models.json"
    path.write_text(json.dumps([{"name": "a", "description": "first"}]), encoding="utf-8")
    seen = {}

    def fake_session(engine, reader):
        seen["models"] = [m.name for m in engine.models]
        seen["reader"] = reader

    monkeypatch.setattr("relay_core.cli.run_chat_session", fake_session)
    assert cli.main(["-c", str(path), "--host", "http://other:11434"]) == 0
    assert seen["models"] == ["a"]
