from relay_core.config.settings import Settings


def test_defaults_and_normalization():
    s = Settings(host="http://example:11434/", log_level="debug")
    assert s.host == "http://example:11434"
    assert s.log_level == "DEBUG"
    assert s.http_timeout >= 1.0


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("RELAY_HTTP_TIMEOUT", "42")
    monkeypatch.setenv("RELAY_MODELS_CONFIG_PATH", "models.json")
    s = Settings()
    assert s.http_timeout == 42.0
    assert s.models_config_path == "models.json"


def test_yaml_settings_file(monkeypatch, tmp_path):
    path = tmp_path / "relay.yaml"
    path.write_text("host: http://yaml-host:1234\n", encoding="utf-8")
    monkeypatch.setenv("RELAY_SETTINGS_FILE", str(path))
    monkeypatch.delenv("RELAY_HOST", raising=False)
    assert Settings().host == "http://yaml-host:1234"
