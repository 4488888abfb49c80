from pathlib import Path

from core.config import AppConfig, get_config


def test_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    config = get_config()

    assert config.database_url.startswith("sqlite:///")
    assert config.database_url.endswith("/database/compliance_engine.db")
    assert config.requirement_catalog_path is None
    assert config.fetch_max_workers == 4
    assert config.narrative.enabled is False
    assert config.narrative.timeout_seconds == 20.0


def test_environment_overrides(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    db_url = f"sqlite:///{tmp_path / 'records.db'}"
    monkeypatch.setenv("DATABASE_URL", db_url)
    monkeypatch.setenv("REQUIREMENT_CATALOG_PATH", str(tmp_path / "catalog.json"))
    monkeypatch.setenv("FETCH_MAX_WORKERS", "2")
    monkeypatch.setenv("NARRATIVE_ENABLED", "true")
    monkeypatch.setenv("NARRATIVE_API_URL", "https://llm.example/v1")
    monkeypatch.setenv("NARRATIVE_TIMEOUT_SECONDS", "2.5")

    config = AppConfig()

    assert config.database_url == db_url
    assert config.requirement_catalog_path == Path(tmp_path / "catalog.json")
    assert config.fetch_max_workers == 2
    assert config.narrative.enabled is True
    assert config.narrative.api_url == "https://llm.example/v1"
    assert config.narrative.timeout_seconds == 2.5


def test_legacy_database_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("COMPLIANCE_ENGINE_DB_PATH", str(tmp_path / "legacy.db"))

    assert AppConfig().database_url == f"sqlite:///{(tmp_path / 'legacy.db').as_posix()}"


def test_blank_catalog_path_means_default(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("REQUIREMENT_CATALOG_PATH", "  ")

    assert AppConfig().requirement_catalog_path is None


def test_get_config_is_cached():
    assert get_config() is get_config()
