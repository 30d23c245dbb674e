from types import SimpleNamespace

import pytest

from nourishnote.core.config import Settings, cors_origins, validate_config
from nourishnote.core.database import get_database_url


def make_settings(**overrides):
    defaults = dict(ENV="development", CONFIG_STRICT=False, GROQ_API_KEY=None, CORS_ORIGINS="")
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


def test_missing_key_warns_when_not_strict(caplog):
    assert validate_config(strict=False, settings_obj=make_settings()) is True
    assert "GROQ_API_KEY" in caplog.text


def test_missing_key_raises_when_strict():
    with pytest.raises(RuntimeError):
        validate_config(strict=True, settings_obj=make_settings())


def test_strict_flag_read_from_settings():
    with pytest.raises(RuntimeError):
        validate_config(settings_obj=make_settings(CONFIG_STRICT=True))


def test_complete_config_passes():
    assert validate_config(strict=True, settings_obj=make_settings(GROQ_API_KEY="gsk_test"))


def test_cors_origins_split():
    cfg = make_settings(CORS_ORIGINS="http://a.test, http://b.test ,")
    assert cors_origins(cfg) == ["http://a.test", "http://b.test"]


def test_defaults(monkeypatch):
    for key in ("DATABASE_URL", "MAX_ENTRY_CHARS", "LLM_MODEL"):
        monkeypatch.delenv(key, raising=False)
    cfg = Settings(_env_file=None)
    assert cfg.DATABASE_URL.startswith("sqlite")
    assert cfg.MAX_ENTRY_CHARS == 10000
    assert cfg.LLM_MODEL == "llama-3.1-8b-instant"


def test_test_database_url_takes_precedence(monkeypatch):
    monkeypatch.setenv("TEST_DATABASE_URL", "sqlite+pysqlite:///./test.db")
    assert get_database_url() == "sqlite+pysqlite:///./test.db"
