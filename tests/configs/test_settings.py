import pytest

from configs.settings import Settings, get_settings


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_notification_defaults():
    settings = Settings(_env_file=None)

    assert settings.NOTIFICATION_LIMIT == 50
    assert settings.CERT_EXPIRY_WINDOW_DAYS == 30
    assert settings.TRAINING_DUE_WINDOW_DAYS == 7
    assert settings.ASSESSMENT_STALE_DAYS == 30
    assert settings.NOTIFICATION_TTL_SECONDS == 60 * 60 * 24 * 90


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("CERT_EXPIRY_WINDOW_DAYS", "45")
    monkeypatch.setenv("NOTIFICATION_KEY_PREFIX", "staging")

    settings = get_settings()

    assert settings.CERT_EXPIRY_WINDOW_DAYS == 45
    assert settings.NOTIFICATION_KEY_PREFIX == "staging"


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
