from core.config import Settings


def test_unknown_log_level_falls_back_to_info(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    assert Settings.from_env().log_level == "INFO"


def test_log_level_is_case_insensitive(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", " debug ")
    assert Settings.from_env().log_level == "DEBUG"


def test_bad_numbers_use_defaults(monkeypatch):
    monkeypatch.setenv("VIDEO_RETRIES", "three")
    monkeypatch.setenv("VIDEO_STATUS_TIMEOUT", "soon")

    settings = Settings.from_env()

    assert settings.max_attempts == 3
    assert settings.status_timeout == 30.0
