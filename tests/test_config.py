import pytest

from outline.config import ReorderSettings, load_settings

SETTING_VARS = (
    "OUTLINE_API_URL",
    "REORDER_DEBOUNCE_SECONDS",
    "REORDER_SUCCESS_SECONDS",
    "REORDER_MANUAL_SUCCESS_SECONDS",
    "REORDER_ERROR_SECONDS",
    "OUTLINE_API_TIMEOUT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in SETTING_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    assert load_settings() == ReorderSettings()


def test_values_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("OUTLINE_API_URL", "https://outline.example.com/")
    monkeypatch.setenv("REORDER_DEBOUNCE_SECONDS", "0.25")
    monkeypatch.setenv("OUTLINE_API_TIMEOUT", "10")

    settings = load_settings()
    assert settings.api_base_url == "https://outline.example.com"
    assert settings.debounce_delay == 0.25
    assert settings.request_timeout == 10.0
    assert settings.error_display == 3.0


def test_non_numeric_value_is_rejected(monkeypatch) -> None:
    monkeypatch.setenv("REORDER_ERROR_SECONDS", "soon")
    with pytest.raises(ValueError, match="REORDER_ERROR_SECONDS"):
        load_settings()
