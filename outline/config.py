from __future__ import annotations

from dataclasses import dataclass

from dotenv import load_dotenv

from utils.security_utils import get_env_variable


@dataclass(frozen=True)
class ReorderSettings:
    api_base_url: str = "http://localhost:5000"
    debounce_delay: float = 0.5
    success_display: float = 2.0
    manual_success_display: float = 1.0
    error_display: float = 3.0
    request_timeout: float | None = None  # None leaves it to the transport


def _float(name: str, default):
    value = get_env_variable(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError as e:
        raise ValueError(f"Environment variable {name} must be a number, got {value!r}") from e


def load_settings() -> ReorderSettings:
    """Read the client settings from the environment (and a .env file)."""
    load_dotenv()
    defaults = ReorderSettings()
    return ReorderSettings(
        api_base_url=get_env_variable("OUTLINE_API_URL", defaults.api_base_url).rstrip("/"),
        debounce_delay=_float("REORDER_DEBOUNCE_SECONDS", defaults.debounce_delay),
        success_display=_float("REORDER_SUCCESS_SECONDS", defaults.success_display),
        manual_success_display=_float("REORDER_MANUAL_SUCCESS_SECONDS", defaults.manual_success_display),
        error_display=_float("REORDER_ERROR_SECONDS", defaults.error_display),
        request_timeout=_float("OUTLINE_API_TIMEOUT", defaults.request_timeout),
    )
