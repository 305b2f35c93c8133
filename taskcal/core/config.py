import os
from typing import Literal, Optional

from pydantic import BaseModel


class AppConfig(BaseModel):
    data_dir: str = "data"
    event_store: str = "json"
    layout_strategy: Literal["local", "interval"] = "local"
    default_view: Literal["day", "week", "month"] = "week"
    min_event_height: int = 40
    theme_default_dark: bool = False
    api_key: Optional[str] = None
    obs_enabled: bool = False
    sentry_dsn: Optional[str] = None


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw and raw.isdigit():
        return int(raw)
    return default


def _choice_env(name: str, choices: tuple, default: str) -> str:
    value = os.getenv(name, default).lower()
    return value if value in choices else default


def load_config() -> AppConfig:
    return AppConfig(
        data_dir=os.getenv("DATA_DIR", "data"),
        event_store=os.getenv("EVENT_STORE", "json").lower(),
        layout_strategy=_choice_env("LAYOUT_STRATEGY", ("local", "interval"), "local"),
        default_view=_choice_env("DEFAULT_VIEW", ("day", "week", "month"), "week"),
        min_event_height=_int_env("MIN_EVENT_HEIGHT", 40),
        theme_default_dark=os.getenv("THEME_DEFAULT_DARK", "false").lower() == "true",
        api_key=os.getenv("API_KEY"),
        obs_enabled=os.getenv("OBS_ENABLED", "false").lower() == "true",
        sentry_dsn=os.getenv("SENTRY_DSN"),
    )
