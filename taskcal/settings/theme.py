from taskcal.core.config import load_config
from taskcal.observability.logger import log_event
from taskcal.storage.store import get_store


THEME_KEY = "theme-dark"


def get_theme() -> bool:
    """Stored dark-mode flag, falling back to THEME_DEFAULT_DARK when unset."""
    stored = get_store().get(THEME_KEY)
    if isinstance(stored, bool):
        return stored
    return load_config().theme_default_dark


def set_theme(is_dark: bool) -> bool:
    get_store().set(THEME_KEY, bool(is_dark))
    log_event("updated", THEME_KEY, is_dark=bool(is_dark))
    return bool(is_dark)


def toggle_theme() -> bool:
    return set_theme(not get_theme())
