"""Rate limiting configuration.

The limiter is shared by every app, so the limit itself comes from the settings
of the app serving the current request. The request middleware binds those
settings with `bind_settings` before the route runs.
"""

from contextvars import ContextVar, Token

from slowapi import Limiter
from slowapi.util import get_remote_address

from webhook_monitor.config import Settings, get_settings

_current_settings: ContextVar[Settings | None] = ContextVar("rate_limit_settings", default=None)

limiter = Limiter(key_func=get_remote_address)


def bind_settings(settings: Settings) -> Token:
    return _current_settings.set(settings)


def unbind_settings(token: Token) -> None:
    _current_settings.reset(token)


def current_settings() -> Settings:
    return _current_settings.get() or get_settings()


def get_rate_limit_string() -> str:
    """Current /api rate limit, read on each request."""
    return current_settings().rate_limit


def rate_limit_exempt() -> bool:
    return not current_settings().rate_limit_enabled
