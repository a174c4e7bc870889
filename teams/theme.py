"""Light/dark theme selection."""

from __future__ import annotations

from django.conf import settings
from django.http import HttpRequest

THEME_SESSION_KEY = "teams.theme"
THEME_HINT_HEADER = "Sec-CH-Prefers-Color-Scheme"
LIGHT = "light"
DARK = "dark"
AUTO = "auto"


def _configured_theme() -> str:
    value = (getattr(settings, "TEAMS_THEME", AUTO) or AUTO).strip().lower()
    return value if value in (LIGHT, DARK, AUTO) else AUTO


def resolve_theme(request: HttpRequest) -> str:
    """Return the session's theme, reading the ambient preference only once."""

    configured = _configured_theme()
    if configured != AUTO:
        return configured
    stored = request.session.get(THEME_SESSION_KEY)
    if stored in (LIGHT, DARK):
        return stored
    hint = request.headers.get(THEME_HINT_HEADER)
    if hint is None:
        # Not stored yet: a Critical-CH retry may still bring the hint.
        return LIGHT
    theme = DARK if hint.strip('" ').lower() == DARK else LIGHT
    request.session[THEME_SESSION_KEY] = theme
    return theme


def theme(request: HttpRequest) -> dict[str, str]:
    """Template context processor exposing ``theme``."""

    if not hasattr(request, "session"):
        return {"theme": LIGHT}
    return {"theme": resolve_theme(request)}
