from __future__ import annotations

from django.utils.cache import patch_vary_headers

from .theme import THEME_HINT_HEADER


class ColorSchemeHintMiddleware:
    """Ask browsers to send their colour scheme preference as a client hint."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)
        response["Accept-CH"] = THEME_HINT_HEADER
        # Chromium re-issues the first request with the hint attached.
        response["Critical-CH"] = THEME_HINT_HEADER
        patch_vary_headers(response, (THEME_HINT_HEADER,))
        return response
