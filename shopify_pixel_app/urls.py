from __future__ import annotations

from fastapi import Request

from shopify_pixel_app.config import Settings


def request_host(request: Request, settings: Settings) -> str:
    if settings.PUBLIC_HOSTNAME:
        return settings.PUBLIC_HOSTNAME
    return request.headers.get("host") or request.url.netloc


def public_base_url(request: Request, settings: Settings) -> str:
    """Externally visible base URL, honouring the deployment hostname override."""
    if settings.PUBLIC_HOSTNAME:
        return f"https://{settings.PUBLIC_HOSTNAME}"
    return f"{request.url.scheme}://{request_host(request, settings)}"


def secure_base_url(request: Request, settings: Settings) -> str:
    # Shopify's pixel sandbox only loads and posts to https origins.
    return f"https://{request_host(request, settings)}"
