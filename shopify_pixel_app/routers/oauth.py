from __future__ import annotations

import logging
import secrets
from datetime import datetime, timezone
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, status
from fastapi.responses import ORJSONResponse, RedirectResponse

from shopify_pixel_app.config import Settings, get_settings
from shopify_pixel_app.schemas import AccessTokenResult, OAuthErrorResponse
from shopify_pixel_app.shopify_api import ShopifyApiClient, ShopifyApiError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/shopify", tags=["shopify-oauth"])

INSTALL_SUCCESS_HEADER = "X-Shopify-Install-Success"


class MissingOAuthParameterError(ValueError):
    def __init__(self, missing: list[str]) -> None:
        super().__init__(f"Missing required OAuth callback params: {', '.join(missing)}")
        self.missing = missing


def get_shopify_api(settings: Settings = Depends(get_settings)) -> ShopifyApiClient:
    return ShopifyApiClient(settings)


def generate_oauth_state() -> str:
    return secrets.token_hex(16)


def build_authorize_url(*, shop_domain: str, state: str, settings: Settings) -> str:
    query = urlencode(
        {
            "client_id": settings.SHOPIFY_CLIENT_ID,
            "scope": settings.SHOPIFY_SCOPES,
            "redirect_uri": settings.redirect_uri,
            "state": state,
        }
    )
    return f"https://{shop_domain}/admin/oauth/authorize?{query}"


def _mask_token(token: str) -> str:
    if len(token) <= 10:
        return "***"
    return f"{token[:10]}..."


def _log_installation(*, shop_domain: str, result: AccessTokenResult) -> None:
    logger.info(
        "Shopify app installed",
        extra={
            "shop": shop_domain,
            "access_token": _mask_token(result.access_token),
            "scopes": result.scopes,
        },
    )
    user = result.associated_user
    if user is not None:
        logger.info(
            "Installed by associated user",
            extra={"shop": shop_domain, "user_name": user.display_name, "user_email": user.email},
        )


def _callback_error_response(exc: Exception) -> ORJSONResponse:
    body = OAuthErrorResponse(
        error="OAuth callback failed",
        message=str(exc),
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
    return ORJSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body.model_dump())


@router.get("/install/direct")
def install_direct(shop: str | None = None, settings: Settings = Depends(get_settings)):
    shop_domain = shop or settings.SHOPIFY_DEFAULT_SHOP
    state = generate_oauth_state()
    authorize_url = build_authorize_url(shop_domain=shop_domain, state=state, settings=settings)
    # State is not stored; the callback does not check it.
    logger.info(
        "Starting Shopify OAuth install",
        extra={"shop": shop_domain, "state": state, "authorize_url": authorize_url},
    )
    return RedirectResponse(url=authorize_url, status_code=status.HTTP_302_FOUND)


@router.get("/auth/callback")
async def auth_callback(
    code: str | None = None,
    shop: str | None = None,
    state: str | None = None,
    api_client: ShopifyApiClient = Depends(get_shopify_api),
):
    logger.info("Shopify OAuth callback received", extra={"shop": shop, "state": state})
    try:
        missing = [name for name, value in (("code", code), ("shop", shop)) if not value]
        if missing:
            raise MissingOAuthParameterError(missing)

        result = await api_client.exchange_code_for_access_token(shop_domain=shop, code=code)
    except (MissingOAuthParameterError, ShopifyApiError) as exc:
        logger.error("Shopify OAuth callback failed: %s", exc, extra={"shop": shop})
        return _callback_error_response(exc)

    _log_installation(shop_domain=shop, result=result)

    return RedirectResponse(
        url=f"https://{shop}/admin/apps",
        status_code=status.HTTP_302_FOUND,
        headers={INSTALL_SUCCESS_HEADER: "true"},
    )
