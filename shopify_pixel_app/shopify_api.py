from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError

from shopify_pixel_app.config import Settings, settings as default_settings
from shopify_pixel_app.schemas import AccessTokenResult


class ShopifyApiError(RuntimeError):
    def __init__(self, *, message: str) -> None:
        super().__init__(message)


class ShopifyApiClient:
    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or default_settings
        self._timeout = self._settings.SHOPIFY_REQUEST_TIMEOUT_SECONDS

    async def exchange_code_for_access_token(self, *, shop_domain: str, code: str) -> AccessTokenResult:
        url = f"https://{shop_domain}/admin/oauth/access_token"
        payload = {
            "client_id": self._settings.SHOPIFY_CLIENT_ID,
            "client_secret": self._settings.SHOPIFY_CLIENT_SECRET or "",
            "code": code,
        }
        response = await self._post_json(url=url, payload=payload)
        access_token = response.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise ShopifyApiError(message="OAuth token exchange response is missing access_token")
        try:
            return AccessTokenResult.model_validate(response)
        except ValidationError as exc:
            raise ShopifyApiError(message=f"OAuth token exchange response is malformed: {exc}") from exc

    async def _post_json(
        self,
        *,
        url: str,
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    url,
                    json=payload,
                    headers={"Content-Type": "application/json", "Accept": "application/json"},
                )
        except httpx.RequestError as exc:
            raise ShopifyApiError(message=f"Network error while calling Shopify: {exc}") from exc

        if not response.is_success:
            raise ShopifyApiError(
                message=f"Shopify API call failed ({response.status_code}): {response.text}",
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise ShopifyApiError(message="Shopify API returned invalid JSON") from exc

        if not isinstance(body, dict):
            raise ShopifyApiError(message="Shopify API response must be a JSON object")
        return body
