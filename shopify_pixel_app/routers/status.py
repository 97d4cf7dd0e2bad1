from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request

from shopify_pixel_app.config import Settings, get_settings
from shopify_pixel_app.pixel_script import WEBHOOK_PATH
from shopify_pixel_app.urls import public_base_url

router = APIRouter(tags=["status"])


def _integration_snippet(server_url: str) -> str:
    return (
        "async function loadAndInit() {\n"
        "  try {\n"
        f'    const {{ init }} = await import("{server_url}/pixel-script?shop=YOUR_SHOP_ID");\n'
        "    init(analytics);\n"
        "  } catch (error) {\n"
        '    console.error("Error loading custom pixel:", error);\n'
        "  }\n"
        "}\n"
        "loadAndInit();"
    )


@router.get("/")
def index(settings: Settings = Depends(get_settings)) -> dict[str, Any]:
    return {
        "status": "healthy",
        "message": "Shopify Pixel Server",
        "endpoints": {
            "pixelScript": "/pixel-script?shop=YOUR_SHOP_ID",
            "webhook": WEBHOOK_PATH,
            "install": "/shopify/install/direct?shop=YOUR_SHOP.myshopify.com",
            "oauthCallback": "/shopify/auth/callback",
            "instructions": "/instructions",
        },
        "app": {
            "clientId": settings.SHOPIFY_CLIENT_ID,
            "scopes": settings.SHOPIFY_SCOPES.split(","),
            "redirectUri": settings.redirect_uri,
            "clientSecretConfigured": settings.has_client_secret,
        },
    }


@router.get("/instructions")
def instructions(request: Request, settings: Settings = Depends(get_settings)) -> dict[str, Any]:
    server_url = public_base_url(request, settings)
    return {
        "title": "How to use this Shopify Pixel Server",
        "steps": [
            f"1. Install the app into your shop: {server_url}/shopify/install/direct?shop=YOUR_SHOP.myshopify.com",
            "2. In your Shopify admin, go to Settings > Customer events > Web pixels",
            "3. Click 'Add custom pixel'",
            "4. Use this code in your pixel:",
            _integration_snippet(server_url),
            "5. Replace YOUR_SHOP_ID with your actual shop identifier",
            "6. Save and activate the pixel",
            "7. Events will be sent to the webhook and logged by this server",
        ],
        "webhookEndpoint": f"{server_url}{WEBHOOK_PATH}",
    }
