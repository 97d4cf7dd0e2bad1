from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from shopify_pixel_app.config import Settings, get_settings, settings as default_settings
from shopify_pixel_app.log_config import configure_logging
from shopify_pixel_app.pixel_script import WEBHOOK_PATH
from shopify_pixel_app.routers import oauth, pixel, status

logger = logging.getLogger(__name__)


def log_startup_summary(settings: Settings) -> None:
    logger.info(
        "Shopify OAuth config",
        extra={"client_id": settings.SHOPIFY_CLIENT_ID, "redirect_uri": settings.redirect_uri},
    )
    if not settings.has_client_secret:
        logger.warning(
            "SHOPIFY_CLIENT_SECRET is not set; OAuth callbacks will fail at the token exchange"
        )

    local_url = f"http://localhost:{settings.PORT}"
    logger.info("Shopify Pixel Server running on %s", local_url)
    logger.info("Pixel script URL: %s/pixel-script?shop=YOUR_SHOP_ID", local_url)
    logger.info("Webhook URL: %s%s", local_url, WEBHOOK_PATH)
    logger.info("Instructions: %s/instructions", local_url)


def create_app(settings: Settings | None = None) -> FastAPI:
    app_settings = settings or default_settings

    @asynccontextmanager
    async def _app_lifespan(_app: FastAPI) -> AsyncIterator[None]:
        log_startup_summary(app_settings)
        yield

    app = FastAPI(
        title="Shopify Pixel Server",
        default_response_class=ORJSONResponse,
        lifespan=_app_lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept"],
    )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(_request: Request, exc: Exception) -> ORJSONResponse:
        logger.exception("Unhandled server exception", exc_info=exc)
        return ORJSONResponse(status_code=500, content={"detail": "Internal server error."})

    if settings is not None:
        app.dependency_overrides[get_settings] = lambda: settings

    app.include_router(status.router)
    app.include_router(pixel.router)
    app.include_router(oauth.router)
    return app


configure_logging(default_settings.LOG_LEVEL, default_settings.LOG_FORMAT)
app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run(
        "shopify_pixel_app.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        log_level=default_settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
