from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import ORJSONResponse, Response

from shopify_pixel_app.config import Settings, get_settings
from shopify_pixel_app.pixel_script import WEBHOOK_PATH, render_pixel_script
from shopify_pixel_app.schemas import EventAcceptedResponse, EventEnvelope, EventRejectedResponse
from shopify_pixel_app.urls import secure_base_url

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pixel"])


@router.get("/pixel-script")
def pixel_script(
    request: Request,
    shop: str | None = None,
    settings: Settings = Depends(get_settings),
) -> Response:
    script = render_pixel_script(
        shop_id=shop,
        webhook_url=f"{secure_base_url(request, settings)}{WEBHOOK_PATH}",
    )
    return Response(
        content=script,
        media_type="application/javascript",
        headers={"Cache-Control": "no-cache"},
    )


@router.post(WEBHOOK_PATH, response_model=EventAcceptedResponse)
async def receive_pixel_event(envelope: EventEnvelope):
    try:
        logger.info(
            "Shopify event received",
            extra={
                "event_timestamp": envelope.timestamp,
                "shop": envelope.shop,
                "event_name": envelope.eventName,
                "customer_id": envelope.customerId,
                "client_id": envelope.clientId,
                "event_url": envelope.url,
                "user_agent": envelope.userAgent,
                "event_data": envelope.eventData,
            },
        )
        logger.debug("Full event payload: %s", json.dumps(envelope.model_dump(), indent=2, default=str))
    except Exception:
        logger.exception("Error processing pixel event")
        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=EventRejectedResponse().model_dump(),
        )

    return EventAcceptedResponse(eventName=envelope.eventName)
