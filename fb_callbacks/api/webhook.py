"""Facebook webhook endpoints.

GET  /{prefix}/{app_id}  subscription verification (`hub.*` query), echoes
                         `hub.challenge` as plain text
POST /{prefix}/{app_id}  event notification signed with `X-Hub-Signature`,
                         verified on the raw body and passed to the
                         registered webhook callback
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from fb_callbacks.api.dependencies import (
    AppIdPath,
    get_correlation_id,
    get_webhook_dispatcher,
    raw_header,
    read_body,
)
from fb_callbacks.constants import SIGNATURE_HEADER_NAME
from fb_callbacks.services.dispatcher import WebhookDispatcher

logger = logging.getLogger(__name__)
router = APIRouter()

Dispatcher = Annotated[WebhookDispatcher, Depends(get_webhook_dispatcher)]


@router.get("/{app_id}", response_class=PlainTextResponse)
async def verify_webhook(app_id: AppIdPath, request: Request, dispatcher: Dispatcher):
    """Facebook webhook verification endpoint."""
    result = await dispatcher.verify_subscription(app_id, request.query_params)
    if result.status_code == 200:
        logger.info("Webhook verified successfully")
    else:
        logger.warning("Webhook verification failed")
    return PlainTextResponse(result.body, status_code=result.status_code)


@router.post("/{app_id}", response_class=PlainTextResponse)
async def handle_webhook(app_id: AppIdPath, request: Request, dispatcher: Dispatcher):
    """Handle incoming Facebook webhook event notifications."""
    body = await read_body(request, dispatcher.max_body_bytes)
    result = await dispatcher.pass_back(
        app_id,
        raw_header(request, SIGNATURE_HEADER_NAME),
        body,
        correlation_id=get_correlation_id(request),
    )
    return PlainTextResponse(result.body, status_code=result.status_code)
