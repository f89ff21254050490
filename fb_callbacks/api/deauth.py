"""Facebook Login deauthorization callback endpoints.

GET  /{prefix}/{app_id}  URL check: 200 when the app secret resolves, else 500
POST /{prefix}/{app_id}  form field `signed_request`, verified and passed to
                         the registered deauthorization callback
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from fb_callbacks.api.dependencies import (
    AppIdPath,
    get_correlation_id,
    get_deauth_dispatcher,
    read_body,
)
from fb_callbacks.services.dispatcher import DeauthDispatcher

logger = logging.getLogger(__name__)
router = APIRouter()

Dispatcher = Annotated[DeauthDispatcher, Depends(get_deauth_dispatcher)]


@router.get("/{app_id}", response_class=PlainTextResponse)
async def check_app(app_id: AppIdPath, dispatcher: Dispatcher):
    """Deauthorization callback URL check."""
    result = await dispatcher.check_app(app_id)
    return PlainTextResponse(result.body, status_code=result.status_code)


@router.post("/{app_id}", response_class=PlainTextResponse)
async def deauthorize(app_id: AppIdPath, request: Request, dispatcher: Dispatcher):
    """Handle a user removing the app from their account."""
    body = await read_body(request, dispatcher.max_body_bytes)
    result = await dispatcher.pass_back(
        app_id, body, correlation_id=get_correlation_id(request)
    )
    if result.status_code != 200:
        logger.info("Deauthorization callback answered %s", result.status_code)
    return PlainTextResponse(result.body, status_code=result.status_code)
