"""Call Automation webhook endpoints."""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse, Response

from app.core.dependencies import get_controller
from app.services.call_session.controller import CallSessionController
from app.services.telephony.events import CallEvent, EventGridEvent

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/incomingCall")
async def handle_incoming_call(
    request: Request,
    events: List[EventGridEvent],
    controller: CallSessionController = Depends(get_controller),
):
    """
    Handle Event Grid deliveries for incoming calls.

    A subscription-validation event is echoed back immediately; every
    IncomingCall event is answered.
    """
    logger.info(
        f"[INCOMING CALL] Received {len(events)} event(s) - "
        f"Client: {request.client.host if request.client else 'unknown'}"
    )

    for event in events:
        try:
            validation = await controller.handle_incoming_call(event)
        except Exception as e:
            logger.error(
                f"[INCOMING CALL] Error answering call - EventId: {event.id}, "
                f"Error: {type(e).__name__}: {str(e)}",
                exc_info=True,
            )
            raise HTTPException(status_code=500, detail=f"Error answering call: {str(e)}")

        if validation is not None:
            return JSONResponse(content=validation)

    return Response(content="OK", media_type="text/plain")


@router.post("/callbacks/{context_id}")
async def handle_callback(
    context_id: str,
    events: List[CallEvent],
    caller_id: str = Query(..., alias="callerId"),
    controller: CallSessionController = Depends(get_controller),
):
    """
    Handle Call Automation callback events for one call.

    Every event is acknowledged; a failure while handling one event is
    logged and the session waits for its next event.
    """
    for event in events:
        logger.debug(
            f"[CALLBACK] Event {event.type} - Context: {context_id}, Caller: {caller_id}"
        )
        try:
            await controller.dispatch(event, correlation_id=context_id)
        except Exception as e:
            logger.error(
                f"[CALLBACK] Error handling {event.type} - Context: {context_id}, "
                f"ConnectionId: {event.connection_id}, Error: {type(e).__name__}: {str(e)}",
                exc_info=True,
            )

    # Always acknowledge so the service does not redeliver
    return Response(content="OK", media_type="text/plain")
