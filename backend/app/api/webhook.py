from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from typing import Optional
import hmac
import json
import logging

from ..config import Settings, get_settings
from ..db import get_db
from ..services.gemini_client import GeminiClient
from ..services.inbound_processor import NO_MESSAGE_NOTE, InboundProcessor, parse_inbound
from ..services.whatsapp_client import WhatsAppClient

# Set up logger
logger = logging.getLogger(__name__)

router = APIRouter()

MAX_BODY_BYTES = 2 * 1024 * 1024


def build_processor(settings: Settings) -> InboundProcessor:
    return InboundProcessor(
        settings=settings,
        db=get_db(settings),
        messenger=WhatsAppClient(settings),
        llm=GeminiClient(settings),
    )


def _token_matches(token: Optional[str], expected: Optional[str]) -> bool:
    if not expected:
        return False
    return hmac.compare_digest((token or "").encode(), expected.encode())


@router.get("/webhook", response_class=PlainTextResponse)
async def verify_webhook(
    mode: Optional[str] = Query(default=None, alias="hub.mode"),
    token: Optional[str] = Query(default=None, alias="hub.verify_token"),
    challenge: Optional[str] = Query(default=None, alias="hub.challenge"),
    settings: Settings = Depends(get_settings),
):
    if mode == "subscribe" and _token_matches(token, settings.verify_token):
        logger.info("Webhook verified")
        return PlainTextResponse(challenge or "")
    logger.warning("Webhook verification failed")
    return PlainTextResponse("Forbidden", status_code=403)


def _too_large() -> JSONResponse:
    return JSONResponse({"ok": False, "error": "Payload Too Large"}, status_code=413)


@router.post("/webhook")
async def receive_webhook(request: Request, settings: Settings = Depends(get_settings)):
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > MAX_BODY_BYTES:
        return _too_large()

    # Chunked bodies carry no length; stop reading once past the cap.
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > MAX_BODY_BYTES:
            return _too_large()

    try:
        payload = json.loads(body.decode("utf-8")) if body else None
    except (UnicodeDecodeError, ValueError):
        logger.warning("Webhook body is not valid JSON; ignoring")
        payload = None

    try:
        message = parse_inbound(payload)
    except Exception:
        logger.exception("Webhook payload could not be parsed; ignoring")
        message = None
    if message is None:
        return {"ok": True, "note": NO_MESSAGE_NOTE}

    # Always 200 from here on so Meta doesn't redeliver forever.
    try:
        processor = build_processor(settings)
        await processor.handle(message)
    except Exception:
        logger.exception(f"Inbound processing failed for {message.phone}")
    return {"ok": True}
