"""Platform webhook receiver.

Public routes called by Facebook, Instagram and WhatsApp:
- GET: subscription handshake, echoes ``hub.challenge`` when
  ``hub.verify_token`` matches WEBHOOK_VERIFY_TOKEN
- POST: inbound messages, acknowledged with 200 once the signature checks out
"""

import json
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool
from sqlmodel import Session

from api.services.account_service import parse_platform
from api.services.conversation_service import ConversationService
from api.services.reply_service import AutoReplyService, get_completer
from api.services.webhook_service import (
    SIGNATURE_HEADER,
    WebhookService,
    verify_signature,
    verify_subscription,
)
from postboard import config
from postboard.db.engine import get_session_dependency
from postboard.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


def get_webhook_service(session: Session = Depends(get_session_dependency)) -> WebhookService:
    conversations = ConversationService(session, auto_reply=AutoReplyService(get_completer()))
    return WebhookService(session, conversations)


@router.get("/{platform}", response_class=PlainTextResponse)
def verify_webhook(
    platform: str,
    mode: Optional[str] = Query(None, alias="hub.mode"),
    token: Optional[str] = Query(None, alias="hub.verify_token"),
    challenge: Optional[str] = Query(None, alias="hub.challenge"),
):
    parse_platform(platform)
    echoed = verify_subscription(mode, token, challenge, config.WEBHOOK_VERIFY_TOKEN)
    if echoed is None:
        logger.warning("webhook_verification_failed", platform=platform)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Verification failed")
    logger.info("webhook_verified", platform=platform)
    return PlainTextResponse(echoed)


@router.post("/{platform}")
async def receive_webhook(
    platform: str,
    request: Request,
    service: WebhookService = Depends(get_webhook_service),
) -> dict:
    """Acknowledge a delivery after ingesting its messages.

    When WEBHOOK_APP_SECRET is set, deliveries without a valid
    X-Hub-Signature-256 are refused with 403. Malformed bodies are logged
    and acknowledged, so the platform does not keep redelivering them.
    """
    target = parse_platform(platform)
    body = await request.body()
    if config.WEBHOOK_APP_SECRET and not verify_signature(
        body, request.headers.get(SIGNATURE_HEADER), config.WEBHOOK_APP_SECRET
    ):
        logger.warning("webhook_signature_rejected", platform=target.value)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid signature")

    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning("webhook_malformed_body", platform=target.value)
        return {"status": "ignored"}
    if not isinstance(payload, dict):
        return {"status": "ignored"}

    ingested = await run_in_threadpool(service.ingest, target, payload)
    return {"status": "ok", "received": ingested}
