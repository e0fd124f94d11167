"""Inbound platform webhooks: subscription handshake and message ingestion.

Provides:
- Verify-token challenge check for webhook subscription
- Payload parsing for Messenger/Instagram and WhatsApp Cloud shapes
- Routing each inbound message to the owning user's conversation
"""

import hashlib
import hmac
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from api.exceptions import PostboardException
from api.services.conversation_service import ConversationService
from postboard.content.repository import SocialAccountRepository
from postboard.db.models import SocialPlatform
from postboard.logging import get_logger

logger = get_logger(__name__)


@dataclass
class InboundMessage:
    """One text message received by a linked account."""

    recipient_id: str  # page / business account that received it
    sender_id: str
    text: str
    message_id: Optional[str] = None


def verify_subscription(
    mode: Optional[str],
    token: Optional[str],
    challenge: Optional[str],
    expected_token: str,
) -> Optional[str]:
    """Return the challenge to echo if the handshake is valid, else None."""
    if mode != "subscribe" or not token or not expected_token or challenge is None:
        return None
    if not hmac.compare_digest(token, expected_token):
        return None
    return challenge


SIGNATURE_HEADER = "X-Hub-Signature-256"


def verify_signature(body: bytes, signature: Optional[str], app_secret: str) -> bool:
    """Check Meta's ``sha256=<hex hmac of the raw body>`` delivery signature."""
    if not signature or not signature.startswith("sha256="):
        return False
    expected = hmac.new(app_secret.encode(), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(signature[len("sha256="):], expected)


def _dicts(items: Any) -> list[dict[str, Any]]:
    """The dict members of a JSON array; anything else in the payload is ignored."""
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]


def _field(obj: Any, key: str) -> Any:
    return obj.get(key) if isinstance(obj, dict) else None


def _parse_messaging_entries(payload: dict[str, Any]) -> list[InboundMessage]:
    """Messenger and Instagram: ``entry[].messaging[]`` events."""
    messages = []
    for entry in _dicts(payload.get("entry")):
        page_id = str(entry.get("id") or "")
        for event in _dicts(entry.get("messaging")):
            message = event.get("message")
            text = _field(message, "text")
            # Echoes are our own outbound messages
            if not isinstance(text, str) or not text or _field(message, "is_echo"):
                continue
            sender_id = str(_field(event.get("sender"), "id") or "")
            recipient_id = str(_field(event.get("recipient"), "id") or page_id)
            if not sender_id or not recipient_id:
                continue
            messages.append(
                InboundMessage(
                    recipient_id=recipient_id,
                    sender_id=sender_id,
                    text=text,
                    message_id=_field(message, "mid"),
                )
            )
    return messages


def _parse_whatsapp_entries(payload: dict[str, Any]) -> list[InboundMessage]:
    """WhatsApp Cloud API: ``entry[].changes[].value.messages[]``."""
    messages = []
    for entry in _dicts(payload.get("entry")):
        business_id = str(entry.get("id") or "")
        for change in _dicts(entry.get("changes")):
            value = change.get("value")
            phone_number_id = str(_field(_field(value, "metadata"), "phone_number_id") or "")
            for message in _dicts(_field(value, "messages")):
                if message.get("type", "text") != "text":
                    continue
                text = _field(message.get("text"), "body")
                sender_id = str(message.get("from") or "")
                if not isinstance(text, str) or not text or not sender_id:
                    continue
                messages.append(
                    InboundMessage(
                        recipient_id=phone_number_id or business_id,
                        sender_id=sender_id,
                        text=text,
                        message_id=message.get("id"),
                    )
                )
    return messages


def parse_inbound_messages(platform: SocialPlatform, payload: dict[str, Any]) -> list[InboundMessage]:
    if platform == SocialPlatform.whatsapp:
        return _parse_whatsapp_entries(payload)
    return _parse_messaging_entries(payload)


class WebhookService:
    """Ingests webhook deliveries into conversations."""

    def __init__(self, session: Session, conversation_service: ConversationService):
        self._accounts = SocialAccountRepository(session)
        self._session = session
        self._conversations = conversation_service

    def ingest(self, platform: SocialPlatform, payload: dict[str, Any]) -> int:
        """Record every inbound message in the payload.

        Messages for accounts nobody has linked are skipped. A failure on
        one message is logged and does not stop the rest, since the
        platform would otherwise redeliver the whole batch.

        Returns:
            Number of messages ingested
        """
        try:
            inbound = parse_inbound_messages(platform, payload)
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning("webhook_unparseable", platform=platform.value, error=str(e))
            return 0

        ingested = 0
        for message in inbound:
            account = self._accounts.find_by_platform_id(platform, message.recipient_id)
            if account is None:
                logger.warning(
                    "webhook_unknown_recipient",
                    platform=platform.value,
                    recipient_id=message.recipient_id,
                )
                continue

            try:
                self._conversations.ingest_inbound(
                    owner_user_id=account.user_id,
                    external_user_id=message.sender_id,
                    platform=platform,
                    text=message.text,
                    external_message_id=message.message_id,
                )
            except (PostboardException, SQLAlchemyError) as e:
                self._session.rollback()
                logger.error(
                    "webhook_ingest_failed",
                    platform=platform.value,
                    sender_id=message.sender_id,
                    error=str(e),
                )
                continue
            ingested += 1

        logger.info("webhook_processed", platform=platform.value, ingested=ingested)
        return ingested
