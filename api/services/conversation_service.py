"""Conversation store: message threads with external platform users.

A conversation is keyed by (owner user, external participant, platform).
Messages are append-only rows numbered by ``position``; appending always
bumps the conversation's ``updated_at``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from api.exceptions import ConflictError, NotFoundError, ValidationError
from api.services.reply_service import AutoReplyService
from postboard.config import AUTO_REPLY_HISTORY
from postboard.content.repository import ConversationRepository
from postboard.db.models import (
    Conversation,
    ConversationMessage,
    ConversationStatus,
    MessageDirection,
    SocialPlatform,
)
from postboard.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ConversationThread:
    """A conversation together with its messages in append order."""

    conversation: Conversation
    messages: list[ConversationMessage] = field(default_factory=list)


class ConversationService:
    """Service for conversation threads.

    Dashboard reads and operator actions are scoped by owner; webhook
    ingestion arrives with the owner already resolved from the receiving
    account.
    """

    MAX_APPEND_ATTEMPTS = 3

    def __init__(
        self,
        session: Session,
        auto_reply: Optional[AutoReplyService] = None,
        history_size: int = AUTO_REPLY_HISTORY,
    ):
        self._session = session
        self._conversations = ConversationRepository(session)
        self._auto_reply = auto_reply or AutoReplyService()
        self._history_size = history_size

    # =========================================================================
    # Reads
    # =========================================================================

    def list_conversations(self, user_id: UUID) -> list[ConversationThread]:
        """A user's threads, most recently updated first."""
        return [
            ConversationThread(conv, self._conversations.list_messages(conv.id))
            for conv in self._conversations.list_by_user(user_id)
        ]

    def get_conversation(self, conversation_id: UUID, user_id: UUID) -> ConversationThread:
        conversation = self._get_owned(conversation_id, user_id)
        return ConversationThread(
            conversation, self._conversations.list_messages(conversation.id)
        )

    # =========================================================================
    # Writes
    # =========================================================================

    def find_or_create(
        self, owner_user_id: UUID, external_user_id: str, platform: SocialPlatform
    ) -> Conversation:
        """Return the thread for this participant, creating it on first contact."""
        existing = self._conversations.find(owner_user_id, external_user_id, platform)
        if existing is not None:
            return existing

        conversation = Conversation(
            owner_user_id=owner_user_id,
            external_user_id=external_user_id,
            platform=platform,
            status=ConversationStatus.active,
            updated_at=datetime.utcnow(),
        )
        try:
            conversation = self._conversations.add(conversation)
        except IntegrityError:
            # Another request created it first
            self._session.rollback()
            existing = self._conversations.find(owner_user_id, external_user_id, platform)
            if existing is None:
                raise
            return existing

        logger.info(
            "conversation_created",
            conversation_id=str(conversation.id),
            platform=platform.value,
        )
        return conversation

    def append_message(
        self,
        conversation_id: UUID,
        text: str,
        direction: MessageDirection,
        external_message_id: Optional[str] = None,
    ) -> ConversationMessage:
        """Append a message at the end of a thread.

        Positions are unique per conversation; a concurrent append that
        takes the same position is retried at the next one.
        """
        for _ in range(self.MAX_APPEND_ATTEMPTS):
            conversation = self._conversations.get(conversation_id)
            if conversation is None:
                raise NotFoundError("Conversation not found")

            now = datetime.utcnow()
            message = ConversationMessage(
                conversation_id=conversation_id,
                position=self._conversations.next_position(conversation_id),
                text=text,
                direction=direction,
                external_message_id=external_message_id,
                sent_at=now,
            )
            conversation.updated_at = now
            self._session.add(message)
            self._session.add(conversation)
            try:
                self._session.commit()
            except IntegrityError:
                self._session.rollback()
                continue

            self._session.refresh(message)
            return message

        raise ConflictError("Could not append message, please retry")

    def ingest_inbound(
        self,
        owner_user_id: UUID,
        external_user_id: str,
        platform: SocialPlatform,
        text: str,
        external_message_id: Optional[str] = None,
    ) -> ConversationThread:
        """Record an inbound message and append the auto-reply after it.

        The reply is built from the last few prior messages plus the new
        one. When the completer is missing or fails the fallback
        acknowledgement is appended instead.
        """
        conversation = self.find_or_create(owner_user_id, external_user_id, platform)
        history = self._conversations.list_messages(conversation.id, limit=self._history_size)

        self.append_message(
            conversation.id, text, MessageDirection.received, external_message_id
        )
        reply = self._auto_reply.generate(history, text)
        self.append_message(conversation.id, reply, MessageDirection.sent)

        logger.info(
            "inbound_message_ingested",
            conversation_id=str(conversation.id),
            platform=platform.value,
            history=len(history),
        )
        return ConversationThread(
            self._conversations.get(conversation.id),
            self._conversations.list_messages(conversation.id),
        )

    def reply(self, conversation_id: UUID, user_id: UUID, text: str) -> ConversationMessage:
        """Append an operator-written reply."""
        if not text or not text.strip():
            raise ValidationError("Message text is required", details={"field": "text"})
        conversation = self._get_owned(conversation_id, user_id)
        return self.append_message(conversation.id, text.strip(), MessageDirection.sent)

    def set_status(self, conversation_id: UUID, user_id: UUID, status: Any) -> Conversation:
        try:
            new_status = ConversationStatus(str(status).strip().lower())
        except ValueError:
            raise ValidationError(
                f"Invalid status: {status}",
                details={"field": "status", "allowed": [s.value for s in ConversationStatus]},
            )

        conversation = self._get_owned(conversation_id, user_id)
        conversation.status = new_status
        conversation.updated_at = datetime.utcnow()
        self._session.add(conversation)
        self._session.commit()
        self._session.refresh(conversation)
        logger.info(
            "conversation_status_changed",
            conversation_id=str(conversation.id),
            status=new_status.value,
        )
        return conversation

    def _get_owned(self, conversation_id: UUID, user_id: UUID) -> Conversation:
        conversation = self._conversations.get_owned(conversation_id, user_id)
        if conversation is None:
            raise NotFoundError("Conversation not found")
        return conversation
