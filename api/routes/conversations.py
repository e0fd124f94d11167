"""Conversation inbox routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from api.auth.dependencies import CurrentUser, get_current_user
from api.models.api_models import (
    ConversationEnvelope,
    ConversationListResponse,
    ConversationResponse,
    ConversationStatusRequest,
    MessageCreateRequest,
    MessageResponse,
)
from api.responses import ERROR_RESPONSES
from api.services.conversation_service import ConversationService, ConversationThread
from api.services.reply_service import AutoReplyService, get_completer
from postboard.db.engine import get_session_dependency

router = APIRouter(prefix="/conversations", tags=["conversations"])


def get_conversation_service(
    session: Session = Depends(get_session_dependency),
) -> ConversationService:
    return ConversationService(session, auto_reply=AutoReplyService(get_completer()))


def thread_response(thread: ConversationThread) -> ConversationResponse:
    response = ConversationResponse.model_validate(thread.conversation)
    response.messages = [MessageResponse.model_validate(m) for m in thread.messages]
    return response


@router.get("", response_model=ConversationListResponse, responses=ERROR_RESPONSES)
def list_conversations(
    current_user: CurrentUser = Depends(get_current_user),
    service: ConversationService = Depends(get_conversation_service),
):
    """List the caller's conversations, most recently active first."""
    threads = service.list_conversations(current_user.user_id)
    return ConversationListResponse(conversations=[thread_response(t) for t in threads])


@router.get("/{conversation_id}", response_model=ConversationEnvelope, responses=ERROR_RESPONSES)
def get_conversation(
    conversation_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    service: ConversationService = Depends(get_conversation_service),
):
    thread = service.get_conversation(conversation_id, current_user.user_id)
    return ConversationEnvelope(conversation=thread_response(thread))


@router.post(
    "/{conversation_id}/messages",
    response_model=ConversationEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
def send_message(
    conversation_id: UUID,
    request: MessageCreateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: ConversationService = Depends(get_conversation_service),
):
    """Append an operator reply to the thread."""
    service.reply(conversation_id, current_user.user_id, request.text)
    thread = service.get_conversation(conversation_id, current_user.user_id)
    return ConversationEnvelope(conversation=thread_response(thread))


@router.put(
    "/{conversation_id}/status",
    response_model=ConversationEnvelope,
    responses=ERROR_RESPONSES,
)
def set_status(
    conversation_id: UUID,
    request: ConversationStatusRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: ConversationService = Depends(get_conversation_service),
):
    """Mark a conversation active, resolved or archived."""
    service.set_status(conversation_id, current_user.user_id, request.status)
    thread = service.get_conversation(conversation_id, current_user.user_id)
    return ConversationEnvelope(conversation=thread_response(thread))
