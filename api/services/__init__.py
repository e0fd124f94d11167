"""Service layer for the scheduling dashboard API.

Services own the business rules and raise api.exceptions errors; routes
only translate HTTP to service calls.
"""

from api.services.account_service import AccountService
from api.services.conversation_service import ConversationService, ConversationThread
from api.services.health_service import HealthService
from api.services.post_service import PostService
from api.services.publishing import PublishingService, Publisher, PublishResult
from api.services.reply_service import AutoReplyService, FALLBACK_REPLY, get_completer
from api.services.upload_service import StoredFile, UploadService

__all__ = [
    "AccountService",
    "AutoReplyService",
    "ConversationService",
    "ConversationThread",
    "FALLBACK_REPLY",
    "HealthService",
    "PostService",
    "PublishResult",
    "Publisher",
    "PublishingService",
    "StoredFile",
    "UploadService",
    "get_completer",
]
