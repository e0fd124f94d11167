"""Health check service for liveness and readiness checks.

Provides:
- Database connectivity check
- Row counts for the liveness payload
"""

import logging
from datetime import datetime

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from postboard.content.repository import (
    ConversationRepository,
    PostRepository,
    SocialAccountRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)


class HealthService:
    """Service for checking backend health."""

    def __init__(self, session: Session):
        self._session = session

    def check_database(self) -> bool:
        """Check database connectivity.

        Returns:
            True if database is accessible, False otherwise.
        """
        try:
            self._session.execute(text("SELECT 1")).fetchone()
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database health check failed: {e}")
            self._session.rollback()
            return False

    def get_status(self) -> dict:
        """Liveness payload: status, row counts and the current time.

        A database failure is reported as ``degraded`` with zero counts
        rather than an error, so the check itself stays up.
        """
        timestamp = datetime.utcnow().isoformat() + "Z"
        try:
            counts = {
                "users": UserRepository(self._session).count(),
                "posts": PostRepository(self._session).count(),
                "accounts": SocialAccountRepository(self._session).count(),
                "conversations": ConversationRepository(self._session).count(),
            }
            status = "ok"
        except SQLAlchemyError as e:
            logger.error(f"Health counts failed: {e}")
            self._session.rollback()
            counts = {"users": 0, "posts": 0, "accounts": 0, "conversations": 0}
            status = "degraded"

        return {"status": status, **counts, "timestamp": timestamp}
