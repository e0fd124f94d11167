"""Account registry: linked social platform accounts per user."""

from typing import Any, Optional
from uuid import UUID

from sqlmodel import Session

from api.exceptions import NotFoundError, ValidationError
from postboard.content.repository import SocialAccountRepository
from postboard.db.models import SocialAccount, SocialPlatform
from postboard.logging import get_logger

logger = get_logger(__name__)


def parse_platform(value: Any) -> SocialPlatform:
    try:
        return SocialPlatform(str(value).strip().lower())
    except ValueError:
        raise ValidationError(
            f"Unsupported platform: {value}",
            details={"field": "platform", "allowed": [p.value for p in SocialPlatform]},
        )


class AccountService:
    """Service for linking, disabling and removing platform accounts.

    Removing an account never touches posts; they keep the snapshot taken
    when they were authored.
    """

    def __init__(self, session: Session):
        self._session = session
        self._accounts = SocialAccountRepository(session)

    def list_accounts(self, user_id: UUID) -> list[SocialAccount]:
        return self._accounts.list_by_user(user_id)

    def get_account(self, account_id: UUID, user_id: UUID) -> SocialAccount:
        account = self._accounts.get_owned(account_id, user_id)
        if account is None:
            raise NotFoundError("Account not found")
        return account

    def create_account(self, user_id: UUID, descriptor: dict[str, Any]) -> SocialAccount:
        """Link a new platform account.

        Args:
            user_id: Owner of the account
            descriptor: platform, account_name, account_id and optional
                access_token, page_id, is_active

        Raises:
            ValidationError: Unknown platform or blank name/id
        """
        platform = parse_platform(descriptor.get("platform"))
        account_name = (descriptor.get("account_name") or "").strip()
        external_id = str(descriptor.get("account_id") or "").strip()
        if not account_name or not external_id:
            raise ValidationError(
                "accountName and accountId are required",
                details={"field": "accountName" if not account_name else "accountId"},
            )

        account = SocialAccount(
            user_id=user_id,
            platform=platform,
            account_name=account_name,
            account_id=external_id,
            access_token=descriptor.get("access_token") or None,
            page_id=descriptor.get("page_id") or None,
            is_active=descriptor.get("is_active", True),
        )
        account = self._accounts.add(account)
        logger.info(
            "account_linked",
            account_id=str(account.id),
            user_id=str(user_id),
            platform=platform.value,
        )
        return account

    def update_account(
        self,
        account_id: UUID,
        user_id: UUID,
        is_active: Optional[bool] = None,
        account_name: Optional[str] = None,
    ) -> SocialAccount:
        """Rename or enable/disable an account."""
        account = self.get_account(account_id, user_id)
        if account_name is not None:
            if not account_name.strip():
                raise ValidationError("accountName cannot be empty", details={"field": "accountName"})
            account.account_name = account_name.strip()
        if is_active is not None:
            account.is_active = is_active

        self._session.add(account)
        self._session.commit()
        self._session.refresh(account)
        logger.info("account_updated", account_id=str(account.id), is_active=account.is_active)
        return account

    def set_active(self, account_id: UUID, user_id: UUID, is_active: bool) -> SocialAccount:
        return self.update_account(account_id, user_id, is_active=is_active)

    def delete_account(self, account_id: UUID, user_id: UUID) -> None:
        account = self.get_account(account_id, user_id)
        self._accounts.delete(account)
        logger.info("account_deleted", account_id=str(account_id), user_id=str(user_id))
