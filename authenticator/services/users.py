from datetime import datetime, timezone
import logging
from typing import Optional, Protocol

from sqlalchemy import select

from authenticator.database import session_scope
from authenticator.models.user import UserEntry
from authenticator.schemas.users import UserResponse

LOGGER = logging.getLogger(__name__)


class DirectoryError(ValueError):
    pass


class UserNotFound(DirectoryError):
    pass


class DuplicateEmail(DirectoryError):
    pass


class DuplicatePhone(DirectoryError):
    pass


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class UserDirectory(Protocol):
    def find_by_phone(self, phone: str) -> Optional[UserResponse]:
        ...

    def find_by_email(self, email: str) -> Optional[UserResponse]:
        ...

    def create(
        self, name: str, email: str, phone: str, totp_secret: str
    ) -> UserResponse:
        ...

    def get_totp_secret(self, user: UserResponse) -> Optional[str]:
        ...


class SqlUserDirectory:
    def __init__(self, session_factory=None) -> None:
        self._session_factory = session_factory

    def find_by_phone(self, phone: str) -> Optional[UserResponse]:
        with session_scope(self._session_factory) as session:
            entry = session.execute(
                select(UserEntry).where(UserEntry.phone == phone.strip())
            ).scalar_one_or_none()
            return self._to_response(entry) if entry else None

    def find_by_email(self, email: str) -> Optional[UserResponse]:
        with session_scope(self._session_factory) as session:
            entry = session.execute(
                select(UserEntry).where(UserEntry.email == _normalize_email(email))
            ).scalar_one_or_none()
            return self._to_response(entry) if entry else None

    def create(
        self, name: str, email: str, phone: str, totp_secret: str
    ) -> UserResponse:
        email = _normalize_email(email)
        phone = phone.strip()
        with session_scope(self._session_factory) as session:
            existing = session.execute(
                select(UserEntry).where(UserEntry.email == email)
            ).scalar_one_or_none()
            if existing:
                raise DuplicateEmail("Email already in use")
            existing_phone = session.execute(
                select(UserEntry).where(UserEntry.phone == phone)
            ).scalar_one_or_none()
            if existing_phone:
                raise DuplicatePhone("Phone number already in use")

            entry = UserEntry(
                name=name.strip(),
                email=email,
                phone=phone,
                totp_secret=totp_secret,
                created_at=datetime.now(timezone.utc),
            )
            session.add(entry)
            session.flush()
            LOGGER.info("Created user id=%s phone=%s", entry.id, phone)
            return self._to_response(entry)

    def get_totp_secret(self, user: UserResponse) -> Optional[str]:
        with session_scope(self._session_factory) as session:
            entry = session.get(UserEntry, user.id)
            if entry is None:
                raise UserNotFound("User not found")
            return entry.totp_secret or None

    def _to_response(self, entry: UserEntry) -> UserResponse:
        return UserResponse(
            id=entry.id,
            name=entry.name,
            email=entry.email,
            phone=entry.phone,
            totp_enabled=bool(entry.totp_secret),
            created_at=entry.created_at,
        )
