from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
import hmac
import logging
import secrets
import threading
from typing import Iterator, Optional, Union

from authenticator.clock import Clock, SystemClock

LOGGER = logging.getLogger(__name__)

OTP_LENGTH = 6
OTP_MIN = 10 ** (OTP_LENGTH - 1)
OTP_MAX = 10**OTP_LENGTH - 1


class InvalidFormat(ValueError):
    pass


class OtpStatus(str, Enum):
    CONSUMED = "consumed"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    MISMATCH = "mismatch"
    # Reported by OtpManager.check only; the record is left in place.
    MATCHED = "matched"


@dataclass(frozen=True)
class OtpRecord:
    code: str
    expires_at: datetime


def validate_phone(phone: Optional[str]) -> str:
    if not phone or not phone.startswith("+"):
        raise InvalidFormat("Invalid phone format")
    return phone


def canonical_code(
    value: Union[str, int, None], length: int = OTP_LENGTH
) -> Optional[str]:
    """Normalize a submitted code to its fixed-width string form.

    ``482913`` and ``"482913"`` compare equal; anything that is not a
    non-negative integer of at most ``length`` digits has no canonical form.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = value
    else:
        cleaned = str(value).strip()
        if not (cleaned.isascii() and cleaned.isdigit()):
            return None
        if len(cleaned.lstrip("0")) > length:
            return None
        number = int(cleaned)
    if number < 0 or number >= 10**length:
        return None
    return str(number).zfill(length)


class OtpStore:
    """Mutex-guarded mapping of phone identifier to its live OtpRecord."""

    def __init__(self) -> None:
        self._records: dict[str, OtpRecord] = {}
        self._lock = threading.Lock()

    @contextmanager
    def locked(self) -> Iterator[dict[str, OtpRecord]]:
        with self._lock:
            yield self._records

    def purge_expired(self, now: datetime) -> int:
        with self._lock:
            expired = [
                phone
                for phone, record in self._records.items()
                if now >= record.expires_at
            ]
            for phone in expired:
                del self._records[phone]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class OtpManager:
    def __init__(
        self,
        store: OtpStore,
        clock: Optional[Clock] = None,
        ttl_seconds: int = 300,
    ) -> None:
        self._store = store
        self._clock = clock or SystemClock()
        self._ttl_seconds = ttl_seconds

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def issue(self, phone: str) -> str:
        validate_phone(phone)
        now = self._clock.now()
        purged = self._store.purge_expired(now)
        if purged:
            LOGGER.info("Purged %s expired OTP record(s)", purged)

        record = OtpRecord(
            code=self._generate_code(),
            expires_at=now + timedelta(seconds=self._ttl_seconds),
        )
        with self._store.locked() as records:
            replaced = phone in records
            records[phone] = record
        LOGGER.info(
            "Issued OTP phone=%s expires_at=%s replaced=%s outstanding=%s",
            phone,
            record.expires_at.isoformat(),
            replaced,
            len(self._store),
        )
        return record.code

    def verify(self, phone: str, submitted_code: Union[str, int, None]) -> OtpStatus:
        status = self._resolve(phone, submitted_code, consume=True)
        LOGGER.info("OTP verification phone=%s outcome=%s", phone, status.value)
        return status

    def check(self, phone: str, submitted_code: Union[str, int, None]) -> OtpStatus:
        """Evaluate a code without consuming it.

        Returns ``MATCHED`` instead of ``CONSUMED`` and keeps the record.
        An expired record is still removed.
        """
        return self._resolve(phone, submitted_code, consume=False)

    def _resolve(
        self, phone: str, submitted_code: Union[str, int, None], consume: bool
    ) -> OtpStatus:
        now = self._clock.now()
        submitted = canonical_code(submitted_code)
        with self._store.locked() as records:
            record = records.get(phone)
            if record is None:
                return OtpStatus.NOT_FOUND
            if now >= record.expires_at:
                del records[phone]
                return OtpStatus.EXPIRED
            if submitted is None or not hmac.compare_digest(record.code, submitted):
                return OtpStatus.MISMATCH
            if not consume:
                return OtpStatus.MATCHED
            del records[phone]
            return OtpStatus.CONSUMED

    def _generate_code(self) -> str:
        value = OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1)
        return str(value)
