"""
Time-based one-time passcodes for second-factor checks.

Codes follow RFC 6238: HMAC-SHA1 over the current time-step of a shared
base32 secret. The HMAC routine itself sits behind ``TotpAlgorithm`` so
the service only deals with secrets, windows and the clock.
"""

from datetime import datetime
import hmac
import logging
from typing import Optional, Protocol, Union

import pyotp

from authenticator.clock import Clock, SystemClock

LOGGER = logging.getLogger(__name__)


def _submitted_code(value: Union[str, int, None], digits: int) -> Optional[str]:
    # Exact width; "12345" is not "012345".
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int) and not 0 <= value < 10**digits:
        return None
    cleaned = str(value).strip()
    if len(cleaned) != digits or not (cleaned.isascii() and cleaned.isdigit()):
        return None
    return cleaned


class InvalidSecret(ValueError):
    pass


class TotpAlgorithm(Protocol):
    interval: int
    digits: int

    def random_secret(self, length: int) -> str:
        ...

    def code_at(self, secret: str, for_time: datetime, step_offset: int = 0) -> str:
        """Return the code for the time-step of ``for_time`` shifted by ``step_offset``.

        Raises:
            InvalidSecret: If ``secret`` is not valid base32.
        """
        ...

    def provisioning_uri(self, secret: str, account_name: str, issuer: str) -> str:
        ...


class PyOtpAlgorithm:
    def __init__(self, interval: int = 30, digits: int = 6) -> None:
        self.interval = interval
        self.digits = digits

    def random_secret(self, length: int) -> str:
        return pyotp.random_base32(length=length)

    def code_at(self, secret: str, for_time: datetime, step_offset: int = 0) -> str:
        totp = self._totp(secret)
        try:
            return totp.at(for_time, counter_offset=step_offset)
        except ValueError as exc:
            LOGGER.warning("Rejected malformed TOTP secret")
            raise InvalidSecret("TOTP secret is not valid base32") from exc

    def provisioning_uri(self, secret: str, account_name: str, issuer: str) -> str:
        return self._totp(secret).provisioning_uri(name=account_name, issuer_name=issuer)

    def _totp(self, secret: str) -> pyotp.TOTP:
        return pyotp.TOTP(secret, digits=self.digits, interval=self.interval)


class TotpService:
    def __init__(
        self,
        algorithm: Optional[TotpAlgorithm] = None,
        clock: Optional[Clock] = None,
        valid_window: int = 1,
        secret_length: int = 32,
    ) -> None:
        self._algorithm = algorithm or PyOtpAlgorithm()
        self._clock = clock or SystemClock()
        self._valid_window = valid_window
        self._secret_length = secret_length

    @property
    def interval(self) -> int:
        return self._algorithm.interval

    def generate_secret(self) -> str:
        return self._algorithm.random_secret(self._secret_length)

    def validate(self, secret: Optional[str], submitted_code: Union[str, int, None]) -> bool:
        """Check a submitted code against the current window of ``secret``.

        An empty secret is never valid; callers are expected to report
        "not configured" before getting here. A malformed secret raises
        ``InvalidSecret``.
        """
        if not secret:
            return False
        submitted = _submitted_code(submitted_code, self._algorithm.digits)
        now = self._clock.now()
        for offset in range(-self._valid_window, self._valid_window + 1):
            expected = self._algorithm.code_at(secret, now, offset)
            if submitted is not None and hmac.compare_digest(expected, submitted):
                return True
        return False

    def current_code(self, secret: str) -> str:
        if not secret:
            raise InvalidSecret("TOTP secret is empty")
        return self._algorithm.code_at(secret, self._clock.now())

    def seconds_remaining(self) -> int:
        timestamp = int(self._clock.now().timestamp())
        return self.interval - timestamp % self.interval

    def provisioning_uri(self, secret: str, account_name: str, issuer: str) -> str:
        return self._algorithm.provisioning_uri(secret, account_name, issuer)
