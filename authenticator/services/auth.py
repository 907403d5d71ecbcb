"""
Signup/login flow built on the OTP manager, the TOTP service and the
user directory.

Directory writes only happen after an OTP has been consumed. If the write
fails the code is already gone and the caller has to request a new one;
there is no transaction spanning the OTP store and the directory.
"""

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Literal, Optional, Union

from authenticator.schemas.users import UserResponse
from authenticator.services.otp import OtpManager, OtpStatus, validate_phone
from authenticator.services.sms import NotificationSender, build_otp_message
from authenticator.services.totp import TotpService
from authenticator.services.users import (
    DirectoryError,
    DuplicatePhone,
    UserDirectory,
    UserNotFound,
)

LOGGER = logging.getLogger(__name__)

Purpose = Literal["signup", "login"]


class ProfileRequired(ValueError):
    pass


class TotpStatus(str, Enum):
    VALID = "valid"
    INVALID = "invalid"
    NOT_CONFIGURED = "not_configured"


@dataclass(frozen=True)
class IssuedOtp:
    code: str
    expires_in_seconds: int
    delivered: bool


@dataclass(frozen=True)
class OtpVerification:
    status: OtpStatus
    user: Optional[UserResponse] = None
    secret: Optional[str] = None
    provisioning_uri: Optional[str] = None

    @property
    def created(self) -> bool:
        return self.secret is not None


class AuthService:
    def __init__(
        self,
        otp_manager: OtpManager,
        totp_service: TotpService,
        directory: UserDirectory,
        sender: NotificationSender,
        brand: str = "REVA AI",
    ) -> None:
        self._otp = otp_manager
        self._totp = totp_service
        self._directory = directory
        self._sender = sender
        self._brand = brand

    def issue_otp(self, phone: str, purpose: Purpose = "login") -> IssuedOtp:
        validate_phone(phone)
        existing = self._directory.find_by_phone(phone)
        if purpose == "signup" and existing is not None:
            raise DuplicatePhone("Phone already registered. Login instead.")
        if purpose == "login" and existing is None:
            raise UserNotFound("Phone not registered. Signup first.")

        code = self._otp.issue(phone)
        message = build_otp_message(self._brand, code, purpose, self._otp.ttl_seconds)
        delivered = self._sender.send(phone, message)
        if not delivered:
            LOGGER.warning("OTP for phone=%s issued but not delivered", phone)
        return IssuedOtp(
            code=code,
            expires_in_seconds=self._otp.ttl_seconds,
            delivered=delivered,
        )

    def verify_otp(
        self,
        phone: str,
        code: Union[str, int, None],
        name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> OtpVerification:
        existing = self._directory.find_by_phone(phone) if phone else None
        if existing is None and (not name or not email):
            # A code that could never succeed is reported as such; a good
            # code survives the rejected request.
            pending = self._otp.check(phone, code)
            if pending is not OtpStatus.MATCHED:
                return OtpVerification(status=pending)
            raise ProfileRequired("Name and email required")

        status = self._otp.verify(phone, code)
        if status is not OtpStatus.CONSUMED:
            return OtpVerification(status=status)
        if existing is not None:
            return OtpVerification(status=status, user=existing)

        secret = self._totp.generate_secret()
        try:
            user = self._directory.create(name, email, phone, secret)
        except DirectoryError:
            LOGGER.error("Signup failed after OTP consumption phone=%s", phone)
            raise
        return OtpVerification(
            status=status,
            user=user,
            secret=secret,
            provisioning_uri=self._totp.provisioning_uri(secret, user.email, self._brand),
        )

    def verify_totp(
        self,
        code: Union[str, int, None],
        email: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> TotpStatus:
        secret = self._lookup_secret(email=email, phone=phone)
        if secret is None:
            return TotpStatus.NOT_CONFIGURED
        if self._totp.validate(secret, code):
            return TotpStatus.VALID
        return TotpStatus.INVALID

    def current_totp(
        self, email: Optional[str] = None, phone: Optional[str] = None
    ) -> Optional[str]:
        secret = self._lookup_secret(email=email, phone=phone)
        if secret is None:
            return None
        return self._totp.current_code(secret)

    def current_totp_expires_in(self) -> int:
        return self._totp.seconds_remaining()

    def get_secret(self, email: str) -> Optional[str]:
        return self._lookup_secret(email=email)

    def _lookup_secret(
        self, email: Optional[str] = None, phone: Optional[str] = None
    ) -> Optional[str]:
        if email:
            user = self._directory.find_by_email(email)
        elif phone:
            user = self._directory.find_by_phone(phone)
        else:
            user = None
        if user is None:
            return None
        secret = self._directory.get_totp_secret(user)
        if not secret:
            LOGGER.info("TOTP not configured for user id=%s", user.id)
            return None
        return secret
