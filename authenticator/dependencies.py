from functools import lru_cache

from authenticator.clock import SystemClock
from authenticator.config import settings
from authenticator.services.auth import AuthService
from authenticator.services.otp import OtpManager, OtpStore
from authenticator.services.sms import TwilioSmsSender
from authenticator.services.totp import PyOtpAlgorithm, TotpService
from authenticator.services.users import SqlUserDirectory


@lru_cache
def get_otp_manager() -> OtpManager:
    return OtpManager(
        OtpStore(),
        clock=SystemClock(),
        ttl_seconds=settings.otp_ttl_seconds,
    )


@lru_cache
def get_totp_service() -> TotpService:
    algorithm = PyOtpAlgorithm(
        interval=settings.totp_interval_seconds,
        digits=settings.totp_digits,
    )
    return TotpService(
        algorithm,
        clock=SystemClock(),
        valid_window=settings.totp_valid_window,
        secret_length=settings.totp_secret_length,
    )


@lru_cache
def get_auth_service() -> AuthService:
    sender = TwilioSmsSender(
        settings.twilio_account_sid,
        settings.twilio_auth_token,
        settings.twilio_phone_number,
    )
    return AuthService(
        get_otp_manager(),
        get_totp_service(),
        SqlUserDirectory(),
        sender,
        brand=settings.app_name,
    )
