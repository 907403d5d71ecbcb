import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv(override=True)


def _env_bool(name: str, default: bool = False) -> bool:
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_list(name: str, default: str) -> list[str]:
    raw_value = os.getenv(name, default)
    return [item.strip() for item in raw_value.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    app_name: str = os.getenv("APP_NAME", "REVA AI")
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./authenticator.db")
    otp_ttl_seconds: int = int(os.getenv("OTP_TTL_SECONDS", "300"))
    otp_debug: bool = _env_bool("OTP_DEBUG", False)
    totp_interval_seconds: int = int(os.getenv("TOTP_INTERVAL_SECONDS", "30"))
    totp_digits: int = int(os.getenv("TOTP_DIGITS", "6"))
    totp_valid_window: int = int(os.getenv("TOTP_VALID_WINDOW", "1"))
    totp_secret_length: int = int(os.getenv("TOTP_SECRET_LENGTH", "32"))
    twilio_account_sid: str = os.getenv("TWILIO_ACCOUNT_SID", "")
    twilio_auth_token: str = os.getenv("TWILIO_AUTH_TOKEN", "")
    twilio_phone_number: str = os.getenv(
        "TWILIO_PHONE_NUMBER", os.getenv("TWILIO_PHONE", "")
    )
    cors_origins: list[str] = field(
        default_factory=lambda: _env_list(
            "CORS_ORIGINS", "https://reva-ai-authenticator-frontend.vercel.app"
        )
    )
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
