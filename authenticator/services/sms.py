from __future__ import annotations

import base64
import logging
from typing import Protocol
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

LOGGER = logging.getLogger(__name__)

TWILIO_MESSAGES_ENDPOINT = (
    "https://api.twilio.com/2010-04-01/Accounts/{account_sid}/Messages.json"
)


class SmsSendError(RuntimeError):
    pass


class NotificationSender(Protocol):
    def send(self, phone: str, message: str) -> bool:
        """Attempt delivery once; True on provider acceptance."""
        ...


class TwilioSmsSender:
    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_phone: str,
        timeout: float = 10,
    ) -> None:
        self._account_sid = account_sid
        self._auth_token = auth_token
        self._from_phone = from_phone
        self._timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self._account_sid and self._auth_token and self._from_phone)

    def send(self, phone: str, message: str) -> bool:
        try:
            if not self.configured:
                raise SmsSendError("Twilio is not configured")
            self._deliver(self._message_request(phone, message))
        except SmsSendError as exc:
            LOGGER.error("SMS to=%s not delivered: %s", phone, exc)
            return False
        LOGGER.info("SMS to=%s accepted by Twilio", phone)
        return True

    def _message_request(self, to_phone: str, body: str) -> Request:
        credentials = f"{self._account_sid}:{self._auth_token}".encode("utf-8")
        form = {"To": to_phone, "From": self._from_phone, "Body": body}
        return Request(
            TWILIO_MESSAGES_ENDPOINT.format(account_sid=self._account_sid),
            data=urlencode(form).encode("utf-8"),
            headers={
                "Authorization": "Basic " + base64.b64encode(credentials).decode("ascii"),
                "Content-Type": "application/x-www-form-urlencoded",
            },
            method="POST",
        )

    def _deliver(self, request: Request) -> None:
        try:
            with urlopen(request, timeout=self._timeout) as response:
                response.read()
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="replace")
            raise SmsSendError(f"Twilio rejected the message: {detail}") from exc
        except URLError as exc:
            raise SmsSendError("Failed to reach Twilio API") from exc


def build_otp_message(brand: str, code: str, purpose: str, ttl_seconds: int) -> str:
    minutes = max(1, ttl_seconds // 60)
    purpose_label = "signup" if purpose == "signup" else "login"
    return (
        f"Your {brand} OTP for {purpose_label} is {code}."
        f" It expires in {minutes} minute(s)."
    )
