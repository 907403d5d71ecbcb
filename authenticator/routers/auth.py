from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from authenticator.config import settings
from authenticator.dependencies import get_auth_service
from authenticator.schemas.otp import (
    OtpRequest,
    OtpResponse,
    OtpVerifyRequest,
    OtpVerifyResponse,
)
from authenticator.schemas.totp import (
    CurrentTotpResponse,
    SecretResponse,
    TotpVerifyRequest,
    TotpVerifyResponse,
)
from authenticator.services.auth import AuthService, ProfileRequired, Purpose, TotpStatus
from authenticator.services.otp import InvalidFormat, OtpStatus
from authenticator.services.totp import InvalidSecret
from authenticator.services.users import DirectoryError

router = APIRouter(prefix="/auth", tags=["auth"])

OTP_FAILURE_DETAILS = {
    OtpStatus.NOT_FOUND: "OTP not found",
    OtpStatus.EXPIRED: "OTP expired",
    OtpStatus.MISMATCH: "Invalid OTP",
}


def _send_otp(service: AuthService, phone: str, purpose: Purpose) -> OtpResponse:
    try:
        issued = service.issue_otp(phone, purpose)
    except (InvalidFormat, DirectoryError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    if not issued.delivered:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to send OTP",
        )
    return OtpResponse(
        message="OTP sent successfully!",
        expires_in_seconds=issued.expires_in_seconds,
        otp=issued.code if settings.otp_debug else None,
    )


@router.post("/send-otp-signup", response_model=OtpResponse, response_model_exclude_none=True)
def send_otp_signup(
    payload: OtpRequest, service: AuthService = Depends(get_auth_service)
) -> OtpResponse:
    return _send_otp(service, payload.phone, "signup")


@router.post("/send-otp-login", response_model=OtpResponse, response_model_exclude_none=True)
def send_otp_login(
    payload: OtpRequest, service: AuthService = Depends(get_auth_service)
) -> OtpResponse:
    return _send_otp(service, payload.phone, "login")


@router.post("/verify-otp", response_model=OtpVerifyResponse, response_model_exclude_none=True)
def verify_otp(
    payload: OtpVerifyRequest, service: AuthService = Depends(get_auth_service)
) -> OtpVerifyResponse:
    try:
        result = service.verify_otp(
            payload.phone, payload.otp, name=payload.name, email=payload.email
        )
    except (ProfileRequired, DirectoryError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    if result.status is not OtpStatus.CONSUMED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=OTP_FAILURE_DETAILS[result.status],
        )
    if result.created:
        return OtpVerifyResponse(
            message="Signup successful",
            user=result.user,
            secret=result.secret,
            otpauth_uri=result.provisioning_uri,
        )
    return OtpVerifyResponse(message="Login successful", user=result.user)


@router.post("/verify-totp", response_model=TotpVerifyResponse)
def verify_totp(
    payload: TotpVerifyRequest, service: AuthService = Depends(get_auth_service)
) -> TotpVerifyResponse:
    try:
        outcome = service.verify_totp(payload.code, email=payload.email, phone=payload.phone)
    except InvalidSecret as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc
    if outcome is TotpStatus.NOT_CONFIGURED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="TOTP not set",
        )
    if outcome is TotpStatus.INVALID:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid TOTP code",
        )
    return TotpVerifyResponse(message="2FA verified successfully")


@router.get("/current-totp", response_model=CurrentTotpResponse)
def current_totp(
    email: Optional[str] = Query(default=None),
    phone: Optional[str] = Query(default=None),
    service: AuthService = Depends(get_auth_service),
) -> CurrentTotpResponse:
    if not email and not phone:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email or phone required",
        )
    try:
        code = service.current_totp(email=email, phone=phone)
    except InvalidSecret as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc
    if code is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="TOTP not set for this user",
        )
    return CurrentTotpResponse(
        code=code,
        expires_in_seconds=service.current_totp_expires_in(),
    )


@router.get("/get-secret", response_model=SecretResponse)
def get_secret(
    email: Optional[str] = Query(default=None),
    service: AuthService = Depends(get_auth_service),
) -> SecretResponse:
    if not email:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email required",
        )
    secret = service.get_secret(email)
    if secret is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="TOTP secret not set",
        )
    return SecretResponse(secret=secret)
