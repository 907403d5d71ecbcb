from typing import Optional

from pydantic import BaseModel, model_validator

from authenticator.schemas.otp import SubmittedCode


class TotpVerifyRequest(BaseModel):
    email: Optional[str] = None
    phone: Optional[str] = None
    code: SubmittedCode

    @model_validator(mode="after")
    def require_identifier(self) -> "TotpVerifyRequest":
        if not self.email and not self.phone:
            raise ValueError("Email or phone required")
        return self


class TotpVerifyResponse(BaseModel):
    success: bool = True
    message: str


class CurrentTotpResponse(BaseModel):
    success: bool = True
    code: str
    expires_in_seconds: int


class SecretResponse(BaseModel):
    success: bool = True
    secret: str
