from typing import Annotated, Optional, Union

from pydantic import BaseModel, Field

from authenticator.schemas.users import UserResponse


SubmittedCode = Union[
    Annotated[str, Field(max_length=32)],
    Annotated[int, Field(ge=0, lt=10**9)],
]


class OtpRequest(BaseModel):
    phone: str = Field(min_length=1, max_length=20)


class OtpResponse(BaseModel):
    success: bool = True
    message: str
    expires_in_seconds: int
    otp: Optional[str] = None


class OtpVerifyRequest(BaseModel):
    phone: str = Field(min_length=1, max_length=20)
    otp: SubmittedCode
    name: Optional[str] = Field(default=None, max_length=100)
    email: Optional[str] = Field(default=None, max_length=255)


class OtpVerifyResponse(BaseModel):
    success: bool = True
    message: str
    user: UserResponse
    secret: Optional[str] = None
    otpauth_uri: Optional[str] = None
