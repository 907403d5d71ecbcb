from datetime import datetime

from pydantic import BaseModel


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: str
    totp_enabled: bool = False
    created_at: datetime
