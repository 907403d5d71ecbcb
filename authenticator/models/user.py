from sqlalchemy import Column, DateTime, Integer, String

from authenticator.database import Base


class UserEntry(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    phone = Column(String(20), nullable=False, unique=True, index=True)
    totp_secret = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
