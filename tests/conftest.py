from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from authenticator.database import Base
from authenticator.dependencies import get_auth_service
from authenticator.main import app
from authenticator.models import user as _user  # noqa: F401
from authenticator.services.auth import AuthService
from authenticator.services.otp import OtpManager, OtpStore
from authenticator.services.totp import PyOtpAlgorithm, TotpService
from authenticator.services.users import SqlUserDirectory

# Aligned to a 30s step boundary.
EPOCH = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FrozenClock:
    def __init__(self, start: datetime = EPOCH) -> None:
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current = self.current + timedelta(seconds=seconds)


class RecordingSender:
    def __init__(self, succeed: bool = True) -> None:
        self.succeed = succeed
        self.messages: list[tuple[str, str]] = []

    def send(self, phone: str, message: str) -> bool:
        self.messages.append((phone, message))
        return self.succeed


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def otp_store() -> OtpStore:
    return OtpStore()


@pytest.fixture
def otp_manager(otp_store, clock) -> OtpManager:
    return OtpManager(otp_store, clock=clock, ttl_seconds=300)


@pytest.fixture
def totp_service(clock) -> TotpService:
    return TotpService(PyOtpAlgorithm(interval=30, digits=6), clock=clock, valid_window=1)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(
        bind=engine, autoflush=False, autocommit=False, expire_on_commit=False
    )
    yield factory
    engine.dispose()


@pytest.fixture
def directory(session_factory) -> SqlUserDirectory:
    return SqlUserDirectory(session_factory)


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def auth_service(otp_manager, totp_service, directory, sender) -> AuthService:
    return AuthService(otp_manager, totp_service, directory, sender, brand="REVA AI")


@pytest.fixture
def client(auth_service):
    app.dependency_overrides[get_auth_service] = lambda: auth_service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
