import pytest

from authenticator.schemas.users import UserResponse
from authenticator.services.users import DuplicateEmail, DuplicatePhone, UserNotFound

SECRET = "JBSWY3DPEHPK3PXPJBSWY3DPEHPK3PXP"


def test_create_and_find(directory):
    user = directory.create("Ada", " Ada@Example.com ", "+15551234567", SECRET)

    assert user.email == "ada@example.com"
    assert user.totp_enabled is True
    assert directory.find_by_phone("+15551234567") == user
    assert directory.find_by_email("ADA@example.com") == user


def test_missing_users_are_none(directory):
    assert directory.find_by_phone("+15551234567") is None
    assert directory.find_by_email("ada@example.com") is None


def test_duplicate_email_rejected(directory):
    directory.create("Ada", "ada@example.com", "+15551234567", SECRET)

    with pytest.raises(DuplicateEmail):
        directory.create("Other", "ada@example.com", "+15559999999", SECRET)


def test_duplicate_phone_rejected(directory):
    directory.create("Ada", "ada@example.com", "+15551234567", SECRET)

    with pytest.raises(DuplicatePhone):
        directory.create("Other", "other@example.com", "+15551234567", SECRET)


def test_get_totp_secret(directory):
    user = directory.create("Ada", "ada@example.com", "+15551234567", SECRET)

    assert directory.get_totp_secret(user) == SECRET


def test_get_totp_secret_for_unknown_user(directory):
    ghost = directory.create("Ada", "ada@example.com", "+15551234567", SECRET)
    ghost = ghost.model_copy(update={"id": ghost.id + 100})

    with pytest.raises(UserNotFound):
        directory.get_totp_secret(ghost)


def test_empty_secret_reads_as_none(directory):
    user = directory.create("Ada", "ada@example.com", "+15551234567", "")

    assert isinstance(user, UserResponse)
    assert user.totp_enabled is False
    assert directory.get_totp_secret(user) is None
