"""
Tests for TOTP secret generation, validation and current code derivation.
"""

import base64

import pyotp
import pytest

from authenticator.services.totp import InvalidSecret, PyOtpAlgorithm, TotpService

BASE32_ALPHABET = set("ABCDEFGHIJKLMNOPQRSTUVWXYZ234567")


@pytest.fixture
def secret(totp_service):
    return totp_service.generate_secret()


class TestGenerateSecret:
    def test_secret_is_32_base32_chars(self, totp_service):
        secret = totp_service.generate_secret()

        assert len(secret) == 32
        assert set(secret) <= BASE32_ALPHABET
        assert len(base64.b32decode(secret)) == 20

    def test_secrets_do_not_collide(self, totp_service):
        secrets = {totp_service.generate_secret() for _ in range(1000)}

        assert len(secrets) == 1000


class TestValidate:
    def test_current_code_validates(self, totp_service, secret):
        assert totp_service.validate(secret, totp_service.current_code(secret)) is True

    def test_matches_reference_implementation(self, totp_service, secret, clock):
        expected = pyotp.TOTP(secret).at(clock.now())

        assert totp_service.current_code(secret) == expected

    def test_code_outside_window_is_rejected(self, totp_service, secret, clock):
        algorithm = PyOtpAlgorithm()
        accepted = {algorithm.code_at(secret, clock.now(), offset) for offset in (-1, 0, 1)}
        candidate = next(
            f"{value:06d}" for value in range(1000000) if f"{value:06d}" not in accepted
        )

        assert totp_service.validate(secret, candidate) is False

    def test_previous_step_is_accepted(self, totp_service, secret, clock):
        code = totp_service.current_code(secret)
        clock.advance(30)

        assert totp_service.validate(secret, code) is True

    def test_code_two_steps_old_is_rejected(self, totp_service, secret, clock):
        clock.advance(25)
        code = totp_service.current_code(secret)
        # 45 seconds later the clock sits two steps past the one that produced the code.
        clock.advance(45)

        assert totp_service.validate(secret, code) is False

    def test_integer_code_is_accepted_at_full_width(self, totp_service, secret):
        code = totp_service.current_code(secret)

        assert totp_service.validate(secret, int(code)) is (not code.startswith("0"))

    def test_code_must_be_exact_width(self, totp_service, secret, clock):
        while not totp_service.current_code(secret).startswith("0"):
            clock.advance(30)
        code = totp_service.current_code(secret)

        assert totp_service.validate(secret, code) is True
        assert totp_service.validate(secret, code[1:]) is False
        assert totp_service.validate(secret, "0" + code) is False

    def test_oversized_code_is_false(self, totp_service, secret):
        assert totp_service.validate(secret, "9" * 5000) is False
        assert totp_service.validate(secret, 10**5000) is False

    @pytest.mark.parametrize("missing", ["", None])
    def test_missing_secret_is_false(self, totp_service, missing):
        assert totp_service.validate(missing, "123456") is False

    def test_garbage_code_is_false(self, totp_service, secret):
        assert totp_service.validate(secret, "not-a-code") is False

    def test_malformed_secret_raises(self, totp_service):
        with pytest.raises(InvalidSecret):
            totp_service.validate("not base32 at all!", "123456")


class TestCurrentCode:
    def test_is_deterministic_within_step(self, totp_service, secret, clock):
        code = totp_service.current_code(secret)
        clock.advance(29)

        assert totp_service.current_code(secret) == code

    def test_empty_secret_raises(self, totp_service):
        with pytest.raises(InvalidSecret):
            totp_service.current_code("")

    def test_seconds_remaining(self, totp_service, clock):
        assert totp_service.seconds_remaining() == 30
        clock.advance(12)
        assert totp_service.seconds_remaining() == 18


def test_provisioning_uri(totp_service, secret):
    uri = totp_service.provisioning_uri(secret, "ada@example.com", "REVA AI")

    assert uri.startswith("otpauth://totp/")
    assert f"secret={secret}" in uri
    assert "issuer=REVA%20AI" in uri
