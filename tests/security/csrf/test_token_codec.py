# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Tests for CsrfToken parsing and TokenCodec signing/verification."""

from __future__ import annotations

import base64
import hmac
from hashlib import sha256

import pytest

from xsrfguard.kernel.exceptions import (
    BadSignatureException,
    ConfigurationException,
    CsrfValidationException,
    ExpiredTokenException,
    MalformedTokenException,
)
from xsrfguard.security.csrf.codec import SALT_BYTES, TokenCodec
from xsrfguard.security.csrf.token import CsrfToken

T0 = 1_700_000_000_000
TIMEOUT = 30 * 60 * 1000
B64_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"


def _codec(now: int = T0, secret: str = "test-secret") -> TokenCodec:
    return TokenCodec(secret, clock=lambda: now)


def _b64decode(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


# ---------------------------------------------------------------------------
# CsrfToken
# ---------------------------------------------------------------------------


class TestCsrfTokenParse:
    def test_parse_three_segments(self) -> None:
        token = CsrfToken.parse("c2FsdA==.1700000000000.c2ln")
        assert token.salt == "c2FsdA=="
        assert token.issued_at == 1_700_000_000_000
        assert token.signature == "c2ln"

    def test_serialize_round_trips(self) -> None:
        value = "c2FsdA==.1700000000000.c2ln"
        assert CsrfToken.parse(value).serialize() == value
        assert str(CsrfToken.parse(value)) == value

    @pytest.mark.parametrize("value", ["", "abc", "a.b", "a.1.b.c", "a..b.c", "....", "a.1.b."])
    def test_wrong_segment_count_is_malformed(self, value: str) -> None:
        with pytest.raises(MalformedTokenException):
            CsrfToken.parse(value)

    @pytest.mark.parametrize("timestamp", ["", "abc", "-5", "+5", " 5", "1_000", "12.5", "٣", "99999999999999999999"])
    def test_non_decimal_timestamp_is_malformed(self, timestamp: str) -> None:
        with pytest.raises(MalformedTokenException):
            CsrfToken.parse(f"salt.{timestamp}.sig")

    def test_expired_strictly_after_timeout(self) -> None:
        token = CsrfToken(salt="s", issued_at=T0, signature="x")
        assert token.expires_at(TIMEOUT) == T0 + TIMEOUT
        assert not token.is_expired(T0 + TIMEOUT, TIMEOUT)
        assert token.is_expired(T0 + TIMEOUT + 1, TIMEOUT)


# ---------------------------------------------------------------------------
# TokenCodec
# ---------------------------------------------------------------------------


class TestTokenCodecConstruction:
    def test_empty_secret_is_rejected(self) -> None:
        with pytest.raises(ConfigurationException):
            TokenCodec("")

    def test_empty_bytes_secret_is_rejected(self) -> None:
        with pytest.raises(ConfigurationException):
            TokenCodec(b"")

    def test_bytes_and_str_secret_sign_alike(self) -> None:
        assert TokenCodec("k").sign("salt", 1) == TokenCodec(b"k").sign("salt", 1)

    @pytest.mark.parametrize("secret", [123456, True, 0.5, None, ["k"]])
    def test_non_text_secret_is_rejected(self, secret) -> None:
        with pytest.raises(ConfigurationException):
            TokenCodec(secret)


class TestTokenCodecSign:
    def test_sign_is_hmac_sha256_over_salt_dot_timestamp(self) -> None:
        expected = hmac.new(b"test-secret", b"salt.1700000000000", sha256).digest()
        assert _codec().sign("salt", T0) == expected

    def test_sign_is_deterministic(self) -> None:
        assert _codec().sign("salt", T0) == _codec().sign("salt", T0)

    def test_different_secrets_sign_differently(self) -> None:
        assert _codec(secret="a").sign("salt", T0) != _codec(secret="b").sign("salt", T0)


class TestTokenCodecEncode:
    def test_encode_has_three_segments(self) -> None:
        salt, issued_at, signature = _codec().encode().split(".")
        assert len(_b64decode(salt)) == SALT_BYTES
        assert issued_at == str(T0)
        assert len(_b64decode(signature)) == 32

    def test_encoded_token_is_a_bare_cookie_value(self) -> None:
        value = _codec().encode()
        assert "=" not in value
        assert set(value) <= set(B64_ALPHABET + ".")

    def test_encode_uses_injected_random_source(self) -> None:
        requested: list[int] = []

        def fixed(n: int) -> bytes:
            requested.append(n)
            return b"\x01" * n

        codec = TokenCodec("test-secret", random_bytes=fixed, clock=lambda: T0)
        token = codec.generate()
        assert requested == [SALT_BYTES]
        assert token.salt == base64.urlsafe_b64encode(b"\x01" * SALT_BYTES).rstrip(b"=").decode()

    def test_fresh_salt_per_token(self) -> None:
        codec = _codec()
        assert codec.encode() != codec.encode()

    def test_create_with_explicit_salt_and_timestamp(self) -> None:
        codec = _codec()
        token = codec.create(b"\x00" * 4, 42)
        assert token.issued_at == 42
        assert codec.verify_signature(token.serialize()) == token


class TestTokenCodecVerify:
    @pytest.mark.parametrize("salt", [b"", b"\x00" * 32, bytes(range(32)), b"\xff" * 7])
    @pytest.mark.parametrize("issued_at", [0, 1, T0, 2**63 - 1])
    def test_round_trip_before_timeout(self, salt: bytes, issued_at: int) -> None:
        codec = _codec(now=issued_at)
        value = codec.create(salt, issued_at).serialize()
        assert codec.verify(value, TIMEOUT).issued_at == issued_at

    def test_tampered_signature_byte_is_detected(self) -> None:
        codec = _codec()
        value = codec.encode()
        salt, issued_at, signature = value.split(".")
        for index, char in enumerate(signature):
            replacement = next(c for c in B64_ALPHABET if c != char)
            tampered = signature[:index] + replacement + signature[index + 1 :]
            with pytest.raises(BadSignatureException):
                codec.verify(f"{salt}.{issued_at}.{tampered}", TIMEOUT)

    def test_tampered_timestamp_is_detected(self) -> None:
        codec = _codec()
        salt, issued_at, signature = codec.encode().split(".")
        with pytest.raises(BadSignatureException):
            codec.verify(f"{salt}.{int(issued_at) + 1}.{signature}", TIMEOUT)

    def test_token_from_other_secret_is_rejected(self) -> None:
        value = _codec(secret="other").encode()
        with pytest.raises(BadSignatureException):
            _codec().verify(value, TIMEOUT)

    def test_wrong_segment_count_is_malformed(self) -> None:
        with pytest.raises(MalformedTokenException):
            _codec().verify("only.two", TIMEOUT)

    def test_non_numeric_timestamp_with_valid_signature_is_malformed(self) -> None:
        codec = _codec()
        signature = base64.urlsafe_b64encode(codec.sign("salt", "soon")).rstrip(b"=").decode()
        with pytest.raises(MalformedTokenException):
            codec.verify(f"salt.soon.{signature}", TIMEOUT)

    def test_expiry_boundary(self) -> None:
        value = _codec().encode()
        assert _codec(now=T0 + TIMEOUT - 1).verify(value, TIMEOUT)
        assert _codec(now=T0 + TIMEOUT).verify(value, TIMEOUT)
        with pytest.raises(ExpiredTokenException):
            _codec(now=T0 + TIMEOUT + 1).verify(value, TIMEOUT)

    def test_explicit_now_overrides_clock(self) -> None:
        codec = _codec()
        value = codec.encode()
        with pytest.raises(ExpiredTokenException):
            codec.verify(value, TIMEOUT, now=T0 + TIMEOUT + 1)

    def test_failure_kinds_are_distinguishable(self) -> None:
        codec = _codec()
        errors = set()
        for value, now in [("x", T0), ("a.b.c", T0), (codec.encode(), T0 + TIMEOUT + 1)]:
            try:
                codec.verify(value, TIMEOUT, now=now)
            except CsrfValidationException as exc:
                errors.add(exc.code)
        assert errors == {"CSRF_TOKEN_MALFORMED", "CSRF_BAD_SIGNATURE", "CSRF_TOKEN_EXPIRED"}
