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
"""TokenCodec: builds, signs and verifies CSRF tokens.

A token is ``b64(salt) + "." + issued_at_millis + "." + b64(hmac)``, where
``b64`` is unpadded URL-safe base64 so the value is a legal bare cookie value, and
the HMAC-SHA256 is computed over the first two segments with the
server secret.  Signing uses :func:`hmac.digest`, a one-shot keyed hash with
no shared mutable state, so one codec can serve concurrent requests.
"""

from __future__ import annotations

import base64
import hmac
import secrets
import time
from collections.abc import Callable

from xsrfguard.kernel.exceptions import (
    BadSignatureException,
    ConfigurationException,
    ExpiredTokenException,
)
from xsrfguard.security.csrf.token import CsrfToken, parse_timestamp, split_segments

SALT_BYTES = 32
DIGEST = "sha256"

RandomBytes = Callable[[int], bytes]
Clock = Callable[[], int]


def current_time_millis() -> int:
    """Wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


def _b64(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


class TokenCodec:
    """Signs and verifies tokens with a single, fixed secret.

    Args:
        secret: The server secret.  ``str`` secrets are UTF-8 encoded.
        random_bytes: Cryptographically secure byte source, ``n -> bytes``.
        clock: Returns the current time in epoch milliseconds.

    Raises:
        ConfigurationException: If the secret is empty or not ``str``/``bytes``.
    """

    def __init__(
        self,
        secret: str | bytes,
        *,
        random_bytes: RandomBytes = secrets.token_bytes,
        clock: Clock = current_time_millis,
    ) -> None:
        if not isinstance(secret, (str, bytes)):
            raise ConfigurationException(
                f"CSRF secret must be str or bytes, not {type(secret).__name__}",
                context={"type": type(secret).__name__},
            )
        key = secret.encode("utf-8") if isinstance(secret, str) else secret
        if not key:
            raise ConfigurationException("CSRF secret must not be empty")
        self._key = key
        self._random_bytes = random_bytes
        self._clock = clock

    def now(self) -> int:
        return self._clock()

    def sign(self, salt: str, issued_at: int | str) -> bytes:
        """Return the raw HMAC-SHA256 of ``salt.issued_at``."""
        message = f"{salt}.{issued_at}".encode()
        return hmac.digest(self._key, message, DIGEST)

    def create(self, salt: bytes, issued_at: int) -> CsrfToken:
        """Build and sign a token from explicit salt bytes and timestamp."""
        encoded_salt = _b64(salt)
        return CsrfToken(
            salt=encoded_salt,
            issued_at=issued_at,
            signature=_b64(self.sign(encoded_salt, issued_at)),
        )

    def generate(self) -> CsrfToken:
        """Mint a new token from fresh random salt, stamped with the current time."""
        return self.create(self._random_bytes(SALT_BYTES), self._clock())

    def encode(self) -> str:
        """Mint a new token and return its serialized form."""
        return self.generate().serialize()

    def verify_signature(self, value: str) -> CsrfToken:
        """Check structure and signature of *value*, ignoring expiry.

        Raises:
            MalformedTokenException: Wrong number of segments or bad timestamp.
            BadSignatureException: The signature was not produced by this secret.
        """
        salt, timestamp, signature = split_segments(value)
        expected = _b64(self.sign(salt, timestamp)).encode("ascii")
        if not hmac.compare_digest(expected, signature.encode("utf-8")):
            raise BadSignatureException("Token signature does not match")
        return CsrfToken(salt=salt, issued_at=parse_timestamp(timestamp), signature=signature)

    def check_expiry(self, token: CsrfToken, timeout_millis: int, now: int | None = None) -> None:
        """Raise :class:`ExpiredTokenException` if *token* is past its timeout."""
        now = self._clock() if now is None else now
        if token.is_expired(now, timeout_millis):
            raise ExpiredTokenException(
                "Token has expired",
                context={"issued_at": token.issued_at, "expires_at": token.expires_at(timeout_millis), "now": now},
            )

    def verify(self, value: str, timeout_millis: int, now: int | None = None) -> CsrfToken:
        """Fully decode and verify *value*: structure, signature, then expiry."""
        token = self.verify_signature(value)
        self.check_expiry(token, timeout_millis, now)
        return token
