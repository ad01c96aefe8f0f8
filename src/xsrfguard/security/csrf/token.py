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
"""CsrfToken: the ``salt.timestamp.signature`` value object."""

from __future__ import annotations

from dataclasses import dataclass

from xsrfguard.kernel.exceptions import MalformedTokenException

SEPARATOR = "."

_MAX_TIMESTAMP = 2**63 - 1


@dataclass(frozen=True)
class CsrfToken:
    """A parsed anti-forgery token.

    Attributes:
        salt: Base64 text of the random salt.
        issued_at: Issue time in epoch milliseconds.
        signature: Base64 text of the HMAC over ``salt.issued_at``.
    """

    salt: str
    issued_at: int
    signature: str

    @property
    def payload(self) -> str:
        """The signed part of the token: ``salt.issued_at``."""
        return f"{self.salt}{SEPARATOR}{self.issued_at}"

    def expires_at(self, timeout_millis: int) -> int:
        return self.issued_at + timeout_millis

    def is_expired(self, now_millis: int, timeout_millis: int) -> bool:
        """A token is still valid at exactly ``issued_at + timeout``."""
        return now_millis > self.expires_at(timeout_millis)

    def serialize(self) -> str:
        return f"{self.payload}{SEPARATOR}{self.signature}"

    def __str__(self) -> str:
        return self.serialize()

    @classmethod
    def parse(cls, value: str) -> CsrfToken:
        """Parse a serialized token without checking its signature.

        Raises:
            MalformedTokenException: If *value* does not split into exactly
                three segments or the timestamp is not an unsigned 64-bit
                decimal.
        """
        segments = split_segments(value)
        return cls(salt=segments[0], issued_at=parse_timestamp(segments[1]), signature=segments[2])


def split_segments(value: str) -> tuple[str, str, str]:
    """Split *value* on the separator, requiring exactly three segments."""
    segments = value.split(SEPARATOR)
    if len(segments) != 3:
        raise MalformedTokenException(
            f"Token must have 3 segments, found {len(segments)}",
            context={"segments": len(segments)},
        )
    return segments[0], segments[1], segments[2]


def parse_timestamp(segment: str) -> int:
    """Parse the timestamp segment as a strict unsigned decimal."""
    # int() alone would accept whitespace, signs and underscores
    if not segment or not segment.isascii() or not segment.isdigit():
        raise MalformedTokenException("Token timestamp is not a decimal number")
    issued_at = int(segment)
    if issued_at > _MAX_TIMESTAMP:
        raise MalformedTokenException("Token timestamp is out of range")
    return issued_at
