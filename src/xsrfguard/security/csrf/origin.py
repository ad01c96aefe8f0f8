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
"""OriginGuard: same-origin verification with ``Origin`` / ``Referer``.

Origins are compared on scheme, host and port only.  Default ports are not
normalized: ``https://example.com`` and ``https://example.com:443`` are
different origins.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from xsrfguard.kernel.exceptions import ConfigurationException, OriginMismatchException


@dataclass(frozen=True)
class Origin:
    """The ``(scheme, host, port)`` triple of a URI; ``port`` is ``None`` when implicit."""

    scheme: str
    host: str | None
    port: int | None

    @classmethod
    def parse(cls, uri: str) -> Origin:
        """Parse *uri*.

        Raises:
            ValueError: If the URI cannot be parsed or has an invalid port.
        """
        parts = urlsplit(uri.strip())
        return cls(scheme=parts.scheme, host=parts.hostname, port=parts.port)

    def __str__(self) -> str:
        port = f":{self.port}" if self.port is not None else ""
        return f"{self.scheme}://{self.host}{port}"


def same_origin(expected: Origin, candidate: Origin) -> bool:
    """Return ``True`` if scheme, host and port are all identical."""
    return (
        expected.scheme == candidate.scheme
        and expected.host == candidate.host
        and expected.port == candidate.port
    )


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


class OriginGuard:
    """Rejects requests whose declared origin is not the expected one.

    Args:
        expected: The trusted origin, e.g. ``"https://example.com:8443"``.

    Raises:
        ConfigurationException: If *expected* has no scheme or host, or an
            invalid port.
    """

    def __init__(self, expected: str) -> None:
        try:
            origin = Origin.parse(expected)
        except ValueError as exc:
            raise ConfigurationException(f"Invalid CSRF origin '{expected}': {exc}") from exc
        if not origin.scheme or not origin.host:
            raise ConfigurationException(
                f"Invalid CSRF origin '{expected}': scheme and host are required"
            )
        self._expected = origin

    @property
    def expected(self) -> Origin:
        return self._expected

    def check(self, origin_header: str | None, referer_header: str | None) -> None:
        """Verify the request source, preferring ``Origin`` over ``Referer``.

        Raises:
            OriginMismatchException: If both headers are blank, the source is
                not a valid URI, or its origin differs from the expected one.
        """
        source = referer_header if _is_blank(origin_header) else origin_header
        if source is None or _is_blank(source):
            raise OriginMismatchException("ORIGIN and REFERER request headers are both absent/empty")

        try:
            candidate = Origin.parse(source)
        except ValueError as exc:
            raise OriginMismatchException(
                "Request source is not a valid URI", context={"source": source}
            ) from exc

        if not same_origin(self._expected, candidate):
            raise OriginMismatchException(
                "Protocol/Host/Port do not fully match",
                context={"expected": str(self._expected), "source": source},
            )
