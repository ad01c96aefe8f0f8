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
"""CSRF protocol constants and per-handler settings."""

from __future__ import annotations

from dataclasses import dataclass

from xsrfguard.security.csrf.cookie import TransportCookie

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
DEFAULT_COOKIE_NAME: str = "XSRF-TOKEN"
"""Name of the cookie that carries the CSRF token."""

DEFAULT_COOKIE_PATH: str = "/"

DEFAULT_HEADER_NAME: str = "X-XSRF-TOKEN"
"""Request header, form field and session key holding the token."""

DEFAULT_TIMEOUT_MILLIS: int = 30 * 60 * 1000
"""Token lifetime; matches the default session timeout (30 minutes)."""

ISSUING_METHODS: frozenset[str] = frozenset({"GET"})
"""HTTP methods that receive a token."""

VALIDATING_METHODS: frozenset[str] = frozenset({"POST", "PUT", "DELETE", "PATCH"})
"""HTTP methods that must present a valid token."""


@dataclass(frozen=True)
class CsrfSettings:
    """Immutable settings shared by the issuance and validation policies."""

    cookie_name: str = DEFAULT_COOKIE_NAME
    cookie_path: str = DEFAULT_COOKIE_PATH
    cookie_http_only: bool = False
    cookie_secure: bool = False
    header_name: str = DEFAULT_HEADER_NAME
    timeout_millis: int = DEFAULT_TIMEOUT_MILLIS

    def cookie(self, value: str) -> TransportCookie:
        """Build the transport cookie for a token *value*."""
        return TransportCookie(
            name=self.cookie_name,
            value=value,
            path=self.cookie_path,
            http_only=self.cookie_http_only,
            secure=self.cookie_secure,
        )
