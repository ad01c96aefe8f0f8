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
"""Exception hierarchy for xsrfguard.

Two families live here:

* :class:`ConfigurationException`: raised while building components from
  settings.  These are fatal and are expected to abort application startup.
* :class:`CsrfValidationException` and its subclasses: raised by the token
  codec and the validation policy for a single request.  They never escape
  :class:`~xsrfguard.security.csrf.handler.CsrfHandler`; the handler logs the
  error ``code`` and collapses every failure into one opaque 403 decision.
"""

from __future__ import annotations

# =============================================================================
# Base Exception
# =============================================================================


class XsrfGuardException(Exception):
    """Base exception for all xsrfguard errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "CSRF_TOKEN_EXPIRED").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    default_code: str | None = None

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code if code is not None else self.default_code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Startup Exceptions
# =============================================================================


class ConfigurationException(XsrfGuardException):
    """Invalid settings detected while constructing a component."""

    default_code = "CONFIGURATION"


# =============================================================================
# Per-request CSRF Exceptions
# =============================================================================


class CsrfValidationException(XsrfGuardException):
    """A submitted request failed CSRF validation."""

    default_code = "CSRF_INVALID"


class OriginMismatchException(CsrfValidationException):
    """``Origin``/``Referer`` is absent, malformed or names another origin."""

    default_code = "CSRF_ORIGIN_MISMATCH"


class MissingTokenException(CsrfValidationException):
    """The header/form token or the cookie token is absent or blank."""

    default_code = "CSRF_TOKEN_MISSING"


class TokenMismatchException(CsrfValidationException):
    """The header/form token and the cookie token differ."""

    default_code = "CSRF_TOKEN_MISMATCH"


class SessionBindingMismatchException(CsrfValidationException):
    """The session holds no token, or holds one for another session or value."""

    default_code = "CSRF_SESSION_MISMATCH"


class MalformedTokenException(CsrfValidationException):
    """The token does not have the ``salt.timestamp.signature`` shape."""

    default_code = "CSRF_TOKEN_MALFORMED"


class BadSignatureException(CsrfValidationException):
    """The token signature does not match the server secret."""

    default_code = "CSRF_BAD_SIGNATURE"


class ExpiredTokenException(CsrfValidationException):
    """The token is older than the configured timeout."""

    default_code = "CSRF_TOKEN_EXPIRED"
