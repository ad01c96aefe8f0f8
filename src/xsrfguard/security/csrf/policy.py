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
"""Issuance and validation policies for the double-submit cookie protocol.

**Issuance** (GET): without a session a token is minted on every request.
With a session, the token bound to the current session id is reused while it
is unexpired; otherwise a new token is minted, sent as a cookie and bound to
the session.

**Validation** (POST, PUT, DELETE, PATCH), short-circuiting on the first
failure:

1. origin guard (only when an origin is configured)
2. header/form token equals cookie token
3. session binding holds the same token for the same session id
4. structure and signature
5. session binding removed (single use)
6. expiry

A session without an id cannot hold a binding and is treated as no session.
"""

from __future__ import annotations

import hmac
from dataclasses import dataclass

import structlog

from xsrfguard.kernel.exceptions import (
    MalformedTokenException,
    MissingTokenException,
    SessionBindingMismatchException,
    TokenMismatchException,
)
from xsrfguard.security.csrf.binding import SessionBinding
from xsrfguard.security.csrf.codec import TokenCodec
from xsrfguard.security.csrf.origin import OriginGuard
from xsrfguard.security.csrf.ports import CsrfExchange, CsrfSession
from xsrfguard.security.csrf.settings import CsrfSettings
from xsrfguard.security.csrf.token import CsrfToken

logger = structlog.get_logger("xsrfguard.csrf")


@dataclass(frozen=True)
class IssuedToken:
    """Token made available to the caller; ``minted`` is ``False`` on reuse."""

    value: str
    minted: bool


def _bound_session(exchange: CsrfExchange) -> CsrfSession | None:
    session = exchange.session
    if session is None or session.id is None:
        return None
    return session


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _tokens_equal(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


class IssuancePolicy:
    """Decides which token a GET request receives."""

    def __init__(self, codec: TokenCodec, settings: CsrfSettings) -> None:
        self._codec = codec
        self._settings = settings

    def issue(self, exchange: CsrfExchange) -> IssuedToken:
        session = _bound_session(exchange)
        if session is None:
            return IssuedToken(self._mint(exchange), minted=True)

        binding = SessionBinding.from_attribute(session.get_attribute(self._settings.header_name))
        if binding is None or not binding.belongs_to(session.id):
            return IssuedToken(self._mint_and_bind(exchange, session), minted=True)

        try:
            token = CsrfToken.parse(binding.token)
        except MalformedTokenException:
            logger.warning("csrf_session_token_malformed")
            return IssuedToken(self._mint_and_bind(exchange, session), minted=True)

        if token.is_expired(self._codec.now(), self._settings.timeout_millis):
            return IssuedToken(self._mint_and_bind(exchange, session), minted=True)

        # The user agent already holds this token from an earlier response.
        return IssuedToken(binding.token, minted=False)

    def rotate(self, exchange: CsrfExchange) -> str:
        """Unconditionally replace the token, rebinding it when a session exists."""
        session = _bound_session(exchange)
        if session is None:
            return self._mint(exchange)
        return self._mint_and_bind(exchange, session)

    def _mint(self, exchange: CsrfExchange) -> str:
        value = self._codec.encode()
        exchange.add_cookie(self._settings.cookie(value))
        logger.debug("csrf_token_issued", cookie=self._settings.cookie_name)
        return value

    def _mint_and_bind(self, exchange: CsrfExchange, session: CsrfSession) -> str:
        value = self._mint(exchange)
        binding = SessionBinding(session_id=str(session.id), token=value)
        session.set_attribute(self._settings.header_name, binding.to_attribute())
        return value


class ValidationPolicy:
    """Decides whether a state-changing request carries an acceptable token."""

    def __init__(
        self,
        codec: TokenCodec,
        settings: CsrfSettings,
        origin_guard: OriginGuard | None = None,
    ) -> None:
        self._codec = codec
        self._settings = settings
        self._origin_guard = origin_guard

    def validate(self, exchange: CsrfExchange) -> CsrfToken:
        """Run every check in order and return the accepted token.

        Raises:
            CsrfValidationException: The subclass identifies the failed check.
        """
        if self._origin_guard is not None:
            self._origin_guard.check(exchange.header("Origin"), exchange.header("Referer"))

        submitted = self._submitted_token(exchange)
        session = _bound_session(exchange)
        if session is not None:
            self._check_binding(session, submitted)

        token = self._codec.verify_signature(submitted)

        # Consume the token before the expiry check so it can never be replayed.
        if session is not None:
            session.remove_attribute(self._settings.header_name)

        self._codec.check_expiry(token, self._settings.timeout_millis)
        return token

    def _submitted_token(self, exchange: CsrfExchange) -> str:
        name = self._settings.header_name
        submitted = exchange.header(name)
        if submitted is None:
            submitted = exchange.form_field(name)
        cookie_value = exchange.get_cookie(self._settings.cookie_name)

        if submitted is None or cookie_value is None or _is_blank(submitted) or _is_blank(cookie_value):
            raise MissingTokenException("Token provided via HTTP Header/Form is absent/empty")
        if not _tokens_equal(submitted, cookie_value):
            raise TokenMismatchException("Token provided via HTTP Header and via Cookie are not equal")
        return submitted

    def _check_binding(self, session: CsrfSession, submitted: str) -> None:
        binding = SessionBinding.from_attribute(session.get_attribute(self._settings.header_name))
        if binding is None:
            raise SessionBindingMismatchException("No Token has been added to the session")
        if not binding.belongs_to(session.id):
            raise SessionBindingMismatchException("Token has been issued for a different session")
        if not _tokens_equal(binding.token, submitted):
            raise SessionBindingMismatchException("Token has been used or is outdated")
