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
"""CsrfHandler: per-request entry point of the CSRF protocol.

Usage::

    handler = (
        CsrfHandler("s3cr3t")
        .with_origin("https://example.com")
        .with_cookie_http_only(True)
    )
    decision = handler.handle(exchange)
    if not decision.proceed:
        ...  # respond with decision.status_code (403)
"""

from __future__ import annotations

import dataclasses
import secrets
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from xsrfguard.kernel.exceptions import CsrfValidationException
from xsrfguard.security.csrf.codec import Clock, RandomBytes, TokenCodec, current_time_millis
from xsrfguard.security.csrf.origin import OriginGuard
from xsrfguard.security.csrf.policy import IssuancePolicy, ValidationPolicy
from xsrfguard.security.csrf.ports import CsrfExchange
from xsrfguard.security.csrf.settings import ISSUING_METHODS, VALIDATING_METHODS, CsrfSettings

if TYPE_CHECKING:
    from xsrfguard.config.properties.csrf import CsrfProperties

logger = structlog.get_logger("xsrfguard.csrf")

FORBIDDEN = 403


@dataclass(frozen=True)
class CsrfDecision:
    """Outcome of :meth:`CsrfHandler.handle`.

    Attributes:
        proceed: ``True`` if the request may continue down the chain.
        token: The active token to expose for rendering, if any.
        status_code: ``403`` when rejected, otherwise ``None``.
        reason: Error code of the failed check, for diagnostics only.
    """

    proceed: bool
    token: str | None = None
    status_code: int | None = None
    reason: str | None = None

    @classmethod
    def allow(cls, token: str | None = None) -> CsrfDecision:
        return cls(proceed=True, token=token)

    @classmethod
    def reject(cls, reason: str | None) -> CsrfDecision:
        return cls(proceed=False, status_code=FORBIDDEN, reason=reason)


class CsrfHandler:
    """Issues tokens on GET, validates them on POST/PUT/DELETE/PATCH.

    All other methods pass through untouched.  The secret is fixed for the
    lifetime of the handler; ``with_*`` methods return the handler so calls
    can be chained while the application is being wired.

    Raises:
        ConfigurationException: If the secret is empty or an origin is invalid.
    """

    def __init__(
        self,
        secret: str | bytes,
        *,
        random_bytes: RandomBytes = secrets.token_bytes,
        clock: Clock = current_time_millis,
    ) -> None:
        self._codec = TokenCodec(secret, random_bytes=random_bytes, clock=clock)
        self._settings = CsrfSettings()
        self._origin_guard: OriginGuard | None = None
        self._nag_https = False
        self._rebuild()

    @classmethod
    def from_properties(
        cls,
        properties: CsrfProperties,
        *,
        random_bytes: RandomBytes = secrets.token_bytes,
        clock: Clock = current_time_millis,
    ) -> CsrfHandler:
        """Build a handler from bound ``xsrfguard.csrf`` configuration."""
        handler = (
            cls(properties.secret, random_bytes=random_bytes, clock=clock)
            .with_cookie_name(properties.cookie_name)
            .with_cookie_path(properties.cookie_path)
            .with_cookie_http_only(properties.cookie_http_only)
            .with_cookie_secure(properties.cookie_secure)
            .with_header_name(properties.header_name)
            .with_timeout(properties.timeout_millis)
            .with_nag_https(properties.nag_https)
        )
        if properties.origin:
            handler.with_origin(properties.origin)
        return handler

    # ------------------------------------------------------------------
    # Builder
    # ------------------------------------------------------------------

    def with_origin(self, origin: str) -> CsrfHandler:
        self._origin_guard = OriginGuard(origin)
        return self._rebuild()

    def with_cookie_name(self, name: str) -> CsrfHandler:
        return self._update(cookie_name=name)

    def with_cookie_path(self, path: str) -> CsrfHandler:
        return self._update(cookie_path=path)

    def with_cookie_http_only(self, http_only: bool) -> CsrfHandler:
        return self._update(cookie_http_only=http_only)

    def with_cookie_secure(self, secure: bool) -> CsrfHandler:
        return self._update(cookie_secure=secure)

    def with_header_name(self, name: str) -> CsrfHandler:
        return self._update(header_name=name)

    def with_timeout(self, timeout_millis: int) -> CsrfHandler:
        return self._update(timeout_millis=timeout_millis)

    def with_nag_https(self, nag: bool) -> CsrfHandler:
        self._nag_https = nag
        return self

    def _update(self, **changes: object) -> CsrfHandler:
        self._settings = dataclasses.replace(self._settings, **changes)  # type: ignore[arg-type]
        return self._rebuild()

    def _rebuild(self) -> CsrfHandler:
        self._issuance = IssuancePolicy(self._codec, self._settings)
        self._validation = ValidationPolicy(self._codec, self._settings, self._origin_guard)
        return self

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def settings(self) -> CsrfSettings:
        return self._settings

    @property
    def codec(self) -> TokenCodec:
        return self._codec

    @property
    def origin_guard(self) -> OriginGuard | None:
        return self._origin_guard

    # ------------------------------------------------------------------
    # Request handling
    # ------------------------------------------------------------------

    def handle(self, exchange: CsrfExchange) -> CsrfDecision:
        """Apply the protocol to one request.  Never raises for bad input."""
        if self._nag_https:
            self._warn_if_insecure(exchange.absolute_uri)

        method = exchange.method.upper()
        if method in ISSUING_METHODS:
            issued = self._issuance.issue(exchange)
            return CsrfDecision.allow(issued.value)

        if method in VALIDATING_METHODS:
            try:
                self._validation.validate(exchange)
            except CsrfValidationException as exc:
                logger.warning("csrf_rejected", reason=exc.code, detail=str(exc), method=method)
                return CsrfDecision.reject(exc.code)
            # Rotate on success so each accepted request hands out a fresh token.
            return CsrfDecision.allow(self._issuance.rotate(exchange))

        return CsrfDecision.allow()

    @staticmethod
    def _warn_if_insecure(uri: str | None) -> None:
        if uri is not None and not uri.startswith("https:"):
            logger.warning(
                "csrf_insecure_transport",
                detail="Using session cookies without https could make you susceptible to session hijacking",
                uri=uri,
            )
