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
"""CsrfFilter: signed double-submit cookie CSRF protection for Starlette.

* **GET**: the filter issues (or reuses) a token, exposes it on
  ``request.state.csrf_token`` for templates, and sets the ``XSRF-TOKEN``
  cookie on the response whenever a new token was minted.
* **POST, PUT, DELETE, PATCH**: the token from the ``X-XSRF-TOKEN`` header
  (or the form field of the same name) must equal the cookie, be bound to the
  current session when one exists, carry a valid signature and be unexpired.
  Any failure results in an HTTP 403 response.  On success a fresh token
  replaces the consumed one.
* Every other method passes through untouched.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from starlette.responses import JSONResponse

from xsrfguard.container.ordering import HIGHEST_PRECEDENCE, order
from xsrfguard.security.csrf.handler import CsrfHandler
from xsrfguard.web.adapters.starlette.exchange import StarletteCsrfExchange
from xsrfguard.web.filters import CallNext, OncePerRequestFilter


@order(HIGHEST_PRECEDENCE + 200)
class CsrfFilter(OncePerRequestFilter):
    """Runs :class:`CsrfHandler` for every matching request.

    Ordering: after the SessionFilter (``HIGHEST_PRECEDENCE + 150``) so the
    session is available for token binding.
    """

    exclude_patterns = ["/health", "/ready"]

    def __init__(
        self,
        handler: CsrfHandler,
        *,
        url_patterns: Iterable[str] | None = None,
        exclude_patterns: Iterable[str] | None = None,
    ) -> None:
        super().__init__(url_patterns=url_patterns, exclude_patterns=exclude_patterns)
        self._handler = handler

    @property
    def handler(self) -> CsrfHandler:
        return self._handler

    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        exchange = await StarletteCsrfExchange.from_request(request, self._handler.settings.header_name)
        decision = self._handler.handle(exchange)

        if not decision.proceed:
            return JSONResponse({"error": "CSRF validation failed"}, status_code=decision.status_code or 403)

        if decision.token is not None:
            request.state.csrf_token = decision.token

        response = await call_next(exchange.downstream_request())
        exchange.apply_cookies(response)
        return response
