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
"""StarletteCsrfExchange: adapts a Starlette request to the CSRF ports."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import Request
from starlette.types import Message, Receive

from xsrfguard.security.csrf.cookie import TransportCookie
from xsrfguard.security.csrf.ports import CsrfSession
from xsrfguard.security.csrf.settings import VALIDATING_METHODS

logger = structlog.get_logger("xsrfguard.csrf")

_FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def _is_form(request: Any) -> bool:
    content_type = request.headers.get("content-type", "")
    return content_type.split(";", 1)[0].strip().lower() in _FORM_CONTENT_TYPES


def _replay_receive(body: bytes, receive: Receive) -> Receive:
    """Return a ``receive`` that yields *body* once, then defers to *receive*."""
    replayed = False

    async def _receive() -> Message:
        nonlocal replayed
        if not replayed:
            replayed = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return _receive


class StarletteCsrfExchange:
    """A :class:`~xsrfguard.security.csrf.ports.CsrfExchange` over a Starlette request.

    The session is read from ``request.state.session`` (set by
    :class:`~xsrfguard.session.filter.SessionFilter`).  Cookies added by the
    policies are queued and written by :meth:`apply_cookies`.
    """

    def __init__(
        self,
        request: Any,
        form: Mapping[str, Any] | None = None,
        body: bytes | None = None,
    ) -> None:
        self._request = request
        self._form = form
        self._body = body
        self._cookies: list[TransportCookie] = []

    @classmethod
    async def from_request(cls, request: Any, field_name: str) -> StarletteCsrfExchange:
        """Build an exchange, reading the form only when it may carry the token."""
        if (
            request.method.upper() not in VALIDATING_METHODS
            or request.headers.get(field_name) is not None
            or not _is_form(request)
        ):
            return cls(request)

        body = await request.body()
        try:
            form = await request.form()
        except (HTTPException, MultiPartException) as exc:
            logger.warning("csrf_form_unreadable", detail=str(exc))
            return cls(request, body=body)
        return cls(request, form=form, body=body)

    @property
    def method(self) -> str:
        return str(self._request.method)

    @property
    def absolute_uri(self) -> str | None:
        url = getattr(self._request, "url", None)
        return str(url) if url is not None else None

    @property
    def session(self) -> CsrfSession | None:
        return getattr(getattr(self._request, "state", None), "session", None)

    @property
    def pending_cookies(self) -> list[TransportCookie]:
        return list(self._cookies)

    def header(self, name: str) -> str | None:
        return self._request.headers.get(name)

    def form_field(self, name: str) -> str | None:
        if self._form is None:
            return None
        value = self._form.get(name)
        # file uploads are never tokens
        return value if isinstance(value, str) else None

    def get_cookie(self, name: str) -> str | None:
        return self._request.cookies.get(name)

    def add_cookie(self, cookie: TransportCookie) -> None:
        self._cookies.append(cookie)

    def apply_cookies(self, response: Any) -> None:
        for cookie in self._cookies:
            cookie.apply_to(response)

    def downstream_request(self) -> Any:
        """The request to hand down the chain, replaying the body if it was read."""
        if self._body is None:
            return self._request
        return Request(self._request.scope, _replay_receive(self._body, self._request.receive))
