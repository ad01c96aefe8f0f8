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
"""WebFilterChainMiddleware: pure ASGI middleware wrapping all WebFilters."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, cast

from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from xsrfguard.container.ordering import get_order
from xsrfguard.web.filters import CallNext, WebFilter


class WebFilterChainMiddleware:
    """Runs :class:`WebFilter` instances around the wrapped ASGI app.

    Filters are sorted by ``@order`` (stable for equal orders) and composed
    once, at construction.  The app is called with the scope and ``receive``
    of whichever request reaches the end of the chain, so a filter that read
    the body can hand down a request that replays it.  The app's response is
    buffered into a :class:`Response` so filters can add cookies to it.
    """

    def __init__(self, app: ASGIApp, filters: Sequence[WebFilter] = ()) -> None:
        self.app = app
        self._filters = sorted(filters, key=get_order)

        chain: CallNext = self._call_app
        for web_filter in reversed(self._filters):
            chain = _guarded(web_filter, chain)
        self._chain = chain

    @property
    def filters(self) -> list[WebFilter]:
        return list(self._filters)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response = cast(Response, await self._chain(Request(scope, receive, send)))
        await response(scope, receive, send)

    async def _call_app(self, request: Request) -> Response:
        buffered = _BufferedResponse()
        await self.app(request.scope, request.receive, buffered.send)
        return buffered.to_response()


class _BufferedResponse:
    """Collects the ``http.response.*`` messages sent by the downstream app."""

    def __init__(self) -> None:
        self.status_code = 200
        self.raw_headers: list[tuple[bytes, bytes]] = []
        self.body = bytearray()

    async def send(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            self.status_code = message["status"]
            self.raw_headers = list(message.get("headers", []))
        elif message["type"] == "http.response.body":
            self.body.extend(message.get("body", b""))

    def to_response(self) -> Response:
        response = Response(content=bytes(self.body), status_code=self.status_code)
        response.raw_headers[:] = self.raw_headers
        return response


def _guarded(web_filter: WebFilter, next_call: CallNext) -> CallNext:
    """Invoke *web_filter* unless it opts out of the request."""

    async def _inner(request: Any) -> Any:
        if web_filter.should_not_filter(request):
            return await next_call(request)
        return await web_filter.do_filter(request, next_call)

    return _inner
