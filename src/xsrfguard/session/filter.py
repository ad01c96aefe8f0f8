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
"""SessionFilter: opens the session before the CSRF filter and persists it after."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from xsrfguard.container.ordering import HIGHEST_PRECEDENCE, order
from xsrfguard.session.ports.outbound import SessionStore
from xsrfguard.session.session import HttpSession, new_session_id
from xsrfguard.web.filters import CallNext, OncePerRequestFilter

if TYPE_CHECKING:
    from xsrfguard.config.properties.session import SessionProperties

DEFAULT_COOKIE_NAME = "XSRFGUARD_SESSION"
DEFAULT_TTL = 1800  # seconds


@order(HIGHEST_PRECEDENCE + 150)
class SessionFilter(OncePerRequestFilter):
    """Attaches an :class:`HttpSession` to ``request.state.session``.

    The session id travels in an ``HttpOnly`` cookie and the attributes live
    in a :class:`SessionStore`.  After the response:

    * an invalidated session is deleted and its cookie cleared;
    * a session whose id changed is moved to the new id and the cookie
      re-sent, so tokens bound to the old id stop validating;
    * any other modified session is saved.

    Ordered before :class:`~xsrfguard.web.adapters.starlette.filters.csrf_filter.CsrfFilter`.
    """

    def __init__(
        self,
        store: SessionStore,
        *,
        cookie_name: str = DEFAULT_COOKIE_NAME,
        ttl: int = DEFAULT_TTL,
        secure: bool = False,
    ) -> None:
        super().__init__()
        self._store = store
        self._cookie_name = cookie_name
        self._ttl = ttl
        self._secure = secure

    @classmethod
    def from_properties(cls, properties: SessionProperties, store: SessionStore) -> SessionFilter:
        return cls(
            store,
            cookie_name=properties.cookie_name,
            ttl=properties.ttl,
            secure=properties.cookie_secure,
        )

    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        session = await self._open(request.cookies.get(self._cookie_name))
        request.state.session = session

        try:
            response = await call_next(request)
        finally:
            await self._store_changes(session)

        self._write_cookie(response, session)
        return response

    async def _open(self, session_id: str | None) -> HttpSession:
        if session_id:
            attributes = await self._store.get(session_id)
            if attributes is not None:
                return HttpSession(session_id, attributes)
        return HttpSession(new_session_id(), is_new=True)

    async def _store_changes(self, session: HttpSession) -> None:
        if not session.is_new and (session.invalidated or session.id_changed):
            await self._store.delete(session.original_id)
        if session.invalidated:
            return
        if session.modified:
            await self._store.save(session.id, session.to_dict(), self._ttl)

    def _write_cookie(self, response: Any, session: HttpSession) -> None:
        if session.invalidated:
            if not session.is_new:
                response.delete_cookie(key=self._cookie_name)
            return
        if session.is_new or session.id_changed:
            response.set_cookie(
                key=self._cookie_name,
                value=session.id,
                max_age=self._ttl,
                httponly=True,
                secure=self._secure,
                samesite="lax",
            )
