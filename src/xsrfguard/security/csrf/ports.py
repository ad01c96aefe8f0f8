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
"""CSRF ports: what the policies need from the surrounding web stack.

Framework-agnostic: the Starlette adapter in
``xsrfguard.web.adapters.starlette.exchange`` implements :class:`CsrfExchange`
and :class:`~xsrfguard.session.session.HttpSession` implements
:class:`CsrfSession`.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from xsrfguard.security.csrf.cookie import TransportCookie


@runtime_checkable
class CsrfSession(Protocol):
    """Per-request view of a session's key-value attributes."""

    @property
    def id(self) -> str | None: ...

    def get_attribute(self, name: str) -> Any | None: ...

    def set_attribute(self, name: str, value: Any) -> None: ...

    def remove_attribute(self, name: str) -> None: ...


@runtime_checkable
class CsrfExchange(Protocol):
    """One request/response pair as seen by the CSRF policies.

    Header lookups are case-insensitive.  Cookies added with
    :meth:`add_cookie` are written to the eventual response by the adapter.
    """

    @property
    def method(self) -> str: ...

    @property
    def absolute_uri(self) -> str | None: ...

    @property
    def session(self) -> CsrfSession | None: ...

    def header(self, name: str) -> str | None: ...

    def form_field(self, name: str) -> str | None: ...

    def get_cookie(self, name: str) -> str | None: ...

    def add_cookie(self, cookie: TransportCookie) -> None: ...
