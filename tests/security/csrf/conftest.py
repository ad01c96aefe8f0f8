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
"""Shared fakes for CSRF policy and handler tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from xsrfguard.security.csrf.cookie import TransportCookie
from xsrfguard.security.csrf.handler import CsrfHandler

SECRET = "test-secret"
T0 = 1_700_000_000_000


class FakeClock:
    """Mutable epoch-millisecond clock."""

    def __init__(self, now: int = T0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, millis: int) -> None:
        self.now += millis


class AnonymousSession:
    """A session that has not been persisted yet and has no id."""

    id = None

    def __init__(self) -> None:
        self.data: dict[str, Any] = {}

    def get_attribute(self, name: str) -> Any | None:
        return self.data.get(name)

    def set_attribute(self, name: str, value: Any) -> None:
        self.data[name] = value

    def remove_attribute(self, name: str) -> None:
        self.data.pop(name, None)


@dataclass
class FakeExchange:
    """In-memory CsrfExchange; ``added`` collects cookies set by the policies."""

    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    form: dict[str, str] | None = None
    cookies: dict[str, str] = field(default_factory=dict)
    session: Any = None
    absolute_uri: str | None = "https://example.com/form"
    added: list[TransportCookie] = field(default_factory=list)

    def header(self, name: str) -> str | None:
        for key, value in self.headers.items():
            if key.lower() == name.lower():
                return value
        return None

    def form_field(self, name: str) -> str | None:
        return None if self.form is None else self.form.get(name)

    def get_cookie(self, name: str) -> str | None:
        return self.cookies.get(name)

    def add_cookie(self, cookie: TransportCookie) -> None:
        self.added.append(cookie)


def _submit(token: str, method: str = "POST", session: Any = None, **kwargs: Any) -> FakeExchange:
    """An exchange echoing *token* in both the header and the cookie."""
    headers = {"X-XSRF-TOKEN": token, **kwargs.pop("headers", {})}
    return FakeExchange(method=method, headers=headers, cookies={"XSRF-TOKEN": token}, session=session, **kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_exchange() -> type[FakeExchange]:
    return FakeExchange


@pytest.fixture
def submit() -> Any:
    return _submit


@pytest.fixture
def anonymous_session() -> AnonymousSession:
    return AnonymousSession()


@pytest.fixture
def handler(clock: FakeClock) -> CsrfHandler:
    return CsrfHandler(SECRET, clock=clock)
