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
"""In-memory session store with TTL-based expiry."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from typing import Any


class InMemorySessionStore:
    """Process-local :class:`~xsrfguard.session.ports.outbound.SessionStore`.

    Suitable for a single worker and for tests.  Entries are copied in and
    out, so a request only changes the stored session when the session
    filter saves it.  Expired entries are dropped lazily on read.

    Args:
        clock: Monotonic seconds, injectable for tests.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: dict[str, tuple[float, dict[str, Any]]] = {}
        self._clock = clock
        self._lock = asyncio.Lock()

    async def get(self, session_id: str) -> dict[str, Any] | None:
        async with self._lock:
            entry = self._entries.get(session_id)
            if entry is None:
                return None
            deadline, data = entry
            if self._clock() >= deadline:
                del self._entries[session_id]
                return None
            return dict(data)

    async def save(self, session_id: str, data: dict[str, Any], ttl: int) -> None:
        async with self._lock:
            self._entries[session_id] = (self._clock() + ttl, dict(data))

    async def delete(self, session_id: str) -> None:
        async with self._lock:
            self._entries.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._entries)
