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
"""Session store protocol."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class SessionStore(Protocol):
    """Where :class:`~xsrfguard.session.filter.SessionFilter` keeps session attributes.

    Values are plain dicts of JSON-compatible data; stores must not hand out
    references to what they hold.
    """

    async def get(self, session_id: str) -> dict[str, Any] | None:
        """Attributes of a live session, or ``None`` if unknown or expired."""
        ...

    async def save(self, session_id: str, data: dict[str, Any], ttl: int) -> None:
        """Store *data*, replacing any previous value; expires after *ttl* seconds."""
        ...

    async def delete(self, session_id: str) -> None:
        """Forget a session.  Unknown ids are ignored."""
        ...
