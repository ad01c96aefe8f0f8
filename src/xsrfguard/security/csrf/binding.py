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
"""SessionBinding: ties an issued token to one session id."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

_SEPARATOR = "/"


@dataclass(frozen=True)
class SessionBinding:
    """The token issued for a session, stored as ``session_id/token``.

    Session ids change on upgrades (anonymous -> authenticated, role change),
    so a binding whose id differs from the current session's id is stale.
    """

    session_id: str
    token: str

    def belongs_to(self, session_id: str | None) -> bool:
        return session_id is not None and self.session_id == session_id

    def to_attribute(self) -> str:
        """Serialize for storage in the session."""
        return f"{self.session_id}{_SEPARATOR}{self.token}"

    @classmethod
    def from_attribute(cls, value: Any) -> SessionBinding | None:
        """Parse a stored session attribute; ``None`` if it is not a binding."""
        if not isinstance(value, str):
            return None
        session_id, sep, token = value.partition(_SEPARATOR)
        if not sep:
            return None
        return cls(session_id=session_id, token=token)
