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
"""HttpSession: the server-side session CSRF tokens are bound to."""

from __future__ import annotations

import uuid
from typing import Any


def new_session_id() -> str:
    return uuid.uuid4().hex


class HttpSession:
    """Session attributes plus the change tracking :class:`SessionFilter` persists.

    Satisfies :class:`~xsrfguard.security.csrf.ports.CsrfSession`.  A CSRF
    binding is stored as an ordinary attribute, so :meth:`change_id` makes
    every token bound to the old id unusable while keeping the attributes.

    Attributes:
        id: The current identifier.
        original_id: The identifier the session was opened with.
        is_new: ``True`` if the session was created during the current request.
    """

    def __init__(
        self,
        session_id: str,
        attributes: dict[str, Any] | None = None,
        *,
        is_new: bool = False,
    ) -> None:
        self._id = session_id
        self._original_id = session_id
        self._attributes: dict[str, Any] = dict(attributes) if attributes else {}
        self._is_new = is_new
        self._modified = is_new
        self._invalidated = False

    @property
    def id(self) -> str:
        return self._id

    @property
    def original_id(self) -> str:
        return self._original_id

    @property
    def is_new(self) -> bool:
        return self._is_new

    @property
    def id_changed(self) -> bool:
        return self._id != self._original_id

    @property
    def modified(self) -> bool:
        return self._modified

    @property
    def invalidated(self) -> bool:
        return self._invalidated

    def get_attribute(self, name: str) -> Any | None:
        return self._attributes.get(name)

    def set_attribute(self, name: str, value: Any) -> None:
        self._attributes[name] = value
        self._modified = True

    def remove_attribute(self, name: str) -> None:
        if name in self._attributes:
            del self._attributes[name]
            self._modified = True

    def attribute_names(self) -> list[str]:
        return sorted(self._attributes)

    def change_id(self, new_id: str | None = None) -> str:
        """Move the session to a new identifier, keeping its attributes.

        Call this on privilege changes such as login.
        """
        self._id = new_id or new_session_id()
        self._modified = True
        return self._id

    def invalidate(self) -> None:
        """Discard the session when the response is sent."""
        self._invalidated = True

    def to_dict(self) -> dict[str, Any]:
        """A copy of the attributes, as handed to the :class:`SessionStore`."""
        return dict(self._attributes)
