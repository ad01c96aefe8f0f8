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
"""TransportCookie: attributes of the cookie that carries the token."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

SAME_SITE_STRICT = "strict"


@dataclass(frozen=True)
class TransportCookie:
    """Cookie carrying a serialized token to the user agent.

    ``same_site`` is always ``strict``; it is not a constructor argument.
    With ``http_only`` set, scripts cannot echo the cookie into a header and
    the token must be submitted through a form field instead.
    """

    name: str
    value: str
    path: str = "/"
    http_only: bool = False
    secure: bool = False
    same_site: str = field(default=SAME_SITE_STRICT, init=False)

    def apply_to(self, response: Any) -> None:
        """Set this cookie on a Starlette-compatible *response*."""
        response.set_cookie(
            key=self.name,
            value=self.value,
            path=self.path,
            httponly=self.http_only,
            secure=self.secure,
            samesite=self.same_site,
        )
