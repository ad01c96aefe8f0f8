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
"""CSRF configuration properties."""

from __future__ import annotations

from dataclasses import dataclass

from xsrfguard.core.config import config_properties
from xsrfguard.security.csrf.settings import (
    DEFAULT_COOKIE_NAME,
    DEFAULT_COOKIE_PATH,
    DEFAULT_HEADER_NAME,
    DEFAULT_TIMEOUT_MILLIS,
)


@config_properties(prefix="xsrfguard.csrf")
@dataclass
class CsrfProperties:
    """Configuration for CSRF protection (xsrfguard.csrf.*)."""

    secret: str = ""
    origin: str | None = None
    cookie_name: str = DEFAULT_COOKIE_NAME
    cookie_path: str = DEFAULT_COOKIE_PATH
    cookie_http_only: bool = False
    cookie_secure: bool = False
    header_name: str = DEFAULT_HEADER_NAME
    timeout_millis: int = DEFAULT_TIMEOUT_MILLIS
    nag_https: bool = False
    exclude_patterns: list[str] | None = None
