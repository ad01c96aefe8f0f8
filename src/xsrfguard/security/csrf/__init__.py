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
"""CSRF protection: signed double-submit cookie with session binding.

Import the Starlette integration from the web adapter package::

    from xsrfguard.web.adapters.starlette.filters.csrf_filter import CsrfFilter
"""

from xsrfguard.security.csrf.binding import SessionBinding
from xsrfguard.security.csrf.codec import TokenCodec
from xsrfguard.security.csrf.cookie import TransportCookie
from xsrfguard.security.csrf.handler import CsrfDecision, CsrfHandler
from xsrfguard.security.csrf.origin import Origin, OriginGuard, same_origin
from xsrfguard.security.csrf.policy import IssuancePolicy, IssuedToken, ValidationPolicy
from xsrfguard.security.csrf.ports import CsrfExchange, CsrfSession
from xsrfguard.security.csrf.settings import (
    DEFAULT_COOKIE_NAME,
    DEFAULT_COOKIE_PATH,
    DEFAULT_HEADER_NAME,
    DEFAULT_TIMEOUT_MILLIS,
    CsrfSettings,
)
from xsrfguard.security.csrf.token import CsrfToken

__all__ = [
    "DEFAULT_COOKIE_NAME",
    "DEFAULT_COOKIE_PATH",
    "DEFAULT_HEADER_NAME",
    "DEFAULT_TIMEOUT_MILLIS",
    "CsrfDecision",
    "CsrfExchange",
    "CsrfHandler",
    "CsrfSession",
    "CsrfSettings",
    "CsrfToken",
    "IssuancePolicy",
    "IssuedToken",
    "Origin",
    "OriginGuard",
    "SessionBinding",
    "TokenCodec",
    "TransportCookie",
    "ValidationPolicy",
    "same_origin",
]
