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
"""Starlette wiring: builds the session + CSRF filter chain from config.

Usage::

    config = Config.from_file("xsrfguard.yaml")
    app = Starlette(routes=routes, middleware=[build_filter_chain(config)])
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog
from starlette.middleware import Middleware

from xsrfguard.config.properties.csrf import CsrfProperties
from xsrfguard.config.properties.session import SessionProperties
from xsrfguard.core.config import Config
from xsrfguard.kernel.exceptions import ConfigurationException
from xsrfguard.security.csrf.handler import CsrfHandler
from xsrfguard.session.adapters.memory import InMemorySessionStore
from xsrfguard.session.filter import SessionFilter
from xsrfguard.session.ports.outbound import SessionStore
from xsrfguard.web.adapters.starlette.filter_chain import WebFilterChainMiddleware
from xsrfguard.web.adapters.starlette.filters.csrf_filter import CsrfFilter
from xsrfguard.web.filters import WebFilter

logger = structlog.get_logger("xsrfguard.web")


def create_session_store(properties: SessionProperties) -> SessionStore:
    """Create the configured session store (``memory`` or ``redis``)."""
    store_type = properties.store.lower()
    if store_type == "redis":
        from xsrfguard.session.adapters.redis import RedisSessionStore

        return RedisSessionStore.from_url(properties.redis_url)
    if store_type == "memory":
        return InMemorySessionStore()
    raise ConfigurationException(f"Unknown session store '{properties.store}'")


def create_csrf_filter(config: Config) -> CsrfFilter:
    properties = config.bind(CsrfProperties)
    handler = CsrfHandler.from_properties(properties)
    return CsrfFilter(handler, exclude_patterns=properties.exclude_patterns)


def build_filter_chain(
    config: Config,
    store: SessionStore | None = None,
    extra_filters: Sequence[WebFilter] = (),
) -> Middleware:
    """Return a ``WebFilterChainMiddleware`` entry for ``Starlette(middleware=[...])``.

    The SessionFilter is included when ``xsrfguard.session.enabled`` is true
    or an explicit *store* is given.

    Raises:
        ConfigurationException: If the CSRF secret, origin or store is invalid.
    """
    filters: list[WebFilter] = [create_csrf_filter(config), *extra_filters]

    session_properties = config.bind(SessionProperties)
    if store is not None or session_properties.enabled:
        filters.append(
            SessionFilter.from_properties(
                session_properties,
                store if store is not None else create_session_store(session_properties),
            )
        )

    logger.info("filter_chain_configured", filters=[type(f).__name__ for f in filters])
    return Middleware(WebFilterChainMiddleware, filters=filters)
