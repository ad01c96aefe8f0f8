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
"""Redis-backed session store (``pip install xsrfguard[redis]``)."""

from __future__ import annotations

import json
from typing import Any

import structlog

logger = structlog.get_logger("xsrfguard.session")

DEFAULT_KEY_PREFIX = "xsrfguard:session:"


def _decode(raw: bytes | str) -> dict[str, Any] | None:
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError, TypeError):
        return None
    return data if isinstance(data, dict) else None


class RedisSessionStore:
    """Shares sessions between workers through ``redis.asyncio``.

    Each session is one JSON string under ``{key_prefix}{session_id}`` with a
    Redis expiry equal to the session TTL.  Entries that do not decode to a
    JSON object are treated as missing.
    """

    def __init__(self, client: Any, key_prefix: str = DEFAULT_KEY_PREFIX) -> None:
        self._client = client
        self._key_prefix = key_prefix

    @classmethod
    def from_url(cls, url: str, key_prefix: str = DEFAULT_KEY_PREFIX) -> RedisSessionStore:
        import redis.asyncio as aioredis

        return cls(aioredis.from_url(url), key_prefix)

    def _key(self, session_id: str) -> str:
        return self._key_prefix + session_id

    async def get(self, session_id: str) -> dict[str, Any] | None:
        raw = await self._client.get(self._key(session_id))
        if raw is None:
            return None
        data = _decode(raw)
        if data is None:
            logger.warning("session_deserialize_failed", key_prefix=self._key_prefix)
        return data

    async def save(self, session_id: str, data: dict[str, Any], ttl: int) -> None:
        await self._client.set(self._key(session_id), json.dumps(data).encode(), ex=ttl)

    async def delete(self, session_id: str) -> None:
        await self._client.delete(self._key(session_id))

    async def aclose(self) -> None:
        await self._client.aclose()
