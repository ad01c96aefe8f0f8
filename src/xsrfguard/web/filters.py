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
"""Web filters: the request/response interception contract.

A filter sees the request before the route handler and the response after
it.  Filters never import Starlette; they only rely on ``request.url.path``,
``request.state`` and the response's cookie methods.
"""

from __future__ import annotations

import abc
from collections.abc import Callable, Coroutine, Iterable
from fnmatch import fnmatch
from typing import Any, Protocol, runtime_checkable

# Concrete type: Callable[[Request], Coroutine[Any, Any, Response]]
CallNext = Callable[..., Coroutine[Any, Any, Any]]


@runtime_checkable
class WebFilter(Protocol):
    """A link in ``WebFilterChainMiddleware``, executed in ``@order`` order."""

    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        """Handle *request*, usually by awaiting ``call_next(request)``."""
        ...

    def should_not_filter(self, request: Any) -> bool:
        """Return ``True`` to skip this filter for the given request."""
        ...


class OncePerRequestFilter(abc.ABC):
    """Base class for filters scoped by glob patterns on the request path.

    Class-level ``url_patterns`` / ``exclude_patterns`` act as defaults;
    passing them to the constructor overrides them per instance.  An empty
    ``url_patterns`` matches every path; ``exclude_patterns`` win over
    ``url_patterns``.
    """

    url_patterns: list[str] = []
    exclude_patterns: list[str] = []

    def __init__(
        self,
        *,
        url_patterns: Iterable[str] | None = None,
        exclude_patterns: Iterable[str] | None = None,
    ) -> None:
        if url_patterns is not None:
            self.url_patterns = list(url_patterns)
        if exclude_patterns is not None:
            self.exclude_patterns = list(exclude_patterns)

    def should_not_filter(self, request: Any) -> bool:
        path: str = request.url.path
        if self.url_patterns and not any(fnmatch(path, p) for p in self.url_patterns):
            return True
        return any(fnmatch(path, p) for p in self.exclude_patterns)

    @abc.abstractmethod
    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        """Filter logic.  Call ``await call_next(request)`` to continue the chain."""
        ...
