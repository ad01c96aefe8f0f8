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
"""StructlogAdapter: default LoggingPort implementation using structlog.

xsrfguard modules log through ``structlog.get_logger("xsrfguard.csrf")`` (and
``xsrfguard.session``, ``xsrfguard.web``) with an event name plus key/value
pairs, e.g. ``csrf_rejected reason=CSRF_TOKEN_EXPIRED method=POST``.  This
adapter decides how those events are rendered and at which levels, from the
``xsrfguard.logging`` section::

    xsrfguard:
      logging:
        format: json          # or console
        level:
          root: INFO
          xsrfguard.csrf: DEBUG
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog

from xsrfguard.core.config import Config
from xsrfguard.kernel.exceptions import ConfigurationException

_RENDERERS: dict[str, Any] = {
    "console": structlog.dev.ConsoleRenderer,
    "json": structlog.processors.JSONRenderer,
}


def _to_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


class StructlogAdapter:
    """Routes structlog events through stdlib logging handlers.

    Args:
        stream: Where log lines are written, ``sys.stdout`` by default.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self._root_level = "INFO"
        self._format = "console"
        self._module_levels: dict[str, str] = {}

    @property
    def root_level(self) -> str:
        return self._root_level

    @property
    def format(self) -> str:
        return self._format

    @property
    def module_levels(self) -> dict[str, str]:
        return dict(self._module_levels)

    def configure(self, config: Config) -> None:
        """Apply the ``xsrfguard.logging`` section.

        Raises:
            ConfigurationException: If the format is neither ``console`` nor ``json``.
        """
        levels = {str(k): str(v).upper() for k, v in config.get_section("xsrfguard.logging.level").items()}
        levels.pop("root", None)
        root = config.get("xsrfguard.logging.level.root", "INFO")
        fmt = str(config.get("xsrfguard.logging.format", "console")).lower()
        if fmt not in _RENDERERS:
            raise ConfigurationException(f"Unknown log format '{fmt}', expected one of {sorted(_RENDERERS)}")

        self._root_level = str(root).upper()
        self._format = fmt
        self._module_levels = levels

        logging.basicConfig(
            format="%(message)s",
            stream=self._stream or sys.stdout,
            level=_to_level(self._root_level),
            force=True,
        )
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.format_exc_info,
                _RENDERERS[fmt](),
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        for name, level in self._module_levels.items():
            self.set_level(name, level)

    def get_logger(self, name: str) -> Any:
        return structlog.get_logger(name)

    def set_level(self, name: str, level: str) -> None:
        """Set the level of one stdlib logger; unknown level names mean INFO."""
        logging.getLogger(name).setLevel(_to_level(level))
