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
"""Configuration from YAML/TOML files and env vars, with dataclass binding."""

from __future__ import annotations

import dataclasses
import importlib.resources
import os
import re
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar, get_args, get_type_hints

import yaml  # type: ignore[import-untyped]

from xsrfguard.kernel.exceptions import ConfigurationException

T = TypeVar("T")

ENV_PREFIX = "XSRFGUARD_"
ROOT_KEY = "xsrfguard"
CONFIG_BASENAME = "xsrfguard"

_PLACEHOLDER_RE = re.compile(r"\$\{([^}]+)\}")

_CONFIG_PROPERTIES_ATTR = "__xsrfguard_config_prefix__"

_MAX_PLACEHOLDER_DEPTH = 10

_TRUE_VALUES = ("true", "1", "yes", "on")


def config_properties(prefix: str) -> Callable[[type[T]], type[T]]:
    """Mark a dataclass as bindable to a configuration prefix.

    Usage:
        @config_properties(prefix="xsrfguard.csrf")
        @dataclass
        class CsrfProperties:
            secret: str = ""
    """

    def decorator(cls: type[T]) -> type[T]:
        setattr(cls, _CONFIG_PROPERTIES_ATTR, prefix)
        return cls

    return decorator


def env_key_for(key: str) -> str:
    """Map a dot-notation key to its environment variable name.

    ``xsrfguard.csrf.cookie-name`` -> ``XSRFGUARD_CSRF_COOKIE_NAME``
    """
    base = key.removeprefix(f"{ROOT_KEY}.")
    return ENV_PREFIX + base.upper().replace(".", "_").replace("-", "_")


class Config:
    """Hierarchical configuration with dot-notation access and env var overrides.

    Priority (highest wins):
    1. Environment variables (XSRFGUARD_SECTION_KEY format)
    2. Configuration dict / YAML / TOML file values
    3. Dataclass defaults
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data or {}
        self._loaded_sources: list[str] = []

    @property
    def loaded_sources(self) -> list[str]:
        """List of config file paths that were loaded, in merge order."""
        return list(self._loaded_sources)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        active_profiles: list[str] | None = None,
        load_defaults: bool = True,
    ) -> Config:
        """Load configuration from a YAML or TOML file.

        Merge order (later wins):
        1. Packaged defaults (xsrfguard-defaults.yaml)
        2. *path* itself
        3. Profile overlays next to it: ``{stem}-{profile}{suffix}``
        """
        path = Path(path)
        data: dict[str, Any] = {}
        sources: list[str] = []

        if load_defaults:
            data = cls._load_defaults()
            sources.append(f"{CONFIG_BASENAME}-defaults.yaml (defaults)")

        if path.is_file():
            data = cls._deep_merge(data, cls._load_config_data(path))
            sources.append(str(path))

            for profile in active_profiles or []:
                profile_path = path.parent / f"{path.stem}-{profile}{path.suffix}"
                if profile_path.is_file():
                    data = cls._deep_merge(data, cls._load_config_data(profile_path))
                    sources.append(f"{profile_path} (profile: {profile})")

        instance = cls(data)
        instance._loaded_sources = sources
        return instance

    @classmethod
    def from_defaults(cls) -> Config:
        """Configuration holding only the packaged defaults."""
        instance = cls(cls._load_defaults())
        instance._loaded_sources = [f"{CONFIG_BASENAME}-defaults.yaml (defaults)"]
        return instance

    @staticmethod
    def _load_config_data(path: Path) -> dict[str, Any]:
        """Load config data from a YAML or TOML file."""
        try:
            if path.suffix == ".toml":
                with open(path, "rb") as f:
                    return tomllib.load(f) or {}
            with open(path) as f:
                return yaml.safe_load(f) or {}
        except (yaml.YAMLError, tomllib.TOMLDecodeError) as exc:
            raise ConfigurationException(f"Cannot parse configuration file '{path}': {exc}") from exc

    @staticmethod
    def _load_defaults() -> dict[str, Any]:
        defaults_file = importlib.resources.files("xsrfguard.resources").joinpath(
            f"{CONFIG_BASENAME}-defaults.yaml"
        )
        with importlib.resources.as_file(defaults_file) as p, open(p) as f:
            return yaml.safe_load(f) or {}

    @staticmethod
    def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Merge *override* into a copy of *base*; nested dicts merge, anything else is replaced."""
        merged = dict(base)
        for key, value in override.items():
            current = merged.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                merged[key] = Config._deep_merge(current, value)
            else:
                merged[key] = value
        return merged

    def get(self, key: str, default: Any = None) -> Any:
        """Value at dot-notation *key*; its ``XSRFGUARD_*`` environment variable wins.

        ``${...}`` placeholders in string values are expanded: ``${ENV_VAR}``,
        ``${other.config.key}``, or either with a fallback, ``${name:fallback}``.
        """
        override = os.environ.get(env_key_for(key))
        if override is not None:
            return override

        value = self._lookup(key)
        if value is None:
            return default
        return self._resolve_placeholders(value) if isinstance(value, str) else value

    def _lookup(self, key: str) -> Any:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def _resolve_placeholders(self, value: str, depth: int = 0) -> str:
        if "${" not in value:
            return value
        if depth >= _MAX_PLACEHOLDER_DEPTH:
            raise ConfigurationException(f"Placeholders in '{value}' nest too deeply; check for a reference cycle")
        return _PLACEHOLDER_RE.sub(lambda match: self._expand(match.group(1), depth), value)

    def _expand(self, expression: str, depth: int) -> str:
        name, has_fallback, fallback = expression.partition(":")

        found = os.environ.get(name)
        if found is None:
            configured = self._lookup(name)
            if configured is not None:
                found = self._resolve_placeholders(str(configured), depth + 1)

        if found is not None:
            return found
        if has_fallback:
            return fallback
        raise ConfigurationException(f"Cannot resolve placeholder '${{{expression}}}' from environment or config")

    def get_section(self, prefix: str) -> dict[str, Any]:
        """Get all values under a prefix as a dict."""
        current = self._lookup(prefix)
        return current if isinstance(current, dict) else {}

    def bind(self, config_cls: type[T]) -> T:
        """Bind configuration to a ``@config_properties`` dataclass.

        Keys may use ``kebab-case`` or ``snake_case``.  Each field also honours
        its environment override, e.g. ``XSRFGUARD_CSRF_SECRET``.

        Raises:
            ConfigurationException: If a value cannot be coerced to the field type.
        """
        prefix = getattr(config_cls, _CONFIG_PROPERTIES_ATTR, None)
        if prefix is None:
            raise ConfigurationException(f"{config_cls.__name__} is not decorated with @config_properties")

        section = {str(k).replace("-", "_"): v for k, v in self.get_section(prefix).items()}
        hints = get_type_hints(config_cls)
        kwargs: dict[str, Any] = {}
        for field in dataclasses.fields(config_cls):  # type: ignore[arg-type]
            kebab = field.name.replace("_", "-")
            value = self.get(f"{prefix}.{kebab}", section.get(field.name))
            if value is None:
                continue
            if isinstance(value, str):
                value = self._resolve_placeholders(value)
            kwargs[field.name] = _coerce(field.name, value, hints.get(field.name))

        return config_cls(**kwargs)


def _unwrap_optional(expected_type: Any) -> Any:
    args = get_args(expected_type)
    if type(None) in args and len(args) == 2:
        return next(arg for arg in args if arg is not type(None))
    return expected_type


def _coerce(name: str, value: Any, expected_type: Any) -> Any:
    expected_type = _unwrap_optional(expected_type)
    if not isinstance(value, str):
        # YAML scalars such as ``secret: 123456`` must still bind as text.
        if expected_type is str and isinstance(value, (bool, int, float)):
            return str(value)
        return value
    try:
        if expected_type is int:
            return int(value)
        if expected_type is float:
            return float(value)
    except ValueError as exc:
        raise ConfigurationException(f"Invalid value for '{name}': {value!r}") from exc
    if expected_type is bool:
        return value.strip().lower() in _TRUE_VALUES
    if expected_type == list[str]:
        return [item.strip() for item in value.split(",") if item.strip()]
    return value
