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
"""Tests for the Origin guard."""

from __future__ import annotations

import pytest

from xsrfguard.kernel.exceptions import ConfigurationException, OriginMismatchException
from xsrfguard.security.csrf.origin import Origin, OriginGuard, same_origin


class TestOrigin:
    def test_parse_explicit_port(self) -> None:
        assert Origin.parse("https://example.com:8443/path?q=1") == Origin("https", "example.com", 8443)

    def test_parse_implicit_port_is_none(self) -> None:
        assert Origin.parse("https://example.com").port is None

    def test_invalid_port_raises_value_error(self) -> None:
        with pytest.raises(ValueError):
            Origin.parse("https://example.com:notaport")

    def test_str(self) -> None:
        assert str(Origin("https", "example.com", 443)) == "https://example.com:443"


class TestSameOrigin:
    def test_identical(self) -> None:
        a = Origin.parse("https://example.com:443")
        assert same_origin(a, Origin.parse("https://example.com:443/submit"))

    @pytest.mark.parametrize(
        "candidate",
        [
            "http://example.com:443",
            "https://evil.com:443",
            "https://example.com:8443",
            "https://sub.example.com:443",
        ],
    )
    def test_any_component_differs(self, candidate: str) -> None:
        assert not same_origin(Origin.parse("https://example.com:443"), Origin.parse(candidate))

    def test_default_port_is_not_normalized(self) -> None:
        assert not same_origin(Origin.parse("https://example.com:443"), Origin.parse("https://example.com"))


class TestOriginGuardConstruction:
    @pytest.mark.parametrize("origin", ["example.com", "https://", "/relative", "https://example.com:99999"])
    def test_invalid_expected_origin(self, origin: str) -> None:
        with pytest.raises(ConfigurationException):
            OriginGuard(origin)

    def test_valid_expected_origin(self) -> None:
        guard = OriginGuard("https://example.com:443")
        assert guard.expected == Origin("https", "example.com", 443)


class TestOriginGuardCheck:
    guard = OriginGuard("https://example.com:443")

    def test_matching_origin_header(self) -> None:
        self.guard.check("https://example.com:443", None)

    def test_foreign_origin_header(self) -> None:
        with pytest.raises(OriginMismatchException):
            self.guard.check("https://evil.com", None)

    def test_falls_back_to_referer_when_origin_blank(self) -> None:
        self.guard.check("   ", "https://example.com:443/page")

    def test_origin_wins_over_referer(self) -> None:
        with pytest.raises(OriginMismatchException):
            self.guard.check("https://evil.com:443", "https://example.com:443/page")

    @pytest.mark.parametrize("origin, referer", [(None, None), ("", ""), (" ", None), (None, "  ")])
    def test_both_blank(self, origin: str | None, referer: str | None) -> None:
        with pytest.raises(OriginMismatchException) as exc_info:
            self.guard.check(origin, referer)
        assert exc_info.value.code == "CSRF_ORIGIN_MISMATCH"

    @pytest.mark.parametrize("source", ["https://example.com:abc", "null", "not a uri"])
    def test_malformed_source(self, source: str) -> None:
        with pytest.raises(OriginMismatchException):
            self.guard.check(source, None)
