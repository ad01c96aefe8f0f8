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
"""Tests for SessionBinding serialization."""

from __future__ import annotations

import pytest

from xsrfguard.security.csrf.binding import SessionBinding


class TestSessionBinding:
    def test_to_attribute(self) -> None:
        assert SessionBinding("abc", "s.1.sig").to_attribute() == "abc/s.1.sig"

    def test_from_attribute_splits_on_first_slash(self) -> None:
        binding = SessionBinding.from_attribute("abc/s/alt.1.sig")
        assert binding == SessionBinding("abc", "s/alt.1.sig")

    @pytest.mark.parametrize("value", [None, 42, "no-separator", b"abc/def"])
    def test_from_attribute_rejects_non_bindings(self, value: object) -> None:
        assert SessionBinding.from_attribute(value) is None

    def test_belongs_to(self) -> None:
        binding = SessionBinding("abc", "t")
        assert binding.belongs_to("abc")
        assert not binding.belongs_to("xyz")
        assert not binding.belongs_to(None)
