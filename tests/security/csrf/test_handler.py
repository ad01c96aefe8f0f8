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
"""Tests for CsrfHandler: method dispatch, decisions and end-to-end properties."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from xsrfguard.config.properties.csrf import CsrfProperties
from xsrfguard.kernel.exceptions import ConfigurationException
from xsrfguard.security.csrf.handler import CsrfDecision, CsrfHandler
from xsrfguard.session.session import HttpSession

TIMEOUT = 30 * 60 * 1000


def _get(handler, make_exchange, **kwargs) -> str:
    decision = handler.handle(make_exchange(method="GET", **kwargs))
    assert decision.proceed
    assert decision.token is not None
    return decision.token


class TestCsrfDecision:
    def test_allow(self) -> None:
        assert CsrfDecision.allow("t") == CsrfDecision(proceed=True, token="t")

    def test_reject_is_forbidden(self) -> None:
        decision = CsrfDecision.reject("CSRF_TOKEN_MISSING")
        assert not decision.proceed
        assert decision.status_code == 403
        assert decision.token is None


class TestCsrfHandlerConstruction:
    def test_empty_secret_aborts(self) -> None:
        with pytest.raises(ConfigurationException):
            CsrfHandler("")

    def test_malformed_origin_aborts(self) -> None:
        with pytest.raises(ConfigurationException):
            CsrfHandler("s").with_origin("not-an-origin")

    def test_builder_chains(self) -> None:
        handler = (
            CsrfHandler("s")
            .with_cookie_name("csrf")
            .with_cookie_path("/app")
            .with_cookie_http_only(True)
            .with_cookie_secure(True)
            .with_header_name("X-CSRF")
            .with_timeout(1000)
            .with_nag_https(True)
            .with_origin("https://example.com")
        )
        settings = handler.settings
        assert (settings.cookie_name, settings.cookie_path, settings.header_name) == ("csrf", "/app", "X-CSRF")
        assert settings.cookie_http_only and settings.cookie_secure
        assert settings.timeout_millis == 1000
        assert handler.origin_guard is not None

    def test_from_properties(self) -> None:
        properties = CsrfProperties(
            secret="s", origin="https://example.com:8443", cookie_name="c", header_name="h", timeout_millis=5
        )
        handler = CsrfHandler.from_properties(properties)
        assert handler.settings.cookie_name == "c"
        assert handler.settings.header_name == "h"
        assert handler.settings.timeout_millis == 5
        assert handler.origin_guard is not None
        assert handler.origin_guard.expected.port == 8443

    def test_from_properties_without_origin(self) -> None:
        assert CsrfHandler.from_properties(CsrfProperties(secret="s")).origin_guard is None

    def test_from_properties_requires_secret(self) -> None:
        with pytest.raises(ConfigurationException):
            CsrfHandler.from_properties(CsrfProperties())


class TestCsrfHandlerDispatch:
    def test_get_issues_token(self, handler, make_exchange) -> None:
        exchange = make_exchange(method="GET")
        decision = handler.handle(exchange)
        assert decision.proceed
        assert [c.value for c in exchange.added] == [decision.token]

    def test_lowercase_method(self, handler, make_exchange) -> None:
        assert handler.handle(make_exchange(method="get")).token is not None

    @pytest.mark.parametrize("method", ["HEAD", "OPTIONS", "TRACE", "CONNECT", "PROPFIND"])
    def test_other_methods_pass_through(self, handler, make_exchange, method) -> None:
        exchange = make_exchange(method=method)
        decision = handler.handle(exchange)
        assert decision == CsrfDecision.allow()
        assert exchange.added == []

    @pytest.mark.parametrize("method", ["POST", "PUT", "DELETE", "PATCH"])
    def test_mutating_methods_require_token(self, handler, make_exchange, method) -> None:
        decision = handler.handle(make_exchange(method=method))
        assert not decision.proceed
        assert decision.status_code == 403
        assert decision.reason == "CSRF_TOKEN_MISSING"

    def test_accepted_request_rotates_token(self, handler, make_exchange, submit) -> None:
        token = _get(handler, make_exchange)
        exchange = submit(token)
        decision = handler.handle(exchange)
        assert decision.proceed
        assert decision.token != token
        assert [c.value for c in exchange.added] == [decision.token]

    def test_rejection_is_logged_with_reason(self, handler, make_exchange) -> None:
        with patch("xsrfguard.security.csrf.handler.logger") as logger:
            handler.handle(make_exchange(method="POST"))
        logger.warning.assert_called_once()
        args, kwargs = logger.warning.call_args
        assert args == ("csrf_rejected",)
        assert kwargs["reason"] == "CSRF_TOKEN_MISSING"

    def test_nag_https_warns_on_plain_http(self, handler, make_exchange) -> None:
        handler.with_nag_https(True)
        with patch("xsrfguard.security.csrf.handler.logger") as logger:
            handler.handle(make_exchange(absolute_uri="http://example.com/form"))
        logger.warning.assert_called_once()
        assert logger.warning.call_args.args == ("csrf_insecure_transport",)

    def test_nag_https_silent_on_https(self, handler, make_exchange) -> None:
        handler.with_nag_https(True)
        with patch("xsrfguard.security.csrf.handler.logger") as logger:
            handler.handle(make_exchange(absolute_uri="https://example.com/form"))
        logger.warning.assert_not_called()

    def test_nag_https_off_by_default(self, handler, make_exchange) -> None:
        with patch("xsrfguard.security.csrf.handler.logger") as logger:
            handler.handle(make_exchange(absolute_uri="http://example.com/form"))
        logger.warning.assert_not_called()


class TestCsrfHandlerProperties:
    """End-to-end guarantees of the protocol."""

    def test_expiry_monotonicity(self, handler, make_exchange, submit, clock) -> None:
        token = _get(handler, make_exchange)
        clock.advance(TIMEOUT - 1)
        assert handler.handle(submit(token)).proceed

        token = _get(handler, make_exchange)
        clock.advance(TIMEOUT + 1)
        decision = handler.handle(submit(token))
        assert not decision.proceed
        assert decision.reason == "CSRF_TOKEN_EXPIRED"

    def test_single_use_with_session(self, handler, make_exchange, submit) -> None:
        session = HttpSession("sid-a")
        token = _get(handler, make_exchange, session=session)

        assert handler.handle(submit(token, session=session)).proceed
        second = handler.handle(submit(token, session=session))

        assert not second.proceed
        assert second.reason == "CSRF_SESSION_MISMATCH"

    def test_rotated_token_validates_next_request(self, handler, make_exchange, submit) -> None:
        session = HttpSession("sid-a")
        token = _get(handler, make_exchange, session=session)

        rotated = handler.handle(submit(token, session=session)).token
        assert rotated is not None
        assert handler.handle(submit(rotated, session=session)).proceed

    def test_session_upgrade_invalidates_token(self, handler, make_exchange, submit) -> None:
        session = HttpSession("A")
        token = _get(handler, make_exchange, session=session)
        session.change_id("B")

        decision = handler.handle(submit(token, session=session))
        assert not decision.proceed
        assert decision.reason == "CSRF_SESSION_MISMATCH"

    def test_double_submit_asymmetry(self, handler, make_exchange) -> None:
        token = _get(handler, make_exchange)
        other = _get(handler, make_exchange)
        cases = [
            make_exchange(method="POST", cookies={"XSRF-TOKEN": token}),
            make_exchange(method="POST", headers={"X-XSRF-TOKEN": token}),
            make_exchange(method="POST", headers={"X-XSRF-TOKEN": other}, cookies={"XSRF-TOKEN": token}),
            make_exchange(method="POST", headers={"X-XSRF-TOKEN": token}, cookies={"XSRF-TOKEN": other}),
        ]
        for exchange in cases:
            assert not handler.handle(exchange).proceed

    def test_origin_enforcement(self, clock, make_exchange, submit) -> None:
        handler = CsrfHandler("test-secret", clock=clock).with_origin("https://example.com:443")
        token = _get(handler, make_exchange)

        evil = handler.handle(submit(token, headers={"Origin": "https://evil.com"}))
        assert not evil.proceed
        assert evil.reason == "CSRF_ORIGIN_MISMATCH"

        assert handler.handle(submit(token, headers={"Origin": "https://example.com:443"})).proceed

    @pytest.mark.parametrize("value", ["", "one", "a.b", "a.b.c.d", "..."])
    def test_format_strictness(self, handler, submit, value) -> None:
        decision = handler.handle(submit(value))
        assert not decision.proceed

    def test_two_segment_token_is_malformed(self, handler, submit) -> None:
        assert handler.handle(submit("a.b")).reason == "CSRF_TOKEN_MALFORMED"

    def test_validation_never_raises(self, handler, make_exchange) -> None:
        exchange = make_exchange(
            method="POST",
            headers={"X-XSRF-TOKEN": "x.y.z", "Origin": "::::"},
            cookies={"XSRF-TOKEN": "x.y.z"},
            session=HttpSession("s", {"X-XSRF-TOKEN": "s/x.y.z"}),
        )
        assert not handler.handle(exchange).proceed
