"""Tests for perch.config and perch.context."""

import pytest

from perch.config import AppConfig
from perch.context import get_diagnostics, get_request


class TestAppConfig:
    def test_defaults(self) -> None:
        config = AppConfig()
        assert config.controller_namespace == "app.controllers"
        assert config.conditional_methods == ("GET", "HEAD")
        assert config.fallback_body == "no routes found."
        assert config.fallback_status == 404
        assert config.log_enabled is True
        assert config.log_level == "debug"

    def test_frozen(self) -> None:
        config = AppConfig()
        with pytest.raises(AttributeError):
            config.debug = True  # type: ignore[misc]


class TestContext:
    def test_no_request_outside_handler(self) -> None:
        with pytest.raises(LookupError):
            get_request()

    def test_disabled_diagnostics_outside_handler(self) -> None:
        log = get_diagnostics()
        log.write("ignored")
        assert not log.active
        assert log.lines == ()
