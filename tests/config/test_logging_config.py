"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging

import pytest
import structlog

from settable.config.logging import configure_logging


class TestConfigureLogging:
    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True)
        assert logging.getLogger("settable").level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_default_is_warning(self) -> None:
        configure_logging()
        assert logging.getLogger("settable").level == logging.WARNING

    def test_quiet_hides_rejected_keys(self) -> None:
        configure_logging(quiet=True)
        assert logging.getLogger("settable").level == logging.ERROR

    def test_verbose_beats_quiet(self) -> None:
        configure_logging(verbose=True, quiet=True)
        assert logging.getLogger("settable").level == logging.DEBUG

    def test_json_mode_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(log_json=True)
        structlog.get_logger("settable.test").warning("json test", answer=42)
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "json test"
        assert parsed["answer"] == 42
        assert parsed["level"] == "warning"
        assert parsed["logger"] == "settable.test"
        assert "timestamp" in parsed

    def test_stdlib_records_carry_context(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(log_json=True)
        with structlog.contextvars.bound_contextvars(record=3):
            logging.getLogger("settable.domain.binder").warning("Couldn't map key %s", "f1")
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "Couldn't map key f1"
        assert parsed["record"] == 3
