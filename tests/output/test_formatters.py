"""Tests for the format_result dispatcher and OutputSettings."""

import json

from settable.output.formatters import OutputSettings, format_result
from settable.services.result import ServiceError, ServiceResult


def _ok(op: str = "test", **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data))


def _err(op: str = "test", msg: str = "fail") -> ServiceResult:
    return ServiceResult(ok=False, op=op, error=ServiceError(code="ERR", message=msg))


class TestOutputSettings:
    def test_defaults(self) -> None:
        s = OutputSettings()
        assert s.json_output is False
        assert s.quiet is False
        assert s.verbose is False


class TestFormatResult:
    def test_json_mode(self) -> None:
        output = format_result(_ok("bind", type="shop.Product"), settings=OutputSettings(True))
        data = json.loads(output)
        assert data["ok"] is True
        assert data["data"]["type"] == "shop.Product"

    def test_json_mode_error(self) -> None:
        data = json.loads(format_result(_err("bind", "Bad"), settings=OutputSettings(True)))
        assert data["error"]["message"] == "Bad"

    def test_json_wins_over_quiet(self) -> None:
        settings = OutputSettings(json_output=True, quiet=True)
        assert json.loads(format_result(_ok(), settings=settings))["op"] == "test"

    def test_quiet_mode(self) -> None:
        assert format_result(_ok("bind"), settings=OutputSettings(quiet=True)) == "OK: bind"

    def test_quiet_error(self) -> None:
        output = format_result(_err("bind", "nope"), settings=OutputSettings(quiet=True))
        assert output.startswith("ERROR: bind")
        assert "nope" in output

    def test_default_is_rich(self) -> None:
        output = format_result(_ok("bind", type="shop.Product"))
        assert output.startswith("OK")
        assert "shop.Product" in output
