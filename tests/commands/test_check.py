"""Tests for the check command: the full pipeline through the CLI."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from confline.cli import cli

VALID = "server:\n  port: 9090\n  adminPort: 9091\nlogging:\n  level: WARNING\n"


class TestCheckSucceeds:
    def test_no_file_uses_defaults(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["check"])
        assert result.exit_code == 0
        assert "Configuration is OK" in result.output

    def test_valid_file(self, cli_runner: CliRunner, write_config) -> None:
        path = write_config(VALID)
        result = cli_runner.invoke(cli, ["check", str(path)])
        assert result.exit_code == 0
        assert "Configuration is OK" in result.output

    def test_stdin(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["check", "-"], input=VALID)
        assert result.exit_code == 0
        assert "Configuration is OK" in result.output

    def test_packaged_resource(
        self, cli_runner: CliRunner, tmp_path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        package = tmp_path / "packaged_service"
        package.mkdir()
        (package / "__init__.py").write_text("", encoding="utf-8")
        (package / "service.yml").write_text(VALID, encoding="utf-8")
        monkeypatch.syspath_prepend(str(tmp_path))
        result = cli_runner.invoke(cli, ["check", "resource:packaged_service/service.yml"])
        assert result.exit_code == 0
        assert "Configuration is OK" in result.output


class TestCheckFails:
    def test_missing_file(self, cli_runner: CliRunner, tmp_path) -> None:
        result = cli_runner.invoke(cli, ["check", str(tmp_path / "absent.yml")])
        assert result.exit_code == 1
        assert "not found" in result.output
        assert "Configuration is OK" not in result.output

    def test_admin_password_without_username(self, cli_runner: CliRunner, write_config) -> None:
        path = write_config("server:\n  adminPassword: secret\n")
        result = cli_runner.invoke(cli, ["check", str(path)])
        assert result.exit_code == 1
        assert "server must have adminUsername if adminPassword is defined" in result.output
        assert "Configuration is OK" not in result.output

    def test_port_out_of_range(self, cli_runner: CliRunner, write_config) -> None:
        path = write_config("server:\n  port: 99999\n")
        result = cli_runner.invoke(cli, ["check", str(path)])
        assert result.exit_code == 1
        assert "server.port must be between 1 and 65535" in result.output

    def test_malformed_duration(self, cli_runner: CliRunner, write_config) -> None:
        path = write_config("server:\n  idleTimeout: abc\n")
        result = cli_runner.invoke(cli, ["check", str(path)])
        assert result.exit_code == 1
        assert "server.idleTimeout is malformed" in result.output

    def test_reports_every_violation(self, cli_runner: CliRunner, write_config) -> None:
        path = write_config("server:\n  port: 0\n  adminPort: 0\n  minThreads: 0\n")
        result = cli_runner.invoke(cli, ["check", str(path)])
        assert result.exit_code == 1
        for expected in (
            "server.port must be between 1 and 65535",
            "server.adminPort must be between 1 and 65535",
            "server.minThreads must be greater than or equal to 1",
            "server must use different values for port and adminPort",
        ):
            assert expected in result.output

    def test_json_report(self, cli_runner: CliRunner, write_config) -> None:
        path = write_config("server:\n  port: 99999\n")
        result = cli_runner.invoke(cli, ["--json", "check", str(path)])
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["ok"] is False
        assert data["op"] == "check"
        assert data["code"] == "VALIDATION_FAILED"
        assert data["location"] == str(path)
        assert [v["path"] for v in data["violations"]] == ["server.port"]

    def test_json_from_environment(self, cli_runner: CliRunner, write_config) -> None:
        path = write_config("bogus: true\n")
        result = cli_runner.invoke(
            cli, ["check", str(path)], env={"CONFLINE_JSON_OUTPUT": "true"}
        )
        assert result.exit_code == 1
        assert json.loads(result.output)["code"] == "DECODE_FAILED"

    def test_verbose_shows_codes(self, cli_runner: CliRunner, write_config) -> None:
        path = write_config("server:\n  port: 99999\n")
        result = cli_runner.invoke(cli, ["-v", "check", str(path)])
        assert result.exit_code == 1
        assert "[VALIDATION_FAILED]" in result.output
        assert "(constraint)" in result.output


class TestOverrides:
    def test_define_override_fails_validation(self, cli_runner: CliRunner, write_config) -> None:
        path = write_config(VALID)
        result = cli_runner.invoke(cli, ["-D", "dw.server.port=99999", "check", str(path)])
        assert result.exit_code == 1
        assert "server.port must be between 1 and 65535" in result.output

    def test_environment_override(self, cli_runner: CliRunner, write_config) -> None:
        path = write_config(VALID)
        result = cli_runner.invoke(cli, ["check", str(path)], env={"dw.server.port": "0"})
        assert result.exit_code == 1
        assert "server.port must be between 1 and 65535" in result.output

    def test_define_beats_environment(self, cli_runner: CliRunner, write_config) -> None:
        path = write_config(VALID)
        result = cli_runner.invoke(
            cli,
            ["-D", "dw.server.port=9090", "check", str(path)],
            env={"dw.server.port": "0"},
        )
        assert result.exit_code == 0

    def test_unknown_override_path(self, cli_runner: CliRunner, write_config) -> None:
        path = write_config("")
        result = cli_runner.invoke(cli, ["-D", "dw.server.prot=1", "check", str(path)])
        assert result.exit_code == 1
        assert "server.prot is not a recognized field" in result.output

    def test_malformed_definition(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-D", "dw.server.port", "check"])
        assert result.exit_code == 2
        assert "KEY=VALUE" in result.output
