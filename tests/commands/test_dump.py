"""Tests for the dump command."""

from __future__ import annotations

from io import StringIO

from click.testing import CliRunner
from ruamel.yaml import YAML

from confline.cli import cli
from confline.commands.dump import REDACTED, redact


def _load(text: str) -> dict:
    return YAML(typ="safe", pure=True).load(StringIO(text))


class TestRedact:
    def test_masks_set_passwords(self) -> None:
        data = {"server": {"adminPassword": "secret", "adminUsername": "admin"}}
        assert redact(data) == {"server": {"adminPassword": REDACTED, "adminUsername": "admin"}}

    def test_leaves_unset_passwords(self) -> None:
        assert redact({"adminPassword": None}) == {"adminPassword": None}

    def test_walks_lists(self) -> None:
        assert redact([{"dbPassword": "x"}]) == [{"dbPassword": REDACTED}]


class TestDumpCommand:
    def test_defaults(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["dump"])
        assert result.exit_code == 0
        data = _load(result.output)
        assert data["server"]["port"] == 8080
        assert data["server"]["idleTimeout"] == "30s"
        assert data["logging"]["level"] == "INFO"

    def test_file_and_override(self, cli_runner: CliRunner, write_config) -> None:
        path = write_config("server:\n  port: 9090\n")
        result = cli_runner.invoke(cli, ["-D", "dw.logging.level=WARNING", "dump", str(path)])
        assert result.exit_code == 0
        data = _load(result.output)
        assert data["server"]["port"] == 9090
        assert data["logging"]["level"] == "WARNING"

    def test_password_masked(self, cli_runner: CliRunner, write_config) -> None:
        path = write_config("server:\n  adminUsername: admin\n  adminPassword: hunter2\n")
        result = cli_runner.invoke(cli, ["dump", str(path)])
        assert result.exit_code == 0
        assert "hunter2" not in result.output
        assert _load(result.output)["server"]["adminPassword"] == REDACTED

    def test_show_secrets(self, cli_runner: CliRunner, write_config) -> None:
        path = write_config("server:\n  adminUsername: admin\n  adminPassword: hunter2\n")
        result = cli_runner.invoke(cli, ["dump", str(path), "--show-secrets"])
        assert result.exit_code == 0
        assert _load(result.output)["server"]["adminPassword"] == "hunter2"

    def test_output_is_a_valid_configuration(
        self, cli_runner: CliRunner, write_config
    ) -> None:
        first = cli_runner.invoke(cli, ["dump", "-"], input="server:\n  maxThreads: 64\n")
        assert first.exit_code == 0
        path = write_config(first.output, name="dumped.yml")
        second = cli_runner.invoke(cli, ["check", str(path)])
        assert second.exit_code == 0
        assert _load(first.output)["server"]["maxThreads"] == 64

    def test_invalid_configuration_not_dumped(self, cli_runner: CliRunner, write_config) -> None:
        path = write_config("server:\n  port: 0\n")
        result = cli_runner.invoke(cli, ["dump", str(path)])
        assert result.exit_code == 1
        assert "port: 0" not in result.output
