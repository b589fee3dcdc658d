"""Tests for the toolsconf CLI.

Tests for the resolve and validate commands, help and version handling.
"""

import json

import pytest

from toolsconf import __version__
from toolsconf.cli.main import build_parser, main
from toolsconf.core.errors import ExitCode

CONFIG = """
[cluster]
host = "1.1.1.1:3001,db.example.com"
user = "default-user"
password = "default-password"
auth = "external"

[cluster_prod]
host = "2.2.2.2"
user = "prod-user"
port = 4000
"""

SCHEMA = """
{
  "type": "object",
  "properties": {
    "cluster": {
      "type": "object",
      "properties": {"port": {"type": "integer"}, "user": {"type": "string"}}
    }
  }
}
"""


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr("toolsconf.cli.main.configure_logging", lambda level: None)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "dbtools.conf"
    path.write_text(CONFIG)
    return path


@pytest.fixture
def schema_file(tmp_path):
    path = tmp_path / "schema.json"
    path.write_text(SCHEMA)
    return path


@pytest.fixture
def no_default_config(monkeypatch, tmp_path):
    """Point the default config search at an empty directory."""
    empty = tmp_path / "empty"
    empty.mkdir()
    monkeypatch.setenv("TOOLSCONF_CONFIG_DIRS", f'["{empty}"]')
    return empty


class TestParser:
    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["-V"])
        assert exc.value.code == 0
        assert capsys.readouterr().out.strip() == f"toolsconf {__version__}"

    @pytest.mark.parametrize("flag", ["-u", "--help"])
    def test_help(self, capsys, flag):
        with pytest.raises(SystemExit) as exc:
            main([flag])
        assert exc.value.code == 0
        assert capsys.readouterr().out.startswith("usage: toolsconf")

    def test_h_is_host(self):
        """Test -h is the host flag, not help."""
        args = build_parser().parse_args(["resolve", "-h", "10.0.0.1"])
        assert args.host == "10.0.0.1"

    def test_no_command_prints_help(self, capsys):
        assert main([]) == ExitCode.SUCCESS
        assert "usage: toolsconf" in capsys.readouterr().out

    def test_bad_flag_value(self):
        with pytest.raises(SystemExit) as exc:
            main(["resolve", "--port", "abc"])
        assert exc.value.code == 2


class TestResolveCommand:
    """Tests for toolsconf resolve."""

    def test_json_output(self, capsys, config_file):
        code = main(["resolve", "--config-file", str(config_file), "--format", "json"])

        assert code == 0
        summary = json.loads(capsys.readouterr().out)
        assert summary == {
            "config_file": str(config_file),
            "seeds": ["1.1.1.1:3001", "db.example.com:3000"],
            "user": "default-user",
            "password": "********",
            "auth_mode": "EXTERNAL",
            "tls": None,
        }

    def test_reveal_secrets(self, capsys, config_file):
        main(["resolve", "--config-file", str(config_file), "--format", "json", "--reveal-secrets"])
        assert json.loads(capsys.readouterr().out)["password"] == "default-password"

    def test_instance_and_command_line(self, capsys, config_file):
        code = main(
            [
                "resolve",
                "--config-file",
                str(config_file),
                "--instance",
                "prod",
                "-U",
                "cli-user",
                "--format",
                "json",
            ]
        )

        assert code == 0
        summary = json.loads(capsys.readouterr().out)
        assert summary["seeds"] == ["2.2.2.2:4000"]
        assert summary["user"] == "cli-user"
        assert summary["password"] == ""
        assert summary["auth_mode"] == "INTERNAL"

    def test_tls_enabled_without_material(self, capsys, no_default_config):
        code = main(["resolve", "--tls-enable", "--tls-name", "tls1", "--format", "json"])

        assert code == 0
        summary = json.loads(capsys.readouterr().out)
        assert summary["config_file"] is None
        assert summary["seeds"] == ["127.0.0.1:tls1:3000"]
        assert summary["tls"]["min_version"] == "TLSv1.2"
        assert summary["tls"]["root_cas"] == 0

    def test_text_output(self, capsys, config_file):
        code = main(["resolve", "--config-file", str(config_file)])

        out = capsys.readouterr().out
        assert code == 0
        assert "Resolved Cluster Configuration" in out
        assert "1.1.1.1:3001, db.example.com:3000" in out
        assert "default-password" not in out

    def test_text_output_without_config(self, capsys, no_default_config):
        assert main(["resolve"]) == 0
        assert "No config file found" in capsys.readouterr().out

    def test_missing_config_file(self, capsys, tmp_path):
        code = main(["resolve", "--config-file", str(tmp_path / "missing.conf")])

        assert code == ExitCode.CONFIG_ERROR
        assert "failed to get config" in capsys.readouterr().err

    def test_bad_config_value(self, capsys, tmp_path):
        path = tmp_path / "bad.conf"
        path.write_text('[cluster]\nhost = "1.1.1.1:99999"\n')

        code = main(["resolve", "--config-file", str(path)])

        assert code == ExitCode.VALIDATION_ERROR
        assert "--host" in capsys.readouterr().err


class TestValidateCommand:
    """Tests for toolsconf validate."""

    def test_valid(self, capsys, config_file, schema_file):
        code = main(["validate", "--config-file", str(config_file), "--schema", str(schema_file)])

        assert code == 0
        assert "Valid config file" in capsys.readouterr().out

    def test_violation(self, capsys, tmp_path, schema_file):
        path = tmp_path / "dbtools.yaml"
        path.write_text("cluster:\n  port: not-a-number\n")

        code = main(["validate", "--config-file", str(path), "--schema", str(schema_file)])

        out = capsys.readouterr().out
        assert code == ExitCode.VALIDATION_ERROR
        assert "Invalid config file" in out
        assert "cluster.port" in out

    def test_instance_scope(self, capsys, tmp_path, schema_file):
        """Test sections of other instances are not validated."""
        path = tmp_path / "dbtools.conf"
        path.write_text('[cluster]\nport = "bad"\n[cluster_prod]\nport = 4000\n')

        code = main(
            [
                "validate",
                "--config-file",
                str(path),
                "--instance",
                "prod",
                "--schema",
                str(schema_file),
            ]
        )

        assert code == 0

    def test_section_scope(self, tmp_path, schema_file):
        """Test sections not selected are not validated."""
        path = tmp_path / "dbtools.conf"
        path.write_text('[cluster]\nport = "bad"\n[uda]\nagent-port = 8001\n')
        argv = ["validate", "--config-file", str(path), "--schema", str(schema_file)]

        assert main(argv) == ExitCode.VALIDATION_ERROR
        assert main([*argv, "--section", "uda"]) == 0

    def test_missing_schema(self, capsys, config_file, tmp_path):
        code = main(
            ["validate", "--config-file", str(config_file), "--schema", str(tmp_path / "none.json")]
        )

        assert code == ExitCode.CONFIG_ERROR
        assert "unable to read config schema" in capsys.readouterr().err

    def test_no_config_file(self, capsys, schema_file, no_default_config):
        code = main(["validate", "--schema", str(schema_file)])

        assert code == ExitCode.CONFIG_ERROR
        assert "no config file found" in capsys.readouterr().err

    def test_default_config_file(self, capsys, schema_file, no_default_config):
        (no_default_config / "dbtools.toml").write_text("[cluster]\nport = 3000\n")

        code = main(["validate", "--schema", str(schema_file)])

        assert code == 0
