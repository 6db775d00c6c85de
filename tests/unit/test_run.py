"""
Unit Tests for run.py.

Subprocesses, configuration and the database are mocked; the real
command line is exercised in tests/integration/test_run_cli.py.
"""

import subprocess
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

import run
from modules.backend.core.exceptions import ConflictError


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def quiet_logging():
    with patch("run.setup_logging") as setup, patch("run.bind_source") as bind:
        yield setup, bind


def _app_config():
    return SimpleNamespace(
        application=SimpleNamespace(
            name="Survey CRM",
            version="1.2.0",
            description="Leads, site surveys and documents",
            server=SimpleNamespace(host="127.0.0.1", port=8000),
        )
    )


class TestValidateProjectRoot:
    def test_marker_present(self, tmp_path):
        (tmp_path / ".project_root").touch()

        with patch("run.PROJECT_ROOT", tmp_path):
            assert run.validate_project_root() == tmp_path

    def test_marker_missing(self, tmp_path):
        with patch("run.PROJECT_ROOT", tmp_path), pytest.raises(SystemExit) as exc_info:
            run.validate_project_root()

        assert exc_info.value.code == 1


class TestMain:
    def test_help(self, runner):
        result = runner.invoke(run.main, ["--help"])

        assert result.exit_code == 0
        assert "create-admin" in result.output
        assert "--test-type" in result.output

    @pytest.mark.parametrize(
        ("flags", "level"),
        [([], "WARNING"), (["-v"], "INFO"), (["-d"], "DEBUG"), (["-v", "-d"], "DEBUG")],
    )
    def test_log_level(self, runner, quiet_logging, flags, level):
        setup, bind = quiet_logging

        with patch("run.show_info"):
            result = runner.invoke(run.main, [*flags, "--action", "info"])

        assert result.exit_code == 0
        setup.assert_called_once_with(level=level, format_type="console")
        bind.assert_called_once_with("cli")

    def test_unknown_action(self, runner):
        result = runner.invoke(run.main, ["--action", "deploy"])

        assert result.exit_code != 0
        assert "Invalid value" in result.output

    def test_info(self, runner, quiet_logging):
        with patch("modules.backend.core.config.get_app_config", return_value=_app_config()):
            result = runner.invoke(run.main, ["--action", "info"])

        assert result.exit_code == 0
        assert "Survey CRM" in result.output
        assert "Version: 1.2.0" in result.output
        assert "taskiq worker modules.backend.tasks.worker:broker" in result.output


class TestRunServer:
    def test_uses_configured_address(self):
        with (
            patch("modules.backend.core.config.get_app_config", return_value=_app_config()),
            patch("run.subprocess.run") as mock_run,
        ):
            run.run_server(MagicMock(), None, None, reload=False)

        cmd = mock_run.call_args.args[0]
        assert cmd[1:4] == ["-m", "uvicorn", "modules.backend.main:app"]
        assert cmd[cmd.index("--host") + 1] == "127.0.0.1"
        assert cmd[cmd.index("--port") + 1] == "8000"
        assert "--reload" not in cmd

    def test_overrides(self):
        with (
            patch("modules.backend.core.config.get_app_config", return_value=_app_config()),
            patch("run.subprocess.run") as mock_run,
        ):
            run.run_server(MagicMock(), "0.0.0.0", 9000, reload=True)

        cmd = mock_run.call_args.args[0]
        assert cmd[cmd.index("--port") + 1] == "9000"
        assert cmd[-1] == "--reload"

    def test_failure_exits_with_server_code(self):
        with (
            patch("modules.backend.core.config.get_app_config", return_value=_app_config()),
            patch("run.subprocess.run", side_effect=subprocess.CalledProcessError(3, "uvicorn")),
            pytest.raises(SystemExit) as exc_info,
        ):
            run.run_server(MagicMock(), None, None, reload=False)

        assert exc_info.value.code == 3


class TestRunTests:
    def test_unit_with_coverage(self):
        with (
            patch("run.subprocess.run", return_value=SimpleNamespace(returncode=0)) as mock_run,
            pytest.raises(SystemExit) as exc_info,
        ):
            run.run_tests(MagicMock(), "unit", coverage=True)

        cmd = mock_run.call_args.args[0]
        assert "tests/unit" in cmd
        assert "--cov=modules/backend" in cmd
        assert exc_info.value.code == 0

    def test_exit_code_forwarded(self):
        with (
            patch("run.subprocess.run", return_value=SimpleNamespace(returncode=1)),
            pytest.raises(SystemExit) as exc_info,
        ):
            run.run_tests(MagicMock(), "all", coverage=False)

        assert exc_info.value.code == 1


class TestCreateAdmin:
    def test_prompts_for_password(self, runner, quiet_logging):
        user = SimpleNamespace(id="u-1", email="admin@example.com")

        with patch("run._create_admin", AsyncMock(return_value=user)) as create:
            result = runner.invoke(
                run.main,
                ["--action", "create-admin", "--email", "admin@example.com", "--name", "Admin"],
                input="s3cret-pass\ns3cret-pass\n",
            )

        assert result.exit_code == 0
        create.assert_awaited_once_with("admin@example.com", "s3cret-pass", "Admin")
        assert "Administrator admin@example.com created (u-1)" in result.output

    def test_existing_email(self, runner, quiet_logging):
        with patch("run._create_admin", AsyncMock(side_effect=ConflictError("User with this email already exists"))):
            result = runner.invoke(
                run.main,
                ["--action", "create-admin", "--email", "admin@example.com"],
                input="s3cret-pass\ns3cret-pass\n",
            )

        assert result.exit_code == 1
        assert "already exists" in result.output
