"""
Integration Tests for run.py CLI.

Tests the CLI as a whole with real execution paths.
"""

import subprocess
import sys
from pathlib import Path


# Project root for running commands
PROJECT_ROOT = Path(__file__).parent.parent.parent


def _run(*args: str, cwd: Path = PROJECT_ROOT) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, str(PROJECT_ROOT / "run.py"), *args],
        cwd=cwd,
        capture_output=True,
        text=True,
    )


class TestRunCLI:
    """Integration tests for run.py command-line interface."""

    def test_help_returns_zero_exit_code(self):
        """Should return exit code 0 for --help."""
        result = _run("--help")

        assert result.returncode == 0
        assert "Usage:" in result.stdout
        assert "--action" in result.stdout
        assert "create-admin" in result.stdout

    def test_info_action_shows_application(self):
        """Should display the application name and the worker command."""
        result = _run("--action", "info")

        assert result.returncode == 0
        assert "Survey CRM" in result.stdout
        assert "modules.backend.tasks.worker:broker" in result.stdout

    def test_config_action_displays_yaml_settings(self):
        """Should display every configuration section from YAML files."""
        result = _run("--action", "config")

        assert result.returncode == 0
        for section in ("Application", "Database", "Feature Flags", "Integrations", "Company"):
            assert f"{section} (from YAML):" in result.stdout
        assert "shared_mailboxes" in result.stdout

    def test_invalid_action_shows_error(self):
        """Should show error for invalid action."""
        result = _run("--action", "invalid")

        assert result.returncode != 0
        assert "Invalid value" in result.stderr or "invalid" in result.stderr.lower()

    def test_works_from_other_directory(self, tmp_path):
        """Should resolve the project root from the script location."""
        result = _run("--action", "info", cwd=tmp_path)

        assert result.returncode == 0
