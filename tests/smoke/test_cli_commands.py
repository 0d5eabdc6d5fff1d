"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import os
import subprocess
import sys
from pathlib import Path

import pytest

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

# Project root
PROJECT_ROOT = Path(__file__).parent.parent.parent


def run_cli_command(*args: str, data_dir: Path | None = None, timeout: int = 30) -> tuple[int, str, str]:
    """
    Run a CLI command and return exit code, stdout, stderr.

    Args:
        args: Arguments after 'python -m src.cli.examsim'
        data_dir: Persistence directory (keeps runs out of the home directory)
        timeout: Maximum time to wait

    Returns:
        Tuple of (exit_code, stdout, stderr)
    """
    env = dict(os.environ)
    if data_dir is not None:
        env["EXAMSIM_DATA_DIR"] = str(data_dir)
    env["COLUMNS"] = "200"
    env["PYTHONIOENCODING"] = "utf-8"

    result = subprocess.run(
        [sys.executable, "-m", "src.cli.examsim", *args],
        cwd=PROJECT_ROOT,
        env=env,
        capture_output=True,
        text=True,
        encoding="utf-8",
        timeout=timeout,
    )

    return result.returncode, result.stdout, result.stderr


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self):
        """Main help should display without errors."""
        code, stdout, stderr = run_cli_command("--help")

        assert code == 0, f"Help failed: {stderr}"
        assert "validate" in stdout
        assert "preview" in stdout

    @pytest.mark.parametrize("command", ["validate", "preview", "due", "history"])
    def test_command_help(self, command):
        """Each command's help should work."""
        code, stdout, stderr = run_cli_command(command, "--help")

        assert code == 0, f"{command} help failed: {stderr}"


class TestCLIValidate:
    """Test validate command."""

    def test_valid_bank(self, bank_file):
        code, stdout, stderr = run_cli_command("validate", str(bank_file))

        assert code == 0, f"Validate failed: {stderr}"
        assert "80 questions" in stdout
        assert "3 exam sets" in stdout

    def test_missing_bank(self, tmp_path):
        code, stdout, stderr = run_cli_command("validate", str(tmp_path / "absent.json"))

        assert code == 1


class TestCLIPreview:
    """Test preview command."""

    def test_legacy_set(self, bank_file, tmp_path):
        code, stdout, stderr = run_cli_command(
            "preview", "legacy_set", "--set", "A", "--bank", str(bank_file), data_dir=tmp_path
        )

        assert code == 0, f"Preview failed: {stderr}"
        assert "MCQ-001" in stdout
        assert "SA-005" in stdout

    def test_seeded_mode(self, bank_file, tmp_path):
        code, stdout, stderr = run_cli_command(
            "preview", "full_sim_2", "--seed", "42", "--include-mcq", "--bank", str(bank_file), data_dir=tmp_path
        )

        assert code == 0, f"Preview failed: {stderr}"
        assert "seed=42" in stdout

    def test_unknown_set(self, bank_file, tmp_path):
        code, stdout, stderr = run_cli_command(
            "preview", "legacy_set", "--set", "Z", "--bank", str(bank_file), data_dir=tmp_path
        )

        assert code == 1

    def test_selection_failure(self, bank_file, tmp_path):
        code, stdout, stderr = run_cli_command("preview", "drill", "--bank", str(bank_file), data_dir=tmp_path)

        assert code == 1
        assert "Selection failed" in stdout


class TestCLIReviewState:
    """Test due and history commands against an empty data directory."""

    def test_due_empty(self, tmp_path):
        code, stdout, stderr = run_cli_command("due", "--date", "2026-01-10", "--data-dir", str(tmp_path))

        assert code == 0, f"Due failed: {stderr}"
        assert "0 due on 2026-01-10 (0 tracked)" in stdout

    def test_due_invalid_date(self, tmp_path):
        code, stdout, stderr = run_cli_command("due", "--date", "tomorrow", "--data-dir", str(tmp_path))

        assert code == 2

    def test_history_empty(self, tmp_path):
        code, stdout, stderr = run_cli_command("history", "--data-dir", str(tmp_path))

        assert code == 0, f"History failed: {stderr}"
        assert "No sessions stored." in stdout
