"""Tests for the command-line entry point."""

import os
import re
import shutil
import subprocess
import sys
from pathlib import Path

from devcert.cli import main

ROOT = Path(__file__).resolve().parent.parent


class TestMain:
    """Test running the CLI in-process."""

    def test_zero_arguments_uses_cwd(self, tmp_path, monkeypatch, capsys):
        """Test the default invocation writes into the current directory."""
        monkeypatch.chdir(tmp_path)

        assert main([]) == 0

        assert (tmp_path / "key.pem").exists()
        assert (tmp_path / "cert.pem").exists()
        assert (tmp_path / "cert.sha256").exists()

    def test_stdout_is_exactly_two_lines(self, tmp_path, capsys):
        """Test the literal output format."""
        assert main(["--output-dir", str(tmp_path)]) == 0

        out = capsys.readouterr().out
        lines = out.splitlines()
        assert len(lines) == 2
        assert lines[0] == "Successfully generated certificate files"
        assert re.fullmatch(r"Digest: [0-9A-F]{64}", lines[1])
        assert lines[1].removeprefix("Digest: ") == (tmp_path / "cert.sha256").read_text()

    def test_default_output_dir(self, tmp_path, capsys):
        """Test scripts can pass their own directory as the default."""
        assert main([], default_output_dir=tmp_path) == 0
        assert (tmp_path / "cert.sha256").exists()

    def test_verbose_keeps_stdout_clean(self, tmp_path, capsys):
        """Test logging goes to stderr only."""
        assert main(["--output-dir", str(tmp_path), "-v"]) == 0

        assert len(capsys.readouterr().out.splitlines()) == 2

    def test_failure_exit_code(self, tmp_path, capsys):
        """Test errors produce a non-zero exit and a message on stderr."""
        blocker = tmp_path / "blocker"
        blocker.write_text("")

        assert main(["--output-dir", str(blocker / "certs")]) == 1

        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err.startswith("error: filesystem:")

    def test_invalid_days(self, tmp_path, capsys):
        """Test a rejected validity period."""
        assert main(["--output-dir", str(tmp_path), "--days", "0"]) == 1
        assert "toolkit" in capsys.readouterr().err

    def test_days_out_of_range(self, tmp_path, capsys):
        """Test an expiry past the representable date range."""
        assert main(["--output-dir", str(tmp_path), "--days", "999999999"]) == 1

        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err.startswith("error: toolkit:")
        assert list(tmp_path.iterdir()) == []


class TestGenerateScript:
    """Test the certificates/generate.py script."""

    def test_writes_beside_script(self, tmp_path):
        """Test a zero-argument run from another directory writes next to the script."""
        script_dir = tmp_path / "certificates"
        script_dir.mkdir()
        script = shutil.copy(ROOT / "certificates" / "generate.py", script_dir)
        cwd = tmp_path / "elsewhere"
        cwd.mkdir()

        env = dict(os.environ)
        env["PYTHONPATH"] = os.pathsep.join(
            filter(None, [str(ROOT / "src"), env.get("PYTHONPATH")])
        )
        completed = subprocess.run(
            [sys.executable, str(script)],
            cwd=cwd,
            env=env,
            capture_output=True,
            text=True,
            check=True,
        )

        lines = completed.stdout.splitlines()
        assert lines[0] == "Successfully generated certificate files"
        assert lines[1] == "Digest: " + (script_dir / "cert.sha256").read_text()
        assert (script_dir / "key.pem").exists()
        assert (script_dir / "cert.pem").exists()
        assert list(cwd.iterdir()) == []
