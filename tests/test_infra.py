"""
Tests for the brew and git clients and temp file handling.
"""

import os
import signal
import subprocess
from unittest.mock import patch

import pytest

from xbrew.exit_codes import TempFileError
from xbrew.infra.brew_client import BrewClient
from xbrew.infra.git_client import GitClient, GitIdentity
from xbrew.infra.file_store import scoped_temp_file, place_file


def completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class TestBrewClient:

    @patch('xbrew.infra.brew_client.subprocess.run')
    def test_tap_list(self, mock_run):
        mock_run.return_value = completed(stdout="homebrew/core\nalice/local\n")
        assert BrewClient().tap_list() == ["homebrew/core", "alice/local"]

    @patch('xbrew.infra.brew_client.subprocess.run')
    def test_has_tap_is_exact(self, mock_run):
        mock_run.return_value = completed(stdout="alice/local-old\nalice/localx\n")
        assert not BrewClient().has_tap("alice/local")

    @patch('xbrew.infra.brew_client.subprocess.run')
    def test_tap_list_failure(self, mock_run):
        mock_run.return_value = completed(returncode=1, stderr="boom")
        assert BrewClient().tap_list() == []

    @patch('xbrew.infra.brew_client.subprocess.run')
    def test_repo_path(self, mock_run):
        mock_run.return_value = completed(stdout="/opt/homebrew/Library/Taps/alice/homebrew-local\n")
        assert BrewClient().repo_path("alice/local") == "/opt/homebrew/Library/Taps/alice/homebrew-local"
        assert mock_run.call_args[0][0] == ["brew", "--repo", "alice/local"]

    @patch('xbrew.infra.brew_client.subprocess.run')
    def test_install_streams_output(self, mock_run):
        mock_run.return_value = completed(returncode=0)
        assert BrewClient().install("alice/local/doxygen") == 0
        assert mock_run.call_args[0][0] == ["brew", "install", "alice/local/doxygen"]
        assert 'capture_output' not in mock_run.call_args[1]

    @patch('xbrew.infra.brew_client.subprocess.run')
    def test_reinstall_exit_code(self, mock_run):
        mock_run.return_value = completed(returncode=1)
        assert BrewClient().reinstall("alice/local/doxygen") == 1

    @patch('xbrew.infra.brew_client.subprocess.run', side_effect=FileNotFoundError("brew"))
    def test_missing_binary(self, _mock_run):
        client = BrewClient()
        assert client.repo_path("alice/local") is None
        assert client.install("x") == 1

    @patch('xbrew.infra.brew_client.subprocess.run')
    def test_tap_new(self, mock_run):
        mock_run.return_value = completed(returncode=0)
        assert BrewClient().tap_new("alice/local")
        assert mock_run.call_args[0][0] == ["brew", "tap-new", "alice/local"]


class TestGitClient:

    @patch('xbrew.infra.git_client.subprocess.run')
    def test_has_staged_changes_is_scoped(self, mock_run):
        mock_run.return_value = completed(returncode=1)

        assert GitClient().has_staged_changes("/repo", "Formula/doxygen.rb")
        assert mock_run.call_args[0][0] == ["git", "diff", "--cached", "--quiet", "--", "Formula/doxygen.rb"]

    @patch('xbrew.infra.git_client.subprocess.run')
    def test_no_staged_changes(self, mock_run):
        mock_run.return_value = completed(returncode=0)
        assert not GitClient().has_staged_changes("/repo", "Formula/doxygen.rb")

    @patch('xbrew.infra.git_client.subprocess.run')
    def test_commit_message_is_not_shell_quoted(self, mock_run):
        mock_run.return_value = completed(returncode=0, stdout="ok")
        message = "Add doxygen from https://example.com/a?b=1&c=$(x)"

        ok, _ = GitClient().commit("/repo", message, paths=["Formula/doxygen.rb"])

        assert ok
        assert mock_run.call_args[0][0] == ["git", "commit", "-m", message, "--", "Formula/doxygen.rb"]

    @patch('xbrew.infra.git_client.subprocess.run')
    def test_commit_with_identity(self, mock_run):
        mock_run.return_value = completed(returncode=0)
        identity = GitIdentity(name="xbrew", email="xbrew@local")

        GitClient().commit("/repo", "msg", identity=identity)

        assert mock_run.call_args[0][0] == [
            "git", "-c", "user.name=xbrew", "-c", "user.email=xbrew@local", "commit", "-m", "msg",
        ]

    @patch('xbrew.infra.git_client.subprocess.run',
           side_effect=subprocess.TimeoutExpired(cmd="git", timeout=30))
    def test_timeout(self, _mock_run):
        ok, output = GitClient().commit("/repo", "msg")
        assert not ok
        assert output is None

    @patch('xbrew.infra.git_client.subprocess.run')
    def test_head_commit(self, mock_run):
        mock_run.return_value = completed(stdout="abc1234\n")
        assert GitClient().head_commit("/repo") == "abc1234"
        assert mock_run.call_args[0][0] == ["git", "rev-parse", "--short", "HEAD"]

    @patch('xbrew.infra.git_client.subprocess.run')
    def test_head_commit_empty_repo(self, mock_run):
        mock_run.return_value = completed(returncode=128, stderr="unknown revision")
        assert GitClient().head_commit("/repo") is None


class TestScopedTempFile:

    def test_removed_after_scope(self):
        with scoped_temp_file() as path:
            assert path.exists()
            assert path.name.startswith("xbrew.")
        assert not path.exists()

    def test_removed_on_error(self):
        with pytest.raises(RuntimeError):
            with scoped_temp_file() as path:
                path.write_text("partial")
                raise RuntimeError("fail")
        assert not path.exists()

    def test_moved_file_survives(self, tmp_path):
        dest = tmp_path / "Formula" / "doxygen.rb"
        with scoped_temp_file() as path:
            path.write_text("class Doxygen < Formula; end\n")
            place_file(path, dest)
        assert dest.read_text() == "class Doxygen < Formula; end\n"
        assert oct(dest.stat().st_mode & 0o777) == oct(0o644)

    @pytest.mark.skipif(not hasattr(signal, 'SIGTERM') or os.name != 'posix', reason="POSIX signals")
    def test_removed_on_sigterm(self):
        with pytest.raises(SystemExit) as exc_info:
            with scoped_temp_file() as path:
                signal.getsignal(signal.SIGTERM)(signal.SIGTERM, None)
        assert exc_info.value.code == 128 + signal.SIGTERM
        assert not path.exists()

    def test_handlers_restored(self):
        before = signal.getsignal(signal.SIGTERM)
        with scoped_temp_file():
            assert signal.getsignal(signal.SIGTERM) is not before
        assert signal.getsignal(signal.SIGTERM) is before

    def test_creation_failure(self):
        with patch('xbrew.infra.file_store.tempfile.mkstemp', side_effect=OSError("read-only")):
            with pytest.raises(TempFileError):
                with scoped_temp_file():
                    pass
