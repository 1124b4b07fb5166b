"""
Tests for override tap management.

Tests cover:
- Tap creation (idempotent)
- Download into the tap (empty and failed downloads)
- Commit only on change, fallback identity retry
- Idempotence against a real git repository
"""

import os
import shutil
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from xbrew.domain import (
    Action,
    CommitOutcome,
    InvocationRequest,
    LayoutVariant,
    ResolvedSource,
    ResolvedTarget,
)
from xbrew.exit_codes import (
    CommandError,
    CommitError,
    FetchError,
    TempFileError,
    UnresolvableSourceError,
    FETCH_ERROR,
    TEMPFILE_ERROR,
)
from xbrew.infra.brew_client import BrewClient
from xbrew.infra.git_client import GitClient, GitIdentity
from xbrew.infra.http_client import FormulaHttpClient
from xbrew.services.formula_name import extract_formula_name
from xbrew.services.tap_service import TapService, commit_message, FALLBACK_IDENTITY

URL = "https://raw.githubusercontent.com/Homebrew/homebrew-core/abc123/Formula/doxygen.rb"
FORMULA = b'class Doxygen < Formula\n  url "https://example.com/doxygen-1.9.6.tar.gz"\nend\n'


def make_target(tap="alice/local", formula="doxygen", url=URL):
    request = InvocationRequest(action=Action.INSTALL, formula=formula, source=url, tap=tap)
    return ResolvedTarget.create(request, formula, ResolvedSource(url, LayoutVariant.DIRECT))


def commit_count(repo):
    result = subprocess.run(["git", "rev-list", "--count", "HEAD"], cwd=repo,
                            capture_output=True, text=True, check=True)
    return int(result.stdout.strip())


def serving(content):
    """download() side effect writing content to the destination."""
    def download(url, dest):
        Path(dest).write_bytes(content)
        return len(content)
    return download


@pytest.fixture
def tap_root(tmp_path):
    root = tmp_path / "homebrew-local"
    root.mkdir()
    return root


@pytest.fixture
def brew(tap_root):
    brew = MagicMock(spec=BrewClient)
    brew.has_tap.return_value = True
    brew.tap_new.return_value = True
    brew.repo_path.return_value = str(tap_root)
    return brew


@pytest.fixture
def git():
    git = MagicMock(spec=GitClient)
    git.add.return_value = True
    git.has_staged_changes.return_value = True
    git.commit.return_value = (True, "[main abc1234] Add doxygen")
    git.head_commit.return_value = "abc1234"
    return git


@pytest.fixture
def http():
    http = MagicMock(spec=FormulaHttpClient)
    http.download.side_effect = serving(FORMULA)
    return http


@pytest.fixture
def echoed():
    return []


@pytest.fixture
def service(brew, git, http, echoed):
    return TapService(brew=brew, git=git, http=http, echo=echoed.append)


class TestEnsureTap:

    def test_existing_tap_is_reused(self, service, brew, echoed):
        assert service.ensure_tap("alice/local") is False
        brew.tap_new.assert_not_called()
        assert "Tap alice/local already present." in echoed

    def test_missing_tap_is_created(self, service, brew, echoed):
        brew.has_tap.return_value = False
        assert service.ensure_tap("alice/local") is True
        brew.tap_new.assert_called_once_with("alice/local")
        assert "Creating tap alice/local..." in echoed

    def test_tap_new_failure(self, service, brew):
        brew.has_tap.return_value = False
        brew.tap_new.return_value = False
        with pytest.raises(CommandError):
            service.ensure_tap("alice/local")


class TestUpdate:

    def test_commits_new_formula(self, service, git, tap_root):
        update = service.update(make_target())

        dest = tap_root / "Formula" / "doxygen.rb"
        assert dest.read_bytes() == FORMULA
        assert update.outcome == CommitOutcome.COMMITTED
        assert update.path == str(dest)
        assert update.message == "Committed abc1234"

        git.add.assert_called_once_with(str(tap_root), "Formula/doxygen.rb")
        git.has_staged_changes.assert_called_once_with(str(tap_root), "Formula/doxygen.rb")
        git.commit.assert_called_once_with(
            str(tap_root),
            f"Add doxygen from {URL}",
            paths=["Formula/doxygen.rb"],
        )

    def test_no_changes_skips_commit(self, service, git, echoed):
        git.has_staged_changes.return_value = False

        update = service.update(make_target())

        assert update.outcome == CommitOutcome.NO_CHANGES
        git.commit.assert_not_called()
        assert "No changes to commit (formula already present and identical)." in echoed

    def test_creates_formula_dir(self, service, tap_root):
        assert not (tap_root / "Formula").exists()
        service.update(make_target())
        assert (tap_root / "Formula").is_dir()

    def test_overwrites_previous_content(self, service, tap_root):
        (tap_root / "Formula").mkdir()
        (tap_root / "Formula" / "doxygen.rb").write_text("old")

        service.update(make_target())

        assert (tap_root / "Formula" / "doxygen.rb").read_bytes() == FORMULA

    def test_reports_created_tap(self, service, brew):
        brew.has_tap.return_value = False
        assert service.update(make_target()).created_tap

    def test_unresolvable_tap_root(self, service, brew):
        brew.repo_path.return_value = None
        with pytest.raises(CommandError):
            service.update(make_target())

    def test_encoded_traversal_stays_inside_tap(self, service, tap_root, git):
        url = "https://example.com/Formula/..%2F..%2Fescaped.rb"
        name = extract_formula_name(url).name

        update = service.update(make_target(formula=name, url=url))

        dest = Path(update.path).resolve()
        assert dest.parent == (tap_root / "Formula").resolve()
        assert dest.read_bytes() == FORMULA
        assert not (tap_root.parent / "escaped.rb").exists()
        git.add.assert_called_once_with(str(tap_root), f"Formula/{name}.rb")

    def test_dot_segment_name_rejected_before_download(self, http):
        with pytest.raises(UnresolvableSourceError):
            make_target(formula="..")
        http.download.assert_not_called()


class TestFetch:

    def test_download_failure(self, service, http, git):
        http.download.side_effect = None
        http.download.return_value = None

        with pytest.raises(FetchError) as exc_info:
            service.update(make_target())

        assert exc_info.value.exit_code == FETCH_ERROR
        assert URL in str(exc_info.value)
        git.add.assert_not_called()

    def test_empty_download(self, service, http, git, tap_root):
        http.download.side_effect = serving(b"")

        with pytest.raises(FetchError, match="empty"):
            service.update(make_target())

        assert not (tap_root / "Formula" / "doxygen.rb").exists()
        git.add.assert_not_called()

    def test_temp_file_is_removed_on_failure(self, service, http):
        seen = []

        def download(url, dest):
            seen.append(Path(dest))
            return None

        http.download.side_effect = download

        with pytest.raises(FetchError):
            service.update(make_target())

        assert seen and not seen[0].exists()

    def test_temp_file_failure(self, service):
        with patch('xbrew.infra.file_store.tempfile.mkstemp', side_effect=OSError("no space")):
            with pytest.raises(TempFileError) as exc_info:
                service.update(make_target())
        assert exc_info.value.exit_code == TEMPFILE_ERROR


class TestCommitFallback:

    def test_retries_with_fallback_identity(self, service, git):
        git.commit.side_effect = [
            (False, "Please tell me who you are."),
            (True, "[main abc1234] Add doxygen"),
        ]

        update = service.update(make_target())

        assert update.used_fallback_identity
        assert git.commit.call_count == 2
        assert git.commit.call_args_list[0][1].get('identity') is None
        assert git.commit.call_args_list[1][1]['identity'] == FALLBACK_IDENTITY

    def test_custom_fallback_identity(self, brew, git, http):
        identity = GitIdentity(name="bot", email="bot@example.com")
        git.commit.side_effect = [(False, "no identity"), (True, "")]
        service = TapService(brew=brew, git=git, http=http, fallback_identity=identity, echo=lambda m: None)

        service.update(make_target())

        assert git.commit.call_args_list[1][1]['identity'] == identity

    def test_second_failure_is_terminal(self, service, git):
        git.commit.return_value = (False, "fatal: something else")

        with pytest.raises(CommitError):
            service.update(make_target())

        assert git.commit.call_count == 2

    def test_add_failure(self, service, git):
        git.add.return_value = False
        with pytest.raises(CommitError):
            service.update(make_target())


def test_commit_message():
    assert commit_message("doxygen", URL) == f"Add doxygen from {URL}"


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
class TestRealGitRepository:
    """Idempotence against an actual git repository."""

    @pytest.fixture
    def repo(self, tap_root, monkeypatch):
        monkeypatch.setenv("GIT_AUTHOR_NAME", "Test")
        monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
        monkeypatch.setenv("GIT_COMMITTER_NAME", "Test")
        monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")
        subprocess.run(["git", "init", "-q"], cwd=tap_root, check=True)
        (tap_root / "README.md").write_text("tap\n")
        subprocess.run(["git", "add", "README.md"], cwd=tap_root, check=True)
        subprocess.run(["git", "commit", "-q", "-m", "init"], cwd=tap_root, check=True)
        return tap_root

    def test_second_run_creates_no_commit(self, repo, brew, http):
        git = GitClient()
        service = TapService(brew=brew, git=git, http=http, echo=lambda m: None)

        first = service.update(make_target())
        count_after_first = commit_count(repo)
        second = service.update(make_target())

        assert first.outcome == CommitOutcome.COMMITTED
        assert second.outcome == CommitOutcome.NO_CHANGES
        assert count_after_first == 2
        assert commit_count(repo) == 2
        assert (repo / "Formula" / "doxygen.rb").read_bytes() == FORMULA

    def test_changed_content_creates_new_commit(self, repo, brew, http):
        git = GitClient()
        service = TapService(brew=brew, git=git, http=http, echo=lambda m: None)

        service.update(make_target())
        http.download.side_effect = serving(FORMULA + b"# revision 2\n")
        update = service.update(make_target())

        assert update.outcome == CommitOutcome.COMMITTED
        assert commit_count(repo) == 3

    def test_unrelated_staged_changes_are_left_alone(self, repo, brew, http):
        git = GitClient()
        service = TapService(brew=brew, git=git, http=http, echo=lambda m: None)
        service.update(make_target())

        (repo / "other.txt").write_text("unrelated\n")
        subprocess.run(["git", "add", "other.txt"], cwd=repo, check=True)

        update = service.update(make_target())

        assert update.outcome == CommitOutcome.NO_CHANGES
        assert git.has_staged_changes(str(repo), "other.txt")

    def test_commit_message_records_source(self, repo, brew, http):
        service = TapService(brew=brew, git=GitClient(), http=http, echo=lambda m: None)
        service.update(make_target())

        log = subprocess.run(["git", "log", "-1", "--format=%s"], cwd=repo,
                             capture_output=True, text=True, check=True)
        assert log.stdout.strip() == f"Add doxygen from {URL}"
