"""
Override tap management for xbrew.

Materializes one formula file into a local tap and commits it only when
its content changed:

    tap absent -> tap created -> file staged -> committed | no changes

Running twice with the same source produces a single commit.
"""

import logging
from typing import Callable, Optional

from ..domain import CommitOutcome, OverrideRepository, RepositoryUpdate, ResolvedTarget
from ..exit_codes import CommandError, CommitError, FetchError
from ..infra.brew_client import BrewClient
from ..infra.file_store import place_file, scoped_temp_file
from ..infra.git_client import GitClient, GitIdentity
from ..infra.http_client import FormulaHttpClient

logger = logging.getLogger(__name__)

FALLBACK_IDENTITY = GitIdentity(name="xbrew", email="xbrew@local")


def commit_message(formula: str, url: str) -> str:
    return f"Add {formula} from {url}"


class TapService:
    """
    Keeps formula files in an override tap under version control.

    Example:
        service = TapService()
        update = service.update(target)
        print(update.outcome)  # CommitOutcome.COMMITTED
    """

    def __init__(
        self,
        brew: Optional[BrewClient] = None,
        git: Optional[GitClient] = None,
        http: Optional[FormulaHttpClient] = None,
        fallback_identity: GitIdentity = FALLBACK_IDENTITY,
        formula_dir: str = "Formula",
        extension: str = ".rb",
        echo: Optional[Callable[[str], None]] = None
    ):
        """
        Initialize TapService.

        Args:
            brew: BrewClient instance (creates new if None)
            git: GitClient instance (creates new if None)
            http: FormulaHttpClient instance (creates new if None)
            fallback_identity: Identity for the one retry after a failed commit
            formula_dir: Directory inside the tap holding formula files
            extension: Formula file extension
            echo: Callback for user-facing status lines
        """
        self.brew = brew or BrewClient()
        self.git = git or GitClient()
        self.http = http or FormulaHttpClient()
        self.fallback_identity = fallback_identity
        self.formula_dir = formula_dir
        self.extension = extension
        self.echo = echo or logger.info

    def repository(self, tap: str) -> OverrideRepository:
        return OverrideRepository(
            tap, self.brew.repo_path,
            formula_dir=self.formula_dir,
            extension=self.extension,
        )

    def ensure_tap(self, tap: str) -> bool:
        """
        Create the tap if Homebrew does not know it yet.

        Returns:
            True if the tap was created by this call
        """
        if self.brew.has_tap(tap):
            self.echo(f"Tap {tap} already present.")
            return False

        self.echo(f"Creating tap {tap}...")
        if not self.brew.tap_new(tap):
            raise CommandError(f"brew tap-new {tap} failed.")
        return True

    def fetch_into(self, repo: OverrideRepository, formula: str, url: str):
        """
        Download url into the tap as <formula>.rb.

        Raises:
            TempFileError: temp file could not be created
            FetchError: download failed or produced an empty file
        """
        dest = repo.formula_path(formula)
        with scoped_temp_file(suffix=self.extension) as temp_path:
            self.echo("Downloading formula...")
            size = self.http.download(url, temp_path)
            if size is None:
                raise FetchError(f"Failed to download {url}", url=url)
            if size == 0 or temp_path.stat().st_size == 0:
                raise FetchError("Downloaded file is empty; aborting.", url=url)
            place_file(temp_path, dest)
        return dest

    def commit_formula(self, repo: OverrideRepository, formula: str, url: str):
        """
        Stage and commit the formula file if it changed.

        Returns:
            Tuple of (CommitOutcome, used_fallback_identity)
        """
        root = str(repo.root)
        rel_path = repo.relative_formula_path(formula)

        if not self.git.add(root, rel_path):
            raise CommitError(f"git add {rel_path} failed in {root}.")

        if not self.git.has_staged_changes(root, rel_path):
            self.echo("No changes to commit (formula already present and identical).")
            return CommitOutcome.NO_CHANGES, False

        message = commit_message(formula, url)
        ok, output = self.git.commit(root, message, paths=[rel_path])
        if ok:
            return CommitOutcome.COMMITTED, False

        logger.warning("git commit failed; attempting non-interactive commit with temporary identity...")
        logger.debug(output or "")
        ok, output = self.git.commit(root, message, paths=[rel_path], identity=self.fallback_identity)
        if not ok:
            raise CommitError(f"git commit failed in {root}: {output or 'unknown error'}")
        return CommitOutcome.COMMITTED, True

    def update(self, target: ResolvedTarget) -> RepositoryUpdate:
        """
        Ensure the tap exists, fetch the formula and commit it.

        Args:
            target: Resolved formula, URL and tap

        Returns:
            RepositoryUpdate describing what changed
        """
        created = self.ensure_tap(target.tap)

        repo = self.repository(target.tap)
        try:
            repo.ensure_formula_dir()
        except FileNotFoundError as e:
            raise CommandError(str(e)) from e

        dest = self.fetch_into(repo, target.formula, target.source_url)
        outcome, used_fallback = self.commit_formula(repo, target.formula, target.source_url)

        message = None
        if outcome == CommitOutcome.COMMITTED:
            commit = self.git.head_commit(str(repo.root))
            if commit:
                message = f"Committed {commit}"

        return RepositoryUpdate(
            tap=target.tap,
            path=str(dest),
            outcome=outcome,
            created_tap=created,
            used_fallback_identity=used_fallback,
            message=message,
        )
