"""
Override repository domain object.

An override repository is the local git-backed tap that holds pinned
formula files. Its filesystem root is owned by Homebrew, so it is
resolved lazily through a callable rather than stored up front.
"""

from pathlib import Path
from typing import Callable, Optional


class OverrideRepository:
    """
    A local tap used to hold formula files at pinned revisions.

    Example:
        repo = OverrideRepository("alice/local", brew.repo_path)
        repo.formula_path("doxygen")  # <root>/Formula/doxygen.rb
    """

    def __init__(
        self,
        tap: str,
        root_resolver: Callable[[str], Optional[str]],
        formula_dir: str = "Formula",
        extension: str = ".rb"
    ):
        self.tap = tap
        self.formula_dir_name = formula_dir
        self.extension = extension
        self._root_resolver = root_resolver
        self._root: Optional[Path] = None

    @property
    def root(self) -> Path:
        """Tap repository root. Resolved on first access."""
        if self._root is None:
            resolved = self._root_resolver(self.tap)
            if not resolved:
                raise FileNotFoundError(f"Could not resolve repository for tap {self.tap}")
            self._root = Path(resolved)
        return self._root

    @property
    def formula_dir(self) -> Path:
        return self.root / self.formula_dir_name

    def relative_formula_path(self, formula: str) -> str:
        """Path of a formula file relative to the repository root."""
        return f"{self.formula_dir_name}/{formula}{self.extension}"

    def formula_path(self, formula: str) -> Path:
        return self.root / self.relative_formula_path(formula)

    def ensure_formula_dir(self) -> Path:
        """Create the formula directory if it does not exist yet."""
        self.formula_dir.mkdir(parents=True, exist_ok=True)
        return self.formula_dir

    def __repr__(self) -> str:
        return f"OverrideRepository(tap={self.tap!r})"
