"""
Source URL resolution for xbrew.

homebrew-core moved from a flat `Formula/<name>.rb` layout to a
letter-sharded `Formula/<letter>/<name>.rb` layout. Given a commit SHA
we do not know which one applies, so the sharded URL is probed first
and the legacy URL is used when it is missing.
"""

import logging
from typing import Optional

from ..domain import CandidateUrls, LayoutVariant, ResolvedSource
from ..infra.http_client import FormulaHttpClient
from .classifier import is_url

logger = logging.getLogger(__name__)

DEFAULT_REPO_ROOT = "https://raw.githubusercontent.com/Homebrew/homebrew-core"


class UrlResolver:
    """
    Maps a (source reference, formula) pair to one canonical URL.

    Performs no mutation; the only side effect is the existence probe.

    Example:
        resolver = UrlResolver(FormulaHttpClient())
        source = resolver.resolve("d2267b9f...", "doxygen")
        if source.fallback_used:
            print("legacy layout")
    """

    def __init__(
        self,
        http: Optional[FormulaHttpClient] = None,
        repo_root: str = DEFAULT_REPO_ROOT,
        formula_dir: str = "Formula",
        extension: str = ".rb"
    ):
        self.http = http or FormulaHttpClient()
        self.repo_root = repo_root
        self.formula_dir = formula_dir
        self.extension = extension

    def candidates(self, commit: str, formula: str) -> CandidateUrls:
        return CandidateUrls.build(
            self.repo_root, commit, formula,
            formula_dir=self.formula_dir,
            extension=self.extension,
        )

    def resolve(self, source: str, formula: str) -> ResolvedSource:
        """
        Resolve a commit SHA or URL to the canonical source URL.

        Args:
            source: Commit SHA in homebrew-core, or a full URL
            formula: Formula name (used to build candidate URLs)

        Returns:
            ResolvedSource with the chosen URL and layout variant
        """
        if is_url(source):
            return ResolvedSource(url=source, layout=LayoutVariant.DIRECT)

        candidates = self.candidates(source, formula)
        logger.debug(f"Probing {candidates.sharded}")
        if self.http.exists(candidates.sharded):
            return ResolvedSource(url=candidates.sharded, layout=LayoutVariant.SHARDED)

        return ResolvedSource(url=candidates.legacy, layout=LayoutVariant.LEGACY)
