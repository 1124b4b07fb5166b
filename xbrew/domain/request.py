"""
Request domain objects for xbrew.

These describe what the user asked for and what it resolved to:
- Action: install or reinstall
- InvocationRequest: classified command-line tokens
- LayoutVariant / CandidateUrls / ResolvedSource: homebrew-core layout resolution
- ExtractedName: formula name derived from a URL
- ResolvedTarget: the fully resolved formula, URL and tap
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

from ..exit_codes import InvalidActionError, UnresolvableSourceError


class Action(Enum):
    """Brew operation to run against the tap-qualified formula."""
    INSTALL = "install"
    REINSTALL = "reinstall"

    @classmethod
    def parse(cls, value: str) -> 'Action':
        """
        Parse an action token. Matching is case-sensitive.

        Raises:
            InvalidActionError: if value is not 'install' or 'reinstall'
        """
        for action in cls:
            if action.value == value:
                return action
        raise InvalidActionError(value)


@dataclass(frozen=True)
class InvocationRequest:
    """
    Classified command line.

    In short form the user passed a URL directly and `formula` is empty
    until it is extracted from the URL.
    """
    action: Action
    formula: str
    source: str
    tap: str
    defaulted_tap: bool = False
    short_form: bool = False


class LayoutVariant(Enum):
    """Path convention used to locate a formula in homebrew-core."""
    SHARDED = "sharded"  # Formula/<letter>/<name>.rb
    LEGACY = "legacy"    # Formula/<name>.rb
    DIRECT = "direct"    # URL given by the user, not resolved


@dataclass(frozen=True)
class CandidateUrls:
    """Both layout candidates for one commit and formula."""
    sharded: str
    legacy: str

    @classmethod
    def build(
        cls,
        repo_root: str,
        commit: str,
        formula: str,
        formula_dir: str = "Formula",
        extension: str = ".rb"
    ) -> 'CandidateUrls':
        """Derive both candidate URLs from a commit and formula name."""
        base = f"{repo_root.rstrip('/')}/{commit}/{formula_dir}"
        first_letter = formula[:1].lower()
        return cls(
            sharded=f"{base}/{first_letter}/{formula}{extension}",
            legacy=f"{base}/{formula}{extension}",
        )


@dataclass(frozen=True)
class ResolvedSource:
    """Canonical URL chosen for a source reference."""
    url: str
    layout: LayoutVariant

    @property
    def fallback_used(self) -> bool:
        """True when the legacy layout was chosen because the sharded one is missing."""
        return self.layout == LayoutVariant.LEGACY


def is_valid_formula_name(name: str) -> bool:
    """A formula name must be a single path component."""
    return bool(name) and "/" not in name and "\\" not in name and name not in (".", "..")


@dataclass(frozen=True)
class ExtractedName:
    """Formula name derived from a URL."""
    name: str
    reliable: bool = True


@dataclass(frozen=True)
class ResolvedTarget:
    """
    A formula ready to be fetched, committed and installed.

    source_url must be non-empty and formula a single path component;
    use `create` to enforce this before any network fetch happens.
    """
    action: Action
    formula: str
    source_url: str
    tap: str
    defaulted_tap: bool = False
    layout: LayoutVariant = LayoutVariant.DIRECT
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def create(cls, request: InvocationRequest, formula: str, source: ResolvedSource,
               warnings: Tuple[str, ...] = ()) -> 'ResolvedTarget':
        if not source.url or not is_valid_formula_name(formula):
            raise UnresolvableSourceError()
        return cls(
            action=request.action,
            formula=formula,
            source_url=source.url,
            tap=request.tap,
            defaulted_tap=request.defaulted_tap,
            layout=source.layout,
            warnings=tuple(warnings),
        )

    @property
    def qualified_name(self) -> str:
        """Tap-qualified formula name, e.g. 'alice/local/doxygen'."""
        return f"{self.tap}/{self.formula}"
