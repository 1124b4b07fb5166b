"""
Operation result domain objects for xbrew.

Provides result types for the write side of a run: committing the
formula into the override tap and invoking brew.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .request import Action, ResolvedTarget


class CommitOutcome(Enum):
    """What happened to the tap repository."""
    COMMITTED = "committed"
    NO_CHANGES = "no_changes"


@dataclass
class RepositoryUpdate:
    """
    Result of materializing a formula file into the override tap.
    """
    tap: str
    path: str
    outcome: CommitOutcome
    created_tap: bool = False
    used_fallback_identity: bool = False
    message: Optional[str] = None


@dataclass
class InstallResult:
    """Result of a brew install or reinstall."""
    action: Action
    qualified_name: str
    exit_code: int
    fell_back: bool = False  # reinstall failed and install was run instead

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


@dataclass
class PinResult:
    """Everything that happened during one xbrew run."""
    target: ResolvedTarget
    update: RepositoryUpdate
    install: InstallResult
