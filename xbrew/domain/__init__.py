"""
Domain layer for xbrew.

Contains pure domain objects with no I/O or side effects:
- InvocationRequest / ResolvedTarget: what the user asked for and what it resolved to
- LayoutVariant: which homebrew-core path convention a URL uses
- OverrideRepository: the local tap holding pinned formula files
- RepositoryUpdate / InstallResult / PinResult: outcomes of a run
"""

from .request import (
    Action,
    InvocationRequest,
    LayoutVariant,
    CandidateUrls,
    ResolvedSource,
    ExtractedName,
    ResolvedTarget,
    is_valid_formula_name,
)
from .repository import OverrideRepository
from .operation import CommitOutcome, RepositoryUpdate, InstallResult, PinResult

__all__ = [
    'Action',
    'InvocationRequest',
    'LayoutVariant',
    'CandidateUrls',
    'ResolvedSource',
    'ExtractedName',
    'ResolvedTarget',
    'is_valid_formula_name',
    'OverrideRepository',
    'CommitOutcome',
    'RepositoryUpdate',
    'InstallResult',
    'PinResult',
]
