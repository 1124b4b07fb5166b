"""
Service layer for xbrew.

Contains business logic that orchestrates domain objects and infrastructure:
- classify: command-line tokens to InvocationRequest
- UrlResolver: commit SHA to canonical homebrew-core URL
- extract_formula_name: formula name from a raw URL
- TapService: fetch and commit into the override tap
- Installer: brew install / reinstall
- PinService: the full pipeline

Services are the primary API for the CLI to use.
"""

from .classifier import classify, is_url
from .formula_name import extract_formula_name
from .url_resolver import UrlResolver
from .tap_service import TapService
from .installer import Installer
from .pin_service import PinService, PinOptions, check_dependencies

__all__ = [
    'classify',
    'is_url',
    'extract_formula_name',
    'UrlResolver',
    'TapService',
    'Installer',
    'PinService',
    'PinOptions',
    'check_dependencies',
]
