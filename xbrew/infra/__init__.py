"""
Infrastructure layer for xbrew.

Contains abstractions for external systems:
- BrewClient: Homebrew command execution
- GitClient: Git command execution
- FormulaHttpClient: existence probes and downloads
- scoped_temp_file / place_file: temporary file handling

These provide clean interfaces that can be mocked for testing.
"""

from .brew_client import BrewClient, which
from .git_client import GitClient, GitIdentity
from .http_client import FormulaHttpClient
from .file_store import scoped_temp_file, place_file

__all__ = [
    'BrewClient',
    'which',
    'GitClient',
    'GitIdentity',
    'FormulaHttpClient',
    'scoped_temp_file',
    'place_file',
]
