"""
Runs brew install / reinstall against a tap-qualified formula.
"""

import logging
from typing import Callable, Optional

from ..domain import Action, InstallResult
from ..exit_codes import InstallError
from ..infra.brew_client import BrewClient

logger = logging.getLogger(__name__)


class Installer:
    """
    Invokes Homebrew for the pinned formula.

    Reinstall falls back to install when it fails, so reinstall also
    works for formulae that were never installed. There is no other retry.
    """

    def __init__(self, brew: Optional[BrewClient] = None,
                 echo: Optional[Callable[[str], None]] = None):
        self.brew = brew or BrewClient()
        self.echo = echo or logger.info

    def run(self, action: Action, qualified_name: str) -> InstallResult:
        """
        Install or reinstall a formula.

        Raises:
            InstallError: brew failed; carries brew's exit code
        """
        self.echo(f"Running: brew {action.value} {qualified_name}")

        fell_back = False
        if action == Action.INSTALL:
            code = self.brew.install(qualified_name)
        else:
            code = self.brew.reinstall(qualified_name)
            if code != 0:
                logger.warning("Reinstall failed or formula not previously installed; attempting install...")
                fell_back = True
                code = self.brew.install(qualified_name)

        result = InstallResult(
            action=action,
            qualified_name=qualified_name,
            exit_code=code,
            fell_back=fell_back,
        )
        if not result.succeeded:
            raise InstallError(f"brew install {qualified_name} failed (exit {code}).", code)
        return result
