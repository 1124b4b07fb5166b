"""
Homebrew client infrastructure for xbrew.

Wraps the handful of brew subcommands xbrew needs:
- `brew tap` / `brew tap-new` to manage the override tap
- `brew --repo` to locate the tap on disk
- `brew install` / `brew reinstall` to install the pinned formula
"""

import shutil
import subprocess
import logging
from typing import Optional, List, Sequence, Tuple

logger = logging.getLogger(__name__)


def which(tool: str) -> Optional[str]:
    """Return the full path of an executable on PATH, or None."""
    return shutil.which(tool)


class BrewClient:
    """
    Abstraction over brew commands.

    Query commands are captured; install commands stream straight to the
    terminal so the user sees brew's own output verbatim.

    Example:
        brew = BrewClient()
        if not brew.has_tap("alice/local"):
            brew.tap_new("alice/local")
        print(brew.repo_path("alice/local"))
    """

    def __init__(self, executable: str = "brew", timeout: int = 120):
        """
        Initialize BrewClient.

        Args:
            executable: brew binary name or path
            timeout: Timeout in seconds for query commands (installs are not limited)
        """
        self.executable = executable
        self.timeout = timeout

    def _run(self, args: Sequence[str]) -> Tuple[Optional[str], int]:
        """Run a brew query command and capture stdout."""
        cmd = [self.executable, *args]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
            if result.returncode != 0 and result.stderr:
                logger.debug(f"{' '.join(cmd)}: {result.stderr.strip()}")
            output = result.stdout
            return output.strip() if output else None, result.returncode
        except subprocess.TimeoutExpired:
            logger.warning(f"Brew command timed out: {' '.join(cmd)}")
            return None, -1
        except OSError as e:
            logger.error(f"Brew command failed: {' '.join(cmd)} - {e}")
            return None, -1

    def _run_interactive(self, args: Sequence[str]) -> int:
        """Run a brew command with output going to the terminal."""
        cmd = [self.executable, *args]
        try:
            return subprocess.run(cmd).returncode
        except OSError as e:
            logger.error(f"Brew command failed: {' '.join(cmd)} - {e}")
            return 1

    def tap_list(self) -> List[str]:
        """List the names of all taps Homebrew knows about."""
        output, code = self._run(['tap'])
        if code != 0 or not output:
            return []
        return [line.strip() for line in output.splitlines() if line.strip()]

    def has_tap(self, tap: str) -> bool:
        """Check whether a tap is registered. Names must match exactly."""
        return tap in self.tap_list()

    def tap_new(self, tap: str) -> bool:
        """
        Create a new local tap.

        Returns:
            True if successful
        """
        return self._run_interactive(['tap-new', tap]) == 0

    def repo_path(self, tap: str) -> Optional[str]:
        """Filesystem root of a tap's git repository."""
        output, code = self._run(['--repo', tap])
        if code == 0 and output:
            return output.strip()
        return None

    def install(self, name: str) -> int:
        """Run `brew install` and return its exit code."""
        return self._run_interactive(['install', name])

    def reinstall(self, name: str) -> int:
        """Run `brew reinstall` and return its exit code."""
        return self._run_interactive(['reinstall', name])
