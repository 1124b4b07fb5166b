"""
Git client infrastructure for xbrew.

Provides a clean abstraction over git command execution.
All git operations go through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from business logic
"""

import subprocess
from dataclasses import dataclass
from typing import Optional, List, Sequence, Tuple
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GitIdentity:
    """Author identity passed to a single git invocation with -c."""
    name: str
    email: str

    def as_config_args(self) -> List[str]:
        return ['-c', f'user.name={self.name}', '-c', f'user.email={self.email}']


class GitClient:
    """
    Abstraction over git commands.

    Commands are passed as argument lists so commit messages containing
    URLs never need shell quoting.

    Example:
        client = GitClient()
        client.add("/path/to/tap", "Formula/doxygen.rb")
        if client.has_staged_changes("/path/to/tap", "Formula/doxygen.rb"):
            client.commit("/path/to/tap", "Add doxygen", ["Formula/doxygen.rb"])
    """

    def __init__(self, timeout: int = 30):
        """
        Initialize GitClient.

        Args:
            timeout: Command timeout in seconds (default: 30)
        """
        self.timeout = timeout

    def _run(
        self,
        args: Sequence[str],
        cwd: str,
        capture_stderr: bool = False,
        config_args: Sequence[str] = ()
    ) -> Tuple[Optional[str], int]:
        """
        Run a git command.

        Args:
            args: git arguments, without the leading 'git'
            cwd: Working directory
            capture_stderr: Include stderr in output
            config_args: '-c key=value' pairs placed before the subcommand

        Returns:
            Tuple of (stdout, returncode)
        """
        cmd = ['git', *config_args, *args]
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )

            output = result.stdout
            if capture_stderr and result.stderr:
                output += result.stderr

            return output.strip() if output else None, result.returncode

        except subprocess.TimeoutExpired:
            logger.warning(f"Git command timed out: {' '.join(cmd)}")
            return None, -1
        except OSError as e:
            logger.error(f"Git command failed: {' '.join(cmd)} - {e}")
            return None, -1

    def add(self, path: str, file_path: str) -> bool:
        """
        Stage a file.

        Returns:
            True if successful
        """
        output, code = self._run(['add', '--', file_path], cwd=path, capture_stderr=True)
        if code != 0:
            logger.error(f"git add {file_path} failed: {output}")
        return code == 0

    def has_staged_changes(self, path: str, file_path: Optional[str] = None) -> bool:
        """
        Check whether the index differs from HEAD.

        Args:
            path: Path to git repository
            file_path: Limit the check to this path (relative to the repo)

        Returns:
            True if there is something to commit
        """
        args = ['diff', '--cached', '--quiet']
        if file_path:
            args += ['--', file_path]
        _, code = self._run(args, cwd=path)
        # --quiet exits 1 when there are differences
        return code != 0

    def commit(
        self,
        path: str,
        message: str,
        paths: Optional[List[str]] = None,
        identity: Optional[GitIdentity] = None
    ) -> Tuple[bool, Optional[str]]:
        """
        Create a commit.

        Args:
            path: Path to git repository
            message: Commit message
            paths: Only commit these paths, leaving other staged changes alone
            identity: Author identity for this invocation only

        Returns:
            Tuple of (success, combined output)
        """
        args = ['commit', '-m', message]
        if paths:
            args += ['--', *paths]
        config_args = identity.as_config_args() if identity else ()
        output, code = self._run(args, cwd=path, capture_stderr=True, config_args=config_args)
        return code == 0, output

    def head_commit(self, path: str) -> Optional[str]:
        """Get the abbreviated commit hash of HEAD."""
        output, code = self._run(['rev-parse', '--short', 'HEAD'], cwd=path)
        if code == 0 and output:
            return output.strip()
        return None
