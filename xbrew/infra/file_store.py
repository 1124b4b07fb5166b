"""
File handling infrastructure for xbrew.

Provides:
- scoped_temp_file(): a private temp file removed on every exit path,
  including SIGTERM/SIGHUP while the scope is active
- place_file(): move a downloaded file to its final location
"""

import os
import shutil
import signal
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional
import logging

from ..exit_codes import TempFileError

logger = logging.getLogger(__name__)

# SIGINT already raises KeyboardInterrupt
_TERMINATING_SIGNALS = tuple(
    sig for sig in (getattr(signal, 'SIGTERM', None), getattr(signal, 'SIGHUP', None))
    if sig is not None
)


def _raise_system_exit(signum, frame):
    raise SystemExit(128 + signum)


@contextmanager
def _signals_unwind():
    """Turn terminating signals into SystemExit so finally blocks run."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    previous = {}
    for sig in _TERMINATING_SIGNALS:
        previous[sig] = signal.signal(sig, _raise_system_exit)
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


@contextmanager
def scoped_temp_file(prefix: str = "xbrew.", suffix: str = "",
                     dir: Optional[str] = None) -> Generator[Path, None, None]:
    """
    Create a private temporary file and guarantee its removal.

    The file may be moved away inside the scope; only a file still at
    the temp path is removed.

    Raises:
        TempFileError: if the file cannot be created
    """
    try:
        fd, temp_path = tempfile.mkstemp(prefix=prefix, suffix=suffix, dir=dir)
    except OSError as e:
        raise TempFileError(f"mktemp failed; cannot create temporary file: {e}") from e
    os.close(fd)

    path = Path(temp_path)
    try:
        with _signals_unwind():
            yield path
    finally:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove temporary file {path}: {e}")


def place_file(source: Path, dest: Path) -> Path:
    """Move source to dest, overwriting whatever is there."""
    dest = Path(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.move(str(source), str(dest))
    # mkstemp creates files as 0600
    os.chmod(dest, 0o644)
    return dest
