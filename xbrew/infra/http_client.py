"""
HTTP client infrastructure for xbrew.

Two operations against raw.githubusercontent.com (or any raw file host):
- exists(): HEAD probe with a bounded GET fallback for servers that reject HEAD
- download(): retrying streamed download to a local file

Both retry a fixed number of times with a fixed delay on transient
failures (connection errors, timeouts, 408/429/5xx). A 404 is final.
"""

import logging
import time
from pathlib import Path
from typing import Optional

import requests

from .. import __version__

logger = logging.getLogger(__name__)

# Statuses worth retrying; anything else >= 400 is a definitive answer
RETRYABLE_STATUSES = {408, 429, 500, 502, 503, 504}

CHUNK_SIZE = 64 * 1024


class FormulaHttpClient:
    """
    HTTP access for formula files.

    Example:
        http = FormulaHttpClient()
        if http.exists(url):
            size = http.download(url, Path("/tmp/doxygen.rb"))
    """

    def __init__(
        self,
        probe_attempts: int = 2,
        probe_retry_delay: float = 1.0,
        probe_timeout: float = 10.0,
        download_attempts: int = 3,
        download_retry_delay: float = 2.0,
        download_timeout: float = 60.0,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize FormulaHttpClient.

        Args:
            probe_attempts: Attempts per existence probe (HEAD, then GET)
            probe_retry_delay: Seconds between probe attempts
            probe_timeout: Timeout for each probe request
            download_attempts: Attempts for the download
            download_retry_delay: Seconds between download attempts
            download_timeout: Timeout for each download request
            session: requests.Session to use (creates one if None)
        """
        self.probe_attempts = max(1, probe_attempts)
        self.probe_retry_delay = probe_retry_delay
        self.probe_timeout = probe_timeout
        self.download_attempts = max(1, download_attempts)
        self.download_retry_delay = download_retry_delay
        self.download_timeout = download_timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': f'xbrew/{__version__}',
        })

    def _probe(self, method: str, url: str) -> Optional[bool]:
        """
        Send one kind of probe request with retries.

        Returns:
            True if the URL answered 2xx/3xx, False if it definitively does
            not exist, None if every attempt failed transiently
        """
        for attempt in range(self.probe_attempts):
            try:
                response = self.session.request(
                    method,
                    url,
                    allow_redirects=True,
                    stream=True,
                    timeout=self.probe_timeout,
                )
                try:
                    status = response.status_code
                finally:
                    response.close()

                if status < 400:
                    return True
                if status not in RETRYABLE_STATUSES:
                    logger.debug(f"{method} {url} returned {status}")
                    return False
                logger.debug(f"{method} {url} returned {status} (attempt {attempt + 1})")

            except requests.RequestException as e:
                logger.debug(f"{method} {url} failed: {e} (attempt {attempt + 1})")

            if attempt < self.probe_attempts - 1:
                time.sleep(self.probe_retry_delay)

        return None

    def exists(self, url: str) -> bool:
        """
        Check whether a URL exists.

        Tries HEAD first. Some servers do not support HEAD, so any HEAD
        failure is followed by a GET whose body is never read.
        """
        if self._probe('HEAD', url):
            return True
        return bool(self._probe('GET', url))

    def download(self, url: str, dest: Path) -> Optional[int]:
        """
        Download a URL to a local file, overwriting it.

        Args:
            url: Source URL
            dest: Destination file

        Returns:
            Number of bytes written, or None if the download failed
        """
        dest = Path(dest)
        last_error: Optional[str] = None

        for attempt in range(self.download_attempts):
            try:
                response = self.session.get(url, stream=True, timeout=self.download_timeout)
                try:
                    if response.status_code >= 400:
                        last_error = f"HTTP {response.status_code}"
                        if response.status_code not in RETRYABLE_STATUSES:
                            break
                    else:
                        written = 0
                        with open(dest, 'wb') as f:
                            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                                if chunk:
                                    f.write(chunk)
                                    written += len(chunk)
                        return written
                finally:
                    response.close()

            except requests.RequestException as e:
                last_error = str(e)

            if attempt < self.download_attempts - 1:
                logger.info(f"Download attempt {attempt + 1} failed ({last_error}), retrying...")
                time.sleep(self.download_retry_delay)

        logger.warning(f"Download of {url} failed: {last_error}")
        return None
