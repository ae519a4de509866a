"""
HTTP fetching for nativedep.

This module provides:
- Fetching small documents (the remote bucket listing) into memory
- Idempotent streaming downloads of archives into a cache file

A download is considered done when its destination file exists; content is
never re-validated. Bytes are streamed into a ``.part`` file that is renamed
into place only after the whole body arrived, so an interrupted transfer
never leaves a file that looks complete.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import requests
from requests.exceptions import RequestException

from nativedep.core.exceptions import DownloadFailed, FilesystemError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


@dataclass
class DownloadProgress:
    """Progress information for a download."""

    bytes_downloaded: int
    total_bytes: int
    speed_bps: float  # bytes per second

    @property
    def percentage(self) -> float:
        if self.total_bytes <= 0:
            return 0.0
        return self.bytes_downloaded / self.total_bytes * 100

    def __str__(self) -> str:
        return format_progress(self)


def fetch_text(
    url: str, session: Optional[requests.Session] = None, timeout: int = 30
) -> str:
    """
    Fetch a whole document as text.

    Args:
        url: URL to fetch
        session: Optional requests session
        timeout: Request timeout in seconds

    Returns:
        Response body decoded as text

    Raises:
        DownloadFailed: On transport failure or a status other than 200
    """
    http = session or requests
    logger.debug(f"Fetching {url}")
    try:
        response = http.get(url, timeout=timeout)
    except RequestException as e:
        raise DownloadFailed(url, f"Request failed ({e})") from e

    if response.status_code != 200:
        raise DownloadFailed(
            url,
            f"Unexpected response code {response.status_code}",
            status_code=response.status_code,
        )
    return response.text


def fetch_file(
    url: str,
    destination: Path,
    session: Optional[requests.Session] = None,
    timeout: int = 30,
    progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
) -> bool:
    """
    Download a URL to a file unless the file already exists.

    Args:
        url: URL to download from
        destination: Cache file path
        session: Optional requests session
        timeout: Request timeout in seconds
        progress_callback: Optional callback for progress updates

    Returns:
        True if the file was downloaded, False if it was already cached

    Raises:
        DownloadFailed: On transport failure or a status other than 200
        FilesystemError: If the cache file cannot be written

    Example:
        >>> fetch_file("https://example.com/lib.tar.gz", Path("cache/lib.tar.gz"))
        True
    """
    destination = Path(destination)
    if destination.exists():
        logger.info(f"{destination} already downloaded, skipping fetch")
        return False

    partial = destination.with_name(destination.name + ".part")
    http = session or requests
    logger.info(f"Downloading {url}")

    try:
        response = http.get(url, stream=True, timeout=timeout, allow_redirects=True)
    except RequestException as e:
        raise DownloadFailed(url, f"Request failed ({e})") from e

    with response:
        if response.status_code != 200:
            raise DownloadFailed(
                url,
                f"Unexpected response code {response.status_code}",
                status_code=response.status_code,
            )

        total_size = int(response.headers.get("content-length") or 0)
        downloaded = 0
        start_time = time.time()
        last_progress_time = start_time

        try:
            with open(partial, "wb") as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if not chunk:
                        continue
                    f.write(chunk)
                    downloaded += len(chunk)

                    # Report progress at most every 0.5 seconds
                    current_time = time.time()
                    if progress_callback and (
                        current_time - last_progress_time >= 0.5
                        or downloaded == total_size
                    ):
                        elapsed = current_time - start_time
                        progress_callback(
                            DownloadProgress(
                                bytes_downloaded=downloaded,
                                total_bytes=total_size,
                                speed_bps=downloaded / elapsed if elapsed > 0 else 0,
                            )
                        )
                        last_progress_time = current_time
        except RequestException as e:
            _discard(partial)
            raise DownloadFailed(url, f"Transfer interrupted ({e})") from e
        except OSError as e:
            _discard(partial)
            raise FilesystemError(f"Failed to write {partial}: {e}") from e

    try:
        partial.replace(destination)
    except OSError as e:
        raise FilesystemError(f"Failed to move {partial} to {destination}: {e}") from e

    logger.info(f"Download complete: {destination} ({downloaded} bytes)")
    return True


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Failed to remove partial download {path}: {e}")


def format_progress(progress: DownloadProgress) -> str:
    """
    Format progress for display.

    Example:
        >>> print(format_progress(DownloadProgress(52428800, 104857600, 1048576)))
        50.0/100.0 MB (50.0%) at 1.0 MB/s
    """
    mb_downloaded = progress.bytes_downloaded / 1024 / 1024
    speed_mbps = progress.speed_bps / 1024 / 1024

    if progress.total_bytes > 0:
        mb_total = progress.total_bytes / 1024 / 1024
        return (
            f"{mb_downloaded:.1f}/{mb_total:.1f} MB "
            f"({progress.percentage:.1f}%) "
            f"at {speed_mbps:.1f} MB/s"
        )
    return f"{mb_downloaded:.1f} MB at {speed_mbps:.1f} MB/s"


__all__ = [
    "DownloadProgress",
    "fetch_text",
    "fetch_file",
    "format_progress",
]
