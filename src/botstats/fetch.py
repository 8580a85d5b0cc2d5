"""Source acquisition: local CSV files or HTTP with retry and backoff."""

import logging
import time
from pathlib import Path

import requests

from botstats.util import FetchError, SourceError

logger = logging.getLogger(__name__)

HEADERS = {
    "User-Agent": "botstats/0.1",
    "Cache-Control": "no-store",
}
MAX_RETRIES = 3
BACKOFF_BASE = 1  # seconds: 1, 2
TIMEOUT = 30


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def fetch_page(url: str) -> str:
    """Fetch a URL with retry and exponential backoff."""
    last_error = None
    for attempt in range(1, MAX_RETRIES + 1):
        try:
            logger.debug("Fetching %s (attempt %d/%d)", url, attempt, MAX_RETRIES)
            resp = requests.get(url, headers=HEADERS, timeout=TIMEOUT)
            if resp.status_code == 200:
                logger.debug("OK %s", url)
                try:
                    return resp.content.decode("utf-8-sig")
                except UnicodeDecodeError as e:
                    raise FetchError(f"Response from {url} is not UTF-8: {e}") from e
            logger.warning(
                "HTTP %d for %s (attempt %d/%d)",
                resp.status_code, url, attempt, MAX_RETRIES,
            )
            last_error = FetchError(f"HTTP {resp.status_code} for {url}")
        except requests.RequestException as e:
            logger.warning(
                "Connection error for %s (attempt %d/%d): %s",
                url, attempt, MAX_RETRIES, e,
            )
            last_error = FetchError(f"Connection error for {url}: {e}")

        if attempt < MAX_RETRIES:
            backoff = BACKOFF_BASE * (2 ** (attempt - 1))
            logger.debug("Backoff %ds before retry", backoff)
            time.sleep(backoff)

    raise last_error  # type: ignore[misc]


def read_local(path: Path) -> str:
    """Read a local CSV file as UTF-8 text."""
    if not path.is_file():
        raise SourceError(f"No such file: {path}")
    if path.suffix.lower() != ".csv":
        logger.warning("%s does not have a .csv suffix; parsing anyway", path)
    try:
        return path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceError(f"Cannot read {path}: {e}") from e


def load_source_text(source: str | Path) -> str:
    """Return the raw CSV text of a file path or http(s) URL."""
    if isinstance(source, str) and is_url(source):
        return fetch_page(source)
    return read_local(Path(source))
