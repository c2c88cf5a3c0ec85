"""HTTP helpers for release lookups and asset downloads."""

import json
import logging
import shutil
from pathlib import Path
from typing import Any
from urllib.request import Request, urlopen

logger = logging.getLogger(__name__)

USER_AGENT = "shellstrap"
DOWNLOAD_TIMEOUT = 120.0


def fetch_json(url: str, timeout: float = 10.0) -> Any:
    """GET a JSON document.

    Raises:
        OSError: On network failure (URLError is an OSError).
        ValueError: If the body is not valid JSON.
    """
    req = Request(url, headers={"Accept": "application/vnd.github+json", "User-Agent": USER_AGENT})
    with urlopen(req, timeout=timeout) as resp:
        raw = resp.read().decode("utf-8", errors="replace")
    return json.loads(raw)


def latest_release_tag(repo: str, timeout: float = 10.0) -> str | None:
    """Return the latest release tag of a GitHub repository, or None."""
    try:
        data = fetch_json(f"https://api.github.com/repos/{repo}/releases/latest", timeout)
    except (OSError, ValueError) as e:
        logger.debug("Could not look up latest release of %s: %s", repo, e)
        return None

    if isinstance(data, dict):
        tag = data.get("tag_name")
        if isinstance(tag, str) and tag.strip():
            return tag.strip()
    return None


def download(url: str, dest: Path, timeout: float = DOWNLOAD_TIMEOUT) -> Path:
    """Stream a URL to a file.

    Raises:
        OSError: On network or filesystem failure.
    """
    dest.parent.mkdir(parents=True, exist_ok=True)
    logger.info("Downloading %s", url)
    req = Request(url, headers={"User-Agent": USER_AGENT})
    try:
        with urlopen(req, timeout=timeout) as resp, open(dest, "wb") as f:
            shutil.copyfileobj(resp, f)
    except OSError:
        dest.unlink(missing_ok=True)
        raise
    return dest
