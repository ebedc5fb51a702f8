from __future__ import annotations

import json
import logging
import os
from typing import Callable, Dict, Optional, Tuple

import requests

from memcalc.domain.constants import REPOSITORY_INDEX_NAME
from memcalc.domain.errors import CalculatorResolutionError
from memcalc.infra.network.common import CHUNK_SIZE, DEFAULT_TIMEOUT, USER_AGENT

logger = logging.getLogger(__name__)

FILE_SCHEME = "file://"


def is_remote(location: str) -> bool:
    """Return True for http(s) locations."""
    return location.startswith(("http://", "https://"))


def local_path(location: str) -> str:
    """Strip a file:// scheme from a local location."""
    if location.startswith(FILE_SCHEME):
        return location[len(FILE_SCHEME):]
    return location


def fetch_repository_index(repository_root: str) -> Dict[str, str]:
    """
    Load the version-to-URI index of a calculator repository.

    Args:
        repository_root: http(s) URL or local directory holding index.json.

    Returns:
        Dict[str, str]: Mapping of version string to artifact URI.

    Raises:
        CalculatorResolutionError: If the index is unreachable or malformed.
    """
    root = repository_root.rstrip("/")
    index_location = f"{root}/{REPOSITORY_INDEX_NAME}"
    logger.debug(f"Reading calculator repository index: {index_location}")

    try:
        if is_remote(root):
            response = requests.get(
                index_location, headers={"User-Agent": USER_AGENT}, timeout=DEFAULT_TIMEOUT
            )
            response.raise_for_status()
            data = response.json()
        else:
            with open(os.path.join(local_path(root), REPOSITORY_INDEX_NAME), "r", encoding="utf-8") as f:
                data = json.load(f)
    except requests.exceptions.RequestException as e:
        raise CalculatorResolutionError(f"Repository index unreachable at {index_location}: {e}") from e
    except (OSError, ValueError) as e:
        raise CalculatorResolutionError(f"Repository index unreadable at {index_location}: {e}") from e

    if not isinstance(data, dict) or not all(isinstance(v, str) for v in data.values()):
        raise CalculatorResolutionError(f"Malformed repository index at {index_location}")

    logger.debug(f"Repository index lists {len(data)} versions")
    return {str(k): v for k, v in data.items()}


def download_binary_stream(
        url: str,
        dest_path: str,
        progress_callback: Optional[Callable[[float], None]] = None
) -> Tuple[bool, str]:
    """Acquire a remote binary using buffered streaming."""
    headers = {"User-Agent": USER_AGENT}
    try:
        with requests.get(url, headers=headers, stream=True, timeout=DEFAULT_TIMEOUT) as response:
            response.raise_for_status()
            total_size = int(response.headers.get("content-length", 0))
            downloaded_size = 0

            with open(dest_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
                        downloaded_size += len(chunk)
                        if progress_callback and total_size > 0:
                            progress_callback((downloaded_size / total_size) * 100)
        return True, "Download completed successfully."
    except (requests.exceptions.RequestException, OSError) as e:
        return False, str(e)
