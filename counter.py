"""
Best-effort global match counter.

Tries a direct request, then two public CORS proxies, and falls back to a
local JSON file when all of them fail. Nothing here ever raises into the
game: the worst case is an OFFLINE result.
"""

import json
import os
import time
from typing import NamedTuple, Optional
from urllib.parse import quote

import requests
from loguru import logger

GLOBAL = "GLOBAL"
LOCAL = "LOCAL"
OFFLINE = "OFFLINE"

DEFAULT_API_URL = "https://api.counterapi.dev/v1/wall-go-v1/matches"
DEFAULT_LOCAL_FILE = ".match_count.json"
DEFAULT_TIMEOUTS = (3.0, 4.0, 5.0)


class CountResult(NamedTuple):
    count: int
    source: str


class CounterUnavailable(Exception):
    """Every remote strategy failed."""


# ==============================================================
#   REMOTE STRATEGIES
# ==============================================================

def _cache_busted(url):
    return f"{url}?t={int(time.time() * 1000)}"


def _direct_url(url):
    return url


def _corsproxy_url(url):
    return f"https://corsproxy.io/?{quote(_cache_busted(url), safe='')}"


def _allorigins_url(url):
    return f"https://api.allorigins.win/raw?url={quote(_cache_busted(url), safe='')}"


STRATEGIES = (
    ("direct", _direct_url),
    ("corsproxy", _corsproxy_url),
    ("allorigins", _allorigins_url),
)


def _fetch_count(url, timeout):
    resp = requests.get(url, timeout=timeout)
    resp.raise_for_status()
    data = resp.json()
    count = data.get("count") if isinstance(data, dict) else None
    if not isinstance(count, int) or isinstance(count, bool):
        raise ValueError(f"No integer count in response: {data!r}")
    return count


def fetch_waterfall(target_url, timeouts=DEFAULT_TIMEOUTS):
    """Return the first count any strategy produces; raise CounterUnavailable otherwise."""
    for i, (name, build_url) in enumerate(STRATEGIES):
        timeout = timeouts[min(i, len(timeouts) - 1)]
        try:
            logger.debug(f"[Counter] Strategy {i + 1}: {name}")
            return _fetch_count(build_url(target_url), timeout)
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"[Counter] {name} failed: {e}")
    raise CounterUnavailable("All fetch strategies failed")


# ==============================================================
#   LOCAL FALLBACK
# ==============================================================

def _read_local(path):
    if not os.path.exists(path):
        _write_local(path, 0)
        return 0
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    return int(data.get("count", 0))


def _write_local(path, count):
    with open(path, "w", encoding="utf-8") as f:
        json.dump({"count": count}, f)


# ==============================================================
#   PUBLIC API
# ==============================================================

def get_match_count(api_url=DEFAULT_API_URL, local_file=DEFAULT_LOCAL_FILE, timeouts=DEFAULT_TIMEOUTS):
    try:
        return CountResult(fetch_waterfall(api_url, timeouts), GLOBAL)
    except CounterUnavailable as e:
        logger.warning(f"[Counter] Falling back to local count: {e}")

    try:
        return CountResult(_read_local(local_file), LOCAL)
    except (OSError, ValueError, TypeError, AttributeError) as e:
        logger.warning(f"[Counter] Local count unavailable: {e}")
        return CountResult(0, OFFLINE)


def increment_match_count(
    api_url=DEFAULT_API_URL, local_file=DEFAULT_LOCAL_FILE, timeouts=DEFAULT_TIMEOUTS
) -> Optional[int]:
    """
    Bump the local count immediately, then try the global one. Returns the
    new global count, or None when it could not be reached.
    """
    try:
        _write_local(local_file, _read_local(local_file) + 1)
    except (OSError, ValueError, TypeError, AttributeError) as e:
        logger.warning(f"[Counter] Could not update local count: {e}")

    try:
        return fetch_waterfall(f"{api_url}/up", timeouts)
    except CounterUnavailable:
        logger.warning("[Counter] Global increment failed completely.")
    return None
