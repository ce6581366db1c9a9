"""
File cache for remote dictionary downloads.

Each entry is one JSON file in CACHE_DIR holding the original key, the
time it was written and the cached value.
"""

import json
import hashlib
from pathlib import Path
from datetime import datetime
from typing import Any, Optional

from ..config import CACHE_DIR, CACHE_EXPIRY


def get_cache_path(key: str) -> Path:
    """Cache file for a key."""
    digest = hashlib.md5(key.encode('utf-8')).hexdigest()
    return CACHE_DIR / f"{digest}.json"


def _read_entry(path: Path) -> Optional[dict]:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            entry = json.load(f)
        entry['saved'] = datetime.fromisoformat(entry['timestamp'])
        return entry
    except (json.JSONDecodeError, KeyError, TypeError, ValueError):
        return None


def cache_get(key: str, max_age: Optional[int] = None) -> Optional[Any]:
    """
    Look up a cached value.

    Args:
        key: Cache key (the remote URL for downloads)
        max_age: Maximum age in seconds, CACHE_EXPIRY when omitted

    Returns:
        The cached value, or None when missing, stale or unreadable.
        Stale and unreadable entries are deleted.
    """
    path = get_cache_path(key)
    if not path.exists():
        return None

    limit = CACHE_EXPIRY if max_age is None else max_age
    entry = _read_entry(path)

    if entry is not None and (datetime.now() - entry['saved']).total_seconds() < limit:
        return entry.get('value')

    path.unlink(missing_ok=True)
    return None


def cache_set(key: str, value: Any) -> bool:
    """Store a JSON-serializable value. Returns False if it could not be written."""
    path = get_cache_path(key)
    entry = {
        'key': key,
        'timestamp': datetime.now().isoformat(),
        'value': value,
    }

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(entry, f, ensure_ascii=False)
    except (OSError, TypeError) as e:
        print(f"⚠ Could not cache {key}: {e}")
        return False
    return True


def cache_clear(key: str = None) -> int:
    """
    Remove one entry, or every entry when key is None.

    Returns:
        Number of entries removed
    """
    paths = [get_cache_path(key)] if key else list(CACHE_DIR.glob("*.json"))

    removed = 0
    for path in paths:
        if not path.exists():
            continue
        try:
            path.unlink()
            removed += 1
        except OSError as e:
            print(f"⚠ Could not remove cache file {path.name}: {e}")
    return removed
