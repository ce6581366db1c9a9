"""
Remote dictionary fetcher.

Downloads a variant's word list and version file from the public
repository (raw.githubusercontent.com). Both files are cached locally
so switching variants does not hit the network every time.
"""

import requests
from typing import Dict, Optional, Tuple

from ..config import URLS, VARIANTS, REQUEST_TIMEOUT
from ..dictionary import Dictionary, VersionInfo, DictionaryError, load_dictionary
from ..utils.cache import cache_get, cache_set, cache_clear


class DictionaryLoadError(Exception):
    """Raised when a dictionary cannot be downloaded or parsed."""
    def __init__(self, message: str, url: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class DictionaryFetcher:
    """
    Fetches published dictionaries.

    Files per variant:
    - adult: words-adult.json + version-adult.json
    - family: words.json + version.json
    """

    def __init__(self, raw_base: str = None, session: requests.Session = None):
        """
        Initialize dictionary fetcher.

        Args:
            raw_base: Base URL of the raw repository files
            session: Optional requests session
        """
        self.raw_base = (raw_base or URLS['raw_base']).rstrip('/')
        self.session = session or requests.Session()

    @staticmethod
    def files_for(variant: str) -> Tuple[str, str]:
        """Get (words_file, version_file) for a variant."""
        info = VARIANTS.get(variant)
        if not info:
            raise DictionaryLoadError(f"Unknown variant: {variant}")
        return info['words_file'], info['version_file']

    def _cache_key(self, filename: str) -> str:
        return f"remote_{self.raw_base}/{filename}"

    def _get_json(self, filename: str, use_cache: bool) -> Dict:
        """Download (or read from cache) one JSON file."""
        cache_key = self._cache_key(filename)
        if use_cache:
            cached = cache_get(cache_key)
            if cached is not None:
                return cached

        url = f"{self.raw_base}/{filename}"
        print(f"📥 Fetching {url}")

        try:
            resp = self.session.get(url, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as e:
            raise DictionaryLoadError(f"Failed to load {filename}: {e}", url=url)

        if resp.status_code != 200:
            raise DictionaryLoadError(
                f"Failed to load {filename} (HTTP {resp.status_code})",
                url=url, status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError:
            raise DictionaryLoadError(f"{filename} is not valid JSON", url=url)

        cache_set(cache_key, data)
        return data

    def fetch(self, variant: str, use_cache: bool = True) -> Tuple[Dictionary, VersionInfo]:
        """
        Fetch a variant's dictionary and version info.

        Args:
            variant: 'adult' or 'family'
            use_cache: Use a cached copy when it has not expired

        Returns:
            (Dictionary, VersionInfo)

        Raises:
            DictionaryLoadError: on network, HTTP or format errors
        """
        words_file, version_file = self.files_for(variant)

        words_data = self._get_json(words_file, use_cache)
        version_data = self._get_json(version_file, use_cache)

        try:
            dictionary = load_dictionary(words_data, variant)
        except DictionaryError as e:
            cache_clear(self._cache_key(words_file))
            raise DictionaryLoadError(f"Invalid dictionary in {words_file}: {e}")

        version = VersionInfo.from_dict(version_data if isinstance(version_data, dict) else {})

        print(f"   ✓ Loaded {variant} v{version.version}: {dictionary.total_rows()} rows")
        return dictionary, version

    def invalidate(self, variant: str) -> int:
        """Drop cached copies of a variant's files."""
        words_file, version_file = self.files_for(variant)
        return (cache_clear(self._cache_key(words_file)) +
                cache_clear(self._cache_key(version_file)))
