"""Pytest configuration.

Points the editor's data directory at a temporary folder before the
package is imported, and makes the project root importable.
"""

import os
import sys
import shutil
import tempfile

import pytest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

os.environ['GUESSUS_DATA_DIR'] = tempfile.mkdtemp(prefix='guessus-test-')
os.environ['GITHUB_TOKEN'] = ''
os.environ['OPENAI_API_KEY'] = ''

from guessus_editor import config  # noqa: E402
from guessus_editor.dictionary import legacy_to_dictionary  # noqa: E402


@pytest.fixture(autouse=True)
def clean_data_dir():
    """Each test starts without drafts, cache entries or session file."""
    for directory in (config.CACHE_DIR, config.DRAFTS_DIR):
        shutil.rmtree(directory, ignore_errors=True)
        directory.mkdir(parents=True, exist_ok=True)
    if config.SESSION_FILE.exists():
        config.SESSION_FILE.unlink()
    yield


@pytest.fixture
def legacy_data():
    """Small adult dictionary in the published per-language format."""
    return {
        'ru': {
            'party': ['Пиво', 'Танцы', 'Караоке'],
            'dirty': ['Поцелуй', 'пиво'],
            'extreme': [],
        },
        'en': {
            'party': ['Beer', 'Dancing', 'Karaoke'],
            'dirty': ['Kiss', 'Beer'],
            'extreme': [],
        },
        'es': {
            'party': ['Cerveza', 'Baile', 'Karaoke'],
            'dirty': ['Beso'],
            'extreme': [],
        },
        'ua': {
            'party': ['Пиво', 'Танці', 'Караоке'],
            'dirty': ['Поцілунок', 'Пиво'],
            'extreme': [],
        },
    }


@pytest.fixture
def dictionary(legacy_data):
    return legacy_to_dictionary(legacy_data, 'adult')
