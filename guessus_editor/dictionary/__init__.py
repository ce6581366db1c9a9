"""
Dictionary model, format conversion, duplicate detection and editing.
"""

from .models import Word, Category, Dictionary, VersionInfo, DictionaryError
from .formats import (
    FORMAT_LEGACY,
    FORMAT_RICH,
    FORMATS,
    detect_format,
    legacy_to_dictionary,
    dictionary_to_legacy,
    load_dictionary,
    dump_dictionary,
)
from .duplicates import (
    DuplicateGroup,
    normalize_key,
    duplicate_indices,
    find_duplicates,
    flagged_indices,
    summarize,
)
from .manager import DictionaryManager

__all__ = [
    'Word',
    'Category',
    'Dictionary',
    'VersionInfo',
    'DictionaryError',
    'FORMAT_LEGACY',
    'FORMAT_RICH',
    'FORMATS',
    'detect_format',
    'legacy_to_dictionary',
    'dictionary_to_legacy',
    'load_dictionary',
    'dump_dictionary',
    'DuplicateGroup',
    'normalize_key',
    'duplicate_indices',
    'find_duplicates',
    'flagged_indices',
    'summarize',
    'DictionaryManager',
]
