"""
Conversion between the two dictionary JSON shapes.

Legacy (published repository files)::

    {"ru": {"party": ["...", ...], ...}, "en": {...}, "es": {...}, "ua": {...}}

Rich (editor drafts and exports)::

    {"format": "rich",
     "categories": [{"id": "party", "name": "Party", "emoji": "🎉",
                     "intensityMin": 1, "intensityMax": 4}, ...],
     "words": {"party": [{"ru": "...", "en": "...", "es": "...", "ua": "...",
                          "intensity": 2}, ...]}}

Legacy lists are aligned by position: item i of every language list is
the same word.
"""

from typing import Dict, List

from ..config import LANGUAGE_CODES, DEFAULT_CATEGORIES
from .models import Dictionary, Category, Word, DictionaryError

FORMAT_LEGACY = 'legacy'
FORMAT_RICH = 'rich'
FORMATS = (FORMAT_LEGACY, FORMAT_RICH)


def detect_format(data) -> str:
    """
    Work out which shape a loaded JSON document has.

    Raises:
        DictionaryError: if the document is neither shape
    """
    if not isinstance(data, dict):
        raise DictionaryError("Dictionary JSON must be an object")

    if isinstance(data.get('categories'), list) and isinstance(data.get('words'), dict):
        return FORMAT_RICH

    if data and all(key in LANGUAGE_CODES for key in data):
        if all(isinstance(cats, dict) for cats in data.values()):
            return FORMAT_LEGACY

    raise DictionaryError("Unrecognized dictionary format")


def default_categories(variant: str) -> List[Category]:
    return [Category.from_dict(c) for c in DEFAULT_CATEGORIES.get(variant, [])]


def legacy_to_dictionary(data: Dict, variant: str) -> Dictionary:
    """
    Build a Dictionary from the per-language legacy map.

    Categories known for the variant keep their default order and
    attributes; other ids follow in first-seen order. Rows are zipped by
    position and shorter language lists are padded with blanks.
    """
    categories = default_categories(variant)
    known = {c.id for c in categories}

    for lang in LANGUAGE_CODES:
        for category_id in (data.get(lang) or {}):
            if category_id not in known:
                categories.append(Category.placeholder(category_id))
                known.add(category_id)

    dictionary = Dictionary(categories=categories)

    for category in categories:
        columns = {}
        for lang in LANGUAGE_CODES:
            items = (data.get(lang) or {}).get(category.id) or []
            if not isinstance(items, list):
                raise DictionaryError(
                    f"Expected a list for {lang}/{category.id}, got {type(items).__name__}"
                )
            columns[lang] = items

        row_count = max((len(items) for items in columns.values()), default=0)
        rows = []
        for i in range(row_count):
            row = {
                lang: columns[lang][i] if i < len(columns[lang]) else ''
                for lang in LANGUAGE_CODES
            }
            row['intensity'] = category.default_intensity
            rows.append(Word.from_dict(row, category.default_intensity))
        dictionary.words[category.id] = rows

    return dictionary


def dictionary_to_legacy(dictionary: Dictionary) -> Dict[str, Dict[str, List[str]]]:
    """
    Flatten a Dictionary into the per-language legacy map.

    Trailing blank cells are dropped; blanks between words stay as empty
    strings so positions remain aligned across languages.
    Blank cells at the end of a source list are therefore not
    reproduced.
    """
    result = {}
    for lang in LANGUAGE_CODES:
        per_category = {}
        for category in dictionary.categories:
            column = [w.text(lang) for w in dictionary.words.get(category.id, [])]
            while column and not column[-1]:
                column.pop()
            per_category[category.id] = column
        result[lang] = per_category
    return result


def load_dictionary(data: Dict, variant: str) -> Dictionary:
    """Load a Dictionary from either JSON shape."""
    if detect_format(data) == FORMAT_RICH:
        return Dictionary.from_dict(data)
    return legacy_to_dictionary(data, variant)


def dump_dictionary(dictionary: Dictionary, fmt: str = FORMAT_LEGACY) -> Dict:
    """Serialize a Dictionary into the requested JSON shape."""
    if fmt == FORMAT_RICH:
        return dictionary.to_dict()
    if fmt == FORMAT_LEGACY:
        return dictionary_to_legacy(dictionary)
    raise DictionaryError(f"Unknown format: {fmt}")
