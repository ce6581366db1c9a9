"""
Duplicate word detection.

Words are compared per language, case-insensitively, after trimming and
collapsing internal whitespace. Blank cells are never duplicates.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from ..config import LANGUAGE_CODES
from .models import Dictionary, Word


def normalize_key(text: str) -> str:
    """Comparison key for a word."""
    return ' '.join((text or '').split()).casefold()


@dataclass
class DuplicateGroup:
    """All places where one word appears more than once in a language."""

    language: str
    key: str
    locations: List[Tuple[str, int]] = field(default_factory=list)
    texts: List[str] = field(default_factory=list)

    @property
    def category_ids(self) -> List[str]:
        seen = []
        for category_id, _ in self.locations:
            if category_id not in seen:
                seen.append(category_id)
        return seen

    @property
    def is_cross_category(self) -> bool:
        return len(self.category_ids) > 1

    def to_dict(self) -> Dict:
        return {
            'language': self.language,
            'word': self.texts[0] if self.texts else self.key,
            'key': self.key,
            'count': len(self.locations),
            'crossCategory': self.is_cross_category,
            'locations': [
                {'category': category_id, 'index': index, 'text': text}
                for (category_id, index), text in zip(self.locations, self.texts)
            ],
        }


def duplicate_indices(words: List[Word], language: str) -> Set[int]:
    """
    Indices inside a single word list that repeat another entry.

    Every member of a repeated group is returned, including the first.
    """
    seen: Dict[str, List[int]] = defaultdict(list)
    for index, word in enumerate(words):
        key = normalize_key(word.text(language))
        if key:
            seen[key].append(index)

    return {
        index
        for indices in seen.values() if len(indices) > 1
        for index in indices
    }


def find_duplicates(dictionary: Dictionary,
                    languages: Optional[Iterable[str]] = None,
                    cross_category_only: bool = False) -> List[DuplicateGroup]:
    """
    Find repeated words across the whole dictionary.

    Args:
        dictionary: Dictionary to scan
        languages: Languages to check (all by default)
        cross_category_only: Only report words repeated in 2+ categories

    Returns:
        Groups sorted by language, then key. Locations follow category
        order, then index.
    """
    languages = [lang for lang in LANGUAGE_CODES if lang in set(languages or LANGUAGE_CODES)]
    groups = []

    for lang in languages:
        by_key: Dict[str, DuplicateGroup] = {}
        for category in dictionary.categories:
            for index, word in enumerate(dictionary.words.get(category.id, [])):
                text = word.text(lang)
                key = normalize_key(text)
                if not key:
                    continue
                group = by_key.setdefault(key, DuplicateGroup(language=lang, key=key))
                group.locations.append((category.id, index))
                group.texts.append(text)

        for key in sorted(by_key):
            group = by_key[key]
            if len(group.locations) < 2:
                continue
            if cross_category_only and not group.is_cross_category:
                continue
            groups.append(group)

    return groups


def flagged_indices(dictionary: Dictionary, category_id: str, language: str,
                    cross_category: bool = True) -> Set[int]:
    """
    Indices of a category's words that are duplicated.

    With cross_category, a word also counts when its twin lives in a
    different category; otherwise only repeats inside the category count.
    """
    if not cross_category:
        return duplicate_indices(dictionary.words.get(category_id, []), language)

    flagged = set()
    for group in find_duplicates(dictionary, [language]):
        for group_category, index in group.locations:
            if group_category == category_id:
                flagged.add(index)
    return flagged


def existing_keys(dictionary: Dictionary) -> Set[str]:
    """Normalized keys of every non-blank cell in every language."""
    keys = set()
    for words in dictionary.words.values():
        for word in words:
            for lang in LANGUAGE_CODES:
                key = normalize_key(word.text(lang))
                if key:
                    keys.add(key)
    return keys


def summarize(groups: List[DuplicateGroup]) -> Dict[str, int]:
    """Number of duplicate groups per language."""
    summary = {lang: 0 for lang in LANGUAGE_CODES}
    for group in groups:
        summary[group.language] += 1
    return summary
