"""
Dictionary data structures.

A Word is one row of the dictionary: the same word in every supported
language plus an intensity score. A Dictionary keeps its categories in
display order and one word list per category.
"""

from datetime import date
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any

from ..config import LANGUAGE_CODES, INTENSITY_MIN, INTENSITY_MAX, FALLBACK_CATEGORY_EMOJI


class DictionaryError(ValueError):
    """Raised when an edit would leave the dictionary in an invalid state."""


def clean_text(value: Any) -> str:
    """Coerce a cell value to a stripped string."""
    if value is None:
        return ''
    return str(value).strip()


def check_intensity(value: Any) -> int:
    """Validate an intensity score, returning it as int."""
    try:
        intensity = int(value)
    except (TypeError, ValueError):
        raise DictionaryError(f"Intensity must be a number, got {value!r}")
    if not INTENSITY_MIN <= intensity <= INTENSITY_MAX:
        raise DictionaryError(
            f"Intensity must be between {INTENSITY_MIN} and {INTENSITY_MAX}, got {intensity}"
        )
    return intensity


@dataclass
class Word:
    """One dictionary row: the word in each language and its intensity."""

    ru: str = ""
    en: str = ""
    es: str = ""
    ua: str = ""
    intensity: int = INTENSITY_MIN

    def text(self, language: str) -> str:
        """Get the word in a language."""
        if language not in LANGUAGE_CODES:
            raise DictionaryError(f"Unknown language: {language}")
        return getattr(self, language)

    def set_text(self, language: str, value: str):
        """Set the word in a language."""
        if language not in LANGUAGE_CODES:
            raise DictionaryError(f"Unknown language: {language}")
        setattr(self, language, clean_text(value))

    def is_empty(self) -> bool:
        """True when no language has any text."""
        return not any(self.text(lang) for lang in LANGUAGE_CODES)

    def missing_languages(self) -> List[str]:
        """Languages with a blank cell."""
        return [lang for lang in LANGUAGE_CODES if not self.text(lang)]

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        result = {lang: self.text(lang) for lang in LANGUAGE_CODES}
        result['intensity'] = self.intensity
        return result

    @classmethod
    def from_dict(cls, data: Dict, default_intensity: int = INTENSITY_MIN) -> 'Word':
        """
        Create from dictionary.

        Missing languages become blank and an unreadable intensity falls
        back to default_intensity.
        """
        try:
            intensity = check_intensity(data.get('intensity', default_intensity))
        except DictionaryError:
            intensity = default_intensity

        return cls(
            intensity=intensity,
            **{lang: clean_text(data.get(lang)) for lang in LANGUAGE_CODES}
        )

    def copy(self) -> 'Word':
        return Word(**self.to_dict())


@dataclass
class Category:
    """A word category with its display attributes and intensity range."""

    id: str
    name: str = ""
    emoji: str = FALLBACK_CATEGORY_EMOJI
    intensity_min: int = INTENSITY_MIN
    intensity_max: int = INTENSITY_MAX

    @property
    def default_intensity(self) -> int:
        return self.intensity_min

    def validate(self):
        """Raise DictionaryError if the category is unusable."""
        if not clean_text(self.id):
            raise DictionaryError("Category id must not be empty")
        low = check_intensity(self.intensity_min)
        high = check_intensity(self.intensity_max)
        if low > high:
            raise DictionaryError(
                f"Category '{self.id}' has intensity range {low}-{high}"
            )

    def clamp_intensity(self, value: int) -> int:
        """Pull an intensity into this category's range."""
        return max(self.intensity_min, min(self.intensity_max, value))

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "emoji": self.emoji,
            "intensityMin": self.intensity_min,
            "intensityMax": self.intensity_max,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Category':
        """Create from dictionary (camelCase or snake_case keys)."""
        if not isinstance(data, dict):
            raise DictionaryError(f"Category must be an object, got {type(data).__name__}")
        category_id = clean_text(data.get('id'))
        category = cls(
            id=category_id,
            name=clean_text(data.get('name')) or category_id.title(),
            emoji=clean_text(data.get('emoji')) or FALLBACK_CATEGORY_EMOJI,
            intensity_min=data.get('intensityMin', data.get('intensity_min', INTENSITY_MIN)),
            intensity_max=data.get('intensityMax', data.get('intensity_max', INTENSITY_MAX)),
        )
        category.validate()
        category.intensity_min = int(category.intensity_min)
        category.intensity_max = int(category.intensity_max)
        return category

    @classmethod
    def placeholder(cls, category_id: str) -> 'Category':
        """Category for an id found in data without a definition."""
        return cls(id=category_id, name=category_id.replace('_', ' ').title())


@dataclass
class Dictionary:
    """Ordered categories and the word list of each category."""

    categories: List[Category] = field(default_factory=list)
    words: Dict[str, List[Word]] = field(default_factory=dict)

    def category_ids(self) -> List[str]:
        return [c.id for c in self.categories]

    def get_category(self, category_id: str) -> Optional[Category]:
        for category in self.categories:
            if category.id == category_id:
                return category
        return None

    def require_category(self, category_id: str) -> Category:
        """Get a category or raise DictionaryError."""
        category = self.get_category(category_id)
        if category is None:
            raise DictionaryError(f"Unknown category: {category_id}")
        return category

    def ensure_consistency(self):
        """
        Give every category a word list and every word list a category.

        Orphan word lists get a placeholder category appended at the end.
        """
        for category in self.categories:
            self.words.setdefault(category.id, [])
        known = set(self.category_ids())
        for category_id in list(self.words):
            if category_id not in known:
                self.categories.append(Category.placeholder(category_id))
                known.add(category_id)

    def total_rows(self) -> int:
        return sum(len(words) for words in self.words.values())

    def to_dict(self) -> Dict:
        """Convert to the rich JSON document."""
        return {
            "format": "rich",
            "categories": [c.to_dict() for c in self.categories],
            "words": {
                c.id: [w.to_dict() for w in self.words.get(c.id, [])]
                for c in self.categories
            },
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Dictionary':
        """Create from the rich JSON document."""
        categories = []
        seen = set()
        items = data.get('categories') or []
        if not isinstance(items, list):
            raise DictionaryError("Dictionary categories must be a list")
        for item in items:
            category = Category.from_dict(item)
            if category.id in seen:
                raise DictionaryError(f"Duplicate category id: {category.id}")
            seen.add(category.id)
            categories.append(category)

        dictionary = cls(categories=categories)
        by_id = {c.id: c for c in categories}

        words = data.get('words') or {}
        if not isinstance(words, dict):
            raise DictionaryError("Dictionary words must be an object")

        for category_id, rows in words.items():
            if not isinstance(rows or [], list):
                raise DictionaryError(
                    f"Expected a list of words for {category_id}, got {type(rows).__name__}"
                )
            category = by_id.get(category_id) or Category.placeholder(category_id)
            dictionary.words[category_id] = [
                Word.from_dict(row, category.default_intensity)
                for row in rows or []
                if isinstance(row, dict)
            ]

        dictionary.ensure_consistency()
        return dictionary

    def copy(self) -> 'Dictionary':
        return Dictionary.from_dict(self.to_dict())


@dataclass
class VersionInfo:
    """Published dictionary version (contents of the version-*.json files)."""

    version: str = "1.0.0"
    updated_at: str = ""

    def bump(self, today: Optional[date] = None) -> 'VersionInfo':
        """
        Return the next version.

        The last numeric component is incremented; a version with no
        numeric component gets '.1' appended.
        """
        parts = self.version.split('.') if self.version else []
        for i in range(len(parts) - 1, -1, -1):
            if parts[i].isdigit():
                parts[i] = str(int(parts[i]) + 1)
                break
        else:
            parts.append('1')

        today = today or date.today()
        return VersionInfo(version='.'.join(parts), updated_at=today.isoformat())

    def to_dict(self) -> Dict:
        return {"version": self.version, "updatedAt": self.updated_at}

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> 'VersionInfo':
        data = data or {}
        return cls(
            version=str(data.get('version', '1.0.0')),
            updated_at=str(data.get('updatedAt', data.get('updated_at', ''))),
        )
