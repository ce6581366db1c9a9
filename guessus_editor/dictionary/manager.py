"""
Dictionary manager: in-memory editing of one variant plus its local draft.
"""

import json
from pathlib import Path
from datetime import datetime
from typing import Dict, List, Optional, Any, Iterable, Tuple

from ..config import DRAFTS_DIR, LANGUAGE_CODES, VARIANTS
from .models import (
    Dictionary, Category, Word, VersionInfo, DictionaryError,
    check_intensity, clean_text,
)


class DictionaryManager:
    """
    Manages one dictionary variant while it is being edited.

    Every mutation marks the manager as changed and, when a draft path
    is set, writes the draft so unpublished work survives a restart.
    Word positions are always real list indices.
    """

    def __init__(self, variant: str, dictionary: Dictionary = None,
                 version: VersionInfo = None, draft_path: Optional[str] = None):
        """
        Initialize dictionary manager.

        Args:
            variant: Dictionary variant ('adult' or 'family')
            dictionary: Initial dictionary (empty if not given)
            version: Version info of the published dictionary
            draft_path: Local draft file, or None to keep edits in memory only
        """
        if variant not in VARIANTS:
            raise DictionaryError(f"Unknown variant: {variant}")

        self.variant = variant
        self.dictionary = dictionary or Dictionary()
        self.dictionary.ensure_consistency()
        self.version = version or VersionInfo()
        self.has_changes = False
        self.draft_path = Path(draft_path) if draft_path else None

    @classmethod
    def draft_path_for(cls, variant: str) -> Path:
        return DRAFTS_DIR / f"{variant}.json"

    # =========================================================================
    # Persistence
    # =========================================================================

    def save(self) -> bool:
        """Save the local draft."""
        if not self.draft_path:
            return False

        self.draft_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            'variant': self.variant,
            'savedAt': datetime.now().isoformat(),
            'hasChanges': self.has_changes,
            'version': self.version.to_dict(),
            'dictionary': self.dictionary.to_dict(),
        }

        try:
            with open(self.draft_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            return True
        except IOError as e:
            print(f"⚠ Error saving draft {self.draft_path}: {e}")
            return False

    @classmethod
    def load(cls, variant: str, draft_path: Optional[str] = None) -> Optional['DictionaryManager']:
        """
        Load a manager from its local draft.

        Returns:
            DictionaryManager, or None if there is no usable draft
        """
        path = Path(draft_path) if draft_path else cls.draft_path_for(variant)
        if not path.exists():
            return None

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            dictionary = Dictionary.from_dict(data.get('dictionary', {}))
        except (IOError, json.JSONDecodeError, DictionaryError) as e:
            print(f"⚠ Error loading draft {path}: {e}")
            return None

        mgr = cls(variant, dictionary, VersionInfo.from_dict(data.get('version')), str(path))
        mgr.has_changes = bool(data.get('hasChanges', False))
        return mgr

    def discard_draft(self) -> bool:
        """Delete the local draft file."""
        if self.draft_path and self.draft_path.exists():
            self.draft_path.unlink()
            return True
        return False

    @staticmethod
    def list_drafts() -> List[Dict]:
        """List local drafts in the drafts directory."""
        drafts = []

        for path in DRAFTS_DIR.glob('*.json'):
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except (IOError, json.JSONDecodeError):
                continue

            words = data.get('dictionary', {}).get('words', {})
            drafts.append({
                'variant': data.get('variant', path.stem),
                'savedAt': data.get('savedAt', ''),
                'hasChanges': data.get('hasChanges', False),
                'version': data.get('version', {}).get('version', ''),
                'rows': sum(len(rows) for rows in words.values()),
            })

        return sorted(drafts, key=lambda x: x['variant'])

    def _changed(self):
        self.has_changes = True
        self.save()

    # =========================================================================
    # Words
    # =========================================================================

    def words(self, category_id: str) -> List[Word]:
        """Word list of a category (the live list)."""
        self.dictionary.require_category(category_id)
        return self.dictionary.words.setdefault(category_id, [])

    def get_word(self, category_id: str, index: int) -> Word:
        words = self.words(category_id)
        self._check_index(words, index, category_id)
        return words[index]

    def _check_index(self, words: List[Word], index: Any, category_id: str):
        if isinstance(index, bool) or not isinstance(index, int):
            raise DictionaryError(f"Word index must be an integer, got {index!r}")
        if not 0 <= index < len(words):
            raise DictionaryError(
                f"Word index {index} out of range for '{category_id}' ({len(words)} words)"
            )

    def _make_word(self, data: Any, category: Category) -> Word:
        if isinstance(data, Word):
            data = data.to_dict()
        if not isinstance(data, dict):
            raise DictionaryError("Word must be an object")

        word = Word(
            intensity=check_intensity(data.get('intensity', category.default_intensity)),
            **{lang: clean_text(data.get(lang)) for lang in LANGUAGE_CODES}
        )
        if word.is_empty():
            raise DictionaryError("Word must not be empty")
        return word

    def add_word(self, category_id: str, data: Any) -> int:
        """
        Append a word to a category.

        Args:
            category_id: Target category
            data: Word or dict with language keys and optional intensity

        Returns:
            Index of the new word
        """
        category = self.dictionary.require_category(category_id)
        word = self._make_word(data, category)
        words = self.words(category_id)
        words.append(word)
        self._changed()
        return len(words) - 1

    def update_word(self, category_id: str, index: int, fields: Dict) -> Word:
        """
        Update some languages and/or the intensity of a word.

        The update is applied to a copy first so a rejected edit leaves
        the word untouched.
        """
        if not isinstance(fields, dict):
            raise DictionaryError("Word fields must be an object")

        word = self.get_word(category_id, index)
        updated = word.copy()

        for key, value in fields.items():
            if key == 'intensity':
                updated.intensity = check_intensity(value)
            elif key in LANGUAGE_CODES:
                updated.set_text(key, value)
            else:
                raise DictionaryError(f"Unknown word field: {key}")

        if updated.is_empty():
            raise DictionaryError("Word must not be empty")

        self.words(category_id)[index] = updated
        self._changed()
        return updated

    def set_text(self, category_id: str, index: int, language: str, value: str) -> Word:
        """Edit one cell in place. Blank values are rejected."""
        if not clean_text(value):
            raise DictionaryError("Word must not be empty")
        return self.update_word(category_id, index, {language: value})

    def delete_word(self, category_id: str, index: int) -> Word:
        """Delete a word by index."""
        words = self.words(category_id)
        self._check_index(words, index, category_id)
        removed = words.pop(index)
        self._changed()
        return removed

    def _validated_indices(self, category_id: str, indices: Iterable[int]) -> List[int]:
        words = self.words(category_id)
        unique = []
        for index in indices:
            self._check_index(words, index, category_id)
            if index not in unique:
                unique.append(index)
        return sorted(unique)

    def delete_words(self, category_id: str, indices: Iterable[int]) -> int:
        """
        Delete several words at once.

        Indices refer to positions before any deletion. They are removed
        highest first so earlier removals do not shift later ones.

        Returns:
            Number of words deleted
        """
        ordered = self._validated_indices(category_id, indices)
        words = self.words(category_id)
        for index in reversed(ordered):
            del words[index]
        if ordered:
            self._changed()
        return len(ordered)

    def move_words(self, source_id: str, target_id: str, indices: Iterable[int]) -> int:
        """
        Move words to another category, keeping their relative order.

        Moved words are appended to the target. Nothing is changed if any
        index is invalid.

        Returns:
            Number of words moved
        """
        if source_id == target_id:
            raise DictionaryError("Source and target category are the same")
        self.dictionary.require_category(target_id)

        ordered = self._validated_indices(source_id, indices)
        source = self.words(source_id)
        moving = [source[index] for index in ordered]
        for index in reversed(ordered):
            del source[index]
        self.words(target_id).extend(moving)

        if moving:
            self._changed()
        return len(moving)

    # =========================================================================
    # Categories
    # =========================================================================

    def add_category(self, data: Any) -> Category:
        """Add a category at the end of the list."""
        category = data if isinstance(data, Category) else Category.from_dict(data)
        category.validate()
        if self.dictionary.get_category(category.id):
            raise DictionaryError(f"Category already exists: {category.id}")

        self.dictionary.categories.append(category)
        self.dictionary.words[category.id] = []
        self._changed()
        return category

    def update_category(self, category_id: str, fields: Dict) -> Category:
        """Update display name, emoji or intensity range of a category."""
        category = self.dictionary.require_category(category_id)
        aliases = {'intensity_min': 'intensityMin', 'intensity_max': 'intensityMax'}
        merged = category.to_dict()
        for key, value in fields.items():
            key = aliases.get(key, key)
            if key == 'id':
                continue
            if key not in merged:
                raise DictionaryError(f"Unknown category field: {key}")
            merged[key] = value

        updated = Category.from_dict(merged)
        position = self.dictionary.categories.index(category)
        self.dictionary.categories[position] = updated
        self._changed()
        return updated

    def delete_category(self, category_id: str, move_to: Optional[str] = None) -> int:
        """
        Delete a category.

        Args:
            category_id: Category to delete
            move_to: Category that receives its words, or None to drop them

        Returns:
            Number of words moved (0 when dropped)
        """
        category = self.dictionary.require_category(category_id)
        if move_to == category_id:
            raise DictionaryError("Cannot move words into the category being deleted")
        if move_to:
            self.dictionary.require_category(move_to)

        moved = 0
        words = self.dictionary.words.pop(category_id, [])
        if move_to:
            self.words(move_to).extend(words)
            moved = len(words)

        self.dictionary.categories.remove(category)
        self._changed()
        return moved

    def reorder_category(self, category_id: str, position: int):
        """Move a category to a new position in the list."""
        category = self.dictionary.require_category(category_id)
        categories = self.dictionary.categories
        categories.remove(category)
        position = max(0, min(int(position), len(categories)))
        categories.insert(position, category)
        self._changed()

    # =========================================================================
    # Queries
    # =========================================================================

    @staticmethod
    def _matches(word: Word, query: str, language: Optional[str],
                 intensity_min: Optional[int], intensity_max: Optional[int]) -> bool:
        if intensity_min is not None and word.intensity < intensity_min:
            return False
        if intensity_max is not None and word.intensity > intensity_max:
            return False
        if not query:
            return True
        languages = [language] if language else LANGUAGE_CODES
        return any(query in word.text(lang).lower() for lang in languages)

    def search(self, category_id: str, query: str = '', language: Optional[str] = None,
               intensity_min: Optional[int] = None,
               intensity_max: Optional[int] = None) -> List[Tuple[int, Word]]:
        """
        Filter a category's words.

        Args:
            category_id: Category to search
            query: Case-insensitive substring ('' matches everything)
            language: Language to match on, or None for any language
            intensity_min: Inclusive lower intensity bound
            intensity_max: Inclusive upper intensity bound

        Returns:
            (index, word) pairs with real list indices
        """
        if language is not None and language not in LANGUAGE_CODES:
            raise DictionaryError(f"Unknown language: {language}")

        query_lower = (query or '').strip().lower()
        return [
            (index, word)
            for index, word in enumerate(self.words(category_id))
            if self._matches(word, query_lower, language, intensity_min, intensity_max)
        ]

    def search_all(self, query: str = '', language: Optional[str] = None,
                   intensity_min: Optional[int] = None,
                   intensity_max: Optional[int] = None) -> List[Tuple[str, int, Word]]:
        """Search every category, returning (category_id, index, word)."""
        results = []
        for category_id in self.dictionary.category_ids():
            for index, word in self.search(category_id, query, language,
                                           intensity_min, intensity_max):
                results.append((category_id, index, word))
        return results

    def incomplete_words(self) -> List[Tuple[str, int, List[str]]]:
        """Words with at least one blank language: (category_id, index, missing)."""
        results = []
        for category_id in self.dictionary.category_ids():
            for index, word in enumerate(self.dictionary.words.get(category_id, [])):
                missing = word.missing_languages()
                if missing:
                    results.append((category_id, index, missing))
        return results

    def stats(self) -> Dict:
        """Word counts for the sidebar."""
        by_language = {lang: 0 for lang in LANGUAGE_CODES}
        by_category = {}

        for category in self.dictionary.categories:
            words = self.dictionary.words.get(category.id, [])
            per_lang = {lang: 0 for lang in LANGUAGE_CODES}
            for word in words:
                for lang in LANGUAGE_CODES:
                    if word.text(lang):
                        per_lang[lang] += 1
                        by_language[lang] += 1
            by_category[category.id] = {'rows': len(words), 'byLanguage': per_lang}

        return {
            'total': sum(by_language.values()),
            'rows': self.dictionary.total_rows(),
            'byLanguage': by_language,
            'byCategory': by_category,
            'incomplete': len(self.incomplete_words()),
        }

    # =========================================================================
    # Whole-dictionary operations
    # =========================================================================

    def replace(self, dictionary: Dictionary, version: VersionInfo = None):
        """Replace the dictionary (import)."""
        dictionary.ensure_consistency()
        self.dictionary = dictionary
        if version:
            self.version = version
        self._changed()

    def mark_published(self, version: VersionInfo):
        """Record a successful publish."""
        self.version = version
        self.has_changes = False
        self.save()
