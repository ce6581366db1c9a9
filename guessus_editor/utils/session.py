"""
Persisted editor state (selected variant, language, category and filters).
"""

import json
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Dict, Optional

from ..config import SESSION_FILE, VARIANTS, LANGUAGE_CODES, DEFAULT_VARIANT, DEFAULT_CATEGORIES
from ..config import INTENSITY_MIN, INTENSITY_MAX


@dataclass
class EditorSession:
    """Where the operator left off."""

    variant: str = DEFAULT_VARIANT
    language: str = "ru"
    category: str = "party"
    search: str = ""
    intensity_min: int = INTENSITY_MIN
    intensity_max: int = INTENSITY_MAX
    last_updated: str = ""

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> 'EditorSession':
        """Create from dictionary."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})

    def update(self, **fields) -> 'EditorSession':
        """
        Update fields, validating variant, language and intensity bounds.

        Switching variant resets the category to the variant's first
        default category unless a category is given too.

        Raises:
            ValueError: on an unknown variant/language or bad bounds
        """
        unknown = set(fields) - set(self.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown session fields: {', '.join(sorted(unknown))}")

        variant = fields.get('variant', self.variant)
        if variant not in VARIANTS:
            raise ValueError(f"Unknown variant: {variant}")
        language = fields.get('language', self.language)
        if language not in LANGUAGE_CODES:
            raise ValueError(f"Unknown language: {language}")

        low = int(fields.get('intensity_min', self.intensity_min))
        high = int(fields.get('intensity_max', self.intensity_max))
        if not INTENSITY_MIN <= low <= high <= INTENSITY_MAX:
            raise ValueError(f"Invalid intensity filter: {low}-{high}")

        if variant != self.variant and 'category' not in fields:
            defaults = DEFAULT_CATEGORIES.get(variant, [])
            self.category = defaults[0]['id'] if defaults else ''

        for key, value in fields.items():
            setattr(self, key, value)
        self.intensity_min = low
        self.intensity_max = high
        return self

    def save(self) -> bool:
        """Save session state to file."""
        self.last_updated = datetime.now().isoformat()

        try:
            with open(SESSION_FILE, 'w', encoding='utf-8') as f:
                json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
            return True
        except IOError:
            return False

    @classmethod
    def load(cls) -> Optional['EditorSession']:
        """Load session state from file."""
        if not SESSION_FILE.exists():
            return None

        try:
            with open(SESSION_FILE, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return cls.from_dict(data)
        except (IOError, json.JSONDecodeError):
            return None

    @classmethod
    def clear(cls) -> bool:
        """Clear session state file."""
        try:
            if SESSION_FILE.exists():
                SESSION_FILE.unlink()
            return True
        except IOError:
            return False
