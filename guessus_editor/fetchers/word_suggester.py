"""
AI-assisted word generation.

Asks an OpenAI chat model for new words for a category, translated into
every dictionary language, then filters out anything the dictionary
already has.
"""

import json
from typing import Iterable, List, Optional, Set

from openai import OpenAI, OpenAIError

from ..config import OPENAI_API_KEY, OPENAI_MODEL, MAX_SUGGESTIONS, LANGUAGES, LANGUAGE_CODES
from ..dictionary import Category, Word, normalize_key


class SuggestionError(Exception):
    """Raised when word suggestions cannot be produced."""


SYSTEM_PROMPT = (
    "You write word cards for a party guessing game (players explain a word "
    "without saying it). You always answer with a JSON object."
)


class WordSuggester:
    """
    Generates new dictionary words with an OpenAI chat model.

    Each suggestion carries ru/en/es/ua text and an intensity (1-10,
    how explicit the word is). Suggestions duplicating existing words or
    each other are dropped.
    """

    def __init__(self, api_key: str = None, model: str = None, client: OpenAI = None):
        self.api_key = OPENAI_API_KEY if api_key is None else api_key
        self.model = model or OPENAI_MODEL
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self._client is not None or bool(self.api_key)

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            if not self.api_key:
                raise SuggestionError("OpenAI API key is not configured (set OPENAI_API_KEY)")
            self._client = OpenAI(api_key=self.api_key)
        return self._client

    def build_prompt(self, category: Category, count: int,
                     examples: List[str], theme: str = '') -> str:
        """Build the user prompt for a category."""
        languages = ', '.join(f"{lang['code']} ({lang['name']})" for lang in LANGUAGES)
        lines = [
            f"Suggest {count} new words or short phrases for the category "
            f"\"{category.name}\" {category.emoji}.",
            f"Give each one in these languages: {languages}. "
            f"Note that 'ua' means Ukrainian.",
            f"Rate each with an integer intensity from {category.intensity_min} "
            f"to {category.intensity_max} (higher is more explicit).",
        ]
        if theme:
            lines.append(f"Theme: {theme}.")
        if examples:
            lines.append("Do not repeat any of these existing words: " + ', '.join(examples) + ".")
        lines.append(
            'Answer as {"words": [{"ru": "...", "en": "...", "es": "...", '
            '"ua": "...", "intensity": 1}]}'
        )
        return '\n'.join(lines)

    def parse_reply(self, content: str, category: Category,
                    existing_keys: Set[str], limit: int) -> List[Word]:
        """
        Turn the model's JSON reply into Words.

        Items missing any language are dropped, intensities are clamped
        into the category range, and items whose text matches an existing
        key (in any language) are skipped.
        """
        try:
            data = json.loads(content or '')
        except ValueError:
            raise SuggestionError("AI reply is not valid JSON")

        items = data.get('words') if isinstance(data, dict) else data
        if not isinstance(items, list):
            raise SuggestionError("AI reply has no word list")

        seen = set(existing_keys)
        words = []
        for item in items:
            if not isinstance(item, dict):
                continue

            try:
                intensity = int(item.get('intensity', category.default_intensity))
            except (TypeError, ValueError):
                intensity = category.default_intensity

            word = Word.from_dict(item, category.default_intensity)
            word.intensity = category.clamp_intensity(intensity)
            if word.missing_languages():
                continue

            keys = {normalize_key(word.text(lang)) for lang in LANGUAGE_CODES}
            if keys & seen:
                continue
            seen.update(keys)

            words.append(word)
            if len(words) >= limit:
                break

        return words

    def suggest(self, category: Category, count: int = 10,
                existing: Optional[Iterable[str]] = None,
                theme: str = '') -> List[Word]:
        """
        Suggest new words for a category.

        Args:
            category: Category to generate for
            count: Number of words wanted (1-MAX_SUGGESTIONS)
            existing: Words already in the dictionary (any language)
            theme: Optional extra guidance for the model

        Returns:
            Up to count new Words

        Raises:
            SuggestionError: no API key, API failure or unusable reply
        """
        count = max(1, min(int(count), MAX_SUGGESTIONS))
        existing = [w for w in (existing or []) if w]
        existing_keys = {normalize_key(w) for w in existing}

        # Examples keep the prompt bounded; the full set is used for filtering
        prompt = self.build_prompt(category, count, existing[:200], theme)

        print(f"🤖 Asking {self.model} for {count} '{category.id}' words...")

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                response_format={"type": "json_object"},
                temperature=0.9,
            )
        except OpenAIError as e:
            raise SuggestionError(f"AI request failed: {e}")

        content = response.choices[0].message.content
        words = self.parse_reply(content, category, existing_keys, count)

        print(f"   ✓ {len(words)} new words")
        return words
