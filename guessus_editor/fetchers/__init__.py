"""
Remote services used by the dictionary editor.

- raw.githubusercontent.com: published word lists and version files
- GitHub contents API: publishing edited dictionaries
- OpenAI: AI-assisted word suggestions
"""

from .dictionary_fetcher import DictionaryFetcher, DictionaryLoadError
from .github_publisher import GitHubPublisher, PublishError, PublishResult
from .word_suggester import WordSuggester, SuggestionError

__all__ = [
    'DictionaryFetcher',
    'DictionaryLoadError',
    'GitHubPublisher',
    'PublishError',
    'PublishResult',
    'WordSuggester',
    'SuggestionError',
]
