"""
Utility modules for the dictionary editor.
"""

from .cache import cache_get, cache_set, cache_clear
from .session import EditorSession

__all__ = ['cache_get', 'cache_set', 'cache_clear', 'EditorSession']
