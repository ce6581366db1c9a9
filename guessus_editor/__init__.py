"""
GuessUs Dictionary Editor - Web Application

A browser-based editor for the multilingual GuessUs word dictionary:
1. LOAD the published adult/family word lists from GitHub
2. EDIT categories and words in ru/en/es/ua, find duplicates, bulk move
3. GENERATE new words with AI assistance
4. PUBLISH changes back to the repository
"""

from .config import VERSION

__version__ = VERSION
__all__ = ['app', 'VERSION']
