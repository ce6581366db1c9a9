"""
Configuration settings for the GuessUs Dictionary Editor.
"""

from pathlib import Path
import os
from dotenv import load_dotenv

VERSION = "1.4.0"

# Directory paths
BASE_DIR = Path(__file__).parent
load_dotenv(BASE_DIR / ".env")

DATA_DIR = Path(os.environ.get("GUESSUS_DATA_DIR", BASE_DIR / "data"))
CACHE_DIR = DATA_DIR / "cache"
DRAFTS_DIR = DATA_DIR / "drafts"
SESSION_FILE = DATA_DIR / "session_state.json"

# Create directories
DATA_DIR.mkdir(parents=True, exist_ok=True)
CACHE_DIR.mkdir(exist_ok=True)
DRAFTS_DIR.mkdir(exist_ok=True)

# Remote dictionary cache expiry (seconds) - 10 minutes
CACHE_EXPIRY = 600

# HTTP timeout for remote calls (seconds)
REQUEST_TIMEOUT = 15

# Web server
EDITOR_HOST = os.environ.get("EDITOR_HOST", "0.0.0.0")
EDITOR_PORT = int(os.environ.get("EDITOR_PORT", "5002"))

# GitHub repository holding the published dictionary files
GITHUB_REPO = os.environ.get("GITHUB_REPO", "Syrohub/guessus-dictionary")
GITHUB_BRANCH = os.environ.get("GITHUB_BRANCH", "main")
GITHUB_TOKEN = os.environ.get("GITHUB_TOKEN", "")

URLS = {
    "raw_base": f"https://raw.githubusercontent.com/{GITHUB_REPO}/{GITHUB_BRANCH}",
    "github_api": "https://api.github.com",
}

# AI-assisted word generation
OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY", "")
OPENAI_MODEL = os.environ.get("OPENAI_MODEL", "gpt-4o-mini")
MAX_SUGGESTIONS = 50

# Languages, in display order
LANGUAGES = [
    {"code": "ru", "name": "Русский", "flag": "🇷🇺"},
    {"code": "en", "name": "English", "flag": "🇺🇸"},
    {"code": "es", "name": "Español", "flag": "🇪🇸"},
    {"code": "ua", "name": "Українська", "flag": "🇺🇦"},
]
LANGUAGE_CODES = tuple(lang["code"] for lang in LANGUAGES)

INTENSITY_MIN = 1
INTENSITY_MAX = 10

# Dictionary variants and the repository files that hold them
VARIANTS = {
    "adult": {
        "name": "Adult",
        "emoji": "🔞",
        "words_file": "words-adult.json",
        "version_file": "version-adult.json",
    },
    "family": {
        "name": "Family",
        "emoji": "👨‍👩‍👧",
        "words_file": "words.json",
        "version_file": "version.json",
    },
}
DEFAULT_VARIANT = "adult"

# Default categories per variant (id, name, emoji, intensity range)
DEFAULT_CATEGORIES = {
    "adult": [
        {"id": "party", "name": "Party", "emoji": "🎉", "intensityMin": 1, "intensityMax": 4},
        {"id": "dirty", "name": "Dirty", "emoji": "🔞", "intensityMin": 4, "intensityMax": 7},
        {"id": "extreme", "name": "Extreme", "emoji": "💀", "intensityMin": 7, "intensityMax": 10},
    ],
    "family": [
        {"id": "movies", "name": "Movies", "emoji": "🎬", "intensityMin": 1, "intensityMax": 3},
        {"id": "food", "name": "Food", "emoji": "🍕", "intensityMin": 1, "intensityMax": 3},
        {"id": "animals", "name": "Animals", "emoji": "🐱", "intensityMin": 1, "intensityMax": 3},
        {"id": "sports", "name": "Sports", "emoji": "⚽", "intensityMin": 1, "intensityMax": 3},
        {"id": "travel", "name": "Travel", "emoji": "✈️", "intensityMin": 1, "intensityMax": 3},
        {"id": "professions", "name": "Professions", "emoji": "👨‍⚕️", "intensityMin": 1, "intensityMax": 3},
    ],
}

# Emoji for categories that appear in data but have no default definition
FALLBACK_CATEGORY_EMOJI = "📁"
