"""
GuessUs Dictionary Editor - Flask Web Application

Main entry point for the web application.

Data sources:
- raw.githubusercontent.com: published word lists (legacy per-language format)
- GitHub contents API: publishing edited dictionaries
- OpenAI: AI-assisted word suggestions
"""

import io
import os
import json
import threading
from functools import wraps
from pathlib import Path

from flask import Flask, render_template, request, jsonify, send_file

from .config import (
    VERSION, DATA_DIR, VARIANTS, LANGUAGES, LANGUAGE_CODES, DEFAULT_VARIANT,
    EDITOR_HOST, EDITOR_PORT, INTENSITY_MIN, INTENSITY_MAX,
)
from .dictionary import (
    DictionaryManager, DictionaryError, FORMAT_LEGACY, FORMATS,
    load_dictionary, dump_dictionary, find_duplicates, flagged_indices, summarize,
)
from .dictionary.duplicates import existing_keys, normalize_key
from .fetchers import (
    DictionaryFetcher, DictionaryLoadError,
    GitHubPublisher, PublishError,
    WordSuggester, SuggestionError,
)
from .utils.session import EditorSession

# Initialize Flask app
app = Flask(__name__,
            template_folder=str(Path(__file__).parent / 'templates'),
            static_folder=str(Path(__file__).parent / 'static'))
app.secret_key = os.urandom(24)

# Global instances (lazy loaded)
_fetcher = None
_publisher = None
_suggester = None
_managers = {}

# Managers and draft files are shared by every request thread
_lock = threading.RLock()


def serialized(view):
    """Run a view while holding the editor lock."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        with _lock:
            return view(*args, **kwargs)
    return wrapper


def get_fetcher():
    """Get or create dictionary fetcher instance."""
    global _fetcher
    if _fetcher is None:
        _fetcher = DictionaryFetcher()
    return _fetcher


def get_publisher():
    """Get or create GitHub publisher instance."""
    global _publisher
    if _publisher is None:
        _publisher = GitHubPublisher()
    return _publisher


def get_suggester():
    """Get or create AI word suggester instance."""
    global _suggester
    if _suggester is None:
        _suggester = WordSuggester()
    return _suggester


def get_manager(variant, refresh=False):
    """
    Get the manager for a variant.

    Uses the in-memory manager, then the local draft, then the remote
    repository. refresh drops the draft and re-downloads.
    """
    if variant not in VARIANTS:
        raise DictionaryError(f"Unknown variant: {variant}")

    if refresh:
        existing = _managers.pop(variant, None)
        if existing:
            existing.discard_draft()
        else:
            DictionaryManager.draft_path_for(variant).unlink(missing_ok=True)
    elif variant in _managers:
        return _managers[variant]

    mgr = None if refresh else DictionaryManager.load(variant)
    if mgr is None:
        dictionary, version = get_fetcher().fetch(variant, use_cache=not refresh)
        mgr = DictionaryManager(variant, dictionary, version,
                                str(DictionaryManager.draft_path_for(variant)))

    _managers[variant] = mgr
    return mgr


def reset_state():
    """Forget loaded managers and service clients."""
    global _fetcher, _publisher, _suggester
    _managers.clear()
    _fetcher = None
    _publisher = None
    _suggester = None


def _error(message, status=200):
    return jsonify({'success': False, 'error': str(message)}), status


def _payload():
    return request.get_json(silent=True) or {}


def _variant(data=None):
    source = data if data is not None else request.args
    return source.get('variant') or DEFAULT_VARIANT


def _optional_int(value):
    if value is None or value == '':
        return None
    return int(value)


def _row(index, word, flagged):
    row = word.to_dict()
    row['index'] = index
    row['duplicate'] = index in flagged
    row['missing'] = word.missing_languages()
    return row


def _summary(mgr):
    return {
        'variant': mgr.variant,
        'version': mgr.version.to_dict(),
        'hasChanges': mgr.has_changes,
        'stats': mgr.stats(),
    }


@app.errorhandler(DictionaryError)
def handle_dictionary_error(e):
    return _error(e)


@app.errorhandler(DictionaryLoadError)
def handle_load_error(e):
    return _error(e, 502)


# =============================================================================
# ROUTES - PAGE
# =============================================================================

@app.route('/')
def index():
    """Editor page."""
    session = EditorSession.load() or EditorSession()
    return render_template('editor.html',
                           version=VERSION,
                           session=session.to_dict(),
                           variants=VARIANTS,
                           languages=LANGUAGES,
                           intensity_range=(INTENSITY_MIN, INTENSITY_MAX))


# =============================================================================
# ROUTES - DICTIONARY
# =============================================================================

@app.route('/api/dictionary')
@serialized
def api_dictionary():
    """Load a variant (draft or remote)."""
    refresh = request.args.get('refresh') in ('1', 'true')
    mgr = get_manager(_variant(), refresh=refresh)

    result = _summary(mgr)
    result.update({
        'success': True,
        'dictionary': mgr.dictionary.to_dict(),
    })
    return jsonify(result)


@app.route('/api/stats')
@serialized
def api_stats():
    """Word counts for a variant."""
    mgr = get_manager(_variant())
    result = _summary(mgr)
    result['success'] = True
    return jsonify(result)


@app.route('/api/words')
@serialized
def api_words():
    """Filtered words of a category, with real indices and duplicate flags."""
    mgr = get_manager(_variant())
    category = request.args.get('category', '')
    language = request.args.get('language', 'ru')
    query = request.args.get('q', '')
    match_any = request.args.get('match') == 'any'
    cross = request.args.get('cross', '1') in ('1', 'true')

    try:
        low = _optional_int(request.args.get('min'))
        high = _optional_int(request.args.get('max'))
    except ValueError:
        return _error('Intensity filter must be a number')

    results = mgr.search(category, query, None if match_any else language, low, high)
    flagged = flagged_indices(mgr.dictionary, category, language, cross_category=cross)

    return jsonify({
        'success': True,
        'category': category,
        'language': language,
        'total': len(mgr.words(category)),
        'duplicates': len(flagged),
        'words': [_row(i, w, flagged) for i, w in results],
    })


@app.route('/api/search')
@serialized
def api_search():
    """Search every category of a variant."""
    mgr = get_manager(_variant())
    language = request.args.get('language') or None
    try:
        low = _optional_int(request.args.get('min'))
        high = _optional_int(request.args.get('max'))
    except ValueError:
        return _error('Intensity filter must be a number')

    results = mgr.search_all(request.args.get('q', ''), language, low, high)
    return jsonify({
        'success': True,
        'count': len(results),
        'results': [
            dict(_row(index, word, set()), category=category_id)
            for category_id, index, word in results
        ],
    })


@app.route('/api/words/add', methods=['POST'])
@serialized
def api_words_add():
    """Add a word to a category."""
    data = _payload()
    mgr = get_manager(_variant(data))
    index = mgr.add_word(data.get('category', ''), data.get('word') or {})
    return jsonify({'success': True, 'index': index, 'hasChanges': mgr.has_changes})


@app.route('/api/words/update', methods=['POST'])
@serialized
def api_words_update():
    """Update a word (whole row, or one language cell)."""
    data = _payload()
    mgr = get_manager(_variant(data))
    category = data.get('category', '')
    index = data.get('index')

    if 'language' in data:
        word = mgr.set_text(category, index, data['language'], data.get('value', ''))
    else:
        word = mgr.update_word(category, index, data.get('fields') or {})

    return jsonify({'success': True, 'word': word.to_dict(), 'hasChanges': mgr.has_changes})


@app.route('/api/words/delete', methods=['POST'])
@serialized
def api_words_delete():
    """Delete one word (index) or several (indices)."""
    data = _payload()
    mgr = get_manager(_variant(data))
    category = data.get('category', '')

    if 'indices' in data:
        deleted = mgr.delete_words(category, data.get('indices') or [])
    else:
        mgr.delete_word(category, data.get('index'))
        deleted = 1

    return jsonify({'success': True, 'deleted': deleted, 'hasChanges': mgr.has_changes})


@app.route('/api/words/move', methods=['POST'])
@serialized
def api_words_move():
    """Bulk move words to another category."""
    data = _payload()
    mgr = get_manager(_variant(data))
    moved = mgr.move_words(data.get('source', ''), data.get('target', ''),
                           data.get('indices') or [])
    return jsonify({'success': True, 'moved': moved, 'hasChanges': mgr.has_changes})


# =============================================================================
# ROUTES - CATEGORIES
# =============================================================================

@app.route('/api/categories/add', methods=['POST'])
@serialized
def api_categories_add():
    """Add a category."""
    data = _payload()
    mgr = get_manager(_variant(data))
    category = mgr.add_category(data.get('category') or {})
    return jsonify({'success': True, 'category': category.to_dict()})


@app.route('/api/categories/update', methods=['POST'])
@serialized
def api_categories_update():
    """Update a category's name, emoji or intensity range."""
    data = _payload()
    mgr = get_manager(_variant(data))
    category = mgr.update_category(data.get('id', ''), data.get('fields') or {})
    return jsonify({'success': True, 'category': category.to_dict()})


@app.route('/api/categories/delete', methods=['POST'])
@serialized
def api_categories_delete():
    """Delete a category, optionally moving its words."""
    data = _payload()
    mgr = get_manager(_variant(data))
    moved = mgr.delete_category(data.get('id', ''), data.get('moveTo') or None)
    return jsonify({'success': True, 'moved': moved})


@app.route('/api/categories/reorder', methods=['POST'])
@serialized
def api_categories_reorder():
    """Move a category to a new position."""
    data = _payload()
    mgr = get_manager(_variant(data))
    try:
        mgr.reorder_category(data.get('id', ''), int(data.get('position', 0)))
    except (TypeError, ValueError):
        return _error('Position must be a number')
    return jsonify({'success': True, 'categories': mgr.dictionary.category_ids()})


# =============================================================================
# ROUTES - DUPLICATES
# =============================================================================

@app.route('/api/duplicates')
@serialized
def api_duplicates():
    """Duplicate groups across the dictionary."""
    mgr = get_manager(_variant())
    language = request.args.get('language')
    if language and language not in LANGUAGE_CODES:
        return _error(f'Unknown language: {language}')

    cross_only = request.args.get('cross') in ('1', 'true')
    groups = find_duplicates(mgr.dictionary,
                             [language] if language else None,
                             cross_category_only=cross_only)
    return jsonify({
        'success': True,
        'count': len(groups),
        'byLanguage': summarize(groups),
        'groups': [g.to_dict() for g in groups],
    })


# =============================================================================
# ROUTES - IMPORT / EXPORT / PUBLISH
# =============================================================================

@app.route('/download/<variant>')
@serialized
def download_file(variant):
    """Download a variant's dictionary as JSON."""
    fmt = request.args.get('format', FORMAT_LEGACY)
    if fmt not in FORMATS:
        return _error(f'Unknown format: {fmt}')

    mgr = get_manager(variant)
    data = dump_dictionary(mgr.dictionary, fmt)
    text = json.dumps(data, indent=2, ensure_ascii=False)

    filename = VARIANTS[variant]['words_file']
    if fmt != FORMAT_LEGACY:
        filename = filename.replace('.json', f'.{fmt}.json')

    return send_file(io.BytesIO(text.encode('utf-8')),
                     mimetype='application/json',
                     as_attachment=True,
                     download_name=filename)


@app.route('/api/import', methods=['POST'])
@serialized
def api_import():
    """Replace a variant's dictionary with uploaded JSON (either format)."""
    variant = request.args.get('variant') or DEFAULT_VARIANT

    if 'file' in request.files:
        try:
            data = json.load(request.files['file'])
        except ValueError:
            return _error('Uploaded file is not valid JSON')
    else:
        data = request.get_json(silent=True)
        if data is None:
            return _error('No JSON provided')

    mgr = get_manager(variant)
    mgr.replace(load_dictionary(data, variant))

    result = _summary(mgr)
    result['success'] = True
    return jsonify(result)


@app.route('/api/publish', methods=['POST'])
@serialized
def api_publish():
    """Publish a variant to the GitHub repository."""
    data = _payload()
    mgr = get_manager(_variant(data))

    try:
        result = get_publisher().publish(mgr.variant, mgr.dictionary, mgr.version,
                                         data.get('message') or None)
    except PublishError as e:
        print(f"   ⚠ Publish failed: {e}")
        return _error(e)

    mgr.mark_published(result.version)
    get_fetcher().invalidate(mgr.variant)

    response = result.to_dict()
    response['success'] = True
    return jsonify(response)


@app.route('/api/draft/discard', methods=['POST'])
@serialized
def api_draft_discard():
    """Drop local edits and reload the published dictionary."""
    data = _payload()
    mgr = get_manager(_variant(data), refresh=True)
    result = _summary(mgr)
    result['success'] = True
    return jsonify(result)


@app.route('/api/drafts')
@serialized
def api_drafts():
    """List local drafts."""
    return jsonify({'success': True, 'drafts': DictionaryManager.list_drafts()})


# =============================================================================
# ROUTES - AI SUGGESTIONS
# =============================================================================

@app.route('/api/suggest', methods=['POST'])
@serialized
def api_suggest():
    """Suggest new words for a category; add=true appends them directly."""
    data = _payload()
    mgr = get_manager(_variant(data))
    category = mgr.dictionary.require_category(data.get('category', ''))

    existing = []
    for words in mgr.dictionary.words.values():
        for word in words:
            existing.extend(word.text(lang) for lang in LANGUAGE_CODES if word.text(lang))

    try:
        suggestions = get_suggester().suggest(
            category,
            count=int(data.get('count', 10)),
            existing=existing,
            theme=data.get('theme', ''),
        )
    except (TypeError, ValueError):
        return _error('Count must be a number')
    except SuggestionError as e:
        return _error(e)

    # The dictionary may have changed while the model was answering
    current = existing_keys(mgr.dictionary)
    suggestions = [
        w for w in suggestions
        if not any(normalize_key(w.text(lang)) in current for lang in LANGUAGE_CODES)
    ]

    added = []
    if data.get('add'):
        added = [mgr.add_word(category.id, word) for word in suggestions]

    return jsonify({
        'success': True,
        'words': [w.to_dict() for w in suggestions],
        'added': added,
    })


# =============================================================================
# ROUTES - SESSION / STATUS
# =============================================================================

@app.route('/api/session', methods=['GET', 'POST'])
@serialized
def api_session():
    """Read or update the persisted editor session."""
    session = EditorSession.load() or EditorSession()

    if request.method == 'POST':
        try:
            session.update(**_payload())
        except (TypeError, ValueError) as e:
            return _error(e)
        session.save()

    return jsonify({'success': True, 'session': session.to_dict()})


@app.route('/api/status')
def api_status():
    """Configuration status of publishing and AI suggestions."""
    check = request.args.get('check') in ('1', 'true')
    publisher = get_publisher()

    return jsonify({
        'success': True,
        'version': VERSION,
        'dataDir': str(DATA_DIR),
        'github': publisher.check_access() if check else {
            'configured': publisher.is_configured,
            'repo': publisher.repo,
            'branch': publisher.branch,
        },
        'ai': {
            'configured': get_suggester().is_configured,
            'model': get_suggester().model,
        },
        'drafts': DictionaryManager.list_drafts(),
    })


# =============================================================================
# MAIN
# =============================================================================

def main():
    """Run the application."""
    print(f"""
╔══════════════════════════════════════════════════════════╗
║         GuessUs Dictionary Editor v{VERSION:<22}║
╠══════════════════════════════════════════════════════════╣
║  Data directory: {str(DATA_DIR)[:39]:<40}║
╚══════════════════════════════════════════════════════════╝
    """)

    print(f"🌐 Starting server at http://localhost:{EDITOR_PORT}")
    print("   Press Ctrl+C to stop\n")

    app.run(host=EDITOR_HOST, port=EDITOR_PORT, debug=False, threaded=True)


if __name__ == '__main__':
    main()
