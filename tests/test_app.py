import io
import json
import threading
from unittest.mock import MagicMock, patch

import pytest

from guessus_editor import app as app_module
from guessus_editor.dictionary import VersionInfo, Word, DictionaryManager
from guessus_editor.fetchers import PublishResult, PublishError, SuggestionError


class FakeFetcher:
    """Serves a fixed dictionary instead of downloading it."""

    def __init__(self, dictionary, version):
        self.dictionary = dictionary
        self.version = version
        self.calls = []
        self.invalidated = []

    def fetch(self, variant, use_cache=True):
        self.calls.append((variant, use_cache))
        return self.dictionary.copy(), VersionInfo(self.version.version, self.version.updated_at)

    def invalidate(self, variant):
        self.invalidated.append(variant)
        return 2


@pytest.fixture
def fetcher(dictionary):
    return FakeFetcher(dictionary, VersionInfo('1.0.3', '2026-01-01'))


@pytest.fixture
def client(fetcher):
    app_module.reset_state()
    app_module._fetcher = fetcher
    app_module.app.config['TESTING'] = True
    with app_module.app.test_client() as c:
        yield c
    app_module.reset_state()


def test_index_page(client):
    response = client.get('/')
    assert response.status_code == 200
    assert 'GuessUs Dictionary Editor' in response.get_data(as_text=True)


def test_load_dictionary(client, fetcher):
    data = client.get('/api/dictionary?variant=adult').get_json()

    assert data['success']
    assert data['version'] == {'version': '1.0.3', 'updatedAt': '2026-01-01'}
    assert data['hasChanges'] is False
    assert data['stats']['rows'] == 5
    assert [c['id'] for c in data['dictionary']['categories']] == ['party', 'dirty', 'extreme']
    assert fetcher.calls == [('adult', True)]

    client.get('/api/dictionary?variant=adult')
    assert len(fetcher.calls) == 1


def test_load_error_is_reported(client):
    from guessus_editor.fetchers import DictionaryLoadError

    app_module._fetcher = MagicMock()
    app_module._fetcher.fetch.side_effect = DictionaryLoadError('Failed to load words.json (HTTP 500)')

    response = client.get('/api/dictionary?variant=family')
    assert response.status_code == 502
    assert response.get_json() == {'success': False, 'error': 'Failed to load words.json (HTTP 500)'}


def test_unknown_variant(client):
    data = client.get('/api/dictionary?variant=kids').get_json()
    assert data['success'] is False
    assert 'kids' in data['error']


def test_words_with_filters_and_duplicate_flags(client):
    client.post('/api/words/add', json={
        'variant': 'adult', 'category': 'party',
        'word': {'ru': 'Пиво', 'en': 'Lager', 'intensity': 3},
    })

    data = client.get('/api/words?variant=adult&category=party&language=ru&q=пив').get_json()
    assert [w['index'] for w in data['words']] == [0, 3]
    assert all(w['duplicate'] for w in data['words'])
    assert data['total'] == 4

    data = client.get('/api/words?variant=adult&category=party&language=ru&min=2&max=3').get_json()
    assert [w['index'] for w in data['words']] == [3]

    data = client.get('/api/words?variant=adult&category=party&language=en&cross=0').get_json()
    assert data['duplicates'] == 0

    data = client.get('/api/words?variant=adult&category=party&language=en').get_json()
    assert data['duplicates'] == 1

    data = client.get('/api/words?variant=adult&category=party&min=x').get_json()
    assert data['success'] is False


def test_word_mutations(client):
    response = client.post('/api/words/add', json={'variant': 'adult', 'category': 'party', 'word': {}})
    assert response.get_json()['success'] is False

    data = client.post('/api/words/update', json={
        'variant': 'adult', 'category': 'party', 'index': 1, 'language': 'en', 'value': 'Dance',
    }).get_json()
    assert data['word']['en'] == 'Dance'
    assert data['hasChanges'] is True

    data = client.post('/api/words/update', json={
        'variant': 'adult', 'category': 'party', 'index': 1, 'fields': {'intensity': 4},
    }).get_json()
    assert data['word']['intensity'] == 4

    data = client.post('/api/words/delete', json={
        'variant': 'adult', 'category': 'party', 'indices': [0, 2],
    }).get_json()
    assert data['deleted'] == 2

    data = client.post('/api/words/delete', json={
        'variant': 'adult', 'category': 'party', 'index': 0,
    }).get_json()
    assert data['deleted'] == 1

    data = client.post('/api/words/delete', json={
        'variant': 'adult', 'category': 'party', 'index': 0,
    }).get_json()
    assert data['success'] is False


def test_bulk_move(client):
    data = client.post('/api/words/move', json={
        'variant': 'adult', 'source': 'party', 'target': 'extreme', 'indices': [0, 1],
    }).get_json()
    assert data['moved'] == 2

    data = client.get('/api/words?variant=adult&category=extreme&language=en').get_json()
    assert [w['en'] for w in data['words']] == ['Beer', 'Dancing']


def test_category_routes(client):
    data = client.post('/api/categories/add', json={
        'variant': 'adult', 'category': {'id': 'drinks', 'name': 'Drinks', 'emoji': '🍹'},
    }).get_json()
    assert data['category']['id'] == 'drinks'

    data = client.post('/api/categories/update', json={
        'variant': 'adult', 'id': 'drinks', 'fields': {'name': 'Booze'},
    }).get_json()
    assert data['category']['name'] == 'Booze'

    data = client.post('/api/categories/reorder', json={
        'variant': 'adult', 'id': 'drinks', 'position': 0,
    }).get_json()
    assert data['categories'][0] == 'drinks'

    data = client.post('/api/categories/delete', json={
        'variant': 'adult', 'id': 'party', 'moveTo': 'drinks',
    }).get_json()
    assert data['moved'] == 3


def test_duplicates_route(client):
    data = client.get('/api/duplicates?variant=adult').get_json()
    assert data['count'] == 3
    assert data['byLanguage'] == {'ru': 1, 'en': 1, 'es': 0, 'ua': 1}

    data = client.get('/api/duplicates?variant=adult&language=en&cross=1').get_json()
    assert data['count'] == 1
    assert data['groups'][0]['locations'][0] == {'category': 'party', 'index': 0, 'text': 'Beer'}

    data = client.get('/api/duplicates?variant=adult&language=de').get_json()
    assert data['success'] is False


def test_search_route(client):
    data = client.get('/api/search?variant=adult&q=beer&language=en').get_json()
    assert [(r['category'], r['index']) for r in data['results']] == [('party', 0), ('dirty', 1)]


def test_download_legacy_and_rich(client, legacy_data):
    response = client.get('/download/adult')
    assert response.status_code == 200
    assert 'words-adult.json' in response.headers['Content-Disposition']
    assert json.loads(response.get_data(as_text=True)) == legacy_data

    response = client.get('/download/adult?format=rich')
    assert 'words-adult.rich.json' in response.headers['Content-Disposition']
    assert json.loads(response.get_data(as_text=True))['format'] == 'rich'

    assert client.get('/download/adult?format=csv').get_json()['success'] is False


def test_import_json_and_upload(client):
    data = client.post('/api/import?variant=adult', json={'en': {'party': ['One', 'Two']}}).get_json()
    assert data['success']
    assert data['hasChanges'] is True
    assert data['stats']['rows'] == 2

    upload = {'file': (io.BytesIO(b'{"ru": {"dirty": ["A"]}}'), 'words.json')}
    data = client.post('/api/import?variant=adult', data=upload,
                       content_type='multipart/form-data').get_json()
    assert data['stats']['rows'] == 1

    upload = {'file': (io.BytesIO(b'nope'), 'words.json')}
    data = client.post('/api/import?variant=adult', data=upload,
                       content_type='multipart/form-data').get_json()
    assert data['success'] is False

    data = client.post('/api/import?variant=adult', json=[1, 2]).get_json()
    assert data['success'] is False


def test_publish(client, fetcher):
    publisher = MagicMock()
    publisher.publish.return_value = PublishResult('adult', VersionInfo('1.0.4', '2026-10-18'),
                                                   [{'path': 'words-adult.json', 'sha': 'c1', 'url': ''}])
    app_module._publisher = publisher

    client.post('/api/words/add', json={'variant': 'adult', 'category': 'party', 'word': {'en': 'Shots'}})
    data = client.post('/api/publish', json={'variant': 'adult', 'message': 'Add shots'}).get_json()

    assert data['success']
    assert data['version']['version'] == '1.0.4'
    args = publisher.publish.call_args.args
    assert args[0] == 'adult'
    assert args[2].version == '1.0.3'
    assert args[3] == 'Add shots'
    assert fetcher.invalidated == ['adult']

    summary = client.get('/api/stats?variant=adult').get_json()
    assert summary['hasChanges'] is False
    assert summary['version']['version'] == '1.0.4'


def test_publish_failure_keeps_changes(client):
    publisher = MagicMock()
    publisher.publish.side_effect = PublishError('GitHub token is not configured (set GITHUB_TOKEN)')
    app_module._publisher = publisher

    client.post('/api/words/add', json={'variant': 'adult', 'category': 'party', 'word': {'en': 'Shots'}})
    data = client.post('/api/publish', json={'variant': 'adult'}).get_json()

    assert data == {'success': False, 'error': 'GitHub token is not configured (set GITHUB_TOKEN)'}
    assert client.get('/api/stats?variant=adult').get_json()['hasChanges'] is True


def test_draft_survives_restart_and_discard(client, fetcher):
    client.post('/api/words/add', json={'variant': 'adult', 'category': 'party', 'word': {'en': 'Shots'}})

    app_module._managers.clear()
    data = client.get('/api/dictionary?variant=adult').get_json()
    assert data['hasChanges'] is True
    assert data['stats']['rows'] == 6
    assert len(fetcher.calls) == 1

    data = client.post('/api/draft/discard', json={'variant': 'adult'}).get_json()
    assert data['hasChanges'] is False
    assert data['stats']['rows'] == 5
    assert fetcher.calls[-1] == ('adult', False)
    assert not DictionaryManager.draft_path_for('adult').exists()

    drafts = client.get('/api/drafts').get_json()['drafts']
    assert drafts == []


def test_suggest(client):
    suggester = MagicMock()
    suggester.suggest.return_value = [
        Word(ru='Текила', en='Tequila', es='Tequila', ua='Текіла', intensity=3),
        Word(ru='Пиво', en='Ale', es='Ale', ua='Ель', intensity=2),
    ]
    app_module._suggester = suggester

    data = client.post('/api/suggest', json={
        'variant': 'adult', 'category': 'party', 'count': 2, 'add': True,
    }).get_json()

    assert data['success']
    assert [w['en'] for w in data['words']] == ['Tequila']
    assert data['added'] == [3]
    kwargs = suggester.suggest.call_args.kwargs
    assert kwargs['count'] == 2
    assert 'Beer' in kwargs['existing']


def test_suggest_errors(client):
    suggester = MagicMock()
    suggester.suggest.side_effect = SuggestionError('OpenAI API key is not configured (set OPENAI_API_KEY)')
    app_module._suggester = suggester

    data = client.post('/api/suggest', json={'variant': 'adult', 'category': 'party'}).get_json()
    assert data['success'] is False

    data = client.post('/api/suggest', json={'variant': 'adult', 'category': 'nope'}).get_json()
    assert 'nope' in data['error']


def test_session_route(client):
    data = client.get('/api/session').get_json()
    assert data['session']['variant'] == 'adult'

    data = client.post('/api/session', json={'variant': 'family', 'language': 'es'}).get_json()
    assert data['session']['category'] == 'movies'
    assert data['session']['language'] == 'es'

    assert client.get('/api/session').get_json()['session']['variant'] == 'family'

    data = client.post('/api/session', json={'language': 'fr'}).get_json()
    assert data['success'] is False


def test_status_route(client):
    with patch.object(app_module, '_publisher', None), patch.object(app_module, '_suggester', None):
        data = client.get('/api/status').get_json()
    assert data['success']
    assert data['github']['configured'] is False
    assert data['ai']['configured'] is False


def test_mutations_wait_for_the_editor_lock(client):
    client.get('/api/dictionary?variant=adult')
    results = []

    def add_word():
        response = app_module.app.test_client().post('/api/words/add', json={
            'variant': 'adult', 'category': 'party', 'word': {'en': 'Shots'},
        })
        results.append(response.get_json())

    with app_module._lock:
        worker = threading.Thread(target=add_word)
        worker.start()
        worker.join(timeout=0.3)
        assert worker.is_alive()
        assert len(app_module._managers['adult'].words('party')) == 3

    worker.join(timeout=5)
    assert results == [{'success': True, 'index': 3, 'hasChanges': True}]


def test_import_malformed_rich_document(client):
    response = client.post('/api/import?variant=adult', json={'categories': ['party'], 'words': {}})
    assert response.status_code == 200
    assert response.get_json()['success'] is False

    data = client.post('/api/import?variant=adult', json={
        'categories': [{'id': 'party'}], 'words': {'party': 3},
    }).get_json()
    assert data['success'] is False
    assert client.get('/api/stats?variant=adult').get_json()['stats']['rows'] == 5


def test_update_with_non_object_fields(client):
    data = client.post('/api/words/update', json={
        'variant': 'adult', 'category': 'party', 'index': 1, 'fields': ['en', 'Dance'],
    }).get_json()
    assert data['success'] is False


def test_delete_category_into_unknown_target(client):
    data = client.post('/api/categories/delete', json={
        'variant': 'adult', 'id': 'party', 'moveTo': 'nope',
    }).get_json()
    assert data['success'] is False

    words = client.get('/api/words?variant=adult&category=party').get_json()
    assert words['total'] == 3
