import pytest

from guessus_editor.dictionary import (
    Dictionary, DictionaryError, FORMAT_LEGACY, FORMAT_RICH,
    detect_format, legacy_to_dictionary, dictionary_to_legacy,
    load_dictionary, dump_dictionary,
)


def test_detect_format(legacy_data, dictionary):
    assert detect_format(legacy_data) == FORMAT_LEGACY
    assert detect_format(dictionary.to_dict()) == FORMAT_RICH


@pytest.mark.parametrize('data', [[], {}, {'de': {'party': []}}, {'ru': ['a']}])
def test_detect_format_rejects_unknown_shapes(data):
    with pytest.raises(DictionaryError):
        detect_format(data)


def test_legacy_rows_are_zipped_by_position(dictionary):
    party = dictionary.words['party']
    assert [w.en for w in party] == ['Beer', 'Dancing', 'Karaoke']
    assert party[1].ru == 'Танцы'
    assert party[1].es == 'Baile'
    assert party[1].ua == 'Танці'


def test_shorter_language_lists_are_padded(dictionary):
    dirty = dictionary.words['dirty']
    assert len(dirty) == 2
    assert dirty[1].en == 'Beer'
    assert dirty[1].es == ''
    assert dirty[1].missing_languages() == ['es']


def test_default_categories_and_intensity(dictionary):
    assert dictionary.category_ids() == ['party', 'dirty', 'extreme']
    assert dictionary.get_category('dirty').emoji == '🔞'
    assert all(w.intensity == 4 for w in dictionary.words['dirty'])
    assert all(w.intensity == 1 for w in dictionary.words['party'])


def test_unknown_category_gets_placeholder(legacy_data):
    legacy_data['en']['night_life'] = ['Club']
    dictionary = legacy_to_dictionary(legacy_data, 'adult')

    assert dictionary.category_ids()[-1] == 'night_life'
    category = dictionary.get_category('night_life')
    assert category.name == 'Night Life'
    assert (category.intensity_min, category.intensity_max) == (1, 10)
    assert dictionary.words['night_life'][0].en == 'Club'
    assert dictionary.words['night_life'][0].ru == ''


def test_family_variant_uses_family_categories():
    dictionary = legacy_to_dictionary({'en': {'food': ['Pizza']}}, 'family')
    assert dictionary.category_ids()[:2] == ['movies', 'food']
    assert dictionary.words['food'][0].en == 'Pizza'
    assert dictionary.words['movies'] == []


def test_legacy_round_trip_without_trailing_blanks(legacy_data, dictionary):
    assert dictionary_to_legacy(dictionary) == legacy_data


def test_interior_blanks_keep_alignment(dictionary):
    dictionary.words['party'][1].es = ''
    legacy = dictionary_to_legacy(dictionary)
    assert legacy['es']['party'] == ['Cerveza', '', 'Karaoke']


def test_rich_round_trip(dictionary):
    restored = Dictionary.from_dict(dictionary.to_dict())
    assert restored == dictionary


def test_load_and_dump_either_shape(legacy_data, dictionary):
    from_rich = load_dictionary(dictionary.to_dict(), 'adult')
    from_legacy = load_dictionary(legacy_data, 'adult')
    assert from_rich == from_legacy

    assert dump_dictionary(from_rich, FORMAT_LEGACY) == legacy_data
    assert dump_dictionary(from_rich, FORMAT_RICH)['format'] == 'rich'
    with pytest.raises(DictionaryError):
        dump_dictionary(from_rich, 'xml')


def test_rich_document_with_orphan_word_list():
    data = {
        'categories': [{'id': 'party', 'name': 'Party', 'emoji': '🎉', 'intensityMin': 1, 'intensityMax': 4}],
        'words': {
            'party': [{'en': ' Beer ', 'intensity': 2}],
            'misc': [{'en': 'Thing', 'intensity': 'high'}],
        },
    }
    dictionary = Dictionary.from_dict(data)

    assert dictionary.category_ids() == ['party', 'misc']
    assert dictionary.words['party'][0].en == 'Beer'
    assert dictionary.words['party'][0].intensity == 2
    assert dictionary.words['misc'][0].intensity == 1


def test_rich_document_rejects_duplicate_category_ids():
    data = {'categories': [{'id': 'a'}, {'id': 'a'}], 'words': {}}
    with pytest.raises(DictionaryError):
        Dictionary.from_dict(data)


def test_trailing_blanks_are_not_kept(legacy_data):
    legacy_data['es']['dirty'] = ['Beso', '', '']
    dictionary = legacy_to_dictionary(legacy_data, 'adult')

    legacy = dictionary_to_legacy(dictionary)
    assert legacy['es']['dirty'] == ['Beso']
    assert legacy['ru']['dirty'] == ['Поцелуй', 'пиво']


@pytest.mark.parametrize('data', [
    {'categories': ['party'], 'words': {}},
    {'categories': [{'id': 'party'}, 7], 'words': {}},
    {'categories': {'id': 'party'}, 'words': {}},
    {'categories': [{'id': 'party'}], 'words': {'party': 3}},
    {'categories': [{'id': 'party'}], 'words': ['party']},
])
def test_malformed_rich_documents_are_rejected(data):
    with pytest.raises(DictionaryError):
        load_dictionary(data, 'adult')
