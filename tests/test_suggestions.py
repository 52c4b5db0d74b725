from corpus import COMMON_POKEMON_NAMES, load_corpus
from suggestions import score_candidates, suggest


def test_exact_match_short_circuits():
    assert suggest('Pikachu', ['pikachu', 'raichu'], 5) == ['pikachu']


def test_exact_match_ignores_case_and_whitespace():
    assert suggest('  BULBASAUR ', ['ivysaur', 'Bulbasaur'], 5) == ['Bulbasaur']


def test_substring_matches_score_maximal():
    out = suggest('char', ['charizard', 'charmander'], 5)
    assert out == ['charizard', 'charmander']


def test_substring_either_direction():
    # corpus entry contained in the query
    assert suggest('mewtwoo', ['mew', 'abra'], 5) == ['mew']


def test_ranking_by_score_then_distance():
    scored = score_candidates('pikachoo', ['raichu', 'pikachu', 'pichu'])
    names = [s.name for s in scored]
    assert names[0] == 'pikachu'
    scores = [s.score for s in scored]
    assert scores == sorted(scores, reverse=True)


def test_below_threshold_excluded():
    assert suggest('zzzzzzzz', ['pikachu', 'raichu', 'eevee'], 5) == []


def test_limit_and_original_casing():
    corpus = ['Charmander', 'Charmeleon', 'Charizard']
    out = suggest('char', corpus, 2)
    assert out == ['Charmander', 'Charmeleon']


def test_duplicates_are_not_removed():
    assert suggest('char', ['charizard', 'charizard'], 5) == ['charizard', 'charizard']


def test_empty_and_malformed_input():
    assert suggest('', ['pikachu'], 5) == []
    assert suggest('   ', ['pikachu'], 5) == []
    assert suggest('pikachu', [], 5) == []
    assert suggest(None, ['pikachu'], 5) == []
    assert suggest('pikachu', ['pikachu'], 0) == []
    assert suggest('pikachu', [None, 42, 'pikachu'], 5) == ['pikachu']


def test_typo_against_default_corpus():
    out = suggest('bulbasuar', load_corpus(), 5)
    assert out and out[0] == 'bulbasaur'


def test_load_corpus_deduplicates():
    corpus = load_corpus(['Mew', 'mew', ' ', 'Abra', None])
    assert corpus == ('Mew', 'Abra')
    assert len(load_corpus()) == len(set(COMMON_POKEMON_NAMES))


def test_blank_corpus_entries_are_skipped():
    assert suggest('pika', ['', '   ', 'pikachu'], 5) == ['pikachu']
    assert score_candidates('zzz', ['']) == []
