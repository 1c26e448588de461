import pytest

from cspseudo.suggest import (
    MAX_OPTIONS, WORDS, Suggestion, apply_suggestion, levenshtein, query_at, rank, score, suggest,
)


def test_levenshtein():
    assert levenshtein('kitten', 'sitting') == 3
    assert levenshtein('', 'abc') == 3
    assert levenshtein('same', 'same') == 0


def test_exact_match_scores_highest():
    assert score('REPEAT', 'repeat') == 1.5
    assert score('neq', 'n_e_q') == 1.5


def test_empty_side_scores_zero():
    assert score('', 'abc') == 0
    assert score('abc', '__') == 0


def test_prefix_bonus():
    # distance 3 over length 6, plus the prefix bonus
    assert score('REPEAT', 'rep') == pytest.approx(1.0)
    assert score('RETURN', 'rep') == pytest.approx(1 - 4 / 6)


def test_rank_is_descending_and_stable():
    ranked = rank([('bb', 'bb'), ('ab', 'ab'), ('cb', 'cb'), ('a', 'a')], 'a')
    assert [s.key for s in ranked] == ['a', 'ab', 'bb', 'cb']
    assert ranked[0] == Suggestion('a', 'a', 1.5)


def test_rank_limit():
    candidates = [(f'w{i}', f'w{i}') for i in range(50)]
    assert len(rank(candidates, 'w')) == MAX_OPTIONS
    assert len(rank(candidates, 'w', limit=3)) == 3


def test_query_is_trailing_word_before_caret():
    source = 'x ← LENG'
    assert query_at(source, len(source)) == 'leng'
    assert query_at(source, 3) == ''
    assert query_at('total_1', 7) == 'total_1'


def test_suggest_keywords():
    source = 'REP'
    best = suggest(source, len(source))[0]
    assert best.key == 'REPEAT'


def test_suggest_operator_alias():
    source = 'IF (a ne'
    best = suggest(source, len(source))[0]
    assert (best.key, best.display) == ('neq', '≠')


def test_suggest_words_from_source():
    source = 'counter ← 0\nDISPLAY(cou'
    keys = [s.key for s in suggest(source, len(source))]
    assert keys[0] == 'counter'
    # the word being typed is not offered back
    assert 'cou' not in keys


def test_suggest_nothing_without_a_word():
    assert suggest('x ← ', 4) == []


def test_words_table_lists_every_keyword_once():
    keys = [key for key, _ in WORDS]
    assert len(keys) == len(set(keys))
    assert 'PROCEDURE' in keys and 'gteq' in keys


def test_apply_suggestion():
    source = 'IF (a neq b)'
    text, caret = apply_suggestion(source, 9, Suggestion('neq', '≠', 1.5))
    assert text == 'IF (a ≠  b)'
    assert caret == 8
