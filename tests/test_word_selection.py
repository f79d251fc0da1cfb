from __future__ import annotations

import random

import pytest

from meaningless.api.models import Difficulty
from meaningless.errors import NotFoundError, SelectionError
from meaningless.words import RecentWords, WordSelector, get_word_by_id, get_words_by_category, get_words_by_difficulty


@pytest.mark.parametrize("difficulty", list(Difficulty))
def test_selection_returns_n_distinct_words(catalog, difficulty: Difficulty) -> None:
    for n in range(1, len(catalog.words) + 1):
        selector = WordSelector(catalog.words, rng=random.Random(n))
        words = selector.select_words_for_game(difficulty, n)
        assert len(words) == n
        assert len({w.id for w in words}) == n


def test_selection_prefers_requested_difficulty(catalog) -> None:
    selector = WordSelector(catalog.words, rng=random.Random(5))
    words = selector.select_words_for_game(Difficulty.hard, 3)
    assert {w.difficulty for w in words} == {Difficulty.hard}


def test_selection_avoids_recent_words_until_exhausted(catalog) -> None:
    selector = WordSelector(catalog.words, rng=random.Random(9))
    easy_total = len(catalog.words.by_difficulty(Difficulty.easy))

    first = selector.select_words_for_game(Difficulty.easy, easy_total)
    second = selector.select_words_for_game(Difficulty.easy, 2)

    assert {w.difficulty for w in first} == {Difficulty.easy}
    # Every easy word is recent now, so the adjacent tier (medium) is used next.
    assert {w.difficulty for w in second} == {Difficulty.medium}


def test_selectors_do_not_share_recency(catalog) -> None:
    a = WordSelector(catalog.words, rng=random.Random(1))
    b = WordSelector(catalog.words, rng=random.Random(1))
    a.select_words_for_game(Difficulty.easy, 2)

    assert len(a.recent) == 2
    assert len(b.recent) == 0


def test_selection_rejects_unknown_difficulty(catalog) -> None:
    selector = WordSelector(catalog.words)
    with pytest.raises(SelectionError):
        selector.select_words_for_game("impossible", 2)


def test_recent_words_is_a_bounded_fifo() -> None:
    recent = RecentWords(capacity=3)
    for word_id in ["a", "b", "c", "a", "d"]:
        recent.add(word_id)

    assert recent.ids() == ["b", "c", "d"]
    assert "a" not in recent
    assert len(recent) == 3


def test_lookups(catalog) -> None:
    assert get_word_by_id(catalog=catalog.words, word_id="word_001").text == "bank"
    with pytest.raises(NotFoundError):
        get_word_by_id(catalog=catalog.words, word_id="missing")

    assert {w.text for w in get_words_by_difficulty(catalog=catalog.words, difficulty="easy")} == {"bank", "light", "run"}
    assert {w.text for w in get_words_by_category(catalog=catalog.words, category="contronym")} >= {"sanction", "cleave"}
