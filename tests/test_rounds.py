from __future__ import annotations

import random

from meaningless.api.models import Meaning
from meaningless.rounds import OPTION_COUNT, RoundBuilder


def test_every_word_builds_a_well_formed_round(catalog) -> None:
    builder = RoundBuilder(catalog.words, rng=random.Random(11))

    for word in catalog.words.words:
        rnd = builder.build_round(word, round_number=1)
        own = {m.definition for m in word.meanings}

        assert len(rnd.options) == OPTION_COUNT
        assert [o.index for o in rnd.options] == list(range(OPTION_COUNT))
        assert all(o.is_correct == (o.text in own) for o in rnd.options)

        marked = [o for o in rnd.options if o.is_contradiction]
        assert len(marked) == 1
        assert marked[0].text == rnd.correct_meaning.definition

        assert rnd.selected_option is None
        assert rnd.completed is False


def test_contradiction_meaning_has_sentences(catalog) -> None:
    builder = RoundBuilder(catalog.words, rng=random.Random(3))
    bank = catalog.words.get("word_001")

    for _ in range(10):
        options = builder.generate_meaning_options(bank)
        meaning = builder.select_contradiction_meaning(bank, options)
        assert meaning.contradiction_sentences
        assert meaning.definition in {o.text for o in options if o.is_correct}


def test_contradiction_falls_back_to_first_meaning(catalog) -> None:
    bank = catalog.words.get("word_001")
    bare = bank.model_copy(
        update={"meanings": tuple(m.model_copy(update={"contradiction_sentences": ()}) for m in bank.meanings)}
    )
    builder = RoundBuilder(catalog.words, rng=random.Random(0))

    meaning = builder.select_contradiction_meaning(bare, builder.generate_meaning_options(bare))
    assert meaning == bare.meanings[0]


def test_same_seed_same_round(catalog) -> None:
    word = catalog.words.get("word_004")
    a = RoundBuilder(catalog.words, rng=random.Random(42)).build_round(word, round_number=3)
    b = RoundBuilder(catalog.words, rng=random.Random(42)).build_round(word, round_number=3)

    assert a == b
    assert a.round_number == 3


def test_contradiction_beyond_shown_meanings_is_still_an_option(catalog) -> None:
    bank = catalog.words.get("word_001")
    bare = [m.model_copy(update={"contradiction_sentences": ()}) for m in bank.meanings]
    extra = Meaning(
        id="meaning_bank_extra",
        definition="To store something for later use",
        part_of_speech="verb",
        contradiction_sentences=("They bank on the weather holding.",),
    )
    word = bank.model_copy(update={"meanings": (*bare, extra)})

    for seed in range(5):
        rnd = RoundBuilder(catalog.words, rng=random.Random(seed)).build_round(word, round_number=1)

        assert rnd.correct_meaning == extra
        assert len(rnd.options) == OPTION_COUNT
        marked = [o for o in rnd.options if o.is_contradiction]
        assert len(marked) == 1
        assert marked[0].text == extra.definition
        assert marked[0].is_correct is True
