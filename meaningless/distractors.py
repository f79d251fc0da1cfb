from __future__ import annotations

import random
import re
from dataclasses import dataclass
from typing import Literal

from meaningless.api.models import Difficulty, Word
from meaningless.catalog.registry import WordCatalog

DistractorSource = Literal["related_word", "fallback"]

# Share of significant tokens above which two definitions count as the same sense.
SIMILARITY_THRESHOLD = 0.3

_TOKEN_SPLIT = re.compile(r"\W+")


@dataclass(frozen=True, slots=True)
class Distractor:
    id: str
    definition: str
    for_word_types: frozenset[str]
    difficulty: Difficulty
    source: DistractorSource


@dataclass(frozen=True, slots=True)
class _FallbackEntry:
    id: str
    definition: str
    for_word_types: frozenset[str]


FALLBACK_POOL: tuple[_FallbackEntry, ...] = (
    _FallbackEntry("distractor_001", "To prepare food by heating it in an oven", frozenset({"noun", "verb"})),
    _FallbackEntry("distractor_002", "A small, round fruit with red or green skin", frozenset({"noun"})),
    _FallbackEntry("distractor_003", "A device used for measuring time", frozenset({"noun"})),
    _FallbackEntry("distractor_004", "A large, four-legged animal with a trunk", frozenset({"noun"})),
    _FallbackEntry("distractor_005", "To move quickly on foot", frozenset({"verb"})),
    _FallbackEntry("distractor_006", "A small, flying insect that produces honey", frozenset({"noun"})),
    _FallbackEntry("distractor_007", "A tall plant with a hard trunk and branches", frozenset({"noun"})),
    _FallbackEntry("distractor_008", "To speak in a loud voice", frozenset({"verb"})),
    _FallbackEntry("distractor_009", "Extremely cold to the touch", frozenset({"adjective"})),
    _FallbackEntry("distractor_010", "Having a bright green color", frozenset({"adjective"})),
    _FallbackEntry("distractor_011", "Full of energy and enthusiasm", frozenset({"adjective"})),
)


def _significant_tokens(definition: str) -> list[str]:
    return [t for t in _TOKEN_SPLIT.split(definition.lower()) if len(t) > 3]


def are_similar_definitions(a: str, b: str) -> bool:
    """True when two definitions share enough significant words to read as one sense.

    Significant words are lowercase tokens longer than three characters. The shared
    count is measured against the shorter token list.
    """

    words_a = _significant_tokens(a)
    words_b = _significant_tokens(b)

    shared = [w for w in words_a if w in words_b]
    if not shared:
        return False
    return len(shared) / min(len(words_a), len(words_b)) > SIMILARITY_THRESHOLD


def _related_candidates(*, word: Word, catalog: WordCatalog) -> list[Distractor]:
    categories = set(word.categories)
    out: list[Distractor] = []

    for other in catalog.words:
        if other.id == word.id or not categories.intersection(other.categories):
            continue
        for meaning in other.meanings:
            if any(are_similar_definitions(m.definition, meaning.definition) for m in word.meanings):
                continue
            out.append(
                Distractor(
                    id=f"distractor_{other.id}_{meaning.id}",
                    definition=meaning.definition,
                    for_word_types=frozenset({meaning.part_of_speech}),
                    difficulty=word.difficulty,
                    source="related_word",
                )
            )
    return out


def _fallback_candidates(*, word: Word) -> list[Distractor]:
    return [
        Distractor(
            id=e.id,
            definition=e.definition,
            for_word_types=e.for_word_types,
            difficulty=word.difficulty,
            source="fallback",
        )
        for e in FALLBACK_POOL
    ]


def get_distractors_for_word(
    *,
    word: Word,
    count: int,
    catalog: WordCatalog,
    rng: random.Random | None = None,
) -> list[Distractor]:
    """Return up to `count` wrong-but-plausible definitions for `word`.

    Real meanings of words sharing a category come first; the generic fallback pool
    fills the rest. Candidates must fit one of the word's parts of speech. If that
    still leaves the round short, fallback entries of any part of speech are used.
    """

    if count <= 0:
        return []

    rng = rng or random.Random()
    categories = set(word.categories)
    own_definitions = {m.definition for m in word.meanings}

    related = _related_candidates(word=word, catalog=catalog)
    fallback = _fallback_candidates(word=word)

    fitting_related = [d for d in related if d.for_word_types & categories]
    fitting_fallback = [d for d in fallback if d.for_word_types & categories]
    rng.shuffle(fitting_related)
    rng.shuffle(fitting_fallback)

    # Off-type fallbacks rank last and are only reached when a round would come up short.
    spare = [d for d in fallback if not d.for_word_types & categories]
    rng.shuffle(spare)

    ranked = fitting_related + fitting_fallback + spare

    selected: list[Distractor] = []
    seen = set(own_definitions)
    for d in ranked:
        if d.definition in seen:
            continue
        seen.add(d.definition)
        selected.append(d)
        if len(selected) == count:
            break
    return selected
