from __future__ import annotations

import random

from meaningless.api.models import Meaning, Option, Round, Word
from meaningless.catalog.registry import WordCatalog
from meaningless.distractors import get_distractors_for_word

OPTION_COUNT = 4
MAX_CORRECT_OPTIONS = 3


class RoundBuilder:
    """Turns a word into a playable round: shuffled options plus a contradiction meaning."""

    def __init__(self, catalog: WordCatalog, *, rng: random.Random | None = None) -> None:
        self.catalog = catalog
        self.rng = rng or random.Random()

    def generate_meaning_options(self, word: Word) -> list[Option]:
        """Up to three real meanings plus distractors, shuffled.

        `index` always equals the option's position; the UI submits selections by index.
        """

        entries: list[tuple[str, bool]] = [(m.definition, True) for m in word.meanings[:MAX_CORRECT_OPTIONS]]

        needed = OPTION_COUNT - len(entries)
        if needed > 0:
            distractors = get_distractors_for_word(word=word, count=needed, catalog=self.catalog, rng=self.rng)
            entries.extend((d.definition, False) for d in distractors)

        self.rng.shuffle(entries)
        return [Option(index=i, text=text, is_correct=is_correct) for i, (text, is_correct) in enumerate(entries)]

    def select_contradiction_meaning(self, word: Word, options: list[Option]) -> Meaning:
        correct_texts = {o.text for o in options if o.is_correct}

        candidates = [m for m in word.meanings if m.contradiction_sentences and m.definition in correct_texts]
        if not candidates:
            candidates = [m for m in word.meanings if m.contradiction_sentences]
        if not candidates:
            # No sentences anywhere; the contradiction step synthesizes one later.
            return word.meanings[0]

        return self.rng.choice(candidates)

    @staticmethod
    def _show_meaning(options: list[Option], meaning: Meaning) -> list[Option]:
        """Make sure `meaning` is one of the options.

        A meaning beyond the first three can be picked as the contradiction; it then
        takes the place of the first real meaning shown.
        """

        if any(o.text == meaning.definition for o in options):
            return options
        slot = next(i for i, o in enumerate(options) if o.is_correct)
        return [o.model_copy(update={"text": meaning.definition}) if i == slot else o for i, o in enumerate(options)]

    def build_round(self, word: Word, *, round_number: int) -> Round:
        options = self.generate_meaning_options(word)
        meaning = self.select_contradiction_meaning(word, options)
        options = self._show_meaning(options, meaning)

        marked = tuple(o.model_copy(update={"is_contradiction": o.text == meaning.definition}) for o in options)
        return Round(round_number=round_number, word=word, correct_meaning=meaning, options=marked)
