from __future__ import annotations

import logging
import random
from collections import deque
from collections.abc import Iterable, Iterator

from meaningless.api.models import Difficulty, Word
from meaningless.catalog.registry import WordCatalog
from meaningless.errors import NotFoundError, SelectionError

logger = logging.getLogger(__name__)

RECENT_WORDS_CAPACITY = 50

# Where to look when the requested difficulty runs out of unused words.
ADJACENT_DIFFICULTIES: dict[Difficulty, tuple[Difficulty, ...]] = {
    Difficulty.easy: (Difficulty.medium,),
    Difficulty.medium: (Difficulty.easy, Difficulty.hard),
    Difficulty.hard: (Difficulty.medium,),
}


class RecentWords:
    """Bounded FIFO of recently used word ids.

    An ordered deque keeps eviction order, a set answers membership. Re-adding an id
    that is already tracked does not refresh its position.
    """

    def __init__(self, ids: Iterable[str] = (), *, capacity: int = RECENT_WORDS_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self._order: deque[str] = deque()
        self._members: set[str] = set()
        for word_id in ids:
            self.add(word_id)

    def add(self, word_id: str) -> None:
        if word_id in self._members:
            return
        self._order.append(word_id)
        self._members.add(word_id)
        while len(self._order) > self.capacity:
            self._members.discard(self._order.popleft())

    def ids(self) -> list[str]:
        """Oldest first."""
        return list(self._order)

    def __contains__(self, item: object) -> bool:
        return item in self._members

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[str]:
        return iter(self._order)


class WordSelector:
    """Picks the words for a game, steering away from recently played ones."""

    def __init__(
        self,
        catalog: WordCatalog,
        *,
        recent: RecentWords | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.catalog = catalog
        self.recent = recent if recent is not None else RecentWords()
        self.rng = rng or random.Random()

    def _tiers(self, difficulty: Difficulty) -> list[list[Word]]:
        catalog = self.catalog
        recent = self.recent

        exact = [w for w in catalog.by_difficulty(difficulty) if w.id not in recent]
        adjacent = [
            w for adj in ADJACENT_DIFFICULTIES[difficulty] for w in catalog.by_difficulty(adj) if w.id not in recent
        ]

        recent_words = [w for w in (catalog.get(i) for i in recent) if w is not None]
        recent_same = [w for w in recent_words if w.difficulty == difficulty]
        recent_other = [w for w in recent_words if w.difficulty != difficulty]

        # Anything else (e.g. hard words for an easy game) as a last resort.
        rest = list(catalog.words)

        return [exact, adjacent, recent_same, recent_other, rest]

    def _pick(self, difficulty: Difficulty, count: int) -> list[Word]:
        chosen: list[Word] = []
        seen: set[str] = set()

        for tier in self._tiers(difficulty):
            if len(chosen) >= count:
                break
            pool = [w for w in tier if w.id not in seen]
            self.rng.shuffle(pool)
            for w in pool[: count - len(chosen)]:
                chosen.append(w)
                seen.add(w.id)

        self.rng.shuffle(chosen)
        return chosen

    def select_words_for_game(self, difficulty: Difficulty | str, count: int) -> list[Word]:
        """Return `count` distinct words, preferring `difficulty` and unused words.

        Fewer than `count` words are returned only when the whole catalog is smaller
        than `count`.
        """

        if count <= 0:
            return []

        try:
            chosen = self._pick(Difficulty(difficulty), count)
        except (KeyError, TypeError, ValueError) as e:
            raise SelectionError("Failed to select words for the game") from e

        for w in chosen:
            self.recent.add(w.id)

        if len(chosen) < count:
            logger.warning("Catalog only has %d words; %d requested", len(chosen), count)
        return chosen


def get_word_by_id(*, catalog: WordCatalog, word_id: str) -> Word:
    word = catalog.get(word_id)
    if word is None:
        raise NotFoundError(f"Word with ID {word_id} not found")
    return word


def get_words_by_difficulty(*, catalog: WordCatalog, difficulty: Difficulty | str) -> tuple[Word, ...]:
    return catalog.by_difficulty(difficulty)


def get_words_by_category(*, catalog: WordCatalog, category: str) -> tuple[Word, ...]:
    return catalog.by_category(category)
