from __future__ import annotations

import random
from collections.abc import Generator
from datetime import UTC, datetime

import fakeredis
import pytest
from fastapi.testclient import TestClient

from meaningless.api.models import Difficulty, GameSession, GameSettings, Meaning, Option, Round, Word
from meaningless.catalog.registry import Catalog
from meaningless.catalog.singleton import get_catalog, init_catalog, reset_catalog_for_tests


@pytest.fixture(scope="session", autouse=True)
def _init_catalog_for_tests() -> None:
    """Load the packaged word catalog once for the whole run."""

    reset_catalog_for_tests()
    init_catalog()


@pytest.fixture()
def catalog() -> Catalog:
    return get_catalog()


@pytest.fixture()
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture()
def client_and_redis() -> Generator[tuple[TestClient, fakeredis.FakeRedis], None, None]:
    from meaningless.api.deps import get_redis
    from meaningless.main import app

    r = fakeredis.FakeRedis(decode_responses=True)

    def _override() -> Generator[fakeredis.FakeRedis, None, None]:
        yield r

    app.dependency_overrides[get_redis] = _override
    with TestClient(app) as c:
        yield c, r
    app.dependency_overrides.clear()


def _make_round(round_number: int, *, word_text: str = "bank", correct_first: bool = True) -> Round:
    """A hand-built round: option 0 is a real meaning iff `correct_first`."""

    river = Meaning(
        id=f"m{round_number}_river",
        definition="The land alongside a river",
        part_of_speech="noun",
        contradiction_sentences=("The boat drifted toward the bank after the storm.",),
    )
    money = Meaning(
        id=f"m{round_number}_money",
        definition="A place that keeps money",
        part_of_speech="noun",
    )
    word = Word(
        id=f"w{round_number}",
        text=word_text,
        difficulty=Difficulty.easy,
        categories=("noun", "homonym"),
        meanings=(river, money),
    )
    texts = [
        (river.definition, True),
        (money.definition, True),
        ("A small domesticated carnivorous mammal", False),
        ("To move swiftly on foot", False),
    ]
    if not correct_first:
        texts = texts[2:] + texts[:2]
    options = tuple(
        Option(index=i, text=t, is_correct=ok, is_contradiction=t == river.definition) for i, (t, ok) in enumerate(texts)
    )
    return Round(round_number=round_number, word=word, correct_meaning=river, options=options)


def _make_session(
    *,
    rounds: int = 2,
    difficulty: Difficulty = Difficulty.easy,
    time_limit: int = 30,
) -> GameSession:
    return GameSession(
        id="session-1",
        start_time=datetime(2025, 1, 1, tzinfo=UTC),
        settings=GameSettings(difficulty=difficulty, round_count=rounds, time_limit=time_limit),
        total_rounds=rounds,
        rounds=tuple(_make_round(i + 1, correct_first=(i % 2 == 0)) for i in range(rounds)),
    )


@pytest.fixture()
def make_session():
    return _make_session


@pytest.fixture()
def make_round():
    return _make_round
