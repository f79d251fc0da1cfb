from __future__ import annotations

import logging
import random
from datetime import UTC, datetime

from meaningless.api.models import (
    ConceptExposure,
    Difficulty,
    EducationalMessage,
    GameSession,
    LinguisticConcept,
    Meaning,
    Round,
    Word,
)
from meaningless.catalog.registry import EducationalContent
from meaningless.errors import InvalidSessionError, NotFoundError

logger = logging.getLogger(__name__)

# Category tags that name a concept directly, checked in this order.
CONCEPT_TAGS: tuple[str, ...] = ("homonym", "polyseme", "contronym", "metonymy", "semantic_shift")

DEFAULT_MESSAGE = EducationalMessage(
    id="default_message",
    text=(
        "Words have no inherent meaning without context. The same word can have completely different "
        "meanings depending on how it's used."
    ),
    category="context",
    difficulty=Difficulty.medium,
)

# Hours to wait before reinforcing a concept, keyed by how often it was seen.
REINFORCEMENT_HOURS: dict[int, float] = {1: 1, 2: 3, 3: 8, 4: 24}


def _now() -> datetime:
    return datetime.now(tz=UTC)


def identify_linguistic_concept(
    word: Word,
    selected_meaning: Meaning | None = None,
    contradiction_meaning: Meaning | None = None,
) -> str:
    """Name the concept a round demonstrates.

    Explicit category tags win. Otherwise the relationship between the meaning the
    player picked and the contradiction meaning decides, defaulting to plain
    context dependency.
    """

    for tag in CONCEPT_TAGS:
        if tag in word.categories:
            return tag

    if selected_meaning is not None and contradiction_meaning is not None:
        if selected_meaning.part_of_speech != contradiction_meaning.part_of_speech:
            return "part_of_speech_variation"
        if selected_meaning.is_archaic != contradiction_meaning.is_archaic:
            return "semantic_shift"

    return "context_dependency"


def selected_meaning_of(rnd: Round) -> Meaning | None:
    """The real meaning behind the picked option; None for distractors or no pick."""

    if rnd.selected_option is None:
        return None
    text = rnd.options[rnd.selected_option].text
    return next((m for m in rnd.word.meanings if m.definition == text), None)


def record_concept_exposure(
    concept_id: str,
    session: GameSession | None,
    *,
    now: datetime | None = None,
) -> GameSession:
    if session is None:
        raise InvalidSessionError("Invalid game session")

    ts = now or _now()
    existing = session.concept_exposures.get(concept_id)
    if existing is None:
        exposure = ConceptExposure(concept_id=concept_id, count=1, first_encountered=ts, last_encountered=ts)
    else:
        exposure = existing.model_copy(update={"count": existing.count + 1, "last_encountered": ts})

    encountered = session.encountered_concepts
    if concept_id not in encountered:
        encountered = (*encountered, concept_id)

    logger.debug("Concept exposure recorded: %s (count=%d, session=%s)", concept_id, exposure.count, session.id)
    return session.model_copy(
        update={
            "encountered_concepts": encountered,
            "concept_exposures": {**session.concept_exposures, concept_id: exposure},
        }
    )


def generate_learning_takeaways(session: GameSession | None, *, content: EducationalContent) -> list[str]:
    """One takeaway per concept seen often enough this game, in catalog order."""

    if session is None:
        raise InvalidSessionError("Invalid game session")
    if not session.encountered_concepts:
        return []

    encountered = set(session.encountered_concepts)
    out: list[str] = []
    for concept in content.concepts:
        if concept.id not in encountered:
            continue
        exposure = session.concept_exposures.get(concept.id)
        if exposure is None or exposure.count < concept.required_exposure_count:
            continue
        takeaways = content.takeaways_for(concept.id)
        if takeaways:
            out.append(takeaways[0].text)
    return out


def get_educational_message(
    *,
    word: Word,
    selected_meaning: Meaning | None,
    contradiction_meaning: Meaning | None,
    content: EducationalContent,
    rng: random.Random | None = None,
) -> EducationalMessage:
    concept = identify_linguistic_concept(word, selected_meaning, contradiction_meaning)

    relevant = [m for m in content.messages if m.category == concept or word.text in m.related_words]
    if not relevant:
        relevant = [m for m in content.messages if m.category in {"context", "meaning"}]

    at_level = [m for m in relevant if m.difficulty == word.difficulty] or relevant
    if not at_level:
        return DEFAULT_MESSAGE
    return (rng or random.Random()).choice(at_level)


def get_concept_explanation(*, concept_id: str, content: EducationalContent) -> LinguisticConcept:
    concept = content.concept(concept_id)
    if concept is None:
        raise NotFoundError(f"Concept with ID {concept_id} not found")
    return concept


def determine_learning_stage(session: GameSession | None) -> str:
    if session is None:
        return "introduction"

    pct = session.current_round / session.total_rounds * 100
    if pct < 20:
        return "introduction"
    if pct < 40:
        return "exploration"
    if pct < 60:
        return "contradiction"
    if pct < 80:
        return "conceptualization"
    if pct < 100:
        return "application"
    return "synthesis"


def should_reinforce(exposure: ConceptExposure | None, *, now: datetime | None = None) -> bool:
    """Simple spaced repetition: 1h, 3h, 8h, 24h after the 1st..4th exposure."""

    if exposure is None:
        return False
    wait = REINFORCEMENT_HOURS.get(exposure.count)
    if wait is None:
        return False
    elapsed = (now or _now()) - exposure.last_encountered
    return elapsed.total_seconds() / 3600 >= wait
