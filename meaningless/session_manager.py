from __future__ import annotations

import logging
import random
import re
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import uuid4

from statemachine.exceptions import TransitionNotAllowed

from meaningless.api.models import ContradictionData, GameSession, GameSettings, GameSummary, Round, SessionPhase
from meaningless.educational import identify_linguistic_concept, record_concept_exposure, selected_meaning_of
from meaningless.errors import InitializationError, InvalidOptionError, InvalidSessionError, SelectionError
from meaningless.fsm import SessionFSM
from meaningless.rounds import RoundBuilder
from meaningless.scoring import calculate_round_score, performance_feedback, suggest_next_difficulty
from meaningless.validators import check, current_round_of
from meaningless.words import WordSelector

logger = logging.getLogger(__name__)

HIGHLIGHT_TEMPLATE = '<span class="highlight">{word}</span>'


@dataclass(frozen=True, slots=True)
class RoundAdvance:
    session: GameSession
    started: bool


@dataclass(frozen=True, slots=True)
class SelectionResult:
    session: GameSession
    round: Round


@dataclass(frozen=True, slots=True)
class GameCompletion:
    session: GameSession
    summary: GameSummary


def _now() -> datetime:
    return datetime.now(tz=UTC)


def _next_phase(session: GameSession, event: str) -> SessionPhase:
    fsm = SessionFSM(session.phase)
    try:
        fsm.send(event)
    except TransitionNotAllowed as e:
        raise InvalidSessionError(f"Cannot '{event}' from phase '{session.phase.value}'") from e
    return fsm.phase


def _replace_round(rounds: tuple[Round, ...], rnd: Round) -> tuple[Round, ...]:
    idx = rnd.round_number - 1
    return rounds[:idx] + (rnd,) + rounds[idx + 1 :]


def initialize_game(settings: GameSettings, *, selector: WordSelector, builder: RoundBuilder) -> GameSession:
    """Create a fresh session with one prepared round per selected word.

    The session starts with `current_round == 0`; call `start_next_round` to play.
    """

    try:
        words = selector.select_words_for_game(settings.difficulty, settings.round_count)
        if len(words) < settings.round_count:
            raise SelectionError(f"Only {len(words)} words available for {settings.round_count} rounds")

        rounds = tuple(builder.build_round(w, round_number=i + 1) for i, w in enumerate(words))
        session = GameSession(
            id=uuid4().hex,
            start_time=_now(),
            settings=settings,
            total_rounds=settings.round_count,
            rounds=rounds,
        )
    except Exception as e:
        logger.exception("Error initializing game")
        raise InitializationError("Failed to initialize game") from e

    logger.info(
        "New session: %s [difficulty=%s, rounds=%d, time_limit=%d]",
        session.id,
        settings.difficulty.value,
        settings.round_count,
        settings.time_limit,
    )
    return session


def get_current_round(session: GameSession | None) -> Round | None:
    return current_round_of(session)


def start_next_round(session: GameSession | None) -> RoundAdvance:
    """Move into the next round slot.

    Returns `started=False` (and the same session) once every round has been entered.
    """

    check("next_round", session)
    assert session is not None

    if session.current_round >= session.total_rounds:
        return RoundAdvance(session=session, started=False)

    number = session.current_round + 1
    # Round objects are reused positionally, so the slot is cleared on entry.
    fresh = session.rounds[number - 1].model_copy(
        update={"selected_option": None, "time_spent": 0, "score": 0, "completed": False}
    )
    advanced = session.model_copy(
        update={
            "current_round": number,
            "rounds": _replace_round(session.rounds, fresh),
            "phase": _next_phase(session, "next_round"),
        }
    )
    logger.debug("Session %s entered round %d/%d", session.id, number, session.total_rounds)
    return RoundAdvance(session=advanced, started=True)


def process_user_selection(
    session: GameSession | None,
    option_index: int,
    time_spent: float,
    *,
    now: datetime | None = None,
) -> SelectionResult:
    """Score the current round for the picked option.

    A round is scored exactly once: a second selection (e.g. a timer firing after a
    click) fails with AlreadyCompletedError and leaves the score untouched.
    """

    check("select", session)
    assert session is not None

    if time_spent < 0:
        raise ValueError("time_spent must be >= 0")

    rnd = current_round_of(session)
    assert rnd is not None
    if not 0 <= option_index < len(rnd.options):
        raise InvalidOptionError(f"Invalid option selected: {option_index}")

    option = rnd.options[option_index]
    score = calculate_round_score(
        is_correct=option.is_correct,
        time_spent=time_spent,
        time_limit=session.settings.time_limit,
        difficulty=session.settings.difficulty,
    )

    done = rnd.model_copy(
        update={"selected_option": option_index, "time_spent": time_spent, "score": score, "completed": True}
    )
    updated = session.model_copy(
        update={
            "rounds": _replace_round(session.rounds, done),
            "score": session.score + score,
            "phase": _next_phase(session, "select"),
        }
    )

    concept = identify_linguistic_concept(done.word, selected_meaning_of(done), done.correct_meaning)
    updated = record_concept_exposure(concept, updated, now=now)

    logger.info(
        "Session %s round %d: option=%d correct=%s score=%d",
        session.id,
        done.round_number,
        option_index,
        option.is_correct,
        score,
    )
    return SelectionResult(session=updated, round=done)


def auto_select_on_timeout(session: GameSession | None, *, rng: random.Random | None = None) -> SelectionResult:
    """What the round timer does on expiry: pick a random option as if clicked."""

    check("timeout", session)
    assert session is not None

    rnd = current_round_of(session)
    assert rnd is not None
    index = (rng or random.Random()).randrange(len(rnd.options))
    return process_user_selection(session, index, session.settings.time_limit)


def highlight_word(sentence: str, word: str) -> str:
    """Wrap the first whole-word, case-insensitive occurrence of `word`."""

    pattern = re.compile(rf"\b{re.escape(word)}\b", re.IGNORECASE)
    return pattern.sub(lambda m: HIGHLIGHT_TEMPLATE.format(word=m.group(0)), sentence, count=1)


def get_contradiction_sentence(session: GameSession | None, *, rng: random.Random | None = None) -> ContradictionData:
    check("contradiction", session)

    rnd = current_round_of(session)
    assert rnd is not None
    word = rnd.word.text
    meaning = rnd.correct_meaning

    if meaning.contradiction_sentences:
        sentence = (rng or random.Random()).choice(meaning.contradiction_sentences)
    else:
        sentence = f'This is an example where "{word}" means "{meaning.definition}".'

    return ContradictionData(
        sentence=sentence,
        highlighted_sentence=highlight_word(sentence, word),
        meaning=meaning.definition,
        explanation=f'In this context, "{word}" means "{meaning.definition}" rather than the meaning you selected.',
    )


def complete_game(session: GameSession | None, *, now: datetime | None = None) -> GameCompletion:
    """Close the session and compute the end-of-game summary.

    Does not clear anything; resetting is a separate, explicit step.
    """

    check("complete", session)
    assert session is not None

    correct_answers = sum(
        1 for r in session.rounds if r.selected_option is not None and r.options[r.selected_option].is_correct
    )
    total_time = sum(r.time_spent for r in session.rounds)
    accuracy_rate = correct_answers / session.total_rounds * 100
    difficulty = session.settings.difficulty

    finished = session.model_copy(
        update={"end_time": now or _now(), "completed": True, "phase": _next_phase(session, "finish")}
    )
    summary = GameSummary(
        score=finished.score,
        total_rounds=finished.total_rounds,
        correct_answers=correct_answers,
        accuracy_rate=accuracy_rate,
        average_time_per_round=total_time / session.total_rounds,
        difficulty=difficulty,
        performance=performance_feedback(accuracy_rate),
        suggestion=suggest_next_difficulty(difficulty, accuracy_rate),
    )
    logger.info("Session %s completed: score=%d accuracy=%.1f%%", session.id, summary.score, accuracy_rate)
    return GameCompletion(session=finished, summary=summary)
