from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Literal, get_args

import redis

from meaningless.api.models import GameCreateRequest, GameSession, GameSettings, GameSummary, Round, SelectRequest
from meaningless.catalog.singleton import get_catalog
from meaningless.game_store import (
    clear_current_game,
    get_user_settings,
    load_or_recover_game,
    load_recent_words,
    record_game_played,
    save_completed_game,
    save_current_game,
    save_recent_words,
)
from meaningless.lock import session_lock
from meaningless.rounds import RoundBuilder
from meaningless.session_manager import (
    auto_select_on_timeout,
    complete_game,
    initialize_game,
    process_user_selection,
    start_next_round,
)
from meaningless.words import WordSelector

logger = logging.getLogger(__name__)


ActionName = Literal["next_round", "select", "timeout", "complete"]

ACTION_NAMES: frozenset[str] = frozenset(get_args(ActionName))


@dataclass(frozen=True, slots=True)
class ActionResult:
    session: GameSession
    round: Round | None = None
    started: bool | None = None
    summary: GameSummary | None = None


def apply_action(
    *,
    session: GameSession | None,
    action: ActionName,
    payload: dict[str, Any],
    rng: random.Random | None = None,
) -> ActionResult:
    """Pure reducer: the one place a command turns a session into its successor."""

    if action == "next_round":
        advance = start_next_round(session)
        return ActionResult(session=advance.session, started=advance.started)

    if action == "select":
        req = SelectRequest.model_validate(payload)
        sel = process_user_selection(session, req.option_index, req.time_spent)
        return ActionResult(session=sel.session, round=sel.round)

    if action == "timeout":
        sel = auto_select_on_timeout(session, rng=rng)
        return ActionResult(session=sel.session, round=sel.round)

    if action == "complete":
        done = complete_game(session)
        return ActionResult(session=done.session, summary=done.summary)

    raise ValueError(f"Unknown action: {action}")


def dispatch_action(
    *,
    r: redis.Redis,
    player_id: str,
    action: ActionName,
    payload: dict[str, Any],
    rng: random.Random | None = None,
) -> ActionResult:
    """Entry point for the UI and the round timer.

    Applies a command by:
    - acquiring the per-player lock
    - loading the current session (recovering from backup if needed)
    - running the reducer
    - persisting the result (best-effort)
    - on completion, recording history and progress
    """

    with session_lock(r=r, player_id=player_id):
        session = load_or_recover_game(r=r, player_id=player_id)
        result = apply_action(session=session, action=action, payload=payload, rng=rng)

        save_current_game(r=r, player_id=player_id, session=result.session)
        if action == "complete":
            save_completed_game(r=r, player_id=player_id, session=result.session)
            record_game_played(r=r, player_id=player_id, session=result.session)

    logger.debug("Player %s applied %s -> phase=%s", player_id, action, result.session.phase.value)
    return result


def settings_for_request(*, r: redis.Redis, player_id: str, request: GameCreateRequest) -> GameSettings:
    defaults = get_user_settings(r=r, player_id=player_id)
    return GameSettings(
        difficulty=request.difficulty if request.difficulty is not None else defaults.default_difficulty,
        round_count=request.round_count if request.round_count is not None else defaults.default_round_count,
        time_limit=request.time_limit if request.time_limit is not None else defaults.default_time_limit,
        sound_enabled=request.sound_enabled if request.sound_enabled is not None else defaults.sound_enabled,
    )


def start_game(
    *,
    r: redis.Redis,
    player_id: str,
    request: GameCreateRequest,
    rng: random.Random | None = None,
) -> GameSession:
    """Start a new game for the player, replacing any game in progress."""

    catalog = get_catalog()
    rng = rng or random.Random()

    with session_lock(r=r, player_id=player_id):
        settings = settings_for_request(r=r, player_id=player_id, request=request)
        recent = load_recent_words(r=r, player_id=player_id)
        selector = WordSelector(catalog.words, recent=recent, rng=rng)
        builder = RoundBuilder(catalog.words, rng=rng)

        session = initialize_game(settings, selector=selector, builder=builder)

        save_recent_words(r=r, player_id=player_id, recent=selector.recent)
        save_current_game(r=r, player_id=player_id, session=session)

    return session


def reset_game(*, r: redis.Redis, player_id: str) -> None:
    with session_lock(r=r, player_id=player_id):
        clear_current_game(r=r, player_id=player_id)
    logger.info("Player %s reset their game", player_id)
