from __future__ import annotations

from typing import Any

import redis
from fastapi import APIRouter, Depends, HTTPException, status

from meaningless.actions import ACTION_NAMES, ActionName, dispatch_action, reset_game, start_game
from meaningless.api.deps import get_redis
from meaningless.api.models import (
    ActionResponse,
    ContradictionData,
    EducationalMessage,
    GameCreateRequest,
    GameListResponse,
    GameSession,
    LinguisticConcept,
    Round,
    TakeawaysResponse,
    UserProgress,
    UserSettings,
    UserSettingsUpdate,
    Word,
)
from meaningless.catalog.singleton import get_catalog
from meaningless.educational import (
    generate_learning_takeaways,
    get_concept_explanation,
    get_educational_message,
    selected_meaning_of,
)
from meaningless.errors import AlreadyCompletedError, GameBusyError, NoActiveRoundError, NoSessionError, NotFoundError
from meaningless.game_store import (
    get_completed_games,
    get_user_progress,
    get_user_settings,
    has_seen_tutorial,
    load_or_recover_game,
    mark_tutorial_seen,
    update_user_settings,
)
from meaningless.session_manager import get_contradiction_sentence, get_current_round
from meaningless.words import get_word_by_id

router = APIRouter()


def _http_error(e: ValueError) -> HTTPException:
    if isinstance(e, (NoSessionError, NotFoundError)):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(e, (AlreadyCompletedError, GameBusyError)):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    return HTTPException(status_code=code, detail=str(e))


def _require_session(*, r: redis.Redis, player_id: str) -> GameSession:
    session = load_or_recover_game(r=r, player_id=player_id)
    if session is None:
        raise NoSessionError("No active game session")
    return session


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


# --- game session -------------------------------------------------------------


@router.post("/players/{player_id}/game", response_model=GameSession, status_code=status.HTTP_201_CREATED)
async def create_game_route(
    player_id: str,
    payload: GameCreateRequest,
    r: redis.Redis = Depends(get_redis),
) -> GameSession:
    try:
        return start_game(r=r, player_id=player_id, request=payload)
    except ValueError as e:
        raise _http_error(e) from e


@router.get("/players/{player_id}/game", response_model=GameSession)
async def get_game_route(player_id: str, r: redis.Redis = Depends(get_redis)) -> GameSession:
    try:
        return _require_session(r=r, player_id=player_id)
    except ValueError as e:
        raise _http_error(e) from e


@router.delete("/players/{player_id}/game")
async def reset_game_route(player_id: str, r: redis.Redis = Depends(get_redis)) -> dict[str, str]:
    try:
        reset_game(r=r, player_id=player_id)
    except ValueError as e:
        raise _http_error(e) from e
    return {"status": "ok"}


@router.get("/players/{player_id}/game/round", response_model=Round)
async def current_round_route(player_id: str, r: redis.Redis = Depends(get_redis)) -> Round:
    try:
        rnd = get_current_round(_require_session(r=r, player_id=player_id))
        if rnd is None:
            raise NoActiveRoundError("No active round")
    except ValueError as e:
        raise _http_error(e) from e
    return rnd


@router.post("/players/{player_id}/game/actions/{action}", response_model=ActionResponse)
async def action_route(
    player_id: str,
    action: str,
    body: dict[str, Any] | None = None,
    r: redis.Redis = Depends(get_redis),
) -> ActionResponse:
    try:
        if action not in ACTION_NAMES:
            raise ValueError(f"Unknown action: {action}")
        act: ActionName = action  # type: ignore[assignment]
        result = dispatch_action(r=r, player_id=player_id, action=act, payload=body or {})
    except ValueError as e:
        raise _http_error(e) from e

    return ActionResponse(session=result.session, round=result.round, started=result.started, summary=result.summary)


@router.get("/players/{player_id}/game/contradiction", response_model=ContradictionData)
async def contradiction_route(player_id: str, r: redis.Redis = Depends(get_redis)) -> ContradictionData:
    try:
        return get_contradiction_sentence(_require_session(r=r, player_id=player_id))
    except ValueError as e:
        raise _http_error(e) from e


@router.get("/players/{player_id}/game/takeaways", response_model=TakeawaysResponse)
async def takeaways_route(player_id: str, r: redis.Redis = Depends(get_redis)) -> TakeawaysResponse:
    try:
        session = _require_session(r=r, player_id=player_id)
        takeaways = generate_learning_takeaways(session, content=get_catalog().education)
    except ValueError as e:
        raise _http_error(e) from e
    return TakeawaysResponse(takeaways=takeaways)


@router.get("/players/{player_id}/game/message", response_model=EducationalMessage)
async def educational_message_route(player_id: str, r: redis.Redis = Depends(get_redis)) -> EducationalMessage:
    try:
        rnd = get_current_round(_require_session(r=r, player_id=player_id))
        if rnd is None:
            raise NoActiveRoundError("No active round")
    except ValueError as e:
        raise _http_error(e) from e

    return get_educational_message(
        word=rnd.word,
        selected_meaning=selected_meaning_of(rnd),
        contradiction_meaning=rnd.correct_meaning,
        content=get_catalog().education,
    )


# --- player profile -----------------------------------------------------------


@router.get("/players/{player_id}/progress", response_model=UserProgress)
async def progress_route(player_id: str, r: redis.Redis = Depends(get_redis)) -> UserProgress:
    return get_user_progress(r=r, player_id=player_id)


@router.get("/players/{player_id}/settings", response_model=UserSettings)
async def get_settings_route(player_id: str, r: redis.Redis = Depends(get_redis)) -> UserSettings:
    return get_user_settings(r=r, player_id=player_id)


@router.patch("/players/{player_id}/settings", response_model=UserSettings)
async def update_settings_route(
    player_id: str,
    payload: UserSettingsUpdate,
    r: redis.Redis = Depends(get_redis),
) -> UserSettings:
    try:
        return update_user_settings(r=r, player_id=player_id, update=payload)
    except ValueError as e:
        raise _http_error(e) from e


@router.get("/players/{player_id}/history", response_model=GameListResponse)
async def history_route(player_id: str, r: redis.Redis = Depends(get_redis)) -> GameListResponse:
    return GameListResponse(games=get_completed_games(r=r, player_id=player_id))


@router.get("/players/{player_id}/tutorial")
async def get_tutorial_route(player_id: str, r: redis.Redis = Depends(get_redis)) -> dict[str, bool]:
    return {"seen": has_seen_tutorial(r=r, player_id=player_id)}


@router.post("/players/{player_id}/tutorial")
async def mark_tutorial_route(player_id: str, r: redis.Redis = Depends(get_redis)) -> dict[str, bool]:
    mark_tutorial_seen(r=r, player_id=player_id)
    return {"seen": True}


# --- reference data -----------------------------------------------------------


@router.get("/concepts/{concept_id}", response_model=LinguisticConcept)
async def concept_route(concept_id: str) -> LinguisticConcept:
    try:
        return get_concept_explanation(concept_id=concept_id, content=get_catalog().education)
    except ValueError as e:
        raise _http_error(e) from e


@router.get("/words/{word_id}", response_model=Word)
async def word_route(word_id: str) -> Word:
    try:
        return get_word_by_id(catalog=get_catalog().words, word_id=word_id)
    except ValueError as e:
        raise _http_error(e) from e
