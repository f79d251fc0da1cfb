from __future__ import annotations

import logging
from datetime import UTC, datetime

import redis
from pydantic import TypeAdapter, ValidationError

from meaningless.api.models import (
    GameSession,
    SavedGame,
    UserProgress,
    UserSettings,
    UserSettingsUpdate,
)
from meaningless.words import RecentWords

logger = logging.getLogger(__name__)

PLAYER_KEY_PREFIX = "meaningless:player:"  # + {player_id}:{suffix}

MAX_COMPLETED_GAMES = 20

_COMPLETED_GAMES = TypeAdapter(list[GameSession])


def _now() -> datetime:
    return datetime.now(tz=UTC)


def _key(player_id: str, suffix: str) -> str:
    return f"{PLAYER_KEY_PREFIX}{player_id}:{suffix}"


def _current_key(player_id: str) -> str:
    return _key(player_id, "current_game")


def _backup_key(player_id: str) -> str:
    return _key(player_id, "current_game_backup")


def _read_snapshot(*, r: redis.Redis, key: str) -> GameSession | None:
    raw = r.get(key)
    if not raw:
        return None
    try:
        return SavedGame.model_validate_json(raw).session
    except ValidationError:
        logger.warning("Discarding invalid game snapshot at %s", key)
        r.delete(key)
        return None


# --- current game -----------------------------------------------------------


def save_current_game(*, r: redis.Redis, player_id: str, session: GameSession) -> bool:
    """Write the session to the primary and backup slots.

    Best-effort: a storage failure is logged and reported as False, never raised.
    """

    payload = SavedGame(session=session, last_saved=_now()).model_dump_json()
    try:
        pipe = r.pipeline()
        pipe.set(_current_key(player_id), payload)
        pipe.set(_backup_key(player_id), payload)
        pipe.execute()
    except redis.RedisError:
        logger.exception("Error saving game for player %s", player_id)
        return False
    return True


def load_current_game(*, r: redis.Redis, player_id: str) -> GameSession | None:
    return _read_snapshot(r=r, key=_current_key(player_id))


def recover_game_session(*, r: redis.Redis, player_id: str) -> GameSession | None:
    """Restore the backup snapshot into the primary slot, if the backup is usable."""

    session = _read_snapshot(r=r, key=_backup_key(player_id))
    if session is None:
        return None
    save_current_game(r=r, player_id=player_id, session=session)
    logger.info("Recovered session %s for player %s from backup", session.id, player_id)
    return session


def load_or_recover_game(*, r: redis.Redis, player_id: str) -> GameSession | None:
    session = load_current_game(r=r, player_id=player_id)
    if session is None:
        session = recover_game_session(r=r, player_id=player_id)
    return session


def clear_current_game(*, r: redis.Redis, player_id: str) -> None:
    r.delete(_current_key(player_id), _backup_key(player_id))


# --- history ----------------------------------------------------------------


def get_completed_games(*, r: redis.Redis, player_id: str) -> list[GameSession]:
    """Most recent last."""

    raw = r.get(_key(player_id, "completed_games"))
    if not raw:
        return []
    try:
        return _COMPLETED_GAMES.validate_json(raw)
    except ValidationError:
        logger.warning("Discarding invalid completed-game history for player %s", player_id)
        return []


def save_completed_game(*, r: redis.Redis, player_id: str, session: GameSession) -> bool:
    if not session.completed:
        return False

    try:
        games = [g for g in get_completed_games(r=r, player_id=player_id) if g.id != session.id]
        games.append(session)
        games = games[-MAX_COMPLETED_GAMES:]
        r.set(_key(player_id, "completed_games"), _COMPLETED_GAMES.dump_json(games).decode())
    except redis.RedisError:
        logger.exception("Error saving completed game for player %s", player_id)
        return False
    return True


# --- progress ---------------------------------------------------------------


def get_user_progress(*, r: redis.Redis, player_id: str) -> UserProgress:
    raw = r.get(_key(player_id, "progress"))
    if not raw:
        return UserProgress()
    return UserProgress.model_validate_json(raw)


def record_game_played(*, r: redis.Redis, player_id: str, session: GameSession) -> UserProgress:
    try:
        progress = get_user_progress(r=r, player_id=player_id)
    except (redis.RedisError, ValidationError):
        logger.exception("Error loading progress for player %s; starting fresh", player_id)
        progress = UserProgress()

    progress.games_played += 1
    progress.total_score += session.score
    progress.average_score = progress.total_score / progress.games_played

    for rnd in session.rounds:
        if rnd.word.id not in progress.words_encountered:
            progress.words_encountered.append(rnd.word.id)
    for concept_id in session.encountered_concepts:
        if concept_id not in progress.concepts_learned:
            progress.concepts_learned.append(concept_id)

    difficulty = session.settings.difficulty.value
    levels = progress.difficulty_progression
    setattr(levels, difficulty, getattr(levels, difficulty) + 1)
    progress.last_played = session.end_time or _now()

    try:
        r.set(_key(player_id, "progress"), progress.model_dump_json())
    except redis.RedisError:
        logger.exception("Error saving progress for player %s", player_id)
    return progress


# --- settings ---------------------------------------------------------------


def get_user_settings(*, r: redis.Redis, player_id: str) -> UserSettings:
    key = _key(player_id, "settings")
    raw = r.get(key)
    if raw:
        return UserSettings.model_validate_json(raw)
    settings = UserSettings()
    r.set(key, settings.model_dump_json())
    return settings


def update_user_settings(*, r: redis.Redis, player_id: str, update: UserSettingsUpdate) -> UserSettings:
    current = get_user_settings(r=r, player_id=player_id)
    changes = update.model_dump(exclude_unset=True, exclude_none=True)
    merged = UserSettings.model_validate({**current.model_dump(), **changes})
    r.set(_key(player_id, "settings"), merged.model_dump_json())
    return merged


def has_seen_tutorial(*, r: redis.Redis, player_id: str) -> bool:
    return r.get(_key(player_id, "tutorial_seen")) == "1"


def mark_tutorial_seen(*, r: redis.Redis, player_id: str) -> None:
    r.set(_key(player_id, "tutorial_seen"), "1")


# --- recency window ---------------------------------------------------------


def load_recent_words(*, r: redis.Redis, player_id: str) -> RecentWords:
    try:
        ids = r.lrange(_key(player_id, "recent_words"), 0, -1)
    except redis.RedisError:
        logger.exception("Error loading recent words for player %s", player_id)
        ids = []
    return RecentWords(ids)


def save_recent_words(*, r: redis.Redis, player_id: str, recent: RecentWords) -> bool:
    """Best-effort, like `save_current_game`."""

    key = _key(player_id, "recent_words")
    ids = recent.ids()
    try:
        pipe = r.pipeline()
        pipe.delete(key)
        if ids:
            pipe.rpush(key, *ids)
        pipe.execute()
    except redis.RedisError:
        logger.exception("Error saving recent words for player %s", player_id)
        return False
    return True
