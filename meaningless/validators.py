from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from meaningless.api.models import GameSession, Round
from meaningless.errors import (
    AlreadyCompletedError,
    NoActiveRoundError,
    NoCompletedRoundError,
    NoSessionError,
)


def current_round_of(session: GameSession | None) -> Round | None:
    if session is None or session.current_round == 0 or session.current_round > session.total_rounds:
        return None
    return session.rounds[session.current_round - 1]


@dataclass(frozen=True, slots=True)
class ValidationContext:
    action: str


class SessionValidator(ABC):
    """A small, composable precondition check for a session operation.

    Each validator raises its own error kind so callers can branch on the failure.
    """

    @abstractmethod
    def validate(self, *, ctx: ValidationContext, session: GameSession | None) -> None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class SessionRequired(SessionValidator):
    def validate(self, *, ctx: ValidationContext, session: GameSession | None) -> None:
        if session is None:
            raise NoSessionError("No active game session")


@dataclass(frozen=True, slots=True)
class GameNotCompleted(SessionValidator):
    def validate(self, *, ctx: ValidationContext, session: GameSession | None) -> None:
        if session is not None and session.completed:
            raise AlreadyCompletedError("Game already completed")


@dataclass(frozen=True, slots=True)
class NoRoundsAfterCompletion(SessionValidator):
    # Past the last round `next_round` is a no-op, even once the game is completed.
    def validate(self, *, ctx: ValidationContext, session: GameSession | None) -> None:
        if session is not None and session.completed and session.current_round < session.total_rounds:
            raise AlreadyCompletedError("Game already completed")


@dataclass(frozen=True, slots=True)
class ActiveRoundRequired(SessionValidator):
    def validate(self, *, ctx: ValidationContext, session: GameSession | None) -> None:
        if current_round_of(session) is None:
            raise NoActiveRoundError("No active round")


@dataclass(frozen=True, slots=True)
class RoundNotCompleted(SessionValidator):
    def validate(self, *, ctx: ValidationContext, session: GameSession | None) -> None:
        rnd = current_round_of(session)
        if rnd is not None and rnd.completed:
            raise AlreadyCompletedError(f"Round {rnd.round_number} already completed")


@dataclass(frozen=True, slots=True)
class CompletedRoundRequired(SessionValidator):
    def validate(self, *, ctx: ValidationContext, session: GameSession | None) -> None:
        rnd = current_round_of(session)
        if rnd is None or not rnd.completed:
            raise NoCompletedRoundError(f"No completed round for '{ctx.action}'")


@dataclass(frozen=True, slots=True)
class ValidatorPipeline:
    validators: tuple[SessionValidator, ...]

    def validate(self, *, ctx: ValidationContext, session: GameSession | None) -> None:
        for v in self.validators:
            v.validate(ctx=ctx, session=session)


_SELECTION = ValidatorPipeline(
    validators=(
        SessionRequired(),
        GameNotCompleted(),
        ActiveRoundRequired(),
        RoundNotCompleted(),
    )
)

DEFAULT_PIPELINES: dict[str, ValidatorPipeline] = {
    "next_round": ValidatorPipeline(validators=(SessionRequired(), NoRoundsAfterCompletion())),
    "select": _SELECTION,
    "timeout": _SELECTION,
    "complete": ValidatorPipeline(validators=(SessionRequired(), GameNotCompleted())),
    "contradiction": ValidatorPipeline(validators=(CompletedRoundRequired(),)),
}


def pipeline_for(action: str) -> ValidatorPipeline:
    pipe = DEFAULT_PIPELINES.get(action)
    if pipe is None:
        raise ValueError(f"Unknown action: {action}")
    return pipe


def check(action: str, session: GameSession | None) -> None:
    pipeline_for(action).validate(ctx=ValidationContext(action=action), session=session)
