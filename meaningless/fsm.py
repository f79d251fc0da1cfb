from __future__ import annotations

from statemachine import State, StateMachine

from meaningless.api.models import SessionPhase


class SessionFSM(StateMachine):
    """Guards the phase transitions of a game session.

    - not_started -> in_round -> round_completed -> in_round ... -> completed
    - a game may be finished from any non-final phase (early quit)
    - the machine never mutates the session; callers copy `phase` into the new value
    """

    not_started = State(SessionPhase.not_started.value, value=SessionPhase.not_started.value, initial=True)
    in_round = State(SessionPhase.in_round.value, value=SessionPhase.in_round.value)
    round_completed = State(SessionPhase.round_completed.value, value=SessionPhase.round_completed.value)
    completed = State(SessionPhase.completed.value, value=SessionPhase.completed.value, final=True)

    next_round = not_started.to(in_round) | in_round.to(in_round) | round_completed.to(in_round)
    select = in_round.to(round_completed)
    finish = not_started.to(completed) | in_round.to(completed) | round_completed.to(completed)

    def __init__(self, phase: SessionPhase) -> None:
        super().__init__(start_value=phase.value)

    @property
    def phase(self) -> SessionPhase:
        return SessionPhase(str(self.current_state_value))
