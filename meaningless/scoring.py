from __future__ import annotations

import math

from meaningless.api.models import Difficulty

CORRECT_BASE_SCORE = 100
INCORRECT_BASE_SCORE = 25

MAX_TIME_BONUS = 1.5

DIFFICULTY_MULTIPLIERS: dict[str, float] = {
    Difficulty.easy: 1.0,
    Difficulty.medium: 1.25,
    Difficulty.hard: 1.5,
}


def calculate_base_score(is_correct: bool) -> int:
    return CORRECT_BASE_SCORE if is_correct else INCORRECT_BASE_SCORE


def calculate_time_bonus(time_spent: float, time_limit: float) -> float:
    """Multiplier between 1.0 and 1.5; faster answers earn more. No limit, no bonus."""

    if time_limit == 0:
        return 1.0
    bonus = 1.0 + (1 - time_spent / time_limit) * 0.5
    return max(1.0, min(MAX_TIME_BONUS, bonus))


def difficulty_multiplier(difficulty: str) -> float:
    return DIFFICULTY_MULTIPLIERS.get(difficulty, 1.0)


def round_half_up(value: float) -> int:
    # Half-up, not banker's rounding: 186.5 -> 187.
    return math.floor(value + 0.5)


def calculate_round_score(*, is_correct: bool, time_spent: float, time_limit: float, difficulty: str) -> int:
    raw = calculate_base_score(is_correct) * calculate_time_bonus(time_spent, time_limit) * difficulty_multiplier(difficulty)
    return round_half_up(raw)


def performance_feedback(accuracy_rate: float) -> str:
    if accuracy_rate >= 90:
        return "Excellent! You have a strong understanding of how context affects meaning."
    if accuracy_rate >= 70:
        return "Good job! You're developing a solid grasp of contextual meaning."
    if accuracy_rate >= 50:
        return "Nice effort! This game highlights how tricky language can be without context."
    return "Great start! This game demonstrates why context is so crucial for understanding language."


def suggest_next_difficulty(difficulty: str, accuracy_rate: float) -> str:
    if difficulty == Difficulty.easy and accuracy_rate >= 80:
        return "You did great! Try Medium difficulty next for more challenging words."
    if difficulty == Difficulty.medium and accuracy_rate >= 80:
        return "Excellent work! Challenge yourself with Hard difficulty next time."
    if difficulty == Difficulty.hard and accuracy_rate >= 70:
        return "Outstanding! You've mastered even the most challenging words."
    if accuracy_rate < 40:
        return "Language is tricky! Try an easier difficulty to build your confidence."
    return "Play again to discover more words and their contextual meanings!"
