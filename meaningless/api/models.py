from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Difficulty(StrEnum):
    easy = "easy"
    medium = "medium"
    hard = "hard"


class SessionPhase(StrEnum):
    not_started = "not_started"
    in_round = "in_round"
    round_completed = "round_completed"
    completed = "completed"


class Meaning(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    definition: str
    part_of_speech: str
    example_sentences: tuple[str, ...] = ()
    # Sentences that use the word in *this* sense; shown after a pick to
    # contradict whatever meaning the player assumed.
    contradiction_sentences: tuple[str, ...] = ()
    is_archaic: bool = False
    synonyms: tuple[str, ...] = ()


class Word(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    difficulty: Difficulty
    # Mix of parts of speech ("noun", "verb") and concept tags ("homonym", "contronym").
    categories: tuple[str, ...] = ()
    meanings: tuple[Meaning, ...] = Field(..., min_length=1)
    notes: str = ""


class Option(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=0)
    text: str
    is_correct: bool
    is_contradiction: bool = False


class Round(BaseModel):
    model_config = ConfigDict(frozen=True)

    round_number: int = Field(..., ge=1)
    word: Word
    correct_meaning: Meaning
    options: tuple[Option, ...]

    selected_option: int | None = None
    time_spent: float = Field(0, ge=0)
    score: int = Field(0, ge=0)
    completed: bool = False


class GameSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    difficulty: Difficulty = Difficulty.medium
    round_count: int = Field(10, gt=0, le=50)
    # Seconds per round; 0 means unlimited.
    time_limit: int = Field(30, ge=0)
    sound_enabled: bool = True


class ConceptExposure(BaseModel):
    model_config = ConfigDict(frozen=True)

    concept_id: str
    count: int = Field(1, ge=1)
    first_encountered: datetime
    last_encountered: datetime


class GameSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    start_time: datetime
    end_time: datetime | None = None
    settings: GameSettings

    # 0 = not started; otherwise the 1-based number of the round being played.
    current_round: int = Field(0, ge=0)
    total_rounds: int = Field(..., gt=0)
    score: int = Field(0, ge=0)
    rounds: tuple[Round, ...]
    completed: bool = False
    phase: SessionPhase = SessionPhase.not_started

    encountered_concepts: tuple[str, ...] = ()
    concept_exposures: dict[str, ConceptExposure] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_shape(self) -> "GameSession":
        if len(self.rounds) != self.total_rounds:
            raise ValueError(f"rounds has {len(self.rounds)} entries, expected {self.total_rounds}")
        if self.current_round > self.total_rounds:
            raise ValueError(f"current_round {self.current_round} exceeds total_rounds {self.total_rounds}")
        return self


class SavedGame(BaseModel):
    """Persisted snapshot of a session."""

    session: GameSession
    last_saved: datetime


class GameSummary(BaseModel):
    score: int
    total_rounds: int
    correct_answers: int
    accuracy_rate: float
    average_time_per_round: float
    difficulty: Difficulty
    performance: str
    suggestion: str


class ContradictionData(BaseModel):
    sentence: str
    highlighted_sentence: str
    meaning: str
    explanation: str


class LinguisticConcept(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    examples: tuple[str, ...] = ()
    related_concepts: tuple[str, ...] = ()
    # How many exposures in one game before the concept's takeaway is shown.
    required_exposure_count: int = Field(1, ge=1)


class EducationalTakeaway(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    concept_id: str
    difficulty: Difficulty


class EducationalMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    category: str
    difficulty: Difficulty
    related_words: tuple[str, ...] = ()


class AccessibilitySettings(BaseModel):
    high_contrast: bool = False
    large_text: bool = False
    reduced_motion: bool = False
    screen_reader_optimized: bool = False


class UserSettings(BaseModel):
    default_difficulty: Difficulty = Difficulty.medium
    default_round_count: int = Field(10, gt=0, le=50)
    default_time_limit: int = Field(30, ge=0)
    sound_enabled: bool = True
    theme: str = "default"
    accessibility: AccessibilitySettings = Field(default_factory=AccessibilitySettings)


class DifficultyProgression(BaseModel):
    easy: int = 0
    medium: int = 0
    hard: int = 0


class UserProgress(BaseModel):
    games_played: int = 0
    total_score: int = 0
    average_score: float = 0.0
    words_encountered: list[str] = Field(default_factory=list)
    concepts_learned: list[str] = Field(default_factory=list)
    difficulty_progression: DifficultyProgression = Field(default_factory=DifficultyProgression)
    last_played: datetime | None = None


class GameCreateRequest(BaseModel):
    # Missing fields fall back to the player's stored defaults.
    difficulty: Difficulty | None = None
    round_count: int | None = Field(None, gt=0, le=50)
    time_limit: int | None = Field(None, ge=0)
    sound_enabled: bool | None = None


class SelectRequest(BaseModel):
    option_index: int = Field(..., ge=0)
    time_spent: float = Field(..., ge=0)


class UserSettingsUpdate(BaseModel):
    default_difficulty: Difficulty | None = None
    default_round_count: int | None = Field(None, gt=0, le=50)
    default_time_limit: int | None = Field(None, ge=0)
    sound_enabled: bool | None = None
    theme: str | None = None
    accessibility: AccessibilitySettings | None = None


class ActionResponse(BaseModel):
    session: GameSession
    round: Round | None = None
    started: bool | None = None
    summary: GameSummary | None = None


class GameListResponse(BaseModel):
    games: list[GameSession]


class TakeawaysResponse(BaseModel):
    takeaways: list[str]
