"""Domain models for training content and quiz attempts."""

from __future__ import annotations

from dataclasses import dataclass, field
import re

from training_quiz.constants.quiz_constants import (
    DEFAULT_TIME_LIMIT_SECONDS,
    PASS_THRESHOLD_PERCENT,
    QUIZ_RESOURCE_TYPE,
)

_DURATION_NUMBER = re.compile(r"(\d+)")


@dataclass(frozen=True, slots=True)
class QuizQuestion:
    """Multiple-choice question with a single correct option."""

    prompt: str
    options: tuple[str, ...]
    correct_option_index: int

    def __post_init__(self) -> None:
        # Accept lists from callers but store an immutable tuple.
        object.__setattr__(self, "options", tuple(self.options))
        if len(self.options) < 2:
            raise ValueError("Each question must have at least two options.")
        if any(not option.strip() for option in self.options):
            raise ValueError("Option text cannot be empty.")
        if not 0 <= self.correct_option_index < len(self.options):
            raise ValueError(
                f"Correct option index {self.correct_option_index} is out of range "
                f"for {len(self.options)} options."
            )

    @property
    def option_count(self) -> int:
        return len(self.options)


@dataclass(frozen=True, slots=True)
class QuizContent:
    """Ordered, read-only question bank of one quiz resource."""

    questions: tuple[QuizQuestion, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "questions", tuple(self.questions))

    @property
    def question_count(self) -> int:
        return len(self.questions)

    def __len__(self) -> int:
        return len(self.questions)


@dataclass(frozen=True, slots=True)
class TrainingResource:
    """Individually addressable unit of training content."""

    id: str
    title: str
    resource_type: str
    duration: str | None = None
    content: QuizContent | str | None = None

    @property
    def is_quiz(self) -> bool:
        return self.resource_type == QUIZ_RESOURCE_TYPE and isinstance(self.content, QuizContent)

    @property
    def quiz(self) -> QuizContent:
        if not self.is_quiz:
            raise ValueError(f"Resource {self.id!r} is not a quiz.")
        return self.content  # type: ignore[return-value]

    def time_allowance_seconds(self) -> int | None:
        """Return the countdown length for a quiz, derived from its duration in minutes."""
        if not self.is_quiz:
            return None
        match = _DURATION_NUMBER.search(self.duration or "")
        if match is None:
            return DEFAULT_TIME_LIMIT_SECONDS
        minutes = int(match.group(1))
        if minutes <= 0:
            return DEFAULT_TIME_LIMIT_SECONDS
        return minutes * 60


@dataclass(frozen=True, slots=True)
class TrainingModule:
    """A titled group of resources; completing all of them earns a certificate."""

    id: str
    title: str
    category: str = ""
    resources: tuple[TrainingResource, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "resources", tuple(self.resources))

    @property
    def resource_ids(self) -> list[str]:
        return [resource.id for resource in self.resources]


@dataclass(frozen=True, slots=True)
class QuestionReview:
    """Outcome of one question in a scored attempt."""

    question_index: int
    selected_option_index: int | None
    correct_option_index: int
    is_correct: bool


@dataclass(frozen=True, slots=True)
class AttemptResult:
    """Finalized score of an attempt."""

    score: float
    correct_count: int
    total_count: int
    reviews: tuple[QuestionReview, ...] = field(default=(), compare=False)

    @property
    def passed(self) -> bool:
        return self.score >= PASS_THRESHOLD_PERCENT


@dataclass(frozen=True, slots=True)
class AttemptSnapshot:
    """Read-only view of the live attempt, used for rendering."""

    resource_id: str | None
    current_index: int
    answers: dict[int, int]
    remaining_seconds: int | None
    result: AttemptResult | None
    can_submit: bool
    question_count: int
