"""Service holding the mutable state of the open quiz attempt."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from training_quiz.core.models import AttemptResult, QuizContent


class Direction(Enum):
    PREVIOUS = "previous"
    NEXT = "next"


@dataclass(slots=True)
class AttemptState:
    """Progress through one quiz; ``result`` is set once the attempt is scored."""

    current_index: int = 0
    answers: dict[int, int] = field(default_factory=dict)
    result: AttemptResult | None = None


class AttemptStateStore:
    """Owns the attempt state of the currently open quiz resource.

    Navigation is deliberately asymmetric: going back is always allowed,
    moving forward requires an answer to the current question.
    """

    def __init__(self) -> None:
        self._quiz: QuizContent | None = None
        self._state = AttemptState()

    @property
    def quiz(self) -> QuizContent | None:
        return self._quiz

    @property
    def state(self) -> AttemptState:
        return self._state

    @property
    def is_scored(self) -> bool:
        return self._state.result is not None

    @property
    def question_count(self) -> int:
        return self._quiz.question_count if self._quiz is not None else 0

    def initialize(self, quiz: QuizContent, persisted_answers: dict[int, int] | None = None) -> None:
        self._quiz = quiz
        self._state = AttemptState(answers=dict(persisted_answers or {}))

    def select_answer(self, question_index: int, option_index: int) -> bool:
        """Record an answer. Returns False when the attempt is already scored."""
        quiz = self._require_quiz()
        if self.is_scored:
            return False
        if not 0 <= question_index < quiz.question_count:
            raise ValueError(f"Question index {question_index} out of range")
        option_count = quiz.questions[question_index].option_count
        if not 0 <= option_index < option_count:
            raise ValueError(
                f"Option index {option_index} out of range for question {question_index}"
            )
        self._state.answers[question_index] = option_index
        return True

    def go_to(self, direction: Direction) -> bool:
        """Move one question back or forward. Returns whether the index changed."""
        self._require_quiz()
        if self.is_scored:
            return False
        if direction is Direction.PREVIOUS:
            if self._state.current_index == 0:
                return False
            self._state.current_index -= 1
            return True
        if not self.can_advance:
            return False
        self._state.current_index += 1
        return True

    @property
    def can_advance(self) -> bool:
        return (
            not self.is_scored
            and not self.is_last_question
            and self._state.current_index in self._state.answers
        )

    @property
    def is_last_question(self) -> bool:
        return self._state.current_index >= self.question_count - 1

    @property
    def can_submit(self) -> bool:
        """Whether the submit affordance is offered; the engine itself does not gate on it."""
        return (
            not self.is_scored
            and self.is_last_question
            and (self.question_count == 0 or self._state.current_index in self._state.answers)
        )

    def finalize(self, result: AttemptResult) -> bool:
        if self.is_scored:
            return False
        self._state.result = result
        return True

    def reset(self) -> None:
        self._state = AttemptState()

    def _require_quiz(self) -> QuizContent:
        if self._quiz is None:
            raise RuntimeError("No quiz is open.")
        return self._quiz
