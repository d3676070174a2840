"""Pure scoring of a quiz attempt."""

from __future__ import annotations

from typing import Mapping

from training_quiz.core.models import AttemptResult, QuestionReview, QuizContent


def score_attempt(quiz: QuizContent, answers: Mapping[int, int]) -> AttemptResult:
    """Score the answers against the quiz.

    An unanswered question counts as incorrect. A quiz without questions
    scores 0 and therefore never passes.
    """
    reviews = tuple(
        QuestionReview(
            question_index=index,
            selected_option_index=answers.get(index),
            correct_option_index=question.correct_option_index,
            is_correct=answers.get(index) == question.correct_option_index,
        )
        for index, question in enumerate(quiz.questions)
    )
    correct_count = sum(1 for review in reviews if review.is_correct)
    total_count = len(reviews)
    score = correct_count / total_count * 100 if total_count > 0 else 0.0
    return AttemptResult(
        score=score,
        correct_count=correct_count,
        total_count=total_count,
        reviews=reviews,
    )
