import pytest

from training_quiz.core.models import QuizContent
from training_quiz.core.services.scorer import score_attempt

from conftest import SAMPLE_CORRECT_ANSWERS


def test_three_of_five_fails(quiz_resource):
    answers = {0: 1, 1: 1, 2: 1, 3: 0, 4: 0}

    result = score_attempt(quiz_resource.quiz, answers)

    assert result.correct_count == 3
    assert result.total_count == 5
    assert result.score == pytest.approx(60.0)
    assert not result.passed


def test_all_correct_passes(quiz_resource):
    result = score_attempt(quiz_resource.quiz, SAMPLE_CORRECT_ANSWERS)

    assert result.score == pytest.approx(100.0)
    assert result.passed
    assert all(review.is_correct for review in result.reviews)


def test_wrong_and_unanswered_questions_both_count_against_score(quiz_resource):
    answers = {0: 1, 1: 1, 2: 0, 3: 2}

    result = score_attempt(quiz_resource.quiz, answers)

    assert result.correct_count == 3
    assert result.score == pytest.approx(60.0)
    assert not result.passed
    assert [review.is_correct for review in result.reviews] == [True, True, False, True, False]
    assert result.reviews[2].selected_option_index == 0
    assert result.reviews[4].selected_option_index is None


def test_four_of_five_meets_threshold(quiz_resource):
    answers = dict(SAMPLE_CORRECT_ANSWERS)
    answers[4] = 0

    result = score_attempt(quiz_resource.quiz, answers)

    assert result.score == pytest.approx(80.0)
    assert result.passed


def test_unanswered_questions_count_as_incorrect(quiz_resource):
    result = score_attempt(quiz_resource.quiz, {0: 1})

    assert result.correct_count == 1
    assert result.reviews[1].selected_option_index is None
    assert not result.reviews[1].is_correct


def test_empty_quiz_scores_zero():
    result = score_attempt(QuizContent(), {})

    assert result.score == 0.0
    assert result.total_count == 0
    assert not result.passed
