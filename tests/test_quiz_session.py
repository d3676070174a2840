import logging

import pytest

from training_quiz.core.models import QuizContent, TrainingResource
from training_quiz.core.quiz_session import QuizSession
from training_quiz.core.services.answer_store import AnswerStoreError, InMemoryAnswerStore
from training_quiz.core.services.scorer import score_attempt

from conftest import SAMPLE_CORRECT_ANSWERS, ManualTickScheduler, RecordingReporter, answer_all

KEY = "quiz-progress-user1-res6"


class FailingAnswerStore:
    def load(self, key):
        raise AnswerStoreError("disk unavailable")

    def save(self, key, answers):
        raise AnswerStoreError("disk unavailable")

    def delete(self, key):
        raise AnswerStoreError("disk unavailable")


class ExplodingReporter:
    def mark_complete(self, user_id, resource_id):
        raise RuntimeError("ledger offline")


def test_open_quiz_starts_countdown(session, scheduler, quiz_resource):
    snapshot = session.open_resource(quiz_resource)

    assert session.has_open_quiz
    assert snapshot.resource_id == "res6"
    assert snapshot.current_index == 0
    assert snapshot.remaining_seconds == 300
    assert snapshot.question_count == 5
    assert snapshot.result is None
    assert not snapshot.can_submit
    assert len(scheduler.active_handles) == 1


def test_opening_a_non_quiz_resource_runs_no_timer(session, scheduler, catalog):
    snapshot = session.open_resource(catalog.find_resource("res1"))

    assert not session.has_open_quiz
    assert snapshot.resource_id is None
    assert snapshot.remaining_seconds is None
    assert scheduler.handles == []


def test_operations_need_an_open_quiz(session):
    with pytest.raises(RuntimeError):
        session.select_answer(0, 0)
    with pytest.raises(RuntimeError):
        session.submit()
    with pytest.raises(RuntimeError):
        session.go_next()


def test_answers_are_saved_as_they_are_selected(session, answer_store, quiz_resource):
    session.open_resource(quiz_resource)

    session.select_answer(0, 1)
    session.go_next()
    session.select_answer(1, 3)

    assert answer_store.load(KEY) == {0: 1, 1: 3}


def test_resume_restores_answers_but_not_position(session, scheduler, quiz_resource):
    session.open_resource(quiz_resource)
    session.select_answer(0, 1)
    session.go_next()
    session.select_answer(1, 1)
    scheduler.tick(30)

    session.close()
    assert scheduler.active_handles == []
    snapshot = session.open_resource(quiz_resource)

    assert snapshot.answers == {0: 1, 1: 1}
    assert snapshot.current_index == 0
    assert snapshot.result is None
    assert snapshot.remaining_seconds == 300


def test_reopening_replaces_the_previous_countdown(session, scheduler, quiz_resource):
    session.open_resource(quiz_resource)
    session.open_resource(quiz_resource)

    assert len(scheduler.handles) == 2
    assert len(scheduler.active_handles) == 1


def test_saved_answers_that_do_not_fit_the_quiz_are_dropped(session, answer_store, quiz_resource, caplog):
    answer_store.save(KEY, {0: 1, 1: 9, 12: 0})

    with caplog.at_level(logging.WARNING):
        snapshot = session.open_resource(quiz_resource)

    assert snapshot.answers == {0: 1}
    assert "no longer match" in caplog.text


def test_submit_is_idempotent(scheduler, answer_store, quiz_resource):
    reporter = RecordingReporter()
    session = QuizSession("user1", scheduler=scheduler, answer_store=answer_store, progress_reporter=reporter)
    submitted = []
    session.add_submission_listener(submitted.append)
    session.open_resource(quiz_resource)
    answer_all(session, SAMPLE_CORRECT_ANSWERS)

    first = session.submit()
    second = session.submit()

    assert first.newly_submitted
    assert not second.newly_submitted
    assert second.result is first.result
    assert first.result.score == pytest.approx(100.0)
    assert reporter.calls == [("user1", "res6")]
    assert len(submitted) == 1
    assert answer_store.load(KEY) is None
    assert scheduler.active_handles == []


def test_scored_attempt_rejects_changes(session, quiz_resource):
    session.open_resource(quiz_resource)
    session.select_answer(0, 1)
    session.submit()

    assert session.select_answer(0, 2) is False
    assert session.go_previous() is False
    assert session.snapshot().answers == {0: 1}


def test_failed_attempt_is_not_reported(scheduler, quiz_resource):
    reporter = RecordingReporter()
    session = QuizSession("user1", scheduler=scheduler, progress_reporter=reporter)
    session.open_resource(quiz_resource)
    answer_all(session, {0: 1, 1: 1, 2: 1, 3: 0, 4: 0})

    outcome = session.submit()

    assert outcome.result.score == pytest.approx(60.0)
    assert not outcome.result.passed
    assert reporter.calls == []


def test_expiry_scores_like_a_manual_submit(scheduler, quiz_resource):
    answers = {0: 1, 1: 0}
    reporter = RecordingReporter()
    session = QuizSession("user1", scheduler=scheduler, progress_reporter=reporter)
    submitted = []
    session.add_submission_listener(submitted.append)
    session.open_resource(quiz_resource)
    answer_all(session, answers)

    scheduler.tick(299)
    assert session.snapshot().result is None
    scheduler.tick(50)

    assert len(submitted) == 1
    assert submitted[0].result == score_attempt(quiz_resource.quiz, answers)
    assert session.snapshot().result.correct_count == 1
    assert reporter.calls == []
    assert scheduler.active_handles == []


def test_expiry_with_full_marks_reports_completion(session, scheduler, ledger, quiz_resource):
    session.open_resource(quiz_resource)
    answer_all(session, SAMPLE_CORRECT_ANSWERS)

    scheduler.tick(300)

    assert session.snapshot().result.passed
    assert ledger.is_resource_complete("user1", "res6")


def test_listeners_see_each_tick(session, scheduler, quiz_resource):
    remaining = []
    session.add_listener(lambda snapshot: remaining.append(snapshot.remaining_seconds))
    session.open_resource(quiz_resource)

    scheduler.tick(3)

    assert remaining == [300, 299, 298, 297]


def test_retake_clears_answers_result_and_storage(session, scheduler, answer_store, quiz_resource):
    session.open_resource(quiz_resource)
    session.select_answer(0, 1)
    session.submit()
    answer_store.save(KEY, {0: 3})

    snapshot = session.retake()

    assert snapshot.answers == {}
    assert snapshot.result is None
    assert snapshot.current_index == 0
    assert snapshot.remaining_seconds == 300
    assert answer_store.load(KEY) is None
    assert len(scheduler.active_handles) == 1


def test_reopening_after_submit_starts_fresh(session, quiz_resource):
    session.open_resource(quiz_resource)
    session.select_answer(0, 1)
    session.submit()

    snapshot = session.open_resource(quiz_resource)

    assert snapshot.result is None
    assert snapshot.answers == {}


def test_store_failures_do_not_break_the_attempt(scheduler, quiz_resource, caplog):
    session = QuizSession("user1", scheduler=scheduler, answer_store=FailingAnswerStore())

    with caplog.at_level(logging.WARNING):
        session.open_resource(quiz_resource)
        assert session.select_answer(0, 1)
        outcome = session.submit()

    assert outcome.result.correct_count == 1
    assert "disk unavailable" in caplog.text


def test_session_without_store_keeps_answers_in_memory(scheduler, quiz_resource):
    session = QuizSession("user1", scheduler=scheduler)
    session.open_resource(quiz_resource)
    session.select_answer(0, 1)

    assert session.snapshot().answers == {0: 1}
    session.close()
    assert session.open_resource(quiz_resource).answers == {}


def test_reporter_failure_keeps_the_score(scheduler, quiz_resource, caplog):
    session = QuizSession("user1", scheduler=scheduler, progress_reporter=ExplodingReporter())
    session.open_resource(quiz_resource)
    answer_all(session, SAMPLE_CORRECT_ANSWERS)

    with caplog.at_level(logging.ERROR):
        outcome = session.submit()

    assert outcome.result.passed
    assert outcome.certificate_module_id is None
    assert session.snapshot().result is outcome.result
    assert "Progress reporter failed" in caplog.text


def test_passing_the_last_resource_unlocks_certificate(session, ledger, catalog, quiz_resource):
    for resource_id in catalog.get_module("mod1").resource_ids:
        if resource_id != "res6":
            ledger.mark_complete("user1", resource_id)
    session.open_resource(quiz_resource)
    answer_all(session, SAMPLE_CORRECT_ANSWERS)

    outcome = session.submit()

    assert outcome.certificate_module_id == "mod1"
    assert ledger.is_certificate_eligible("user1", "mod1")

    session.retake()
    answer_all(session, SAMPLE_CORRECT_ANSWERS)
    assert session.submit().certificate_module_id is None


def test_empty_quiz_submits_with_zero_score():
    scheduler = ManualTickScheduler()
    resource = TrainingResource("empty", "Empty quiz", "quiz", "1 min quiz", QuizContent())
    session = QuizSession("user1", scheduler=scheduler, answer_store=InMemoryAnswerStore())

    snapshot = session.open_resource(resource)
    assert snapshot.can_submit
    assert snapshot.remaining_seconds == 60

    outcome = session.submit()
    assert outcome.result.score == 0.0
    assert not outcome.result.passed


class BrokenDiskStore:
    def load(self, key):
        raise PermissionError("permission denied")

    def save(self, key, answers):
        raise OSError("disk full")

    def delete(self, key):
        raise PermissionError("permission denied")


def test_unexpected_store_errors_never_lose_the_score(scheduler, quiz_resource, caplog):
    reporter = RecordingReporter()
    session = QuizSession("user1", scheduler=scheduler, answer_store=BrokenDiskStore(), progress_reporter=reporter)
    snapshots = []
    session.add_listener(snapshots.append)

    with caplog.at_level(logging.ERROR):
        assert session.open_resource(quiz_resource).answers == {}
        answer_all(session, SAMPLE_CORRECT_ANSWERS)
        scheduler.tick(300)

    result = session.snapshot().result
    assert result is not None
    assert result.passed
    assert reporter.calls == [("user1", "res6")]
    assert snapshots[-1].result is result
    assert "Answer store failed clearing res6" in caplog.text
