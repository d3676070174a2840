from __future__ import annotations

import os
from typing import Callable

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from training_quiz.core.catalog import build_sample_catalog
from training_quiz.core.quiz_session import QuizSession
from training_quiz.core.services.answer_store import InMemoryAnswerStore
from training_quiz.core.services.progress import TrainingProgressLedger

SAMPLE_CORRECT_ANSWERS = {0: 1, 1: 1, 2: 1, 3: 2, 4: 2}


class ManualTickHandle:
    def __init__(self, interval_ms: int, callback: Callable[[], None]) -> None:
        self.interval_ms = interval_ms
        self.callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        self._active = False


class ManualTickScheduler:
    """Test scheduler whose ticks only happen when the test calls ``tick``."""

    def __init__(self) -> None:
        self.handles: list[ManualTickHandle] = []

    def schedule_repeating(self, interval_ms: int, callback: Callable[[], None]) -> ManualTickHandle:
        handle = ManualTickHandle(interval_ms, callback)
        self.handles.append(handle)
        return handle

    @property
    def active_handles(self) -> list[ManualTickHandle]:
        return [handle for handle in self.handles if handle.active]

    def tick(self, count: int = 1) -> None:
        for _ in range(count):
            for handle in self.active_handles:
                handle.callback()


class RecordingReporter:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    def mark_complete(self, user_id: str, resource_id: str) -> None:
        self.calls.append((user_id, resource_id))


@pytest.fixture(scope="session")
def qt_app():
    from PySide6.QtWidgets import QApplication

    return QApplication.instance() or QApplication([])


@pytest.fixture
def scheduler() -> ManualTickScheduler:
    return ManualTickScheduler()


@pytest.fixture
def catalog():
    return build_sample_catalog()


@pytest.fixture
def quiz_resource(catalog):
    return catalog.find_resource("res6")


@pytest.fixture
def answer_store() -> InMemoryAnswerStore:
    return InMemoryAnswerStore()


@pytest.fixture
def ledger(catalog) -> TrainingProgressLedger:
    return TrainingProgressLedger(catalog)


@pytest.fixture
def session(scheduler, answer_store, ledger, catalog) -> QuizSession:
    return QuizSession(
        "user1",
        scheduler=scheduler,
        answer_store=answer_store,
        progress_reporter=ledger,
        completion_view=ledger,
        catalog=catalog,
    )


def answer_all(session: QuizSession, answers: dict[int, int]) -> None:
    """Answer questions in order, moving forward after each one."""
    for question_index in sorted(answers):
        session.select_answer(question_index, answers[question_index])
        session.go_next()
