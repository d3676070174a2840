"""Facade running one user's timed quiz attempt.

Lifecycle of an attempt::

    open_resource -> select_answer / go_previous / go_next ...
                  -> submit (manual or countdown expiry) -> retake -> ...

Only one resource is open at a time; opening another one (or the same one
again) tears down the previous countdown before anything else happens.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable

from training_quiz.core.catalog import TrainingCatalog
from training_quiz.core.models import AttemptResult, AttemptSnapshot, TrainingResource
from training_quiz.core.scheduling import TickScheduler
from training_quiz.core.services.answer_store import AnswerStore, AnswerStoreError, storage_key
from training_quiz.core.services.attempt_store import AttemptStateStore, Direction
from training_quiz.core.services.countdown import CountdownTimer
from training_quiz.core.services.progress import CompletionView, ProgressReporter
from training_quiz.core.services.scorer import score_attempt

logger = logging.getLogger(__name__)

SessionListener = Callable[[AttemptSnapshot], None]
SubmissionListener = Callable[["SubmissionOutcome"], None]


@dataclass(frozen=True, slots=True)
class SubmissionOutcome:
    """What a submit call produced.

    ``newly_submitted`` is False when the attempt had already been scored.
    ``certificate_module_id`` names the module this pass brought to 100%.
    """

    result: AttemptResult
    newly_submitted: bool
    certificate_module_id: str | None = None


class QuizSession:
    """Owns the attempt state and countdown of the quiz a user has open."""

    def __init__(
        self,
        user_id: str,
        scheduler: TickScheduler,
        answer_store: AnswerStore | None = None,
        progress_reporter: ProgressReporter | None = None,
        completion_view: CompletionView | None = None,
        catalog: TrainingCatalog | None = None,
    ) -> None:
        self.user_id = user_id
        self._answer_store = answer_store
        self._progress_reporter = progress_reporter
        self._completion_view = completion_view
        self._catalog = catalog
        self._store = AttemptStateStore()
        self._resource: TrainingResource | None = None
        self._listeners: list[SessionListener] = []
        self._submission_listeners: list[SubmissionListener] = []
        self._countdown = CountdownTimer(
            scheduler,
            on_tick=self._handle_tick,
            on_expired=self._handle_expired,
        )

    # --- Resource lifecycle ---

    @property
    def resource(self) -> TrainingResource | None:
        return self._resource

    @property
    def has_open_quiz(self) -> bool:
        return self._resource is not None

    def open_resource(self, resource: TrainingResource) -> AttemptSnapshot:
        """Make ``resource`` the active one, resuming any saved answers."""
        self._countdown.stop()
        if not resource.is_quiz:
            self._resource = None
            self._notify()
            return self.snapshot()

        self._resource = resource
        persisted = self._load_persisted(resource)
        self._store.initialize(resource.quiz, persisted)
        logger.info(
            "User %s opened quiz %s (%d saved answers)",
            self.user_id,
            resource.id,
            len(persisted or {}),
        )
        self._start_countdown()
        self._notify()
        return self.snapshot()

    def close(self) -> None:
        """Navigate away: stop the countdown but keep saved answers for later."""
        self._countdown.stop()
        if self._resource is not None:
            logger.info("User %s left quiz %s", self.user_id, self._resource.id)
        self._resource = None
        self._notify()

    # --- Attempt operations ---

    def select_answer(self, question_index: int, option_index: int) -> bool:
        resource = self._require_resource()
        if not self._store.select_answer(question_index, option_index):
            return False
        self._save_answers(resource)
        self._notify()
        return True

    def go_previous(self) -> bool:
        return self._navigate(Direction.PREVIOUS)

    def go_next(self) -> bool:
        return self._navigate(Direction.NEXT)

    def navigate(self, direction: Direction) -> bool:
        return self._navigate(direction)

    def submit(self) -> SubmissionOutcome:
        """Score the attempt; repeated calls return the first result unchanged."""
        resource = self._require_resource()
        existing = self._store.state.result
        if existing is not None:
            return SubmissionOutcome(result=existing, newly_submitted=False)

        self._countdown.stop()
        self._delete_persisted(resource)
        result = score_attempt(resource.quiz, self._store.state.answers)
        self._store.finalize(result)
        logger.info(
            "User %s scored %.0f%% (%d/%d) on %s",
            self.user_id,
            result.score,
            result.correct_count,
            result.total_count,
            resource.id,
        )

        certificate_module_id = None
        if result.passed:
            certificate_module_id = self._report_completion(resource)
        outcome = SubmissionOutcome(
            result=result,
            newly_submitted=True,
            certificate_module_id=certificate_module_id,
        )
        self._notify()
        for listener in list(self._submission_listeners):
            listener(outcome)
        return outcome

    def retake(self) -> AttemptSnapshot:
        """Discard answers and result, both in memory and in storage, and restart the clock."""
        resource = self._require_resource()
        self._countdown.stop()
        self._delete_persisted(resource)
        self._store.reset()
        self._start_countdown()
        self._notify()
        return self.snapshot()

    # --- Rendering ---

    def snapshot(self) -> AttemptSnapshot:
        if self._resource is None:
            return AttemptSnapshot(
                resource_id=None,
                current_index=0,
                answers={},
                remaining_seconds=None,
                result=None,
                can_submit=False,
                question_count=0,
            )
        state = self._store.state
        return AttemptSnapshot(
            resource_id=self._resource.id,
            current_index=state.current_index,
            answers=dict(state.answers),
            remaining_seconds=self._countdown.remaining_seconds,
            result=state.result,
            can_submit=self._store.can_submit,
            question_count=self._store.question_count,
        )

    def add_listener(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: SessionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def add_submission_listener(self, listener: SubmissionListener) -> None:
        """Called once per scored attempt, whether submitted manually or on expiry."""
        self._submission_listeners.append(listener)

    # --- Internals ---

    def _navigate(self, direction: Direction) -> bool:
        self._require_resource()
        moved = self._store.go_to(direction)
        if moved:
            self._notify()
        return moved

    def _require_resource(self) -> TrainingResource:
        if self._resource is None:
            raise RuntimeError("No quiz is open.")
        return self._resource

    def _start_countdown(self) -> None:
        allowance = self._resource.time_allowance_seconds() if self._resource else None
        if allowance is not None and not self._store.is_scored:
            self._countdown.start(allowance)

    def _handle_tick(self, remaining_seconds: int) -> None:
        self._notify()

    def _handle_expired(self) -> None:
        if self._resource is None or self._store.is_scored:
            return
        logger.info("Time expired for user %s on %s", self.user_id, self._resource.id)
        self.submit()

    def _report_completion(self, resource: TrainingResource) -> str | None:
        if self._progress_reporter is None:
            return None
        module = self._catalog.module_for_resource(resource.id) if self._catalog else None
        was_complete = self._module_complete(module.id) if module else False
        try:
            self._progress_reporter.mark_complete(self.user_id, resource.id)
        except Exception:
            logger.exception("Progress reporter failed for %s/%s", self.user_id, resource.id)
            return None
        if module is not None and not was_complete and self._module_complete(module.id):
            logger.info("User %s completed module %s", self.user_id, module.id)
            return module.id
        return None

    def _module_complete(self, module_id: str) -> bool:
        if self._completion_view is None:
            return False
        return self._completion_view.is_module_complete(self.user_id, module_id)

    def _key(self, resource: TrainingResource) -> str:
        return storage_key(self.user_id, resource.id)

    def _load_persisted(self, resource: TrainingResource) -> dict[int, int] | None:
        if self._answer_store is None:
            return None
        try:
            answers = self._answer_store.load(self._key(resource))
        except (AnswerStoreError, ValueError) as exc:
            logger.warning("Could not load saved answers for %s: %s", resource.id, exc)
            return None
        except Exception:
            logger.exception("Answer store failed loading %s", resource.id)
            return None
        if answers is None:
            return None
        return self._valid_answers(resource, answers)

    @staticmethod
    def _valid_answers(resource: TrainingResource, answers: dict[int, int]) -> dict[int, int]:
        questions = resource.quiz.questions
        valid = {
            question_index: option_index
            for question_index, option_index in answers.items()
            if 0 <= question_index < len(questions)
            and 0 <= option_index < questions[question_index].option_count
        }
        if len(valid) != len(answers):
            logger.warning(
                "Dropped %d saved answers that no longer match quiz %s",
                len(answers) - len(valid),
                resource.id,
            )
        return valid

    def _save_answers(self, resource: TrainingResource) -> None:
        if self._answer_store is None:
            return
        try:
            self._answer_store.save(self._key(resource), dict(self._store.state.answers))
        except AnswerStoreError as exc:
            logger.warning("Could not save answers for %s: %s", resource.id, exc)
        except Exception:
            logger.exception("Answer store failed saving %s", resource.id)

    def _delete_persisted(self, resource: TrainingResource) -> None:
        if self._answer_store is None:
            return
        try:
            self._answer_store.delete(self._key(resource))
        except AnswerStoreError as exc:
            logger.warning("Could not clear saved answers for %s: %s", resource.id, exc)
        except Exception:
            logger.exception("Answer store failed clearing %s", resource.id)

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)
