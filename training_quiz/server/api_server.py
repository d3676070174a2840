"""FastAPI server exposing the quiz engine to browser learners.

Every endpoint is ``async`` so that requests and countdown ticks all run on
the event loop thread; the quiz sessions are never touched concurrently.
"""

from __future__ import annotations

import logging
from typing import Callable

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel
import uvicorn

from training_quiz.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from training_quiz.core.catalog import TrainingCatalog
from training_quiz.core.models import AttemptResult, AttemptSnapshot, TrainingResource
from training_quiz.core.prompt_renderer import renderer
from training_quiz.core.quiz_session import QuizSession
from training_quiz.core.scheduling import AsyncioTickScheduler, TickScheduler
from training_quiz.core.services.answer_store import AnswerStore, InMemoryAnswerStore
from training_quiz.core.services.attempt_store import Direction
from training_quiz.core.services.progress import TrainingProgressLedger

logger = logging.getLogger(__name__)


class AnswerPayload(BaseModel):
    """Payload schema for a selected option."""

    question_index: int
    option_index: int


class NavigatePayload(BaseModel):
    """Payload schema for moving between questions."""

    direction: Direction


class SessionRegistry:
    """One quiz session per user, created on first use and dropped when the quiz is closed."""

    def __init__(
        self,
        catalog: TrainingCatalog,
        ledger: TrainingProgressLedger,
        answer_store: AnswerStore | None,
        scheduler_factory: Callable[[], TickScheduler],
    ) -> None:
        self.catalog = catalog
        self.ledger = ledger
        self._answer_store = answer_store
        self._scheduler_factory = scheduler_factory
        self._sessions: dict[str, QuizSession] = {}

    def get(self, user_id: str) -> QuizSession:
        session = self._sessions.get(user_id)
        if session is None:
            session = QuizSession(
                user_id,
                scheduler=self._scheduler_factory(),
                answer_store=self._answer_store,
                progress_reporter=self.ledger,
                completion_view=self.ledger,
                catalog=self.catalog,
            )
            self._sessions[user_id] = session
        return session

    def discard(self, user_id: str) -> None:
        session = self._sessions.pop(user_id, None)
        if session is not None:
            session.close()

    def get_open(self, user_id: str) -> QuizSession:
        session = self._sessions.get(user_id)
        if session is None or not session.has_open_quiz:
            raise HTTPException(status_code=409, detail="No quiz is open.")
        return session


def _serialize_result(result: AttemptResult | None) -> dict[str, object] | None:
    if result is None:
        return None
    return {
        "score": result.score,
        "correct_count": result.correct_count,
        "total_count": result.total_count,
        "passed": result.passed,
        "reviews": [
            {
                "question_index": review.question_index,
                "selected_option_index": review.selected_option_index,
                "correct_option_index": review.correct_option_index,
                "is_correct": review.is_correct,
            }
            for review in result.reviews
        ],
    }


def _serialize_snapshot(snapshot: AttemptSnapshot, resource: TrainingResource | None) -> dict[str, object]:
    question = None
    if resource is not None and snapshot.result is None and snapshot.question_count > 0:
        current = resource.quiz.questions[snapshot.current_index]
        question = {
            "prompt_html": renderer.render_fragment(current.prompt),
            "options": list(current.options),
        }
    return {
        "resource_id": snapshot.resource_id,
        "current_index": snapshot.current_index,
        "question_count": snapshot.question_count,
        "answers": {str(index): option for index, option in sorted(snapshot.answers.items())},
        "remaining_seconds": snapshot.remaining_seconds,
        "can_submit": snapshot.can_submit,
        "question": question,
        "result": _serialize_result(snapshot.result),
    }


def create_api_app(
    catalog: TrainingCatalog,
    ledger: TrainingProgressLedger | None = None,
    answer_store: AnswerStore | None = None,
    scheduler_factory: Callable[[], TickScheduler] = AsyncioTickScheduler,
) -> FastAPI:
    """Create a FastAPI application wired to the provided catalog and ledger."""
    app = FastAPI(title="Training Quiz API", version="0.1.0")
    registry = SessionRegistry(
        catalog=catalog,
        ledger=ledger or TrainingProgressLedger(catalog),
        answer_store=answer_store if answer_store is not None else InMemoryAnswerStore(),
        scheduler_factory=scheduler_factory,
    )
    app.state.registry = registry

    def get_registry() -> SessionRegistry:
        return registry

    @app.get("/catalog")
    async def get_catalog(reg: SessionRegistry = Depends(get_registry)) -> list[dict[str, object]]:
        return [
            {
                "id": module.id,
                "title": module.title,
                "category": module.category,
                "resources": [
                    {
                        "id": resource.id,
                        "title": resource.title,
                        "type": resource.resource_type,
                        "duration": resource.duration,
                        "time_allowance_seconds": resource.time_allowance_seconds(),
                    }
                    for resource in module.resources
                ],
            }
            for module in reg.catalog.get_modules()
        ]

    @app.get("/users/{user_id}/progress")
    async def get_progress(user_id: str, reg: SessionRegistry = Depends(get_registry)) -> dict[str, object]:
        return {
            "user_id": user_id,
            "completed_resource_ids": reg.ledger.completed_resource_ids(user_id),
            "overall_progress": reg.ledger.overall_progress(user_id),
            "modules": [
                {
                    "id": module.id,
                    "progress": reg.ledger.module_progress(user_id, module.id),
                    "certificate_eligible": reg.ledger.is_certificate_eligible(user_id, module.id),
                }
                for module in reg.catalog.get_modules()
            ],
        }

    @app.post("/users/{user_id}/quiz/{resource_id}/open")
    async def open_quiz(
        user_id: str,
        resource_id: str,
        reg: SessionRegistry = Depends(get_registry),
    ) -> dict[str, object]:
        try:
            resource = reg.catalog.find_resource(resource_id)
        except LookupError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        if not resource.is_quiz:
            raise HTTPException(status_code=422, detail=f"Resource {resource_id!r} is not a quiz.")
        session = reg.get(user_id)
        snapshot = session.open_resource(resource)
        return _serialize_snapshot(snapshot, session.resource)

    @app.get("/users/{user_id}/quiz")
    async def get_quiz(user_id: str, reg: SessionRegistry = Depends(get_registry)) -> dict[str, object]:
        session = reg.get_open(user_id)
        return _serialize_snapshot(session.snapshot(), session.resource)

    @app.post("/users/{user_id}/quiz/answer")
    async def select_answer(
        user_id: str,
        payload: AnswerPayload,
        reg: SessionRegistry = Depends(get_registry),
    ) -> dict[str, object]:
        session = reg.get_open(user_id)
        try:
            accepted = session.select_answer(payload.question_index, payload.option_index)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return {"accepted": accepted, **_serialize_snapshot(session.snapshot(), session.resource)}

    @app.post("/users/{user_id}/quiz/navigate")
    async def navigate(
        user_id: str,
        payload: NavigatePayload,
        reg: SessionRegistry = Depends(get_registry),
    ) -> dict[str, object]:
        session = reg.get_open(user_id)
        moved = session.navigate(payload.direction)
        return {"moved": moved, **_serialize_snapshot(session.snapshot(), session.resource)}

    @app.post("/users/{user_id}/quiz/submit")
    async def submit(user_id: str, reg: SessionRegistry = Depends(get_registry)) -> dict[str, object]:
        session = reg.get_open(user_id)
        outcome = session.submit()
        return {
            "newly_submitted": outcome.newly_submitted,
            "certificate_module_id": outcome.certificate_module_id,
            "result": _serialize_result(outcome.result),
        }

    @app.post("/users/{user_id}/quiz/retake")
    async def retake(user_id: str, reg: SessionRegistry = Depends(get_registry)) -> dict[str, object]:
        session = reg.get_open(user_id)
        return _serialize_snapshot(session.retake(), session.resource)

    @app.post("/users/{user_id}/quiz/close", status_code=204)
    async def close(user_id: str, reg: SessionRegistry = Depends(get_registry)) -> None:
        reg.get_open(user_id)
        reg.discard(user_id)

    return app


def run_api_server(
    catalog: TrainingCatalog,
    ledger: TrainingProgressLedger | None = None,
    answer_store: AnswerStore | None = None,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> None:
    """Serve the learner API in the foreground until interrupted."""
    app = create_api_app(catalog, ledger=ledger, answer_store=answer_store)
    logger.info("Serving learner API on %s:%d", host, port)
    uvicorn.run(app, host=host, port=port, log_level="info")
