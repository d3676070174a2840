"""Completion tracking boundary between the quiz engine and the training ledger."""

from __future__ import annotations

from typing import Protocol

from training_quiz.constants.quiz_constants import COMPLETED_STATUS
from training_quiz.core.catalog import TrainingCatalog


class ProgressReporter(Protocol):
    def mark_complete(self, user_id: str, resource_id: str) -> None: ...


class CompletionView(Protocol):
    def is_module_complete(self, user_id: str, module_id: str) -> bool: ...


class TrainingProgressLedger:
    """In-memory record of which resources each user has completed.

    Marking a resource complete twice is harmless. Module and overall
    percentages are derived from the catalog on every call.
    """

    def __init__(
        self,
        catalog: TrainingCatalog,
        progress: dict[str, dict[str, str]] | None = None,
    ) -> None:
        self._catalog = catalog
        self._progress: dict[str, dict[str, str]] = {
            user_id: dict(entries) for user_id, entries in (progress or {}).items()
        }

    def mark_complete(self, user_id: str, resource_id: str) -> None:
        self._catalog.find_resource(resource_id)
        self._progress.setdefault(user_id, {})[resource_id] = COMPLETED_STATUS

    def is_resource_complete(self, user_id: str, resource_id: str) -> bool:
        return self._progress.get(user_id, {}).get(resource_id) == COMPLETED_STATUS

    def completed_resource_ids(self, user_id: str) -> list[str]:
        return sorted(
            resource_id
            for resource_id, status in self._progress.get(user_id, {}).items()
            if status == COMPLETED_STATUS
        )

    def module_progress(self, user_id: str, module_id: str) -> float:
        module = self._catalog.get_module(module_id)
        if not module.resources:
            return 0.0
        completed = sum(1 for rid in module.resource_ids if self.is_resource_complete(user_id, rid))
        return completed / len(module.resources) * 100

    def overall_progress(self, user_id: str) -> float:
        total = self._catalog.total_resource_count()
        if total == 0:
            return 0.0
        return len(self.completed_resource_ids(user_id)) / total * 100

    def is_module_complete(self, user_id: str, module_id: str) -> bool:
        return self.module_progress(user_id, module_id) >= 100

    def is_certificate_eligible(self, user_id: str, module_id: str) -> bool:
        return self.is_module_complete(user_id, module_id)

    def snapshot(self, user_id: str) -> dict[str, str]:
        return dict(self._progress.get(user_id, {}))
