"""Keyed storage for in-progress quiz answers.

Only the answers map is persisted, never the current question or the result.
On the wire the map is JSON with string question indices, e.g. ``{"0": 1}``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

from training_quiz.constants.storage_constants import STORAGE_KEY_TEMPLATE

logger = logging.getLogger(__name__)


class AnswerStoreError(Exception):
    """Raised when an answer store cannot read or write its backing storage."""


class AnswerStore(Protocol):
    def load(self, key: str) -> dict[int, int] | None: ...

    def save(self, key: str, answers: dict[int, int]) -> None: ...

    def delete(self, key: str) -> None: ...


def storage_key(user_id: str, resource_id: str) -> str:
    return STORAGE_KEY_TEMPLATE.format(user_id=user_id, resource_id=resource_id)


def encode_answers(answers: dict[int, int]) -> dict[str, int]:
    return {str(question_index): option_index for question_index, option_index in sorted(answers.items())}


def decode_answers(payload: object) -> dict[int, int]:
    """Convert a persisted payload back into an answers map.

    Raises:
        ValueError: If the payload is not a mapping of integer indices.
    """
    if not isinstance(payload, dict):
        raise ValueError(f"Expected an object of answers, got {type(payload).__name__}.")
    answers: dict[int, int] = {}
    for raw_key, raw_value in payload.items():
        if isinstance(raw_value, bool) or not isinstance(raw_value, int):
            raise ValueError(f"Answer for question {raw_key!r} is not an option index.")
        answers[int(raw_key)] = raw_value
    return answers


class InMemoryAnswerStore:
    """Process-local store; values are copied so callers cannot alias them."""

    def __init__(self) -> None:
        self._entries: dict[str, dict[str, int]] = {}

    def load(self, key: str) -> dict[int, int] | None:
        payload = self._entries.get(key)
        if payload is None:
            return None
        return decode_answers(payload)

    def save(self, key: str, answers: dict[int, int]) -> None:
        self._entries[key] = encode_answers(answers)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._entries)


class JsonFileAnswerStore:
    """Single JSON document holding every key, rewritten on each change.

    Last write wins when several processes share the file.
    """

    def __init__(self, file_path: Path) -> None:
        self._file_path = Path(file_path)

    @property
    def file_path(self) -> Path:
        return self._file_path

    def load(self, key: str) -> dict[int, int] | None:
        entries = self._read_entries()
        if key not in entries:
            return None
        try:
            return decode_answers(entries[key])
        except ValueError:
            logger.warning("Discarding malformed progress record %s", key)
            entries.pop(key)
            self._write_entries(entries)
            return None

    def save(self, key: str, answers: dict[int, int]) -> None:
        entries = self._read_entries()
        entries[key] = encode_answers(answers)
        self._write_entries(entries)

    def delete(self, key: str) -> None:
        entries = self._read_entries()
        if entries.pop(key, None) is not None:
            self._write_entries(entries)

    def _read_entries(self) -> dict[str, object]:
        try:
            if not self._file_path.exists():
                return {}
            document = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise AnswerStoreError(f"Unable to read {self._file_path}: {exc}") from exc
        if not isinstance(document, dict):
            raise AnswerStoreError(f"{self._file_path} does not contain a JSON object.")
        return document

    def _write_entries(self, entries: dict[str, object]) -> None:
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            temp_path = self._file_path.with_suffix(self._file_path.suffix + ".tmp")
            temp_path.write_text(json.dumps(entries, indent=2, sort_keys=True), encoding="utf-8")
            temp_path.replace(self._file_path)
        except OSError as exc:
            raise AnswerStoreError(f"Unable to write {self._file_path}: {exc}") from exc
