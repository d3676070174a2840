"""Locations and key formats for persisted quiz progress."""

import os
from pathlib import Path

STORAGE_KEY_TEMPLATE: str = "quiz-progress-{user_id}-{resource_id}"
PROGRESS_FILE_ENV_VAR: str = "TRAINING_QUIZ_PROGRESS_FILE"
DEFAULT_PROGRESS_FILE: Path = Path(
    os.environ.get(PROGRESS_FILE_ENV_VAR, Path.home() / ".training_quiz" / "quiz_progress.json")
)
