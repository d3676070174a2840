"""Application entry point for the training quiz console."""

from __future__ import annotations

import argparse
from pathlib import Path
import sys

from PySide6.QtWidgets import QApplication

from training_quiz.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from training_quiz.constants.storage_constants import DEFAULT_PROGRESS_FILE
from training_quiz.constants.ui_constants import DEFAULT_USER_ID
from training_quiz.core.catalog import build_sample_catalog
from training_quiz.core.quiz_importer import load_quiz_from_file
from training_quiz.core.quiz_session import QuizSession
from training_quiz.core.scheduling import QtTickScheduler
from training_quiz.core.services.answer_store import JsonFileAnswerStore
from training_quiz.core.services.progress import TrainingProgressLedger
from training_quiz.server.api_server import run_api_server
from training_quiz.ui.training_main_window import TrainingMainWindow
from training_quiz.utils.logging_config import configure_logging


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Timed training quizzes with resumable attempts.")
    parser.add_argument("--user", default=DEFAULT_USER_ID, help="learner id for the desktop console")
    parser.add_argument(
        "--progress-file",
        type=Path,
        default=DEFAULT_PROGRESS_FILE,
        help="JSON file holding in-progress answers",
    )
    parser.add_argument("--quiz-file", type=Path, help="question bank replacing the built-in final assessment")
    parser.add_argument("--serve", action="store_true", help="run the learner API instead of the Qt UI")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Initialize logging, then launch either the API server or the Qt UI."""
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    logger = configure_logging()

    final_assessment = load_quiz_from_file(args.quiz_file) if args.quiz_file else None
    catalog = build_sample_catalog(final_assessment)
    ledger = TrainingProgressLedger(catalog)
    answer_store = JsonFileAnswerStore(args.progress_file)
    logger.info("Saving quiz progress to %s", answer_store.file_path)

    if args.serve:
        run_api_server(catalog, ledger=ledger, answer_store=answer_store, host=args.host, port=args.port)
        return

    app = QApplication(sys.argv)
    session = QuizSession(
        args.user,
        scheduler=QtTickScheduler(app),
        answer_store=answer_store,
        progress_reporter=ledger,
        completion_view=ledger,
        catalog=catalog,
    )
    window = TrainingMainWindow(session=session, catalog=catalog, ledger=ledger)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
