"""Helper functions for common dialog patterns in the learner UI."""

from __future__ import annotations

from PySide6.QtWidgets import QMessageBox, QWidget


def confirm_retake_quiz(parent: QWidget) -> bool:
    """Ask before discarding the previous result.

    Returns:
        True if the user confirmed, False otherwise
    """
    reply = QMessageBox.question(
        parent,
        "Retake Quiz",
        "Retaking the quiz clears your previous answers. Continue?",
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No,
    )
    return reply == QMessageBox.Yes


def show_info(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.information(parent, title, message)
