"""Qt UI components for the learner application."""

from .components.quiz_panel import QuizPanel
from .dialog_helpers import confirm_retake_quiz, show_info
from .training_main_window import TrainingMainWindow

__all__ = [
    "QuizPanel",
    "TrainingMainWindow",
    "confirm_retake_quiz",
    "show_info",
]
