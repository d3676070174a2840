"""Component rendering the open quiz attempt and forwarding learner input."""

from __future__ import annotations

import html

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QButtonGroup,
    QHBoxLayout,
    QLabel,
    QProgressBar,
    QPushButton,
    QRadioButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from training_quiz.constants.quiz_constants import TIME_LIMIT_TICKING_WINDOW_SECONDS
from training_quiz.constants.ui_constants import (
    BACK_BUTTON,
    FAILED_MESSAGE,
    NEXT_BUTTON,
    NO_QUESTIONS_MESSAGE,
    NOT_A_QUIZ_MESSAGE,
    PASSED_MESSAGE,
    QUESTION_HEADER_TEMPLATE,
    RESULT_HEADER,
    RESULT_TEMPLATE,
    RETAKE_BUTTON,
    SUBMIT_BUTTON,
    TIME_EXPIRED_TEXT,
    TIME_REMAINING_TEMPLATE,
)
from training_quiz.core.models import AttemptResult, AttemptSnapshot
from training_quiz.core.prompt_renderer import renderer
from training_quiz.core.quiz_session import QuizSession
from training_quiz.ui.dialog_helpers import confirm_retake_quiz


class QuizPanel(QWidget):
    """UI component for taking a timed quiz."""

    def __init__(
        self,
        session: QuizSession,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.session = session
        self._total_seconds: int | None = None
        self._rendered_key: tuple[str, int] | None = None

        self._build_ui()
        self.session.add_listener(self.render_snapshot)
        self.render_snapshot(self.session.snapshot())

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        self.stack = QStackedWidget(self)
        layout.addWidget(self.stack)

        self.placeholder_label = QLabel(NOT_A_QUIZ_MESSAGE, self)
        self.placeholder_label.setAlignment(Qt.AlignCenter)
        self.placeholder_label.setWordWrap(True)
        self.stack.addWidget(self.placeholder_label)

        self.stack.addWidget(self._build_question_page())
        self.stack.addWidget(self._build_result_page())

    def _build_question_page(self) -> QWidget:
        page = QWidget(self)
        layout = QVBoxLayout()
        page.setLayout(layout)

        header_row = QHBoxLayout()
        self.question_header = QLabel("", page)
        header_row.addWidget(self.question_header)
        header_row.addStretch()
        self.time_label = QLabel("", page)
        self.time_label.setStyleSheet("padding: 2px 6px; border-radius: 4px;")
        header_row.addWidget(self.time_label)
        layout.addLayout(header_row)

        self.time_progress = QProgressBar(page)
        self.time_progress.setRange(0, 1000)
        self.time_progress.setTextVisible(False)
        layout.addWidget(self.time_progress)

        self.prompt_label = QLabel("", page)
        self.prompt_label.setTextFormat(Qt.RichText)
        self.prompt_label.setWordWrap(True)
        layout.addWidget(self.prompt_label)

        self.options_layout = QVBoxLayout()
        layout.addLayout(self.options_layout)
        self.option_group = QButtonGroup(page)
        self.option_group.idClicked.connect(self._handle_option_clicked)
        self.option_buttons: list[QRadioButton] = []
        layout.addStretch()

        nav_row = QHBoxLayout()
        self.back_button = QPushButton(BACK_BUTTON, page)
        self.back_button.clicked.connect(lambda: self.session.go_previous())
        nav_row.addWidget(self.back_button)
        nav_row.addStretch()
        self.next_button = QPushButton(NEXT_BUTTON, page)
        self.next_button.clicked.connect(lambda: self.session.go_next())
        nav_row.addWidget(self.next_button)
        self.submit_button = QPushButton(SUBMIT_BUTTON, page)
        self.submit_button.clicked.connect(self._handle_submit)
        nav_row.addWidget(self.submit_button)
        layout.addLayout(nav_row)
        return page

    def _build_result_page(self) -> QWidget:
        page = QWidget(self)
        layout = QVBoxLayout()
        page.setLayout(layout)

        self.result_header = QLabel(RESULT_HEADER, page)
        self.result_header.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.result_header)
        self.result_label = QLabel("", page)
        self.result_label.setAlignment(Qt.AlignCenter)
        self.result_label.setWordWrap(True)
        layout.addWidget(self.result_label)
        self.review_label = QLabel("", page)
        self.review_label.setTextFormat(Qt.RichText)
        self.review_label.setWordWrap(True)
        layout.addWidget(self.review_label, stretch=1)

        self.retake_button = QPushButton(RETAKE_BUTTON, page)
        self.retake_button.clicked.connect(self._handle_retake)
        layout.addWidget(self.retake_button, alignment=Qt.AlignCenter)
        return page

    # --- Rendering ---

    def render_snapshot(self, snapshot: AttemptSnapshot) -> None:
        resource = self.session.resource
        if snapshot.resource_id is None or resource is None:
            self._rendered_key = None
            self.placeholder_label.setText(NOT_A_QUIZ_MESSAGE)
            self.stack.setCurrentIndex(0)
            return
        if snapshot.result is not None:
            self._show_result(snapshot.result)
            return
        self.stack.setCurrentIndex(1)
        key = (snapshot.resource_id, snapshot.current_index)
        if key != self._rendered_key:
            self._rendered_key = key
            self._total_seconds = resource.time_allowance_seconds()
            self._rebuild_options(snapshot)
        self._sync_selection(snapshot)
        self._update_time(snapshot.remaining_seconds)

        is_last = snapshot.current_index >= snapshot.question_count - 1
        answered = snapshot.current_index in snapshot.answers
        self.back_button.setEnabled(snapshot.current_index > 0)
        self.next_button.setVisible(not is_last)
        self.next_button.setEnabled(answered)
        self.submit_button.setVisible(is_last)
        self.submit_button.setEnabled(snapshot.can_submit)

    def _rebuild_options(self, snapshot: AttemptSnapshot) -> None:
        for button in self.option_buttons:
            self.option_group.removeButton(button)
            self.options_layout.removeWidget(button)
            button.deleteLater()
        self.option_buttons = []

        # An empty quiz keeps the page so it can still be submitted.
        if snapshot.question_count == 0:
            self.question_header.setText(NO_QUESTIONS_MESSAGE)
            self.prompt_label.setText("")
            return
        question = self.session.resource.quiz.questions[snapshot.current_index]
        self.question_header.setText(
            QUESTION_HEADER_TEMPLATE.format(
                number=snapshot.current_index + 1,
                total=snapshot.question_count,
            )
        )
        self.prompt_label.setText(renderer.render_fragment(question.prompt))
        for index, option in enumerate(question.options):
            button = QRadioButton(option, self)
            self.option_group.addButton(button, index)
            self.options_layout.addWidget(button)
            self.option_buttons.append(button)

    def _sync_selection(self, snapshot: AttemptSnapshot) -> None:
        selected = snapshot.answers.get(snapshot.current_index)
        for index, button in enumerate(self.option_buttons):
            button.blockSignals(True)
            button.setChecked(index == selected)
            button.blockSignals(False)

    def _update_time(self, remaining_seconds: int | None) -> None:
        if remaining_seconds is None or not self._total_seconds:
            self.time_label.setVisible(False)
            self.time_progress.setVisible(False)
            return
        self.time_label.setVisible(True)
        self.time_progress.setVisible(True)
        if remaining_seconds > 0:
            minutes, seconds = divmod(remaining_seconds, 60)
            self.time_label.setText(TIME_REMAINING_TEMPLATE.format(minutes=minutes, seconds=seconds))
        else:
            self.time_label.setText(TIME_EXPIRED_TEXT)
        fraction = max(0.0, min(1.0, remaining_seconds / self._total_seconds))
        self.time_progress.setValue(int(fraction * 1000))
        urgent = 0 < remaining_seconds <= TIME_LIMIT_TICKING_WINDOW_SECONDS
        self.time_label.setStyleSheet(
            "padding: 2px 6px; border-radius: 4px;"
            + (" background-color: #dc2626; color: #ffffff;" if urgent else "")
        )

    def _show_result(self, result: AttemptResult) -> None:
        self._rendered_key = None
        self.stack.setCurrentIndex(2)
        self.result_label.setText(
            RESULT_TEMPLATE.format(
                correct=result.correct_count,
                total=result.total_count,
                score=result.score,
            )
            + "\n"
            + (PASSED_MESSAGE if result.passed else FAILED_MESSAGE)
        )
        questions = self.session.resource.quiz.questions
        lines = []
        for review in result.reviews:
            question = questions[review.question_index]
            mark = "&#10003;" if review.is_correct else "&#10007;"
            selected = (
                html.escape(question.options[review.selected_option_index])
                if review.selected_option_index is not None
                else "(no answer)"
            )
            correct = html.escape(question.options[review.correct_option_index])
            lines.append(
                f"<p>{mark} <b>{review.question_index + 1}.</b></p>"
                f"{renderer.render_fragment(question.prompt)}"
                f"<p>Your answer: {selected}<br/>Correct answer: {correct}</p>"
            )
        self.review_label.setText("".join(lines))

    # --- Input ---

    def _handle_option_clicked(self, option_index: int) -> None:
        snapshot = self.session.snapshot()
        self.session.select_answer(snapshot.current_index, option_index)

    def _handle_submit(self) -> None:
        self.session.submit()

    def _handle_retake(self) -> None:
        if confirm_retake_quiz(self):
            self.session.retake()
