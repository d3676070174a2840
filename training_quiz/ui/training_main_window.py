"""Qt main window listing training resources next to the quiz panel."""

from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QProgressBar,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from training_quiz.constants.about import APP_ABOUT_TEXT, APP_LICENSE, APP_NAME, APP_VERSION
from training_quiz.constants.ui_constants import (
    CERTIFICATE_MARK,
    CERTIFICATE_UNLOCKED_TEMPLATE,
    COMPLETED_MARK,
    OVERALL_PROGRESS_TEMPLATE,
    PASSED_MESSAGE,
    RESOURCE_LIST_TITLE,
    WINDOW_TITLE,
)
from training_quiz.core.catalog import TrainingCatalog
from training_quiz.core.quiz_session import QuizSession, SubmissionOutcome
from training_quiz.core.services.progress import TrainingProgressLedger
from training_quiz.ui.components.quiz_panel import QuizPanel
from training_quiz.ui.dialog_helpers import show_info

_RESOURCE_ID_ROLE = Qt.UserRole


class TrainingMainWindow(QMainWindow):
    """Main Qt window: resource navigation on the left, active quiz on the right."""

    def __init__(
        self,
        session: QuizSession,
        catalog: TrainingCatalog,
        ledger: TrainingProgressLedger,
    ) -> None:
        super().__init__()
        self.setWindowTitle(f"{WINDOW_TITLE} ({APP_NAME} {APP_VERSION})")

        self.session = session
        self.catalog = catalog
        self.ledger = ledger

        self._build_ui()
        self.session.add_submission_listener(self._handle_submitted)
        self._refresh_progress()

    def _build_ui(self) -> None:
        central_widget = QWidget(self)
        self.setCentralWidget(central_widget)
        root_layout = QHBoxLayout()
        central_widget.setLayout(root_layout)

        side_layout = QVBoxLayout()
        side_layout.addWidget(QLabel(RESOURCE_LIST_TITLE, self))
        self.resource_list = QListWidget(self)
        self.resource_list.currentItemChanged.connect(self._handle_resource_changed)
        side_layout.addWidget(self.resource_list, stretch=1)

        self.overall_progress_bar = QProgressBar(self)
        self.overall_progress_bar.setRange(0, 100)
        side_layout.addWidget(self.overall_progress_bar)
        self.overall_progress_label = QLabel("", self)
        self.overall_progress_label.setWordWrap(True)
        side_layout.addWidget(self.overall_progress_label)
        self.about_button = QPushButton(f"About {APP_NAME}", self)
        self.about_button.clicked.connect(self._handle_about)
        side_layout.addWidget(self.about_button)
        root_layout.addLayout(side_layout, stretch=1)

        self.quiz_panel = QuizPanel(self.session, parent=self)
        root_layout.addWidget(self.quiz_panel, stretch=3)

    def _refresh_progress(self) -> None:
        user_id = self.session.user_id
        current_id = self._current_resource_id()

        self.resource_list.blockSignals(True)
        self.resource_list.clear()
        for module in self.catalog.get_modules():
            if not module.resources:
                continue
            certified = self.ledger.is_certificate_eligible(user_id, module.id)
            header = QListWidgetItem(
                f"{module.title} ({self.ledger.module_progress(user_id, module.id):.0f}%)"
                + (f" {CERTIFICATE_MARK}" if certified else "")
            )
            header.setFlags(Qt.NoItemFlags)
            self.resource_list.addItem(header)
            for resource in module.resources:
                done = self.ledger.is_resource_complete(user_id, resource.id)
                item = QListWidgetItem(
                    f"    {resource.title} ({resource.duration or resource.resource_type})"
                    + (f" {COMPLETED_MARK}" if done else "")
                )
                item.setData(_RESOURCE_ID_ROLE, resource.id)
                self.resource_list.addItem(item)
                if resource.id == current_id:
                    self.resource_list.setCurrentItem(item)
        self.resource_list.blockSignals(False)

        completed = len(self.ledger.completed_resource_ids(user_id))
        percent = self.ledger.overall_progress(user_id)
        self.overall_progress_bar.setValue(int(percent))
        self.overall_progress_label.setText(
            OVERALL_PROGRESS_TEMPLATE.format(
                completed=completed,
                total=self.catalog.total_resource_count(),
                percent=percent,
            )
        )

    def _current_resource_id(self) -> str | None:
        item = self.resource_list.currentItem()
        return item.data(_RESOURCE_ID_ROLE) if item is not None else None

    def _handle_resource_changed(self, current: QListWidgetItem | None, _previous=None) -> None:
        resource_id = current.data(_RESOURCE_ID_ROLE) if current is not None else None
        if resource_id is None:
            self.session.close()
            return
        self.session.open_resource(self.catalog.find_resource(resource_id))

    def _handle_submitted(self, outcome: SubmissionOutcome) -> None:
        self._refresh_progress()
        if outcome.certificate_module_id is not None:
            module = self.catalog.get_module(outcome.certificate_module_id)
            show_info(self, PASSED_MESSAGE, CERTIFICATE_UNLOCKED_TEMPLATE.format(module=module.title))

    def _handle_about(self) -> None:
        details = f"{APP_NAME} v{APP_VERSION}\nLicense: {APP_LICENSE}\n\n{APP_ABOUT_TEXT}"
        show_info(self, f"About {APP_NAME}", details)

    def closeEvent(self, event) -> None:  # noqa: N802 - Qt override
        self.session.close()
        super().closeEvent(event)
