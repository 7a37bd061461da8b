from __future__ import annotations

import logging

from PySide6.QtCore import QDate, Qt
from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QComboBox,
    QDateEdit,
    QFrame,
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QLineEdit,
    QListWidgetItem,
    QMessageBox,
    QPushButton,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from todo_app.domain.enums import Repeat, Tag, TaskFilter
from todo_app.domain.filters import TaskFilters
from todo_app.domain.projection import today_iso
from todo_app.infra.storage import StorageError
from todo_app.services.task_service import TaskService

from .widgets import TaskItemWidget, TaskListWidget

logger = logging.getLogger(__name__)

FILTERS = [
    ("All", TaskFilter.ALL),
    ("Active", TaskFilter.ACTIVE),
    ("Done", TaskFilter.DONE),
]

REPEAT_OPTIONS = [
    ("None", Repeat.NONE),
    ("Daily", Repeat.DAILY),
    ("Weekly", Repeat.WEEKLY),
    ("Monthly", Repeat.MONTHLY),
]

TAG_OPTIONS = [
    ("None", Tag.NONE),
    ("Work", Tag.WORK),
    ("Personal", Tag.PERSONAL),
    ("Health", Tag.HEALTH),
]


class MainWindow(QWidget):
    def __init__(self, service: TaskService):
        super().__init__()
        self.setWindowTitle("ToDo")
        self.resize(760, 820)

        self.service = service

        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(12)

        layout.addLayout(self._build_header())
        layout.addWidget(self._build_form())

        self.task_list = TaskListWidget()
        self.task_list.setObjectName("TaskList")
        self.task_list.setSpacing(8)
        layout.addWidget(self.task_list, 1)

        layout.addLayout(self._build_footer())

        self.refresh_tasks()

        QShortcut(QKeySequence("Ctrl+N"), self, self.title_input.setFocus)
        QShortcut(QKeySequence("Ctrl+F"), self, self.search_input.setFocus)

    def _build_header(self) -> QHBoxLayout:
        header = QHBoxLayout()
        title = QLabel("ToDo")
        title.setProperty("class", "panel-title")

        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Search tasks…")
        self.search_input.setMinimumWidth(220)
        self.search_input.textChanged.connect(self.refresh_tasks)

        self.filter_combo = QComboBox()
        for label, key in FILTERS:
            self.filter_combo.addItem(label, key.value)
        self.filter_combo.currentIndexChanged.connect(self.refresh_tasks)

        header.addWidget(title)
        header.addStretch()
        header.addWidget(self.search_input)
        header.addWidget(self.filter_combo)
        return header

    def _build_form(self) -> QWidget:
        frame = QFrame()
        frame.setObjectName("InputCard")
        layout = QVBoxLayout(frame)
        layout.setContentsMargins(12, 10, 12, 10)
        layout.setSpacing(8)

        self.title_input = QLineEdit()
        self.title_input.setPlaceholderText("What do you need to do?")
        self.title_input.returnPressed.connect(self.add_task)

        self.due_toggle = QPushButton("No due date")
        self.due_toggle.setCheckable(True)
        self.due_toggle.setProperty("variant", "secondary")
        self.due_toggle.toggled.connect(self.on_due_toggled)

        self.due_input = QDateEdit()
        self.due_input.setCalendarPopup(True)
        self.due_input.setDisplayFormat("yyyy-MM-dd")
        self.due_input.setDate(QDate.currentDate())
        self.due_input.setMinimumDate(QDate.currentDate())
        self.due_input.setEnabled(False)

        self.repeat_combo = QComboBox()
        for label, value in REPEAT_OPTIONS:
            self.repeat_combo.addItem(label, value.value)

        self.tag_combo = QComboBox()
        for label, value in TAG_OPTIONS:
            self.tag_combo.addItem(label, value.value)

        self.description_input = QTextEdit()
        self.description_input.setObjectName("DescriptionInput")
        self.description_input.setPlaceholderText("Optional details…")
        self.description_input.setMaximumHeight(80)

        add_button = QPushButton("Add")
        add_button.clicked.connect(self.add_task)

        options = QHBoxLayout()
        options.setSpacing(8)
        options.addWidget(self.due_toggle)
        options.addWidget(self.due_input)
        options.addWidget(QLabel("Repeat"))
        options.addWidget(self.repeat_combo)
        options.addWidget(QLabel("Tag"))
        options.addWidget(self.tag_combo)
        options.addStretch()
        options.addWidget(add_button)

        layout.addWidget(self.title_input)
        layout.addLayout(options)
        layout.addWidget(self.description_input)
        return frame

    def _build_footer(self) -> QHBoxLayout:
        footer = QHBoxLayout()
        self.stats_label = QLabel("")
        self.stats_label.setProperty("class", "stats-badge")

        clear_button = QPushButton("Clear Done")
        clear_button.setProperty("variant", "secondary")
        clear_button.clicked.connect(self.clear_done)

        footer.addWidget(self.stats_label)
        footer.addStretch()
        footer.addWidget(clear_button)
        return footer

    def refresh_tasks(self) -> None:
        filters = TaskFilters(
            filter_key=self.filter_combo.currentData() or TaskFilter.ALL,
            search=self.search_input.text(),
        )
        today = today_iso()
        tasks = self.service.list_tasks(filters)
        self.task_list.clear()

        for task in tasks:
            item = QListWidgetItem()
            item.setData(Qt.UserRole, task.id)
            widget = TaskItemWidget(task, today, self.toggle_task, self.edit_task, self.delete_task)
            self.task_list.addItem(item)
            self.task_list.setItemWidget(item, widget)
            item.setSizeHint(widget.sizeHint())

        stats = self.service.get_stats(today)
        text = f"{stats['active']} left"
        if stats["overdue"]:
            text += f" • {stats['overdue']} overdue"
        self.stats_label.setText(text)
        self.task_list.sync_item_sizes()

    def on_due_toggled(self, checked: bool) -> None:
        self.due_input.setEnabled(checked)
        self.due_toggle.setText("Due date" if checked else "No due date")

    def add_task(self) -> None:
        due = self.due_input.date().toPython() if self.due_toggle.isChecked() else None
        task = self._mutate(
            self.service.create,
            self.title_input.text(),
            due,
            self.tag_combo.currentData(),
            self.repeat_combo.currentData(),
            self.description_input.toPlainText(),
        )
        if task is None:
            self.title_input.setFocus()
            return
        self.clear_form()

    def clear_form(self) -> None:
        self.title_input.clear()
        self.due_toggle.setChecked(False)
        self.due_input.setDate(QDate.currentDate())
        self.repeat_combo.setCurrentIndex(0)
        self.tag_combo.setCurrentIndex(0)
        self.description_input.clear()

    def toggle_task(self, task_id: str) -> None:
        self._mutate(self.service.toggle_done, task_id)

    def edit_task(self, task_id: str) -> None:
        task = self.service.get_task(task_id)
        if task is None:
            return
        title, ok = QInputDialog.getText(self, "Edit task", "Title", QLineEdit.Normal, task.title)
        if not ok:
            return
        if not title.strip():
            QMessageBox.warning(self, "Title required", "A task needs a title.")
            return
        self._mutate(self.service.edit_title, task_id, title)

    def delete_task(self, task_id: str) -> None:
        confirm = QMessageBox.question(self, "Delete task", "Delete this task?")
        if confirm != QMessageBox.Yes:
            return
        self._mutate(self.service.delete, task_id)

    def clear_done(self) -> None:
        self._mutate(self.service.clear_completed)

    def _mutate(self, action, *args):
        try:
            result = action(*args)
        except StorageError as exc:
            logger.exception("Could not save tasks")
            QMessageBox.warning(self, "Not saved", f"Your change could not be saved.\n{exc}")
            result = None
        self.refresh_tasks()
        return result
