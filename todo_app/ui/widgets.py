from __future__ import annotations

from PySide6.QtCore import QSize, Qt
from PySide6.QtWidgets import (
    QAbstractItemView,
    QCheckBox,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QPushButton,
    QSizePolicy,
    QVBoxLayout,
    QWidget,
)

from todo_app.domain.entities import TaskEntity
from todo_app.domain.enums import Repeat, Tag
from todo_app.domain.projection import is_overdue

TAG_COLORS = {
    Tag.WORK: "#2563EB",
    Tag.PERSONAL: "#7C3AED",
    Tag.HEALTH: "#059669",
}


def _pill(text: str, kind: str, color: str | None = None) -> QLabel:
    label = QLabel(text)
    label.setProperty("class", "pill")
    label.setProperty("kind", kind)
    label.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Fixed)
    if color:
        label.setStyleSheet(f"background-color: {color};")
    return label


class TaskItemWidget(QWidget):
    def __init__(self, task: TaskEntity, today: str, on_toggle, on_edit, on_delete):
        super().__init__()
        self.task = task

        self.setObjectName("TaskCard")
        self.setAttribute(Qt.WA_StyledBackground, True)
        self.setProperty("done", task.done)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)
        self.setMinimumHeight(64)

        self.done_check = QCheckBox()
        self.done_check.setChecked(task.done)
        self.done_check.setToolTip(f"Mark {task.title} {'active' if task.done else 'done'}")
        self.done_check.toggled.connect(lambda _checked: on_toggle(task.id))

        title = QLabel(task.title)
        title.setProperty("class", "task-title")
        title.setProperty("done", task.done)
        title.setWordWrap(True)
        title.setMinimumWidth(0)
        title.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Preferred)

        edit_button = QPushButton("Edit")
        edit_button.setProperty("variant", "ghost")
        edit_button.clicked.connect(lambda: on_edit(task.id))

        delete_button = QPushButton("Delete")
        delete_button.setProperty("variant", "danger")
        delete_button.clicked.connect(lambda: on_delete(task.id))

        header = QHBoxLayout()
        header.setSpacing(8)
        header.addWidget(self.done_check, 0, Qt.AlignTop)
        header.addWidget(title, 1)
        header.addWidget(edit_button, 0, Qt.AlignTop)
        header.addWidget(delete_button, 0, Qt.AlignTop)

        meta = QHBoxLayout()
        meta.setSpacing(6)
        if task.done:
            meta.addWidget(_pill("Done", "status-done"))
        else:
            meta.addWidget(_pill("Active", "status-active"))
        if task.tag != Tag.NONE:
            meta.addWidget(_pill(f"#{task.tag.value}", "tag", TAG_COLORS.get(task.tag)))
        if task.repeat != Repeat.NONE:
            meta.addWidget(_pill(f"Repeats: {task.repeat.value}", "repeat"))
        if task.due:
            if is_overdue(task, today):
                meta.addWidget(_pill(f"Overdue: {task.due}", "overdue"))
            else:
                meta.addWidget(_pill(f"Due: {task.due}", "due"))
        meta.addStretch()

        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 8, 12, 8)
        layout.setSpacing(4)
        layout.addLayout(header)
        if task.description:
            description = QLabel(task.description)
            description.setProperty("class", "task-desc")
            description.setWordWrap(True)
            layout.addWidget(description)
        layout.addLayout(meta)


class TaskListWidget(QListWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self._h_margin = 12
        self._v_margin = 8
        self.setSelectionMode(QAbstractItemView.NoSelection)
        self.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self._update_viewport_margins()

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self.sync_item_sizes()

    def _update_viewport_margins(self) -> None:
        scrollbar_width = self.verticalScrollBar().width() or self.verticalScrollBar().sizeHint().width()
        right_margin = self._h_margin + (scrollbar_width if self.verticalScrollBar().isVisible() else 0)
        self.setViewportMargins(self._h_margin, self._v_margin, right_margin, self._v_margin)

    def sync_item_sizes(self) -> None:
        self._update_viewport_margins()
        viewport_width = self.viewport().width()
        for index in range(self.count()):
            item = self.item(index)
            widget = self.itemWidget(item)
            if widget:
                widget.setMinimumWidth(viewport_width)
                widget.setMaximumWidth(viewport_width)
                widget.adjustSize()
                hint = widget.sizeHint()
                item.setSizeHint(QSize(viewport_width, hint.height()))
                widget.resize(viewport_width, hint.height())
