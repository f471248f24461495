from __future__ import annotations

from PySide6.QtCore import QRect, QSize, Qt, Signal
from PySide6.QtGui import QColor, QPalette
from PySide6.QtWidgets import (
    QApplication,
    QListWidget,
    QListWidgetItem,
    QStyle,
    QStyledItemDelegate,
    QStyleOptionViewItem,
    QWidget,
)

from inkcomplete.completion.popup_state import PopupPhase, PopupSnapshot
from inkcomplete.completion.suggestion import Suggestion

SUGGESTION_ROLE = int(Qt.UserRole) + 41


class _SuggestionItemDelegate(QStyledItemDelegate):
    """Display name on the left, preview text on the right, optional color bar."""

    def sizeHint(self, option, index):
        base = super().sizeHint(option, index)
        row_h = max(base.height(), option.fontMetrics.height() + 8)
        return QSize(base.width(), row_h)

    def paint(self, painter, option, index):
        suggestion = index.data(SUGGESTION_ROLE)
        if not isinstance(suggestion, Suggestion):
            super().paint(painter, option, index)
            return

        style = option.widget.style() if option.widget is not None else QApplication.style()
        style_opt = QStyleOptionViewItem(option)
        style_opt.text = ""
        style.drawControl(QStyle.CE_ItemViewItem, style_opt, painter, option.widget)

        rect = option.rect.adjusted(8, 0, -8, 0)
        if rect.width() <= 0:
            return

        fm = option.fontMetrics
        selected = bool(option.state & QStyle.State_Selected)
        preview = str(suggestion.preview or "")

        painter.save()
        if suggestion.color:
            color = QColor(suggestion.color)
            if color.isValid():
                painter.fillRect(QRect(rect.left() - 6, rect.top() + 3, 3, rect.height() - 6), color)

        right_width = 0
        if preview:
            right_width = min(max(36, fm.horizontalAdvance(preview) + 8), int(rect.width() * 0.42))
            right_rect = QRect(rect.right() - right_width + 1, rect.top(), right_width, rect.height())
            painter.setPen(
                option.palette.color(QPalette.HighlightedText)
                if selected
                else option.palette.color(QPalette.PlaceholderText)
            )
            painter.drawText(
                right_rect.adjusted(0, 0, -2, 0),
                Qt.AlignRight | Qt.AlignVCenter,
                fm.elidedText(preview, Qt.ElideRight, right_rect.width()),
            )

        main_rect = QRect(rect.left(), rect.top(), max(0, rect.width() - right_width - 10), rect.height())
        painter.setPen(option.palette.color(QPalette.HighlightedText if selected else QPalette.Text))
        painter.drawText(
            main_rect,
            Qt.AlignLeft | Qt.AlignVCenter,
            fm.elidedText(suggestion.display_name, Qt.ElideRight, main_rect.width()),
        )
        painter.restore()


class CompletionPopup(QListWidget):
    """Renders ``CompletionPopupState`` snapshots; never owns selection state."""

    suggestionClicked = Signal(object)

    def __init__(self, parent: QWidget | None = None, *, max_visible_rows: int = 8) -> None:
        super().__init__(parent)
        self._max_visible_rows = max(1, int(max_visible_rows))
        self._shown: tuple[Suggestion, ...] | None = None
        self.hide()
        self.setFocusPolicy(Qt.NoFocus)
        self.setMouseTracking(True)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.setVerticalScrollMode(QListWidget.ScrollPerPixel)
        self.setUniformItemSizes(True)
        self.setSelectionMode(QListWidget.SingleSelection)
        self.setItemDelegate(_SuggestionItemDelegate(self))
        self.itemClicked.connect(self._on_item_clicked)
        self.setStyleSheet(
            """
            QListWidget {
                background: #1f1f1f;
                border: 1px solid #3a3a3a;
                padding: 2px;
            }
            QListWidget::item {
                padding: 3px 4px;
            }
            QListWidget::item:selected {
                background: #264f78;
            }
            """
        )

    def render_snapshot(self, snapshot: PopupSnapshot) -> None:
        if snapshot.phase is PopupPhase.CLOSED:
            self._shown = None
            self.clear()
            self.hide()
            return

        # Same tuple object means only the highlight moved.
        if snapshot.suggestions is not self._shown:
            self._shown = snapshot.suggestions
            self.clear()
            for suggestion in snapshot.suggestions:
                item = QListWidgetItem(suggestion.display_name)
                item.setData(SUGGESTION_ROLE, suggestion)
                self.addItem(item)

        if snapshot.selected_index >= 0:
            self.setCurrentRow(snapshot.selected_index)
            self.scrollToItem(self.currentItem())
        else:
            self.clearSelection()
            self.setCurrentRow(-1)
        self.show()
        self.raise_()

    def visible_height(self) -> int:
        row_h = max(20, self.sizeHintForRow(0), self.fontMetrics().height() + 6)
        visible_rows = min(self.count(), self._max_visible_rows)
        return max(28, visible_rows * row_h + 6)

    def _on_item_clicked(self, item: QListWidgetItem) -> None:
        suggestion = item.data(SUGGESTION_ROLE)
        if isinstance(suggestion, Suggestion):
            self.suggestionClicked.emit(suggestion)
