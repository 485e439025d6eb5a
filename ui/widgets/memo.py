import logging
from typing import Any, Awaitable, Callable, List, Optional

from PyQt6.QtCore import Qt, QEvent, QTimer, QObject, pyqtSignal
from PyQt6.QtGui import QFont, QHideEvent, QKeyEvent, QMouseEvent
from PyQt6.QtWidgets import (
    QApplication, QFrame, QHBoxLayout, QLabel, QMessageBox, QPushButton,
    QTextBrowser, QVBoxLayout, QWidget
)

from models.memo_models import Memo, category_colors, category_label
from utils.async_runner import AsyncRunner, Runner
from utils.date_utils import format_datetime
from .scroll_guard import ScrollGuard

logger = logging.getLogger(__name__)

EditCallback = Callable[[Memo], None]
DeleteCallback = Callable[[str], Awaitable[bool]]
ConfirmCallback = Callable[[QWidget, str], bool]

DELETE_CONFIRM_MESSAGE = "本当にこのメモを削除しますか？"


def ask_confirmation(parent: QWidget, message: str) -> bool:
    """はい/いいえの確認ダイアログを表示し、「はい」が選ばれたかどうかを返す。"""
    answer = QMessageBox.question(
        parent,
        "削除の確認",
        message,
        QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        QMessageBox.StandardButton.No,
    )
    return answer == QMessageBox.StandardButton.Yes


class _EscapeKeyFilter(QObject):
    """表示中のみアプリケーションに登録される、Escキー検出用のイベントフィルタ。"""

    def __init__(self, on_escape: Callable[[], None], parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._on_escape = on_escape

    def eventFilter(self, obj: QObject, event: QEvent) -> bool:
        if event.type() == QEvent.Type.KeyPress and isinstance(event, QKeyEvent):
            # 確認ダイアログなどのモーダル表示中はそちらに任せる
            if QApplication.activeModalWidget() is not None:
                return False
            if event.key() == Qt.Key.Key_Escape:
                self._on_escape()
                return True
        return False


class MemoViewer(QWidget):
    """
    親ウィンドウ全体を覆うオーバーレイとして、1件のメモを表示するウィジェット。

    状態は「閉」と「開」の2つだけです。開くかどうかは親（コーディネーター）が
    set_memo() で指定し、閉じる操作（閉じるボタン、背景クリック、Escキー、
    削除成功）はこのウィジェット自身が行い、closed シグナルで通知します。

    永続化は行わず、編集・削除は注入されたコールバックに委ねます。

    Signals:
        closed (pyqtSignal): 開→閉に遷移したときに送信されます。
        memo_deleted (pyqtSignal): 削除が成功したときに、メモID（str）を送信します。
    """
    closed = pyqtSignal()
    memo_deleted = pyqtSignal(str)

    def __init__(
        self,
        parent: Optional[QWidget] = None,
        on_edit: Optional[EditCallback] = None,
        on_delete: Optional[DeleteCallback] = None,
        confirm: ConfirmCallback = ask_confirmation,
        runner: Optional[Runner] = None
    ) -> None:
        """
        MemoViewerのコンストラクタ。

        Args:
            parent (Optional[QWidget]): 覆う対象の親ウィジェット。通常はMainWindow。
            on_edit (Optional[EditCallback]): 編集ボタンで呼ばれる関数。表示中のメモを受け取る。
            on_delete (Optional[DeleteCallback]): 削除確定時に呼ばれる関数。メモIDを受け取り、
                成功したかどうかを返すawaitableを返す。
            confirm (ConfirmCallback): 削除前の確認を行う関数。
            runner (Optional[Runner]): awaitableを実行し、結果またはエラーをコールバックする関数。
                省略時はワーカースレッドで実行する。
        """
        super().__init__(parent)
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)
        self.setStyleSheet("MemoViewer { background-color: rgba(0, 0, 0, 128); }")

        # --- 属性の型定義 ---
        self._parent_window: Optional[QWidget] = parent
        self._memo: Optional[Memo] = None
        self._is_open: bool = False
        self._on_edit = on_edit
        self._on_delete = on_delete
        self._confirm = confirm
        self._runner: Runner = runner if runner is not None else AsyncRunner(self)
        self._render_token: int = 0
        self._scroll_guard: Optional[ScrollGuard] = None
        self._escape_filter: Optional[_EscapeKeyFilter] = None
        self.delete_pending: bool = False

        self.card: QFrame
        self.title_label: QLabel
        self.category_badge: QLabel
        self.created_label: QLabel
        self.updated_label: QLabel
        self.content_view: QTextBrowser
        self.tags_section: QWidget
        self.tags_layout: QHBoxLayout
        self.tag_labels: List[QLabel] = []
        self.close_button: QPushButton
        self.edit_button: QPushButton
        self.delete_button: QPushButton

        if self._parent_window:
            self._parent_window.installEventFilter(self)
            self._scroll_guard = ScrollGuard(self._parent_window, exclude=self)
            self.destroyed.connect(self._scroll_guard.release)

        self.setup_ui()
        self.setup_connections()
        self.hide()

    # --- UI構築 ---

    def setup_ui(self) -> None:
        """UIの構築とレイアウト設定を行う。"""
        outer = QVBoxLayout(self)
        outer.setContentsMargins(40, 40, 40, 40)

        self.card = QFrame(self)
        self.card.setObjectName("memoCard")
        self.card.setMinimumWidth(480)
        self.card.setMaximumWidth(720)
        self.card.setStyleSheet("#memoCard { background-color: white; border-radius: 8px; }")
        outer.addWidget(self.card, alignment=Qt.AlignmentFlag.AlignCenter)

        layout = QVBoxLayout(self.card)
        layout.setContentsMargins(24, 24, 24, 24)
        layout.setSpacing(12)

        layout.addLayout(self._create_header_layout())

        self.content_view = QTextBrowser()
        self.content_view.setReadOnly(True)
        self.content_view.setOpenLinks(False)
        self.content_view.setOpenExternalLinks(False)
        self.content_view.setFrameShape(QFrame.Shape.NoFrame)
        layout.addWidget(self.content_view, 1)

        self.tags_section = self._create_tags_section()
        layout.addWidget(self.tags_section)

        layout.addLayout(self._create_action_layout())

    def _create_header_layout(self) -> QHBoxLayout:
        """タイトル・カテゴリ・日時と閉じるボタンからなるヘッダーを作成する。"""
        header = QHBoxLayout()
        info = QVBoxLayout()

        self.title_label = QLabel()
        self.title_label.setWordWrap(True)
        title_font = QFont(self.title_label.font())
        title_font.setPointSize(18)
        title_font.setBold(True)
        self.title_label.setFont(title_font)
        info.addWidget(self.title_label)

        meta = QHBoxLayout()
        self.category_badge = QLabel()
        self.created_label = QLabel()
        self.updated_label = QLabel()
        for label in (self.created_label, self.updated_label):
            label.setStyleSheet("color: #6b7280;")
        meta.addWidget(self.category_badge)
        meta.addWidget(self.created_label)
        meta.addWidget(self.updated_label)
        meta.addStretch()
        info.addLayout(meta)

        header.addLayout(info, 1)

        self.close_button = QPushButton("閉じる")
        self.close_button.setCursor(Qt.CursorShape.PointingHandCursor)
        header.addWidget(self.close_button, alignment=Qt.AlignmentFlag.AlignTop)
        return header

    def _create_tags_section(self) -> QWidget:
        section = QWidget()
        layout = QVBoxLayout(section)
        layout.setContentsMargins(0, 0, 0, 0)
        heading = QLabel("タグ")
        heading.setStyleSheet("color: #6b7280;")
        layout.addWidget(heading)
        self.tags_layout = QHBoxLayout()
        self.tags_layout.addStretch()
        layout.addLayout(self.tags_layout)
        return section

    def _create_action_layout(self) -> QHBoxLayout:
        actions = QHBoxLayout()
        actions.addStretch()
        self.edit_button = QPushButton("編集")
        self.delete_button = QPushButton("削除")
        for btn in (self.edit_button, self.delete_button):
            btn.setCursor(Qt.CursorShape.PointingHandCursor)
            actions.addWidget(btn)
        return actions

    def setup_connections(self) -> None:
        """UI要素のシグナルとスロットを接続する。"""
        self.close_button.clicked.connect(self.close_viewer)
        self.edit_button.clicked.connect(self.handle_edit)
        self.delete_button.clicked.connect(self.handle_delete)

    # --- 状態遷移 ---

    @property
    def memo(self) -> Optional[Memo]:
        return self._memo

    def is_open(self) -> bool:
        return self._is_open

    def set_memo(self, memo: Optional[Memo], is_open: bool) -> None:
        """
        表示するメモと開閉状態を設定する。

        memoがNoneまたはis_openがFalseの場合は何も表示しない。

        Args:
            memo (Optional[Memo]): 表示するメモ。
            is_open (bool): 開いた状態にするかどうか。
        """
        self._memo = memo
        if memo is None or not is_open:
            self.close_viewer()
            return
        self._render(memo)
        if not self._is_open:
            self._open()

    def close_viewer(self) -> None:
        """オーバーレイを閉じる。すでに閉じていれば何もしない。"""
        was_open = self._is_open
        self._is_open = False
        self.hide()
        self._release_resources()
        if was_open:
            self.closed.emit()

    def _open(self) -> None:
        self._is_open = True
        self._acquire_resources()
        self._apply_geometry()
        self.show()
        self.raise_()
        self.setFocus()

    def _acquire_resources(self) -> None:
        """スクロール抑止とEscキー監視を開始する。"""
        if self._scroll_guard is not None:
            self._scroll_guard.acquire()
        app = QApplication.instance()
        if app is not None and self._escape_filter is None:
            self._escape_filter = _EscapeKeyFilter(self.close_viewer, self)
            app.installEventFilter(self._escape_filter)

    def _release_resources(self) -> None:
        """スクロール抑止とEscキー監視を解除する。何度呼んでも安全。"""
        if self._scroll_guard is not None:
            self._scroll_guard.release()
        if self._escape_filter is not None:
            app = QApplication.instance()
            if app is not None:
                app.removeEventFilter(self._escape_filter)
            self._escape_filter.deleteLater()
            self._escape_filter = None

    def has_escape_listener(self) -> bool:
        return self._escape_filter is not None

    def is_scroll_suppressed(self) -> bool:
        return self._scroll_guard is not None and self._scroll_guard.active

    # --- 描画 ---

    def _render(self, memo: Memo) -> None:
        """メモの内容を各ウィジェットに反映する。"""
        self.title_label.setText(memo.title)

        background, foreground = category_colors(memo.category)
        self.category_badge.setText(category_label(memo.category))
        self.category_badge.setStyleSheet(
            f"background-color: {background}; color: {foreground}; "
            "border-radius: 10px; padding: 2px 10px;"
        )

        self.created_label.setText(f"作成: {format_datetime(memo.created_at)}")
        self.updated_label.setText(f"更新: {format_datetime(memo.updated_at)}")
        self.updated_label.setVisible(memo.is_edited())

        self._render_tags(memo.tags)

        # Markdownの描画は次のイベントループまで遅延させる
        self.content_view.clear()
        self._render_token += 1
        token = self._render_token
        QTimer.singleShot(0, lambda: self._render_markdown(token))

    def _render_markdown(self, token: int) -> None:
        if token != self._render_token or self._memo is None:
            return
        self.content_view.setMarkdown(self._memo.content)

    def _render_tags(self, tags: List[str]) -> None:
        for label in self.tag_labels:
            self.tags_layout.removeWidget(label)
            label.deleteLater()
        self.tag_labels = []

        for index, tag in enumerate(tags):
            label = QLabel(f"#{tag}")
            label.setStyleSheet(
                "background-color: #f3f4f6; color: #4b5563; border-radius: 10px; padding: 2px 10px;"
            )
            self.tags_layout.insertWidget(index, label)
            self.tag_labels.append(label)
        self.tags_section.setVisible(bool(tags))

    def tag_texts(self) -> List[str]:
        return [label.text() for label in self.tag_labels]

    # --- 操作 ---

    def handle_edit(self) -> None:
        """編集コールバックに現在のメモを渡し、オーバーレイを閉じる。"""
        memo = self._memo
        if memo is None:
            return
        if self._on_edit is not None:
            self._on_edit(memo)
        self.close_viewer()

    def handle_delete(self) -> None:
        """確認のうえ削除コールバックを呼び、成功した場合のみ閉じる。"""
        memo = self._memo
        if memo is None or self._on_delete is None or self.delete_pending:
            return
        if not self._confirm(self, DELETE_CONFIRM_MESSAGE):
            return

        self.delete_pending = True
        self.delete_button.setEnabled(False)
        self._runner(
            self._on_delete(memo.id),
            lambda success: self._on_delete_finished(memo.id, success),
            lambda message: self._on_delete_finished(memo.id, False),
        )

    def _on_delete_finished(self, memo_id: str, success: Any) -> None:
        self.delete_pending = False
        self.delete_button.setEnabled(True)
        if not success:
            logger.info("Delete of memo %s did not succeed; viewer stays open", memo_id)
            return
        self.memo_deleted.emit(memo_id)
        if self._is_open and self._memo is not None and self._memo.id == memo_id:
            self.close_viewer()

    # --- イベント ---

    def mousePressEvent(self, event: QMouseEvent) -> None:
        """カード外（背景）のクリックで閉じる。"""
        if not self.card.geometry().contains(event.position().toPoint()):
            self.close_viewer()
            event.accept()
            return
        super().mousePressEvent(event)

    def eventFilter(self, obj: QObject, event: QEvent) -> bool:
        """
        親ウィンドウのイベントを監視し、リサイズがあれば追従して位置を更新する。
        """
        if obj is self._parent_window and event.type() == QEvent.Type.Resize:
            if self.isVisible():
                QTimer.singleShot(0, self._apply_geometry)
        return super().eventFilter(obj, event)

    def _apply_geometry(self) -> None:
        """親ウィンドウ全体を覆うように自身の位置とサイズを調整する。"""
        parent = self._parent_window
        if not parent:
            return
        self.setGeometry(parent.rect())

    def hideEvent(self, event: QHideEvent) -> None:
        """非表示になるときは、閉じる操作以外の経路でも必ず抑止を解除する。"""
        super().hideEvent(event)
        if not self.isHidden():
            # 親ウィンドウごと隠れた場合
            return
        if self._is_open:
            self.close_viewer()
        else:
            self._release_resources()
