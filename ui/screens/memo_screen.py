# ui/screens/memo_screen.py
"""
メモ一覧画面のUIコンポーネントを提供します。

このモジュールには、メモの検索・カテゴリ絞り込み・一覧表示を行う
MemoScreen クラスが含まれています。データの取得は行わず、
ユーザー操作をシグナルで親（MainWindow）に通知します。
"""
from typing import Optional, List

from PyQt6.QtCore import Qt, QTimer, pyqtSignal
from PyQt6.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QComboBox,
                             QPushButton, QLabel, QLineEdit, QListWidget, QListWidgetItem)

from models.memo_models import MEMO_CATEGORIES, Memo, category_label
from services.memo_service import ALL_CATEGORIES


class MemoScreen(QWidget):
    """
    メモ一覧画面のメインウィジェット。

    検索欄、カテゴリ選択用のコンボボックス、新規作成ボタン、
    およびメモの一覧から構成されます。

    Signals:
        query_changed (pyqtSignal): 検索文字列またはカテゴリが変わったときに送信されます。
        new_memo_requested (pyqtSignal): 新規メモボタンが押されたときに送信されます。
        memo_activated (pyqtSignal): 一覧のメモがダブルクリックされたときに、そのメモを送信します。
    """
    query_changed = pyqtSignal()
    new_memo_requested = pyqtSignal()
    memo_activated = pyqtSignal(object)

    SEARCH_DELAY_MS: int = 300

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        """
        MemoScreenのコンストラクタ。

        Args:
            parent (Optional[QWidget]): 親ウィジェット。
        """
        super().__init__(parent)

        # --- メモデータ ---
        self.memos: List[Memo] = []

        # --- UI要素の型定義 ---
        self.search_edit: QLineEdit
        self.category_combo: QComboBox
        self.new_memo_button: QPushButton
        self.memo_list: QListWidget
        self.status_label: QLabel
        self._search_timer: QTimer

        self.setup_ui()
        self.setup_connections()

    def setup_ui(self) -> None:
        """UIの構築とレイアウト設定を行う。"""
        layout = QVBoxLayout(self)
        layout.addLayout(self._create_memo_bar_layout())

        self.memo_list = QListWidget()
        layout.addWidget(self.memo_list, 1)

        self.status_label = QLabel()
        self.status_label.setStyleSheet("color: #6b7280;")
        layout.addWidget(self.status_label)

        self._search_timer = QTimer(self)
        self._search_timer.setSingleShot(True)
        self._search_timer.setInterval(self.SEARCH_DELAY_MS)

    def _create_memo_bar_layout(self) -> QHBoxLayout:
        """検索・絞り込みバーのレイアウトを作成する。"""
        memo_layout = QHBoxLayout()
        self.search_edit = QLineEdit()
        self.search_edit.setPlaceholderText("タイトル・本文を検索")
        self.search_edit.setClearButtonEnabled(True)

        self.category_combo = QComboBox()
        self.category_combo.addItem("すべて", ALL_CATEGORIES)
        for key, label in MEMO_CATEGORIES.items():
            self.category_combo.addItem(label, key)

        self.new_memo_button = QPushButton("新規メモ")

        memo_layout.addWidget(QLabel("検索:"))
        memo_layout.addWidget(self.search_edit, 1)
        memo_layout.addWidget(QLabel("カテゴリ:"))
        memo_layout.addWidget(self.category_combo)
        memo_layout.addWidget(self.new_memo_button)
        return memo_layout

    def setup_connections(self) -> None:
        """UI要素のシグナルとスロットを接続する。"""
        self.search_edit.textChanged.connect(lambda _: self._search_timer.start())
        self.search_edit.returnPressed.connect(self._emit_query_changed)
        self._search_timer.timeout.connect(self._emit_query_changed)
        self.category_combo.currentIndexChanged.connect(lambda _: self._emit_query_changed())
        self.new_memo_button.clicked.connect(self.new_memo_requested)
        self.memo_list.itemActivated.connect(self._on_item_activated)

    def _emit_query_changed(self) -> None:
        self._search_timer.stop()
        self.query_changed.emit()

    def search_text(self) -> str:
        return self.search_edit.text().strip()

    def selected_category(self) -> str:
        return self.category_combo.currentData() or ALL_CATEGORIES

    def set_memos(self, memos: List[Memo]) -> None:
        """
        一覧に表示するメモを置き換える。

        Args:
            memos (List[Memo]): 表示するメモ（表示順のまま）。
        """
        self.memos = list(memos)
        self.memo_list.clear()
        for memo in self.memos:
            text = f"[{category_label(memo.category)}] {memo.title}"
            if memo.tags:
                text += "  " + " ".join(f"#{tag}" for tag in memo.tags)
            item = QListWidgetItem(text)
            item.setData(Qt.ItemDataRole.UserRole, memo)
            self.memo_list.addItem(item)
        self.status_label.setText(f"{len(self.memos)}件のメモ")

    def _on_item_activated(self, item: QListWidgetItem) -> None:
        memo = item.data(Qt.ItemDataRole.UserRole)
        if memo is not None:
            self.memo_activated.emit(memo)
