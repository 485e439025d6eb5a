# ui/dialogs/memo_editor_dialog.py
"""
メモの作成・編集用のダイアログウィンドウを提供します。

このモジュールには、タイトル・カテゴリ・タグ・本文を入力して
メモを作成または更新するための MemoEditorDialog クラスが含まれています。
"""
from __future__ import annotations
import dataclasses
from typing import List, Optional

from PyQt6.QtWidgets import (
    QDialog, QVBoxLayout, QGridLayout, QLabel, QLineEdit, QComboBox,
    QPlainTextEdit, QDialogButtonBox, QWidget
)
from PyQt6.QtCore import Qt

from models.memo_models import MEMO_CATEGORIES, DEFAULT_CATEGORY, Memo, utc_now_iso


def parse_tags(text: str) -> List[str]:
    """カンマ区切りの文字列をタグのリストに変換する。空要素と先頭の#は除く。"""
    tags = []
    for part in text.split(","):
        tag = part.strip().lstrip("#").strip()
        if tag:
            tags.append(tag)
    return tags


class MemoEditorDialog(QDialog):
    """
    メモを作成・編集するモーダルダイアログ。

    既存のメモを渡した場合は編集モードになり、IDと作成日時を引き継ぎます。
    入力値の検証は行いません（空のタイトルや本文も受け付けます）。
    """
    def __init__(self, parent: Optional[QWidget], memo: Optional[Memo] = None) -> None:
        """
        MemoEditorDialogのコンストラクタ。

        Args:
            parent (Optional[QWidget]): 親ウィジェット。通常はMainWindow。
            memo (Optional[Memo]): 編集するメモ。Noneの場合は新規作成。
        """
        super().__init__(parent)
        self.setWindowTitle("メモを編集" if memo else "新規メモ")
        self.setModal(True)
        self.setWindowModality(Qt.WindowModality.WindowModal)
        self.resize(560, 480)

        self.original: Optional[Memo] = memo

        # UIコンポーネントの型ヒント
        self.title_edit: QLineEdit
        self.category_combo: QComboBox
        self.tags_edit: QLineEdit
        self.content_edit: QPlainTextEdit

        layout = QVBoxLayout(self)
        grid = QGridLayout()

        grid.addWidget(QLabel("タイトル"), 0, 0)
        self.title_edit = QLineEdit()
        grid.addWidget(self.title_edit, 0, 1)

        grid.addWidget(QLabel("カテゴリ"), 1, 0)
        self.category_combo = QComboBox()
        for key, label in MEMO_CATEGORIES.items():
            self.category_combo.addItem(label, key)
        grid.addWidget(self.category_combo, 1, 1)

        grid.addWidget(QLabel("タグ"), 2, 0)
        self.tags_edit = QLineEdit()
        self.tags_edit.setPlaceholderText("カンマ区切り（例: 仕事, 会議）")
        grid.addWidget(self.tags_edit, 2, 1)

        layout.addLayout(grid)

        self.content_edit = QPlainTextEdit()
        self.content_edit.setPlaceholderText("Markdownで本文を入力")
        layout.addWidget(self.content_edit, 1)

        button_box = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel)
        button_box.accepted.connect(self.accept)
        button_box.rejected.connect(self.reject)
        layout.addWidget(button_box)

        if memo is not None:
            self._load(memo)

    def _load(self, memo: Memo) -> None:
        """既存メモの内容を入力欄に反映する。"""
        self.title_edit.setText(memo.title)
        index = self.category_combo.findData(memo.category)
        if index < 0:
            # 未知のカテゴリは保存値を保つため項目として追加する
            self.category_combo.addItem(memo.category, memo.category)
            index = self.category_combo.count() - 1
        self.category_combo.setCurrentIndex(index)
        self.tags_edit.setText(", ".join(memo.tags))
        self.content_edit.setPlainText(memo.content)

    def result_memo(self) -> Memo:
        """
        入力内容からメモを組み立てる。

        Returns:
            Memo: 新規作成の場合は新しいID付きのメモ、編集の場合は更新日時を
                  現在時刻にしたメモ。
        """
        title = self.title_edit.text().strip()
        content = self.content_edit.toPlainText()
        category = self.category_combo.currentData() or DEFAULT_CATEGORY
        tags = parse_tags(self.tags_edit.text())

        if self.original is None:
            return Memo.create(title, content, category, tags)
        return dataclasses.replace(
            self.original,
            title=title,
            content=content,
            category=category,
            tags=tags,
            updated_at=utc_now_iso(),
        )
