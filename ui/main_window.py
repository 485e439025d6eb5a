# ui/main_window.py
import logging
from typing import List, Optional

from PyQt6.QtCore import QTimer
from PyQt6.QtGui import QCloseEvent
from PyQt6.QtWidgets import QMainWindow, QMessageBox, QDialog

from models.memo_models import Memo
from services.memo_service import MemoService, ALL_CATEGORIES
from ui.dialogs import MemoEditorDialog
from ui.screens.memo_screen import MemoScreen
from ui.widgets import MemoViewer
from utils.async_runner import AsyncRunner, Runner

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """
    メモアプリのメインウィンドウ。

    一覧画面（MemoScreen）とメモビューア（MemoViewer）をまとめ、
    ユーザー操作に応じてメモストアを呼び出すコーディネーターです。
    ストアの呼び出しはすべてワーカースレッドで行い、結果をGUIスレッドで反映します。
    """

    def __init__(self, store: MemoService, runner: Optional[Runner] = None, seed: bool = True) -> None:
        """
        MainWindowのコンストラクタ。

        Args:
            store (MemoService): メモストア。
            runner (Optional[Runner]): awaitableの実行関数。省略時はワーカースレッド。
            seed (bool): 起動時にサンプルデータを投入するかどうか。
        """
        super().__init__()
        self.setWindowTitle("メモ帳")
        self.setGeometry(100, 100, 960, 720)

        self.store = store
        self._async_runner: Optional[AsyncRunner] = None
        if runner is None:
            self._async_runner = AsyncRunner(self)
            runner = self._async_runner
        self.runner: Runner = runner
        self._refresh_seq: int = 0

        self.memo_screen = MemoScreen(self)
        self.setCentralWidget(self.memo_screen)

        self.memo_viewer = MemoViewer(
            self,
            on_edit=self.request_edit,
            on_delete=self.store.delete_memo,
            runner=self.runner,
        )

        self.connect_signals()

        if seed:
            self.runner(self.store.seed_sample_data(), lambda _: self.refresh())
        else:
            self.refresh()

    def connect_signals(self) -> None:
        """画面とビューアのシグナルを接続する。"""
        self.memo_screen.query_changed.connect(self.refresh)
        self.memo_screen.new_memo_requested.connect(self.create_memo)
        self.memo_screen.memo_activated.connect(self.show_memo)
        self.memo_viewer.memo_deleted.connect(lambda _: self.refresh())

    # --- 一覧 ---

    def refresh(self) -> None:
        """
        検索文字列があれば検索、なければカテゴリで絞り込んで一覧を更新する。

        応答は順不同で届くため、後から発行した更新より古い応答は捨てる。
        """
        query = self.memo_screen.search_text()
        category = self.memo_screen.selected_category()
        if query:
            awaitable = self.store.search_memos(query)
        elif category != ALL_CATEGORIES:
            awaitable = self.store.filter_by_category(category)
        else:
            awaitable = self.store.list_memos()
        self._refresh_seq += 1
        seq = self._refresh_seq
        self.runner(awaitable, lambda memos: self._on_memos_loaded(seq, memos))

    def _on_memos_loaded(self, seq: int, memos: List[Memo]) -> None:
        if seq != self._refresh_seq:
            logger.debug("Dropping stale memo list (request %d, latest %d)", seq, self._refresh_seq)
            return
        self.memo_screen.set_memos(memos)

    def show_memo(self, memo: Memo) -> None:
        self.memo_viewer.set_memo(memo, True)

    # --- 作成・編集・削除 ---

    def create_memo(self) -> None:
        """新規メモの入力ダイアログを開き、確定されたら保存する。"""
        dialog = MemoEditorDialog(self)
        if dialog.exec() != QDialog.DialogCode.Accepted:
            return
        self.runner(self.store.add_memo(dialog.result_memo()), self._on_memo_saved)

    def request_edit(self, memo: Memo) -> None:
        """ビューアの編集要求。ビューアが閉じた後に編集ダイアログを開く。"""
        QTimer.singleShot(0, lambda: self.edit_memo(memo))

    def edit_memo(self, memo: Memo) -> None:
        dialog = MemoEditorDialog(self, memo)
        if dialog.exec() != QDialog.DialogCode.Accepted:
            return
        self.runner(self.store.update_memo(dialog.result_memo()), self._on_memo_saved)

    def _on_memo_saved(self, memo: Optional[Memo]) -> None:
        if memo is None:
            logger.warning("Memo could not be saved")
            QMessageBox.warning(self, "保存エラー", "メモを保存できませんでした。")
        self.refresh()

    def closeEvent(self, event: QCloseEvent) -> None:
        """終了時に実行中のバックエンド処理の完了を待つ。各処理の長さは通信のタイムアウトで上限がある。"""
        if self._async_runner is not None:
            self._async_runner.wait_all()
        super().closeEvent(event)
