"""メインウィンドウ（ストア・一覧画面・ビューアの連携）のテスト。"""

import asyncio

import pytest

from conftest import make_memo, wait_until
from ui.main_window import MainWindow
from utils.async_runner import run_blocking


class DeferredRunner:
    """受け取った処理を溜めておき、テストが指定した順に完了させる実行関数。"""

    def __init__(self):
        self.pending = []

    def __call__(self, awaitable, callback, on_error=None):
        self.pending.append((awaitable, callback))

    def deliver(self, index):
        awaitable, callback = self.pending.pop(index)
        run_blocking(awaitable, callback)


class SlowSeedStore:
    def __init__(self, delay):
        self.delay = delay
        self.seeded = False

    async def seed_sample_data(self):
        await asyncio.sleep(self.delay)
        self.seeded = True
        return True

    async def list_memos(self):
        return []

    async def delete_memo(self, memo_id):
        return True


@pytest.fixture
def window(qapp, store):
    w = MainWindow(store, runner=run_blocking)
    w.memo_viewer._confirm = lambda parent, message: True
    yield w
    w.memo_viewer.close_viewer()
    w.deleteLater()


def test_seeds_and_lists_on_start(window):
    assert len(window.memo_screen.memos) == 2
    assert window.memo_screen.memo_list.count() == 2


def test_search_text_takes_precedence(window):
    window.memo_screen.search_edit.setText("next.js")
    window.refresh()
    assert [m.category for m in window.memo_screen.memos] == ["study"]


def test_category_filter(window):
    combo = window.memo_screen.category_combo
    combo.setCurrentIndex(combo.findData("work"))
    assert [m.category for m in window.memo_screen.memos] == ["work"]


def test_activating_memo_opens_viewer(window):
    memo = window.memo_screen.memos[0]
    window.memo_screen.memo_activated.emit(memo)
    assert window.memo_viewer.is_open()
    assert window.memo_viewer.memo == memo


def test_delete_from_viewer_refreshes_list(window):
    memo = window.memo_screen.memos[0]
    window.show_memo(memo)
    window.memo_viewer.delete_button.click()
    assert not window.memo_viewer.is_open()
    assert len(window.memo_screen.memos) == 1
    assert memo.id not in [m.id for m in window.memo_screen.memos]


def test_no_seed_when_table_has_rows(qapp, store, api):
    api.tables["memos"] = [make_memo("1", "2024-01-01T00:00:00Z").to_row()]
    w = MainWindow(store, runner=run_blocking)
    assert [m.id for m in w.memo_screen.memos] == ["1"]
    w.deleteLater()


def test_stale_list_response_is_dropped(qapp, store, api):
    api.tables["memos"] = [
        make_memo("1", "2024-01-02T00:00:00Z", category="work").to_row(),
        make_memo("2", "2024-01-01T00:00:00Z", category="study").to_row(),
    ]
    runner = DeferredRunner()
    w = MainWindow(store, runner=runner, seed=False)
    runner.deliver(0)
    assert len(w.memo_screen.memos) == 2

    combo = w.memo_screen.category_combo
    combo.setCurrentIndex(combo.findData("work"))
    combo.setCurrentIndex(combo.findData("study"))
    assert len(runner.pending) == 2

    # 新しい絞り込みの応答が先に届き、古い応答が後から届く
    runner.deliver(1)
    runner.deliver(0)
    assert [m.category for m in w.memo_screen.memos] == ["study"]
    w.deleteLater()


def test_close_waits_for_backend_calls_in_flight(qapp):
    store = SlowSeedStore(0.5)
    w = MainWindow(store)
    runner = w._async_runner
    assert runner.pending_count() == 1

    w.show()
    w.close()
    assert store.seeded

    assert wait_until(qapp, lambda: runner.pending_count() == 0)
    w.deleteLater()
