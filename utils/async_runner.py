# utils/async_runner.py
"""ストアのコルーチンをワーカースレッドで実行し、結果をGUIスレッドに返す機能を提供します。"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Set

from PyQt6.QtCore import QThread, pyqtSignal, QObject

logger = logging.getLogger(__name__)

ResultCallback = Callable[[Any], None]
ErrorCallback = Callable[[str], None]

# (awaitable, 結果のコールバック[, エラーのコールバック]) を受け取る実行関数の型
Runner = Callable[..., None]


async def _await(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


class AsyncTaskThread(QThread):
    """1つのawaitableを専用のイベントループで実行するワーカースレッド。

    UIのフリーズを防ぐため、バックエンドとの通信をバックグラウンドで実行します。
    スレッドオブジェクト自体は生成元（GUI）スレッドに属するため、
    シグナルに接続した自身のメソッドはGUIスレッドで呼ばれます。

    Signals:
        result_ready (pyqtSignal): 処理が完了した際に結果（object）を送信します。
        error_occurred (pyqtSignal): 想定外の例外が発生した際にメッセージ（str）を送信します。
    """
    result_ready = pyqtSignal(object)
    error_occurred = pyqtSignal(str)

    def __init__(
        self,
        awaitable: Awaitable[Any],
        callback: ResultCallback,
        on_error: Optional[ErrorCallback] = None
    ) -> None:
        """AsyncTaskThreadのコンストラクタ。

        親オブジェクトは持ちません。実行中に親ごと破棄されないよう、
        寿命は AsyncRunner が参照で管理します。

        Args:
            awaitable (Awaitable[Any]): 実行するコルーチンなど。
            callback (ResultCallback): 結果を受け取る関数（GUIスレッドで呼ばれる）。
            on_error (Optional[ErrorCallback]): エラー時に呼ばれる関数。
        """
        super().__init__()
        self.awaitable = awaitable
        self._callback = callback
        self._on_error = on_error
        self.result_ready.connect(self._deliver_result)
        self.error_occurred.connect(self._deliver_error)

    def run(self) -> None:
        """スレッドのメイン処理。awaitableを完了まで実行し、結果をシグナルで通知する。"""
        try:
            result = asyncio.run(_await(self.awaitable))
        except Exception as e:
            logger.exception("Background task failed")
            self.error_occurred.emit(f"予期せぬエラーが発生しました: {e}")
            return
        self.result_ready.emit(result)

    def _deliver_result(self, result: Any) -> None:
        self._callback(result)

    def _deliver_error(self, message: str) -> None:
        if self._on_error is not None:
            self._on_error(message)


class AsyncRunner(QObject):
    """AsyncTaskThreadの起動と後始末をまとめる実行器。

    実行中のスレッドへの参照を保持し、完了前にガベージコレクトされないようにします。
    スレッドはこのオブジェクトの子にしないため、実行器が先に破棄されても
    実行中のスレッドが巻き添えで破棄されることはありません。
    """

    # 所有者が破棄された後も、実行中のスレッドを完了まで保持する
    _live_threads: Set[AsyncTaskThread] = set()

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._threads: Set[AsyncTaskThread] = set()

    def __call__(
        self,
        awaitable: Awaitable[Any],
        callback: ResultCallback,
        on_error: Optional[ErrorCallback] = None
    ) -> None:
        self.submit(awaitable, callback, on_error)

    def submit(
        self,
        awaitable: Awaitable[Any],
        callback: ResultCallback,
        on_error: Optional[ErrorCallback] = None
    ) -> AsyncTaskThread:
        """awaitableをバックグラウンドで実行する。

        Args:
            awaitable (Awaitable[Any]): 実行するコルーチンなど。
            callback (ResultCallback): 結果を受け取る関数。
            on_error (Optional[ErrorCallback]): エラー時に呼ばれる関数。

        Returns:
            AsyncTaskThread: 起動したスレッド。
        """
        thread = AsyncTaskThread(awaitable, callback, on_error)
        threads = self._threads
        live = AsyncRunner._live_threads
        thread.finished.connect(lambda: _release(thread, threads, live))
        threads.add(thread)
        live.add(thread)
        thread.start()
        return thread

    def pending_count(self) -> int:
        return len(self._threads)

    def wait_all(self, msecs: Optional[int] = None) -> bool:
        """実行中のスレッドがすべて終了するまで待つ（終了処理用）。

        Args:
            msecs (Optional[int]): スレッドごとの待ち時間の上限。Noneなら無制限。

        Returns:
            bool: すべてのスレッドが終了していればTrue。
        """
        for thread in list(self._threads):
            if msecs is None:
                thread.wait()
            else:
                thread.wait(msecs)
        return all(thread.isFinished() for thread in self._threads)


def _release(thread: AsyncTaskThread, *registries: Set[AsyncTaskThread]) -> None:
    for registry in registries:
        registry.discard(thread)
    thread.deleteLater()


def run_blocking(
    awaitable: Awaitable[Any],
    callback: ResultCallback,
    on_error: Optional[ErrorCallback] = None
) -> None:
    """awaitableを呼び出し元のスレッドで完了まで実行し、すぐにコールバックする。

    GUIのイベントループを持たないスクリプトやテストで使います。
    on_errorを渡さない場合、例外はそのまま呼び出し元に伝わります。
    """
    try:
        result = asyncio.run(_await(awaitable))
    except Exception as e:
        if on_error is None:
            raise
        logger.exception("Task failed")
        on_error(f"予期せぬエラーが発生しました: {e}")
        return
    callback(result)
