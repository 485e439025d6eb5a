from typing import Dict, List, Optional, Tuple

from PyQt6 import sip
from PyQt6.QtCore import Qt, QObject, QEvent
from PyQt6.QtWidgets import QAbstractScrollArea, QWidget


class _WheelBlocker(QObject):
    """スクロール領域のビューポートに届くホイールイベントを破棄するイベントフィルタ。"""

    def eventFilter(self, obj: QObject, event: QEvent) -> bool:
        return event.type() == QEvent.Type.Wheel


class ScrollGuard:
    """
    背景ウィンドウのスクロールを一時的に止めるためのガード。

    acquire() で対象ウィジェット配下のスクロール領域のスクロールバーを隠し、
    ホイール操作を無効化します。release() で元の状態に戻します。
    どちらも何度呼んでも安全です。

    参照カウントは持たないため、同じ対象に複数のガードを同時に使うと
    後から解放した側の状態が残ります。
    """

    def __init__(self, target: QWidget, exclude: Optional[QWidget] = None) -> None:
        """
        ScrollGuardのコンストラクタ。

        Args:
            target (QWidget): スクロールを止める対象（通常はメインウィンドウ）。
            exclude (Optional[QWidget]): 対象外にするウィジェット（オーバーレイ自身）。
        """
        self.target = target
        self.exclude = exclude
        self._blocker = _WheelBlocker()
        self._saved: Dict[int, Tuple[QAbstractScrollArea, Qt.ScrollBarPolicy, Qt.ScrollBarPolicy]] = {}
        self.active: bool = False

    def _scroll_areas(self) -> List[QAbstractScrollArea]:
        areas = self.target.findChildren(QAbstractScrollArea)
        if self.exclude is None:
            return areas
        return [area for area in areas if not self.exclude.isAncestorOf(area)]

    def acquire(self) -> None:
        """スクロールを抑止する。すでに抑止中なら何もしない。"""
        if self.active or sip.isdeleted(self.target):
            return
        for area in self._scroll_areas():
            self._saved[id(area)] = (
                area,
                area.verticalScrollBarPolicy(),
                area.horizontalScrollBarPolicy(),
            )
            area.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
            area.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
            area.viewport().installEventFilter(self._blocker)
        self.active = True

    def release(self) -> None:
        """スクロールの抑止を解除する。抑止していなければ何もしない。"""
        if not self.active:
            return
        for area, vertical, horizontal in self._saved.values():
            # 解除前に破棄されたウィジェットは飛ばす
            if sip.isdeleted(area):
                continue
            area.setVerticalScrollBarPolicy(vertical)
            area.setHorizontalScrollBarPolicy(horizontal)
            area.viewport().removeEventFilter(self._blocker)
        self._saved.clear()
        self.active = False
