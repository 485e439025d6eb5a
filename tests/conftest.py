"""
テスト共通の設定とフィクスチャ。

Qtをヘッドレスで動かすための環境変数設定、QApplicationの生成、
`memos` テーブルを模したインメモリのテーブルクライアントを提供します。
"""
import os
import re
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt6.QtWidgets import QApplication

from models.memo_models import Memo
from services.api_service import APIError, APIResponse
from services.memo_service import MemoService


def _like_to_regex(pattern: str) -> "re.Pattern[str]":
    parts = [re.escape(part) for part in pattern.split("%")]
    return re.compile("^" + ".*".join(parts) + "$", re.IGNORECASE | re.DOTALL)


class FakeTableQuery:
    """TableQueryと同じインターフェースを持つ、インメモリのクエリ。"""

    def __init__(self, service: "FakeAPIService", table_name: str) -> None:
        self.service = service
        self.table_name = table_name
        self.method = "GET"
        self.body: Any = None
        self.filters: List[Tuple[str, str, Any]] = []
        self.or_filters: List[List[Tuple[str, str, Any]]] = []
        self.order_by: Optional[Tuple[str, bool]] = None
        self.row_limit: Optional[int] = None
        self.columns = "*"
        self.is_single = False
        self.returning = False

    def select(self, columns: str = "*") -> "FakeTableQuery":
        if self.method != "GET":
            self.returning = True
        self.columns = columns
        return self

    def insert(self, rows):
        self.method = "POST"
        self.body = rows
        return self

    def update(self, values):
        self.method = "PATCH"
        self.body = values
        return self

    def delete(self):
        self.method = "DELETE"
        return self

    def eq(self, column, value):
        self.filters.append(("eq", column, value))
        return self

    def neq(self, column, value):
        self.filters.append(("neq", column, value))
        return self

    def or_(self, filters: str):
        group = []
        for part in filters.split(","):
            column, op, value = part.split(".", 2)
            group.append((op, column, value))
        self.or_filters.append(group)
        return self

    def order(self, column, ascending=True):
        self.order_by = (column, ascending)
        return self

    def limit(self, count):
        self.row_limit = count
        return self

    def single(self):
        self.is_single = True
        return self

    @staticmethod
    def _matches(row: Dict[str, Any], op: str, column: str, value: Any) -> bool:
        if op == "eq":
            return str(row.get(column)) == str(value)
        if op == "neq":
            return str(row.get(column)) != str(value)
        if op == "ilike":
            return bool(_like_to_regex(value).match(str(row.get(column, ""))))
        raise ValueError(f"unsupported operator: {op}")

    def _selected(self) -> List[Dict[str, Any]]:
        rows = self.service.tables.setdefault(self.table_name, [])
        result = []
        for row in rows:
            if not all(self._matches(row, op, col, val) for op, col, val in self.filters):
                continue
            if not all(any(self._matches(row, op, col, val) for op, col, val in group)
                       for group in self.or_filters):
                continue
            result.append(row)
        return result

    def _project(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        if self.columns == "*":
            return [dict(row) for row in rows]
        names = [name.strip() for name in self.columns.split(",")]
        return [{name: row[name] for name in names} for row in rows]

    def execute(self) -> APIResponse:
        self.service.calls.append((self.method, self.table_name))
        if self.service.fail_with is not None:
            raise self.service.fail_with

        table = self.service.tables.setdefault(self.table_name, [])
        if self.method == "GET":
            rows = self._selected()
            if self.order_by is not None:
                column, ascending = self.order_by
                rows = sorted(rows, key=lambda r: r[column], reverse=not ascending)
            if self.row_limit is not None:
                rows = rows[:self.row_limit]
            affected = rows
        elif self.method == "POST":
            new_rows = self.body if isinstance(self.body, list) else [self.body]
            existing = {row["id"] for row in table}
            for row in new_rows:
                if row["id"] in existing:
                    raise APIError("duplicate key value violates unique constraint")
            table.extend(dict(row) for row in new_rows)
            affected = new_rows
        elif self.method == "PATCH":
            affected = self._selected()
            for row in affected:
                row.update(self.body)
        else:
            affected = self._selected()
            self.service.tables[self.table_name] = [row for row in table if row not in affected]

        if self.method != "GET" and not self.returning:
            return APIResponse(data=None, status_code=204)

        data = self._project(affected)
        if self.is_single:
            if len(data) != 1:
                raise APIError("JSON object requested, multiple (or no) rows returned")
            return APIResponse(data=data[0])
        return APIResponse(data=data)


class FakeAPIService:
    """APIServiceの代わりにテストで使う、インメモリのテーブルクライアント。"""

    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.calls: List[Tuple[str, str]] = []
        self.fail_with: Optional[Exception] = None

    def table(self, table_name: str) -> FakeTableQuery:
        return FakeTableQuery(self, table_name)


def make_memo(memo_id: str, created_at: str, **overrides: Any) -> Memo:
    values: Dict[str, Any] = {
        "id": memo_id,
        "title": f"Memo {memo_id}",
        "content": f"content of {memo_id}",
        "category": "personal",
        "tags": [],
        "created_at": created_at,
        "updated_at": created_at,
    }
    values.update(overrides)
    return Memo(**values)


def wait_until(app: QApplication, predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    """イベントを処理しながら、条件が満たされるかタイムアウトするまで待つ。"""
    deadline = time.monotonic() + timeout
    while not predicate() and time.monotonic() < deadline:
        app.processEvents()
        time.sleep(0.01)
    return predicate()


@pytest.fixture(scope="session")
def qapp() -> QApplication:
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    return app


@pytest.fixture
def api() -> FakeAPIService:
    return FakeAPIService()


@pytest.fixture
def store(api: FakeAPIService) -> MemoService:
    return MemoService(api)
