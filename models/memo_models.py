# models/memo_models.py
import uuid
import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

# カテゴリ名 -> 表示ラベル（表示順を保持）
MEMO_CATEGORIES: Dict[str, str] = {
    "personal": "個人",
    "work": "仕事",
    "study": "学習",
    "idea": "アイデア",
    "other": "その他",
}

# カテゴリ名 -> (背景色, 文字色)
CATEGORY_COLORS: Dict[str, Tuple[str, str]] = {
    "personal": ("#dbeafe", "#1e40af"),
    "work": ("#dcfce7", "#166534"),
    "study": ("#f3e8ff", "#6b21a8"),
    "idea": ("#fef9c3", "#854d0e"),
    "other": ("#f3f4f6", "#1f2937"),
}

DEFAULT_CATEGORY = "other"


def category_label(category: str) -> str:
    """カテゴリの表示ラベルを返す。未知のカテゴリは「その他」として表示する。"""
    return MEMO_CATEGORIES.get(category, MEMO_CATEGORIES[DEFAULT_CATEGORY])


def category_colors(category: str) -> Tuple[str, str]:
    """カテゴリのバッジ色を返す。未知のカテゴリは「その他」の色になる。"""
    return CATEGORY_COLORS.get(category, CATEGORY_COLORS[DEFAULT_CATEGORY])


def utc_now_iso(offset: Optional[datetime.timedelta] = None) -> str:
    """現在時刻（UTC）をISO 8601形式の文字列で返す。"""
    now = datetime.datetime.now(datetime.timezone.utc)
    if offset is not None:
        now += offset
    return now.isoformat()


@dataclass
class Memo:
    """ユーザーが作成する単一のメモを表現するデータモデル。

    保存値は外部テーブルの行と1対1に対応し、カテゴリは未知の値であっても
    そのまま保持されます（表示時のみ「その他」として扱う）。

    Attributes:
        id (str): メモの一意なID。作成時に呼び出し側が割り当てる。
        title (str): メモのタイトル。
        content (str): メモの本文（Markdown形式）。
        category (str): カテゴリ名（personal, work, study, idea, other）。
        tags (List[str]): タグのリスト。順序は保持される。
        created_at (str): メモの作成日時（ISO 8601形式）。
        updated_at (str): メモの最終更新日時（ISO 8601形式）。
    """
    id: str
    title: str
    content: str
    category: str = DEFAULT_CATEGORY
    tags: List[str] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def create(
        cls,
        title: str,
        content: str,
        category: str = DEFAULT_CATEGORY,
        tags: Optional[List[str]] = None
    ) -> "Memo":
        """新しいIDと現在時刻を割り当てたメモを生成する。

        Args:
            title (str): タイトル。
            content (str): 本文。
            category (str): カテゴリ名。
            tags (Optional[List[str]]): タグのリスト。

        Returns:
            Memo: 作成日時と更新日時が同一の新規メモ。
        """
        now = utc_now_iso()
        return cls(
            id=str(uuid.uuid4()),
            title=title,
            content=content,
            category=category,
            tags=list(tags or []),
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Memo":
        """外部テーブルの行（辞書）からメモを復元する。

        Args:
            row (Dict[str, Any]): `memos` テーブルの1行。

        Returns:
            Memo: 復元されたメモ。

        Raises:
            KeyError: 必須カラムが欠けている場合。
        """
        return cls(
            id=row["id"],
            title=row["title"],
            content=row["content"],
            category=row["category"],
            tags=list(row.get("tags") or []),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def to_row(self) -> Dict[str, Any]:
        """外部テーブルへ書き込むための行（辞書）に変換する。"""
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "category": self.category,
            "tags": list(self.tags),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def is_edited(self) -> bool:
        """作成後に更新されているかどうか。"""
        return self.updated_at != self.created_at
