# services/memo_service.py
import datetime
import uuid
import logging
from typing import Any, Dict, List, Optional

from .base_service import BaseService
from models.memo_models import Memo, utc_now_iso
from services.api_service import APIService, APIResponse

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "all"


class MemoService(BaseService[Memo]):
    """メモデータのCRUD操作を管理するサービスクラス（メモストア）。

    外部の `memos` テーブルに対して一覧・取得・検索・絞り込み・追加・更新・削除を
    行います。各操作はバックエンドへの1回の往復で完結し、ローカルにキャッシュは
    持ちません。

    失敗時は例外を送出せず、操作ごとの既定値（空リスト、None、False）を返します。
    呼び出し側は「本当に空」と「失敗」を区別できない点に注意してください。
    """

    TABLE_NAME = "memos"

    def __init__(self, api_service: APIService) -> None:
        """MemoServiceのコンストラクタ。

        Args:
            api_service (APIService): `memos` テーブルにアクセスするためのクライアント。
        """
        super().__init__(api_service)

    def _table(self):
        return self.api_service.table(self.TABLE_NAME)

    @staticmethod
    def _to_memos(response: APIResponse) -> List[Memo]:
        return [Memo.from_row(row) for row in response.data or []]

    @staticmethod
    def _to_memo(response: APIResponse) -> Memo:
        return Memo.from_row(response.data)

    async def list_memos(self) -> List[Memo]:
        """すべてのメモを作成日時の降順で取得する。

        Returns:
            List[Memo]: メモのリスト。失敗時は空リスト。
        """
        def call() -> List[Memo]:
            response = (
                self._table()
                .select("*")
                .order("created_at", ascending=False)
                .execute()
            )
            return self._to_memos(response)

        return await self._run("loading memos from database", call, [])

    async def get_memo(self, memo_id: str) -> Optional[Memo]:
        """指定されたIDのメモを取得する。

        Args:
            memo_id (str): 取得するメモのID。

        Returns:
            Optional[Memo]: 見つかったメモ。存在しない場合や失敗時はNone。
        """
        def call() -> Memo:
            response = self._table().select("*").eq("id", memo_id).single().execute()
            return self._to_memo(response)

        return await self._run("getting memo by id", call, None)

    async def search_memos(self, query: str) -> List[Memo]:
        """タイトルまたは本文に文字列を含むメモを検索する（大文字小文字を区別しない）。

        空文字列の扱いはバックエンドに委ねる。

        Args:
            query (str): 検索文字列。

        Returns:
            List[Memo]: 一致したメモ（作成日時の降順）。失敗時は空リスト。
        """
        lowercase_query = query.lower()

        def call() -> List[Memo]:
            response = (
                self._table()
                .select("*")
                .or_(f"title.ilike.%{lowercase_query}%,content.ilike.%{lowercase_query}%")
                .order("created_at", ascending=False)
                .execute()
            )
            return self._to_memos(response)

        return await self._run("searching memos in database", call, [])

    async def filter_by_category(self, category: str) -> List[Memo]:
        """カテゴリでメモを絞り込む。"all" の場合はすべてのメモを返す。

        Args:
            category (str): カテゴリ名、または "all"。

        Returns:
            List[Memo]: 該当するメモ（作成日時の降順）。失敗時は空リスト。
        """
        def call() -> List[Memo]:
            query = self._table().select("*").order("created_at", ascending=False)
            if category != ALL_CATEGORIES:
                query.eq("category", category)
            return self._to_memos(query.execute())

        return await self._run("filtering memos by category", call, [])

    async def add_memo(self, memo: Memo) -> Optional[Memo]:
        """メモを追加する。IDは呼び出し側で割り当て済みであること。

        Args:
            memo (Memo): 追加するメモ。

        Returns:
            Optional[Memo]: 保存後のメモ。失敗時はNone。
        """
        def call() -> Memo:
            response = self._table().insert(memo.to_row()).select().single().execute()
            return self._to_memo(response)

        return await self._run("adding memo to database", call, None)

    async def update_memo(self, memo: Memo) -> Optional[Memo]:
        """メモのタイトル・本文・カテゴリ・タグ・更新日時を書き換える。

        IDと作成日時は変更しません。

        Args:
            memo (Memo): 更新内容を持つメモ（idで対象を特定）。

        Returns:
            Optional[Memo]: 更新後のメモ。失敗時はNone。
        """
        values: Dict[str, Any] = {
            "title": memo.title,
            "content": memo.content,
            "category": memo.category,
            "tags": list(memo.tags),
            "updated_at": memo.updated_at,
        }

        def call() -> Memo:
            response = self._table().update(values).eq("id", memo.id).select().single().execute()
            return self._to_memo(response)

        return await self._run("updating memo in database", call, None)

    async def delete_memo(self, memo_id: str) -> bool:
        """指定されたIDのメモを削除する。

        Args:
            memo_id (str): 削除するメモのID。

        Returns:
            bool: 成功した場合はTrue、失敗した場合はFalse。
        """
        def call() -> bool:
            self._table().delete().eq("id", memo_id).execute()
            return True

        return await self._run("deleting memo from database", call, False)

    async def clear_memos(self) -> bool:
        """すべてのメモを削除する（リセット・テスト用）。"""
        def call() -> bool:
            self._table().delete().neq("id", "").execute()
            return True

        return await self._run("clearing all memos", call, False)

    async def seed_sample_data(self) -> None:
        """テーブルが空の場合にサンプルメモを挿入する。

        同時に複数の呼び出し元が空チェックを行うと、両方が挿入する可能性がある。
        """
        def call() -> None:
            existing = self._table().select("id").limit(1).execute()
            if existing.data:
                return
            self._table().insert([memo.to_row() for memo in sample_memos()]).execute()
            logger.info("Seeded sample memos")

        await self._run("seeding sample data", call, None)


def sample_memos() -> List[Memo]:
    """初回起動時に挿入するサンプルメモを生成する。"""
    now = utc_now_iso()
    an_hour_ago = utc_now_iso(datetime.timedelta(hours=-1))
    return [
        Memo(
            id=str(uuid.uuid4()),
            title="Supabaseへの移行完了",
            content="ローカルストレージからSupabaseデータベースへの移行が完了しました！",
            category="work",
            tags=["supabase", "migration", "database"],
            created_at=now,
            updated_at=now,
        ),
        Memo(
            id=str(uuid.uuid4()),
            title="Next.js 14 学習計画",
            content="App Router、Server Components、Server Actionsについて深く学習する",
            category="study",
            tags=["nextjs", "react", "learning"],
            created_at=an_hour_ago,
            updated_at=an_hour_ago,
        ),
    ]
