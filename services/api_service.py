# services/api_service.py
"""
ホスト型リレーショナルバックエンド（PostgREST互換のREST API）への
テーブル単位のアクセスを提供します。

`APIService.table("memos")` が返す TableQuery に条件を積み上げ、
`execute()` で1回のHTTPリクエストとして送信します。
"""
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple, Union

from utils.api_utils import APIUtils

if TYPE_CHECKING:
    from utils.config import AppConfig

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


class APIError(Exception):
    """バックエンドがエラーを返した場合に送出される例外。"""


@dataclass
class APIResponse:
    """TableQuery.execute() の結果。

    Attributes:
        data (Union[List[Row], Row, None]): 取得した行。single() 指定時は1行の辞書。
        status_code (int): HTTPステータスコード。
    """
    data: Union[List[Row], Row, None]
    status_code: int = 200


class TableQuery:
    """1つのテーブルに対するクエリビルダー。

    メソッドはすべて自身を返すため、チェーンして記述できます::

        api.table("memos").select("*").eq("id", memo_id).single().execute()
    """

    def __init__(self, service: "APIService", table_name: str) -> None:
        self.service = service
        self.table_name = table_name
        self.method: str = "GET"
        self.body: Optional[Any] = None
        self.params: List[Tuple[str, str]] = []
        self.headers: Dict[str, str] = {}
        self.is_single: bool = False
        self._returning: bool = False

    # --- 操作の種類 ---

    def select(self, columns: str = "*") -> "TableQuery":
        """SELECTを指定する。書き込み操作の後に呼ぶと、影響を受けた行を読み戻す。"""
        if self.method != "GET":
            self._returning = True
        self.params.append(("select", columns))
        return self

    def insert(self, rows: Union[Row, List[Row]]) -> "TableQuery":
        self.method = "POST"
        self.body = rows
        return self

    def update(self, values: Row) -> "TableQuery":
        self.method = "PATCH"
        self.body = values
        return self

    def delete(self) -> "TableQuery":
        self.method = "DELETE"
        return self

    # --- フィルタ ---

    def eq(self, column: str, value: Any) -> "TableQuery":
        self.params.append((column, f"eq.{value}"))
        return self

    def neq(self, column: str, value: Any) -> "TableQuery":
        self.params.append((column, f"neq.{value}"))
        return self

    def or_(self, filters: str) -> "TableQuery":
        """OR条件を指定する。例: "title.ilike.%foo%,content.ilike.%foo%" """
        self.params.append(("or", f"({filters})"))
        return self

    # --- 並び順・件数 ---

    def order(self, column: str, ascending: bool = True) -> "TableQuery":
        direction = "asc" if ascending else "desc"
        self.params.append(("order", f"{column}.{direction}"))
        return self

    def limit(self, count: int) -> "TableQuery":
        self.params.append(("limit", str(count)))
        return self

    def single(self) -> "TableQuery":
        """結果をちょうど1行として受け取る。0行または複数行の場合はエラーになる。"""
        self.is_single = True
        return self

    # --- 送信 ---

    def build_headers(self) -> Dict[str, str]:
        """送信するHTTPヘッダーを組み立てる。"""
        headers = dict(self.service.base_headers())
        if self.method != "GET":
            headers["Prefer"] = "return=representation" if self._returning else "return=minimal"
        if self.is_single:
            headers["Accept"] = "application/vnd.pgrst.object+json"
        headers.update(self.headers)
        return headers

    def execute(self) -> APIResponse:
        """クエリを1回のHTTPリクエストとして送信する。

        Returns:
            APIResponse: 取得・書き込みされた行。

        Raises:
            APIError: バックエンドがエラーを返した場合。
            requests.exceptions.RequestException: ネットワークエラーの場合。
        """
        response = APIUtils.make_api_request(
            self.service.table_url(self.table_name),
            method=self.method,
            data=self.body,
            params=self.params,
            headers=self.build_headers(),
            timeout=self.service.api_config["timeout"],
        )
        try:
            data = APIUtils.handle_api_response(response)
        except ValueError as e:
            raise APIError(str(e)) from e
        return APIResponse(data=data, status_code=response.status_code)


class APIService:
    """外部APIとの連携を管理するサービスクラス。

    接続先URL・APIキー・タイムアウトを保持し、テーブルごとのクエリビルダーを
    生成します。ストアにはこのインスタンスを明示的に渡して使います。
    """

    REST_PATH = "/rest/v1"

    def __init__(self, api_base_url: str = "", api_key: str = "", timeout: float = 30) -> None:
        """APIServiceのコンストラクタ。

        Args:
            api_base_url (str): 接続先APIのベースURL。
            api_key (str): APIキー（匿名キー）。
            timeout (float): 1リクエストあたりのタイムアウト秒数。
        """
        self.api_config: Dict[str, Any] = {
            "base_url": api_base_url.rstrip("/"),
            "api_key": api_key,
            "timeout": timeout,
        }

    @classmethod
    def from_config(cls, config: "AppConfig") -> "APIService":
        return cls(config.api_base_url, config.api_key, config.request_timeout)

    def table_url(self, table_name: str) -> str:
        return f"{self.api_config['base_url']}{self.REST_PATH}/{table_name}"

    def base_headers(self) -> Dict[str, str]:
        key = self.api_config["api_key"]
        headers = {"Content-Type": "application/json"}
        if key:
            headers["apikey"] = key
            headers["Authorization"] = f"Bearer {key}"
        return headers

    def table(self, table_name: str) -> TableQuery:
        """指定テーブルに対する新しいクエリを返す。"""
        return TableQuery(self, table_name)
