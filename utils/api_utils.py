# utils/api_utils.py
import logging
import requests
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)


class APIUtils:
    """API連携に関する共通処理を提供するユーティリティクラス。"""

    @staticmethod
    def make_api_request(
        url: str,
        method: str = "GET",
        data: Optional[Any] = None,
        params: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = 30
    ) -> requests.Response:
        """指定されたURLにAPIリクエストを送信し、レスポンスを返す。

        ステータスコードの判定は呼び出し側（handle_api_response）に任せる。
        バックエンドのエラー本文を解釈できるようにするためです。

        Args:
            url (str): リクエストを送信するAPIエンドポイントのURL。
            method (str): HTTPメソッド（例: "GET", "POST", "PATCH", "DELETE"）。
            data (Optional[Any]): リクエストボディとして送信するデータ（JSON）。
            params (Optional[Dict[str, str]]): クエリパラメータ。
            headers (Optional[Dict[str, str]]): 追加のHTTPヘッダー。
            timeout (float): タイムアウト秒数。

        Returns:
            requests.Response: APIからのレスポンス。

        Raises:
            requests.exceptions.RequestException: ネットワークエラーの場合。
        """
        try:
            return requests.request(
                method, url, json=data, params=params, headers=headers, timeout=timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error("API request to %s failed: %s", url, e)
            raise

    @staticmethod
    def handle_api_response(response: requests.Response) -> Any:
        """APIレスポンスを解釈し、JSONデータを抽出する。

        Args:
            response (requests.Response): make_api_requestが返したレスポンス。

        Returns:
            Any: パース済みのJSONデータ。本文が空の場合はNone。

        Raises:
            ValueError: 2xx以外のステータスコードの場合。メッセージにはエラー本文を含む。
        """
        if not response.ok:
            try:
                detail = response.json()
            except ValueError:
                detail = response.text
            if isinstance(detail, dict):
                detail = detail.get("message") or detail.get("error") or detail
            raise ValueError(f"API Error ({response.status_code}): {detail}")

        if not response.content:
            return None
        return response.json()
