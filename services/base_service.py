# services/base_service.py
import asyncio
import logging
from abc import ABC
from typing import Callable, TypeVar, Generic

import requests

from services.api_service import APIService, APIError

logger = logging.getLogger(__name__)

# データモデルを表すジェネリック型を定義
T = TypeVar('T')
R = TypeVar('R')

# バックエンド呼び出しで失敗とみなす例外
BACKEND_ERRORS = (APIError, requests.exceptions.RequestException, KeyError, TypeError, ValueError)


class BaseService(Generic[T], ABC):
    """
    バックエンドと通信するサービスクラスの基底となる抽象クラス（ABC）。

    APIサービスへの参照を保持し、「失敗を例外として伝播させず、既定値に変換する」
    という共通のエラー方針を提供します。

    Attributes:
        api_service (APIService): テーブルクライアント。
    """

    def __init__(self, api_service: APIService) -> None:
        """BaseServiceのコンストラクタ。

        Args:
            api_service (APIService): APIサービスインスタンス。
        """
        self.api_service = api_service

    async def _run(self, action: str, call: Callable[[], R], default: R) -> R:
        """ブロッキングなバックエンド呼び出しを別スレッドで実行する。

        呼び出し中のエラーはログに記録し、defaultを返します。

        Args:
            action (str): ログに出力する操作名。
            call (Callable[[], R]): 実行する処理。
            default (R): 失敗時に返す値。

        Returns:
            R: 処理結果、または失敗時のdefault。
        """
        try:
            return await asyncio.to_thread(call)
        except BACKEND_ERRORS as e:
            logger.error("Error %s: %s", action, e)
            return default
        except Exception:
            logger.exception("Unexpected error %s", action)
            return default
