# utils/config.py
"""環境変数（および .env ファイル）からアプリケーション設定を読み込みます。"""
import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

PLACEHOLDER_URL = "https://placeholder.supabase.co"
PLACEHOLDER_KEY = "placeholder-key"


@dataclass
class AppConfig:
    """アプリケーション設定。

    Attributes:
        api_base_url (str): バックエンドのベースURL。
        api_key (str): バックエンドの匿名APIキー。
        request_timeout (float): 1リクエストあたりのタイムアウト秒数。
        log_level (str): ログレベル名。
    """
    api_base_url: str = PLACEHOLDER_URL
    api_key: str = PLACEHOLDER_KEY
    request_timeout: float = 30.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, load_env_file: bool = True) -> "AppConfig":
        """環境変数から設定を生成する。

        URLが未設定の場合はプレースホルダーを使い、警告をログに出力します。

        Args:
            environ (Optional[Mapping[str, str]]): 参照する環境変数。省略時は os.environ。
            load_env_file (bool): カレントディレクトリの .env を読み込むかどうか。

        Returns:
            AppConfig: 読み込まれた設定。
        """
        if load_env_file:
            load_dotenv()
        env = os.environ if environ is None else environ

        url = env.get("SUPABASE_URL", "")
        if not url:
            logger.warning("SUPABASE_URL is not set. Please configure your environment variables.")

        try:
            timeout = float(env.get("MEMO_REQUEST_TIMEOUT", "30"))
        except ValueError:
            logger.warning("Invalid MEMO_REQUEST_TIMEOUT, falling back to 30 seconds")
            timeout = 30.0

        return cls(
            api_base_url=url or PLACEHOLDER_URL,
            api_key=env.get("SUPABASE_ANON_KEY", "") or PLACEHOLDER_KEY,
            request_timeout=timeout,
            log_level=env.get("MEMO_LOG_LEVEL", "INFO").upper(),
        )
