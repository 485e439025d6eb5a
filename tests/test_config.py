"""環境変数からの設定読み込みのテスト。"""

import logging

from utils.config import AppConfig, PLACEHOLDER_KEY, PLACEHOLDER_URL


def test_reads_environment():
    config = AppConfig.from_env({
        "SUPABASE_URL": "https://abc.supabase.co",
        "SUPABASE_ANON_KEY": "key",
        "MEMO_REQUEST_TIMEOUT": "12.5",
        "MEMO_LOG_LEVEL": "debug",
    }, load_env_file=False)
    assert config.api_base_url == "https://abc.supabase.co"
    assert config.api_key == "key"
    assert config.request_timeout == 12.5
    assert config.log_level == "DEBUG"


def test_missing_url_uses_placeholder_and_warns(caplog):
    with caplog.at_level(logging.WARNING):
        config = AppConfig.from_env({}, load_env_file=False)
    assert config.api_base_url == PLACEHOLDER_URL
    assert config.api_key == PLACEHOLDER_KEY
    assert "SUPABASE_URL is not set" in caplog.text


def test_invalid_timeout_falls_back(caplog):
    with caplog.at_level(logging.WARNING):
        config = AppConfig.from_env(
            {"SUPABASE_URL": "https://abc.supabase.co", "MEMO_REQUEST_TIMEOUT": "soon"},
            load_env_file=False,
        )
    assert config.request_timeout == 30.0
    assert "MEMO_REQUEST_TIMEOUT" in caplog.text
