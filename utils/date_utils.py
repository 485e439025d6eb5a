# utils/date_utils.py
import datetime
import re
from typing import Optional

from PyQt6.QtCore import QDateTime, QLocale

# 例: 2024年1月1日 09:00
LONG_FORMAT = "yyyy年M月d日 HH:mm"

# 秒の小数部。桁数はバックエンドにより1〜9桁のばらつきがある
_FRACTION_PATTERN = re.compile(r"\.(\d+)")


def _normalize_fraction(value: str) -> str:
    """小数秒をfromisoformatが必ず受け付ける6桁にそろえる。"""
    return _FRACTION_PATTERN.sub(lambda m: "." + m.group(1).ljust(6, "0")[:6], value, count=1)


def parse_iso(date_string: str) -> datetime.datetime:
    """ISO 8601形式の文字列をタイムゾーン付きのdatetimeに変換する。

    末尾の "Z" もUTCとして扱う。タイムゾーンがない場合はUTCとみなす。
    小数秒は桁数に関わらずマイクロ秒単位に丸める（7桁目以降は切り捨て）。

    Raises:
        ValueError: 解釈できない文字列の場合。
    """
    value = date_string.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.datetime.fromisoformat(_normalize_fraction(value))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


def format_datetime(date_string: str, locale: Optional[QLocale] = None) -> str:
    """日時文字列をローカル時刻の長い形式（年月日と時分）で表示用に整形する。

    解釈できない文字列はそのまま返す。

    Args:
        date_string (str): ISO 8601形式の日時。
        locale (Optional[QLocale]): 整形に使うロケール。省略時は日本語。

    Returns:
        str: 表示用の文字列。
    """
    try:
        parsed = parse_iso(date_string)
    except ValueError:
        return date_string
    qdt = QDateTime.fromSecsSinceEpoch(int(parsed.timestamp()))
    locale = locale or QLocale(QLocale.Language.Japanese)
    return locale.toString(qdt, LONG_FORMAT)
