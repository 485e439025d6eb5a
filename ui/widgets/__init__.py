from .memo import MemoViewer, ask_confirmation
from .scroll_guard import ScrollGuard

__all__ = [
    "MemoViewer",
    "ScrollGuard",
    "ask_confirmation",
]
