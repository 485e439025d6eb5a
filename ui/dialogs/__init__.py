from .memo_editor_dialog import MemoEditorDialog, parse_tags

__all__ = [
    "MemoEditorDialog",
    "parse_tags",
]
