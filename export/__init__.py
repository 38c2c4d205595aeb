"""Export module: rich tables and JSON for class listings."""

from export.json_export import load_sessions_json, save_sessions_json
from export.tui_renderer import build_session_table, render_session_rows

__all__ = [
    "build_session_table",
    "render_session_rows",
    "load_sessions_json",
    "save_sessions_json",
]
