"""JSON export of class listings."""

import json
from datetime import datetime, timezone
from pathlib import Path

from models.class_session import ClassSession


def save_sessions_json(sessions: list[ClassSession], path: Path) -> Path:
    """Writes the classes plus an export timestamp as a JSON file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "exported_at": datetime.now(timezone.utc).isoformat(),
        "count": len(sessions),
        "classes": [s.model_dump() for s in sessions],
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
    return path


def load_sessions_json(path: Path) -> list[ClassSession]:
    """Reads a file written by save_sessions_json()."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"JSON file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return [ClassSession.model_validate(item) for item in data.get("classes", [])]
