"""Configuration manager: load, save and validate the application config.

Uses ruamel.yaml for YAML serialisation with comments.
"""

import json
from datetime import date
from pathlib import Path
from typing import Optional

from rich.console import Console
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.defaults import default_app_config
from config.schema import AppConfig

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── YAML COMMENTS ───

def _yaml_header() -> str:
    return f"""\
# ============================================
# University Class Scheduler — configuration
# Created: {date.today().isoformat()}
# ============================================
"""


_SECTION_COMMENTS = {
    "database": (
        "Database",
        "SQLAlchemy URL. Tables are created on start-up if missing.",
    ),
    "auth": (
        "Registration",
        "The teacher registration secret is shared by all teachers.\n"
        "It is NOT a security control, only a gate in front of the sign-up form.",
    ),
    "sweeper": (
        "Expiry sweeper",
        "Deletes classes whose end time has passed.",
    ),
    "logging": (
        "Logging",
        None,
    ),
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "app_config.yaml"

    def __init__(self, path: Optional[Path] = None) -> None:
        if path is not None:
            self.DEFAULT_CONFIG = Path(path)

    def first_run_check(self) -> bool:
        """True if no config file exists yet (first start)."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Load ───

    def load(self, path: Optional[Path] = None) -> AppConfig:
        """Load config from YAML. Validated through pydantic."""
        target = path or self.DEFAULT_CONFIG
        if not target.exists():
            raise FileNotFoundError(
                f"Config file not found: {target}\n"
                f"Run 'python main.py setup' to configure the scheduler."
            )
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        try:
            return AppConfig.model_validate(dict(raw or {}))
        except Exception as e:
            raise ValueError(
                f"Invalid config file: {target}\n"
                f"Pydantic error: {e}"
            ) from e

    def load_or_default(self, path: Optional[Path] = None) -> AppConfig:
        """Like load(), but falls back to the defaults if no file exists."""
        target = path or self.DEFAULT_CONFIG
        if not target.exists():
            return default_app_config()
        return self.load(target)

    # ─── Save ───

    def save(self, config: AppConfig, path: Optional[Path] = None) -> None:
        """Save config as commented YAML."""
        target = path or self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_yaml_header() + "\n")
            yaml.dump(data, f)

        console.print(f"[green]✓[/green] Configuration saved: {target}")

    def _build_commented_yaml(self, config: AppConfig) -> CommentedMap:
        """Builds the YAML structure with section comments."""
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )

        if "sweeper" in cm:
            sweeper_map = CommentedMap(cm["sweeper"])
            sweeper_map.yaml_add_eol_comment("seconds", "interval_seconds")
            cm["sweeper"] = sweeper_map

        return cm
