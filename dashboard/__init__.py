"""Interactive terminal dashboards (rich prompts)."""

from dashboard.interactive import InteractiveSession

__all__ = ["InteractiveSession"]
