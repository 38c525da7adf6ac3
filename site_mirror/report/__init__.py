# File: site_mirror/report/__init__.py
"""site_mirror.report: JSON-сводка о сохранённом зеркале, используемая CLI и тестами."""

from .json_report import build_summary, render_json

__all__ = ["build_summary", "render_json"]
