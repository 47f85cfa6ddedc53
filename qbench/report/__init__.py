"""Rendering and export of benchmark reports."""

from .console import format_duration, render_group, render_report
from .export import export_csv

__all__ = ["export_csv", "format_duration", "render_group", "render_report"]
