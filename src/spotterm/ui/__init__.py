"""Blessed terminal rendering."""

from .render import format_time, render

__all__ = ["format_time", "render"]
