"""Reporters module for benchwatch.

This module provides output formatters for benchmark comparisons:
- Markdown: commit comment bodies for comparisons and alerts
"""

from __future__ import annotations

from benchwatch.reporters.markdown import MarkdownReporter, float_str, str_val

__all__ = [
    "MarkdownReporter",
    "float_str",
    "str_val",
]
