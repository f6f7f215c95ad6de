"""Notification adapters for benchwatch."""

from __future__ import annotations

from benchwatch.notify.github import GitHubNotifier

__all__ = ["GitHubNotifier"]
