"""Version-control transports for benchwatch."""

from __future__ import annotations

from benchwatch.vcs.git import GitCli

__all__ = ["GitCli"]
