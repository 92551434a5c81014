"""Mini README: Persistence helpers for budgets.

Snapshots are plain JSON documents produced by ``Budget.snapshot``; the
``snapshot`` module reads and writes them on disk.
"""

from .snapshot import load_snapshot, save_snapshot

__all__ = ["load_snapshot", "save_snapshot"]
