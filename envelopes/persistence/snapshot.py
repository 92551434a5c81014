"""Mini README: JSON snapshot files for budgets.

Structure:
    * save_snapshot - write ``Budget.snapshot()`` to a JSON file atomically.
    * load_snapshot - read a JSON file back through ``Budget.restore``.

Any failure to read or validate the file surfaces as ``SnapshotLoadError``
so callers can report "cannot load" without inspecting I/O details.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Union

from ..budget import Budget
from ..errors import SnapshotLoadError
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)


def save_snapshot(budget: Budget, path: Union[str, Path]) -> Path:
    """Serialise ``budget`` to ``path`` and return the resolved path."""

    target = Path(path).expanduser()
    target.parent.mkdir(parents=True, exist_ok=True)
    temporary = target.with_suffix(target.suffix + ".tmp")
    temporary.write_text(json.dumps(budget.snapshot(), indent=2, sort_keys=True), encoding="utf-8")
    temporary.replace(target)
    LOGGER.info("Saved budget '%s' to %s", budget.name, target)
    return target


def load_snapshot(path: Union[str, Path]) -> Budget:
    """Load a budget saved with ``save_snapshot``."""

    source = Path(path).expanduser()
    try:
        payload = json.loads(source.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as error:
        LOGGER.warning("Cannot load budget snapshot %s: %s", source, error)
        raise SnapshotLoadError(f"Cannot read budget snapshot {source}: {error}") from error
    if not isinstance(payload, dict):
        raise SnapshotLoadError(f"Budget snapshot {source} is not a JSON object")
    budget = Budget.restore(payload)
    LOGGER.info("Loaded budget '%s' from %s", budget.name, source)
    return budget
