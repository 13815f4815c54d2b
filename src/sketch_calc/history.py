"""Snapshot-based undo stack."""

import logging
from collections import deque
from typing import Optional

from sketch_calc.surface import Snapshot, SurfaceController

logger = logging.getLogger(__name__)


class HistoryStack:
    """Holds pre-stroke snapshots of the surface, most recent last.

    There is no redo.  Growth is unbounded unless ``limit`` is given, in which
    case the oldest snapshot is dropped once the limit is reached.
    """

    def __init__(self, limit: Optional[int] = None) -> None:
        self._stack: deque[Snapshot] = deque(maxlen=limit)

    def push(self, snapshot: Snapshot) -> None:
        self._stack.append(snapshot)

    def pop_and_apply(self, surface: SurfaceController) -> bool:
        if not self._stack:
            logger.debug("Undo ignored: history is empty")
            return False
        surface.restore(self._stack.pop())
        return True

    def clear(self) -> None:
        self._stack.clear()

    @property
    def limit(self) -> Optional[int]:
        return self._stack.maxlen

    def __len__(self) -> int:
        return len(self._stack)
