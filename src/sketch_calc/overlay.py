"""Result overlays: result history, typeset queue and idle-tick typesetting."""

import logging
from collections import deque
from typing import Callable

from sketch_calc.evaluation import ResultEntry
from sketch_calc.postprocessing import to_latex

logger = logging.getLogger(__name__)


class IdleScheduler:
    """Minimal idle-tick queue driven by the owner's loop.

    Anything with a ``call_soon(callback)`` method can stand in for it, an
    asyncio event loop included.
    """

    def __init__(self) -> None:
        self._pending: deque[Callable[[], None]] = deque()

    def call_soon(self, callback: Callable[[], None]) -> None:
        self._pending.append(callback)

    def run_idle(self) -> int:
        """Run the callbacks queued so far; ones queued meanwhile wait a tick."""
        count = len(self._pending)
        for _ in range(count):
            self._pending.popleft()()
        return count

    def __len__(self) -> int:
        return len(self._pending)


class OverlayRenderer:
    def __init__(self, typesetter, scheduler=None) -> None:
        self.typesetter = typesetter
        self.scheduler = scheduler if scheduler is not None else IdleScheduler()
        self.history: list[ResultEntry] = []
        self.queue: list[str] = []
        self.typeset_count = 0
        self._pass_pending = False
        # Set when typeset output is showing entries that a reset removed.
        self._stale = False

    def accept(self, entry: ResultEntry) -> None:
        self.history.append(entry)
        self.queue.append(to_latex(entry.expression, entry.answer))
        self._schedule_pass()

    def reset(self) -> None:
        """Empty the history and queue; typeset output is cleared on the next tick."""
        if self.typeset_count:
            self._stale = True
        self.history.clear()
        self.queue.clear()
        self.typeset_count = 0
        if self._stale:
            self._schedule_pass()

    def _schedule_pass(self) -> None:
        if not self._pass_pending:
            self._pass_pending = True
            self.scheduler.call_soon(self._typeset_pass)

    def _typeset_pass(self) -> None:
        self._pass_pending = False
        if not self.queue and not self._stale:
            return
        self._stale = False
        self.typesetter.typeset(list(self.queue), start=self.typeset_count)
        self.typeset_count = len(self.queue)
        logger.debug("Typeset %d expressions", self.typeset_count)
