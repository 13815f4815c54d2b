"""Interactive session: wires the surface, history, variables, client and overlay.

All state changes happen on the thread that owns the session, one callback at
a time.  The only concurrent work is the remote evaluation call, which runs on
a single background worker; its result is applied by ``poll`` on the owning
thread, so an overlay update can never land in the middle of a stroke.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from typing import Optional

from sketch_calc.bindings import KeyBindings
from sketch_calc.config import SurfaceSettings
from sketch_calc.evaluation import EvaluationClient, EvaluationError, ResultEntry
from sketch_calc.history import HistoryStack
from sketch_calc.overlay import OverlayRenderer
from sketch_calc.surface import InputEvent, SurfaceController, resolve_point
from sketch_calc.variables import VariableEnvironment

logger = logging.getLogger(__name__)

UNDO_CHORD = "ctrl+z"


class Session:
    def __init__(
        self,
        surface: SurfaceController,
        client: EvaluationClient,
        overlay: OverlayRenderer,
        env: Optional[VariableEnvironment] = None,
        history: Optional[HistoryStack] = None,
        clear_on_result: bool = True,
    ) -> None:
        self.surface = surface
        self.client = client
        self.overlay = overlay
        self.env = env if env is not None else VariableEnvironment()
        if history is None:
            history = surface.history if surface.history is not None else HistoryStack()
        self.history = history
        self.clear_on_result = clear_on_result

        self.bindings = KeyBindings()
        # Bound method: undo reads self.history at dispatch time.
        self.bindings.bind(UNDO_CHORD, self.undo)

        self._executor: Optional[ThreadPoolExecutor] = None
        self._future: Optional[Future] = None
        self._future_generation = 0
        self._generation = 0

    @classmethod
    def create(
        cls,
        client: EvaluationClient,
        typesetter,
        settings: Optional[SurfaceSettings] = None,
        history_limit: Optional[int] = None,
        clear_on_result: bool = True,
        scheduler=None,
    ) -> "Session":
        settings = settings or SurfaceSettings()
        history = HistoryStack(limit=history_limit)
        surface = SurfaceController(
            settings.width,
            settings.height,
            history,
            stroke_width=settings.stroke_width,
            color=settings.color,
            background=settings.background,
            offset=settings.offset,
        )
        overlay = OverlayRenderer(typesetter, scheduler)
        return cls(surface, client, overlay, history=history, clear_on_result=clear_on_result)

    # ── History ───────────────────────────────────────────────────────────

    @property
    def history(self) -> HistoryStack:
        return self._history

    @history.setter
    def history(self, value: HistoryStack) -> None:
        self._history = value
        self.surface.history = value

    def undo(self) -> bool:
        return self._history.pop_and_apply(self.surface)

    # ── Input ─────────────────────────────────────────────────────────────

    def begin_stroke(self, event: InputEvent) -> bool:
        return self.surface.begin_stroke(resolve_point(event, self.surface.offset))

    def extend_stroke(self, event: InputEvent) -> bool:
        if not self.surface.drawing:
            return False
        return self.surface.extend_stroke(resolve_point(event, self.surface.offset))

    def end_stroke(self) -> bool:
        return self.surface.end_stroke()

    def key_down(self, key: str, ctrl=False, alt=False, shift=False, meta=False) -> bool:
        return self.bindings.dispatch(key, ctrl=ctrl, alt=alt, shift=shift, meta=meta)

    def set_color(self, color: str) -> None:
        self.surface.color = color

    def on_viewport_resize(self, width: int, height: int, preserve: bool = False) -> None:
        """Fit the surface to the viewport below its top offset.

        Resizing wipes the raster; ``preserve`` carries the old pixels over,
        anchored at the top-left corner.
        """
        snapshot = self.surface.snapshot() if preserve else None
        height = max(height - self.surface.offset[1], 1)
        self.surface.resize(max(width, 1), height)
        if snapshot is not None:
            self.surface.restore(snapshot)

    # ── Evaluation ────────────────────────────────────────────────────────

    @property
    def busy(self) -> bool:
        return self._future is not None

    def calculate(self) -> bool:
        """Evaluate the surface synchronously and apply the results."""
        if self.busy:
            logger.debug("calculate ignored: an evaluation is already in flight")
            return False
        try:
            entries = self.client.evaluate(self.surface, self.env)
        except EvaluationError as e:
            logger.warning("Evaluation failed: %s", e)
            return False
        self._apply(entries)
        return True

    def submit(self) -> bool:
        """Start an evaluation in the background.

        The raster and variables are captured here, so drawing after
        ``submit`` does not change what is sent.
        """
        if self.busy:
            logger.debug("submit ignored: an evaluation is already in flight")
            return False
        image = self.client.prepare(self.surface)
        variables = self.env.get()
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="sketch-calc-eval"
            )
        self._future = self._executor.submit(self.client.request, image, variables)
        self._future_generation = self._generation
        return True

    def poll(self) -> bool:
        """Apply a finished background evaluation; return whether results were applied."""
        future = self._future
        if future is None or not future.done():
            return False
        self._future = None

        if self._future_generation != self._generation:
            logger.debug("Discarding results of a request issued before reset")
            return False
        try:
            entries = future.result()
        except EvaluationError as e:
            logger.warning("Evaluation failed: %s", e)
            return False
        self._apply(entries)
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the in-flight evaluation finishes, then ``poll``."""
        if self._future is not None:
            wait_futures([self._future], timeout=timeout)
        return self.poll()

    def _apply(self, entries: list[ResultEntry]) -> None:
        self.client.apply(entries, self.env, self.overlay)
        if entries and self.clear_on_result:
            self.surface.clear()

    # ── Idle tick, reset, shutdown ────────────────────────────────────────

    def idle(self) -> int:
        run_idle = getattr(self.overlay.scheduler, "run_idle", None)
        return run_idle() if run_idle is not None else 0

    def reset(self) -> None:
        self._generation += 1
        self.surface.end_stroke()
        self.surface.clear()
        self.surface.background_ready = False
        self.overlay.reset()
        self.env.reset()
        self._history.clear()

    def clear_results(self) -> None:
        self.overlay.reset()
        self.surface.clear()

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True, cancel_futures=True)
            self._executor = None
        self._future = None

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
