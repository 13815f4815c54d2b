"""Raster drawing surface built on Pillow.

The surface is an ``RGBA`` image that starts out fully transparent.  Strokes
are painted immediately as round-capped line segments; nothing about a stroke
is kept once it has been drawn except its last point.

Undo works on whole-raster snapshots.  ``begin_stroke`` pushes a snapshot of
the pre-stroke raster onto the history stack, so popping that snapshot puts
the pixels back exactly as they were.
"""

import io
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Optional, Union

from PIL import Image, ImageColor, ImageDraw

logger = logging.getLogger(__name__)

Point = tuple[float, float]

BLANK = (0, 0, 0, 0)


# ── Pointer events ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class PointerEvent:
    """Mouse/pen event whose coordinates are already surface-local."""

    offset_x: float
    offset_y: float


@dataclass(frozen=True)
class TouchPoint:
    """A single touch contact in page (client) coordinates."""

    client_x: float
    client_y: float


@dataclass(frozen=True)
class TouchEvent:
    touches: Sequence[TouchPoint]


InputEvent = Union[PointerEvent, TouchEvent, Mapping]


def resolve_point(event: InputEvent, offset: tuple[int, int] = (0, 0)) -> Point:
    """Normalise a pointer or touch event to surface-local ``(x, y)``.

    Pointer events carry device-native offsets and are used as-is.  Touch
    events carry page coordinates, so the surface's on-page ``offset`` is
    subtracted from the first contact.  Mappings in the browser's shape
    (``offsetX``/``offsetY`` or ``touches[0].clientX``/``clientY``) are
    accepted too, which is what recorded sessions contain.
    """
    left, top = offset

    if isinstance(event, PointerEvent):
        return (event.offset_x, event.offset_y)
    if isinstance(event, TouchEvent):
        if not event.touches:
            raise ValueError("Touch event has no contact points.")
        touch = event.touches[0]
        return (touch.client_x - left, touch.client_y - top)

    if isinstance(event, Mapping):
        if "touches" in event:
            touches = event["touches"]
            if not touches:
                raise ValueError("Touch event has no contact points.")
            touch = touches[0]
            return (float(touch["clientX"]) - left, float(touch["clientY"]) - top)
        if "offsetX" in event and "offsetY" in event:
            return (float(event["offsetX"]), float(event["offsetY"]))

    raise ValueError(f"Unrecognised input event: {event!r}")


# ── Snapshots ──────────────────────────────────────────────────────────────────


class Snapshot:
    """Immutable copy of a full raster.

    The snapshot owns a private image that is never handed out directly, so
    later drawing on the live surface cannot alter it.
    """

    __slots__ = ("_image",)

    def __init__(self, image: Image.Image) -> None:
        self._image = image.copy()

    @property
    def size(self) -> tuple[int, int]:
        return self._image.size

    def to_image(self) -> Image.Image:
        return self._image.copy()

    def tobytes(self) -> bytes:
        return self._image.tobytes()


# ── Surface controller ─────────────────────────────────────────────────────────


class SurfaceController:
    def __init__(
        self,
        width: int,
        height: int,
        history=None,
        *,
        stroke_width: int = 3,
        color: str = "white",
        background: str = "black",
        offset: tuple[int, int] = (0, 0),
    ) -> None:
        _check_dimensions(width, height)
        self._image = Image.new("RGBA", (width, height), BLANK)
        self.history = history
        self.stroke_width = stroke_width
        self.background = background
        self.offset = offset
        self.background_ready = False
        self.drawing = False
        self._last_point: Optional[Point] = None
        self._color = ImageColor.getcolor(color, "RGBA")

    # ── Properties ────────────────────────────────────────────────────────

    @property
    def width(self) -> int:
        return self._image.width

    @property
    def height(self) -> int:
        return self._image.height

    @property
    def size(self) -> tuple[int, int]:
        return self._image.size

    @property
    def color(self) -> tuple[int, ...]:
        return self._color

    @color.setter
    def color(self, value: str) -> None:
        self._color = ImageColor.getcolor(value, "RGBA")

    # ── Strokes ───────────────────────────────────────────────────────────

    def begin_stroke(self, point: Point) -> bool:
        if self.drawing:
            logger.debug("begin_stroke ignored: a stroke is already active")
            return False
        if self.history is not None:
            self.history.push(self.snapshot())
        self.background_ready = True
        self.drawing = True
        self._last_point = point
        return True

    def extend_stroke(self, point: Point) -> bool:
        if not self.drawing:
            logger.debug("extend_stroke ignored: no active stroke")
            return False
        self._paint_segment(self._last_point, point)
        self._last_point = point
        return True

    def end_stroke(self) -> bool:
        was_drawing = self.drawing
        self.drawing = False
        self._last_point = None
        return was_drawing

    def _paint_segment(self, start: Point, end: Point) -> None:
        draw = ImageDraw.Draw(self._image)
        draw.line([start, end], fill=self._color, width=self.stroke_width, joint="curve")
        # Pillow draws butt ends; caps are filled discs at both endpoints.
        r = self.stroke_width / 2
        for x, y in (start, end):
            draw.ellipse([x - r, y - r, x + r, y + r], fill=self._color)

    # ── Raster operations ─────────────────────────────────────────────────

    def resize(self, width: int, height: int) -> None:
        """Reallocate the raster; existing pixels are discarded."""
        _check_dimensions(width, height)
        self._image = Image.new("RGBA", (width, height), BLANK)
        logger.debug("Surface resized to %dx%d", width, height)

    def clear(self) -> None:
        self._image = Image.new("RGBA", self._image.size, BLANK)

    def snapshot(self) -> Snapshot:
        return Snapshot(self._image)

    def restore(self, snapshot: Snapshot) -> None:
        """Write ``snapshot`` back onto the surface.

        When the dimensions differ (the surface was resized since the
        snapshot was taken) the surface keeps its size and the snapshot is
        pasted at the origin over a blank buffer.
        """
        if snapshot.size == self._image.size:
            self._image = snapshot.to_image()
            return
        image = Image.new("RGBA", self._image.size, BLANK)
        image.paste(snapshot.to_image(), (0, 0))
        self._image = image

    def load_image(self, data: bytes) -> None:
        """Replace the raster with an encoded image, adopting its dimensions."""
        with Image.open(io.BytesIO(data)) as img:
            self._image = img.convert("RGBA")

    def export_raster(self) -> bytes:
        buf = io.BytesIO()
        self._image.save(buf, format="PNG")
        return buf.getvalue()

    def tobytes(self) -> bytes:
        """Raw pixel data, for exact comparisons."""
        return self._image.tobytes()


def _check_dimensions(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise ValueError(f"Surface dimensions must be positive, got {width}x{height}.")
