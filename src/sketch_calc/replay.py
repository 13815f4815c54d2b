"""Headless driver that replays recorded input events into a session.

A recording is a JSON object::

    {
      "width": 800, "height": 600, "offset": [0, 0],
      "events": [
        {"type": "mousedown", "offsetX": 10, "offsetY": 40},
        {"type": "mousemove", "offsetX": 30, "offsetY": 40},
        {"type": "mouseup"},
        {"type": "keydown", "key": "z", "ctrlKey": true},
        {"type": "calculate"}
      ]
    }

Pointer and touch events use the browser's field names, so a recording can
be captured straight from a page.  The idle tick runs after every event.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class Recording:
    width: int = 800
    height: int = 600
    offset: tuple[int, int] = (0, 0)
    events: list[dict[str, Any]] = field(default_factory=list)


def load_recording(path: Path) -> Recording:
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"{path} is not valid JSON: {e}") from e
    return parse_recording(raw)


def parse_recording(raw: Any) -> Recording:
    if not isinstance(raw, dict):
        raise ValueError("Recording must be a JSON object.")
    events = raw.get("events", [])
    if not isinstance(events, list) or not all(isinstance(e, dict) for e in events):
        raise ValueError("Recording 'events' must be a list of objects.")
    offset = raw.get("offset", [0, 0])
    if not isinstance(offset, (list, tuple)) or len(offset) != 2:
        raise ValueError("Recording 'offset' must be a pair [left, top].")
    try:
        return Recording(
            width=int(raw.get("width", 800)),
            height=int(raw.get("height", 600)),
            offset=(int(offset[0]), int(offset[1])),
            events=events,
        )
    except (TypeError, ValueError) as e:
        raise ValueError(f"Recording has invalid dimensions: {e}") from e


def _keydown(session, event):
    return session.key_down(
        event["key"],
        ctrl=event.get("ctrlKey", False),
        alt=event.get("altKey", False),
        shift=event.get("shiftKey", False),
        meta=event.get("metaKey", False),
    )


def _resize(session, event):
    return session.on_viewport_resize(
        int(event["width"]), int(event["height"]), preserve=event.get("preserve", False)
    )


def _color(session, event):
    return session.set_color(event["color"])


HANDLERS = {
    "mousedown": lambda s, e: s.begin_stroke(e),
    "touchstart": lambda s, e: s.begin_stroke(e),
    "mousemove": lambda s, e: s.extend_stroke(e),
    "touchmove": lambda s, e: s.extend_stroke(e),
    "mouseup": lambda s, e: s.end_stroke(),
    "mouseout": lambda s, e: s.end_stroke(),
    "touchend": lambda s, e: s.end_stroke(),
    "keydown": _keydown,
    "resize": _resize,
    "color": _color,
    "calculate": lambda s, e: s.calculate(),
    "reset": lambda s, e: s.reset(),
    "clear": lambda s, e: s.clear_results(),
}


def replay(session, events: list[dict[str, Any]]) -> int:
    """Feed ``events`` to ``session`` in order; return how many were handled."""
    for index, event in enumerate(events):
        kind = event.get("type")
        handler = HANDLERS.get(kind)
        if handler is None:
            raise ValueError(f"Event {index} has unknown type {kind!r}.")
        try:
            handler(session, event)
        except (KeyError, TypeError) as e:
            raise ValueError(f"Event {index} ({kind}) is missing or malformed: {e}.") from e
        session.idle()
    logger.debug("Replayed %d events", len(events))
    return len(events)
