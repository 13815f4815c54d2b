"""Keyboard chord bindings."""

import logging
from typing import Callable

logger = logging.getLogger(__name__)

MODIFIERS = ("ctrl", "alt", "shift", "meta")


def normalize_chord(chord: str) -> str:
    """``"Z+Ctrl"`` -> ``"ctrl+z"``: modifiers in a fixed order, then the key."""
    parts = [p.strip().lower() for p in chord.split("+") if p.strip()]
    mods = [m for m in MODIFIERS if m in parts]
    keys = [p for p in parts if p not in MODIFIERS]
    if len(keys) != 1:
        raise ValueError(f"Chord must name exactly one key: {chord!r}")
    return "+".join(mods + keys)


class KeyBindings:
    """Maps chords to zero-argument handlers.

    Handlers should look up their target when called rather than capture it
    at bind time, e.g. bind the session's ``undo`` method rather than a
    particular history stack.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, Callable[[], object]] = {}

    def bind(self, chord: str, handler: Callable[[], object]) -> None:
        self._handlers[normalize_chord(chord)] = handler

    def unbind(self, chord: str) -> None:
        self._handlers.pop(normalize_chord(chord), None)

    def dispatch(
        self,
        key: str,
        ctrl: bool = False,
        alt: bool = False,
        shift: bool = False,
        meta: bool = False,
    ) -> bool:
        """Run the handler bound to the pressed chord; return whether one ran."""
        pressed = [m for m, on in zip(MODIFIERS, (ctrl, alt, shift, meta)) if on]
        chord = "+".join(pressed + [key.lower()])
        handler = self._handlers.get(chord)
        if handler is None:
            return False
        logger.debug("Key chord %s", chord)
        handler()
        return True

    def __contains__(self, chord: str) -> bool:
        return normalize_chord(chord) in self._handlers
