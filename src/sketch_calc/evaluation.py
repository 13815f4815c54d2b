"""Evaluation client: raster in, ordered result entries out.

A request packages the exported surface together with a read-only copy of
the variable environment and goes through a provider (see
``sketch_calc.providers``).  The response is validated in full before any
state is touched, so a request either applies all of its entries or none.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from sketch_calc.preprocessing import preprocess_for_upload

logger = logging.getLogger(__name__)


class EvaluationError(Exception):
    """Base class for failures of a single evaluation request."""


class TransportError(EvaluationError):
    """The service could not be reached or answered with a non-success status."""


class ProtocolError(EvaluationError):
    """The service answered, but not in the expected shape."""


@dataclass(frozen=True)
class ResultEntry:
    expression: str
    answer: str
    assign: bool = False


def parse_response(payload: Any) -> list[ResultEntry]:
    """Validate a decoded response and return its entries in array order."""
    if not isinstance(payload, Mapping) or "data" not in payload:
        raise ProtocolError("Response has no 'data' field.")
    items = payload["data"]
    if not isinstance(items, list):
        raise ProtocolError("Response 'data' field is not a list.")
    return [_parse_item(i, item) for i, item in enumerate(items)]


def _parse_item(index: int, item: Any) -> ResultEntry:
    if not isinstance(item, Mapping):
        raise ProtocolError(f"Entry {index} is not an object.")

    expr = item.get("expr")
    if not isinstance(expr, str):
        raise ProtocolError(f"Entry {index} has no string 'expr'.")

    result = item.get("result")
    # bool is an int subclass; true/false is never a valid result
    if isinstance(result, bool) or not isinstance(result, (str, int, float)):
        raise ProtocolError(f"Entry {index} has no usable 'result'.")

    assign = item.get("assign", False)
    if not isinstance(assign, bool):
        raise ProtocolError(f"Entry {index} has a non-boolean 'assign'.")

    return ResultEntry(expression=expr, answer=str(result), assign=assign)


class EvaluationClient:
    def __init__(self, provider, preprocess: bool = False) -> None:
        self.provider = provider
        self.preprocess = preprocess

    def prepare(self, surface) -> bytes:
        """Export the surface as the PNG that will be uploaded."""
        image = surface.export_raster()
        if self.preprocess:
            image = preprocess_for_upload(image, background=surface.background)
        return image

    def request(self, image: bytes, variables: Mapping[str, str]) -> list[ResultEntry]:
        """Send one request and return its parsed entries.

        Raises ``TransportError`` or ``ProtocolError``.
        """
        payload = self.provider.calculate(image, variables)
        entries = parse_response(payload)
        logger.debug("Evaluation returned %d entries", len(entries))
        return entries

    def evaluate(self, surface, env) -> list[ResultEntry]:
        return self.request(self.prepare(surface), env.get())

    def apply(self, entries: list[ResultEntry], env, overlay) -> None:
        """Fold assignments into ``env`` and forward every entry to ``overlay``."""
        for entry in entries:
            if entry.assign:
                env.assign(entry.expression, entry.answer)
            overlay.accept(entry)

    def evaluate_and_apply(self, surface, env, overlay) -> bool:
        try:
            entries = self.evaluate(surface, env)
        except EvaluationError as e:
            logger.warning("Evaluation failed: %s", e)
            return False
        self.apply(entries, env, overlay)
        return True
