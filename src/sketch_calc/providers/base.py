"""Abstract base for evaluation providers."""

import base64
import json
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from sketch_calc.evaluation import ProtocolError
from sketch_calc.postprocessing import extract_json


class BaseProvider(ABC):
    @abstractmethod
    def calculate(self, image: bytes, variables: Mapping[str, str]) -> Any:
        """Send a PNG and the variable environment; return the decoded response.

        The return value is expected to have the shape
        ``{"data": [{"expr": ..., "result": ..., "assign": ...}, ...]}``;
        the evaluation client validates it.
        """
        ...


def to_data_url(image: bytes) -> str:
    b64 = base64.standard_b64encode(image).decode("utf-8")
    return f"data:image/png;base64,{b64}"


def decode_model_reply(text: str) -> Any:
    """Decode a model's JSON reply into the service response shape.

    Models are asked for a bare list; an object that already has the
    ``data`` key is passed through.
    """
    try:
        decoded = json.loads(extract_json(text))
    except json.JSONDecodeError as e:
        raise ProtocolError(f"Model reply is not valid JSON: {e}") from e
    if isinstance(decoded, list):
        return {"data": decoded}
    return decoded
