"""Anthropic Claude vision provider."""

import base64
from collections.abc import Mapping
from typing import Any

import anthropic

from sketch_calc.evaluation import ProtocolError, TransportError
from sketch_calc.prompt import CALCULATOR_PROMPT, format_request
from sketch_calc.providers.base import BaseProvider, decode_model_reply

SYSTEM_PROMPT = CALCULATOR_PROMPT


class AnthropicProvider(BaseProvider):
    def __init__(self, api_key: str, model: str, timeout: float = 30.0) -> None:
        self.client = anthropic.Anthropic(api_key=api_key, timeout=timeout)
        self.model = model

    def calculate(self, image: bytes, variables: Mapping[str, str]) -> Any:
        b64 = base64.standard_b64encode(image).decode("utf-8")
        content: list[Any] = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": "image/png",
                    "data": b64,
                },
            },
            {"type": "text", "text": format_request(variables)},
        ]

        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=2048,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": content}],
            )
        except anthropic.APIError as e:
            raise TransportError(f"Anthropic request failed: {e}") from e

        text = "".join(block.text for block in response.content if block.type == "text")
        if not text:
            raise ProtocolError("Anthropic reply has no text content.")
        return decode_model_reply(text)
