"""OpenAI GPT-4o vision provider."""

from collections.abc import Mapping
from typing import Any

from openai import APIError, OpenAI

from sketch_calc.evaluation import ProtocolError, TransportError
from sketch_calc.prompt import CALCULATOR_PROMPT, format_request
from sketch_calc.providers.base import BaseProvider, decode_model_reply, to_data_url

SYSTEM_PROMPT = CALCULATOR_PROMPT


class OpenAIProvider(BaseProvider):
    def __init__(self, api_key: str, model: str, timeout: float = 30.0) -> None:
        self.client = OpenAI(api_key=api_key, timeout=timeout)
        self.model = model

    def calculate(self, image: bytes, variables: Mapping[str, str]) -> Any:
        content: list[Any] = [
            {
                "type": "image_url",
                "image_url": {
                    "url": to_data_url(image),
                    "detail": "high",
                },
            },
            {"type": "text", "text": format_request(variables)},
        ]

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                max_tokens=2048,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": content},
                ],
            )
        except APIError as e:
            raise TransportError(f"OpenAI request failed: {e}") from e

        if not response.choices:
            raise ProtocolError("OpenAI reply has no choices.")
        text = response.choices[0].message.content
        if not text:
            raise ProtocolError("OpenAI reply has no text content.")
        return decode_model_reply(text)
