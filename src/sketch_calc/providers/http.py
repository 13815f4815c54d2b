"""Remote evaluation service speaking the fixed ``/calculate`` contract."""

from collections.abc import Mapping
from typing import Any

import requests

from sketch_calc.evaluation import ProtocolError, TransportError
from sketch_calc.providers.base import BaseProvider, to_data_url


class HttpProvider(BaseProvider):
    def __init__(self, api_url: str, timeout: float = 30.0) -> None:
        self.url = f"{api_url.rstrip('/')}/calculate"
        self.timeout = timeout

    def calculate(self, image: bytes, variables: Mapping[str, str]) -> Any:
        payload = {
            "image": to_data_url(image),
            "dict_of_vars": dict(variables),
        }

        try:
            response = requests.post(self.url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise TransportError(f"Request to {self.url} failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise ProtocolError(
                f"Response from {self.url} is not JSON (HTTP {response.status_code})."
            ) from e
