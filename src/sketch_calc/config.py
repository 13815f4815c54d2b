"""Configuration loading from environment variables and CLI flags."""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Provider(str, Enum):
    HTTP = "http"
    ANTHROPIC = "anthropic"
    OPENAI = "openai"


DEFAULTS = {
    Provider.ANTHROPIC: "claude-sonnet-4-6",
    Provider.OPENAI: "gpt-4o",
}

ENV_KEYS = {
    Provider.ANTHROPIC: "ANTHROPIC_API_KEY",
    Provider.OPENAI: "OPENAI_API_KEY",
}

API_URL_ENV = "SKETCH_CALC_API_URL"
TIMEOUT_ENV = "SKETCH_CALC_TIMEOUT"
HISTORY_LIMIT_ENV = "SKETCH_CALC_HISTORY_LIMIT"

DEFAULT_TIMEOUT = 30.0


@dataclass
class SurfaceSettings:
    """Initial geometry and brush of the drawing surface."""

    width: int = 800
    height: int = 600
    stroke_width: int = 3
    color: str = "white"
    background: str = "black"
    offset: tuple[int, int] = (0, 0)


@dataclass
class Config:
    provider: Provider
    model: Optional[str] = None
    api_key: Optional[str] = None
    api_url: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    history_limit: Optional[int] = None

    @classmethod
    def from_env(
        cls,
        provider: Provider,
        model_override: Optional[str] = None,
        api_key_override: Optional[str] = None,
        api_url_override: Optional[str] = None,
    ) -> "Config":
        timeout = _read_number(TIMEOUT_ENV, float, DEFAULT_TIMEOUT)
        history_limit = _read_number(HISTORY_LIMIT_ENV, int, None)
        if history_limit is not None and history_limit < 1:
            raise RuntimeError(f"{HISTORY_LIMIT_ENV} must be a positive integer.")

        if provider == Provider.HTTP:
            api_url = api_url_override or os.environ.get(API_URL_ENV, "")
            if not api_url:
                raise RuntimeError(
                    "No evaluation service URL. "
                    f"Set {API_URL_ENV} in your environment or .env file, or pass --api-url."
                )
            return cls(
                provider=provider,
                api_url=api_url,
                timeout=timeout,
                history_limit=history_limit,
            )

        model = model_override or DEFAULTS[provider]
        api_key = api_key_override or os.environ.get(ENV_KEYS[provider], "")
        if not api_key:
            raise RuntimeError(
                f"No API key for {provider.value}. "
                f"Set {ENV_KEYS[provider]} in your environment or .env file."
            )
        return cls(
            provider=provider,
            model=model,
            api_key=api_key,
            timeout=timeout,
            history_limit=history_limit,
        )


def _read_number(name: str, kind, default):
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return kind(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number, got {raw!r}.") from None
