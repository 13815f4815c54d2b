"""Variable environment threaded into every evaluation request."""

from collections.abc import Mapping
from types import MappingProxyType


class VariableEnvironment:
    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def get(self) -> Mapping[str, str]:
        """Return a read-only copy; later assignments do not show through it."""
        return MappingProxyType(dict(self._values))

    def assign(self, name: str, value: str) -> None:
        self._values[name] = value

    def reset(self) -> None:
        self._values.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)
