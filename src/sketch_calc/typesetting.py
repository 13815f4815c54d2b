"""Typesetting engine handles.

A typesetter is acquired once at startup and released on shutdown; in
between, the only thing the rest of the package can do with it is hand it the
typeset queue.  ``open_typesetter`` manages that lifetime and returns a
handle exposing just ``typeset``.
"""

import html
import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from rich.console import Console

logger = logging.getLogger(__name__)

MATHJAX_URL = (
    "https://cdnjs.cloudflare.com/ajax/libs/mathjax/2.7.9/MathJax.js"
    "?config=TeX-MML-AM_CHTML"
)

_PAGE_TEMPLATE = """\
<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
<script type="text/x-mathjax-config">
MathJax.Hub.Config({{tex2jax: {{inlineMath: [['$', '$'], ['\\\\(', '\\\\)']]}}}});
</script>
<script async src="{mathjax}"></script>
</head>
<body>
{body}
</body>
</html>
"""


class BaseTypesetter(ABC):
    def acquire(self) -> None:
        """Prepare the engine; called once before the first pass."""

    def release(self) -> None:
        """Tear the engine down; called once on shutdown."""

    @abstractmethod
    def typeset(self, queue: Sequence[str], start: int = 0) -> None:
        """Run a pass over the full queue.

        Entries before ``start`` were covered by an earlier pass.
        """
        ...


class ConsoleTypesetter(BaseTypesetter):
    """Prints each queued expression once, as raw LaTeX."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def typeset(self, queue: Sequence[str], start: int = 0) -> None:
        for latex in queue[start:]:
            self.console.print(
                latex, markup=False, highlight=False, emoji=False, soft_wrap=True
            )


class HtmlTypesetter(BaseTypesetter):
    """Keeps an HTML page in sync with the queue; MathJax renders it in a browser."""

    def __init__(self, path: Path, title: str = "sketch-calc results") -> None:
        self.path = Path(path)
        self.title = title
        self._queue: list[str] = []

    def acquire(self) -> None:
        self._write()

    def release(self) -> None:
        self._write()
        logger.info("Results page written to %s", self.path)

    def typeset(self, queue: Sequence[str], start: int = 0) -> None:
        self._queue = list(queue)
        self._write()

    def render(self) -> str:
        body = "\n".join(
            f'<div class="result">{html.escape(latex)}</div>' for latex in self._queue
        )
        return _PAGE_TEMPLATE.format(
            title=html.escape(self.title), mathjax=MATHJAX_URL, body=body
        )

    def _write(self) -> None:
        self.path.write_text(self.render(), encoding="utf-8")


class TypesetHandle:
    """The only view of the acquired typesetters given to the overlay."""

    def __init__(self, typesetters: Sequence[BaseTypesetter]) -> None:
        self._typesetters = list(typesetters)
        self.closed = False

    def typeset(self, queue: Sequence[str], start: int = 0) -> None:
        if self.closed:
            raise RuntimeError("Typesetter handle used after release.")
        for typesetter in self._typesetters:
            typesetter.typeset(queue, start=start)


@contextmanager
def open_typesetter(*typesetters: BaseTypesetter) -> Iterator[TypesetHandle]:
    acquired: list[BaseTypesetter] = []
    handle = TypesetHandle(typesetters)
    try:
        for typesetter in typesetters:
            typesetter.acquire()
            acquired.append(typesetter)
        yield handle
    finally:
        handle.closed = True
        for typesetter in reversed(acquired):
            typesetter.release()
