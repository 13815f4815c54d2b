"""Shared fixtures for the test suite.

Surfaces are real Pillow rasters so tests exercise actual pixel code paths.
The evaluation provider and the typesetter are the only stand-ins: one is a
remote service, the other an external rendering engine.
"""

import io
from pathlib import Path

import pytest
from click.testing import CliRunner
from PIL import Image

from sketch_calc.evaluation import EvaluationClient, TransportError
from sketch_calc.history import HistoryStack
from sketch_calc.overlay import IdleScheduler, OverlayRenderer
from sketch_calc.session import Session
from sketch_calc.surface import SurfaceController
from sketch_calc.variables import VariableEnvironment


# ── Stand-ins for external collaborators ───────────────────────────────────


class FakeProvider:
    """Returns canned payloads in order and records every request."""

    def __init__(self, *payloads):
        self.payloads = list(payloads)
        self.calls: list[tuple[bytes, dict]] = []

    def calculate(self, image, variables):
        self.calls.append((image, dict(variables)))
        payload = self.payloads.pop(0)
        if isinstance(payload, Exception):
            raise payload
        return payload


class RecordingTypesetter:
    """Records every typeset pass as (queue, start)."""

    def __init__(self):
        self.passes: list[tuple[list[str], int]] = []

    def typeset(self, queue, start=0):
        self.passes.append((list(queue), start))


def response(*entries) -> dict:
    """Build a service response from (expr, result, assign) tuples."""
    return {"data": [{"expr": e, "result": r, "assign": a} for e, r, a in entries]}


def draw_stroke(session, *points):
    x, y = points[0]
    session.begin_stroke({"offsetX": x, "offsetY": y})
    for x, y in points[1:]:
        session.extend_stroke({"offsetX": x, "offsetY": y})
    session.end_stroke()


# ── CLI runner ─────────────────────────────────────────────────────────────


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


# ── Image fixtures ─────────────────────────────────────────────────────────


@pytest.fixture
def png_bytes() -> bytes:
    """A real, valid 10×10 red PNG image as raw bytes."""
    buf = io.BytesIO()
    Image.new("RGB", (10, 10), color=(255, 0, 0)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_file(tmp_path: Path, png_bytes: bytes) -> Path:
    """The PNG written to a temporary file on disk."""
    path = tmp_path / "test.png"
    path.write_bytes(png_bytes)
    return path


# ── Engine fixtures ────────────────────────────────────────────────────────


@pytest.fixture
def history() -> HistoryStack:
    return HistoryStack()


@pytest.fixture
def surface(history) -> SurfaceController:
    return SurfaceController(64, 48, history)


@pytest.fixture
def typesetter() -> RecordingTypesetter:
    return RecordingTypesetter()


@pytest.fixture
def scheduler() -> IdleScheduler:
    return IdleScheduler()


@pytest.fixture
def overlay(typesetter, scheduler) -> OverlayRenderer:
    return OverlayRenderer(typesetter, scheduler)


@pytest.fixture
def env() -> VariableEnvironment:
    return VariableEnvironment()


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def session(surface, history, overlay, env, provider):
    with Session(surface, EvaluationClient(provider), overlay, env=env, history=history) as s:
        yield s


@pytest.fixture
def transport_failure() -> TransportError:
    return TransportError("connection refused")
