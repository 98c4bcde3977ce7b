"""Offline Horizons replies and a scripted stand-in for the client."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from interstellar_horizons.client import HorizonsResponse

FIXTURE_DIR = Path(__file__).parent / "fixtures" / "horizons"

FIXED_NOW = datetime(2025, 10, 18, 12, 30, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


def load_fixture(name: str) -> str:
    """Load a Horizons result text fixture."""
    return (FIXTURE_DIR / name).read_text(encoding="utf-8")


def ok_response(result: str) -> HorizonsResponse:
    return HorizonsResponse(status=200, reason="OK", result=result)


class FakeHorizonsClient:
    """Stands in for HorizonsClient; each outcome is a response or an exception."""

    def __init__(self, observer=None, elements=None):
        self.observer = observer
        self.elements = elements
        self.calls: list[tuple[str, tuple]] = []
        self.closed = False

    async def _outcome(self, outcome):
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def fetch_observer(self, command, start_time, stop_time, step_size, quantities=None):
        self.calls.append(("OBSERVER", (command, start_time, stop_time, step_size)))
        return await self._outcome(self.observer)

    async def fetch_elements(self, command, start_time, stop_time, step_size):
        self.calls.append(("ELEMENTS", (command, start_time, stop_time, step_size)))
        return await self._outcome(self.elements)

    async def close(self):
        self.closed = True


