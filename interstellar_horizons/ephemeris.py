"""
Ephemeris composition for interstellar objects.

Combines the object table, one OBSERVER query and one ELEMENTS query into a
single record. The OBSERVER query is required; the ELEMENTS query only adds
orbital elements and may fail without failing the request.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

import asyncio
import logging
from datetime import timedelta
from typing import Optional, Union

import aiohttp

from interstellar_horizons.client import HorizonsClient, HorizonsResponse
from interstellar_horizons.config import Config
from interstellar_horizons.errors import EphemerisError, NoDataError, UpstreamQueryError
from interstellar_horizons.models import EphemerisRecord, OrbitalElements, format_distance
from interstellar_horizons.objects import resolve
from interstellar_horizons.parser import (
    Clock,
    DistanceWindowHeuristic,
    PositionalColumnStrategy,
    parse_elements_result,
    parse_observer_result,
    utc_now,
)

_LOG = logging.getLogger(__name__)


class EphemerisService:
    """Resolve an object, query Horizons and compose the ephemeris record."""

    def __init__(self, config: Config, client: HorizonsClient, clock: Clock = utc_now):
        """Initialize service."""
        self._config = config
        self._client = client
        self._clock = clock
        self._elements_strategy = PositionalColumnStrategy(config.elements_columns)
        self._distance_heuristic = DistanceWindowHeuristic(*config.distance_window_au)

    def _default_window(self) -> tuple[str, str]:
        """Today through tomorrow, as Horizons calendar dates."""
        now = self._clock()
        return now.strftime("%Y-%m-%d"), (now + timedelta(days=1)).strftime("%Y-%m-%d")

    async def _bounded(self, coro) -> HorizonsResponse:
        return await asyncio.wait_for(coro, timeout=self._config.request_timeout)

    def _observer_failure(self, ex: BaseException) -> EphemerisError:
        if isinstance(ex, asyncio.TimeoutError):
            return UpstreamQueryError(
                "Timed out waiting for observer data", status=504, title="Horizons API Error"
            )
        if isinstance(ex, aiohttp.ClientError):
            return UpstreamQueryError(
                f"Failed to fetch observer data: {ex}", status=502, title="Horizons API Error"
            )
        raise ex

    def _orbital_elements(self, outcome: Union[HorizonsResponse, BaseException]) -> OrbitalElements:
        """Parse the optional ELEMENTS reply, falling back to all-zero elements."""
        if isinstance(outcome, BaseException):
            _LOG.warning("ELEMENTS query failed, orbital elements unavailable: %r", outcome)
            return OrbitalElements()

        if not outcome.ok or outcome.error or not outcome.result:
            _LOG.warning(
                "ELEMENTS query returned no usable data (HTTP %d): %s",
                outcome.status, outcome.error or outcome.reason
            )
            return OrbitalElements()

        elements = parse_elements_result(outcome.result, self._elements_strategy)
        return elements or OrbitalElements()

    async def get_ephemeris(
        self,
        token: str,
        start_time: Optional[str] = None,
        stop_time: Optional[str] = None,
        step_size: Optional[str] = None,
    ) -> Union[EphemerisRecord, EphemerisError]:
        """
        Fetch the current ephemeris for an interstellar object.

        :param token: short code ("3I", "2I", "1I") or designation ("C/2025 N1")
        :param start_time: optional start date (YYYY-MM-DD), defaults to today
        :param stop_time: optional stop date (YYYY-MM-DD), defaults to tomorrow
        :param step_size: Horizons step size, defaults to the configured value
        :return: the record, or the error that ended the request
        """
        try:
            descriptor = resolve(token)
        except EphemerisError as ex:
            _LOG.info("Unknown object requested: %s", token)
            return ex

        default_start, default_stop = self._default_window()
        start_time = start_time or default_start
        stop_time = stop_time or default_stop
        step_size = step_size or self._config.default_step_size
        command = descriptor.query_command

        _LOG.info("Fetching ephemeris for %s (%s to %s, step %s)",
                  descriptor.designation, start_time, stop_time, step_size)

        observer, elements = await asyncio.gather(
            self._bounded(self._client.fetch_observer(command, start_time, stop_time, step_size)),
            self._bounded(self._client.fetch_elements(command, start_time, stop_time, step_size)),
            return_exceptions=True,
        )

        orbital = self._orbital_elements(elements)

        if isinstance(observer, BaseException):
            _LOG.warning("OBSERVER query failed for %s: %r", descriptor.designation, observer)
            return self._observer_failure(observer)

        if not observer.ok:
            return UpstreamQueryError(
                f"Failed to fetch observer data: {observer.reason}",
                status=observer.status,
                title="Horizons API Error",
            )

        if observer.error:
            return UpstreamQueryError(observer.error)

        if not observer.result:
            return NoDataError()

        position = parse_observer_result(
            observer.result, self._distance_heuristic, self._clock, orbital=orbital
        )
        if position is None:
            return NoDataError("Horizons returned no ephemeris table for the requested window")

        _LOG.info("Ephemeris complete: %s at %s from Earth", descriptor.designation,
                  format_distance(position.distance_from_earth_km))

        return EphemerisRecord(
            descriptor=descriptor,
            position=position,
            orbital=orbital,
            raw_data=observer.result,
        )
