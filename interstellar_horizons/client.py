"""
JPL Horizons API client.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

import logging
import ssl
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import aiohttp
import certifi

from interstellar_horizons.config import Config

_LOG = logging.getLogger(__name__)

GEOCENTRIC = "500@399"
HELIOCENTRIC = "500@10"


@dataclass
class HorizonsResponse:
    """Decoded Horizons reply. Transient, parsed right after it arrives."""

    status: int
    reason: str = ""
    result: Optional[str] = None
    error: Optional[str] = None
    signature: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class HorizonsClient:
    """Horizons API client issuing OBSERVER and ELEMENTS ephemeris queries."""

    def __init__(self, config: Config):
        """Initialize Horizons client."""
        self._config = config
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def _ensure_session(self) -> None:
        """Ensure aiohttp session exists."""
        if self._session is None or self._session.closed:
            ssl_context = ssl.create_default_context(cafile=certifi.where())
            ssl_context.check_hostname = True
            ssl_context.verify_mode = ssl.CERT_REQUIRED

            connector = aiohttp.TCPConnector(
                ssl=ssl_context,
                limit=10,
                limit_per_host=5,
                ttl_dns_cache=300,
                keepalive_timeout=30
            )

            timeout = aiohttp.ClientTimeout(
                total=self._config.request_timeout,
                connect=5
            )

            headers = {
                'User-Agent': 'interstellar-horizons/0.1 (+aiohttp)',
                'Accept': 'application/json, text/plain, */*'
            }

            self._session = aiohttp.ClientSession(
                timeout=timeout,
                connector=connector,
                headers=headers
            )

            _LOG.info("Horizons HTTP session created with SSL verification")

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def _make_request(self, params: Dict[str, str]) -> HorizonsResponse:
        """
        Query Horizons once.

        Transport errors and timeouts propagate to the caller, which decides
        whether the query was optional. There are no retries here.
        """
        await self._ensure_session()

        _LOG.debug("Querying Horizons %s for %s", params.get("EPHEM_TYPE"), params.get("COMMAND"))

        async with self._session.get(self._config.horizons_url, params=params) as response:
            _LOG.debug("Response: HTTP %d from Horizons", response.status)

            if not 200 <= response.status < 300:
                return HorizonsResponse(status=response.status, reason=response.reason or "")

            try:
                data = await response.json(content_type=None)
            except ValueError as ex:
                _LOG.debug("Invalid JSON from Horizons: %s", ex)
                return HorizonsResponse(status=response.status, reason=response.reason or "")

            if not isinstance(data, dict):
                return HorizonsResponse(status=response.status, reason=response.reason or "")

            return HorizonsResponse(
                status=response.status,
                reason=response.reason or "",
                result=data.get("result"),
                error=data.get("error"),
                signature=data.get("signature") or {},
            )

    @staticmethod
    def build_params(
        command: str,
        ephem_type: str,
        center: str,
        start_time: str,
        stop_time: str,
        step_size: str,
        quantities: Optional[str] = None,
    ) -> Dict[str, str]:
        """Build Horizons query parameters."""
        params = {
            "format": "json",
            "COMMAND": command,
            "EPHEM_TYPE": ephem_type,
            "CENTER": center,
            "START_TIME": start_time,
            "STOP_TIME": stop_time,
            "STEP_SIZE": step_size,
        }
        if ephem_type == "OBSERVER":
            params["MAKE_EPHEM"] = "YES"
        if quantities:
            params["QUANTITIES"] = f"'{quantities}'"
        return params

    async def fetch_observer(
        self,
        command: str,
        start_time: str,
        stop_time: str,
        step_size: str,
        quantities: Optional[str] = None,
    ) -> HorizonsResponse:
        """Fetch geocentric OBSERVER ephemeris - sky position and brightness."""
        params = self.build_params(
            command, "OBSERVER", GEOCENTRIC, start_time, stop_time, step_size, quantities
        )
        return await self._make_request(params)

    async def fetch_elements(
        self,
        command: str,
        start_time: str,
        stop_time: str,
        step_size: str,
    ) -> HorizonsResponse:
        """Fetch heliocentric ELEMENTS ephemeris - osculating orbital elements."""
        params = self.build_params(
            command, "ELEMENTS", HELIOCENTRIC, start_time, stop_time, step_size
        )
        return await self._make_request(params)
