"""End-to-end tests for ephemeris composition with a scripted Horizons client."""

from __future__ import annotations

import asyncio

import aiohttp
import pytest

from interstellar_horizons.client import HorizonsResponse
from interstellar_horizons.ephemeris import EphemerisService
from interstellar_horizons.errors import NoDataError, UnknownObjectError, UpstreamQueryError
from interstellar_horizons.models import EphemerisRecord, OrbitalElements
from tests.helpers import FakeHorizonsClient, fixed_clock, load_fixture, ok_response


def run(service: EphemerisService, token: str = "3I", **kwargs):
    return asyncio.run(service.get_ephemeris(token, **kwargs))


def make_service(config, observer=None, elements=None):
    client = FakeHorizonsClient(observer=observer, elements=elements)
    return EphemerisService(config, client, clock=fixed_clock), client


class TestGetEphemeris:
    """Tests for the combined OBSERVER + ELEMENTS request."""

    def test_success_merges_both_queries(self, config, observer_text, elements_text) -> None:
        service, client = make_service(config, ok_response(observer_text), ok_response(elements_text))

        record = run(service)

        assert isinstance(record, EphemerisRecord)
        assert record.descriptor.designation == "3I/ATLAS"
        assert record.position.ra == "13 05 12.34"
        assert record.position.dec == "-05 12 34.5"
        assert record.position.timestamp == "2025-10-18T00:00:00.000Z"
        assert record.orbital.eccentricity == pytest.approx(6.13987123456789)
        assert record.orbital.perihelion_distance_au == pytest.approx(1.356789012345678)
        assert record.orbital.inclination_deg == pytest.approx(175.1234567890123)
        assert record.velocity.total_km_s == 0.0
        assert record.raw_data == observer_text

    def test_queries_use_alternate_name_and_default_window(self, config, observer_text) -> None:
        service, client = make_service(config, ok_response(observer_text), ok_response(""))

        run(service)

        assert sorted(kind for kind, _ in client.calls) == ["ELEMENTS", "OBSERVER"]
        for _, args in client.calls:
            assert args == ("'C/2025 N1'", "2025-10-18", "2025-10-19", "1d")

    def test_explicit_window_is_forwarded(self, config, observer_text) -> None:
        service, client = make_service(config, ok_response(observer_text), ok_response(""))

        run(service, "2I", start_time="2019-12-01", stop_time="2019-12-10", step_size="6h")

        for _, args in client.calls:
            assert args == ("'C/2019 Q4'", "2019-12-01", "2019-12-10", "6h")

    def test_elements_network_failure_is_not_fatal(self, config, observer_text) -> None:
        service, _ = make_service(
            config,
            ok_response(observer_text),
            aiohttp.ClientConnectionError("connection reset"),
        )

        record = run(service, "2I")

        assert isinstance(record, EphemerisRecord)
        assert record.orbital == OrbitalElements(0.0, 0.0, 0.0)
        assert record.position.ra == "13 05 12.34"
        assert record.position.magnitude == pytest.approx(15.123)

    @pytest.mark.parametrize(
        "elements",
        [
            HorizonsResponse(status=503, reason="Service Unavailable"),
            HorizonsResponse(status=200, error="Cannot interpret date"),
            ok_response(load_fixture("no_table.txt")),
            asyncio.TimeoutError(),
        ],
    )
    def test_elements_degrade_to_zero(self, config, observer_text, elements) -> None:
        service, _ = make_service(config, ok_response(observer_text), elements)

        record = run(service)

        assert isinstance(record, EphemerisRecord)
        assert record.orbital == OrbitalElements()

    def test_unknown_object_issues_no_queries(self, config) -> None:
        service, client = make_service(config)

        result = run(service, "unknown-token")

        assert isinstance(result, UnknownObjectError)
        assert result.status == 404
        assert client.calls == []

    def test_observer_http_error_carries_upstream_status(self, config, elements_text) -> None:
        service, _ = make_service(
            config,
            HorizonsResponse(status=500, reason="Internal Server Error"),
            ok_response(elements_text),
        )

        result = run(service)

        assert isinstance(result, UpstreamQueryError)
        assert result.status == 500
        assert result.title == "Horizons API Error"
        assert "Internal Server Error" in result.message

    def test_observer_error_field_is_query_error(self, config) -> None:
        service, _ = make_service(
            config,
            HorizonsResponse(status=200, error="No matches found."),
            ok_response(""),
        )

        result = run(service)

        assert isinstance(result, UpstreamQueryError)
        assert result.status == 400
        assert result.message == "No matches found."

    def test_observer_without_result_is_no_data(self, config) -> None:
        service, _ = make_service(config, HorizonsResponse(status=200), ok_response(""))

        result = run(service)

        assert isinstance(result, NoDataError)
        assert result.status == 404

    def test_observer_without_table_is_no_data(self, config) -> None:
        service, _ = make_service(config, ok_response(load_fixture("no_table.txt")), ok_response(""))

        result = run(service)

        assert isinstance(result, NoDataError)

    def test_observer_timeout(self, config, elements_text) -> None:
        service, _ = make_service(config, asyncio.TimeoutError(), ok_response(elements_text))

        result = run(service)

        assert isinstance(result, UpstreamQueryError)
        assert result.status == 504

    def test_observer_connection_failure(self, config) -> None:
        service, _ = make_service(config, aiohttp.ClientConnectionError("refused"), ok_response(""))

        result = run(service)

        assert isinstance(result, UpstreamQueryError)
        assert result.status == 502

    def test_slow_upstream_is_bounded_by_timeout(self, config, observer_text) -> None:
        config.set("request_timeout", 0.05)

        class SlowElements(FakeHorizonsClient):
            async def fetch_elements(self, command, start_time, stop_time, step_size):
                await asyncio.sleep(5)

        service = EphemerisService(config, SlowElements(observer=ok_response(observer_text)), clock=fixed_clock)

        record = run(service)

        assert isinstance(record, EphemerisRecord)
        assert record.orbital == OrbitalElements()

    def test_repeat_requests_are_identical(self, config, observer_text, elements_text) -> None:
        service, _ = make_service(config, ok_response(observer_text), ok_response(elements_text))

        first = run(service)
        second = run(service)

        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_repeat_requests_are_identical_with_wall_clock(self, config, observer_text, elements_text) -> None:
        client = FakeHorizonsClient(ok_response(observer_text), ok_response(elements_text))
        service = EphemerisService(config, client)

        first = run(service)
        second = run(service)

        assert first.to_dict() == second.to_dict()
        assert "timestamp" not in first.to_dict()
