"""Tests for record serialization and display hints."""

from __future__ import annotations

import pytest

from interstellar_horizons.models import (
    AU_TO_KM,
    EphemerisRecord,
    ObserverPosition,
    OrbitalElements,
    VisualData,
    format_distance,
)
from interstellar_horizons.objects import resolve


class TestEphemerisRecord:
    def test_dashboard_shape(self) -> None:
        record = EphemerisRecord(
            descriptor=resolve("2I"),
            position=ObserverPosition(
                timestamp="2019-12-08T00:00:00.000Z",
                ra="10 47 12.00",
                dec="-12 40 09.0",
                distance_from_sun_au=2.01,
                distance_from_earth_au=1.94,
                magnitude=15.2,
            ),
            orbital=OrbitalElements(3.36, 2.01, 44.05),
            raw_data="raw",
        )

        body = record.to_dict()

        assert body["success"] is True
        assert body["object"] == {
            "designation": "2I/Borisov",
            "alternateName": "C/2019 Q4",
            "type": "Interstellar Comet",
            "discoveryDate": "2019-08",
            "status": "historical",
            "interstellarOrigin": True,
        }
        ephemeris = body["ephemeris"]
        assert ephemeris["timestamp"] == "2019-12-08T00:00:00.000Z"
        assert ephemeris["position"]["distanceFromEarthKm"] == pytest.approx(1.94 * AU_TO_KM)
        assert ephemeris["velocity"] == {"totalKmS": 0.0, "radialVelocityKmS": 0.0}
        assert ephemeris["orbital"] == {
            "eccentricity": 3.36,
            "perihelionDistanceAU": 2.01,
            "inclinationDeg": 44.05,
        }
        assert ephemeris["visual"]["magnitude"] == 15.2
        assert body["rawData"] == "raw"
        assert body["dataSource"] == "NASA JPL Horizons System"

    def test_defaults_are_sentinels(self) -> None:
        record = EphemerisRecord(descriptor=resolve("3I"), position=ObserverPosition(timestamp="t"))

        ephemeris = record.ephemeris_dict()

        assert ephemeris["position"]["ra"] == "N/A"
        assert ephemeris["position"]["distanceFromSunAU"] == 0.0
        assert ephemeris["orbital"] == {"eccentricity": 0.0, "perihelionDistanceAU": 0.0, "inclinationDeg": 0.0}
        assert ephemeris["visual"]["magnitude"] == 99.0


class TestHints:
    def test_hyperbolic(self) -> None:
        assert OrbitalElements(eccentricity=6.14).is_hyperbolic
        assert not OrbitalElements(eccentricity=0.99).is_hyperbolic
        assert not OrbitalElements().is_hyperbolic

    @pytest.mark.parametrize(
        "magnitude,known,telescope",
        [(99.0, False, False), (15.0, True, False), (9.5, True, True)],
    )
    def test_visibility(self, magnitude, known, telescope) -> None:
        visual = VisualData(magnitude=magnitude)

        assert visual.is_known is known
        assert visual.visible_with_small_telescopes is telescope

    @pytest.mark.parametrize(
        "distance_km,expected",
        [
            (0.5 * AU_TO_KM, "74.80 million km"),
            (2.0 * AU_TO_KM, "2.00 AU (299.2 million km)"),
            (12.0 * AU_TO_KM, "12.00 AU"),
        ],
    )
    def test_format_distance(self, distance_km, expected) -> None:
        assert format_distance(distance_km) == expected
