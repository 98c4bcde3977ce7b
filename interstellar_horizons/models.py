"""
Ephemeris data models.

Numeric fields always carry a value: 0.0 where nothing could be parsed and
99.0 for an unknown magnitude. Sky coordinates are the exception and use the
string "N/A" when unparseable, so "no coordinate" never reads as "0h 0m 0s".
Dashboard code depends on which fields use which sentinel; keep the split.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

from dataclasses import dataclass, field
from typing import Any, Dict

AU_TO_KM = 149597870.7
UNKNOWN_MAGNITUDE = 99.0
NOT_AVAILABLE = "N/A"

DATA_SOURCE = "NASA JPL Horizons System"


@dataclass(frozen=True)
class CelestialObjectDescriptor:
    """Static description of an interstellar visitor."""

    short_code: str
    designation: str
    alt_name: str
    classification: str  # "Interstellar Comet" or "Interstellar Object"
    discovery_date: str  # "YYYY-MM"
    status: str  # "active" (observable) or "historical"
    command: str = ""  # explicit Horizons COMMAND, overrides the derived one

    @property
    def query_command(self) -> str:
        """Horizons COMMAND value, preferring the alternate name."""
        if self.command:
            return self.command
        return f"'{self.alt_name or self.designation}'"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "designation": self.designation,
            "alternateName": self.alt_name,
            "type": self.classification,
            "discoveryDate": self.discovery_date,
            "status": self.status,
            "interstellarOrigin": True,
        }


@dataclass(frozen=True)
class OrbitalElements:
    """Osculating elements from the first row of an ELEMENTS table."""

    eccentricity: float = 0.0
    perihelion_distance_au: float = 0.0
    inclination_deg: float = 0.0

    @property
    def is_hyperbolic(self) -> bool:
        """True when the body is not bound to the Sun."""
        return self.eccentricity > 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "eccentricity": self.eccentricity,
            "perihelionDistanceAU": self.perihelion_distance_au,
            "inclinationDeg": self.inclination_deg,
        }


@dataclass(frozen=True)
class ObserverPosition:
    """Geocentric sky position from the first row of an OBSERVER table."""

    timestamp: str
    ra: str = NOT_AVAILABLE
    dec: str = NOT_AVAILABLE
    distance_from_sun_au: float = 0.0
    distance_from_earth_au: float = 0.0
    magnitude: float = UNKNOWN_MAGNITUDE

    @property
    def distance_from_earth_km(self) -> float:
        return self.distance_from_earth_au * AU_TO_KM

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ra": self.ra,
            "dec": self.dec,
            "distanceFromSunAU": self.distance_from_sun_au,
            "distanceFromEarthAU": self.distance_from_earth_au,
            "distanceFromEarthKm": self.distance_from_earth_km,
        }


@dataclass(frozen=True)
class Velocity:
    """
    Velocity placeholder.

    OBSERVER ephemerides carry no velocity vectors; real values need a
    VECTORS query, so both fields stay at zero.
    """

    total_km_s: float = 0.0
    radial_velocity_km_s: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalKmS": self.total_km_s,
            "radialVelocityKmS": self.radial_velocity_km_s,
        }


@dataclass(frozen=True)
class VisualData:
    """Brightness data plus the display hints derived from it."""

    magnitude: float = UNKNOWN_MAGNITUDE
    phase_angle_deg: float = 0.0
    illumination_percent: float = 0.0

    @property
    def is_known(self) -> bool:
        """False for the 99 sentinel and other implausibly faint values."""
        return self.magnitude < 50

    @property
    def visible_with_small_telescopes(self) -> bool:
        return self.magnitude < 10

    def to_dict(self) -> Dict[str, Any]:
        return {
            "magnitude": self.magnitude,
            "phaseAngleDeg": self.phase_angle_deg,
            "illuminationPercent": self.illumination_percent,
        }


@dataclass(frozen=True)
class EphemerisRecord:
    """Everything known about one object at the first requested time step."""

    descriptor: CelestialObjectDescriptor
    position: ObserverPosition
    orbital: OrbitalElements = field(default_factory=OrbitalElements)
    velocity: Velocity = field(default_factory=Velocity)
    raw_data: str = ""

    @property
    def visual(self) -> VisualData:
        return VisualData(magnitude=self.position.magnitude)

    def ephemeris_dict(self) -> Dict[str, Any]:
        """Nested ephemeris block in dashboard shape."""
        return {
            "timestamp": self.position.timestamp,
            "position": self.position.to_dict(),
            "velocity": self.velocity.to_dict(),
            "orbital": self.orbital.to_dict(),
            "visual": self.visual.to_dict(),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Success response body, without the per-response timestamp."""
        return {
            "success": True,
            "object": self.descriptor.to_dict(),
            "ephemeris": self.ephemeris_dict(),
            "rawData": self.raw_data,
            "dataSource": DATA_SOURCE,
        }


def format_distance(distance_km: float) -> str:
    """Format a distance for display, switching units with scale."""
    distance_au = distance_km / AU_TO_KM
    if distance_au < 1:
        return f"{distance_km / 1000000:.2f} million km"
    if distance_au < 10:
        return f"{distance_au:.2f} AU ({distance_km / 1000000:.1f} million km)"
    return f"{distance_au:.2f} AU"
