"""
Parsers for JPL Horizons plain-text ephemeris tables.

Horizons wraps its tables in a free-form text report. The rows of interest
sit between the $$SOE and $$EOE markers, and their column layout depends on
the ephemeris type and the quantities requested. Nothing here raises on bad
data: a field that cannot be read falls back to its default value.

Two heuristics are involved and both are isolated so they can be replaced:

* ``PositionalColumnStrategy`` reads orbital elements from fixed column
  indices. A change in Horizons' column order yields wrong numbers, not an
  error. The indices are configurable so the assumption stays visible.
* ``DistanceWindowHeuristic`` picks distances by value range and order of
  appearance only. It has no column anchor at all.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

import logging
import math
import re
from datetime import datetime, timezone
from typing import Callable, List, NamedTuple, Optional, Sequence, Tuple

from interstellar_horizons.models import (
    NOT_AVAILABLE,
    UNKNOWN_MAGNITUDE,
    ObserverPosition,
    OrbitalElements,
)

_LOG = logging.getLogger(__name__)

START_OF_EPHEMERIS = "$$SOE"
END_OF_EPHEMERIS = "$$EOE"

Clock = Callable[[], datetime]

_TIMESTAMP_RE = re.compile(r"^\d{4}-[A-Za-z]{3}-\d{2}\s+\d{2}:\d{2}")

# Sexagesimal forms are tried before decimal degrees. Decimal degrees need a
# signed declination and both values need at least this many decimals,
# otherwise every distance or magnitude in the row would read as a coordinate.
MIN_DECIMAL_DEGREE_DIGITS = 4

_RA_PATTERNS = (
    re.compile(r"(?<![\w.:+-])\d{1,3}\s\d{2}\s\d{2}\.\d+(?![\w.])"),
    re.compile(
        rf"(?<![\w.:+-])\d{{1,3}}\.\d{{{MIN_DECIMAL_DEGREE_DIGITS},}}"
        rf"(?=\s+[+-]\d{{1,2}}\.\d{{{MIN_DECIMAL_DEGREE_DIGITS},}}(?![\w.]))"
    ),
)
_DEC_PATTERNS = (
    re.compile(r"(?<![\w.:])[+-]\d{1,2}\s\d{2}\s\d{2}\.\d+(?![\w.])"),
    re.compile(rf"(?<![\w.:])[+-]\d{{1,2}}\.\d{{{MIN_DECIMAL_DEGREE_DIGITS},}}(?![\w.])"),
)

_MAGNITUDE_RE = re.compile(r"(?<!\S)\d{1,2}\.\d+(?!\S)")
_DECIMAL_RE = re.compile(r"(?<![\w.])[+-]?\d+\.\d+(?:[eE][+-]?\d+)?(?![\w.])")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Render a datetime as an ISO-8601 UTC string with millisecond precision."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def coerce_float(value: Optional[str]) -> float:
    """Convert a table token to float, returning 0.0 for anything unreadable."""
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def extract_block_text(result_text: Optional[str]) -> Optional[str]:
    """
    Return the trimmed text strictly between the $$SOE and $$EOE markers.

    :param result_text: the ``result`` field of a Horizons response
    :return: block text, or None when either marker is missing
    """
    if not result_text:
        return None

    start = result_text.find(START_OF_EPHEMERIS)
    if start == -1:
        return None

    start += len(START_OF_EPHEMERIS)
    end = result_text.find(END_OF_EPHEMERIS, start)
    if end == -1:
        return None

    return result_text[start:end].strip()


def extract_block(result_text: Optional[str]) -> Optional[List[str]]:
    """
    Return the non-empty data rows of the ephemeris block, in upstream order.

    Both the OBSERVER and ELEMENTS paths go through here. A missing marker or
    an empty block means the query produced no table (Horizons often answers
    with an explanatory message instead), so None is returned.
    """
    block = extract_block_text(result_text)
    if block is None:
        return None

    lines = [line.strip() for line in block.splitlines() if line.strip()]
    return lines or None


class ElementColumns(NamedTuple):
    """Column indices of the elements read from an ELEMENTS row."""

    eccentricity: int = 2
    perihelion_distance: int = 3
    inclination: int = 4


DEFAULT_ELEMENT_COLUMNS = ElementColumns()


class PositionalColumnStrategy:
    """
    Read orbital elements from fixed column positions.

    The default indices (EC=2, QR=3, IN=4) follow the observed Horizons
    layout, where the first two columns hold the epoch. CSV rows are split on
    commas, anything else on runs of whitespace.
    """

    name = "positional-columns"

    def __init__(self, columns: Sequence[int] = DEFAULT_ELEMENT_COLUMNS):
        self.columns = ElementColumns(*columns)

    @staticmethod
    def split(line: str) -> List[str]:
        if "," in line:
            return [part.strip() for part in line.split(",")]
        return line.split()

    def _field(self, parts: List[str], index: int) -> float:
        if 0 <= index < len(parts):
            return coerce_float(parts[index])
        return 0.0

    def __call__(self, line: str) -> OrbitalElements:
        parts = self.split(line.strip())
        return OrbitalElements(
            eccentricity=self._field(parts, self.columns.eccentricity),
            perihelion_distance_au=self._field(parts, self.columns.perihelion_distance),
            inclination_deg=self._field(parts, self.columns.inclination),
        )


class DistanceWindowHeuristic:
    """
    Pick heliocentric and geocentric distances out of an OBSERVER row.

    Every decimal token is collected and only values inside [low, high) AU
    survive. The first survivor is the Sun distance and the second the Earth
    distance; a lone survivor fills both. The 0.1-100 AU default window was
    chosen empirically for interstellar visitors observed from Earth and has
    not been checked against every Horizons quantity selection.
    """

    name = "distance-window"

    def __init__(self, low: float = 0.1, high: float = 100.0):
        self.low = low
        self.high = high

    def candidates(self, text: str) -> List[float]:
        values = (coerce_float(token) for token in _DECIMAL_RE.findall(text))
        return [value for value in values if self.low <= value < self.high]

    def __call__(self, text: str) -> Tuple[float, float]:
        values = self.candidates(text)
        if not values:
            return 0.0, 0.0
        if len(values) == 1:
            return values[0], values[0]
        return values[0], values[1]


DEFAULT_DISTANCE_HEURISTIC = DistanceWindowHeuristic()


def parse_elements(
    line: str,
    strategy: Optional[Callable[[str], OrbitalElements]] = None,
) -> OrbitalElements:
    """Parse one ELEMENTS row into eccentricity, perihelion distance and inclination."""
    strategy = strategy or PositionalColumnStrategy()
    return strategy(line)


def parse_elements_result(
    result_text: Optional[str],
    strategy: Optional[Callable[[str], OrbitalElements]] = None,
) -> Optional[OrbitalElements]:
    """
    Parse the first row of an ELEMENTS report.

    Later rows are ignored. Callers wanting a time series have to query
    again with a narrower window.
    """
    lines = extract_block(result_text)
    if not lines:
        _LOG.debug("No $$SOE/$$EOE block in ELEMENTS result")
        return None

    _LOG.debug("Parsing ELEMENTS line: %s", lines[0])
    return parse_elements(lines[0], strategy)


def parse_timestamp(line: str, clock: Clock = utc_now) -> str:
    """Read the leading "YYYY-Mon-DD HH:MM" stamp, or fall back to the clock."""
    match = _TIMESTAMP_RE.match(line)
    if match:
        try:
            value = datetime.strptime(" ".join(match.group(0).split()), "%Y-%b-%d %H:%M")
            return format_timestamp(value.replace(tzinfo=timezone.utc))
        except ValueError:
            _LOG.debug("Unreadable timestamp %r, using current time", match.group(0))
    return format_timestamp(clock())


def _blank(text: str, match: Optional["re.Match[str]"]) -> str:
    """Replace a matched span with spaces so later scans skip it."""
    if not match:
        return text
    start, end = match.span()
    return text[:start] + " " * (end - start) + text[end:]


def _first_match(patterns: Sequence["re.Pattern[str]"], text: str) -> Optional["re.Match[str]"]:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match
    return None


def parse_observer_line(
    line: str,
    distances: Optional[Callable[[str], Tuple[float, float]]] = None,
    clock: Clock = utc_now,
    *,
    orbital: Optional[OrbitalElements] = None,
) -> ObserverPosition:
    """
    Parse one OBSERVER row into an observer position.

    :param line: first data row of the OBSERVER block
    :param distances: distance strategy, ``DistanceWindowHeuristic`` by default
    :param clock: time source used when the row has no readable timestamp
    :param orbital: elements from the matching ELEMENTS query, if any. They
                    carry no Sun distance, so the position never takes a
                    value from them; the record holds both side by side.
    :return: parsed position; unreadable coordinates are "N/A", unreadable
             numbers keep their defaults
    """
    line = line.strip()
    distances = distances or DEFAULT_DISTANCE_HEURISTIC
    timestamp = parse_timestamp(line, clock)

    # Remaining scans only see what follows the timestamp.
    stamp = _TIMESTAMP_RE.match(line)
    rest = line[stamp.end():] if stamp else line

    ra_match = _first_match(_RA_PATTERNS, rest)
    dec_match = _first_match(_DEC_PATTERNS, rest)
    ra = ra_match.group(0) if ra_match else NOT_AVAILABLE
    dec = dec_match.group(0) if dec_match else NOT_AVAILABLE
    rest = _blank(_blank(rest, ra_match), dec_match)

    magnitude_match = _MAGNITUDE_RE.search(rest)
    magnitude = coerce_float(magnitude_match.group(0)) if magnitude_match else UNKNOWN_MAGNITUDE

    sun_au, earth_au = distances(rest)

    return ObserverPosition(
        timestamp=timestamp,
        ra=ra,
        dec=dec,
        distance_from_sun_au=sun_au,
        distance_from_earth_au=earth_au,
        magnitude=magnitude,
    )


def parse_observer_result(
    result_text: Optional[str],
    distances: Optional[Callable[[str], Tuple[float, float]]] = None,
    clock: Clock = utc_now,
    *,
    orbital: Optional[OrbitalElements] = None,
) -> Optional[ObserverPosition]:
    """Parse the first row of an OBSERVER report, or None if it has no table."""
    lines = extract_block(result_text)
    if not lines:
        _LOG.debug("No $$SOE/$$EOE block in OBSERVER result")
        return None

    _LOG.debug("Parsing OBSERVER line: %s", lines[0])
    return parse_observer_line(lines[0], distances, clock, orbital=orbital)
