"""
Known interstellar objects and token resolution.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

import logging
from types import MappingProxyType
from typing import Mapping

from interstellar_horizons.errors import UnknownObjectError
from interstellar_horizons.models import CelestialObjectDescriptor

_LOG = logging.getLogger(__name__)

INTERSTELLAR_OBJECTS: Mapping[str, CelestialObjectDescriptor] = MappingProxyType({
    "3I": CelestialObjectDescriptor(
        short_code="3I",
        designation="3I/ATLAS",
        alt_name="C/2025 N1",
        classification="Interstellar Comet",
        discovery_date="2025-07",
        status="active",
    ),
    "2I": CelestialObjectDescriptor(
        short_code="2I",
        designation="2I/Borisov",
        alt_name="C/2019 Q4",
        classification="Interstellar Comet",
        discovery_date="2019-08",
        status="historical",
    ),
    "1I": CelestialObjectDescriptor(
        short_code="1I",
        designation="1I/'Oumuamua",
        alt_name="A/2017 U1",
        classification="Interstellar Object",
        discovery_date="2017-10",
        status="historical",
    ),
})

# Designation prefix of the interstellar comet currently being tracked.
ACTIVE_DESIGNATION_PREFIX = "C/2025"


def resolve(token: str) -> CelestialObjectDescriptor:
    """
    Resolve a short code or designation to an object descriptor.

    :param token: short code ("3I") or designation ("C/2025 N1"), case-sensitive
    :return: matching descriptor
    :raises UnknownObjectError: token is neither known nor a recognised designation
    """
    descriptor = INTERSTELLAR_OBJECTS.get(token)
    if descriptor:
        return descriptor

    if "/" in token and token.startswith(ACTIVE_DESIGNATION_PREFIX):
        _LOG.debug("Treating %s as designation of the active interstellar comet", token)
        return CelestialObjectDescriptor(
            short_code="3I",
            designation=token,
            alt_name="3I/ATLAS",
            classification="Interstellar Comet",
            discovery_date="2025-07",
            status="active",
            command=f"'{token}'",
        )

    raise UnknownObjectError(token)
