"""
Interstellar Horizons ephemeris service.

Query JPL Horizons for interstellar visitors such as 3I/ATLAS, 2I/Borisov
and 1I/'Oumuamua, and reshape the plain-text ephemeris tables into
dashboard-friendly JSON.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

__version__ = "0.1.0"
__author__ = "Meir Miyara"
__email__ = "meir.miyara@gmail.com"
