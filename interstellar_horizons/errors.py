"""
Error types returned by the ephemeris service.

Each error carries the HTTP status and short title the route handler uses
when it renders the failure as JSON.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

from typing import Any, Dict, Optional


class EphemerisError(Exception):
    """Base class for terminal ephemeris request failures."""

    status = 500
    title = "Internal Server Error"

    def __init__(self, message: str, status: Optional[int] = None):
        """Initialize error with message and optional status override."""
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status

    def to_dict(self) -> Dict[str, Any]:
        """Render error as response body."""
        return {
            "success": False,
            "error": self.title,
            "message": self.message,
        }


class UnknownObjectError(EphemerisError):
    """Token matched neither a known object nor a designation pattern."""

    status = 404
    title = "Unknown interstellar object"

    def __init__(self, token: str):
        super().__init__(f'Object "{token}" not found. Use 3I, 2I, or 1I.')
        self.token = token


class UpstreamQueryError(EphemerisError):
    """Horizons rejected the query or could not be reached."""

    status = 400
    title = "Horizons Query Error"

    def __init__(self, message: str, status: Optional[int] = None, title: Optional[str] = None):
        super().__init__(message, status)
        if title:
            self.title = title


class NoDataError(EphemerisError):
    """Horizons answered but the result carried no ephemeris table."""

    status = 404
    title = "No Data"

    def __init__(self, message: str = "Horizons returned no ephemeris data"):
        super().__init__(message)
