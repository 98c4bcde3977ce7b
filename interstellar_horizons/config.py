"""
Configuration management for the Interstellar Horizons service.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

import json
import logging
import os
from typing import Any, Dict, Optional, Tuple

from interstellar_horizons.parser import DEFAULT_ELEMENT_COLUMNS, ElementColumns

_LOG = logging.getLogger(__name__)

CONFIG_ENV_VAR = "HORIZONS_CONFIG"

DEFAULT_CONFIG = {
    "horizons_url": "https://ssd.jpl.nasa.gov/api/horizons.api",
    "request_timeout": 8,
    "default_step_size": "1d",
    "elements_columns": [2, 3, 4],
    "distance_window_au": [0.1, 100.0],
    "rate_limit_window": 60,
    "rate_limit_max_requests": 100,
    "host": "0.0.0.0",
    "port": 8080,
    "trust_forwarded_headers": False
}


class Config:
    """Configuration management for the ephemeris service."""

    def __init__(self, config_file_path: Optional[str] = None):
        """Initialize configuration."""
        self._config_file_path = config_file_path or os.environ.get(CONFIG_ENV_VAR, "config.json")
        self._config: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        """Load configuration from file, layered over the defaults."""
        self._config = DEFAULT_CONFIG.copy()
        try:
            if os.path.exists(self._config_file_path):
                with open(self._config_file_path, "r", encoding="utf-8") as file:
                    data = json.load(file)
                if not isinstance(data, dict):
                    _LOG.error("Configuration in %s must be a JSON object, got %s; using defaults",
                               self._config_file_path, type(data).__name__)
                    return
                self._config.update(data)
                _LOG.info("Configuration loaded from %s", self._config_file_path)
            else:
                _LOG.info("Configuration file not found, using defaults")
        except (OSError, ValueError) as ex:
            _LOG.error("Failed to load configuration: %s", ex)
            self._config = DEFAULT_CONFIG.copy()

    def save(self) -> None:
        """Save configuration to file."""
        try:
            directory = os.path.dirname(self._config_file_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self._config_file_path, "w", encoding="utf-8") as file:
                json.dump(self._config, file, indent=2)
                _LOG.info("Configuration saved to %s", self._config_file_path)
        except OSError as ex:
            _LOG.error("Failed to save configuration: %s", ex)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value."""
        self._config[key] = value

    def update(self, data: Dict[str, Any]) -> None:
        """Update configuration with new data."""
        self._config.update(data)
        self.save()

    @property
    def horizons_url(self) -> str:
        """Get Horizons API endpoint."""
        return self._config.get("horizons_url", DEFAULT_CONFIG["horizons_url"])

    @property
    def request_timeout(self) -> float:
        """Get upstream request timeout in seconds."""
        return float(self._config.get("request_timeout", 8))

    @property
    def default_step_size(self) -> str:
        """Get default ephemeris step size."""
        return self._config.get("default_step_size", "1d")

    @property
    def elements_columns(self) -> ElementColumns:
        """Get column indices of EC, QR and IN in ELEMENTS rows."""
        value = self._config.get("elements_columns", DEFAULT_CONFIG["elements_columns"])
        try:
            columns = [int(index) for index in value]
            if len(columns) != len(DEFAULT_ELEMENT_COLUMNS) or min(columns) < 0:
                raise ValueError(f"expected three non-negative indices, got {len(columns)}")
        except (TypeError, ValueError) as ex:
            _LOG.warning("Invalid elements_columns %r (%s), using %s",
                         value, ex, list(DEFAULT_ELEMENT_COLUMNS))
            return DEFAULT_ELEMENT_COLUMNS
        return ElementColumns(*columns)

    @property
    def distance_window_au(self) -> Tuple[float, float]:
        """Get plausible AU range used to pick distances from OBSERVER rows."""
        value = self._config.get("distance_window_au", DEFAULT_CONFIG["distance_window_au"])
        try:
            low, high = (float(bound) for bound in value)
            if not low < high:
                raise ValueError(f"lower bound {low} is not below upper bound {high}")
        except (TypeError, ValueError) as ex:
            default = DEFAULT_CONFIG["distance_window_au"]
            _LOG.warning("Invalid distance_window_au %r (%s), using %s", value, ex, default)
            return float(default[0]), float(default[1])
        return low, high

    @property
    def rate_limit_window(self) -> int:
        """Get rate limit window in seconds."""
        return int(self._config.get("rate_limit_window", 60))

    @property
    def rate_limit_max_requests(self) -> int:
        """Get maximum requests per client per window."""
        return int(self._config.get("rate_limit_max_requests", 100))

    @property
    def trust_forwarded_headers(self) -> bool:
        """Get whether X-Forwarded-For/X-Real-IP identify the client (only behind a proxy)."""
        return self._config.get("trust_forwarded_headers", False) is True

    @property
    def host(self) -> str:
        return self._config.get("host", "0.0.0.0")

    @property
    def port(self) -> int:
        return int(self._config.get("port", 8080))
