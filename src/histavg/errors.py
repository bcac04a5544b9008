# error types raised by the temperature pipeline
# each one carries the http status it is surfaced as, so the web layer maps it without knowing where it was raised

from __future__ import annotations
from typing import Dict, List, Optional


class WeatherAvgError(RuntimeError):
    # base type, anything not more specific is a server-side failure
    status_code = 500


class InvalidInputError(WeatherAvgError, ValueError):
    # city or day count missing, malformed or out of range
    status_code = 400

    def __init__(self, message: str = "Invalid query parameters", details: Optional[Dict[str, List[str]]] = None):
        super().__init__(message)
        self.details = details or {}


class LocationNotFoundError(WeatherAvgError):
    # geocoder returned no match
    status_code = 404


class NoTemperatureDataError(WeatherAvgError):
    # every day in the fetched window is null
    status_code = 404


class UpstreamDataIncompleteError(WeatherAvgError):
    # provider answered, but the payload is missing fields or mismatched
    status_code = 500


class UpstreamUnavailableError(WeatherAvgError):
    # network, timeout, http-level or decoding failure talking to a provider
    status_code = 500

    def __init__(self, message: str, upstream_status: Optional[int] = None, reason: Optional[str] = None):
        super().__init__(message)
        self.upstream_status = upstream_status
        self.reason = reason


class ConfigurationError(WeatherAvgError):
    pass
