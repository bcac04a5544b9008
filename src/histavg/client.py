# OOP boundary for external i/o
# all http details live here, so the aggregation code is pure and testable
# the fetch capability is injected, tests pass a fake instead of patching requests

from __future__ import annotations
import threading
from typing import Any, Dict, Mapping, Optional, Protocol
import requests
import structlog
from requests.adapters import HTTPAdapter

from .config import DEFAULT_ARCHIVE_BASE_URL, DEFAULT_GEOCODING_BASE_URL, DEFAULT_TIMEOUT
from .errors import LocationNotFoundError, UpstreamDataIncompleteError, UpstreamUnavailableError
from .models import DateWindow, ResolvedLocation

logger = structlog.get_logger(__name__)


class JsonFetcher(Protocol):
    def get_json(self, url: str, params: Mapping[str, Any]) -> Any: ...


def _upstream_reason(resp: requests.Response) -> Optional[str]:
    # open-meteo reports failures as {"error": true, "reason": "..."}
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        reason = body.get("reason") or body.get("message")
        return str(reason) if reason else None
    return None


class RequestsFetcher:
    # production fetcher: one session per worker thread, a bounded timeout and no retries
    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = "histavg/0.1 (+https://github.com/alexneme/histavg)",
    ):
        self.timeout = timeout
        self.user_agent = user_agent
        # each worker thread lazily obtains its own session through _session()
        self._local = threading.local()

    def _build_session(self) -> requests.Session:
        s = requests.Session()
        s.headers.update({"User-Agent": self.user_agent, "Accept": "application/json"})
        adapter = HTTPAdapter(max_retries=0)
        s.mount("http://", adapter)
        s.mount("https://", adapter)
        return s

    def _session(self) -> requests.Session:
        sess = getattr(self._local, "session", None)
        if sess is None:
            sess = self._build_session()
            self._local.session = sess
        return sess

    def get_json(self, url: str, params: Mapping[str, Any]) -> Any:
        try:
            resp = self._session().get(url, params=dict(params), timeout=self.timeout)
        except requests.Timeout as exc:
            raise UpstreamUnavailableError(f"Request to {url} timed out after {self.timeout}s") from exc
        except requests.RequestException as exc:
            raise UpstreamUnavailableError(f"Request error for {url}: {exc}") from exc

        if resp.status_code >= 400:
            reason = _upstream_reason(resp)
            detail = reason or (resp.text or "")[:300]
            logger.warning("upstream http error", url=url, status_code=resp.status_code, reason=detail)
            raise UpstreamUnavailableError(
                f"API Error: HTTP {resp.status_code} from {url}: {detail}",
                upstream_status=resp.status_code,
                reason=reason,
            )

        try:
            return resp.json()
        except ValueError as exc:
            raise UpstreamUnavailableError(f"Invalid JSON from {url}: {exc}") from exc


class GeocoderClient:
    # free-text place name -> coordinates via the Open-Meteo geocoding API
    # only the top-ranked match is used, the returned name is the provider's, not the caller's input
    SEARCH_PATH = "/v1/search"

    def __init__(self, fetcher: JsonFetcher, base_url: str = DEFAULT_GEOCODING_BASE_URL):
        self.fetcher = fetcher
        self.base_url = base_url.rstrip("/")

    def resolve(self, city: str) -> ResolvedLocation:
        params = {"name": city, "count": 1, "language": "en", "format": "json"}
        logger.debug("geocoding", city=city)
        data = self.fetcher.get_json(self.base_url + self.SEARCH_PATH, params)

        if not isinstance(data, dict):
            raise UpstreamDataIncompleteError("Unexpected geocoding payload shape")
        results = data.get("results")
        if results is not None and not isinstance(results, list):
            raise UpstreamDataIncompleteError("Unexpected geocoding payload shape: results is not a list")
        if not results:
            raise LocationNotFoundError(f"Could not find location: {city}")

        top = results[0]
        if not isinstance(top, dict):
            raise UpstreamDataIncompleteError(f"Geocoding result for {city!r} is not an object")
        try:
            lat = float(top["latitude"])
            lon = float(top["longitude"])
        except (KeyError, TypeError, ValueError) as exc:
            raise UpstreamDataIncompleteError(f"Geocoding result for {city!r} has no usable coordinates") from exc

        return ResolvedLocation(latitude=lat, longitude=lon, display_name=top.get("name") or city)


class ArchiveClient:
    # historical daily means from the Open-Meteo archive API, payload shape is checked by the service
    ARCHIVE_PATH = "/v1/archive"
    DAILY_VARIABLE = "temperature_2m_mean"

    def __init__(self, fetcher: JsonFetcher, base_url: str = DEFAULT_ARCHIVE_BASE_URL):
        self.fetcher = fetcher
        self.base_url = base_url.rstrip("/")

    def daily_mean_temperatures(self, location: ResolvedLocation, window: DateWindow) -> Dict[str, Any]:
        params = {
            "latitude": location.latitude,
            "longitude": location.longitude,
            "start_date": window.start,
            "end_date": window.end,
            "daily": self.DAILY_VARIABLE,
            "timezone": "auto",
        }
        logger.debug(
            "fetching archive",
            latitude=location.latitude,
            longitude=location.longitude,
            start_date=window.start,
            end_date=window.end,
        )
        return self.fetcher.get_json(self.base_url + self.ARCHIVE_PATH, params)
