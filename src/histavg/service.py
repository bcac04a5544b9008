# orchestration and business rules.
# pure functions (window, parse, summarize) plus a pipeline that chains geocode -> window -> fetch -> reduce
# compute_all runs independent city pipelines on a ThreadPoolExecutor for the cli

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, List, Optional, Sequence
import structlog

from .client import ArchiveClient, GeocoderClient, JsonFetcher, RequestsFetcher
from .config import Settings
from .errors import NoTemperatureDataError, UpstreamDataIncompleteError, WeatherAvgError
from .models import DailyTemperature, DateWindow, ResolvedLocation, WeatherSummary, mean, non_null, round2
from .schemas import LocationQuery

logger = structlog.get_logger(__name__)

# the archive finalises recent days late, so the window ends this many days before today
ARCHIVE_LAG_DAYS = 6


def compute_window(days: int, today: date) -> DateWindow:
    end = today - timedelta(days=ARCHIVE_LAG_DAYS)
    start = end - timedelta(days=days - 1)
    return DateWindow(start_date=start, end_date=end)


def _temperature(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise UpstreamDataIncompleteError(f"Non-numeric temperature in archive payload: {value!r}")
    return float(value)


def _day(value: Any) -> str:
    # every reported day must carry its YYYY-MM-DD label
    if not isinstance(value, str) or not value:
        raise UpstreamDataIncompleteError(f"Missing or malformed date in archive payload: {value!r}")
    return value


# transform raw provider payload into small typed value objects and check shape
def parse_daily_series(data: Any) -> List[DailyTemperature]:
    # open-meteo shape: data["daily"]["time"][i], data["daily"]["temperature_2m_mean"][i]
    try:
        times = data["daily"]["time"]
        temps = data["daily"][ArchiveClient.DAILY_VARIABLE]
    except (KeyError, TypeError) as exc:
        raise UpstreamDataIncompleteError(
            "Could not fetch historical weather data or data is incomplete from Open-Meteo."
        ) from exc

    if not isinstance(times, list) or not isinstance(temps, list) or len(times) != len(temps):
        raise UpstreamDataIncompleteError("Historical weather data is incomplete or mismatched.")
    if not times:
        raise UpstreamDataIncompleteError("Historical weather data returned zero days.")

    # order is the provider's (ascending by date), not re-sorted
    return [DailyTemperature(date=_day(t), temperature=_temperature(v)) for t, v in zip(times, temps)]


def summarize(data: Any, location: ResolvedLocation, window: DateWindow) -> WeatherSummary:
    series = parse_daily_series(data)
    raw = non_null([d.temperature for d in series])
    if not raw:
        raise NoTemperatureDataError(
            f"No temperature data points found for {location.display_name} "
            f"between {window.start} and {window.end}."
        )

    # the average uses the unrounded readings, only the reported values are rounded
    daily = tuple(
        DailyTemperature(date=d.date, temperature=None if d.temperature is None else round2(d.temperature))
        for d in series
    )
    return WeatherSummary(
        overall_average_temperature=round2(mean(raw)),
        daily_temperatures=daily,
        fetched_location_name=location.display_name,
        days_fetched=len(daily),
        start_date=daily[0].date if daily else window.start,
        end_date=daily[-1].date if daily else window.end,
    )


class TemperatureAggregator:
    def __init__(self, archive: ArchiveClient):
        self.archive = archive

    def aggregate(self, location: ResolvedLocation, window: DateWindow) -> WeatherSummary:
        payload = self.archive.daily_mean_temperatures(location, window)
        summary = summarize(payload, location, window)
        logger.info(
            "aggregated temperatures",
            location=summary.fetched_location_name,
            days_fetched=summary.days_fetched,
            average=summary.overall_average_temperature,
        )
        return summary


# single city path: geocode -> window -> fetch -> reduce, no retries and no partial results
def average_temperature_for_city(
    geocoder: GeocoderClient,
    aggregator: TemperatureAggregator,
    query: LocationQuery,
    today: date,
) -> WeatherSummary:
    location = geocoder.resolve(query.city)
    window = compute_window(query.days, today)
    return aggregator.aggregate(location, window)


def build_pipeline(fetcher: JsonFetcher, settings: Settings):
    geocoder = GeocoderClient(fetcher, base_url=settings.geocoding_base_url)
    aggregator = TemperatureAggregator(ArchiveClient(fetcher, base_url=settings.archive_base_url))
    return geocoder, aggregator


@dataclass(frozen=True)
class CityOutcome:
    city: str
    summary: Optional[WeatherSummary] = None
    error: Optional[WeatherAvgError] = None


def compute_all(
    queries: Sequence[LocationQuery],
    today: date,
    settings: Optional[Settings] = None,
    fetcher: Optional[JsonFetcher] = None,
    max_workers: int = 4,
) -> List[CityOutcome]:
    # reuse a single fetcher, each worker still gets its own thread local http session
    settings = settings or Settings.from_env()
    fetcher = fetcher or RequestsFetcher(timeout=settings.timeout)
    geocoder, aggregator = build_pipeline(fetcher, settings)

    def run(query: LocationQuery) -> CityOutcome:
        try:
            return CityOutcome(query.city, summary=average_temperature_for_city(geocoder, aggregator, query, today))
        except WeatherAvgError as exc:
            logger.warning("city failed", city=query.city, error_type=type(exc).__name__, detail=str(exc))
            return CityOutcome(query.city, error=exc)

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        # map keeps input order so cli output is deterministic
        return list(pool.map(run, queries))
