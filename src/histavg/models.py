# models and small numeric helpers to keep data shapes explicit and reusable across the app

from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Sequence, Tuple

_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class ResolvedLocation:
    # top-ranked geocoding match, display_name is the provider's canonical name
    latitude: float
    longitude: float
    display_name: str


@dataclass(frozen=True)
class DateWindow:
    start_date: date
    end_date: date

    @property
    def start(self) -> str:
        return self.start_date.isoformat()

    @property
    def end(self) -> str:
        return self.end_date.isoformat()


@dataclass(frozen=True)
class DailyTemperature:
    # None marks a day the provider has no reading for
    date: str
    temperature: Optional[float]


@dataclass(frozen=True)
class WeatherSummary:
    # output value object used by the http layer and cli
    overall_average_temperature: float
    daily_temperatures: Tuple[DailyTemperature, ...]
    fetched_location_name: str
    days_fetched: int
    start_date: str
    end_date: str

    def to_dict(self) -> Dict[str, Any]:
        # keys follow the public JSON contract
        return {
            "overallAverageTemperature": self.overall_average_temperature,
            "dailyTemperatures": [
                {"date": d.date, "temperature": d.temperature} for d in self.daily_temperatures
            ],
            "fetchedLocationName": self.fetched_location_name,
            "daysFetched": self.days_fetched,
            "startDate": self.start_date,
            "endDate": self.end_date,
        }


def round2(value: float) -> float:
    # half-up on the exact binary value, so 20.184999... stays 20.18
    return float(Decimal(value).quantize(_CENTS, rounding=ROUND_HALF_UP))


def mean(values: Sequence[float]) -> float:
    # simple average that returns NaN on empty input to avoid zero division
    return sum(values) / len(values) if values else float("nan")


def non_null(values: List[Optional[float]]) -> List[float]:
    return [v for v in values if v is not None]
