# query validation: raw city/days input -> immutable LocationQuery or InvalidInputError with per-field details

from __future__ import annotations
from typing import Any, Dict, List, Mapping
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import InvalidInputError

MAX_DAYS = 365


class LocationQuery(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    city: str = Field(..., min_length=1, description="Place name passed to the geocoder.")
    days: int = Field(..., ge=1, le=MAX_DAYS, description="Number of historical days to average.")

    @field_validator("days", mode="before")
    @classmethod
    def reject_bools(cls, v: Any) -> Any:
        # True/False would otherwise coerce to 1/0
        if isinstance(v, bool):
            raise ValueError("Days must be an integer")
        return v


def _details(exc: ValidationError) -> Dict[str, List[str]]:
    details: Dict[str, List[str]] = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err.get("loc") else "query"
        details.setdefault(field, []).append(err["msg"])
    return details


def parse_location_query(raw: Mapping[str, Any]) -> LocationQuery:
    try:
        return LocationQuery.model_validate(dict(raw))
    except ValidationError as exc:
        raise InvalidInputError("Invalid query parameters", details=_details(exc)) from exc
