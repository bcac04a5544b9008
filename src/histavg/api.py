# http surface: GET /weather/average and a liveness probe
# domain errors carry their own status code, this module only renders them

from __future__ import annotations
from datetime import date
from typing import Optional
import structlog
import uvicorn
from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from .client import JsonFetcher, RequestsFetcher
from .config import Settings
from .errors import InvalidInputError, WeatherAvgError
from .logs import configure_logging
from .schemas import MAX_DAYS, parse_location_query
from .service import average_temperature_for_city, build_pipeline

logger = structlog.get_logger(__name__)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_fetcher(request: Request) -> JsonFetcher:
    return request.app.state.fetcher


def get_today() -> date:
    return date.today()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level, settings.log_json)

    app = FastAPI(
        title="Historical Average Temperature API",
        description="Average daily mean temperature for a city over a past window, backed by Open-Meteo.",
        version="0.1.0",
    )
    app.state.settings = settings
    app.state.fetcher = RequestsFetcher(timeout=settings.timeout)

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_origins),
            allow_methods=["GET", "OPTIONS"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def bind_request_context(request: Request, call_next):
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(method=request.method, path=request.url.path)
        return await call_next(request)

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc), "details": exc.details})

    @app.exception_handler(WeatherAvgError)
    async def weather_error_handler(request: Request, exc: WeatherAvgError):
        if exc.status_code >= 500:
            logger.error("weather request failed", error_type=type(exc).__name__, detail=str(exc))
        else:
            logger.info("weather request rejected", error_type=type(exc).__name__, detail=str(exc))
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("unexpected error")
        return JSONResponse(status_code=500, content={"error": "Failed to fetch weather data."})

    # sync handler: fastapi runs it in its threadpool, so blocking http calls do not stall the loop
    @app.get("/weather/average", tags=["Weather"], summary="Average temperature for a city over past days")
    def weather_average(
        city: Optional[str] = Query(None, description="City or place name."),
        days: Optional[str] = Query(None, description=f"Number of days, 1 to {MAX_DAYS}."),
        app_settings: Settings = Depends(get_settings),
        fetcher: JsonFetcher = Depends(get_fetcher),
        today: date = Depends(get_today),
    ):
        query = parse_location_query({"city": city, "days": days})
        geocoder, aggregator = build_pipeline(fetcher, app_settings)
        summary = average_temperature_for_city(geocoder, aggregator, query, today)
        return summary.to_dict()

    @app.get("/healthcheck", tags=["Service Info"], response_class=PlainTextResponse)
    def healthcheck() -> str:
        return "OK"

    return app


def main() -> None:
    settings = Settings.from_env()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
