# shared fixtures: a fake fetcher stands in for http so tests never hit the network

import json
from datetime import date
from pathlib import Path

import pytest

from histavg.errors import UpstreamUnavailableError

DATA = Path(__file__).parent / "data"
TODAY = date(2026, 10, 17)


def load(name):
    return json.loads((DATA / name).read_text())


class FakeFetcher:
    # answers by url path suffix and records every call for later assertions
    def __init__(self, geocode=None, archive=None):
        self.responses = {"/v1/search": geocode, "/v1/archive": archive}
        self.calls = []

    def get_json(self, url, params):
        self.calls.append((url, dict(params)))
        for suffix, answer in self.responses.items():
            if url.endswith(suffix):
                if isinstance(answer, Exception):
                    raise answer
                return answer
        raise UpstreamUnavailableError(f"unexpected url {url}")


def geocode_payload(name="TestCity", lat=40.7128, lon=-74.0060):
    return {"results": [{"name": name, "latitude": lat, "longitude": lon}]}


def archive_payload(temps, start_day=19):
    times = [f"2025-05-{start_day + i:02d}" for i in range(len(temps))]
    return {"daily": {"time": times, "temperature_2m_mean": list(temps)}}


@pytest.fixture
def fake_fetcher():
    return FakeFetcher(geocode=load("geocode_london.json"), archive=load("archive_london.json"))
