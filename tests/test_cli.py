# cli tests run against a fake fetcher and check stdout/stderr formatting and exit codes

import pytest

from conftest import TODAY, FakeFetcher, archive_payload, geocode_payload
from histavg import cli


def test_cli_prints_one_line_per_city(capsys, fake_fetcher):
    code = cli.main(["London", "london"], today=TODAY, fetcher=fake_fetcher)

    out = capsys.readouterr().out.splitlines()
    assert code == 0
    assert out == ["London Average Temp (2026-10-05..2026-10-11, n=7): 12.91"] * 2


def test_cli_reports_failures_and_exits_1(capsys):
    fetcher = FakeFetcher(geocode={"results": []}, archive=archive_payload([1.0]))
    code = cli.main(["Atlantis", "--days", "3"], today=TODAY, fetcher=fetcher)

    captured = capsys.readouterr()
    assert code == 1
    assert captured.out == ""
    assert "Atlantis: Could not find location: Atlantis" in captured.err


@pytest.mark.parametrize("days", ["0", "366", "ten"])
def test_cli_rejects_bad_days(capsys, days):
    fetcher = FakeFetcher(geocode=geocode_payload(), archive=archive_payload([1.0]))
    code = cli.main(["London", "-d", days], today=TODAY, fetcher=fetcher)

    assert code == 2
    assert "invalid days" in capsys.readouterr().err
    assert fetcher.calls == []


def test_cli_requires_a_city():
    with pytest.raises(SystemExit) as info:
        cli.main([], today=TODAY, fetcher=FakeFetcher())
    assert info.value.code == 2


def test_cli_malformed_geocoding_payload_does_not_abort_batch(capsys):
    fetcher = FakeFetcher(geocode={"results": {"name": "x"}}, archive=archive_payload([1.0]))
    code = cli.main(["A", "B"], today=TODAY, fetcher=fetcher)

    captured = capsys.readouterr()
    assert code == 1
    assert captured.out == ""
    assert "A: Unexpected geocoding payload shape" in captured.err
    assert "B: Unexpected geocoding payload shape" in captured.err
