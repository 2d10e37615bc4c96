import time
from datetime import date, datetime, timezone

import pytest

from distmatrix.core.models import TransportationMode
from distmatrix.google.dm_common import CapacityExceeded, GoogleDMConfig, InvalidMode
from distmatrix.matrix.request_builder import (
    build_request,
    next_weekday_at,
    to_epoch_seconds,
)


def test_params_are_pipe_joined_with_credentials(cfg):
    req = build_request(["A st", "B st"], ["C st", "D st", "E st"], TransportationMode.DRIVING, cfg=cfg)

    assert req.params["origins"] == "A st|B st"
    assert req.params["destinations"] == "C st|D st|E st"
    assert req.params["key"] == "test-key"
    assert req.params["client"] == "gme-test"
    assert req.params["channel"] == "unit"
    assert req.params["mode"] == "driving"
    assert "departure_time" not in req.params
    assert req.n_elements == 6


@pytest.mark.parametrize(
    "mode,expected",
    [
        (TransportationMode.DRIVING, "driving"),
        (TransportationMode.WALKING, "walking"),
        (TransportationMode.BICYCLING, "bicycling"),
        (TransportationMode.TRANSIT, "transit"),
    ],
)
def test_mode_parameter(cfg, mode, expected):
    req = build_request(["A"], ["B"], mode, cfg=cfg)
    assert req.params["mode"] == expected


def test_all_mode_sends_no_mode_parameter(cfg):
    req = build_request(["A"], ["B"], TransportationMode.ALL, cfg=cfg)
    assert "mode" not in req.params
    assert req.mode is TransportationMode.ALL


def test_unknown_mode_raises(cfg):
    with pytest.raises(InvalidMode):
        build_request(["A"], ["B"], TransportationMode.UNKNOWN, cfg=cfg)


@pytest.mark.parametrize("origins,destinations", [([], ["B"]), (["A"], []), ([], [])])
def test_empty_side_is_a_no_op(cfg, origins, destinations):
    assert build_request(origins, destinations, TransportationMode.DRIVING, cfg=cfg) is None


def test_capacity_ceiling(cfg):
    assert build_request(["o"] * 4, ["d"] * 25, TransportationMode.DRIVING, cfg=cfg) is not None
    with pytest.raises(CapacityExceeded):
        build_request(["o"] * 101, ["d"], TransportationMode.DRIVING, cfg=cfg)
    with pytest.raises(CapacityExceeded):
        build_request(["o"] * 5, ["d"] * 25, TransportationMode.DRIVING, cfg=cfg)


def test_transit_uses_explicit_departure(cfg):
    when = datetime(2030, 5, 6, 8, 30, tzinfo=timezone.utc)
    req = build_request(["A"], ["B"], TransportationMode.TRANSIT, when, cfg=cfg)
    assert req.params["departure_time"] == int(when.timestamp())


def test_transit_defaults_to_next_monday_afternoon(cfg):
    req = build_request(["A"], ["B"], TransportationMode.TRANSIT, cfg=cfg)

    expected = next_weekday_at(date.today(), weekday=0, hour=15)
    assert req.params["departure_time"] == int(time.mktime(expected.timetuple()))
    assert req.params["departure_time"] > datetime.now().timestamp()
    assert expected.weekday() == 0
    assert expected.hour == 15


@pytest.mark.parametrize(
    "today,expected",
    [
        (date(2024, 1, 3), date(2024, 1, 8)),  # Wednesday → upcoming Monday
        (date(2024, 1, 1), date(2024, 1, 8)),  # Monday → the following Monday
        (date(2024, 1, 7), date(2024, 1, 8)),  # Sunday → tomorrow
    ],
)
def test_next_weekday_is_strictly_after_today(today, expected):
    assert next_weekday_at(today, weekday=0, hour=15) == datetime(
        expected.year, expected.month, expected.day, 15, 0
    )


def test_to_epoch_seconds_aware_datetime():
    assert to_epoch_seconds(datetime(1970, 1, 2, tzinfo=timezone.utc)) == 86400


def test_to_epoch_seconds_naive_datetime_is_local_time():
    naive = datetime(2030, 5, 6, 15, 0)
    assert to_epoch_seconds(naive) == int(time.mktime(naive.timetuple()))


def test_optional_provider_params_forwarded():
    cfg = GoogleDMConfig(api_key="k", language="da", units="metric")
    req = build_request(["A"], ["B"], TransportationMode.WALKING, cfg=cfg)

    assert req.params["language"] == "da"
    assert req.params["units"] == "metric"
    assert "region" not in req.params
