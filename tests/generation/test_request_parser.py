from __future__ import annotations

from datetime import date, time

import pytest

from src.tutoring_center.tutoring_center.core.enums import SessionType
from src.tutoring_center.tutoring_center.core.exceptions import InvalidRequest
from src.tutoring_center.tutoring_center.generation.request_parser import parse_generation_request
from src.tutoring_center.tutoring_center.generation.zoom_link import normalize_zoom_link


def body(**overrides) -> dict:
    data = {
        "centerId": "c1",
        "tutorId": "t1",
        "sessionType": "ONE_ON_ONE",
        "studentId": "s1",
        "startDate": "2025-01-01",
        "endDate": "2025-01-31",
        "weekdays": [1, 3, 1],
        "startTime": "09:00",
        "endTime": "10:00",
        "timezone": "America/Edmonton",
    }
    data.update(overrides)
    return data


def test_parses_a_complete_body():
    req = parse_generation_request(body(zoomLink="https://zoom.us/j/1", groupId="  "))

    assert req.center_id == "c1"
    assert req.session_type == SessionType.ONE_ON_ONE
    assert req.start_date == date(2025, 1, 1)
    assert req.end_date == date(2025, 1, 31)
    assert req.weekdays == frozenset({1, 3})
    assert req.start_time == time(9, 0)
    assert req.end_time == time(10, 0)
    assert req.group_id is None
    assert req.zoom_link == "https://zoom.us/j/1"


@pytest.mark.parametrize(
    "payload",
    [
        None,
        [],
        body(centerId=""),
        body(tutorId=None),
        body(sessionType="WORKSHOP"),
        body(startDate="2025/01/01"),
        body(endDate="2025-02-30"),
        body(weekdays=[]),
        body(weekdays=[0]),
        body(weekdays=[True]),
        body(weekdays="1,2"),
        body(startTime="9:00"),
        body(endTime="24:00"),
        body(timezone=5),
        body(zoomLink=42),
        body(extra="nope"),
    ],
)
def test_rejects_malformed_bodies(payload):
    with pytest.raises(InvalidRequest):
        parse_generation_request(payload)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, None),
        ("", None),
        ("   ", None),
        (" https://zoom.us/j/123?pwd=abc ", "https://zoom.us/j/123?pwd=abc"),
        ("http://meet.example.org/room", "http://meet.example.org/room"),
    ],
)
def test_normalize_zoom_link(raw, expected):
    assert normalize_zoom_link(raw) == expected


@pytest.mark.parametrize("raw", ["zoom.us/j/1", "ftp://zoom.us/j/1", "https://", "https://zoom.us/j/1 2", "https://x/" + "a" * 600])
def test_normalize_zoom_link_rejects_bad_links(raw):
    with pytest.raises(InvalidRequest):
        normalize_zoom_link(raw)
