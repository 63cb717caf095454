"""
Unit tests for Sans-I/O protocol layer.

These tests verify protocol logic without any HTTP mocking required.
All tests are pure - they test data transformations only.
"""

import datetime

import pytest

from tinycaldav.lib import error
from tinycaldav.protocol import (
    # Types
    Calendar,
    CalendarList,
    DAVMethod,
    DAVRequest,
    DAVResponse,
    Event,
    # Builders
    build_calendar_query_body,
    build_propfind_body,
    # Parsers
    parse_calendar_query_response,
    parse_propfind_response,
    # Protocol
    CalDAVProtocol,
)
from tinycaldav.protocol.xml_builders import _to_utc_date_string
from tinycaldav.protocol.xml_parsers import calendar_name_from_path

utc = datetime.timezone.utc

CALENDAR_HOME_RESPONSE = b"""<?xml version="1.0" encoding="utf-8"?>
<D:multistatus xmlns:D="DAV:" xmlns:C="urn:ietf:params:xml:ns:caldav" xmlns:CS="http://calendarserver.org/ns/">
  <D:response>
    <D:href>/cal/</D:href>
    <D:propstat>
      <D:prop>
        <D:resourcetype><D:collection/></D:resourcetype>
        <D:displayname>Calendar home</D:displayname>
      </D:prop>
      <D:status>HTTP/1.1 200 OK</D:status>
    </D:propstat>
  </D:response>
  <D:response>
    <D:href>/cal/work/</D:href>
    <D:propstat>
      <D:prop>
        <D:resourcetype><D:collection/><C:calendar/></D:resourcetype>
        <D:displayname>Work &amp; Meetings</D:displayname>
        <C:calendar-description>Office stuff</C:calendar-description>
        <CS:getctag>ctag-17</CS:getctag>
      </D:prop>
      <D:status>HTTP/1.1 200 OK</D:status>
    </D:propstat>
  </D:response>
  <D:response>
    <D:href>/cal/private/</D:href>
    <D:propstat>
      <D:prop>
        <D:resourcetype><D:collection/><C:calendar/></D:resourcetype>
        <D:displayname></D:displayname>
      </D:prop>
      <D:status>HTTP/1.1 200 OK</D:status>
    </D:propstat>
  </D:response>
</D:multistatus>
"""

PRINCIPAL_RESPONSE = b"""<?xml version="1.0" encoding="utf-8"?>
<multistatus xmlns="DAV:">
  <response>
    <href>/principals/alice/</href>
    <propstat>
      <prop>
        <resourcetype><principal/></resourcetype>
        <displayname>Alice</displayname>
      </prop>
      <status>HTTP/1.1 200 OK</status>
    </propstat>
  </response>
  <response>
    <href>/principals/bob/</href>
    <propstat>
      <prop><resourcetype><principal/></resourcetype></prop>
      <status>HTTP/1.1 200 OK</status>
    </propstat>
  </response>
</multistatus>
"""

EVENTS_RESPONSE = b"""<?xml version="1.0" encoding="utf-8"?>
<D:multistatus xmlns:D="DAV:" xmlns:C="urn:ietf:params:xml:ns:caldav">
  <D:response>
    <D:href>/cal/work/standup.ics</D:href>
    <D:propstat>
      <D:prop>
        <D:getetag>"1"</D:getetag>
        <C:calendar-data>BEGIN:VCALENDAR\r
VERSION:2.0\r
BEGIN:VEVENT\r
UID:standup-1\r
SUMMARY:Standup\r
DTSTART;TZID=Europe/Oslo:20240102T090000\r
DTEND;TZID=Europe/Oslo:20240102T091500\r
LOCATION:Room 1\r
END:VEVENT\r
END:VCALENDAR\r
</C:calendar-data>
      </D:prop>
    </D:propstat>
  </D:response>
  <D:response>
    <D:href>/cal/work/review.ics</D:href>
    <D:propstat>
      <D:prop>
        <C:calendar-data>BEGIN:VCALENDAR\r
BEGIN:VEVENT\r
UID:review-2\r
SUMMARY:Design review\r
DESCRIPTION:Bring &lt;notes&gt;\r
DTSTART:20240103T130000Z\r
DTEND:20240103T140000Z\r
END:VEVENT\r
END:VCALENDAR\r
</C:calendar-data>
      </D:prop>
    </D:propstat>
  </D:response>
</D:multistatus>
"""


class TestDAVTypes:
    """Test core DAV types."""

    def test_dav_request_immutable(self):
        """DAVRequest should be immutable (frozen dataclass)."""
        request = DAVRequest(method=DAVMethod.PROPFIND, url="https://example.com/")
        with pytest.raises(AttributeError):
            request.url = "https://other.com/"

    def test_dav_request_with_header(self):
        """with_header should return new request with added header."""
        request = DAVRequest(
            method=DAVMethod.PROPFIND,
            url="https://example.com/",
            headers={"Depth": "1"},
        )
        new_request = request.with_header("Authorization", "Bearer token")

        # Original unchanged
        assert "Authorization" not in request.headers
        # New has both headers
        assert new_request.headers["Depth"] == "1"
        assert new_request.headers["Authorization"] == "Bearer token"

    def test_dav_response_ok(self):
        assert DAVResponse(status=200, headers={}, body=b"").ok
        assert DAVResponse(status=207, headers={}, body=b"").ok
        assert not DAVResponse(status=401, headers={}, body=b"").ok
        assert not DAVResponse(status=500, headers={}, body=b"").ok

    def test_dav_response_is_multistatus(self):
        assert DAVResponse(status=207, headers={}, body=b"").is_multistatus
        assert not DAVResponse(status=200, headers={}, body=b"").is_multistatus

    def test_dav_response_reason_and_text(self):
        response = DAVResponse(status=404, headers={}, body="ærlig".encode("utf-8"))
        assert response.reason == "Not Found"
        assert response.text == "ærlig"
        assert DAVResponse(status=299, headers={}, body=b"").reason == "Unknown"


class TestCalendarList:
    def setup_method(self):
        self.calendars = CalendarList(
            [
                Calendar(path="/cal/work/", name="work", display_name="Job"),
                Calendar(path="/cal/home/", name="home", display_name="work"),
                Calendar(path="/cal/work2/", name="work", display_name="Other"),
            ]
        )

    def test_find_by_name(self):
        assert self.calendars.find_by_name("work").path == "/cal/work/"

    def test_find_by_display_name(self):
        assert self.calendars.find_by_name("Job").path == "/cal/work/"

    def test_first_match_wins(self):
        """/cal/home/ has display name "work" and /cal/work2/ has name "work" too"""
        calendars = CalendarList(reversed(self.calendars))
        assert calendars.find_by_name("work").path == "/cal/work2/"
        assert calendars.find_by_name("Other").path == "/cal/work2/"

    def test_case_sensitive(self):
        assert self.calendars.find_by_name("WORK") is None

    def test_no_match(self):
        assert self.calendars.find_by_name("holidays") is None
        assert CalendarList().find_by_name("work") is None


class TestEvent:
    def test_dtstart_utc(self):
        event = Event(start_time="20240103T130000Z", end_time="20240103T140000Z")
        assert event.dtstart == datetime.datetime(2024, 1, 3, 13, 0, tzinfo=utc)
        assert event.dtend - event.dtstart == datetime.timedelta(hours=1)

    def test_dtstart_date(self):
        assert Event(start_time="20240103").dtstart == datetime.date(2024, 1, 3)

    def test_dtstart_missing_or_garbage(self):
        assert Event().dtstart is None
        assert Event(start_time="tomorrow").dtstart is None


class TestXMLBuilders:
    """Test XML building functions."""

    def test_build_propfind_body(self):
        body = build_propfind_body().decode("utf-8")
        assert body.startswith('<?xml version="1.0" encoding="utf-8" ?>')
        assert 'xmlns:D="DAV:"' in body
        assert 'xmlns:C="urn:ietf:params:xml:ns:caldav"' in body
        for prop in (
            "<D:resourcetype/>",
            "<D:displayname/>",
            "<C:calendar-description/>",
            "<CS:getctag/>",
        ):
            assert prop in body

    def test_build_propfind_body_is_stable(self):
        assert build_propfind_body() == build_propfind_body()

    def test_build_calendar_query_body(self):
        body = build_calendar_query_body(
            datetime.datetime(2024, 1, 1, tzinfo=utc),
            datetime.datetime(2024, 1, 31, 23, 59, 59, tzinfo=utc),
        ).decode("utf-8")
        assert "<C:calendar-query" in body
        assert "<D:getetag/>" in body
        assert "<C:calendar-data/>" in body
        assert '<C:comp-filter name="VCALENDAR">' in body
        assert '<C:comp-filter name="VEVENT">' in body
        assert (
            '<C:time-range start="20240101T000000Z" end="20240131T235959Z"/>' in body
        )

    def test_build_calendar_query_body_requires_range(self):
        with pytest.raises(error.InvalidArgumentError):
            build_calendar_query_body(None, datetime.date(2024, 1, 1))

    def test_time_stamp_converted_to_utc(self):
        oslo_summer = datetime.timezone(datetime.timedelta(hours=2))
        ts = datetime.datetime(2024, 6, 1, 9, 30, 15, 123456, tzinfo=oslo_summer)
        assert _to_utc_date_string(ts) == "20240601T073015Z"

    def test_time_stamp_date(self):
        assert _to_utc_date_string(datetime.date(2024, 2, 29)) == "20240229T000000Z"

    def test_time_stamp_string(self):
        assert _to_utc_date_string("20240101T000000Z") == "20240101T000000Z"

    @pytest.mark.parametrize("ts", ["2024-01-01", "20240101T000000", 20240101])
    def test_time_stamp_invalid(self, ts):
        with pytest.raises(error.InvalidArgumentError):
            _to_utc_date_string(ts)


class TestCalendarNameFromPath:
    @pytest.mark.parametrize(
        "path,name",
        [
            ("/cal/work/", "work"),
            ("/cal/work", "work"),
            ("https://example.com/dav/cal/work/", "work"),
            ("work/", "work"),
            ("work", None),
            ("/", None),
        ],
    )
    def test_name(self, path, name):
        assert calendar_name_from_path(path) == name


class TestPropfindParser:
    def test_calendars(self):
        result = parse_propfind_response(CALENDAR_HOME_RESPONSE)
        assert result.principal_hint is None
        assert [c.path for c in result.calendars] == ["/cal/work/", "/cal/private/"]

        work = result.calendars[0]
        assert work.name == "work"
        assert work.display_name == "Work & Meetings"
        assert work.description == "Office stuff"
        assert work.ctag == "ctag-17"

        private = result.calendars[1]
        assert private.name == "private"
        assert private.display_name is None
        assert private.description is None
        assert private.ctag is None

    def test_calendars_are_a_calendar_list(self):
        result = parse_propfind_response(CALENDAR_HOME_RESPONSE)
        assert isinstance(result.calendars, CalendarList)
        assert result.calendars.find_by_name("Work & Meetings").name == "work"

    def test_principal_hint_first_wins(self):
        result = parse_propfind_response(PRINCIPAL_RESPONSE)
        assert len(result.calendars) == 0
        assert result.principal_hint == "/principals/alice/"

    def test_calendar_without_href_is_skipped(self):
        body = (
            "<D:multistatus xmlns:D='DAV:'><D:response>"
            "<D:resourcetype><C:calendar/></D:resourcetype>"
            "</D:response></D:multistatus>"
        )
        assert len(parse_propfind_response(body).calendars) == 0

    def test_plain_collections_ignored(self):
        body = (
            "<multistatus><response><href>/files/</href>"
            "<resourcetype><collection/></resourcetype></response></multistatus>"
        )
        result = parse_propfind_response(body)
        assert len(result.calendars) == 0
        assert result.principal_hint is None

    def test_empty_body(self):
        result = parse_propfind_response(b"")
        assert len(result.calendars) == 0
        assert result.principal_hint is None

    def test_status_200_accepted(self):
        result = parse_propfind_response(CALENDAR_HOME_RESPONSE, status_code=200)
        assert len(result.calendars) == 2

    @pytest.mark.parametrize("status", [301, 401, 404, 500])
    def test_bad_status(self, status):
        with pytest.raises(error.PropfindError):
            parse_propfind_response(CALENDAR_HOME_RESPONSE, status_code=status)

    def test_html_body(self):
        body = b"<!DOCTYPE html>\n<html><body><form>Log in</form></body></html>"
        with pytest.raises(error.ProtocolError):
            parse_propfind_response(body, url="https://example.com/dav/")


class TestCalendarQueryParser:
    def test_events_in_order(self):
        events = parse_calendar_query_response(EVENTS_RESPONSE)
        assert [e.uid for e in events] == ["standup-1", "review-2"]

        standup = events[0]
        assert standup.summary == "Standup"
        assert standup.location == "Room 1"
        assert standup.description is None
        assert standup.start_time == "20240102T090000"
        assert standup.end_time == "20240102T091500"

        review = events[1]
        assert review.summary == "Design review"
        assert review.description == "Bring <notes>"
        assert review.location is None
        assert review.start_time == "20240103T130000Z"

    def test_fields_do_not_leak_between_events(self):
        body = (
            "BEGIN:VEVENT\nUID:a\nLOCATION:Oslo\nEND:VEVENT\n"
            "BEGIN:VEVENT\nUID:b\nEND:VEVENT\n"
            "LOCATION:Bergen\n"
        )
        events = parse_calendar_query_response(body)
        assert events[0].location == "Oslo"
        assert events[1].location is None

    def test_begin_without_end_spans_to_next_end(self):
        body = (
            "BEGIN:VEVENT\nUID:a\nEND:VEVENT\n"
            "BEGIN:VEVENT\nUID:b\n"
            "BEGIN:VEVENT\nUID:c\nEND:VEVENT\n"
        )
        events = parse_calendar_query_response(body)
        ## the span starting at b runs until c's END:VEVENT
        assert [e.uid for e in events] == ["a", "b"]

    def test_trailing_garbage_dropped(self):
        body = "BEGIN:VEVENT\nUID:a\nEND:VEVENT\nBEGIN:VEVENT\nUID:b\n"
        events = parse_calendar_query_response(body)
        assert [e.uid for e in events] == ["a"]

    def test_no_events(self):
        assert parse_calendar_query_response(b"<D:multistatus xmlns:D='DAV:'/>") == []

    @pytest.mark.parametrize("status", [200, 400, 403, 500])
    def test_status_other_than_207(self, status):
        with pytest.raises(error.ReportError):
            parse_calendar_query_response(EVENTS_RESPONSE, status_code=status)


class TestCalDAVProtocol:
    def setup_method(self):
        self.protocol = CalDAVProtocol("https://cal.example.com/dav/calendars/alice/")

    def test_requires_url(self):
        with pytest.raises(error.InvalidArgumentError):
            CalDAVProtocol("")

    def test_resolve_url(self):
        assert (
            self.protocol.resolve_url("/cal/work/")
            == "https://cal.example.com/cal/work/"
        )
        assert (
            self.protocol.resolve_url("work/")
            == "https://cal.example.com/dav/calendars/alice/work/"
        )
        assert (
            self.protocol.resolve_url("https://other.example.com/work/")
            == "https://other.example.com/work/"
        )
        assert (
            self.protocol.resolve_url(None)
            == "https://cal.example.com/dav/calendars/alice/"
        )

    def test_propfind_request(self):
        request = self.protocol.propfind_request()
        assert request.method == DAVMethod.PROPFIND
        assert request.url == "https://cal.example.com/dav/calendars/alice/"
        assert request.headers["Depth"] == "1"
        assert request.headers["Content-Type"] == "application/xml; charset=utf-8"
        assert request.body == build_propfind_body()

    def test_propfind_request_other_url(self):
        request = self.protocol.propfind_request("https://cal.example.com/principals/alice/")
        assert request.url == "https://cal.example.com/principals/alice/"

    def test_probe_request(self):
        request = self.protocol.probe_request()
        assert request.method == DAVMethod.PROPFIND
        assert request.headers["Depth"] == "0"
        assert request.body is None

    def test_calendar_query_request(self):
        request = self.protocol.calendar_query_request(
            "/cal/work/", "20240101T000000Z", "20240201T000000Z"
        )
        assert request.method == DAVMethod.POST
        assert request.url == "https://cal.example.com/cal/work/"
        assert request.headers["X-HTTP-Method-Override"] == "REPORT"
        assert request.headers["Depth"] == "1"
        assert request.headers["Content-Type"] == "application/xml; charset=utf-8"
        assert request.body == build_calendar_query_body(
            "20240101T000000Z", "20240201T000000Z"
        )

    def test_calendar_query_request_requires_path(self):
        with pytest.raises(error.InvalidArgumentError):
            self.protocol.calendar_query_request("", "20240101T000000Z", "20240201T000000Z")

    def test_parse_propfind(self):
        response = DAVResponse(status=207, headers={}, body=CALENDAR_HOME_RESPONSE)
        result = self.protocol.parse_propfind(response)
        assert len(result.calendars) == 2

    def test_parse_calendar_query(self):
        response = DAVResponse(status=207, headers={}, body=EVENTS_RESPONSE)
        assert len(self.protocol.parse_calendar_query(response)) == 2

    @pytest.mark.parametrize("status", [200, 204, 207])
    def test_probe_ok(self, status):
        response = DAVResponse(status=status, headers={}, body=b"")
        assert self.protocol.check_probe_response(response) == status

    @pytest.mark.parametrize("status", [401, 403])
    def test_probe_unauthorized(self, status):
        response = DAVResponse(status=status, headers={}, body=b"")
        with pytest.raises(error.AuthorizationError):
            self.protocol.check_probe_response(response)

    def test_probe_other(self):
        response = DAVResponse(status=500, headers={}, body=b"")
        with pytest.raises(error.ResponseError) as excinfo:
            self.protocol.check_probe_response(response)
        assert not isinstance(excinfo.value, error.AuthorizationError)
