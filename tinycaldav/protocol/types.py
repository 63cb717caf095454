"""
Core protocol types for the Sans-I/O CalDAV implementation.

These dataclasses represent HTTP requests and responses at the protocol
level, independent of any I/O implementation, plus the records the
response parsers produce.
"""

from dataclasses import dataclass
from dataclasses import field
from datetime import date
from datetime import datetime
from enum import Enum
from typing import List
from typing import Optional
from typing import Union

from icalendar.prop import vDDDTypes


class DAVMethod(Enum):
    """WebDAV/CalDAV HTTP methods in use by this library."""

    PROPFIND = "PROPFIND"
    REPORT = "REPORT"
    POST = "POST"


@dataclass(frozen=True)
class DAVRequest:
    """
    Represents an HTTP request to be made.

    This is a pure data structure with no I/O.  A fresh one is built for
    every exchange, so nothing is shared between calls.

    Attributes:
        method: HTTP method
        url: Full URL for the request
        headers: HTTP headers as dict
        body: Request body as bytes (optional)
    """

    method: DAVMethod
    url: str
    headers: dict = field(default_factory=dict)
    body: Optional[bytes] = None

    def with_header(self, name: str, value: str) -> "DAVRequest":
        """Return new request with additional header."""
        return DAVRequest(
            method=self.method,
            url=self.url,
            headers={**self.headers, name: value},
            body=self.body,
        )


@dataclass(frozen=True)
class DAVResponse:
    """
    Represents an HTTP response received.

    Attributes:
        status: HTTP status code
        headers: HTTP headers as dict
        body: Response body as bytes, fully accumulated
    """

    status: int
    headers: dict
    body: bytes

    @property
    def ok(self) -> bool:
        """True if status indicates success (2xx)."""
        return 200 <= self.status < 300

    @property
    def is_multistatus(self) -> bool:
        """True if this is a 207 Multi-Status response."""
        return self.status == 207

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    @property
    def reason(self) -> str:
        """Return a reason phrase for the status code."""
        reasons = {
            200: "OK",
            204: "No Content",
            207: "Multi-Status",
            301: "Moved Permanently",
            302: "Found",
            400: "Bad Request",
            401: "Unauthorized",
            403: "Forbidden",
            404: "Not Found",
            405: "Method Not Allowed",
            500: "Internal Server Error",
            501: "Not Implemented",
            502: "Bad Gateway",
            503: "Service Unavailable",
        }
        return reasons.get(self.status, "Unknown")


@dataclass(frozen=True)
class Calendar:
    """
    One calendar collection found by discovery.

    Attributes:
        path: the href of the collection, as given by the server
        name: last non-empty path segment of the href
        display_name: the DAV:displayname property, if any
        description: the CALDAV:calendar-description property, if any
        ctag: the CS:getctag property, if any
    """

    path: str
    name: Optional[str] = None
    display_name: Optional[str] = None
    description: Optional[str] = None
    ctag: Optional[str] = None


class CalendarList(List[Calendar]):
    """
    Calendars in the order the server listed them.  Duplicated hrefs
    are kept as they are.
    """

    def find_by_name(self, name: str) -> Optional[Calendar]:
        """
        First calendar where either the name (derived from the path)
        or the display name equals ``name``.  Comparison is exact and
        case-sensitive.  Returns None if nothing matches.
        """
        for calendar in self:
            if name == calendar.name or name == calendar.display_name:
                return calendar
        return None


def _parse_ical_datetime(value: Optional[str]) -> Optional[Union[date, datetime]]:
    if not value:
        return None
    try:
        return vDDDTypes.from_ical(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class Event:
    """
    One VEVENT extracted from a calendar-query response.

    start_time and end_time hold the raw iCalendar values
    (i.e. "20240101T090000Z"), parameters like TZID are not
    retained.  Use dtstart/dtend for parsed values.
    """

    uid: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    @property
    def dtstart(self) -> Optional[Union[date, datetime]]:
        return _parse_ical_datetime(self.start_time)

    @property
    def dtend(self) -> Optional[Union[date, datetime]]:
        return _parse_ical_datetime(self.end_time)


@dataclass
class PropfindResult:
    """
    Parsed result of the calendar discovery PROPFIND.

    Attributes:
        calendars: calendar collections found, in document order
        principal_hint: href of the first principal resource seen, if any
    """

    calendars: CalendarList = field(default_factory=CalendarList)
    principal_hint: Optional[str] = None
