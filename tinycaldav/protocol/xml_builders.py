"""
Pure functions for building CalDAV XML request bodies.

The bodies are fixed templates and go on the wire byte for byte.
"""

import re
from datetime import date
from datetime import datetime
from datetime import time
from datetime import timezone
from typing import Union

from tinycaldav.lib import error

utc_tz = timezone.utc

_UTC_DATE_STRING = re.compile(r"^\d{8}T\d{6}Z$")

PROPFIND_CALENDARS_BODY = (
    '<?xml version="1.0" encoding="utf-8" ?>\n'
    '<D:propfind xmlns:D="DAV:" xmlns:C="urn:ietf:params:xml:ns:caldav" xmlns:CS="http://calendarserver.org/ns/">\n'
    "  <D:prop>\n"
    "    <D:resourcetype/>\n"
    "    <D:displayname/>\n"
    "    <C:calendar-description/>\n"
    "    <CS:getctag/>\n"
    "  </D:prop>\n"
    "</D:propfind>"
)

CALENDAR_QUERY_TEMPLATE = (
    '<?xml version="1.0" encoding="utf-8" ?>\n'
    '<C:calendar-query xmlns:D="DAV:" xmlns:C="urn:ietf:params:xml:ns:caldav">\n'
    "  <D:prop>\n"
    "    <D:getetag/>\n"
    "    <C:calendar-data/>\n"
    "  </D:prop>\n"
    "  <C:filter>\n"
    '    <C:comp-filter name="VCALENDAR">\n'
    '      <C:comp-filter name="VEVENT">\n'
    '        <C:time-range start="{start}" end="{end}"/>\n'
    "      </C:comp-filter>\n"
    "    </C:comp-filter>\n"
    "  </C:filter>\n"
    "</C:calendar-query>"
)


def _to_utc_date_string(ts: Union[date, datetime, str]) -> str:
    """
    Formats a timestamp as YYYYMMDDTHHMMSSZ.  Datetimes are coerced to
    UTC (naive ones are assumed to be localtime), dates are taken as
    midnight UTC, and strings are accepted if they already have the
    right format.
    """
    if isinstance(ts, str):
        if not _UTC_DATE_STRING.match(ts):
            raise error.InvalidArgumentError(
                reason=f"time stamp {ts!r} is not on the form YYYYMMDDTHHMMSSZ"
            )
        return ts
    if isinstance(ts, datetime):
        try:
            ts = ts.astimezone(utc_tz)
        except (OverflowError, ValueError):
            raise error.InvalidArgumentError(
                reason=f"time stamp {ts} can't be converted to UTC"
            )
    elif isinstance(ts, date):
        ts = datetime.combine(ts, time(0), tzinfo=utc_tz)
    else:
        raise error.InvalidArgumentError(
            reason=f"expected a date, datetime or string, got {type(ts).__name__}"
        )
    return ts.strftime("%Y%m%dT%H%M%SZ")


def build_propfind_body() -> bytes:
    """
    PROPFIND body for calendar discovery, asking for resourcetype,
    displayname, calendar-description and getctag.

    Returns:
        UTF-8 encoded XML bytes
    """
    return PROPFIND_CALENDARS_BODY.encode("utf-8")


def build_calendar_query_body(
    start: Union[date, datetime, str],
    end: Union[date, datetime, str],
) -> bytes:
    """
    Build calendar-query REPORT request body, asking for all VEVENTs
    overlapping the time range.

    Args:
        start: Start of time range
        end: End of time range

    Returns:
        UTF-8 encoded XML bytes
    """
    if start is None or end is None:
        raise error.InvalidArgumentError(reason="both start and end are required")
    return CALENDAR_QUERY_TEMPLATE.format(
        start=_to_utc_date_string(start),
        end=_to_utc_date_string(end),
    ).encode("utf-8")
