"""
Pure functions for parsing CalDAV responses.

All functions in this module are pure - they take the response body in
and return structured data out, with no side effects or I/O.  Bodies
are scanned rather than parsed, see tinycaldav.protocol.scanners for
what that means.
"""

import logging
from html import unescape
from typing import List
from typing import Optional
from typing import Union

from tinycaldav.lib import error
from tinycaldav.lib.python_utilities import to_normal_str

from .scanners import extract_ical_field
from .scanners import extract_xml_tag_value
from .scanners import has_element
from .scanners import iter_response_blocks
from .scanners import looks_like_html
from .types import Calendar
from .types import CalendarList
from .types import Event
from .types import PropfindResult

log = logging.getLogger(__name__)

VEVENT_BEGIN = "BEGIN:VEVENT"
VEVENT_END = "END:VEVENT"

## (attribute, property prefix) pairs extracted from every VEVENT
EVENT_FIELDS = (
    ("summary", "SUMMARY:"),
    ("description", "DESCRIPTION:"),
    ("location", "LOCATION:"),
    ("uid", "UID:"),
    ("start_time", "DTSTART"),
    ("end_time", "DTEND"),
)


def _to_text(body: Union[bytes, str, None]) -> str:
    return to_normal_str(body) or ""


def _text_value(value: Optional[str]) -> Optional[str]:
    """Decodes XML character references; empty values count as absent"""
    if not value:
        return None
    return unescape(value)


def calendar_name_from_path(path: str) -> Optional[str]:
    """
    The last non-empty segment of the path, i.e. "work" for both
    "/calendars/alice/work" and "/calendars/alice/work/".  None if
    there is no slash in the path at all.
    """
    if "/" not in path:
        return None
    name = path.rstrip("/").rsplit("/", 1)[-1]
    return name or None


def parse_propfind_response(
    body: Union[bytes, str],
    status_code: int = 207,
    url: Optional[str] = None,
) -> PropfindResult:
    """
    Parse the multistatus response of the calendar discovery PROPFIND.

    Every <response> with a calendar resourcetype becomes a Calendar.
    The href of the first principal resource is returned as a hint,
    for the caller to follow if no calendars were found.

    Args:
        body: Raw response bytes
        status_code: HTTP status code of the response
        url: the URL that was queried, for error messages

    Returns:
        PropfindResult with calendars and principal hint

    Raises:
        PropfindError: unexpected HTTP status
        ProtocolError: the body is an HTML document
    """
    if status_code not in (200, 207):
        raise error.PropfindError(
            url=url, reason=f"PROPFIND failed with status {status_code}"
        )

    text = _to_text(body)
    if looks_like_html(text):
        raise error.ProtocolError(
            url=url, reason="got an HTML document where a multistatus XML was expected"
        )

    result = PropfindResult()
    calendars = CalendarList()
    for block in iter_response_blocks(text):
        href = extract_xml_tag_value(block, "href")
        resourcetype = extract_xml_tag_value(block, "resourcetype") or ""

        if has_element(resourcetype, "calendar"):
            if not href:
                error.weirdness("calendar resource without href", block)
                continue
            calendar = Calendar(
                path=href,
                name=calendar_name_from_path(href),
                display_name=_text_value(extract_xml_tag_value(block, "displayname")),
                description=_text_value(
                    extract_xml_tag_value(block, "calendar-description")
                ),
                ctag=_text_value(extract_xml_tag_value(block, "getctag")),
            )
            log.debug("found calendar %s (%s)", calendar.path, calendar.display_name)
            calendars.append(calendar)
        elif has_element(resourcetype, "principal") and result.principal_hint is None:
            if href:
                log.debug("found principal %s", href)
                result.principal_hint = href

    result.calendars = calendars
    return result


def parse_event(data: str) -> Event:
    """Extracts the fields of one BEGIN:VEVENT ... END:VEVENT span"""
    return Event(
        **{
            attribute: _text_value(extract_ical_field(data, prefix))
            for attribute, prefix in EVENT_FIELDS
        }
    )


def parse_calendar_query_response(
    body: Union[bytes, str],
    status_code: int = 207,
    url: Optional[str] = None,
) -> List[Event]:
    """
    Parse a calendar-query REPORT response.

    The whole body is scanned for VEVENT spans, regardless of which
    <response> they are in.  A span missing its END:VEVENT ends the
    scan, anything after it is dropped.

    Args:
        body: Raw response bytes
        status_code: HTTP status code of the response
        url: the URL that was queried, for error messages

    Returns:
        List of Event in document order
    """
    if status_code != 207:
        raise error.ReportError(
            url=url, reason=f"REPORT failed with status {status_code}"
        )

    text = _to_text(body)
    events: List[Event] = []
    pos = text.find(VEVENT_BEGIN)
    while pos >= 0:
        end = text.find(VEVENT_END, pos)
        if end < 0:
            log.debug("unterminated VEVENT at offset %i, ignoring the rest", pos)
            break
        end += len(VEVENT_END)
        event = parse_event(text[pos:end])
        log.debug("found event %s (%s)", event.uid, event.summary)
        events.append(event)
        pos = text.find(VEVENT_BEGIN, end)
    return events
