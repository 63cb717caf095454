"""
Sans-I/O CalDAV protocol implementation.

This module provides protocol-level operations without any I/O.
It builds requests and interprets responses as pure data transformations.

The protocol layer is organized into:
- types: Core data structures (DAVRequest, DAVResponse, Calendar, Event)
- accumulator: Growable buffer collecting a streamed response body
- scanners: Tag and property scanners for XML and iCalendar text
- xml_builders: Pure functions to build XML request bodies
- xml_parsers: Pure functions to interpret response bodies
- operations: High-level CalDAVProtocol class combining builders and parsers

Example usage:

    from tinycaldav.protocol import CalDAVProtocol

    protocol = CalDAVProtocol(base_url="https://cal.example.com/dav")

    # Build a request (no I/O)
    request = protocol.propfind_request()

    # Execute via your preferred I/O (sync or mock)
    response = your_http_client.execute(request)

    # Parse response (no I/O)
    result = protocol.parse_propfind(response)
    work = result.calendars.find_by_name("work")
"""

from .types import (
    # Enums
    DAVMethod,
    # Request/Response
    DAVRequest,
    DAVResponse,
    # Result types
    Calendar,
    CalendarList,
    Event,
    PropfindResult,
)
from .accumulator import ResponseBuffer
from .scanners import extract_ical_field, extract_xml_tag_value
from .xml_builders import build_calendar_query_body, build_propfind_body
from .xml_parsers import parse_calendar_query_response, parse_propfind_response
from .operations import CalDAVProtocol

__all__ = [
    # Enums
    "DAVMethod",
    # Request/Response
    "DAVRequest",
    "DAVResponse",
    # Result types
    "Calendar",
    "CalendarList",
    "Event",
    "PropfindResult",
    # Accumulation and scanning
    "ResponseBuffer",
    "extract_ical_field",
    "extract_xml_tag_value",
    # XML Builders
    "build_calendar_query_body",
    "build_propfind_body",
    # Parsers
    "parse_calendar_query_response",
    "parse_propfind_response",
    # Protocol
    "CalDAVProtocol",
]
