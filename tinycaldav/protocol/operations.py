"""
CalDAV protocol operations combining request building and response parsing.

This class provides a high-level interface to CalDAV operations while
remaining completely I/O-free.
"""

from datetime import date
from datetime import datetime
from typing import Dict
from typing import List
from typing import Optional
from typing import Union

from tinycaldav.lib import error
from tinycaldav.lib.url import URL

from .types import DAVMethod
from .types import DAVRequest
from .types import DAVResponse
from .types import Event
from .types import PropfindResult
from .xml_builders import build_calendar_query_body
from .xml_builders import build_propfind_body
from .xml_parsers import parse_calendar_query_response
from .xml_parsers import parse_propfind_response

XML_CONTENT_TYPE = "application/xml; charset=utf-8"

#: statuses meaning the server is reachable and speaks DAV
PROBE_OK_STATUSES = (200, 204, 207)


class CalDAVProtocol:
    """
    Sans-I/O CalDAV protocol handler.

    Builds requests and parses responses without doing any I/O.
    All HTTP communication, including authentication, is delegated to
    an external I/O implementation.

    Example:
        protocol = CalDAVProtocol(base_url="https://cal.example.com/dav")

        # Build request
        request = protocol.propfind_request()

        # Execute with your I/O (not shown)
        response = io.execute(request)

        # Parse response
        result = protocol.parse_propfind(response, request.url)
    """

    def __init__(self, base_url: str) -> None:
        if not base_url:
            raise error.InvalidArgumentError(reason="a server URL is required")
        self.base_url = URL.objectify(base_url)

    def _base_headers(self) -> Dict[str, str]:
        return {"Content-Type": XML_CONTENT_TYPE}

    def resolve_url(self, path: Union[str, URL, None]) -> str:
        """
        Full URL for a path.  A fully qualified URL is kept, an
        absolute path gets the scheme and authority of the server URL,
        and a relative path is appended to the server URL.
        """
        return str(self.base_url.join(path))

    # =========================================================================
    # Request builders
    # =========================================================================

    def propfind_request(self, url: Union[str, URL, None] = None) -> DAVRequest:
        """
        Build the calendar discovery PROPFIND request, Depth 1.

        Args:
            url: URL to search, defaults to the server URL

        Returns:
            DAVRequest ready for execution
        """
        headers = {
            **self._base_headers(),
            "Depth": "1",
        }
        return DAVRequest(
            method=DAVMethod.PROPFIND,
            url=self.resolve_url(url),
            headers=headers,
            body=build_propfind_body(),
        )

    def probe_request(self) -> DAVRequest:
        """
        Build a body-less PROPFIND with Depth 0 towards the server URL,
        used for checking connectivity and credentials.
        """
        return DAVRequest(
            method=DAVMethod.PROPFIND,
            url=str(self.base_url),
            headers={"Depth": "0"},
        )

    def calendar_query_request(
        self,
        path: Union[str, URL],
        start: Union[date, datetime, str],
        end: Union[date, datetime, str],
    ) -> DAVRequest:
        """
        Build a calendar-query REPORT request for events in a time range.

        Sent as POST with an X-HTTP-Method-Override: REPORT header.

        Args:
            path: Calendar collection path or URL
            start: Start of time range
            end: End of time range

        Returns:
            DAVRequest ready for execution
        """
        if not path:
            raise error.InvalidArgumentError(reason="a calendar path is required")
        headers = {
            **self._base_headers(),
            "Depth": "1",
            "X-HTTP-Method-Override": DAVMethod.REPORT.value,
        }
        return DAVRequest(
            method=DAVMethod.POST,
            url=self.resolve_url(path),
            headers=headers,
            body=build_calendar_query_body(start, end),
        )

    # =========================================================================
    # Response parsers
    # =========================================================================

    def parse_propfind(
        self, response: DAVResponse, url: Optional[str] = None
    ) -> PropfindResult:
        """
        Parse the calendar discovery PROPFIND response.

        Args:
            response: The DAVResponse from the server
            url: The URL that was queried, for error messages

        Returns:
            PropfindResult with calendars and principal hint
        """
        return parse_propfind_response(response.body, status_code=response.status, url=url)

    def parse_calendar_query(
        self, response: DAVResponse, url: Optional[str] = None
    ) -> List[Event]:
        """
        Parse a calendar-query REPORT response.

        Args:
            response: The DAVResponse from the server
            url: The URL that was queried, for error messages

        Returns:
            List of Event
        """
        return parse_calendar_query_response(
            response.body, status_code=response.status, url=url
        )

    def check_probe_response(self, response: DAVResponse) -> int:
        """
        Interpret the response to probe_request.

        Returns:
            the status code, if it's one of PROBE_OK_STATUSES

        Raises:
            AuthorizationError: on 401 and 403
            ResponseError: on any other status
        """
        if response.status in PROBE_OK_STATUSES:
            return response.status
        if response.status in (401, 403):
            raise error.AuthorizationError(
                url=str(self.base_url), reason=f"{response.status} {response.reason}"
            )
        raise error.ResponseError(url=str(self.base_url), reason=error.errmsg(response))
