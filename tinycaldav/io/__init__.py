"""
I/O layer for the CalDAV protocol.

This module provides the implementation for executing DAVRequest
objects and returning DAVResponse objects.

The I/O layer is intentionally thin - it only handles HTTP transport
and body accumulation.  All protocol logic (request bodies, response
interpretation) is in tinycaldav.protocol.

Example:
    from tinycaldav.protocol import CalDAVProtocol
    from tinycaldav.io import SyncIO

    protocol = CalDAVProtocol(base_url="https://cal.example.com/dav")
    with SyncIO() as io:
        request = protocol.propfind_request()
        response = io.execute(request)
        result = protocol.parse_propfind(response)
"""

from .base import SyncIOProtocol
from .sync import SyncIO

__all__ = [
    "SyncIOProtocol",
    "SyncIO",
]
