#!/usr/bin/env python
import logging
import os
from typing import Optional

from tinycaldav import __version__

## Environmental variables prepended with "PYTHON_TINYCALDAV" are used for
## debug purposes, environmental variables prepended with "CALDAV_" are for
## connection parameters
debug_dump_communication = os.environ.get("PYTHON_TINYCALDAV_COMMDUMP", False)

## one of DEBUG_PDB, DEBUG, DEVELOPMENT, PRODUCTION
debugmode = os.environ.get("PYTHON_TINYCALDAV_DEBUGMODE")
if not debugmode:
    if "dev" in __version__ or __version__ == "(unknown)":
        debugmode = "DEVELOPMENT"
    else:
        debugmode = "PRODUCTION"

log = logging.getLogger("tinycaldav")
if debugmode.startswith("DEBUG"):
    log.setLevel(logging.DEBUG)
else:
    log.setLevel(logging.WARNING)


def errmsg(r) -> str:
    """Utility for formatting an error response to an error string"""
    return "%s %s\n\n%s" % (r.status, r.reason, r.text)


def weirdness(*reasons):
    from tinycaldav.lib.debug import xmlstring

    reason = " : ".join([xmlstring(x) for x in reasons])
    log.warning(f"Deviation from expectations found: {reason}")
    if debugmode == "DEBUG_PDB":
        log.error(f"Dropping into debugger due to {reason}")
        import pdb

        pdb.set_trace()


def assert_(condition: object) -> None:
    try:
        assert condition
    except AssertionError:
        if debugmode == "PRODUCTION":
            log.error(
                "Deviation from expectations found.  %s" % ERR_FRAGMENT, exc_info=True
            )
        elif debugmode == "DEBUG_PDB":
            log.error("Deviation from expectations found.  Dropping into debugger")
            import pdb

            pdb.set_trace()
        else:
            raise


ERR_FRAGMENT: str = "Please consider raising an issue, include this error and the traceback (if any) and tell what server you are using"


class DAVError(Exception):
    url: Optional[str] = None
    reason: str = "no reason"

    def __init__(self, url: Optional[str] = None, reason: Optional[str] = None) -> None:
        if url:
            self.url = url
        if reason:
            self.reason = reason

    def __str__(self) -> str:
        return "%s at '%s', reason %s" % (
            self.__class__.__name__,
            self.url,
            self.reason,
        )


class InvalidArgumentError(DAVError, ValueError):
    """
    A required argument was missing, empty or malformed.  No request
    has been sent to the server.
    """

    pass


class OutOfMemoryError(DAVError, MemoryError):
    """
    The response could not be buffered, either because the interpreter
    ran out of memory or because the response grew beyond the
    configured maximum size.
    """

    pass


class ConnectionFailedError(DAVError):
    """
    The transport could not complete the exchange (DNS, TCP, TLS,
    timeout, broken stream ...).  The reason property carries the
    underlying exception text.
    """

    pass


class ResponseError(DAVError):
    """The server answered, but not with what we expected"""

    pass


class ProtocolError(ResponseError):
    """
    The response body is not usable, typically an HTML page delivered
    by a login portal or a misrouted URL instead of a multistatus document.
    """

    pass


class AuthorizationError(ResponseError):
    """
    The client encountered an HTTP 401 or 403 error and is passing it on
    to the user. The url property will contain the url in question,
    the reason property will contain the excuse the server sent.
    """

    pass


class PropfindError(ResponseError):
    pass


class ReportError(ResponseError):
    pass


class NotFoundError(DAVError):
    pass


class UnimplementedError(DAVError, NotImplementedError):
    pass
