#!/usr/bin/env python
import logging

__version__ = "0.1.0"

from .davclient import DAVClient
from .davclient import get_davclient
from .protocol.types import Calendar
from .protocol.types import CalendarList
from .protocol.types import Event

## Silence notification of no default logging handler
log = logging.getLogger("tinycaldav")


class NullHandler(logging.Handler):
    def emit(self, record) -> None:
        pass


log.addHandler(NullHandler())

__all__ = [
    "__version__",
    "DAVClient",
    "get_davclient",
    "Calendar",
    "CalendarList",
    "Event",
]
