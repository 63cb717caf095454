#!/usr/bin/env python
import sys
from typing import Any
from typing import Optional
from typing import Union
from urllib.parse import ParseResult
from urllib.parse import SplitResult
from urllib.parse import urlparse

if sys.version_info < (3, 11):
    from typing_extensions import Self
else:
    from typing import Self


class URL:
    """
    This class is for wrapping URLs into objects.  It's used
    internally in the library, end users should not need to know
    anything about this class.  All methods that accept URLs can be
    fed either with a URL object, a string or a urlparse.ParseResult
    object.

    Addresses may be one out of three:

    1) a path relative to the server URL, i.e. "work/" may refer to
    "https://cloud.example.com/remote.php/dav/calendars/alice/work/"
    when the server URL is
    "https://cloud.example.com/remote.php/dav/calendars/alice".

    2) an absolute path, i.e. "/principals/alice/", which only borrows
    the scheme and authority of the server URL.

    3) a fully qualified URL, i.e.
    "https://cloud.example.com/remote.php/dav/".

    No quoting or normalization is done, hrefs from the server are
    sent back exactly as given.
    """

    def __init__(self, url: Union[str, ParseResult, SplitResult]) -> None:
        if isinstance(url, (ParseResult, SplitResult)):
            self.url_raw = url.geturl()
        else:
            self.url_raw = url or ""
        self.url_parsed: Optional[ParseResult] = None

    @classmethod
    def objectify(cls, url: Union[Self, str, ParseResult, SplitResult, None]) -> "URL":
        if url is None or isinstance(url, URL):
            return url
        return URL(url)

    def __bool__(self) -> bool:
        return bool(self.url_raw)

    def __eq__(self, other: object) -> bool:
        return str(self) == str(other)

    def __ne__(self, other: object) -> bool:
        return not self == other

    def __hash__(self) -> int:
        return hash(str(self))

    ## To deal with all kind of methods/properties in the ParseResult
    ## class (scheme, netloc, path, username, password ...)
    def __getattr__(self, attr: str):
        if "url_parsed" not in vars(self):
            raise AttributeError(attr)
        if self.url_parsed is None:
            self.url_parsed = urlparse(self.url_raw)
        return getattr(self.url_parsed, attr)

    def __str__(self) -> str:
        return self.url_raw

    def __repr__(self) -> str:
        return "URL(%s)" % str(self)

    def is_absolute(self) -> bool:
        """True if this is a fully qualified URL with scheme and host"""
        return "://" in self.url_raw

    def origin(self) -> "URL":
        """
        Scheme and authority of the URL - everything before the first
        slash following "://".  Empty for anything that isn't fully
        qualified.
        """
        scheme_end = self.url_raw.find("://")
        if scheme_end < 0:
            return URL("")
        path_start = self.url_raw.find("/", scheme_end + 3)
        if path_start < 0:
            return URL(self.url_raw)
        return URL(self.url_raw[:path_start])

    def is_auth(self) -> bool:
        return self.username is not None

    def unauth(self) -> "URL":
        """Returns the URL without any username:password@ in it"""
        if not self.is_auth():
            return self
        netloc = self.netloc.rpartition("@")[2]
        return URL(self._replace(netloc=netloc))

    def join(self, path: Any) -> "URL":
        """
        assumes this object is the base URL.  A fully qualified path
        is returned as is, an absolute path is added to the scheme and
        authority of self, a relative path is appended to self.
        """
        path_str = str(path) if path is not None else ""
        if not path_str:
            return self
        path = URL.objectify(path)
        if path.is_absolute():
            return path
        if path_str.startswith("/"):
            return URL(str(self.origin()) + path_str)
        base = str(self)
        if not base.endswith("/"):
            base += "/"
        return URL(base + path_str)
