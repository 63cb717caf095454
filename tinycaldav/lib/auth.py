"""
Authentication helpers for DAVClient.

The protocol layer never sees credentials; it only builds requests.
Authentication is applied by the requests session in the I/O layer,
using one of the auth objects built here.
"""

from typing import Iterable
from typing import Optional
from typing import Set
from typing import Union

import requests
from requests.auth import AuthBase

from tinycaldav.lib import error

AUTH_TYPES = ("basic", "digest", "bearer")


class HTTPBearerAuth(AuthBase):
    def __init__(self, password: str) -> None:
        self.password = password

    def __eq__(self, other: object) -> bool:
        return self.password == getattr(other, "password", None)

    def __ne__(self, other: object) -> bool:
        return not self == other

    def __call__(self, r):
        r.headers["Authorization"] = f"Bearer {self.password}"
        return r


def extract_auth_types(header: str) -> Set[str]:
    """
    Scheme names from a WWW-Authenticate header, lowercased.

    >>> sorted(extract_auth_types('Basic realm="x", Digest realm="x"'))
    ['basic', 'digest']
    """
    return {h.split()[0] for h in header.lower().split(",") if h.strip()}


def select_auth_type(
    auth_types: Iterable[str],
    username: Optional[str],
    password: Union[str, bytes, None],
) -> Optional[str]:
    """
    Picks the best of the schemes offered by the server.  With a
    username, digest is preferred over basic.  A password without a
    username is taken to be a bearer token.
    """
    auth_types = set(auth_types)
    if username:
        if "digest" in auth_types:
            return "digest"
        if "basic" in auth_types:
            return "basic"
    elif password:
        if "bearer" in auth_types:
            return "bearer"
        if auth_types & {"basic", "digest"}:
            raise error.AuthorizationError(
                reason="Server wants a username, but only a password was given"
            )
    return None


def build_auth_object(
    auth_type: Optional[str],
    username: Optional[str],
    password: Union[str, bytes, None],
) -> Optional[AuthBase]:
    """
    Builds a requests auth object.  Without an explicit ``auth_type``,
    basic auth is used when there is a username, and bearer auth when
    there is only a password.
    """
    if not auth_type:
        if username:
            auth_type = "basic"
        elif password:
            auth_type = "bearer"
        else:
            return None
    auth_type = auth_type.lower()
    if auth_type not in AUTH_TYPES:
        raise error.InvalidArgumentError(
            reason=f"Unsupported auth_type {auth_type}, use one of {', '.join(AUTH_TYPES)}"
        )
    if auth_type == "bearer":
        if not password:
            raise error.InvalidArgumentError(
                reason="Bearer auth requires the token to be given as password"
            )
        return HTTPBearerAuth(password)
    if auth_type == "digest":
        return requests.auth.HTTPDigestAuth(username, password)
    return requests.auth.HTTPBasicAuth(username, password)
