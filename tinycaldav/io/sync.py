"""
Synchronous I/O implementation using the requests library.
"""

import logging
from typing import Optional
from typing import Tuple
from typing import Union

import requests
from requests.auth import AuthBase

from tinycaldav.lib import error
from tinycaldav.protocol.accumulator import DEFAULT_MAX_SIZE
from tinycaldav.protocol.accumulator import ResponseBuffer
from tinycaldav.protocol.types import DAVRequest
from tinycaldav.protocol.types import DAVResponse

log = logging.getLogger(__name__)

#: size of the chunks read from the response stream
CHUNK_SIZE = 1024


class SyncIO:
    """
    Synchronous I/O shell using the requests library.

    This is a thin wrapper that executes DAVRequest objects via HTTP
    and returns DAVResponse objects.  The response body is streamed
    into a ResponseBuffer, one chunk at a time.

    Example:
        io = SyncIO(auth=requests.auth.HTTPBasicAuth("alice", "secret"))
        request = protocol.propfind_request()
        response = io.execute(request)
        result = protocol.parse_propfind(response)
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        auth: Optional[AuthBase] = None,
        timeout: Optional[float] = None,
        verify: Union[bool, str] = True,
        cert: Union[str, Tuple[str, str], None] = None,
        proxies: Optional[dict] = None,
        max_response_size: Optional[int] = DEFAULT_MAX_SIZE,
    ):
        """
        Initialize the sync I/O handler.

        Args:
            session: Existing requests Session to use (creates new if None)
            auth: requests auth object applied to every request
            timeout: Request timeout in seconds
            verify: Verify SSL certificates, or path to a CA bundle
            cert: Client certificate, passed on to requests
            proxies: Proxy mapping, passed on to requests
            max_response_size: Largest accepted response body in bytes
        """
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.auth = auth
        self.timeout = timeout
        self.verify = verify
        self.cert = cert
        self.proxies = proxies
        self.max_response_size = max_response_size

    def execute(self, request: DAVRequest) -> DAVResponse:
        """
        Execute a DAVRequest and return DAVResponse.

        Args:
            request: The request to execute

        Returns:
            DAVResponse with status, headers, and the accumulated body

        Raises:
            ConnectionFailedError: the exchange could not be completed
            OutOfMemoryError: the body could not be buffered
        """
        log.debug(
            "sending request - method=%s, url=%s, headers=%s",
            request.method.value,
            request.url,
            request.headers,
        )
        with ResponseBuffer(self.max_response_size, url=request.url) as buffer:
            try:
                response = self.session.request(
                    method=request.method.value,
                    url=request.url,
                    headers=request.headers,
                    data=request.body,
                    auth=self.auth,
                    timeout=self.timeout,
                    verify=self.verify,
                    cert=self.cert,
                    proxies=self.proxies,
                    stream=True,
                )
            except requests.RequestException as e:
                raise error.ConnectionFailedError(url=request.url, reason=str(e)) from e
            try:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    buffer.accept(chunk)
            except requests.RequestException as e:
                raise error.ConnectionFailedError(url=request.url, reason=str(e)) from e
            finally:
                response.close()

            log.debug(
                "server responded with %i %s, %i bytes",
                response.status_code,
                response.reason,
                len(buffer),
            )
            return DAVResponse(
                status=response.status_code,
                headers=dict(response.headers),
                body=buffer.finalize(),
            )

    def close(self) -> None:
        """Close the session if we created it."""
        if self._owns_session and self.session:
            self.session.close()

    def __enter__(self) -> "SyncIO":
        """Context manager entry."""
        return self

    def __exit__(self, *args) -> None:
        """Context manager exit."""
        self.close()
