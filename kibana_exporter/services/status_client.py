"""HTTP client for the Kibana /api/status endpoint."""

import logging
import time
from typing import Optional

import httpx
from pydantic import ValidationError

from ..config.models import KibanaConfig
from .status_document import StatusDocument


STATUS_PATH = "/api/status"
BODY_SNIPPET_LIMIT = 512


class StatusClientError(Exception):
    """Base class for failures talking to Kibana."""


class NetworkError(StatusClientError):
    """Kibana could not be reached: connection failure, timeout or transport error."""

    def __init__(self, url: str, cause: Exception):
        self.url = url
        self.cause = cause
        super().__init__(f"making request to {url}: {cause}")


class UnexpectedStatusError(StatusClientError):
    """Kibana answered with something other than HTTP 200."""

    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body[:BODY_SNIPPET_LIMIT]
        message = f"unexpected status {status_code}"
        if self.body:
            message = f"{message}: {self.body}"
        super().__init__(message)


class DecodeError(StatusClientError):
    """Response body is not a valid status document."""

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"decoding response: {cause}")


class StatusClient:
    """
    Client for Kibana's status API.

    Wraps a single httpx.Client whose connection pool is shared by fetch()
    and check_health(). Each call is exactly one request; there are no retries.
    httpx bounds every socket operation by timeout_seconds, and reading the
    body is additionally bounded by an overall deadline of timeout_seconds
    from the start of the request.
    """

    def __init__(
        self,
        config: KibanaConfig,
        logger: logging.Logger = None,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Initialize status client.

        Args:
            config: Kibana endpoint configuration
            logger: Optional logger instance
            transport: Optional httpx transport, mainly for tests
        """
        self.config = config
        self.status_url = config.url.rstrip('/') + STATUS_PATH
        self.logger = logger or logging.getLogger(__name__)

        auth = None
        if config.username:
            auth = httpx.BasicAuth(config.username, config.password or "")

        self._client = httpx.Client(
            auth=auth,
            headers={"kbn-xsrf": "true"},
            timeout=config.timeout_seconds,
            verify=not config.insecure_skip_verify,
            transport=transport
        )

    def fetch(self) -> StatusDocument:
        """
        Fetch and decode the status document.

        Returns:
            StatusDocument: Decoded response

        Raises:
            NetworkError: Request failed or timed out
            UnexpectedStatusError: Kibana returned a non-200 status
            DecodeError: Body is not a valid status document
        """
        self.logger.debug("Scraping Kibana", extra={"url": self.status_url})
        deadline = time.monotonic() + self.config.timeout_seconds

        try:
            with self._client.stream("GET", self.status_url) as response:
                if response.status_code != httpx.codes.OK:
                    raise UnexpectedStatusError(response.status_code, self._read_body(response, deadline))
                content = self._read_until(response, deadline)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise NetworkError(self.status_url, e) from e

        try:
            return StatusDocument.model_validate_json(content)
        except ValidationError as e:
            raise DecodeError(e) from e

    def check_health(self) -> None:
        """
        Check that Kibana answers the status endpoint with HTTP 200.

        The body is never read or decoded.

        Raises:
            NetworkError: Request failed, timed out or the URL is invalid
            UnexpectedStatusError: Kibana returned a non-200 status
        """
        try:
            with self._client.stream("GET", self.status_url) as response:
                if response.status_code != httpx.codes.OK:
                    raise UnexpectedStatusError(response.status_code)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise NetworkError(self.status_url, e) from e

    def close(self) -> None:
        """Release pooled connections."""
        self._client.close()

    def _read_until(self, response: httpx.Response, deadline: float) -> bytes:
        """
        Read the response body, giving up once the deadline has passed.

        Raises:
            httpx.ReadTimeout: The body did not arrive before the deadline
        """
        chunks = []
        for chunk in response.iter_bytes():
            chunks.append(chunk)
            if time.monotonic() > deadline:
                raise httpx.ReadTimeout(
                    f"response body not received within {self.config.timeout_seconds}s",
                    request=response.request
                )
        return b"".join(chunks)

    def _read_body(self, response: httpx.Response, deadline: float) -> str:
        # Best effort; read failures yield an empty body
        try:
            content = self._read_until(response, deadline)
            return content.decode(response.encoding or "utf-8", errors="replace")
        except (httpx.HTTPError, httpx.StreamError, LookupError):
            return ""
