"""
API Client.

Sends requests described by tfe.request.Request to the API and decodes
JSON:API responses. Every request carries a bearer token. One call to
Client.do is exactly one HTTP round trip; nothing is retried.
"""

from types import TracebackType

import httpx
from pydantic import ValidationError

from tfe.core.config import Config, build_http_client, default_config
from tfe.core.exceptions import (
    ConfigError,
    NotFoundError,
    TransportError,
    UnexpectedStatusError,
)
from tfe.core.logging import get_logger
from tfe.jsonapi import MEDIA_TYPE, marshal_payload, unmarshal_many_payload, unmarshal_payload
from tfe.request import CollectionSink, Request, SingleSink

logger = get_logger(__name__)


class Client:
    """
    Client for the API.

    Holds the effective configuration and the transport. Both are fixed
    at construction, so one client may serve independent callers.

    Usage:
        client = Client(Config(token="..."))
        sink = SingleSink(Workspace)
        client.do(Request("GET", "/api/v2/workspaces/ws-123", output=sink))
    """

    def __init__(self, config: Config | None) -> None:
        """
        Initialize the client.

        Args:
            config: Client configuration. The token is required; an empty
                address falls back to the default address.

        Raises:
            ConfigError: If the config is missing, the token is empty, the
                address is not an absolute http(s) URL, or the TFE_*
                environment settings are invalid.
        """
        if config is None:
            raise ConfigError("Missing client config")
        if not config.token:
            raise ConfigError("Missing client token")

        address = config.address
        if not address:
            try:
                address = default_config().address
            except ValidationError as e:
                raise ConfigError(f"Invalid TFE_* environment settings: {e}") from e
        _validate_address(address)

        self._owns_http = config.http_client is None
        self._http = config.http_client if config.http_client is not None else build_http_client()
        self._config = Config(address=address, token=config.token, http_client=self._http)

    @property
    def config(self) -> Config:
        """Effective configuration."""
        return self._config

    @property
    def address(self) -> str:
        return self._config.address

    def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_http and not self._http.is_closed:
            self._http.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def do(self, request: Request) -> httpx.Response | None:
        """
        Send a request and check the response.

        With an output sink the body is decoded into it, the response is
        closed and None is returned. Without one the open response is
        returned and the caller is responsible for closing it.

        Args:
            request: Description of the request

        Returns:
            httpx.Response, or None when an output sink was populated

        Raises:
            EncodeError: If the input cannot be encoded
            TransportError: On network failure
            NotFoundError: On a 404 response
            UnexpectedStatusError: On any other non-2xx response
            DecodeError: If the response does not fit the output sink
        """
        if request.output is not None and not isinstance(request.output, (SingleSink, CollectionSink)):
            raise TypeError(f"Unsupported output sink: {type(request.output).__name__}")

        url = self._build_url(request)

        content = request.body
        if request.input is not None:
            content = marshal_payload(request.input)

        headers = httpx.Headers(request.headers) if request.headers is not None else httpx.Headers()
        headers["Authorization"] = f"Bearer {self._config.token}"
        if "Content-Type" not in headers:
            headers["Content-Type"] = MEDIA_TYPE

        logger.debug("API request", method=request.method, path=url.path)

        http_request = self._http.build_request(
            request.method,
            url,
            headers=headers,
            content=content,
        )
        try:
            response = self._http.send(http_request, stream=True)
        except httpx.RequestError as e:
            logger.warning(
                "API request failed",
                method=request.method,
                path=url.path,
                error=str(e),
            )
            raise TransportError(f"{request.method} {url.path}: {e}") from e

        logger.debug(
            "API response",
            method=request.method,
            path=url.path,
            status_code=response.status_code,
        )

        check_response_code(response)

        if request.output is None:
            return response

        payload = _read_body(response)

        if isinstance(request.output, CollectionSink):
            request.output.items = unmarshal_many_payload(payload, request.output.model)
        else:
            request.output.value = unmarshal_payload(payload, request.output.model)

        return None

    def _build_url(self, request: Request) -> httpx.URL:
        """Replace the address path and query with those of the request."""
        path = request.path if request.path.startswith("/") else f"/{request.path}"
        return httpx.URL(self._config.address).copy_with(path=path, params=request.query)


def check_response_code(response: httpx.Response) -> None:
    """
    Check the status code of a response.

    On failure the body is consumed and closed before raising. On success
    the body is left open.

    Raises:
        NotFoundError: On 404
        UnexpectedStatusError: On any other status outside 200-299
    """
    if response.status_code == 404:
        response.close()
        raise NotFoundError("Resource not found")
    if response.status_code < 200 or response.status_code > 299:
        _read_body(response)
        raise UnexpectedStatusError(response.status_code, response.text)


def _read_body(response: httpx.Response) -> bytes:
    """Read the whole body and close the response."""
    try:
        return response.read()
    except httpx.RequestError as e:
        raise TransportError(f"Could not read response body: {e}") from e
    finally:
        response.close()


def _validate_address(address: str) -> None:
    try:
        url = httpx.URL(address)
    except httpx.InvalidURL as e:
        raise ConfigError(f"Invalid client address {address!r}: {e}") from e
    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigError(f"Invalid client address {address!r}: expected an http(s) URL")
