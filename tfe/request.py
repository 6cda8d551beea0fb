"""
Request Descriptors.

A Request describes one API call. Output sinks tell the client how to
decode a successful response: SingleSink for one resource object,
CollectionSink for a list of them.

Usage:
    sink = SingleSink(Workspace)
    client.do(Request("GET", "/api/v2/workspaces/ws-123", output=sink))
    workspace = sink.value

    sink = CollectionSink(Workspace)
    client.do(Request("GET", "/api/v2/organizations/acme/workspaces", output=sink))
    for workspace in sink.items:
        ...
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Generic

from tfe.jsonapi import Resource, ResourceT

QueryParams = Mapping[str, str | int | float | bool | None] | Sequence[tuple[str, str | int | float]]
RequestBody = bytes | str | Iterable[bytes]


@dataclass
class SingleSink(Generic[ResourceT]):
    """Receives a single decoded resource."""

    model: type[ResourceT]
    value: ResourceT | None = None


@dataclass
class CollectionSink(Generic[ResourceT]):
    """Receives decoded resources in response order."""

    model: type[ResourceT]
    items: list[ResourceT] = field(default_factory=list)


OutputSink = SingleSink | CollectionSink


@dataclass(frozen=True)
class Request:
    """
    Description of a single HTTP request to the API.

    Attributes:
        method: HTTP method (GET, POST, etc.)
        path: API path (e.g., /api/v2/workspaces/ws-123)
        query: Query parameters, URL-encoded into the request URL
        headers: Headers to send. When set they replace the defaults;
            Authorization is always overridden by the client
        body: Raw body, ignored when input is set
        input: Resource(s) to send encoded as a JSON:API document
        output: Sink receiving the decoded response. When set, the
            response body is read and closed and no response is returned
    """

    method: str
    path: str
    query: QueryParams | None = None
    headers: Mapping[str, str] | None = None
    body: RequestBody | None = None
    input: Resource | list[Resource] | None = None
    output: OutputSink | None = None
