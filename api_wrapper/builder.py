"""
Fluent request builder.

A builder collects the pieces of a single request through chained setters and
resolves them into a ``ResolvedRequest`` against a ``ConnectionRegistry``.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

from api_wrapper.connections import ConnectionRegistry
from api_wrapper.errors import StateError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10
DEFAULT_METHOD = "POST"
JSON_CONTENT_TYPE = "application/json"

BuilderT = TypeVar("BuilderT", bound="RequestBuilder")


class RequestState(str, Enum):
    CONFIGURING = "configuring"
    BUILT = "built"
    DISPATCHED = "dispatched"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ResolvedRequest:
    """Ready-to-send request: method, absolute URL and transport options."""

    method: str
    url: str
    options: dict[str, Any] = field(default_factory=dict)


class RequestBuilder:
    """Accumulates request state; every setter returns the builder itself."""

    def __init__(
        self,
        registry: ConnectionRegistry,
        *,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.registry = registry
        self.timeout = timeout
        self.api: str | None = None
        self.method = DEFAULT_METHOD
        self.resource = ""
        self.headers: dict[str, str] = {}
        self.body: bytes | str = ""
        self.query_params: dict[str, Any] = {}
        self.multipart: Any = None
        self.resolved: ResolvedRequest | None = None
        self.state = RequestState.CONFIGURING

    def set_resource(self: BuilderT, resource: str) -> BuilderT:
        """Set the resource path appended after the api version."""
        self.resource = resource
        return self

    def set_api(self: BuilderT, api: str) -> BuilderT:
        """Select the connection entry (and token audience) for the request."""
        self.api = api
        return self

    def set_audience(self: BuilderT, audience: str) -> BuilderT:
        """Alias of ``set_api``."""
        return self.set_api(audience)

    def set_request_type(self: BuilderT, method: str) -> BuilderT:
        """Set the HTTP method."""
        self.method = method.upper()
        return self

    def set_timeout(self: BuilderT, timeout: float) -> BuilderT:
        """Set the per-request timeout in seconds."""
        self.timeout = timeout
        return self

    def set_header_authorization(self: BuilderT, access_token: str) -> BuilderT:
        """Set the Authorization header verbatim."""
        self.headers["Authorization"] = access_token
        return self

    def set_bearer_token(self: BuilderT, token: str) -> BuilderT:
        """Set the Authorization header to ``Bearer <token>``."""
        return self.set_header_authorization(f"Bearer {token}")

    def set_headers(self: BuilderT, headers: Mapping[str, str]) -> BuilderT:
        """Merge ``headers`` into the standing headers; new keys win."""
        self.headers = {**self.headers, **headers}
        return self

    def set_body(self: BuilderT, body: Any) -> BuilderT:
        """
        Set the request body.

        Strings and bytes are treated as pre-serialized and sent unchanged;
        anything else is JSON-encoded.
        """
        if isinstance(body, (bytes, bytearray)):
            self.body = bytes(body)
        elif isinstance(body, str):
            self.body = body
        else:
            self.body = json.dumps(body)
        return self

    def set_json_body(self: BuilderT, data: Any) -> BuilderT:
        """JSON-encode ``data``, strings included; bytes are sent unchanged."""
        if isinstance(data, (bytes, bytearray)):
            self.body = bytes(data)
        else:
            self.body = json.dumps(data)
        return self

    def set_query_params(self: BuilderT, params: Mapping[str, Any]) -> BuilderT:
        """Replace the query parameters."""
        self.query_params = dict(params)
        return self

    def set_multipart(self: BuilderT, multipart: Any) -> BuilderT:
        """Set the multipart form payload."""
        self.multipart = multipart
        return self

    def set_json_header(self: BuilderT) -> BuilderT:
        """Add ``content-type: application/json`` unless a content type is set."""
        if not any(name.lower() == "content-type" for name in self.headers):
            self.set_headers({"content-type": JSON_CONTENT_TYPE})
        return self

    def build_request(self: BuilderT, extra_options: Mapping[str, Any] | None = None) -> BuilderT:
        """
        Resolve the connection and assemble the transport options.

        The connection is looked up again on every call. Raises
        ``ConfigurationError`` when the api is unset or its entry is missing
        ``host`` or ``version``.
        """
        connection = self.registry.require(self.api)

        options: dict[str, Any] = {
            "timeout": self.timeout,
            "headers": dict(self.headers),
            **(extra_options or {}),
        }
        if self.body:
            options["body"] = self.body
        if self.query_params:
            options["query"] = dict(self.query_params)
        if self.multipart:
            options["multipart"] = self.multipart

        url = f"{connection.host}/api/{connection.version}{self.resource}"
        self.resolved = ResolvedRequest(method=self.method, url=url, options=options)
        self.state = RequestState.BUILT
        logger.debug(
            "Built API request",
            extra={"api": self.api, "method": self.method, "url": url},
        )
        return self

    @property
    def url(self) -> str:
        return self._require_resolved().url

    @property
    def request_options(self) -> dict[str, Any]:
        return self._require_resolved().options

    def _require_resolved(self) -> ResolvedRequest:
        if self.resolved is None:
            raise StateError("Request has not been built yet.")
        return self.resolved
