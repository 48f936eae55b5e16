"""
API wrapper that sends a built request and reports how it went.

``ApiWrapper`` extends the fluent ``RequestBuilder`` with dispatch through an
injected HTTP client, status-code classification for logging, and JSON
decoding of the stored response.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from api_wrapper.builder import DEFAULT_TIMEOUT, RequestBuilder, RequestState
from api_wrapper.connections import ConnectionRegistry
from api_wrapper.errors import DecodeError, StateError, TransportError
from api_wrapper.http_client import create_http_client
from api_wrapper.settings import Settings

SUCCESS_STATUS = 200

# Builder option name -> httpx keyword argument.
_TRANSPORT_KWARGS = {
    "body": "content",
    "query": "params",
    "multipart": "files",
}


class HttpClient(Protocol):
    def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response: ...


@dataclass(frozen=True, slots=True)
class Outcome:
    """Classification of a response, used only for logging."""

    succeeded: bool
    status_code: int
    url: str
    api: str | None = None


def classify(status_code: int, url: str, api: str | None = None) -> Outcome:
    return Outcome(
        succeeded=status_code == SUCCESS_STATUS,
        status_code=status_code,
        url=url,
        api=api,
    )


def _multipart_files(multipart: Any) -> Any:
    """Convert ``[{name, contents, filename?, headers?}]`` parts to httpx file tuples."""
    if not isinstance(multipart, list) or not all(
        isinstance(part, Mapping) and "name" in part for part in multipart
    ):
        return multipart

    files = []
    for part in multipart:
        content_type = None
        for header, value in (part.get("headers") or {}).items():
            if header.lower() == "content-type":
                content_type = value
        if content_type is None:
            files.append((part["name"], (part.get("filename"), part.get("contents", ""))))
        else:
            files.append(
                (part["name"], (part.get("filename"), part.get("contents", ""), content_type))
            )
    return files


class ApiWrapper(RequestBuilder):
    """Configure, send and decode one request to a named internal API."""

    def __init__(
        self,
        client: HttpClient,
        registry: ConnectionRegistry,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        super().__init__(registry, timeout=timeout)
        self.client = client
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self._owns_client = False
        self.response: httpx.Response | None = None
        self.outcome: Outcome | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        client: HttpClient | None = None,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> "ApiWrapper":
        """
        Factory that takes the registry and default timeout from Settings.

        A client built here is owned by the wrapper and released by ``close()``.
        """
        wrapper = cls(
            client if client is not None else create_http_client(settings),
            settings.registry(),
            timeout=settings.api_timeout,
            logger=logger,
        )
        wrapper._owns_client = client is None
        return wrapper

    def close(self) -> None:
        """Close the underlying HTTP client if this wrapper created it."""
        if self._owns_client:
            self.client.close()
            self._owns_client = False

    def __enter__(self) -> "ApiWrapper":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def get(
        self,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        extra_options: Mapping[str, Any] | None = None,
    ) -> httpx.Response:
        self.set_query_params(params or {})
        return self.request("GET", endpoint, extra_options)

    def delete(
        self,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        extra_options: Mapping[str, Any] | None = None,
    ) -> httpx.Response:
        self.set_query_params(params or {})
        return self.request("DELETE", endpoint, extra_options)

    def post(
        self,
        endpoint: str,
        data: Any,
        extra_options: Mapping[str, Any] | None = None,
    ) -> httpx.Response:
        return self._send_json("POST", endpoint, data, extra_options)

    def put(
        self,
        endpoint: str,
        data: Any,
        extra_options: Mapping[str, Any] | None = None,
    ) -> httpx.Response:
        return self._send_json("PUT", endpoint, data, extra_options)

    def patch(
        self,
        endpoint: str,
        data: Any,
        extra_options: Mapping[str, Any] | None = None,
    ) -> httpx.Response:
        return self._send_json("PATCH", endpoint, data, extra_options)

    def post_multipart(
        self,
        endpoint: str,
        data: Any,
        extra_options: Mapping[str, Any] | None = None,
    ) -> httpx.Response:
        self.set_multipart(data)
        return self.request("POST", endpoint, extra_options)

    def request(
        self,
        method: str,
        endpoint: str,
        extra_options: Mapping[str, Any] | None = None,
    ) -> httpx.Response:
        """Set method and resource, re-apply standing headers, then send."""
        return (
            self.set_request_type(method)
            .set_resource(endpoint)
            .set_headers(self.headers)
            .make_request(extra_options)
        )

    def make_request(self, extra_options: Mapping[str, Any] | None = None) -> httpx.Response:
        """
        Build and send the request once.

        Non-200 responses are logged and returned, never raised. Transport
        failures are re-raised as ``TransportError``.
        """
        resolved = self.build_request(extra_options)._require_resolved()
        kwargs = self._transport_kwargs(resolved.options)

        self.response = None
        self.outcome = None
        self.state = RequestState.DISPATCHED
        try:
            response = self.client.request(resolved.method, resolved.url, **kwargs)
        except httpx.RequestError as exc:
            self.logger.error(
                "API request could not be sent",
                extra={"api": self.api, "method": resolved.method, "url": resolved.url},
                exc_info=exc,
            )
            raise TransportError(
                f"API request failed ({resolved.method} {resolved.url}): {exc!s}"
            ) from exc

        self.response = response
        self.outcome = self._log_outcome(classify(response.status_code, resolved.url, self.api))
        return response

    def decode_body(self) -> Any:
        """
        Parse the stored response body as JSON.

        Key order is preserved. An empty body decodes to an empty dict.
        """
        if self.response is None:
            raise StateError("Response not found")

        if not self.response.content:
            return {}
        try:
            return json.loads(self.response.text)
        except json.JSONDecodeError as exc:
            url = self.resolved.url if self.resolved is not None else None
            self.logger.error("API returned invalid JSON", extra={"url": url})
            raise DecodeError(f"API returned invalid JSON from {url}.") from exc

    def _send_json(
        self,
        method: str,
        endpoint: str,
        data: Any,
        extra_options: Mapping[str, Any] | None,
    ) -> httpx.Response:
        self.set_json_header()
        self.set_json_body(data)
        return self.request(method, endpoint, extra_options)

    def _log_outcome(self, outcome: Outcome) -> Outcome:
        if outcome.succeeded:
            self.state = RequestState.SUCCEEDED
            self.logger.info(
                "API request succeeded",
                extra={"api": outcome.api, "url": outcome.url},
            )
        else:
            self.state = RequestState.FAILED
            self.logger.error(
                "API request failed",
                extra={"status_code": outcome.status_code, "url": outcome.url},
            )
        return outcome

    @staticmethod
    def _transport_kwargs(options: Mapping[str, Any]) -> dict[str, Any]:
        kwargs: dict[str, Any] = {}
        for name, value in options.items():
            if name == "multipart":
                value = _multipart_files(value)
            kwargs[_TRANSPORT_KWARGS.get(name, name)] = value
        return kwargs
