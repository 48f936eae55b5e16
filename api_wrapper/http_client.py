"""HTTP client factory for calling downstream microservices."""

import httpx

from api_wrapper.settings import Settings


def create_http_client(settings: Settings) -> httpx.Client:
    """
    Build a Client configured with the default request timeout.

    No base_url is set: every request carries the absolute URL resolved from
    its named connection. The caller owns the client and must close it.
    """
    return httpx.Client(
        timeout=settings.api_timeout,
        headers={"Accept": "application/json"},
    )
