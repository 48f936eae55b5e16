"""Bearer-token helpers built on a pluggable credential source."""

import logging
from dataclasses import dataclass
from typing import Protocol

from api_wrapper.builder import DEFAULT_TIMEOUT
from api_wrapper.client import ApiWrapper, HttpClient
from api_wrapper.connections import ConnectionRegistry
from api_wrapper.errors import AuthError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TokenResponse:
    """Result of a token request for one audience."""

    access_token: str = ""
    success: bool = True
    message: str = ""
    status_code: int | None = None


class CredentialSource(Protocol):
    """Supplies (and caches) access tokens per audience."""

    def get_token(self, audience: str) -> TokenResponse: ...


def get_jwt(credentials: CredentialSource, audience: str) -> str:
    """Return the access token for ``audience`` or raise ``AuthError``."""
    response = credentials.get_token(audience)
    if not response.success:
        logger.warning(
            "Token request failed",
            extra={"audience": audience, "status_code": response.status_code},
        )
        raise AuthError(response.message or "Token request failed.", response.status_code)
    return response.access_token


def api_wrapper(
    api: str,
    *,
    client: HttpClient,
    registry: ConnectionRegistry,
    credentials: CredentialSource,
    timeout: float = DEFAULT_TIMEOUT,
    logger: logging.Logger | logging.LoggerAdapter | None = None,
) -> ApiWrapper:
    """Build a wrapper pointed at ``api`` with its bearer token attached."""
    return ApiWrapper(client, registry, timeout=timeout, logger=logger).set_api(api).set_bearer_token(
        get_jwt(credentials, api)
    )
