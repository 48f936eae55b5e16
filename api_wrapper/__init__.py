"""
Fluent request builder for calling internal microservices.

Requests are addressed by a symbolic API name resolved through a
``ConnectionRegistry``, sent once through an httpx client, and their outcome
is logged by status code.
"""

from api_wrapper.auth import CredentialSource, TokenResponse, api_wrapper, get_jwt
from api_wrapper.builder import RequestBuilder, RequestState, ResolvedRequest
from api_wrapper.client import ApiWrapper, Outcome, classify
from api_wrapper.connections import ConnectionConfig, ConnectionRegistry
from api_wrapper.errors import (
    ApiWrapperError,
    AuthError,
    ConfigurationError,
    DecodeError,
    StateError,
    TransportError,
)
from api_wrapper.http_client import create_http_client
from api_wrapper.settings import Settings

__all__ = [
    "ApiWrapper",
    "ApiWrapperError",
    "AuthError",
    "ConfigurationError",
    "ConnectionConfig",
    "ConnectionRegistry",
    "CredentialSource",
    "DecodeError",
    "Outcome",
    "RequestBuilder",
    "RequestState",
    "ResolvedRequest",
    "Settings",
    "StateError",
    "TokenResponse",
    "TransportError",
    "api_wrapper",
    "classify",
    "create_http_client",
    "get_jwt",
]
