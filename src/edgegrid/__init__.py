"""
EdgeGrid Python Client
HTTP client signing every request with EdgeGrid (EG1-HMAC-SHA256) authentication
"""

from .version import __version__
from .client import (
    EdgeGridClient,
    DEFAULT_REQUEST_TIMEOUT,
    normalize_base_uri,
    split_query,
    user_agent,
)
from .exceptions import (
    EdgeGridError,
    InvalidCredentialState,
    InvalidPipelineConfiguration,
    ConfigurationError,
)
from .http_clients import (
    HttpClient,
    HandlerStack,
    TransportHandler,
    HISTORY_STAGE,
    history,
    http_errors,
    logging_middleware,
    map_request,
)
from .signing import (
    Authentication,
    AuthenticationHandler,
    AUTHENTICATION_STAGE,
    EdgeRcCredentials,
    Nonce,
    Timestamp,
    install_authentication_handler,
    load_edgerc,
    load_from_env,
)

# Public API exports
__all__ = [
    '__version__',
    # Client
    'EdgeGridClient',
    'DEFAULT_REQUEST_TIMEOUT',
    'normalize_base_uri',
    'split_query',
    'user_agent',
    # Exceptions
    'EdgeGridError',
    'InvalidCredentialState',
    'InvalidPipelineConfiguration',
    'ConfigurationError',
    # HTTP pipeline
    'HttpClient',
    'HandlerStack',
    'TransportHandler',
    'HISTORY_STAGE',
    'history',
    'http_errors',
    'logging_middleware',
    'map_request',
    # Signing
    'Authentication',
    'AuthenticationHandler',
    'AUTHENTICATION_STAGE',
    'EdgeRcCredentials',
    'Nonce',
    'Timestamp',
    'install_authentication_handler',
    'load_edgerc',
    'load_from_env',
]
