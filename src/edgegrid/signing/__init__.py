"""
EdgeGrid request signing

EG1-HMAC-SHA256 signer, credential loading, and the pipeline stage that
signs requests sent through an HttpClient.
"""

from .types import (
    AUTH_SCHEME,
    DEFAULT_MAX_BODY_SIZE,
    Timestamp,
    Nonce,
    SigningErrorCodes,
)

from .authentication import Authentication

from .edgerc import (
    EdgeRcCredentials,
    load_edgerc,
    load_from_env,
)

from .utils import (
    base64_hmac_sha256,
    base64_sha256,
    make_signing_key,
    make_content_hash,
    canonicalize_headers,
    parse_url,
)

from .integration import (
    AUTHENTICATION_STAGE,
    AuthenticationHandler,
    resolve_handler_stack,
    install_authentication_handler,
)

# Public API exports
__all__ = [
    # Types
    'AUTH_SCHEME',
    'DEFAULT_MAX_BODY_SIZE',
    'Timestamp',
    'Nonce',
    'SigningErrorCodes',
    # Signer
    'Authentication',
    # Credentials
    'EdgeRcCredentials',
    'load_edgerc',
    'load_from_env',
    # Utilities
    'base64_hmac_sha256',
    'base64_sha256',
    'make_signing_key',
    'make_content_hash',
    'canonicalize_headers',
    'parse_url',
    # HTTP Integration
    'AUTHENTICATION_STAGE',
    'AuthenticationHandler',
    'resolve_handler_stack',
    'install_authentication_handler',
]
