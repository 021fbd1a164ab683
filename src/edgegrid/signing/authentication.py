"""
EdgeGrid request signer

This module provides the signer that holds EdgeGrid credentials and the
per-request timestamp and nonce, and produces signed copies of prepared
requests.
"""

import logging
from pathlib import Path
from typing import Iterable, Mapping, Optional, Union

from requests.models import PreparedRequest

from ..exceptions import ConfigurationError, InvalidCredentialState
from .edgerc import DEFAULT_SECTION, EdgeRcCredentials, load_edgerc, load_from_env
from .types import (
    AUTH_SCHEME,
    DEFAULT_MAX_BODY_SIZE,
    HeaderNames,
    Nonce,
    NonceValue,
    RequestBody,
    SigningErrorCodes,
    Timestamp,
    TimestampValue,
)
from .utils import (
    base64_hmac_sha256,
    canonicalize_headers,
    make_content_hash,
    make_signing_key,
    parse_url,
)

logger = logging.getLogger(__name__)


class Authentication:
    """
    EdgeGrid EG1-HMAC-SHA256 signer

    The signer keeps mutable state between requests: the timestamp and the
    nonce. Callers refresh the timestamp with ``set_timestamp()`` before each
    request; the nonce is regenerated for every signature unless a string is
    pinned with ``set_nonce(value)``.
    """

    def __init__(
        self,
        client_token: Optional[str] = None,
        client_secret: Optional[str] = None,
        access_token: Optional[str] = None,
        host: Optional[str] = None,
        max_body_size: int = DEFAULT_MAX_BODY_SIZE,
        headers_to_sign: Optional[Iterable[str]] = None
    ):
        self.client_token = client_token
        self.client_secret = client_secret
        self.access_token = access_token
        self.host = host
        self.max_body_size = DEFAULT_MAX_BODY_SIZE
        self.headers_to_sign: HeaderNames = []

        self.timestamp: Optional[TimestampValue] = None
        self.nonce: NonceValue = Nonce()

        self.set_max_body_size(max_body_size)
        if headers_to_sign:
            self.set_headers_to_sign(headers_to_sign)

    @classmethod
    def from_credentials(cls, credentials: EdgeRcCredentials) -> 'Authentication':
        """Create a signer from loaded credentials."""
        return cls(
            client_token=credentials.client_token,
            client_secret=credentials.client_secret,
            access_token=credentials.access_token,
            host=credentials.host,
            max_body_size=credentials.max_body,
        )

    @classmethod
    def from_edgerc(
        cls,
        section: str = DEFAULT_SECTION,
        path: Optional[Union[str, Path]] = None
    ) -> 'Authentication':
        """
        Create a signer from an ``.edgerc`` section.

        Args:
            section: Section to read
            path: Path to the file (defaults to ``~/.edgerc``)

        Returns:
            Authentication: Configured signer
        """
        return cls.from_credentials(load_edgerc(path, section))

    @classmethod
    def from_env(cls, section: str = DEFAULT_SECTION) -> 'Authentication':
        """Create a signer from ``AKAMAI_*`` environment variables."""
        return cls.from_credentials(load_from_env(section))

    def set_auth(self, client_token: str, client_secret: str, access_token: str) -> None:
        """Set the credentials used for signing."""
        self.client_token = client_token
        self.client_secret = client_secret
        self.access_token = access_token

    def set_host(self, host: str) -> None:
        """Set the API hostname the credentials belong to."""
        self.host = host

    def set_max_body_size(self, max_body_size: int) -> None:
        """Set the number of body bytes covered by the content hash."""
        if max_body_size <= 0:
            raise ConfigurationError(
                f"Max body size must be positive, got {max_body_size}",
                SigningErrorCodes.INVALID_MAX_BODY_SIZE
            )
        self.max_body_size = max_body_size

    def set_headers_to_sign(self, headers_to_sign: Iterable[str]) -> None:
        """Set the header names included in the signature, in order."""
        self.headers_to_sign = [name.lower() for name in headers_to_sign]

    def set_timestamp(self, timestamp: Optional[TimestampValue] = None) -> None:
        """
        Set the timestamp used for the next signature.

        Args:
            timestamp: A pre-formatted string or a Timestamp to pin; when
                omitted a fresh Timestamp is taken now
        """
        if timestamp is None:
            timestamp = Timestamp()
        elif not isinstance(timestamp, (str, Timestamp)):
            raise ConfigurationError(
                f"Timestamp must be a string or Timestamp, got {type(timestamp).__name__}",
                SigningErrorCodes.INVALID_TIMESTAMP
            )
        self.timestamp = timestamp

    def set_nonce(self, nonce: Optional[NonceValue] = None) -> None:
        """
        Set the nonce used for subsequent signatures.

        Args:
            nonce: A string to pin, or a Nonce generator; when omitted a
                fresh generator is installed
        """
        if nonce is None:
            nonce = Nonce()
        elif not isinstance(nonce, (str, Nonce)):
            raise ConfigurationError(
                f"Nonce must be a string or Nonce, got {type(nonce).__name__}",
                SigningErrorCodes.INVALID_NONCE
            )
        self.nonce = nonce

    def is_configured(self) -> bool:
        """Check whether all key material needed for signing is present."""
        return bool(self.client_token and self.client_secret and self.access_token)

    def _current_timestamp(self) -> str:
        if self.timestamp is None or (
            isinstance(self.timestamp, Timestamp) and not self.timestamp.is_valid()
        ):
            self.set_timestamp()
        return str(self.timestamp)

    def create_auth_header(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        body: RequestBody = None
    ) -> str:
        """
        Compute the Authorization header value for a request.

        Args:
            method: HTTP method
            url: Absolute request URL
            headers: Request headers
            body: Request body

        Returns:
            str: ``EG1-HMAC-SHA256 ...;signature=...`` header value

        Raises:
            InvalidCredentialState: If credentials were never configured
        """
        if not self.is_configured():
            raise InvalidCredentialState(
                "Auth credentials not set, make sure to call set_auth first",
                SigningErrorCodes.CREDENTIALS_NOT_SET
            )

        timestamp = self._current_timestamp()
        nonce = str(self.nonce)

        auth_header = (
            f"{AUTH_SCHEME} "
            f"client_token={self.client_token};"
            f"access_token={self.access_token};"
            f"timestamp={timestamp};"
            f"nonce={nonce};"
        )

        url_parts = parse_url(url)
        if self.host and url_parts["host"].lower() != self.host.lower():
            logger.warning(
                f"Signing request for {url_parts['host']} with credentials issued for {self.host}"
            )

        data_to_sign = '\t'.join([
            method.upper(),
            url_parts["scheme"],
            url_parts["host"],
            url_parts["relative_url"],
            canonicalize_headers(headers or {}, self.headers_to_sign),
            make_content_hash(method, body, self.max_body_size),
            auth_header,
        ])

        signing_key = make_signing_key(self.client_secret, timestamp)
        signature = base64_hmac_sha256(signing_key, data_to_sign)

        return f"{auth_header}signature={signature}"

    def sign(self, request: PreparedRequest) -> PreparedRequest:
        """
        Sign a prepared request.

        Args:
            request: Request to sign; it is not modified

        Returns:
            PreparedRequest: Copy of the request carrying the Authorization header
        """
        auth_header = self.create_auth_header(
            request.method or 'GET',
            request.url,
            request.headers,
            request.body
        )

        signed = request.copy()
        signed.headers['Authorization'] = auth_header

        logger.debug(f"Signed {signed.method} request to {signed.url}")
        return signed

    def __repr__(self) -> str:
        return f"Authentication(client_token={self.client_token!r}, host={self.host!r})"
