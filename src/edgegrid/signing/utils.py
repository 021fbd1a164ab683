"""
Utility functions for EdgeGrid request signing

This module provides the building blocks of the EG1-HMAC-SHA256 scheme:
keyed hashing, content hashing, header canonicalization and URL parsing.
"""

import base64
import hashlib
import re
from typing import Dict, Iterable, Mapping, Union
from urllib.parse import urlsplit

from cryptography.hazmat.primitives import hashes, hmac

from ..exceptions import EdgeGridError
from .types import DEFAULT_MAX_BODY_SIZE, RequestBody, SigningErrorCodes


_WHITESPACE_RUN = re.compile(r'\s+')


def _to_bytes(value: Union[str, bytes]) -> bytes:
    if isinstance(value, bytes):
        return value
    return value.encode('utf-8')


def base64_hmac_sha256(key: Union[str, bytes], message: Union[str, bytes]) -> str:
    """
    Compute HMAC-SHA256 and return it base64-encoded.

    Args:
        key: HMAC key
        message: Data to authenticate

    Returns:
        str: Base64-encoded MAC
    """
    mac = hmac.HMAC(_to_bytes(key), hashes.SHA256())
    mac.update(_to_bytes(message))
    return base64.b64encode(mac.finalize()).decode('ascii')


def base64_sha256(data: Union[str, bytes]) -> str:
    """Return the base64-encoded SHA-256 digest of data."""
    return base64.b64encode(hashlib.sha256(_to_bytes(data)).digest()).decode('ascii')


def make_signing_key(client_secret: str, timestamp: str) -> str:
    """Derive the per-timestamp signing key from the client secret."""
    return base64_hmac_sha256(client_secret, timestamp)


def make_content_hash(
    method: str,
    body: RequestBody,
    max_body_size: int = DEFAULT_MAX_BODY_SIZE
) -> str:
    """
    Hash the request body for inclusion in the signature.

    Only POST bodies are covered. Bodies longer than max_body_size are
    truncated before hashing.

    Args:
        method: HTTP method of the request
        body: Request body (string, bytes or None)
        max_body_size: Maximum number of body bytes covered by the hash

    Returns:
        str: Base64 SHA-256 of the body, or an empty string
    """
    if method.upper() != 'POST' or not body:
        return ''

    if not isinstance(body, (str, bytes)):
        # Streamed bodies cannot be read without consuming them
        return ''

    data = _to_bytes(body)
    if len(data) > max_body_size:
        data = data[:max_body_size]

    return base64_sha256(data)


def normalize_header_value(value: str) -> str:
    """Strip a header value and collapse internal whitespace runs."""
    return _WHITESPACE_RUN.sub(' ', value.strip())


def canonicalize_headers(headers: Mapping[str, str], headers_to_sign: Iterable[str]) -> str:
    """
    Build the canonical header block of the string to sign.

    Args:
        headers: Request headers
        headers_to_sign: Header names to include, in signing order

    Returns:
        str: Tab-separated ``name:value`` pairs for headers present on the request
    """
    lowered: Dict[str, str] = {name.lower(): str(value) for name, value in headers.items()}

    canonical = []
    for name in headers_to_sign:
        name = name.lower()
        if name in lowered:
            canonical.append(f"{name}:{normalize_header_value(lowered[name])}")

    return '\t'.join(canonical)


def parse_url(url: str) -> Dict[str, str]:
    """
    Parse a URL into the components covered by the signature.

    Args:
        url: Absolute request URL

    Returns:
        dict: ``scheme``, ``host`` and ``relative_url`` (path plus query)

    Raises:
        EdgeGridError: If the URL is not absolute
    """
    parsed = urlsplit(url)

    if not parsed.scheme or not parsed.netloc:
        raise EdgeGridError(
            f"Cannot sign request with non-absolute URL: {url}",
            SigningErrorCodes.INVALID_URL,
            {"url": url}
        )

    relative_url = parsed.path or '/'
    if parsed.query:
        relative_url += f"?{parsed.query}"

    return {
        "scheme": parsed.scheme,
        "host": parsed.netloc,
        "relative_url": relative_url,
    }
