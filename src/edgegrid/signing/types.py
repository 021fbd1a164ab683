"""
Type definitions for EdgeGrid request signing

This module provides the value types held by the signer between requests:
the signing timestamp and the nonce, plus the constants of the EG1 scheme.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Union


AUTH_SCHEME = "EG1-HMAC-SHA256"

# Bodies larger than this are truncated before the content hash is taken
DEFAULT_MAX_BODY_SIZE = 131072

TIMESTAMP_FORMAT = "%Y%m%dT%H:%M:%S+0000"

DEFAULT_TIMESTAMP_VALIDITY = timedelta(seconds=10)


class Timestamp:
    """
    Signing timestamp with a validity window

    The string form is the EdgeGrid wire format, always rendered in UTC:
    ``20240101T12:00:00+0000``.

    Attributes:
        moment: Point in time the timestamp was taken
        valid_for: How long the timestamp may be used for signing
    """

    def __init__(
        self,
        moment: Optional[datetime] = None,
        valid_for: timedelta = DEFAULT_TIMESTAMP_VALIDITY
    ):
        if moment is None:
            moment = datetime.now(timezone.utc)
        elif moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)

        self.moment = moment.astimezone(timezone.utc)
        self.valid_for = valid_for

    def is_valid(self) -> bool:
        """Check whether the timestamp is still inside its validity window"""
        return datetime.now(timezone.utc) <= self.moment + self.valid_for

    def __str__(self) -> str:
        return self.moment.strftime(TIMESTAMP_FORMAT)

    def __repr__(self) -> str:
        return f"Timestamp('{self}', valid_for={self.valid_for!r})"


class Nonce:
    """
    Nonce generator for replay protection

    Every conversion to string yields a new random value, so a signer holding
    a Nonce instance never reuses a nonce between signatures.
    """

    def __init__(self, size: int = 16):
        if size <= 0:
            raise ValueError("Nonce size must be positive")
        self.size = size

    def __str__(self) -> str:
        return secrets.token_hex(self.size)

    def __repr__(self) -> str:
        return f"Nonce(size={self.size})"


class SigningErrorCodes:
    """Standard error codes for signing operations"""

    CREDENTIALS_NOT_SET = "CREDENTIALS_NOT_SET"
    SIGNER_NOT_SET = "SIGNER_NOT_SET"
    INVALID_TIMESTAMP = "INVALID_TIMESTAMP"
    INVALID_NONCE = "INVALID_NONCE"
    INVALID_MAX_BODY_SIZE = "INVALID_MAX_BODY_SIZE"
    INVALID_URL = "INVALID_URL"


# Type aliases for convenience
TimestampValue = Union[str, Timestamp]
NonceValue = Union[str, Nonce]
HeaderDict = Dict[str, str]
HeaderNames = List[str]
RequestBody = Union[str, bytes, None]
