"""
Exception classes for the EdgeGrid Python client
"""

from typing import Optional, Dict, Any


class EdgeGridError(Exception):
    """Base exception for all EdgeGrid client errors"""

    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}


class InvalidCredentialState(EdgeGridError):
    """Exception raised when a request is signed without the required key material"""

    def __init__(self, message: str, error_code: str = "CREDENTIALS_NOT_SET",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class InvalidPipelineConfiguration(EdgeGridError):
    """Exception raised when a handler option is neither a HandlerStack nor callable"""

    def __init__(self, message: str, error_code: str = "INVALID_HANDLER",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class ConfigurationError(EdgeGridError):
    """Exception raised for malformed client configuration or credential sources"""

    def __init__(self, message: str, error_code: str = "INVALID_CONFIG",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)
