"""
HTTP client module for the EdgeGrid client

This module provides the generic HTTP client, its ordered handler stack,
the stock pipeline stages and the requests/httpx transport handler.
"""

from .handler_stack import (
    HandlerStack,
    Handler,
    Middleware,
)
from .handlers import TransportHandler
from .middleware import (
    HTTP_ERRORS_STAGE,
    HISTORY_STAGE,
    LOG_STAGE,
    map_request,
    http_errors,
    history,
    logging_middleware,
)
from .base_client import (
    HttpClient,
    default_user_agent,
)

__all__ = [
    # Pipeline
    'HandlerStack',
    'Handler',
    'Middleware',
    'TransportHandler',
    # Stages
    'HTTP_ERRORS_STAGE',
    'HISTORY_STAGE',
    'LOG_STAGE',
    'map_request',
    'http_errors',
    'history',
    'logging_middleware',
    # Client
    'HttpClient',
    'default_user_agent',
]
