"""
Stock stages for HandlerStack

Every factory returns a stage: a callable that wraps the next handler. The
wrapped handler keeps the shape of the handler it wraps, returning either a
response or an awaitable response, so the same stage serves synchronous and
asynchronous transfers.
"""

import inspect
import logging
import time
from typing import Any, Callable, Dict, List, Optional

from requests.models import PreparedRequest

logger = logging.getLogger(__name__)

HTTP_ERRORS_STAGE = 'http_errors'
HISTORY_STAGE = 'history'
LOG_STAGE = 'log'

REDACTED_HEADERS = frozenset({'authorization'})


def _on_response(result, on_success: Callable[[Any], Any], on_error: Optional[Callable[[Exception], None]] = None):
    """Run on_success on the response, awaiting it first if the transfer is asynchronous."""
    if inspect.isawaitable(result):
        async def finish():
            try:
                response = await result
            except Exception as e:
                if on_error:
                    on_error(e)
                raise
            return on_success(response)
        return finish()

    return on_success(result)


def map_request(fn: Callable[[PreparedRequest], PreparedRequest]):
    """
    Create a stage that transforms each request before passing it on.

    Args:
        fn: Function returning the request to send

    Returns:
        Stage applying fn
    """
    def middleware(handler):
        def mapped(request: PreparedRequest, options: Dict[str, Any]):
            return handler(fn(request), options)
        return mapped
    return middleware


def http_errors():
    """
    Create a stage raising for 4xx and 5xx responses.

    The check is skipped when the ``http_errors`` option is false. The
    transport library's own exception is raised
    (``requests.HTTPError`` or ``httpx.HTTPStatusError``).
    """
    def middleware(handler):
        def check(request: PreparedRequest, options: Dict[str, Any]):
            result = handler(request, options)
            if not options.get('http_errors', True):
                return result

            def raise_for_status(response):
                response.raise_for_status()
                return response

            return _on_response(result, raise_for_status)
        return check
    return middleware


def history(container: List[Dict[str, Any]]):
    """
    Create a stage recording each transfer into container.

    Each entry is a dict with ``request``, ``response``, ``error`` and
    ``options`` keys. The request recorded is the one this stage received,
    so stages placed before it (such as signing) are reflected in it.

    Args:
        container: List receiving the entries
    """
    def middleware(handler):
        def record(request: PreparedRequest, options: Dict[str, Any]):
            def on_success(response):
                container.append({
                    'request': request,
                    'response': response,
                    'error': None,
                    'options': options,
                })
                return response

            def on_error(error):
                container.append({
                    'request': request,
                    'response': None,
                    'error': error,
                    'options': options,
                })

            try:
                result = handler(request, options)
            except Exception as e:
                on_error(e)
                raise

            return _on_response(result, on_success, on_error)
        return record
    return middleware


def _loggable_headers(headers) -> Dict[str, str]:
    return {
        name: ('<redacted>' if name.lower() in REDACTED_HEADERS else value)
        for name, value in (headers or {}).items()
    }


def logging_middleware(
    log_level: str = 'debug',
    include_headers: bool = False,
    request_logger: Optional[logging.Logger] = None
):
    """
    Create a request/response logging stage.

    Args:
        log_level: Logging level ('debug', 'info', 'warning', 'error')
        include_headers: Whether to log headers (Authorization is redacted)
        request_logger: Logger to use (defaults to this module's logger)
    """
    middleware_logger = request_logger or logger
    log_func = getattr(middleware_logger, log_level, middleware_logger.debug)

    def middleware(handler):
        def log(request: PreparedRequest, options: Dict[str, Any]):
            start_time = time.perf_counter()

            log_data = {'method': request.method, 'url': request.url}
            if include_headers:
                log_data['headers'] = _loggable_headers(request.headers)
            log_func(f"HTTP Request: {log_data}")

            def on_success(response):
                elapsed_ms = (time.perf_counter() - start_time) * 1000
                response_data = {
                    'status_code': response.status_code,
                    'elapsed_ms': f"{elapsed_ms:.2f}",
                }
                if include_headers:
                    response_data['headers'] = dict(response.headers)
                log_func(f"HTTP Response: {response_data}")
                return response

            def on_error(error):
                middleware_logger.error(f"HTTP {request.method} {request.url} failed: {error}")

            try:
                result = handler(request, options)
            except Exception as e:
                on_error(e)
                raise

            return _on_response(result, on_success, on_error)
        return log
    return middleware
