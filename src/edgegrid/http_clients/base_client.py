"""
Generic HTTP client driving a HandlerStack

This module provides the client that turns method, URI and options into a
prepared request and passes it through the configured handler. It knows
nothing about signing; stages in its handler stack do.
"""

import inspect
import logging
from typing import Any, Awaitable, Dict, Mapping, Optional
from urllib.parse import urljoin

import requests
from requests.models import PreparedRequest

from ..exceptions import ConfigurationError, InvalidPipelineConfiguration
from .handler_stack import HandlerStack

logger = logging.getLogger(__name__)

# Options owned by the client rather than forwarded to handlers per request
CLIENT_ONLY_OPTIONS = ('handler', 'base_uri')


def default_user_agent() -> str:
    """User agent token of the underlying transport library."""
    return requests.utils.default_user_agent()


async def _resolve(result):
    if inspect.isawaitable(result):
        return await result
    return result


class HttpClient:
    """
    HTTP client with a configurable handler pipeline

    Configuration keys: ``handler`` (HandlerStack or callable), ``base_uri``,
    ``headers``, ``timeout``, ``verify``, ``allow_redirects``,
    ``http_errors``. Any other key is kept as a default request option.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        config = dict(config or {})

        handler = config.get('handler')
        if handler is None:
            config['handler'] = HandlerStack.create()
        elif not callable(handler):
            raise InvalidPipelineConfiguration(
                f"Handler must be a HandlerStack or callable, got {type(handler).__name__}"
            )

        headers = config.get('headers')
        if headers is None:
            headers = {}
        if not isinstance(headers, Mapping):
            raise ConfigurationError(f"Headers must be a mapping, got {type(headers).__name__}")
        headers = dict(headers)
        if not any(name.lower() == 'user-agent' for name in headers):
            headers['User-Agent'] = default_user_agent()
        config['headers'] = headers

        config.setdefault('allow_redirects', True)
        config.setdefault('http_errors', True)
        config.setdefault('verify', True)

        self._config = config

    def get_config(self, option: Optional[str] = None) -> Any:
        """
        Get a configuration option, or a copy of the whole configuration.

        Args:
            option: Option name; None returns every option
        """
        if option is None:
            return dict(self._config)
        return self._config.get(option)

    def request(self, method: str, uri: str = '', **options) -> Any:
        """Send a request synchronously and return the response."""
        options = self._prepare_defaults(options)
        options['synchronous'] = True
        request = self._build_request(method, uri, options)
        return self._transfer(request, options)

    def request_async(self, method: str, uri: str = '', **options) -> Awaitable[Any]:
        """
        Send a request asynchronously.

        The handler stack runs before this method returns; only the
        transport step is deferred to the returned awaitable.
        """
        options = self._prepare_defaults(options)
        options['synchronous'] = False
        request = self._build_request(method, uri, options)
        return self._transfer(request, options)

    def send(self, request: PreparedRequest, **options) -> Any:
        """Send a prepared request synchronously."""
        options = self._prepare_defaults(options)
        options['synchronous'] = True
        return self._transfer(self._apply_default_headers(request, options), options)

    def send_async(self, request: PreparedRequest, **options) -> Awaitable[Any]:
        """Send a prepared request asynchronously."""
        options = self._prepare_defaults(options)
        options['synchronous'] = False
        return self._transfer(self._apply_default_headers(request, options), options)

    def close(self) -> None:
        """Release transport resources held by the configured handler."""
        close = getattr(self._config['handler'], 'close', None)
        if callable(close):
            close()

    def _prepare_defaults(self, options: Dict[str, Any]) -> Dict[str, Any]:
        merged = {
            key: value for key, value in self._config.items()
            if key not in CLIENT_ONLY_OPTIONS and key != 'headers'
        }
        merged['handler'] = self._config['handler']

        headers = dict(self._config['headers'])
        for name, value in (options.pop('headers', None) or {}).items():
            # Per-request headers replace configured ones case-insensitively
            for existing in [key for key in headers if key.lower() == name.lower()]:
                del headers[existing]
            headers[name] = value

        merged.update(options)
        if merged.get('handler') is None:
            merged['handler'] = self._config['handler']
        merged['headers'] = headers
        return merged

    def _build_uri(self, uri: str) -> str:
        base_uri = self._config.get('base_uri')
        if base_uri:
            return urljoin(str(base_uri), str(uri))
        return str(uri)

    def _build_request(self, method: str, uri: str, options: Dict[str, Any]) -> PreparedRequest:
        body = options.get('body')
        request = requests.Request(
            method=method.upper(),
            url=self._build_uri(uri),
            headers=options['headers'],
            params=options.get('query'),
            data=body if body is not None else options.get('form_params'),
            json=options.get('json'),
        )
        return request.prepare()

    def _apply_default_headers(self, request: PreparedRequest, options: Dict[str, Any]) -> PreparedRequest:
        prepared = request.copy()
        for name, value in options['headers'].items():
            if name not in prepared.headers:
                prepared.headers[name] = value
        return prepared

    def _transfer(self, request: PreparedRequest, options: Dict[str, Any]):
        handler = options.pop('handler')

        if not options['synchronous']:
            return _resolve(handler(request, options))

        result = handler(request, options)
        if inspect.isawaitable(result):
            if inspect.iscoroutine(result):
                result.close()
            raise TypeError("Handler returned an awaitable for a synchronous request")
        return result
