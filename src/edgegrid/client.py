"""
EdgeGrid-authenticated HTTP client

This module provides the client that signs every request it sends with
EdgeGrid credentials. It normalizes request options, keeps the signer's
timestamp and nonce fresh, and delegates the transfer to HttpClient.
"""

import logging
from pathlib import Path
from typing import Any, Awaitable, Dict, Mapping, Optional, Tuple, Union
from urllib.parse import parse_qs

from requests.models import PreparedRequest

from .exceptions import ConfigurationError
from .http_clients.base_client import HttpClient, default_user_agent
from .signing.authentication import Authentication
from .signing.edgerc import DEFAULT_SECTION, EdgeRcCredentials, load_edgerc, load_from_env
from .signing.integration import install_authentication_handler
from .version import __version__

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 300

DEFAULT_SCHEME = 'https'


def user_agent() -> str:
    """User agent sent by EdgeGridClient."""
    return f"EdgeGrid-Python/{__version__} {default_user_agent()}"


def normalize_base_uri(base_uri: Any) -> Any:
    """
    Default a scheme-less base URI to https.

    Non-string and empty values are returned unchanged.
    """
    if not isinstance(base_uri, str) or not base_uri:
        return base_uri
    if base_uri.startswith('//'):
        return f"{DEFAULT_SCHEME}:{base_uri}"
    if '://' not in base_uri:
        return f"{DEFAULT_SCHEME}://{base_uri}"
    return base_uri


def parse_query(query: Union[str, bytes]) -> Dict[str, Any]:
    """Parse a query string; keys seen once map to a string, repeated keys to a list."""
    if isinstance(query, bytes):
        query = query.decode('utf-8')

    parsed = parse_qs(query, keep_blank_values=True)
    return {
        key: values[0] if len(values) == 1 else values
        for key, values in parsed.items()
    }


def split_query(uri: str) -> Tuple[str, Dict[str, Any]]:
    """
    Split an embedded query string off a URI.

    Args:
        uri: URI that may contain ``?query``

    Returns:
        tuple: (URI without the query segment, parsed query dict). Keys seen
        once map to a string, repeated keys map to a list.
    """
    before_fragment, hash_mark, fragment = uri.partition('#')
    base, separator, query = before_fragment.partition('?')
    if not separator or not query:
        return uri, {}

    return base + hash_mark + fragment, parse_query(query)


class EdgeGridClient:
    """
    HTTP client signing every request with EdgeGrid authentication

    Configuration keys, in addition to those HttpClient accepts:
    ``timestamp`` and ``nonce`` pin the signer's values at construction.

    One client owns one signer. Signer state is mutated before every request,
    so a client must not be shared between threads; use one client per
    thread. Concurrent ``request_async`` calls on one event loop are safe
    because signing completes before the returned awaitable is created.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        authentication: Optional[Authentication] = None
    ):
        """
        Initialize client

        Args:
            config: Client configuration
            authentication: Optional signer (a new unconfigured one by default)

        Raises:
            InvalidPipelineConfiguration: If the handler option is invalid
            ConfigurationError: If the headers option is not a mapping
        """
        config = dict(config or {})
        config = self._add_authentication_to_config(config, authentication)
        config = self._add_basic_options_to_config(config)

        headers = config.get('headers')
        if headers is None:
            headers = {}
        if not isinstance(headers, Mapping):
            raise ConfigurationError(f"Headers must be a mapping, got {type(headers).__name__}")
        headers = dict(headers)
        headers['User-Agent'] = user_agent()
        config['headers'] = headers

        self._http_client = HttpClient(config)

        logger.debug(f"EdgeGrid client initialized for: {config.get('base_uri')}")

    @classmethod
    def from_credentials(
        cls,
        credentials: EdgeRcCredentials,
        config: Optional[Dict[str, Any]] = None
    ) -> 'EdgeGridClient':
        """Create a client for the host the credentials belong to."""
        config = dict(config or {})
        config.setdefault('base_uri', credentials.base_uri)
        return cls(config, Authentication.from_credentials(credentials))

    @classmethod
    def from_edgerc(
        cls,
        section: str = DEFAULT_SECTION,
        path: Optional[Union[str, Path]] = None,
        config: Optional[Dict[str, Any]] = None
    ) -> 'EdgeGridClient':
        """
        Create a client from an ``.edgerc`` section.

        Args:
            section: Section to read
            path: Path to the file (defaults to ``~/.edgerc``)
            config: Additional client configuration

        Returns:
            EdgeGridClient: Client whose base URI is the section's host
        """
        credentials = load_edgerc(path, section)
        logger.info(f"Using EdgeGrid credentials from section [{section}] for {credentials.host}")
        return cls.from_credentials(credentials, config)

    @classmethod
    def from_env(
        cls,
        section: str = DEFAULT_SECTION,
        config: Optional[Dict[str, Any]] = None
    ) -> 'EdgeGridClient':
        """Create a client from ``AKAMAI_*`` environment variables."""
        credentials = load_from_env(section)
        logger.info(f"Using EdgeGrid credentials from environment for {credentials.host}")
        return cls.from_credentials(credentials, config)

    @property
    def authentication(self) -> Authentication:
        """Signer used for every request"""
        return self._authentication

    def request(self, method: str, uri: str = '', **options) -> Any:
        """
        Send a signed request and return the response.

        Args:
            method: HTTP method
            uri: Request URI, absolute or relative to ``base_uri``
            **options: Request options (``headers``, ``query``, ``json``,
                ``body``, ``nonce``, ``handler``, ...)

        Returns:
            requests.Response: Response from the transport
        """
        uri, options = self._prepare_request(uri, options)
        return self._http_client.request(method, uri, **options)

    def request_async(self, method: str, uri: str = '', **options) -> Awaitable[Any]:
        """
        Send a signed request asynchronously.

        The request is signed before this method returns; the returned
        awaitable covers the transfer only.

        Returns:
            Awaitable resolving to an httpx.Response
        """
        uri, options = self._prepare_request(uri, options)
        return self._http_client.request_async(method, uri, **options)

    def send(self, request: PreparedRequest, **options) -> Any:
        """Sign and send a prepared request."""
        options = self._add_request_options_to_options(options)
        return self._http_client.send(request, **options)

    def send_async(self, request: PreparedRequest, **options) -> Awaitable[Any]:
        """Sign and send a prepared request asynchronously."""
        options = self._add_request_options_to_options(options)
        return self._http_client.send_async(request, **options)

    def get_config(self, option: Optional[str] = None) -> Any:
        """Get a configuration option, or a copy of the whole configuration."""
        return self._http_client.get_config(option)

    def get(self, uri: str = '', **options) -> Any:
        """Send a signed GET request."""
        return self.request('GET', uri, **options)

    def head(self, uri: str = '', **options) -> Any:
        """Send a signed HEAD request."""
        return self.request('HEAD', uri, **options)

    def post(self, uri: str = '', **options) -> Any:
        """Send a signed POST request."""
        return self.request('POST', uri, **options)

    def put(self, uri: str = '', **options) -> Any:
        """Send a signed PUT request."""
        return self.request('PUT', uri, **options)

    def patch(self, uri: str = '', **options) -> Any:
        """Send a signed PATCH request."""
        return self.request('PATCH', uri, **options)

    def delete(self, uri: str = '', **options) -> Any:
        """Send a signed DELETE request."""
        return self.request('DELETE', uri, **options)

    def get_async(self, uri: str = '', **options) -> Awaitable[Any]:
        """Send a signed GET request asynchronously."""
        return self.request_async('GET', uri, **options)

    def post_async(self, uri: str = '', **options) -> Awaitable[Any]:
        """Send a signed POST request asynchronously."""
        return self.request_async('POST', uri, **options)

    def put_async(self, uri: str = '', **options) -> Awaitable[Any]:
        """Send a signed PUT request asynchronously."""
        return self.request_async('PUT', uri, **options)

    def patch_async(self, uri: str = '', **options) -> Awaitable[Any]:
        """Send a signed PATCH request asynchronously."""
        return self.request_async('PATCH', uri, **options)

    def delete_async(self, uri: str = '', **options) -> Awaitable[Any]:
        """Send a signed DELETE request asynchronously."""
        return self.request_async('DELETE', uri, **options)

    def close(self) -> None:
        """Close transport resources"""
        self._http_client.close()
        logger.debug("EdgeGrid client closed")

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        self.close()

    def _set_authentication(
        self,
        config: Dict[str, Any],
        authentication: Optional[Authentication] = None
    ) -> None:
        self._authentication = authentication or Authentication()

        timestamp = config.pop('timestamp', None)
        if timestamp:
            self._authentication.set_timestamp(timestamp)

        nonce = config.pop('nonce', None)
        if nonce:
            self._authentication.set_nonce(nonce)

    def _add_authentication_to_config(
        self,
        config: Dict[str, Any],
        authentication: Optional[Authentication] = None
    ) -> Dict[str, Any]:
        self._set_authentication(config, authentication)
        return install_authentication_handler(config, self._authentication)

    def _add_basic_options_to_config(self, config: Dict[str, Any]) -> Dict[str, Any]:
        if config.get('timeout') is None:
            config['timeout'] = DEFAULT_REQUEST_TIMEOUT

        if 'base_uri' in config:
            config['base_uri'] = normalize_base_uri(config['base_uri'])
        return config

    def _add_request_options_to_options(self, options: Dict[str, Any]) -> Dict[str, Any]:
        options = dict(options)

        self._authentication.set_timestamp()
        # The timestamp is always taken fresh for each request
        options.pop('timestamp', None)

        nonce = options.pop('nonce', None)
        if nonce:
            self._authentication.set_nonce(nonce)

        if options.get('handler') is not None:
            options = install_authentication_handler(options, self._authentication, scoped=True)

        return options

    def _prepare_request(self, uri: Any, options: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
        options = self._add_request_options_to_options(options)

        uri = str(uri)
        if uri.startswith('//'):
            uri = f"{DEFAULT_SCHEME}:{uri}"

        uri, params = split_query(uri)
        if params:
            query = options.get('query') or {}
            if isinstance(query, (str, bytes)):
                query = parse_query(query)
            query = dict(query)
            query.update(params)
            options['query'] = query

        return uri, options
