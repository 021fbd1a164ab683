"""
Terminal transport handler

Synchronous transfers go through a requests.Session; asynchronous transfers
go through httpx.AsyncClient. Both receive the same prepared request.
"""

import logging
from typing import Any, Dict, Optional

import httpx
import requests
from requests.models import PreparedRequest

logger = logging.getLogger(__name__)


class TransportHandler:
    """
    Send prepared requests over the network

    The ``synchronous`` option selects the transport: when true the response
    is returned directly, otherwise a coroutine resolving to an
    ``httpx.Response`` is returned.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        async_transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize transport handler

        Args:
            session: Optional requests session to reuse
            async_transport: Optional httpx transport for asynchronous transfers
        """
        self.session = session or requests.Session()
        self.async_transport = async_transport

    def __call__(self, request: PreparedRequest, options: Dict[str, Any]):
        if options.get('synchronous'):
            return self._send(request, options)
        return self._send_async(request, options)

    def _send(self, request: PreparedRequest, options: Dict[str, Any]) -> requests.Response:
        logger.debug(f"Sending {request.method} {request.url}")
        return self.session.send(
            request,
            timeout=options.get('timeout'),
            verify=options.get('verify', True),
            allow_redirects=options.get('allow_redirects', True),
            proxies=options.get('proxies'),
            stream=options.get('stream', False),
        )

    async def _send_async(self, request: PreparedRequest, options: Dict[str, Any]) -> httpx.Response:
        logger.debug(f"Sending {request.method} {request.url} (async)")
        async with httpx.AsyncClient(
            transport=self.async_transport,
            verify=options.get('verify', True),
            timeout=options.get('timeout'),
            follow_redirects=options.get('allow_redirects', True),
        ) as client:
            return await client.request(
                request.method,
                request.url,
                headers=dict(request.headers),
                content=request.body,
            )

    def close(self) -> None:
        """Close the underlying requests session."""
        self.session.close()

    def __repr__(self) -> str:
        return "TransportHandler()"
