"""
Ordered chain of named request stages

A HandlerStack composes stages around a terminal handler. A stage is a
callable taking the next handler and returning a new handler; a handler is a
callable ``handler(request, options)`` returning a response, or an awaitable
response for asynchronous transfers.

The first stage in the stack is the outermost one, so stages see the request
in stack order.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

from requests.models import PreparedRequest

from .handlers import TransportHandler
from .middleware import HTTP_ERRORS_STAGE, http_errors

logger = logging.getLogger(__name__)

Handler = Callable[[PreparedRequest, Dict[str, Any]], Union[Any, Awaitable[Any]]]
Middleware = Callable[[Handler], Handler]


class HandlerStack:
    """
    Mutable, ordered chain of named stages around a terminal handler

    Stage names are unique slots: adding a stage under a name that is already
    taken removes the earlier entry first.
    """

    def __init__(self, handler: Optional[Handler] = None):
        self._handler = handler
        self._stack: List[Tuple[Middleware, str]] = []
        self._cached: Optional[Handler] = None

    @classmethod
    def create(cls, handler: Optional[Handler] = None) -> 'HandlerStack':
        """
        Create a stack with the default stages.

        Args:
            handler: Terminal handler (defaults to the requests/httpx transport)

        Returns:
            HandlerStack: Stack holding the ``http_errors`` stage
        """
        stack = cls(handler or TransportHandler())
        stack.push(http_errors(), HTTP_ERRORS_STAGE)
        return stack

    def __call__(self, request: PreparedRequest, options: Dict[str, Any]):
        handler = self.resolve()
        return handler(request, options)

    def set_handler(self, handler: Handler) -> None:
        """Set the terminal handler."""
        self._handler = handler
        self._cached = None

    @property
    def handler(self) -> Optional[Handler]:
        """Terminal handler"""
        return self._handler

    def has_handler(self) -> bool:
        """Check whether a terminal handler is set."""
        return self._handler is not None

    def names(self) -> List[str]:
        """Stage names in execution order (unnamed stages appear as '')."""
        return [name for _, name in self._stack]

    def has(self, name: str) -> bool:
        """Check whether a stage with the given name is present."""
        return self._find(name) is not None

    def push(self, middleware: Middleware, name: str = '') -> None:
        """Append a stage at the innermost position."""
        self._discard_name(name)
        self._stack.append((middleware, name))
        self._cached = None

    def unshift(self, middleware: Middleware, name: str = '') -> None:
        """Insert a stage at the outermost position."""
        self._discard_name(name)
        self._stack.insert(0, (middleware, name))
        self._cached = None

    def before(self, find_name: str, middleware: Middleware, name: str = '') -> bool:
        """
        Insert a stage immediately before the stage named find_name.

        Returns:
            bool: False, leaving the stack unchanged, if find_name is absent
        """
        return self._splice(find_name, middleware, name, offset=0)

    def after(self, find_name: str, middleware: Middleware, name: str = '') -> bool:
        """
        Insert a stage immediately after the stage named find_name.

        Returns:
            bool: False, leaving the stack unchanged, if find_name is absent
        """
        return self._splice(find_name, middleware, name, offset=1)

    def remove(self, name_or_middleware: Union[str, Middleware]) -> bool:
        """Remove stages by name or by identity; returns True if any were removed."""
        if isinstance(name_or_middleware, str):
            kept = [entry for entry in self._stack if entry[1] != name_or_middleware]
        else:
            kept = [entry for entry in self._stack if entry[0] is not name_or_middleware]

        removed = len(kept) != len(self._stack)
        self._stack = kept
        self._cached = None
        return removed

    def copy(self) -> 'HandlerStack':
        """Independent stack sharing the same stages and terminal handler."""
        clone = HandlerStack(self._handler)
        clone._stack = list(self._stack)
        return clone

    def resolve(self) -> Handler:
        """
        Compose the stages around the terminal handler.

        Raises:
            RuntimeError: If no terminal handler has been set
        """
        if self._cached is None:
            if self._handler is None:
                raise RuntimeError("No handler has been specified")

            handler = self._handler
            for middleware, _ in reversed(self._stack):
                handler = middleware(handler)
            self._cached = handler

        return self._cached

    def close(self) -> None:
        """Close the terminal handler if it holds resources."""
        close = getattr(self._handler, 'close', None)
        if callable(close):
            close()

    def _find(self, name: str) -> Optional[int]:
        for index, (_, stage_name) in enumerate(self._stack):
            if stage_name == name:
                return index
        return None

    def _discard_name(self, name: str) -> None:
        if name and self.has(name):
            logger.debug(f"Replacing existing '{name}' stage")
            self.remove(name)

    def _splice(self, find_name: str, middleware: Middleware, name: str, offset: int) -> bool:
        if name == find_name or self._find(find_name) is None:
            return False

        self._discard_name(name)
        index = self._find(find_name)
        self._stack.insert(index + offset, (middleware, name))
        self._cached = None
        return True

    def __len__(self) -> int:
        return len(self._stack)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def __repr__(self) -> str:
        stages = ', '.join(name or '<unnamed>' for name in self.names())
        return f"HandlerStack([{stages}], handler={self._handler!r})"
