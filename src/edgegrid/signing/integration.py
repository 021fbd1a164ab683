"""
HTTP client integration for request signing

This module provides the signing stage for HandlerStack pipelines and the
function that installs it into a client or request configuration.
"""

import logging
from typing import Any, Dict, Optional

from requests.models import PreparedRequest

from ..exceptions import InvalidCredentialState, InvalidPipelineConfiguration
from ..http_clients.handler_stack import Handler, HandlerStack
from ..http_clients.middleware import HISTORY_STAGE
from .authentication import Authentication
from .types import SigningErrorCodes

logger = logging.getLogger(__name__)

AUTHENTICATION_STAGE = 'authentication'


class AuthenticationHandler:
    """
    Pipeline stage signing every request that passes through it

    The stage holds a reference to the signer, not a copy, so timestamp and
    nonce changes made on the signer apply to the next request.
    """

    def __init__(self, signer: Optional[Authentication] = None):
        self.signer = signer

    def set_signer(self, signer: Authentication) -> None:
        """Set the signer used by this stage."""
        self.signer = signer

    def __call__(self, handler: Handler) -> Handler:
        def sign_and_forward(request: PreparedRequest, options: Dict[str, Any]):
            if self.signer is None:
                raise InvalidCredentialState(
                    "Signer not set, make sure to call set_signer first",
                    SigningErrorCodes.SIGNER_NOT_SET
                )
            return handler(self.signer.sign(request), options)

        return sign_and_forward

    def __repr__(self) -> str:
        return f"AuthenticationHandler(signer={self.signer!r})"


def resolve_handler_stack(handler: Any, scoped: bool = False) -> HandlerStack:
    """
    Resolve a ``handler`` option into a HandlerStack.

    Args:
        handler: None, a HandlerStack, or a raw handler callable
        scoped: Copy a supplied HandlerStack instead of using it in place

    Returns:
        HandlerStack: Stack to install stages into

    Raises:
        InvalidPipelineConfiguration: If handler is neither a stack nor callable
    """
    if handler is None:
        return HandlerStack.create()

    if isinstance(handler, HandlerStack):
        return handler.copy() if scoped else handler

    if callable(handler):
        return HandlerStack.create(handler)

    raise InvalidPipelineConfiguration(
        f"Callable handler expected, got {type(handler).__name__}",
        details={"handler_type": type(handler).__name__}
    )


def install_authentication_handler(
    config: Dict[str, Any],
    authentication: Authentication,
    scoped: bool = False
) -> Dict[str, Any]:
    """
    Ensure the signing stage is present in the configured handler stack.

    The stage goes immediately before the ``history`` stage so recorded
    requests are the signed ones; without a ``history`` stage it is appended.
    Installing into a stack that already has an ``authentication`` stage
    replaces it, leaving a single signing stage.

    Args:
        config: Client or per-request options; not modified
        authentication: Signer used by the stage
        scoped: Build a per-request stack instead of modifying a supplied one

    Returns:
        dict: Copy of config whose ``handler`` is the resulting stack
    """
    config = dict(config)
    stack = resolve_handler_stack(config.get('handler'), scoped=scoped)
    stage = AuthenticationHandler(authentication)

    if stack.before(HISTORY_STAGE, stage, AUTHENTICATION_STAGE):
        logger.debug("Installed authentication stage before history stage")
    else:
        stack.push(stage, AUTHENTICATION_STAGE)
        logger.debug("No history stage present, appended authentication stage")

    config['handler'] = stack
    return config
