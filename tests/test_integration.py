"""
Test suite for installing the signing stage into handler stacks
"""

import pytest
import requests

from edgegrid.exceptions import InvalidCredentialState, InvalidPipelineConfiguration
from edgegrid.http_clients import HISTORY_STAGE, HTTP_ERRORS_STAGE, HandlerStack, history
from edgegrid.signing import (
    AUTH_SCHEME,
    AUTHENTICATION_STAGE,
    AuthenticationHandler,
    install_authentication_handler,
    resolve_handler_stack,
)

from conftest import HOST, RecordingHandler


def prepare(url=f"https://{HOST}/papi/v1/groups"):
    return requests.Request("GET", url).prepare()


class TestAuthenticationHandler:
    """Test the signing stage"""

    def test_signs_requests(self, authentication, recording_handler):
        handler = AuthenticationHandler(authentication)(recording_handler)

        request = prepare()
        handler(request, {})

        assert recording_handler.last_request.headers['Authorization'].startswith(AUTH_SCHEME)
        assert 'Authorization' not in request.headers

    def test_missing_signer(self, recording_handler):
        handler = AuthenticationHandler()(recording_handler)

        with pytest.raises(InvalidCredentialState) as exc_info:
            handler(prepare(), {})
        assert exc_info.value.error_code == "SIGNER_NOT_SET"
        assert recording_handler.requests == []

    def test_signer_set_later(self, authentication, recording_handler):
        """Test the stage uses the signer it holds at call time"""
        stage = AuthenticationHandler()
        handler = stage(recording_handler)

        stage.set_signer(authentication)
        handler(prepare(), {})

        assert 'Authorization' in recording_handler.last_request.headers

    def test_signer_state_shared(self, authentication, recording_handler):
        """Test nonce changes on the signer apply to the next request"""
        handler = AuthenticationHandler(authentication)(recording_handler)

        authentication.set_nonce("first")
        handler(prepare(), {})
        authentication.set_nonce("second")
        handler(prepare(), {})

        headers = [request.headers['Authorization'] for request in recording_handler.requests]
        assert "nonce=first;" in headers[0]
        assert "nonce=second;" in headers[1]


class TestResolveHandlerStack:
    """Test handler option resolution"""

    def test_none_creates_default_stack(self):
        stack = resolve_handler_stack(None)
        assert isinstance(stack, HandlerStack)
        assert stack.names() == [HTTP_ERRORS_STAGE]

    def test_stack_used_in_place(self):
        stack = HandlerStack(RecordingHandler())
        assert resolve_handler_stack(stack) is stack

    def test_stack_copied_when_scoped(self):
        stack = HandlerStack(RecordingHandler())
        assert resolve_handler_stack(stack, scoped=True) is not stack

    def test_callable_wrapped(self, recording_handler):
        stack = resolve_handler_stack(recording_handler)
        assert stack.handler is recording_handler
        assert stack.names() == [HTTP_ERRORS_STAGE]

    def test_invalid_handler(self):
        with pytest.raises(InvalidPipelineConfiguration) as exc_info:
            resolve_handler_stack("not a handler")
        assert "Callable handler expected" in str(exc_info.value)


class TestInstallAuthenticationHandler:
    """Test placing the signing stage"""

    def test_appended_without_history(self, authentication, recording_handler):
        """Test the stage is appended when there is no history stage"""
        config = install_authentication_handler({'handler': recording_handler}, authentication)

        stack = config['handler']
        assert stack.names() == [HTTP_ERRORS_STAGE, AUTHENTICATION_STAGE]

        stack(prepare(), {})
        assert 'Authorization' in recording_handler.last_request.headers

    def test_inserted_before_history(self, authentication, recording_handler):
        """Test history records the signed request"""
        container = []
        stack = HandlerStack.create(recording_handler)
        stack.push(history(container), HISTORY_STAGE)

        install_authentication_handler({'handler': stack}, authentication)

        assert stack.names() == [HTTP_ERRORS_STAGE, AUTHENTICATION_STAGE, HISTORY_STAGE]

        stack(prepare(), {})
        assert container[0]['request'].headers['Authorization'].startswith(AUTH_SCHEME)

    def test_idempotent(self, authentication, recording_handler):
        """Test installing twice leaves a single signing stage"""
        stack = HandlerStack.create(recording_handler)
        install_authentication_handler({'handler': stack}, authentication)
        install_authentication_handler({'handler': stack}, authentication)

        assert stack.names().count(AUTHENTICATION_STAGE) == 1

        stack(prepare(), {})
        assert len(recording_handler.requests) == 1

    def test_config_not_modified(self, authentication):
        config = {'timeout': 10}
        result = install_authentication_handler(config, authentication)

        assert 'handler' not in config
        assert result['timeout'] == 10
        assert AUTHENTICATION_STAGE in result['handler']

    def test_scoped_leaves_base_stack(self, authentication, recording_handler):
        """Test a scoped install does not touch the supplied stack"""
        base = HandlerStack.create(recording_handler)

        config = install_authentication_handler({'handler': base}, authentication, scoped=True)

        assert config['handler'] is not base
        assert AUTHENTICATION_STAGE not in base
        assert AUTHENTICATION_STAGE in config['handler']

    def test_invalid_handler(self, authentication):
        with pytest.raises(InvalidPipelineConfiguration):
            install_authentication_handler({'handler': 42}, authentication)
