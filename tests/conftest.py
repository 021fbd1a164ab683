"""
Shared fixtures for the EdgeGrid client test suite

Transport is replaced with recording handlers so no test touches the network.
"""

import pytest
import requests

from edgegrid.signing import Authentication


CLIENT_TOKEN = "akab-client-token-xxx-xxxxxxxxxxxxxxxx"
CLIENT_SECRET = "SOMESECRET"
ACCESS_TOKEN = "akab-access-token-xxx-xxxxxxxxxxxxxxxx"
HOST = "akaa-baseurl-xxxxxxxxxxx-xxxxxxxxxxxxx.luna.akamaiapis.net"


def make_response(status_code=200, content=b'{"ok": true}', url=None):
    """Build a requests.Response without a network round trip."""
    response = requests.Response()
    response.status_code = status_code
    response._content = content
    response.reason = 'OK' if status_code < 400 else 'Error'
    response.url = url
    return response


class RecordingHandler:
    """Terminal handler recording every request it receives"""

    def __init__(self, status_code=200):
        self.status_code = status_code
        self.requests = []
        self.options = []

    def __call__(self, request, options):
        self.requests.append(request)
        self.options.append(options)
        return make_response(self.status_code, url=request.url)

    @property
    def last_request(self):
        return self.requests[-1]


class AsyncRecordingHandler(RecordingHandler):
    """Terminal handler returning a coroutine, like the async transport"""

    def __call__(self, request, options):
        self.requests.append(request)
        self.options.append(options)

        async def respond():
            return make_response(self.status_code, url=request.url)

        return respond()


@pytest.fixture
def authentication():
    """Fully configured signer"""
    return Authentication(
        client_token=CLIENT_TOKEN,
        client_secret=CLIENT_SECRET,
        access_token=ACCESS_TOKEN,
        host=HOST,
    )


@pytest.fixture
def recording_handler():
    return RecordingHandler()


@pytest.fixture
def async_recording_handler():
    return AsyncRecordingHandler()


@pytest.fixture
def edgerc_file(tmp_path):
    """An .edgerc file with a default and a named section"""
    path = tmp_path / ".edgerc"
    path.write_text(
        "[default]\n"
        f"client_secret = {CLIENT_SECRET}\n"
        f"host = {HOST}\n"
        f"access_token = {ACCESS_TOKEN}\n"
        f"client_token = {CLIENT_TOKEN}\n"
        "\n"
        "[papi]\n"
        "client_secret = other-secret\n"
        "host = akab-papi.luna.akamaiapis.net\n"
        "access_token = akab-papi-access\n"
        "client_token = akab-papi-client\n"
        "max-body = 2048\n"
        "\n"
        "[broken]\n"
        "client_secret = only-a-secret\n",
        encoding="utf-8"
    )
    return path
