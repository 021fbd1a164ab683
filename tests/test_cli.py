"""
Test suite for the edgegrid-request command
"""

from unittest.mock import patch

import pytest

from edgegrid.cli import create_client, create_parser, main, parse_headers
from edgegrid.client import EdgeGridClient
from edgegrid.exceptions import ConfigurationError
from edgegrid.http_clients import LOG_STAGE
from edgegrid.signing import AUTH_SCHEME

from conftest import HOST, RecordingHandler


class TestParseHeaders:
    """Test header argument parsing"""

    def test_valid_headers(self):
        assert parse_headers(['Accept: application/json', 'X-Test:1']) == {
            'Accept': 'application/json',
            'X-Test': '1',
        }

    def test_missing_colon(self):
        with pytest.raises(ValueError):
            parse_headers(['Accept application/json'])


class TestCreateClient:
    """Test building a client from arguments"""

    def test_from_edgerc(self, edgerc_file):
        args = create_parser().parse_args(['GET', '/path', '--edgerc', str(edgerc_file), '--timeout', '5'])

        client = create_client(args)

        assert client.get_config('base_uri') == f"https://{HOST}"
        assert client.get_config('timeout') == 5
        assert client.get_config('http_errors') is False
        assert LOG_STAGE not in client.get_config('handler')

    def test_verbose_adds_logging(self, edgerc_file):
        args = create_parser().parse_args(['GET', '/path', '--edgerc', str(edgerc_file), '-v'])
        assert LOG_STAGE in create_client(args).get_config('handler')

    def test_missing_section(self, edgerc_file):
        args = create_parser().parse_args(['GET', '/', '--edgerc', str(edgerc_file), '--section', 'nope'])
        with pytest.raises(ConfigurationError):
            create_client(args)


class TestMain:
    """Test the command entry point"""

    def setup_method(self):
        """Set up test fixtures"""
        self.transport = RecordingHandler()

    def make_client(self, args):
        config = {'handler': self.transport, 'http_errors': False}
        return EdgeGridClient.from_edgerc(args.section, args.edgerc, config)

    def test_successful_request(self, edgerc_file, capsys):
        with patch('edgegrid.cli.create_client', side_effect=self.make_client):
            exit_code = main([
                'get', '/papi/v1/groups',
                '--edgerc', str(edgerc_file),
                '-H', 'Accept: application/json',
                '--nonce', 'cli-nonce',
            ])

        assert exit_code == 0
        request = self.transport.last_request
        assert request.method == 'GET'
        assert request.url == f"https://{HOST}/papi/v1/groups"
        assert request.headers['Accept'] == 'application/json'
        assert request.headers['Authorization'].startswith(AUTH_SCHEME)
        assert 'nonce=cli-nonce;' in request.headers['Authorization']

        output = capsys.readouterr().out
        assert output.startswith('200 OK')
        assert '{"ok": true}' in output

    def test_post_body(self, edgerc_file):
        with patch('edgegrid.cli.create_client', side_effect=self.make_client):
            main(['POST', '/items', '--edgerc', str(edgerc_file), '--data', '{"a": 1}'])

        assert self.transport.last_request.body == '{"a": 1}'

    def test_error_status(self, edgerc_file, capsys):
        self.transport.status_code = 404
        with patch('edgegrid.cli.create_client', side_effect=self.make_client):
            exit_code = main(['GET', '/missing', '--edgerc', str(edgerc_file)])

        assert exit_code == 1
        assert capsys.readouterr().out.startswith('404')

    def test_configuration_error(self, tmp_path, capsys):
        exit_code = main(['GET', '/', '--edgerc', str(tmp_path / 'missing')])

        assert exit_code == 2
        assert 'EdgeRc file not found' in capsys.readouterr().err

    def test_invalid_header(self, edgerc_file, capsys):
        exit_code = main(['GET', '/', '--edgerc', str(edgerc_file), '-H', 'broken'])

        assert exit_code == 2
        assert 'Invalid header' in capsys.readouterr().err

    def test_transport_failure(self, edgerc_file, capsys):
        def failing_client(args):
            return EdgeGridClient.from_edgerc(
                args.section, args.edgerc, {'handler': lambda request, options: 1 / 0}
            )

        with patch('edgegrid.cli.create_client', side_effect=failing_client):
            exit_code = main(['GET', '/', '--edgerc', str(edgerc_file)])

        assert exit_code == 1
        assert 'Error:' in capsys.readouterr().err
