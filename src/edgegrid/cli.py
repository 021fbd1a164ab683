"""
Command-line interface for the EdgeGrid Python client
Sends a single EdgeGrid-signed request and prints the response
"""

import argparse
import logging
import sys
from typing import Dict, List, Optional

from . import __version__
from .client import EdgeGridClient
from .exceptions import EdgeGridError
from .http_clients.middleware import LOG_STAGE, logging_middleware
from .signing.edgerc import DEFAULT_EDGERC_PATH, DEFAULT_SECTION


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='edgegrid-request',
        description='Send an EdgeGrid-signed HTTP request'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'EdgeGrid Python client {__version__}'
    )

    parser.add_argument('method', help='HTTP method (GET, POST, ...)')
    parser.add_argument('path', help='Request path, relative to the credentials host')

    parser.add_argument(
        '--edgerc',
        default=DEFAULT_EDGERC_PATH,
        help=f'Path to the .edgerc file (default: {DEFAULT_EDGERC_PATH})'
    )
    parser.add_argument(
        '--section',
        default=DEFAULT_SECTION,
        help=f'Credentials section (default: {DEFAULT_SECTION})'
    )
    parser.add_argument(
        '--env',
        action='store_true',
        help='Read credentials from AKAMAI_* environment variables instead of .edgerc'
    )
    parser.add_argument(
        '-H', '--header',
        action='append',
        default=[],
        metavar='NAME:VALUE',
        help='Extra request header (repeatable)'
    )
    parser.add_argument('--data', help='Request body')
    parser.add_argument('--timeout', type=float, help='Request timeout in seconds')
    parser.add_argument('--nonce', help='Nonce to sign with instead of a random one')
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Log requests and responses to stderr'
    )

    return parser


def parse_headers(values: List[str]) -> Dict[str, str]:
    """
    Parse ``Name: value`` header arguments.

    Raises:
        ValueError: If an argument has no colon
    """
    headers = {}
    for value in values:
        name, separator, header_value = value.partition(':')
        if not separator or not name.strip():
            raise ValueError(f"Invalid header '{value}', expected NAME:VALUE")
        headers[name.strip()] = header_value.strip()
    return headers


def create_client(args) -> EdgeGridClient:
    """Create a client from parsed arguments."""
    config = {'http_errors': False}
    if args.timeout is not None:
        config['timeout'] = args.timeout

    if args.env:
        client = EdgeGridClient.from_env(args.section, config)
    else:
        client = EdgeGridClient.from_edgerc(args.section, args.edgerc, config)

    if args.verbose:
        client.get_config('handler').push(
            logging_middleware(log_level='info', include_headers=True),
            LOG_STAGE
        )

    return client


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for the CLI

    Args:
        argv: Command line arguments (None to use sys.argv)

    Returns:
        int: 0 for a response below 400, 1 otherwise, 2 for configuration errors
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.INFO, stream=sys.stderr)

    try:
        headers = parse_headers(args.header)
        client = create_client(args)
    except (ValueError, EdgeGridError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    options = {'headers': headers}
    if args.data is not None:
        options['body'] = args.data
    if args.nonce:
        options['nonce'] = args.nonce

    try:
        with client:
            response = client.request(args.method.upper(), args.path, **options)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"{response.status_code} {response.reason}")
    if response.text:
        print(response.text)

    return 0 if response.status_code < 400 else 1


if __name__ == '__main__':
    sys.exit(main())
