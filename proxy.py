#!/usr/bin/env python3
"""Entry point for the API proxy."""

import sys
import argparse

from api_proxy.config import (
    DEFAULT_PORT, DEFAULT_HOST, API_KEY_ENV, UPSTREAM_BASE_URL, PROXY_PATHS, get_api_key
)
from api_proxy.routing import MODEL_ROUTES
from api_proxy.server import run_server, configure_logging


def check_config():
    """Report whether the proxy can relay. Never prints the key itself."""
    configured = bool(get_api_key())
    print(f"{API_KEY_ENV}: {'configured' if configured else 'NOT SET'}")
    print(f"Upstream: {UPSTREAM_BASE_URL}")
    print(f"Paths: {', '.join(PROXY_PATHS)}")
    for prefix, action in MODEL_ROUTES:
        print(f"  {prefix}* -> :{action}")
    return configured


def main():
    parser = argparse.ArgumentParser(description="Generative API Proxy")
    subparsers = parser.add_subparsers(dest='command')

    # Server command
    server_parser = subparsers.add_parser('server', help='Run the proxy server')
    server_parser.add_argument('-p', '--port', type=int, default=DEFAULT_PORT,
                               help=f'Port to run on (default: {DEFAULT_PORT})')
    server_parser.add_argument('--host', default=DEFAULT_HOST,
                               help=f'Interface to bind (default: {DEFAULT_HOST})')

    # Check command
    subparsers.add_parser('check', help='Check API key and upstream configuration')

    args = parser.parse_args()

    if args.command == 'server':
        configure_logging()
        run_server(args.port, args.host)
    elif args.command == 'check':
        sys.exit(0 if check_config() else 1)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
