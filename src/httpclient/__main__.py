"""
=============================================================================
HTTP CLIENT CLI ENTRY POINT
=============================================================================

    # GET / from example.com
    python -m httpclient example.com

    # Another path, with a header
    python -m httpclient example.com --path /index.html -H "Accept: text/html"

    # POST with a body (add Content-Length yourself)
    python -m httpclient localhost --port 8080 --method POST \\
        -H "Content-Length: 5" --body hello

    # Hand-written HTTP/1.0 GET, printing every line received
    python -m httpclient www.google.com --raw

=============================================================================
"""

import argparse
import logging
import sys
from typing import Dict, Optional

from . import __version__
from .client import HTTPClient, split_host_port
from .config import ClientConfig
from .core.streamer import TransportError
from .http.request import Request, RequestMethod, ValidationError
from .http.response import HTTPResponse, ProtocolError


def _setup_logging(level_name: str) -> None:
    """Configure logging for command-line use."""
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("httpclient").setLevel(level)


def _parse_header(text: str) -> tuple[str, str]:
    name, sep, value = text.partition(":")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"Header must look like 'Name: value', got {text!r}")
    return name.strip(), value.strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="httpclient",
        description="Minimal HTTP/1.1 client built on raw sockets",
    )

    parser.add_argument("host", help="Server host name, optionally with :port")

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Server port (default: from host, else HTTP_CLIENT_PORT or 80)"
    )

    parser.add_argument("--path", "-P", default="/", help="Request path (default: /)")

    parser.add_argument(
        "--method", "-X",
        type=RequestMethod.parse,
        default=RequestMethod.default(),
        help="GET, POST, PUT or DELETE (default: GET)"
    )

    parser.add_argument(
        "--header", "-H",
        type=_parse_header,
        action="append",
        default=[],
        help="Extra header as 'Name: value' (repeatable)"
    )

    parser.add_argument("--body", "-d", default=None, help="Request body, sent verbatim")

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=None,
        help="Socket timeout in seconds (default: HTTP_CLIENT_TIMEOUT or 30)"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: HTTP_CLIENT_LOG_LEVEL or INFO)"
    )

    parser.add_argument(
        "--raw",
        action="store_true",
        help="Send a hand-written 'GET / HTTP/1.0' and print every line received"
    )

    parser.add_argument("--version", "-v", action="version", version=f"PyHTTPClient {__version__}")

    return parser


def _print_response(response: HTTPResponse) -> None:
    print(response.status_line)
    for name, value in response.headers.items():
        print(f"{name}: {value}")
    print()
    print(response.text)


def _run_raw(client: HTTPClient, host: str, port: Optional[int]) -> None:
    name, host_port = split_host_port(host, client.config.port)
    with client.connect(name, port or host_port) as streamer:
        streamer.send_raw(f"GET / HTTP/1.0\r\nHost: {host}\r\n\r\n".encode("ascii"))
        for line in streamer.lines():
            print(line)


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = ClientConfig.from_env()
        if args.timeout is not None:
            config.timeout = args.timeout
        if args.log_level is not None:
            config.log_level = args.log_level
        config.validate()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    _setup_logging(config.log_level)
    client = HTTPClient(config)

    try:
        if args.raw:
            _run_raw(client, args.host, args.port)
            return 0

        headers: Dict[str, str] = {
            "User-Agent": config.user_agent,
            "Connection": "close",
        }
        headers.update(dict(args.header))

        builder = (Request.builder()
            .with_method(args.method)
            .with_host(args.host)
            .with_path(args.path)
            .with_headers(headers))
        if args.body is not None:
            builder.with_body(args.body)

        _print_response(client.send(builder.build(), port=args.port))
    except (ValidationError, TransportError, ProtocolError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
