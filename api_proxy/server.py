"""HTTP server for running the API proxy outside a serverless platform."""

import logging
import argparse
from http.server import HTTPServer, BaseHTTPRequestHandler
from socketserver import ThreadingMixIn
from urllib.parse import urlparse

from .config import (
    DEFAULT_HOST, DEFAULT_PORT, PROXY_PATHS, HEALTH_PATH, CORS_ORIGIN, UPSTREAM_BASE_URL,
    LOG_LEVEL, LOG_FILE, LOG_FORMAT, LOG_DATEFMT, LOG_MAX_BYTES, LOG_BACKUP_COUNT
)
from .api_handlers import APIHandler, JSON_CONTENT_TYPE, INTERNAL_ERROR
from .utils import dump_json, setup_logging

logger = logging.getLogger(__name__)


class ThreadingHTTPServer(ThreadingMixIn, HTTPServer):
    daemon_threads = True

    def __init__(self, server_address, handler_class, upstream_base_url=UPSTREAM_BASE_URL):
        self.upstream_base_url = upstream_base_url
        super().__init__(server_address, handler_class)


class ProxyRequestHandler(BaseHTTPRequestHandler):
    """HTTP request handler routing to the proxy and health endpoints."""

    def log_message(self, format, *args):
        logger.debug(f"{self.address_string()} - {format % args}")

    def _send(self, status, body, content_type=JSON_CONTENT_TYPE):
        """Send a response with the proxy's standard headers."""
        payload = body.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(payload)))
        self.send_header("Access-Control-Allow-Origin", CORS_ORIGIN)
        self.send_header("Cache-Control", "no-cache")
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(payload)

    def _send_error_json(self, status):
        """Send error as JSON."""
        self._send(status, dump_json({"error": f"HTTP {status}"}))

    def _api(self):
        return APIHandler(self._send, self.server.upstream_base_url)

    def _read_body(self):
        """Read the request body as text, or None when there is none.

        Handles both Content-Length and Transfer-Encoding: chunked uploads.
        """
        if "chunked" in self.headers.get("Transfer-Encoding", "").lower():
            return self._read_chunked().decode("utf-8")
        length = int(self.headers.get("Content-Length", 0))
        if length <= 0:
            return None
        return self.rfile.read(length).decode("utf-8")

    def _read_chunked(self):
        """Collect a chunked body; trailers are read and discarded."""
        chunks = []
        while True:
            size_line = self.rfile.readline()
            if not size_line:
                raise ValueError("Truncated chunked request body")
            size = int(size_line.split(b";", 1)[0].strip(), 16)
            if size == 0:
                break
            chunks.append(self.rfile.read(size))
            self.rfile.readline()  # CRLF after each chunk
        while self.rfile.readline() not in (b"\r\n", b"\n", b""):
            pass
        return b"".join(chunks)

    def _route(self):
        """Dispatch any HTTP method to the matching endpoint."""
        path = urlparse(self.path).path.rstrip("/") or "/"

        if path in PROXY_PATHS:
            if self.command != "POST":
                # Body is irrelevant for the 405 answer
                self._api().handle_proxy(self.command, None)
                return
            try:
                body = self._read_body()
            except (ValueError, OSError) as e:
                logger.error(f"Proxy Error: could not read request body: {e}")
                self._send(500, dump_json({"error": INTERNAL_ERROR, "details": str(e)}))
                return
            self._api().handle_proxy(self.command, body)
        elif path == HEALTH_PATH and self.command in ("GET", "HEAD"):
            self._api().handle_health()
        else:
            self._send_error_json(404)

    do_GET = _route
    do_POST = _route
    do_PUT = _route
    do_PATCH = _route
    do_DELETE = _route
    do_OPTIONS = _route
    do_HEAD = _route


def create_server(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT,
                  upstream_base_url: str = UPSTREAM_BASE_URL) -> ThreadingHTTPServer:
    """Bind a proxy server without starting it. Port 0 picks a free port."""
    return ThreadingHTTPServer((host, port), ProxyRequestHandler, upstream_base_url)


def run_server(port: int = DEFAULT_PORT, host: str = DEFAULT_HOST):
    """Start the HTTP server."""
    server = create_server(host, port)
    logger.info(f"API proxy at http://{host}:{port} -> {server.upstream_base_url}")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        server.server_close()


def main():
    """Entry point for the server."""
    parser = argparse.ArgumentParser(description="Generative API Proxy Server")
    parser.add_argument("-p", "--port", type=int, default=DEFAULT_PORT,
                        help=f"Port to run on (default: {DEFAULT_PORT})")
    parser.add_argument("--host", default=DEFAULT_HOST,
                        help=f"Interface to bind (default: {DEFAULT_HOST})")
    args = parser.parse_args()

    configure_logging()
    run_server(args.port, args.host)


def configure_logging():
    """Apply the configured log level and optional rotating log file."""
    setup_logging(LOG_LEVEL, LOG_FILE, LOG_FORMAT, LOG_DATEFMT, LOG_MAX_BYTES, LOG_BACKUP_COUNT)


if __name__ == "__main__":
    main()
