"""HTTP input/output: request parsing and response serialization."""

import html
import logging
import socket
from typing import BinaryIO, Iterable, Optional

from fileserver.domain.correlation_id import get_logger
from fileserver.domain.http_types import (
    HTTP_VERSION,
    MALFORMED_REQUEST_LINE,
    MISSING_HOST_HEADER,
    HttpRequest,
    HttpResponse,
    new_headers,
)

IO_LOGGER = get_logger("io")

HEADER_ENCODING = "iso-8859-1"
ERROR_CONTENT_TYPE = "text/html; charset=utf-8"
CRLF = "\r\n"


def _read_line(stream: BinaryIO) -> Optional[str]:
    """Return the next line without its terminator, or None at end of stream."""
    raw = stream.readline()
    if not raw:
        return None
    return raw.decode(HEADER_ENCODING).rstrip("\r\n")


def parse_headers(lines: Iterable[str]):
    """Split each line at its first colon into a case-insensitive header map."""
    headers = new_headers()
    for line in lines:
        name, colon, value = line.partition(":")
        if not colon:
            continue
        headers[name.strip()] = value.strip()
    return headers


def _header_lines(stream: BinaryIO) -> Iterable[str]:
    while True:
        line = _read_line(stream)
        if not line:
            return
        yield line


def read_request(stream: BinaryIO) -> Optional[HttpRequest]:
    """Parse one request from a line-oriented stream.

    Returns None when the stream ends before a request line arrives. Parse
    failures are reported through ``HttpRequest.error`` rather than raised.
    """
    request_line = _read_line(stream)
    if request_line is None:
        return None

    parts = request_line.split()
    if len(parts) < 3:
        return HttpRequest(error=MALFORMED_REQUEST_LINE)

    method, path, version = parts[0], parts[1], parts[2]
    request = HttpRequest(method, path, version, parse_headers(_header_lines(stream)))
    if version == HTTP_VERSION and "Host" not in request.headers:
        request.error = MISSING_HOST_HEADER

    if IO_LOGGER.logger.isEnabledFor(logging.DEBUG):
        IO_LOGGER.debug(
            "Parsed request",
            extra={"method": method, "route": path, "header_count": len(request.headers)},
        )
    return request


def render_error_page(response: HttpResponse) -> bytes:
    """Build the HTML document describing an error response."""
    status_line = html.escape(response.status_line)
    message = html.escape(response.error_message or "")
    return (
        f"<html><head><title>{status_line}</title></head><body>"
        f"<h1>{status_line}</h1><p>{message}</p></body></html>"
    ).encode("utf-8")


def serialize_response(response: HttpResponse, include_body: bool = True) -> bytes:
    """Return the wire bytes of ``response``.

    Error pages replace any Content-Type and Content-Length with values
    computed from the generated HTML.
    """
    headers = new_headers()
    headers.update(response.headers)
    body = response.body
    if response.error_message is not None:
        body = render_error_page(response)
        headers["Content-Type"] = ERROR_CONTENT_TYPE
        headers["Content-Length"] = str(len(body))
    headers["Connection"] = "close"

    lines = [response.status_line]
    lines.extend(f"{name}: {value}" for name, value in headers.items())
    head = (CRLF.join(lines) + CRLF + CRLF).encode(HEADER_ENCODING, errors="replace")
    if not include_body:
        return head
    return head + body


def send_response(
    client_socket: socket.socket, response: HttpResponse, include_body: bool = True
) -> None:
    """Serialize and send the HTTP response over the socket."""
    payload = serialize_response(response, include_body)
    client_socket.sendall(payload)
    IO_LOGGER.debug(
        "Sent response",
        extra={
            "event": "response_sent",
            "status_code": response.status_code,
            "bytes_out": len(payload),
        },
    )
