"""Pure HTTP response builders."""

from datetime import datetime
from http import HTTPStatus
from typing import Optional

from fileserver.domain.http_dates import format_http_date
from fileserver.domain.http_types import HttpResponse, RequestError, new_headers

SERVER_NAME = "fileserver"

INVALID_IF_MODIFIED_SINCE = "Invalid 'If-Modified-Since' header format"


def stamp_headers(response: HttpResponse, now: Optional[datetime] = None) -> HttpResponse:
    """Set the Date and Server headers every response carries."""
    response.headers["Date"] = format_http_date(now)
    response.headers["Server"] = SERVER_NAME
    return response


def error_response(
    status: HTTPStatus, message: str, now: Optional[datetime] = None
) -> HttpResponse:
    """Return a response whose body is an HTML page describing ``message``."""
    return stamp_headers(
        HttpResponse(status, new_headers(), b"", error_message=message), now
    )


def request_error_response(
    error: RequestError, now: Optional[datetime] = None
) -> HttpResponse:
    """Produce the response for a request the parser rejected."""
    return error_response(error.status, error.message, now)


def not_implemented_response(
    method: str, now: Optional[datetime] = None
) -> HttpResponse:
    return error_response(
        HTTPStatus.NOT_IMPLEMENTED, f"Unsupported HTTP method: {method}", now
    )


def not_found_response(path: str, now: Optional[datetime] = None) -> HttpResponse:
    return error_response(HTTPStatus.NOT_FOUND, f"File not found: {path}", now)


def bad_conditional_response(now: Optional[datetime] = None) -> HttpResponse:
    return error_response(HTTPStatus.BAD_REQUEST, INVALID_IF_MODIFIED_SINCE, now)


def not_modified_response(now: Optional[datetime] = None) -> HttpResponse:
    """Return a 304 carrying no body and no Content-* headers."""
    return stamp_headers(HttpResponse(HTTPStatus.NOT_MODIFIED), now)
