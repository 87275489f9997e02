"""File serving handler."""

import logging
from datetime import datetime
from http import HTTPStatus
from typing import Optional

from fileserver.domain.content_types import content_type_for
from fileserver.domain.correlation_id import get_logger
from fileserver.domain.http_dates import (
    HttpDateError,
    format_http_date,
    parse_http_date,
    to_epoch_seconds,
)
from fileserver.domain.http_types import SUPPORTED_METHODS, HttpRequest, HttpResponse
from fileserver.domain.response_builders import (
    bad_conditional_response,
    not_found_response,
    not_implemented_response,
    not_modified_response,
    stamp_headers,
)
from fileserver.domain.sandbox import PathNotFound, ResolvedFile, resolve_sandbox_path

FILE_LOGGER = get_logger("handlers.file")


def _is_not_modified(if_modified_since: str, resolved: ResolvedFile) -> bool:
    """Compare a conditional date against the file's mtime at second resolution.

    Raises HttpDateError when the header cannot be parsed.
    """
    since = parse_http_date(if_modified_since)
    return to_epoch_seconds(since) >= to_epoch_seconds(resolved.modified)


def _ok_response(
    request: HttpRequest, resolved: ResolvedFile, now: Optional[datetime]
) -> HttpResponse:
    response = HttpResponse(HTTPStatus.OK)
    if request.is_head:
        content_length = resolved.size
    else:
        response.body = resolved.path.read_bytes()
        content_length = len(response.body)
    response.headers["Content-Length"] = str(content_length)
    response.headers["Last-Modified"] = format_http_date(resolved.modified)
    response.headers["Content-Type"] = content_type_for(resolved.name)
    FILE_LOGGER.info(
        "File served",
        extra={
            "event": "file_served",
            "path": resolved.path.as_posix(),
            "method": request.method,
            "bytes_out": content_length,
        },
    )
    return stamp_headers(response, now)


def file_response(
    request: HttpRequest,
    directory: str,
    index_fallback: bool = False,
    now: Optional[datetime] = None,
) -> HttpResponse:
    """Decide the response for a well-formed request.

    Checks run in a fixed order: unsupported method (501), missing file
    (404), conditional date (400 or 304), then the file itself (200).
    """
    if request.method not in SUPPORTED_METHODS:
        FILE_LOGGER.warning(
            "Unsupported method",
            extra={"event": "unsupported_method", "method": request.method},
        )
        return not_implemented_response(request.method, now)

    try:
        resolved = resolve_sandbox_path(directory, request.path, index_fallback)
    except PathNotFound:
        FILE_LOGGER.info(
            "File not found",
            extra={
                "event": "file_not_found",
                "route": request.path,
                "method": request.method,
            },
        )
        return not_found_response(request.path, now)

    if_modified_since = request.headers.get("If-Modified-Since")
    if if_modified_since:
        try:
            not_modified = _is_not_modified(if_modified_since, resolved)
        except HttpDateError:
            FILE_LOGGER.info(
                "Invalid conditional date",
                extra={"event": "invalid_conditional_date", "route": request.path},
            )
            return bad_conditional_response(now)
        if not_modified:
            if FILE_LOGGER.logger.isEnabledFor(logging.DEBUG):
                FILE_LOGGER.debug(
                    "File not modified",
                    extra={"event": "not_modified", "path": resolved.path.as_posix()},
                )
            return not_modified_response(now)

    return _ok_response(request, resolved, now)
