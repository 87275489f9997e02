"""Worker logic for handling individual client connections."""

import logging
import socket
from typing import BinaryIO, Optional

from fileserver.domain.correlation_id import (
    clear_correlation_id,
    generate_correlation_id,
    get_logger,
    set_correlation_id,
)
from fileserver.domain.http_types import HttpRequest
from fileserver.domain.response_builders import request_error_response
from fileserver.handlers.file_handler import file_response
from fileserver.pipeline.io import read_request, send_response
from fileserver.transport.context import WorkerContext

WORKER_LOGGER = get_logger("transport.worker")


def _format_client(client_address) -> str:
    return f"{client_address[0]}:{client_address[1]}"


def _receive(stream: BinaryIO, client_addr_str: str) -> Optional[HttpRequest]:
    request = read_request(stream)
    if request is None:
        if WORKER_LOGGER.logger.isEnabledFor(logging.DEBUG):
            WORKER_LOGGER.debug(
                "Client disconnected before sending a request",
                extra={"event": "client_disconnected", "client": client_addr_str},
            )
        return None
    return request


def _respond(
    request: HttpRequest,
    client_socket: socket.socket,
    context: WorkerContext,
    client_addr_str: str,
) -> None:
    if request.error is not None:
        WORKER_LOGGER.warning(
            "Malformed request received",
            extra={
                "event": "request_rejected",
                "client": client_addr_str,
                "status_code": request.error.code,
                "error": request.error.message,
            },
        )
        send_response(client_socket, request_error_response(request.error))
        return

    WORKER_LOGGER.debug(
        "Request line parsed",
        extra={
            "event": "request_line_parsed",
            "method": request.method,
            "route": request.path,
        },
    )
    response = file_response(
        request, context.directory, context.config.index_fallback
    )
    send_response(client_socket, response, include_body=not request.is_head)
    WORKER_LOGGER.info(
        "Request complete",
        extra={
            "event": "request_complete",
            "client": client_addr_str,
            "method": request.method,
            "route": request.path,
            "status_code": response.status_code,
        },
    )


def _close_socket(client_socket: socket.socket, client_addr_str: str) -> None:
    try:
        client_socket.shutdown(socket.SHUT_WR)
    except OSError:
        pass
    client_socket.close()
    WORKER_LOGGER.debug(
        "Socket closed",
        extra={"event": "socket_closed", "client": client_addr_str},
    )


def handle_client(
    client_socket: socket.socket,
    client_address: tuple[str, int],
    context: WorkerContext,
) -> None:
    """Serve a single request on ``client_socket`` and close it.

    Errors are logged here and never reach the accept loop.
    """
    client_addr_str = _format_client(client_address)
    set_correlation_id(generate_correlation_id())
    WORKER_LOGGER.debug(
        "Request processing started",
        extra={"event": "request_started", "client": client_addr_str},
    )

    try:
        client_socket.settimeout(context.config.socket_timeout)
        with client_socket.makefile("rb") as stream:
            request = _receive(stream, client_addr_str)
        if request is not None:
            _respond(request, client_socket, context, client_addr_str)
    except (ConnectionError, TimeoutError, OSError) as error:
        WORKER_LOGGER.error(
            "Error handling client connection",
            extra={
                "event": "connection_error",
                "client": client_addr_str,
                "error_type": type(error).__name__,
            },
        )
    except Exception as error:  # pylint: disable=broad-except
        WORKER_LOGGER.error(
            "Unexpected error in worker",
            extra={
                "event": "worker_error",
                "client": client_addr_str,
                "error_type": type(error).__name__,
                "error": str(error),
            },
            exc_info=True,
        )
    finally:
        _close_socket(client_socket, client_addr_str)
        clear_correlation_id()
