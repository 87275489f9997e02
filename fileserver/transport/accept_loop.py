"""Main connection acceptance loop."""

import logging
import socket
from concurrent.futures import Executor, ThreadPoolExecutor

from fileserver.bootstrap.config import ServerConfig
from fileserver.bootstrap.socket_factory import create_server_socket
from fileserver.domain.correlation_id import get_logger
from fileserver.lifecycle.state import ServerLifecycle
from fileserver.transport.context import WorkerContext
from fileserver.transport.worker import handle_client

ACCEPT_LOGGER = get_logger("transport.accept")


def dispatch_client(
    executor: Executor,
    lifecycle: ServerLifecycle,
    client_socket: socket.socket,
    client_address: tuple[str, int],
    context: WorkerContext,
) -> None:
    """Hand an accepted connection to the worker pool without waiting on it."""
    if ACCEPT_LOGGER.logger.isEnabledFor(logging.DEBUG):
        ACCEPT_LOGGER.debug(
            "Client connection accepted",
            extra={
                "event": "client_accepted",
                "client": f"{client_address[0]}:{client_address[1]}",
            },
        )
    future = executor.submit(handle_client, client_socket, client_address, context)
    lifecycle.register_worker(future)


def serve_forever(
    server_socket: socket.socket,
    executor: Executor,
    context: WorkerContext,
    lifecycle: ServerLifecycle,
) -> None:
    """Accept connections until the lifecycle asks the loop to stop."""
    while not lifecycle.should_stop():
        try:
            client_socket, client_address = server_socket.accept()
        except socket.timeout:
            continue
        except OSError as error:
            if lifecycle.should_stop():
                break
            ACCEPT_LOGGER.error(
                "Socket accept failed",
                extra={"event": "accept_error", "error_type": type(error).__name__},
            )
            continue
        dispatch_client(executor, lifecycle, client_socket, client_address, context)


def run_server(
    host: str,
    port: int,
    directory: str,
    config: ServerConfig,
    lifecycle: ServerLifecycle,
) -> None:
    """Create the listening socket and serve until shutdown is requested."""
    # pylint: disable=too-many-arguments, too-many-positional-arguments
    server_socket = create_server_socket(host, port)
    context = WorkerContext(directory=directory, config=config)

    ACCEPT_LOGGER.info(
        "Server listening for connections",
        extra={
            "event": "server_listening",
            "host": host,
            "port": port,
            "directory": directory,
            "max_workers": config.max_workers,
        },
    )

    executor = ThreadPoolExecutor(
        max_workers=config.max_workers, thread_name_prefix="fileserver-worker"
    )
    try:
        serve_forever(server_socket, executor, context, lifecycle)
    finally:
        server_socket.close()
        ACCEPT_LOGGER.info(
            "Waiting for active connections to complete",
            extra={
                "event": "shutdown_waiting",
                "active_connections": lifecycle.active_worker_count(),
                "shutdown_grace_seconds": config.shutdown_grace_seconds,
            },
        )
        lifecycle.wait_for_workers(config.shutdown_grace_seconds)
        executor.shutdown(wait=False)
        ACCEPT_LOGGER.info("Server shutdown complete", extra={"event": "server_stopped"})
