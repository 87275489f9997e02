"""Static file server entry point."""

import signal
import sys

from fileserver.bootstrap.config import ServerConfig, parse_cli_args
from fileserver.bootstrap.logging_setup import configure_logging
from fileserver.domain.correlation_id import get_logger
from fileserver.lifecycle.state import ServerLifecycle
from fileserver.transport.accept_loop import run_server

SERVER_LOGGER = get_logger("server")


def main(argv: list[str] | None = None) -> None:
    """Parse arguments, configure logging and serve until signalled."""
    args = parse_cli_args(sys.argv[1:] if argv is None else argv)
    configure_logging(args.log_level, args.log_destination)

    config = ServerConfig.from_args(args)
    lifecycle = ServerLifecycle()

    def shutdown_handler(signum: int, _frame) -> None:
        SERVER_LOGGER.info("Received shutdown signal", extra={"signal": signum})
        lifecycle.begin_draining()

    signal.signal(signal.SIGTERM, shutdown_handler)
    signal.signal(signal.SIGINT, shutdown_handler)

    SERVER_LOGGER.info(
        "Starting file server",
        extra={
            "host": args.host,
            "port": args.port,
            "directory": args.root,
            "log_destination": args.log_destination,
            "log_level": args.log_level,
            "max_workers": config.max_workers,
            "socket_timeout": config.socket_timeout,
            "shutdown_grace_seconds": config.shutdown_grace_seconds,
            "index_fallback": config.index_fallback,
        },
    )
    run_server(args.host, args.port, args.root, config, lifecycle)


if __name__ == "__main__":
    main()
