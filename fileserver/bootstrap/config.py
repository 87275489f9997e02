"""Server configuration and CLI argument parsing."""

import argparse
import os
from dataclasses import dataclass
from pathlib import Path

MIN_PORT = 1
MAX_PORT = 65535


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value is not None else default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


DEFAULT_HOST = os.getenv("FILESERVER_HOST", "0.0.0.0")
DEFAULT_MAX_WORKERS = _env_int("FILESERVER_MAX_WORKERS", 32)
DEFAULT_SOCKET_TIMEOUT = _env_int("FILESERVER_SOCKET_TIMEOUT", 30)
DEFAULT_SHUTDOWN_GRACE_SECONDS = _env_int("FILESERVER_SHUTDOWN_GRACE_SECONDS", 10)
DEFAULT_INDEX_FALLBACK = _env_bool("FILESERVER_INDEX_FALLBACK", False)


@dataclass
class ServerConfig:
    """Runtime settings shared by the accept loop and its workers."""

    socket_timeout: int = DEFAULT_SOCKET_TIMEOUT
    shutdown_grace_seconds: int = DEFAULT_SHUTDOWN_GRACE_SECONDS
    max_workers: int = DEFAULT_MAX_WORKERS
    index_fallback: bool = DEFAULT_INDEX_FALLBACK

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "ServerConfig":
        return cls(
            socket_timeout=args.socket_timeout,
            shutdown_grace_seconds=args.shutdown_grace_seconds,
            max_workers=args.max_workers,
            index_fallback=args.index_fallback,
        )


def port_number(value: str) -> int:
    """argparse type accepting TCP ports in the range 1-65535."""
    try:
        port = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid port number: {value!r}") from exc
    if not MIN_PORT <= port <= MAX_PORT:
        raise argparse.ArgumentTypeError(
            f"port must be between {MIN_PORT} and {MAX_PORT}, got {port}"
        )
    return port


def existing_directory(value: str) -> str:
    """argparse type accepting only paths to existing directories."""
    if not Path(value).is_dir():
        raise argparse.ArgumentTypeError(f"not a directory: {value!r}")
    return value


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def parse_cli_args(argv: list[str]) -> argparse.Namespace:
    """Return parsed CLI arguments for server configuration."""
    parser = argparse.ArgumentParser(
        prog="fileserver", description="Serve files from a directory over HTTP/1.1"
    )
    parser.add_argument("port", type=port_number, help="TCP port to listen on")
    parser.add_argument("root", type=existing_directory, help="Document root")
    parser.add_argument("--host", default=DEFAULT_HOST)
    default_log_level = os.getenv("FILESERVER_LOG_LEVEL", "INFO").upper()
    default_destination = os.getenv("FILESERVER_LOG_DESTINATION", "stdout")
    parser.add_argument(
        "--log-level",
        default=default_log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
    )
    parser.add_argument(
        "--log-destination",
        default=default_destination,
        help="stdout or a file path",
    )
    parser.add_argument(
        "--max-workers",
        type=_positive_int,
        default=DEFAULT_MAX_WORKERS,
        help="Worker threads handling connections concurrently",
    )
    parser.add_argument(
        "--socket-timeout",
        type=_positive_int,
        default=DEFAULT_SOCKET_TIMEOUT,
        help="Per-connection read/write timeout in seconds",
    )
    parser.add_argument(
        "--shutdown-grace-seconds",
        type=_positive_int,
        default=DEFAULT_SHUTDOWN_GRACE_SECONDS,
        help="Grace period in seconds for graceful shutdown",
    )
    parser.add_argument(
        "--index-fallback",
        action=argparse.BooleanOptionalAction,
        default=DEFAULT_INDEX_FALLBACK,
        help="Serve <dir>/index.html when a directory is requested",
    )
    args = parser.parse_args(argv)
    # environment-sourced defaults bypass the argparse type check
    for option in ("max_workers", "socket_timeout", "shutdown_grace_seconds"):
        if getattr(args, option) < 1:
            flag = "--" + option.replace("_", "-")
            parser.error(f"argument {flag}: must be at least 1")
    return args
