"""Context object shared across worker threads."""

from dataclasses import dataclass, field

from fileserver.bootstrap.config import ServerConfig


@dataclass(frozen=True)
class WorkerContext:
    """Read-only dependencies handed to every connection handler."""

    directory: str
    config: ServerConfig = field(default_factory=ServerConfig)
