"""Filesystem sandbox utilities for safe path resolution."""

import urllib.parse
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

INDEX_DOCUMENT = "index.html"


class PathNotFound(Exception):
    """Raised when a requested path is missing, not a file, or escapes the root."""


@dataclass(frozen=True)
class ResolvedFile:
    """A regular file inside the document root."""

    path: Path
    size: int
    modified: datetime

    @property
    def name(self) -> str:
        return self.path.name


def _request_path(target: str) -> str:
    # a leading "//" is part of the path, never a network location
    path = target.split("?", 1)[0].split("#", 1)[0]
    return urllib.parse.unquote(path)


def _contained(root: Path, candidate: Path) -> bool:
    return candidate == root or root in candidate.parents


def resolve_sandbox_path(
    directory: str, target: str, index_fallback: bool = False
) -> ResolvedFile:
    """Resolve a request target to a regular file beneath ``directory``.

    Raises :class:`PathNotFound` for anything that cannot be served, including
    targets whose canonical form lies outside the canonical root.
    """
    user_path = _request_path(target)
    if "\x00" in user_path:
        raise PathNotFound(target)

    directory_root = Path(directory).resolve()
    try:
        candidate = (directory_root / user_path.lstrip("/")).resolve()
        if not _contained(directory_root, candidate):
            raise PathNotFound(target)

        if candidate.is_dir() and index_fallback:
            candidate = (candidate / INDEX_DOCUMENT).resolve()
            if not _contained(directory_root, candidate):
                raise PathNotFound(target)

        if not candidate.is_file():
            raise PathNotFound(target)
        stat_result = candidate.stat()
    except (OSError, RuntimeError) as exc:
        # symlink loops and files vanishing between checks
        raise PathNotFound(target) from exc

    return ResolvedFile(
        path=candidate,
        size=stat_result.st_size,
        modified=datetime.fromtimestamp(stat_result.st_mtime, tz=timezone.utc),
    )
