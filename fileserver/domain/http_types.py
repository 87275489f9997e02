"""Shared HTTP type definitions to avoid circular imports."""

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Optional

from requests.structures import CaseInsensitiveDict

HTTP_VERSION = "HTTP/1.1"
SUPPORTED_METHODS = frozenset({"GET", "HEAD"})


def new_headers() -> CaseInsensitiveDict:
    """Return an empty header map with case-insensitive, last-write-wins keys."""
    return CaseInsensitiveDict()


@dataclass(frozen=True)
class RequestError:
    """Status and message describing why a request could not be parsed."""

    code: int
    reason: str
    message: str

    @property
    def status(self) -> HTTPStatus:
        return HTTPStatus(self.code)


MALFORMED_REQUEST_LINE = RequestError(400, "Bad Request", "Invalid request line")
MISSING_HOST_HEADER = RequestError(400, "Bad Request", "Missing 'Host' header")


@dataclass
class HttpRequest:
    """Represents a parsed HTTP request."""

    method: str = ""
    path: str = ""
    version: Optional[str] = None
    headers: CaseInsensitiveDict = field(default_factory=new_headers)
    error: Optional[RequestError] = None

    @property
    def has_error(self) -> bool:
        return self.error is not None

    @property
    def is_head(self) -> bool:
        return self.method == "HEAD"


@dataclass
class HttpResponse:
    """Represents an HTTP response to be sent to a client."""

    status: HTTPStatus
    headers: CaseInsensitiveDict = field(default_factory=new_headers)
    body: bytes = b""
    error_message: Optional[str] = None

    @property
    def status_code(self) -> int:
        return self.status.value

    @property
    def status_line(self) -> str:
        return f"{HTTP_VERSION} {self.status.value} {self.status.phrase}"
