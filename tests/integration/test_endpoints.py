"""Integration tests exercising file serving over HTTP."""

from __future__ import annotations

import os
import time
from email.utils import formatdate
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
import requests

pytestmark = pytest.mark.integration

if TYPE_CHECKING:
    from tests.conftest import ServerProcessInfo

ONE_DAY = 24 * 60 * 60


def _publish(server_process: "ServerProcessInfo", name: str, payload: bytes) -> Path:
    target = Path(server_process["directory"]) / name
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(payload)
    return target


def test_get_returns_exact_file_bytes(
    base_url: str, server_process: "ServerProcessInfo"
) -> None:
    _publish(server_process, "a.txt", b"hi")

    response = requests.get(f"{base_url}/a.txt", timeout=5)

    assert response.status_code == 200
    assert response.content == b"hi"
    assert response.headers["Content-Length"] == "2"
    assert response.headers["Content-Type"] == "text/plain"
    assert response.headers["Server"] == "fileserver"
    assert "Date" in response.headers
    assert "Last-Modified" in response.headers


def test_binary_file_round_trips(
    base_url: str, server_process: "ServerProcessInfo"
) -> None:
    payload = bytes(range(256)) * 512
    _publish(server_process, "nested/blob.bin", payload)

    response = requests.get(f"{base_url}/nested/blob.bin", timeout=5)

    assert response.status_code == 200
    assert response.content == payload
    assert response.headers["Content-Length"] == str(len(payload))


def test_head_matches_get_headers_without_body(
    base_url: str, server_process: "ServerProcessInfo"
) -> None:
    _publish(server_process, "page.html", b"<h1>hello</h1>")

    get_response = requests.get(f"{base_url}/page.html", timeout=5)
    head_response = requests.head(f"{base_url}/page.html", timeout=5)

    assert head_response.status_code == 200
    assert head_response.content == b""
    for name in ("Content-Length", "Content-Type", "Last-Modified", "Server"):
        assert head_response.headers[name] == get_response.headers[name]


def test_if_modified_since_in_future_returns_304(
    base_url: str, server_process: "ServerProcessInfo"
) -> None:
    target = _publish(server_process, "a.txt", b"hi")
    since = formatdate(os.stat(target).st_mtime + ONE_DAY, usegmt=True)

    response = requests.get(
        f"{base_url}/a.txt", headers={"If-Modified-Since": since}, timeout=5
    )

    assert response.status_code == 304
    assert response.content == b""


def test_if_modified_since_in_past_returns_200(
    base_url: str, server_process: "ServerProcessInfo"
) -> None:
    target = _publish(server_process, "a.txt", b"hi")
    since = formatdate(os.stat(target).st_mtime - ONE_DAY, usegmt=True)

    response = requests.get(
        f"{base_url}/a.txt", headers={"If-Modified-Since": since}, timeout=5
    )

    assert response.status_code == 200
    assert response.content == b"hi"


def test_last_modified_round_trips_as_validator(
    base_url: str, server_process: "ServerProcessInfo"
) -> None:
    _publish(server_process, "a.txt", b"hi")
    first = requests.get(f"{base_url}/a.txt", timeout=5)

    second = requests.get(
        f"{base_url}/a.txt",
        headers={"If-Modified-Since": first.headers["Last-Modified"]},
        timeout=5,
    )

    assert second.status_code == 304


def test_invalid_if_modified_since_returns_400(
    base_url: str, server_process: "ServerProcessInfo"
) -> None:
    _publish(server_process, "a.txt", b"hi")

    response = requests.get(
        f"{base_url}/a.txt", headers={"If-Modified-Since": "soon"}, timeout=5
    )

    assert response.status_code == 400
    assert "Invalid &#x27;If-Modified-Since&#x27; header format" in response.text
    assert response.headers["Content-Type"] == "text/html; charset=utf-8"


def test_missing_file_returns_html_404(base_url: str) -> None:
    response = requests.get(f"{base_url}/missing.txt", timeout=5)

    assert response.status_code == 404
    assert "File not found: /missing.txt" in response.text
    assert response.headers["Content-Length"] == str(len(response.content))


def test_post_returns_501(base_url: str, server_process: "ServerProcessInfo") -> None:
    _publish(server_process, "a.txt", b"hi")

    response = requests.post(f"{base_url}/a.txt", timeout=5)

    assert response.status_code == 501
    assert "Unsupported HTTP method: POST" in response.text


def test_directory_is_not_served_by_default(
    base_url: str, server_process: "ServerProcessInfo"
) -> None:
    _publish(server_process, "index.html", b"home")

    assert requests.get(f"{base_url}/", timeout=5).status_code == 404


def test_directory_serves_index_when_enabled(
    index_server_process: "ServerProcessInfo",
) -> None:
    _publish(index_server_process, "docs/index.html", b"docs home")
    base = index_server_process["base_url"]

    response = requests.get(f"{base}/docs/", timeout=5)

    assert response.status_code == 200
    assert response.content == b"docs home"
    assert response.headers["Content-Type"] == "text/html"


def test_updated_file_is_served_fresh(
    base_url: str, server_process: "ServerProcessInfo"
) -> None:
    target = _publish(server_process, "a.txt", b"first")
    assert requests.get(f"{base_url}/a.txt", timeout=5).content == b"first"

    target.write_bytes(b"second version")
    later = time.time() + 5
    os.utime(target, (later, later))

    response = requests.get(f"{base_url}/a.txt", timeout=5)
    assert response.content == b"second version"
