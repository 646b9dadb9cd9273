from __future__ import annotations

import os
import socket
import threading
import time

import pytest
import uvicorn

from networker import Client
from test_server.app import app

# keep libcurl away from any proxy configured in the environment
os.environ["NO_PROXY"] = ",".join(
    filter(None, [os.environ.get("NO_PROXY"), "127.0.0.1", "localhost"])
)
os.environ["no_proxy"] = os.environ["NO_PROXY"]


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


# ---------------------------------------------------------------------------
# Echo server: one uvicorn instance for the whole run, in a daemon thread
# ---------------------------------------------------------------------------
@pytest.fixture(scope="session")
def base_url() -> str:
    port = _free_port()
    server = uvicorn.Server(
        uvicorn.Config(app, host="127.0.0.1", port=port, log_level="warning")
    )
    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()

    deadline = time.monotonic() + 10
    while not server.started:
        if time.monotonic() > deadline:
            raise RuntimeError("echo server did not start")
        time.sleep(0.05)

    yield f"http://127.0.0.1:{port}"

    server.should_exit = True
    thread.join(timeout=5)


@pytest.fixture
def client() -> Client:
    c = Client()
    yield c
    c.close()


@pytest.fixture
def closed_port_url() -> str:
    """A URL nothing listens on."""
    return f"http://127.0.0.1:{_free_port()}/nothing"
