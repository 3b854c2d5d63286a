# tests/conftest.py
import socket

import pytest

from netdiag.config import DiagConfig, set_config
from netdiag.logging_config import reset_error_stats


@pytest.fixture(autouse=True)
def quiet_config():
    """Fixed config (no .env lookup) and clean failure counters for every test."""
    set_config(DiagConfig(log_level="WARNING"))
    reset_error_stats()
    yield
    set_config(None)


@pytest.fixture
def listener():
    """A listening TCP socket on loopback; yields its port."""
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    server.bind(("127.0.0.1", 0))
    server.listen(16)
    try:
        yield server.getsockname()[1]
    finally:
        server.close()


@pytest.fixture
def closed_port():
    """A loopback port with nothing listening on it."""
    probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    return port
