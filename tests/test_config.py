# tests/test_config.py
import logging
import sys

import pytest

from netdiag.config import DiagConfig, get_config, set_config
from netdiag.logging_config import get_error_stats, setup_logging, track_error


def test_defaults_match_fixed_constants():
    config = DiagConfig()
    assert (config.tcp_timeout, config.ping_count, config.ping_timeout, config.scan_timeout) == (5, 4, 5, 3)
    assert (config.diagnose_ping_count, config.diagnose_ping_timeout, config.diagnose_scan_timeout) == (3, 5, 3)


def test_from_env_overrides(monkeypatch):
    monkeypatch.setenv("NETDIAG_PING_COUNT", "10")
    monkeypatch.setenv("NETDIAG_DIAGNOSE_SCAN_TIMEOUT", "1")
    monkeypatch.setenv("NETDIAG_LOG_LEVEL", "debug")

    config = DiagConfig.from_env()

    assert config.ping_count == 10
    assert config.diagnose_scan_timeout == 1
    assert config.log_level == "DEBUG"
    assert config.tcp_timeout == 5


def test_from_env_ignores_malformed_values(monkeypatch):
    monkeypatch.setenv("NETDIAG_TCP_TIMEOUT", "soon")
    assert DiagConfig.from_env().tcp_timeout == 5


@pytest.mark.parametrize("raw", ["0", "-3"])
def test_from_env_ignores_non_positive_values(monkeypatch, raw):
    monkeypatch.setenv("NETDIAG_TCP_TIMEOUT", raw)
    monkeypatch.setenv("NETDIAG_DIAGNOSE_SCAN_TIMEOUT", raw)

    config = DiagConfig.from_env()

    assert config.tcp_timeout == 5
    assert config.diagnose_scan_timeout == 3


def test_set_config_replaces_global():
    custom = DiagConfig(scan_timeout=9)
    set_config(custom)
    assert get_config() is custom


def test_track_error_counts_by_type():
    track_error("tcp_refused", "Connection refused")
    track_error("tcp_refused", "Connection refused")
    track_error("icmp_timeout", "seq=0")

    assert get_error_stats() == {"tcp_refused": 2, "icmp_timeout": 1}


def test_setup_logging_file_handler(tmp_path):
    log_file = tmp_path / "logs" / "netdiag.log"

    logger = setup_logging(level="DEBUG", log_file=str(log_file), enable_console=False)
    logging.getLogger("netdiag.test").debug("scan started")
    for handler in logger.handlers:
        handler.flush()

    assert "scan started" in log_file.read_text()
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_setup_logging_without_file_is_stderr_only(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))

    logger = setup_logging(level="INFO")

    try:
        assert [type(h) for h in logger.handlers] == [logging.StreamHandler]
        assert logger.handlers[0].stream is sys.stderr
        assert not any(tmp_path.iterdir())
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)


def test_setup_logging_unknown_level_falls_back_to_info():
    logger = setup_logging(level="chatty", enable_console=False)
    assert logger.level == logging.INFO
    assert logger.handlers == []
