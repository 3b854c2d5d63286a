"""
Configuration management for NetDiag.

Loads probe defaults from environment variables or a .env file.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Check common locations for .env
ENV_LOCATIONS = [
    Path.home() / ".netdiag" / ".env",
    Path.home() / ".config" / "netdiag" / ".env",
    Path.cwd() / ".env",
]


def load_env_file() -> Path | None:
    """Load the first .env file found. Returns its path, if any."""
    for env_path in ENV_LOCATIONS:
        if env_path.exists():
            load_dotenv(env_path)
            return env_path
    return None


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: not an integer, using {default}")
        return default
    if value < 1:
        logger.warning(f"Ignoring {name}={value}: must be at least 1, using {default}")
        return default
    return value


@dataclass
class DiagConfig:
    """Probe defaults."""

    # Single-probe defaults
    tcp_timeout: int = 5
    ping_count: int = 4
    ping_timeout: int = 5
    scan_timeout: int = 3

    # Comprehensive diagnostics
    diagnose_ping_count: int = 3
    diagnose_ping_timeout: int = 5
    diagnose_scan_timeout: int = 3

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "DiagConfig":
        """Load configuration from environment variables."""
        return cls(
            tcp_timeout=_env_int("NETDIAG_TCP_TIMEOUT", 5),
            ping_count=_env_int("NETDIAG_PING_COUNT", 4),
            ping_timeout=_env_int("NETDIAG_PING_TIMEOUT", 5),
            scan_timeout=_env_int("NETDIAG_SCAN_TIMEOUT", 3),
            diagnose_ping_count=_env_int("NETDIAG_DIAGNOSE_PING_COUNT", 3),
            diagnose_ping_timeout=_env_int("NETDIAG_DIAGNOSE_PING_TIMEOUT", 5),
            diagnose_scan_timeout=_env_int("NETDIAG_DIAGNOSE_SCAN_TIMEOUT", 3),
            log_level=os.getenv("NETDIAG_LOG_LEVEL", "INFO").upper(),
        )


# Global config instance
_config: DiagConfig | None = None


def get_config() -> DiagConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        load_env_file()
        _config = DiagConfig.from_env()
    return _config


def set_config(config: DiagConfig | None) -> None:
    """Set the global configuration instance (None forces a reload)."""
    global _config
    _config = config
