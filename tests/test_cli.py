# tests/test_cli.py
import json

from click.testing import CliRunner

from netdiag.cli import main
from netdiag.diag import cli as diag_cli
from netdiag.diag import core
from netdiag.diag.models import EchoAttempt, PingResult, ServiceResult
from netdiag.errors import PrivilegeError


def _run(*args):
    return CliRunner().invoke(main, ["--no-color", *args])


def test_tcp_json_open(listener):
    result = _run("tcp", "127.0.0.1", str(listener), "--json-output")

    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["open"] is True
    assert data["port"] == listener


def test_tcp_closed_exits_nonzero(closed_port):
    result = _run("tcp", "127.0.0.1", str(closed_port))

    assert result.exit_code == 1
    assert "CLOSED" in result.output


def test_tcp_bad_address_reports_error():
    result = _run("tcp", "999.0.0.1", "22")

    assert result.exit_code == 1
    assert "ERROR" in result.output


def test_tcp_huge_timeout_reports_error(listener):
    result = _run("tcp", "127.0.0.1", str(listener), "-t", "1000000000000")

    assert result.exit_code == 1
    assert "ERROR" in result.output


def test_ping_privilege_error_exit_code(monkeypatch):
    def denied(address, count, timeout):
        raise PrivilegeError("Raw ICMP socket requires root privileges (or CAP_NET_RAW)")

    monkeypatch.setattr(diag_cli, "icmp_ping", denied)

    result = _run("ping", "192.0.2.1")

    assert result.exit_code == 2
    assert "root" in result.output


def test_ping_channel_error_reported(monkeypatch):
    def unsupported(address, count, timeout):
        raise OSError(93, "Protocol not supported")

    monkeypatch.setattr(diag_cli, "icmp_ping", unsupported)

    result = _run("ping", "192.0.2.1")

    assert result.exit_code == 1
    assert "ICMP unavailable" in result.output
    assert "Protocol not supported" in result.output


def test_ping_channel_error_json(monkeypatch):
    def unsupported(address, count, timeout):
        raise OSError(93, "Protocol not supported")

    monkeypatch.setattr(diag_cli, "icmp_ping", unsupported)

    result = _run("ping", "192.0.2.1", "--json-output")

    assert result.exit_code == 1
    data = json.loads(result.output)
    assert data["reachable"] is False
    assert data["error"].startswith("ICMP unavailable")


def test_ping_uses_config_defaults(monkeypatch):
    seen = {}

    def fake_ping(address, count, timeout):
        seen.update(count=count, timeout=timeout)
        return PingResult(host=address, attempts=[
            EchoAttempt(i, sent_at=0.0, received_at=0.002, latency_ms=2) for i in range(count)
        ])

    monkeypatch.setattr(diag_cli, "icmp_ping", fake_ping)

    result = _run("ping", "192.0.2.1")

    assert result.exit_code == 0, result.output
    assert seen == {"count": 4, "timeout": 5}
    assert "0.0%" in result.output


def test_ping_invalid_address():
    result = _run("ping", "example.com")
    assert result.exit_code == 1
    assert "Invalid IPv4 address" in result.output


def test_discover_json_lists_catalog(monkeypatch):
    monkeypatch.setattr(
        diag_cli, "discover_services",
        lambda address, timeout: [ServiceResult("SSH", 22, open=True), ServiceResult("Telnet", 23, open=False)],
    )

    result = _run("discover", "192.0.2.1", "--json-output")

    assert result.exit_code == 0, result.output
    assert [r["name"] for r in json.loads(result.output)] == ["SSH", "Telnet"]


def test_diagnose_without_privilege(monkeypatch):
    def denied(address, count, timeout):
        raise PrivilegeError("Raw ICMP socket requires root privileges (or CAP_NET_RAW)")

    monkeypatch.setattr(core, "icmp_ping", denied)
    monkeypatch.setattr(core, "discover_services", lambda a, t: [ServiceResult("SSH", 22, open=True)])

    result = _run("diagnose", "192.0.2.1", "--json-output")

    assert result.exit_code == 1
    data = json.loads(result.output)
    assert data["overall_reachable"] is False
    assert data["scan_result"][0]["open"] is True


def test_diagnose_table_output(monkeypatch):
    monkeypatch.setattr(core, "icmp_ping", lambda a, c, t: PingResult(host=a, attempts=[
        EchoAttempt(0, sent_at=0.0, received_at=0.004, latency_ms=4)
    ]))
    monkeypatch.setattr(core, "discover_services", lambda a, t: [ServiceResult("HTTPS", 443, open=True)])

    result = _run("diagnose", "192.0.2.1")

    assert result.exit_code == 0, result.output
    assert "is reachable" in result.output
    assert "HTTPS" in result.output
