# tests/test_scanner.py
import errno

import pytest

from netdiag.diag import scanner, tcp
from netdiag.diag.models import ServiceEntry
from netdiag.diag.scanner import SERVICE_CATALOG, discover_services
from netdiag.errors import InputError


def test_catalog_is_fixed_and_ordered():
    assert [(e.name, e.port) for e in SERVICE_CATALOG] == [
        ("SSH", 22), ("Telnet", 23), ("SMTP", 25), ("DNS", 53), ("HTTP", 80),
        ("POP3", 110), ("IMAP", 143), ("HTTPS", 443), ("MySQL", 3306),
        ("PostgreSQL", 5432), ("Redis", 6379), ("RDP", 3389), ("MongoDB", 27017),
    ]


def test_discover_services_one_result_per_entry():
    results = discover_services("127.0.0.1", 1)

    assert len(results) == 13
    assert [(r.name, r.port) for r in results] == [(e.name, e.port) for e in SERVICE_CATALOG]
    assert len({r.port for r in results}) == 13


def test_discover_services_classifies_open_and_closed(listener, closed_port):
    catalog = (ServiceEntry("Listener", listener), ServiceEntry("Nothing", closed_port))

    results = discover_services("127.0.0.1", 2, catalog=catalog)

    assert [r.name for r in results] == ["Listener", "Nothing"]
    assert results[0].open is True
    assert results[1].open is False
    assert results[1].reason


def test_discover_services_single_shared_wait(monkeypatch, listener):
    waits = []

    def counting(sockets, timeout):
        waits.append((len(sockets), timeout))
        return tcp.wait_writable(sockets, timeout)

    monkeypatch.setattr(scanner, "wait_writable", counting)
    catalog = tuple(ServiceEntry(f"svc{i}", listener) for i in range(5))

    results = discover_services("127.0.0.1", 2, catalog=catalog)

    assert len(waits) == 1
    assert waits[0][1] == 2
    assert all(r.open for r in results)


def test_discover_services_deadline_marks_filtered(monkeypatch, listener):
    monkeypatch.setattr(scanner, "wait_writable", lambda sockets, t: set())

    results = discover_services("127.0.0.1", 1, catalog=(ServiceEntry("Listener", listener),))

    assert results[0].open is False
    assert results[0].reason == "filtered"


def test_discover_services_releases_every_socket(monkeypatch, listener, closed_port):
    opened = []
    real = scanner.start_connect

    def recording(address, port):
        sock, err = real(address, port)
        opened.append(sock)
        return sock, err

    monkeypatch.setattr(scanner, "start_connect", recording)
    catalog = (ServiceEntry("a", listener), ServiceEntry("b", closed_port))

    discover_services("127.0.0.1", 1, catalog=catalog)

    assert len(opened) == 2
    assert all(s.fileno() == -1 for s in opened)


@pytest.mark.parametrize("address,timeout", [("nope", 1), ("127.0.0.1", 0)])
def test_discover_services_validates_before_io(monkeypatch, address, timeout):
    monkeypatch.setattr(scanner, "start_connect", lambda *a: pytest.fail("socket opened"))
    with pytest.raises(InputError):
        discover_services(address, timeout)


@pytest.mark.parametrize("timeout", [float("nan"), float("inf"), 10**12])
def test_discover_services_rejects_unusable_timeout(monkeypatch, timeout):
    monkeypatch.setattr(scanner, "start_connect", lambda *a: pytest.fail("socket opened"))
    with pytest.raises(InputError):
        discover_services("127.0.0.1", timeout)


def test_discover_services_wait_failure_is_the_reason(monkeypatch, listener):
    def broken(sockets, timeout):
        raise OSError(errno.EBADF, "Bad file descriptor")

    monkeypatch.setattr(scanner, "wait_writable", broken)
    catalog = tuple(ServiceEntry(f"svc{i}", listener) for i in range(3))

    results = discover_services("127.0.0.1", 1, catalog=catalog)

    assert [r.open for r in results] == [False, False, False]
    assert all("Bad file descriptor" in r.reason for r in results)
    assert not any(r.reason == "filtered" for r in results)
