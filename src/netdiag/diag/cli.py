"""
Diagnostics CLI commands.
"""

import json

import click
from rich.console import Console
from rich.table import Table

from netdiag.config import get_config
from netdiag.diag.core import diagnose
from netdiag.diag.icmp import icmp_ping
from netdiag.diag.models import (
    DiagnosticsReport,
    PingResult,
    ProbeOutcome,
    ServiceResult,
    TCPCheckResult,
    format_loss,
)
from netdiag.diag.scanner import discover_services
from netdiag.diag.tcp import tcp_check
from netdiag.errors import InputError, PrivilegeError


def _console(ctx: click.Context) -> Console:
    return ctx.obj["console"]


def _emit_json(data: dict | list) -> None:
    click.echo(json.dumps(data, indent=2))


def _fail(console: Console, message: str, code: int = 1) -> None:
    console.print(f"[bad]Error:[/bad] {message}")
    raise SystemExit(code)


def _loss_style(loss: float) -> str:
    return "ok" if loss == 0 else "warn" if loss < 50 else "bad"


def _ms(value: int | None) -> str:
    return f"{value} ms" if value is not None else "-"


def render_tcp(console: Console, result: TCPCheckResult) -> None:
    table = Table(title=f"TCP Check: {result.host}:{result.port}", show_header=False, box=None)
    table.add_column("Property", style="label")
    table.add_column("Value")

    status_style = {
        ProbeOutcome.OPEN: "ok",
        ProbeOutcome.CLOSED: "bad",
        ProbeOutcome.TIMEOUT: "warn",
        ProbeOutcome.ERROR: "bad",
    }[result.outcome]

    table.add_row("Host", result.host)
    table.add_row("Port", str(result.port))
    table.add_row("Status", f"[{status_style}]{result.outcome.value.upper()}[/{status_style}]")
    if result.latency_ms is not None:
        table.add_row("Latency", _ms(result.latency_ms))
    if result.reason:
        table.add_row("Reason", f"[muted]{result.reason}[/muted]")

    console.print(table)


def render_ping(console: Console, result: PingResult) -> None:
    table = Table(title=f"Ping: {result.host}", show_header=False, box=None)
    table.add_column("Property", style="label")
    table.add_column("Value")

    table.add_row("Host", result.host)
    table.add_row("Packets Sent", str(result.sent))
    table.add_row("Packets Received", str(result.received))

    style = _loss_style(result.loss_percent)
    table.add_row("Packet Loss", f"[{style}]{format_loss(result.loss_percent)}[/{style}]")

    if result.reachable:
        table.add_row("", "")
        table.add_row("Min RTT", _ms(result.min_ms))
        table.add_row("Avg RTT", _ms(result.avg_ms))
        table.add_row("Max RTT", _ms(result.max_ms))

    console.print(table)

    attempts = Table(box=None)
    attempts.add_column("Seq", style="label", width=5)
    attempts.add_column("Result", width=10)
    attempts.add_column("RTT", width=10)
    for attempt in result.attempts:
        if attempt.received:
            attempts.add_row(str(attempt.sequence), "[ok]reply[/ok]", _ms(attempt.latency_ms))
        else:
            attempts.add_row(str(attempt.sequence), f"[bad]{attempt.error or 'lost'}[/bad]", "-")
    console.print(attempts)


def render_services(console: Console, host: str, results: list[ServiceResult]) -> None:
    open_count = sum(1 for r in results if r.open)
    closed_count = len(results) - open_count

    console.print(f"\n[label]Service Discovery for {host}[/label]")
    console.print(f"[ok]Open:[/ok] {open_count}  [bad]Closed/Filtered:[/bad] {closed_count}\n")

    table = Table(box=None)
    table.add_column("Port", style="label", width=8)
    table.add_column("Status", width=18)
    table.add_column("Service", style="muted", width=14)

    for r in results:
        status = "[ok]OPEN[/ok]" if r.open else "[bad]CLOSED/FILTERED[/bad]"
        table.add_row(str(r.port), status, r.name)

    console.print(table)


def render_report(console: Console, report: DiagnosticsReport) -> None:
    console.print(f"[label]Network Diagnostics Report: {report.host}[/label]\n")

    if report.ping_result:
        render_ping(console, report.ping_result)
    else:
        console.print(f"[warn]Ping unavailable:[/warn] {report.ping_error}")

    render_services(console, report.host, report.scan_result)

    if report.overall_reachable:
        console.print(f"\n[ok]Host {report.host} is reachable[/ok]")
    else:
        console.print(f"\n[bad]Host {report.host} did not answer ICMP echo[/bad]")
    if report.open_services:
        names = ", ".join(s.name for s in report.open_services)
        console.print(f"[muted]Open services: {names}[/muted]")


@click.command("tcp")
@click.argument("host")
@click.argument("port", type=int)
@click.option("-t", "--timeout", type=int, default=None, help="Connection timeout in seconds")
@click.option("--json-output", "json_out", is_flag=True, help="Output as JSON")
@click.pass_context
def tcp_cmd(ctx: click.Context, host: str, port: int, timeout: int | None, json_out: bool):
    """Check TCP connectivity to a port.

    Examples:
        netdiag tcp 192.168.1.1 22
        netdiag tcp 10.0.0.5 443 -t 2
    """
    console = _console(ctx)
    if timeout is None:
        timeout = get_config().tcp_timeout

    with console.status(f"[label]Connecting to {host}:{port}...[/label]"):
        result = tcp_check(host, port, timeout)

    if json_out:
        _emit_json(result.to_dict())
    else:
        render_tcp(console, result)

    if not result.open:
        raise SystemExit(1)


@click.command("ping")
@click.argument("host")
@click.option("-c", "--count", type=int, default=None, help="Number of echo requests to send")
@click.option("-t", "--timeout", type=int, default=None, help="Timeout per reply in seconds")
@click.option("--json-output", "json_out", is_flag=True, help="Output as JSON")
@click.pass_context
def ping_cmd(ctx: click.Context, host: str, count: int | None, timeout: int | None, json_out: bool):
    """Send ICMP echo requests (requires root).

    Examples:
        sudo netdiag ping 8.8.8.8
        sudo netdiag ping 1.1.1.1 -c 10 -t 2
    """
    console = _console(ctx)
    config = get_config()
    if count is None:
        count = config.ping_count
    if timeout is None:
        timeout = config.ping_timeout

    try:
        with console.status(f"[label]Pinging {host}...[/label]"):
            result = icmp_ping(host, count, timeout)
    except InputError as e:
        _fail(console, str(e))
    except PrivilegeError as e:
        if json_out:
            _emit_json({"host": host, "reachable": False, "error": str(e)})
            raise SystemExit(2)
        _fail(console, str(e), code=2)
    except OSError as e:
        message = f"ICMP unavailable: {e}"
        if json_out:
            _emit_json({"host": host, "reachable": False, "error": message})
            raise SystemExit(1)
        _fail(console, message)

    if json_out:
        _emit_json(result.to_dict())
    else:
        render_ping(console, result)

    if not result.reachable:
        raise SystemExit(1)


@click.command("discover")
@click.argument("host")
@click.option("-t", "--timeout", type=int, default=None, help="Shared scan deadline in seconds")
@click.option("--json-output", "json_out", is_flag=True, help="Output as JSON")
@click.pass_context
def discover_cmd(ctx: click.Context, host: str, timeout: int | None, json_out: bool):
    """Scan common service ports on a host.

    Examples:
        netdiag discover 192.168.1.1
        netdiag discover 10.0.0.5 -t 1
    """
    console = _console(ctx)
    if timeout is None:
        timeout = get_config().scan_timeout

    try:
        with console.status(f"[label]Scanning services on {host}...[/label]"):
            results = discover_services(host, timeout)
    except InputError as e:
        _fail(console, str(e))

    if json_out:
        _emit_json([r.to_dict() for r in results])
    else:
        render_services(console, host, results)


@click.command("diagnose")
@click.argument("host")
@click.option("--json-output", "json_out", is_flag=True, help="Output as JSON")
@click.pass_context
def diagnose_cmd(ctx: click.Context, host: str, json_out: bool):
    """Run ping and service discovery and summarize reachability.

    Examples:
        sudo netdiag diagnose 8.8.8.8
    """
    console = _console(ctx)

    try:
        with console.status(f"[label]Diagnosing {host}...[/label]"):
            report = diagnose(host, get_config())
    except InputError as e:
        _fail(console, str(e))

    if json_out:
        _emit_json(report.to_dict())
    else:
        render_report(console, report)

    if not report.overall_reachable:
        raise SystemExit(1)


COMMANDS = [tcp_cmd, ping_cmd, discover_cmd, diagnose_cmd]
