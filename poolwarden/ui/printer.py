from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Tuple

from rich import box
from rich.console import Console
from rich.table import Table

from poolwarden.models.outcome import ValidationKind, ValidationOutcome, ValidationReport
from poolwarden.ui import __version__


# ---------- Helpers ----------

def _iso_utc_now_seconds() -> str:
    """UTC ISO 8601, second precision, with Z suffix."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def _fmt_seconds(seconds: Optional[float]) -> str:
    if seconds is None:
        return "-"
    s = float(seconds)
    if s >= 60 and s % 60 == 0:
        return f"{int(s // 60)}m"
    return f"{s:.0f}s"


def _kind_style(kind: ValidationKind) -> str:
    if kind in (ValidationKind.POOL_OK, ValidationKind.MOVED, ValidationKind.TAG_OK):
        return "bold green"
    if kind == ValidationKind.INVALID_ACCOUNT:
        return "bold cyan"
    if kind == ValidationKind.ERROR:
        return "bold yellow"
    return "bold red"


def category_for(outcome: Optional[ValidationOutcome]) -> str:
    """
    Buckets the final outcome for humans and for exit codes.
    """
    if outcome is None:
        return "infra_error"
    if outcome.kind == ValidationKind.ERROR:
        return "infra_error"
    if outcome.kind == ValidationKind.INVALID_ACCOUNT:
        return "out_of_scope"
    if outcome.is_violation:
        return "policy_violation"
    return "compliant"


def _kv_pairs(details: Dict[str, Any]) -> Iterable[Tuple[str, str]]:
    for k in sorted(details.keys()):
        v = details[k]
        if isinstance(v, dict):
            parts = [f"{kk}={v[kk]}" for kk in sorted(v.keys())]
            yield k, ", ".join(parts) if parts else "-"
        elif isinstance(v, list):
            yield k, ", ".join(map(str, v)) if v else "-"
        else:
            yield k, str(v)


def _divider(console: Console, title: Optional[str] = None) -> None:
    """
    Subtle section divider that adapts to terminal width.
    """
    width = console.size.width if console.is_terminal else 80
    width = max(40, width)

    if title:
        label = f" {title.strip().upper()} "
        left = "─" * 6
        right = "─" * max(0, width - len(left) - len(label))
        console.print(f"[dim]{left}{label}{right}[/dim]")
    else:
        console.print(f"[dim]{'─' * width}[/dim]")


# ---------- UI ----------

def print_report(report: ValidationReport, *, verbose: bool = False, console: Optional[Console] = None) -> None:
    """
    CLI output for one reconciliation: every stage outcome, then the requeue decision.
    """
    console = console or Console(highlight=False)

    console.print(f"POOL WARDEN [dim]v{__version__}[/dim]", style="bold green")
    console.print("account placement & ownership validation", style="bold cyan")
    console.print("")

    _divider(console, "CONTEXT")
    console.print(f" • Evaluated At: [dim]{_iso_utc_now_seconds()}[/dim]")
    console.print(f" • Account:      [yellow]{report.account_ref}[/yellow]")
    console.print(f" • AWS Account:  [yellow]{report.aws_account_id or '-'}[/yellow]\n")

    _divider(console, "OUTCOMES")
    table = Table(
        box=box.SQUARE if console.is_terminal else box.SIMPLE,
        show_header=True,
        header_style="bold white",
        border_style="dim",
        expand=True,
    )
    table.add_column("STAGE", ratio=1, no_wrap=True)
    table.add_column("RESULT", justify="center", ratio=1, no_wrap=True)
    table.add_column("MESSAGE", ratio=4, no_wrap=False)

    for idx, outcome in enumerate(report.outcomes, start=1):
        style = _kind_style(outcome.kind)
        table.add_row(str(idx), f"[{style}]{outcome.kind.value.upper()}[/{style}]", outcome.message or "-")

    console.print(table)
    console.print("")

    if verbose:
        for outcome in report.outcomes:
            if not outcome.details:
                continue
            _divider(console, f"{outcome.kind.value} context")
            ev_table = Table(box=box.SIMPLE, show_header=False, expand=True)
            ev_table.add_column("KEY", ratio=1, no_wrap=True, style="white")
            ev_table.add_column("VALUE", ratio=4, style="dim")
            for k, v in _kv_pairs(outcome.details):
                ev_table.add_row(k, v)
            console.print(ev_table)

    _divider(console, "DECISION")
    if report.result.requeue:
        console.print(f"[black on yellow] REQUEUE after {_fmt_seconds(report.result.requeue_after)} [/black on yellow]")
    else:
        console.print("[black on green] DO NOT REQUEUE [/black on green]")
    console.print(f"[dim]Category:[/dim] {category_for(report.final)}\n")
