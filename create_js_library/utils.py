"""Shared utility functions for create-js-library.

Provides async command execution, JSON manifest I/O, and Rich-based progress
reporting.  All user-visible output goes through the module-level ``console``
so that tests can capture or silence it in one place.
"""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.rule import Rule
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: float | None = None,
    capture: bool = True,
) -> tuple[int, str, str]:
    """Spawn *cmd* and wait for it.

    The child runs in *cwd* when given; this process never changes its own
    working directory.  With ``capture=False`` the child writes straight to
    the terminal and both returned strings are empty.

    Returns:
        ``(returncode, stdout, stderr)``.  A process killed after *timeout*
        seconds reports ``-1``.

    Raises:
        FileNotFoundError: If the program does not exist.
        PermissionError: If the program is not executable.
    """
    pipe = asyncio.subprocess.PIPE if capture else None
    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=pipe,
        stderr=pipe,
        cwd=None if cwd is None else str(cwd),
    )

    try:
        out, err = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return -1, "", f"Command timed out after {timeout}s: {' '.join(cmd)}"

    return process.returncode or 0, _decode(out), _decode(err)


def _decode(stream: bytes | None) -> str:
    return stream.decode("utf-8", errors="replace").strip() if stream else ""


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> dict[str, Any]:
    """Load and parse a JSON file that must contain an object.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the top-level value is not an object.
    """
    raw = Path(path).read_text(encoding="utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {path}, got {type(data).__name__}")
    return data


def dump_manifest(data: dict[str, Any]) -> str:
    """Serialise a manifest the way npm tooling writes ``package.json``.

    Two-space indentation, non-ASCII left as-is, and a platform line
    terminator at the end.
    """
    return json.dumps(data, indent=2, ensure_ascii=False) + os.linesep


def write_manifest(data: dict[str, Any], path: str | Path) -> None:
    """Write *data* to *path* with :func:`dump_manifest` formatting."""
    # newline="" keeps os.linesep from being translated a second time
    with open(path, "w", encoding="utf-8", newline="") as fh:
        fh.write(dump_manifest(data))


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Render an elapsed time: ``3.7s``, ``1m 5s`` or ``1h 1m 1s``."""
    if seconds < 60:
        return f"{max(seconds, 0.0):.1f}s"
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    return f"{minutes}m {secs}s"


# ---------------------------------------------------------------------------
# Console output
# ---------------------------------------------------------------------------


def print_phase_header(name: str) -> None:
    """Announce a step of the bootstrap with a horizontal rule."""
    console.print()
    console.print(Rule(f"[bold cyan]{name}[/bold cyan]", style="cyan"))


def print_summary_table(rows: dict[str, str], title: str = "Summary") -> None:
    table = Table(title=title, show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold")
    table.add_column()
    for label, value in rows.items():
        table.add_row(label, value)
    console.print()
    console.print(table)


def _styled(style: str, message: str) -> None:
    console.print(f"[{style}]{message}[/{style}]")


def print_success(message: str) -> None:
    _styled("green", message)


def print_error(message: str) -> None:
    _styled("bold red", message)


def print_warning(message: str) -> None:
    _styled("yellow", message)
