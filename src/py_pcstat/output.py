"""Render status records for humans and machines.

All functions here are pure: they take records and return a string, so
the CLI and the web app can share them and tests can check them
without capturing output.

- ``format_table`` — boxed table for terminals.
- ``format_terse`` — CSV, one record per line.
- ``format_json`` — a JSON array of serialized records.
"""

import json
import os
from collections.abc import Iterable, Sequence
from dataclasses import replace
from enum import StrEnum

from py_pcstat.status import PcStatus

_TABLE_COLUMNS = ("Name", "Size (bytes)", "Pages", "Cached", "Percent")
_TERSE_HEADER = "name,size,timestamp,mtime,pages,cached,percent"


class OutputFormat(StrEnum):
    """Supported output formats."""

    TABLE = "table"
    TERSE = "terse"
    JSON = "json"


def with_basenames(statuses: Iterable[PcStatus]) -> list[PcStatus]:
    """Return copies of *statuses* named by their final path component."""
    return [replace(s, name=os.path.basename(s.name)) for s in statuses]


def _percent(status: PcStatus) -> str:
    return f"{status.percent:07.3f}"


def format_table(statuses: Sequence[PcStatus], *, header: bool = True) -> str:
    """Format records as a boxed table.

    Args:
        statuses: Records to show, in order.
        header: Whether to include the column titles.

    Returns:
        The table, without a trailing newline.

    """
    rows = [
        (s.name, str(s.size), str(s.pages), str(s.cached), _percent(s)) for s in statuses
    ]
    widths = [
        max([len(title)] + [len(row[i]) for row in rows])
        for i, title in enumerate(_TABLE_COLUMNS)
    ]

    def line(cells: Sequence[str]) -> str:
        padded = (cell.ljust(width) for cell, width in zip(cells, widths, strict=True))
        return "| " + " | ".join(padded) + " |"

    border = "+" + "+".join("-" * (w + 2) for w in widths) + "+"
    out = [border]
    if header:
        out.append(line(_TABLE_COLUMNS))
        out.append("|" + "+".join("-" * (w + 2) for w in widths) + "|")
    out.extend(line(row) for row in rows)
    out.append(border)
    return "\n".join(out)


def _epoch(status: PcStatus, field: str) -> str:
    moment = getattr(status, field)
    return str(int(moment.timestamp())) if moment is not None else "0"


def format_terse(statuses: Sequence[PcStatus], *, header: bool = True) -> str:
    """Format records as CSV with Unix-epoch timestamps.

    Args:
        statuses: Records to show, in order.
        header: Whether to start with a header line.

    Returns:
        The CSV text, without a trailing newline.

    """
    out = [_TERSE_HEADER] if header else []
    out.extend(
        ",".join(
            [
                s.name,
                str(s.size),
                _epoch(s, "timestamp"),
                _epoch(s, "mtime"),
                str(s.pages),
                str(s.cached),
                f"{s.percent:.3f}",
            ]
        )
        for s in statuses
    )
    return "\n".join(out)


def format_json(statuses: Sequence[PcStatus]) -> str:
    """Format records as a JSON array."""
    return json.dumps([s.to_dict() for s in statuses])


def render(statuses: Sequence[PcStatus], fmt: OutputFormat, *, header: bool = True) -> str:
    """Format *statuses* in the requested format."""
    if fmt is OutputFormat.JSON:
        return format_json(statuses)
    if fmt is OutputFormat.TERSE:
        return format_terse(statuses, header=header)
    return format_table(statuses, header=header)
