"""Page cache status records.

A ``PcStatus`` is a point-in-time snapshot of how much of one file sits
in the kernel's page cache.  It is built fresh on every probe, in one
pass, and never changes afterwards:

- **name / size / mtime** come from the file itself.
- **timestamp** is taken immediately before the residency probe.
- **pages / cached / uncached / percent** come from the residency report.

The record never owns the file it describes; the handle used to probe
it is closed before the record reaches the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from py_pcstat.platform.residency import ResidencyReport

_PERCENT = 100.0


@dataclass(frozen=True)
class PcStatus:
    """Describe the page cache residency of one file.

    Frozen so that a snapshot cannot drift from what was observed.
    Stages of the probe pipeline build the record step by step with
    ``dataclasses.replace``.
    """

    name: str
    """Path exactly as given by the caller."""

    size: int = 0
    """Resolved byte length (device capacity for block devices)."""

    timestamp: datetime | None = None
    """Time immediately before the residency probe."""

    mtime: datetime | None = None
    """Last modification time of the target at stat time."""

    pages: int = 0
    """Total pages covering ``size``."""

    cached: int = 0
    """Pages currently resident in the page cache."""

    uncached: int = 0
    """Pages not resident in the page cache."""

    percent: float = 0.0
    """Percentage of pages cached (0 when there are no pages)."""

    def to_dict(self) -> dict[str, Any]:
        """Return the record keyed by its serialized field names.

        Timestamps are rendered as RFC 3339 strings, or ``None`` when
        the pipeline never reached the stage that sets them.
        """
        return {
            "filename": self.name,
            "size": self.size,
            "timestamp": _isoformat(self.timestamp),
            "mtime": _isoformat(self.mtime),
            "pages": self.pages,
            "cached": self.cached,
            "uncached": self.uncached,
            "percent": self.percent,
        }


def _isoformat(moment: datetime | None) -> str | None:
    return moment.isoformat() if moment is not None else None


def aggregate(status: PcStatus, report: ResidencyReport | None) -> PcStatus:
    """Merge a residency report into a status record.

    An absent report means there was nothing to probe (a zero-length
    file), so every page counter stays at zero rather than computing
    a zero-over-zero percentage.

    Args:
        status: The record built so far (name, size, timestamps).
        report: Cached and missing page counts, or ``None``.

    Returns:
        A new record with the page counters filled in.

    """
    if report is None:
        return status

    pages = report.cached + report.miss
    percent = (report.cached / pages) * _PERCENT if pages > 0 else 0.0
    return replace(
        status,
        pages=pages,
        cached=report.cached,
        uncached=report.miss,
        percent=percent,
    )
