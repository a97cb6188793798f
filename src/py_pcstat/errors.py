"""Probe errors — one exception per pipeline stage that can fail.

A probe is a strict linear pipeline and stops at the first failing
stage.  The exception raised names that stage, and carries both the
path being probed and the status record as far as it was built, so the
caller can diagnose the failure without probing again.

Platform-level failures (``OSError`` from ``open``, ``stat``, ``ioctl``
or ``mincore``) are chained with ``raise ... from`` so the original
errno stays reachable through ``__cause__``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from py_pcstat.status import PcStatus


class ProbeError(Exception):
    """Base class for every failure of the probe pipeline."""

    def __init__(self, message: str, *, path: str, status: PcStatus | None = None) -> None:
        """Create an error for *path*.

        Args:
            message: Human-readable description of the failure.
            path: The path being probed.
            status: The record as far as it was built when the stage failed.

        """
        super().__init__(message)
        self.path = path
        self.status = status


class OpenError(ProbeError):
    """Raise when the target cannot be opened for reading."""


class FilterRejection(ProbeError):
    """Raise when the caller's filter hook declines the file.

    The hook's own exception is kept as ``reason`` (and as ``__cause__``).
    """

    def __init__(
        self,
        message: str,
        *,
        path: str,
        reason: BaseException,
        status: PcStatus | None = None,
    ) -> None:
        """Create a rejection carrying the hook's error."""
        super().__init__(message, path=path, status=status)
        self.reason = reason


class StatError(ProbeError):
    """Raise when metadata inspection fails after a successful open."""


class DirectoryError(ProbeError):
    """Raise when the target is a directory."""


class DeviceSizeError(ProbeError):
    """Raise when a block device's size cannot be queried."""


class ResidencyProbeError(ProbeError):
    """Raise when the page residency query itself fails."""
