"""The probe pipeline — from a path to a ``PcStatus`` snapshot.

A probe is a strict linear pipeline with no loops or retries::

    Open → Filter → ResolveSize → Stamp → Probe → Aggregate → Return

1. **Open** — ``os.open`` the target read-only and non-blocking, so
   FIFOs reach the filter instead of hanging.
2. **Filter** — run the caller's hook on the open descriptor; a
   rejection stops here, before any stat or residency work.
3. **ResolveSize** — ``fstat`` the handle, refuse directories, and ask
   the size resolver for the byte length (device capacity for block
   devices).
4. **Stamp** — record the modification time and the current time.
5. **Probe** — ask the residency provider about ``[0, size)``.
6. **Aggregate** — fold the page counts into the record.

Any failing stage raises the matching ``ProbeError`` subclass carrying
the record as far as it was built.  The descriptor is closed on every
exit path before control returns to the caller.

Caveat: if the file is truncated or grown between ResolveSize and
Probe, the result is platform-dependent (a short count, or a
``ResidencyProbeError``).  Nothing is re-validated; a probe is a
best-effort snapshot.
"""

import os
import stat
from dataclasses import replace
from datetime import UTC, datetime
from functools import cache

from py_pcstat.errors import (
    DirectoryError,
    FilterRejection,
    OpenError,
    ProbeError,
    ResidencyProbeError,
    StatError,
)
from py_pcstat.filters import Filter, allow_all
from py_pcstat.logging import Logger, LogLevel
from py_pcstat.platform.devsize import DeviceSizeQuery
from py_pcstat.platform.residency import ResidencyProvider, default_residency_provider
from py_pcstat.sizing import SizeResolver
from py_pcstat.status import PcStatus, aggregate

_SOURCE = "probe"

# A FIFO without a writer would block a plain read-only open forever.
_OPEN_FLAGS = os.O_RDONLY | getattr(os, "O_NONBLOCK", 0)


class Prober:
    """Run the probe pipeline with injected platform capabilities.

    Capabilities default to the implementations for the running
    platform; tests and alternative front-ends inject their own.
    A prober holds no per-probe state, so one instance can serve many
    probes.
    """

    def __init__(
        self,
        *,
        residency: ResidencyProvider | None = None,
        device_size: DeviceSizeQuery | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Create a prober.

        Args:
            residency: Page residency provider.
            device_size: Block device size query.
            logger: Audit log to record pipeline stages in, if any.

        """
        self._residency = residency if residency is not None else default_residency_provider()
        self._sizes = SizeResolver(device_size)
        self._logger = logger

    @property
    def logger(self) -> Logger | None:
        """Return the audit log, or None if probes are not logged."""
        return self._logger

    def probe(self, path: str, path_filter: Filter = allow_all) -> PcStatus:
        """Report how much of *path* is resident in the page cache.

        Args:
            path: The file or block device to probe.
            path_filter: Hook run on the open descriptor; raising rejects.

        Returns:
            A fully populated status record.

        Raises:
            OpenError: If the target cannot be opened.
            FilterRejection: If *path_filter* raised.
            StatError: If metadata inspection fails.
            DirectoryError: If the target is a directory.
            DeviceSizeError: If a block device's size cannot be queried.
            ResidencyProbeError: If the residency query fails.

        """
        status = PcStatus(name=path)

        try:
            fd = os.open(path, _OPEN_FLAGS)
        except OSError as e:
            msg = f"could not open file for read: {e}"
            raise self._failed(OpenError(msg, path=path), status, "open") from e

        try:
            return self._probe_open(fd, path, path_filter, status)
        finally:
            os.close(fd)

    def _probe_open(self, fd: int, path: str, path_filter: Filter, status: PcStatus) -> PcStatus:
        self._debug("opened", path)

        try:
            path_filter(fd)
        except Exception as e:  # noqa: BLE001 (any hook error is a rejection)
            msg = f"rejected by filter: {e}"
            rejection = FilterRejection(msg, path=path, reason=e)
            raise self._failed(rejection, status, "filter") from e

        try:
            fd_stat = os.fstat(fd)
        except OSError as e:
            msg = f"could not stat file: {e}"
            raise self._failed(StatError(msg, path=path), status, "stat") from e
        if stat.S_ISDIR(fd_stat.st_mode):
            msg = "file is a directory"
            raise self._failed(DirectoryError(msg, path=path), status, "stat")

        try:
            size = self._sizes.resolve(fd, path, fd_stat)
        except ProbeError as e:
            self._failed(e, status, "size")
            raise
        status = replace(status, size=size)
        self._debug(f"size resolved to {size} bytes", path)

        status = replace(
            status,
            timestamp=datetime.now(tz=UTC),
            mtime=datetime.fromtimestamp(fd_stat.st_mtime, tz=UTC),
        )

        try:
            report = self._residency.query(fd, size)
        except OSError as e:
            msg = f"residency query failed: {e}"
            raise self._failed(ResidencyProbeError(msg, path=path), status, "residency") from e
        if report is None:
            self._debug("nothing to probe", path)

        status = aggregate(status, report)
        self._log(
            LogLevel.INFO,
            f"{status.cached}/{status.pages} pages cached ({status.percent:.3f}%)",
            path,
        )
        return status

    def _failed(self, error: ProbeError, status: PcStatus, stage: str) -> ProbeError:
        """Attach the partial record to *error* and log the failing stage."""
        error.status = status
        self._log(LogLevel.WARNING, f"{stage} failed: {error}", error.path)
        return error

    def _debug(self, message: str, path: str) -> None:
        self._log(LogLevel.DEBUG, message, path)

    def _log(self, level: LogLevel, message: str, path: str) -> None:
        if self._logger is not None:
            self._logger.log(level, message, source=_SOURCE, path=path)


@cache
def default_prober() -> Prober:
    """Return a shared prober using the running platform's capabilities."""
    return Prober()


def probe(path: str, path_filter: Filter = allow_all) -> PcStatus:
    """Probe *path* with the default prober.

    See ``Prober.probe`` for arguments and errors.
    """
    return default_prober().probe(path, path_filter)
