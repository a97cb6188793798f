"""Filter hooks — reject files by policy before probing them.

A filter is any callable that takes the freshly opened file descriptor
and either returns (accept) or raises (reject).  The prober runs it
before any stat or residency work, so a rejection costs one ``open``
and whatever the filter itself does.

Filters are plain functions rather than a class hierarchy; combine
them with ``chain``.
"""

import os
import stat
from collections.abc import Callable

Filter = Callable[[int], None]


class FilterError(Exception):
    """Raise when a built-in filter rejects a file."""


def allow_all(_fd: int) -> None:
    """Accept every file."""


def regular_files_only(fd: int) -> None:
    """Reject anything that is neither a regular file nor a block device.

    Raises:
        FilterError: For FIFOs, sockets, character devices and directories.

    """
    mode = os.fstat(fd).st_mode
    if not (stat.S_ISREG(mode) or stat.S_ISBLK(mode)):
        msg = "not a regular file or block device"
        raise FilterError(msg)


def max_size(limit: int) -> Filter:
    """Return a filter rejecting files whose ``st_size`` exceeds *limit*.

    Args:
        limit: Largest accepted size in bytes.

    """
    if limit < 0:
        msg = f"size limit must be non-negative, got {limit}"
        raise ValueError(msg)

    def check(fd: int) -> None:
        size = os.fstat(fd).st_size
        if size > limit:
            msg = f"size {size} exceeds limit {limit}"
            raise FilterError(msg)

    return check


def chain(*filters: Filter) -> Filter:
    """Return a filter that runs *filters* in order; the first rejection wins."""

    def check(fd: int) -> None:
        for f in filters:
            f(fd)

    return check
