"""Page residency providers — which pages of a file are in the page cache?

The kernel does not offer a "how much of this file is cached" call.
What it offers is ``mincore(2)``: given an address range in the
calling process, it fills one byte per page whose low bit says whether
that page is resident in memory.  So the trick is:

1. ``mmap`` the file read-only and shared, without touching it
   (touching would fault the pages in and change the answer).
2. ``mincore`` the mapping to get one status byte per page.
3. ``munmap`` the mapping and count the bytes with the low bit set.

Python's ``mmap`` module cannot hand out the raw address of a
read-only mapping, so the three calls go straight to libc through
``ctypes``.

**ResidencyProvider** (Protocol) — the capability the prober consumes.
**MincoreResidency** — the POSIX implementation described above.
**UnsupportedResidency** — stand-in for platforms without ``mincore``.
"""

from __future__ import annotations

import ctypes
import ctypes.util
import errno
import mmap
import os
import sys
from dataclasses import dataclass
from functools import cache
from typing import Protocol

PAGE_SIZE = mmap.PAGESIZE

# mmap(2) returns (void *) -1 on failure.
_MAP_FAILED = ctypes.c_void_p(-1).value

# Maps each mincore status byte to its residency bit; other bits are reserved.
_RESIDENT_BIT = bytes(b & 1 for b in range(256))


@dataclass(frozen=True)
class ResidencyReport:
    """Count the resident and non-resident pages of a byte range."""

    cached: int
    """Pages resident in the page cache."""

    miss: int
    """Pages not resident in the page cache."""


def page_count(length: int, page_size: int = PAGE_SIZE) -> int:
    """Return the number of pages needed to cover *length* bytes."""
    return (length + page_size - 1) // page_size


def count_resident(vec: bytes) -> int:
    """Return how many ``mincore`` status bytes in *vec* have the resident bit set."""
    return vec.translate(_RESIDENT_BIT).count(1)


class ResidencyProvider(Protocol):
    """Interface every residency provider must satisfy."""

    def query(self, fd: int, length: int) -> ResidencyReport | None:
        """Report residency of the first *length* bytes behind *fd*.

        Returns ``None`` when *length* is zero (nothing to probe).

        Raises:
            OSError: If the residency query fails.

        """
        ...  # pragma: no cover


@cache
def _load_libc() -> ctypes.CDLL:
    # find_library may return None (e.g. musl); CDLL(None) then resolves
    # symbols from the running interpreter, which links libc.
    libc = ctypes.CDLL(ctypes.util.find_library("c"), use_errno=True)
    libc.mmap.argtypes = [
        ctypes.c_void_p,
        ctypes.c_size_t,
        ctypes.c_int,
        ctypes.c_int,
        ctypes.c_int,
        ctypes.c_int64,
    ]
    libc.mmap.restype = ctypes.c_void_p
    libc.munmap.argtypes = [ctypes.c_void_p, ctypes.c_size_t]
    libc.munmap.restype = ctypes.c_int
    libc.mincore.argtypes = [ctypes.c_void_p, ctypes.c_size_t, ctypes.POINTER(ctypes.c_ubyte)]
    libc.mincore.restype = ctypes.c_int
    return libc


def _last_os_error(call: str) -> OSError:
    err = ctypes.get_errno()
    return OSError(err, f"{call}: {os.strerror(err)}")


class MincoreResidency:
    """Query page residency with ``mmap`` + ``mincore`` through libc.

    The mapping is always released, even when ``mincore`` fails.
    """

    def __init__(self, page_size: int = PAGE_SIZE) -> None:
        """Load libc and bind the three calls this provider needs."""
        self._libc = _load_libc()
        self._page_size = page_size

    @property
    def page_size(self) -> int:
        """Return the page size used to size the status vector."""
        return self._page_size

    def query(self, fd: int, length: int) -> ResidencyReport | None:
        """Map ``[0, length)`` of *fd* and count its resident pages.

        Args:
            fd: An open, readable file descriptor.
            length: Number of bytes to inspect, starting at offset 0.

        Returns:
            The page counts, or ``None`` when *length* is zero.

        Raises:
            OSError: If mapping or the residency query fails.

        """
        if length <= 0:
            return None

        addr = self._libc.mmap(None, length, mmap.PROT_READ, mmap.MAP_SHARED, fd, 0)
        if addr is None or addr == _MAP_FAILED:
            raise _last_os_error("mmap")

        try:
            vec = (ctypes.c_ubyte * page_count(length, self._page_size))()
            if self._libc.mincore(addr, length, vec) != 0:
                raise _last_os_error("mincore")
        finally:
            self._libc.munmap(addr, length)

        cached = count_resident(bytes(vec))
        return ResidencyReport(cached=cached, miss=len(vec) - cached)


class UnsupportedResidency:
    """Residency provider for platforms without ``mincore``."""

    def query(self, _fd: int, length: int) -> ResidencyReport | None:
        """Return ``None`` for empty ranges, otherwise raise ``ENOSYS``."""
        if length <= 0:
            return None
        msg = f"page residency queries are not supported on {sys.platform}"
        raise OSError(errno.ENOSYS, msg)


def default_residency_provider() -> ResidencyProvider:
    """Return the residency provider for the running platform."""
    if os.name == "posix":
        return MincoreResidency()
    return UnsupportedResidency()
