"""Block device size queries.

``stat`` on a block device does not tell you how big the device is:
``st_size`` is usually 0.  The real capacity comes from a
device-specific ``ioctl``:

- Linux: ``BLKGETSIZE64`` writes the size in bytes into a ``u64``.
- macOS: ``DKIOCGETBLOCKSIZE`` and ``DKIOCGETBLOCKCOUNT`` give the
  logical block size and the number of blocks; their product is the
  size in bytes.

The request numbers are platform constants and stay in this module;
callers only see the ``DeviceSizeQuery`` protocol.
"""

from __future__ import annotations

import errno
import struct
import sys
from typing import Protocol

# _IOR(0x12, 114, size_t)
_BLKGETSIZE64 = 0x80081272

# _IOR('d', 24, uint32_t) and _IOR('d', 25, uint64_t)
_DKIOCGETBLOCKSIZE = 0x40046418
_DKIOCGETBLOCKCOUNT = 0x40086419


class DeviceSizeQuery(Protocol):
    """Interface every device size query must satisfy."""

    def query(self, fd: int) -> int:
        """Return the capacity in bytes of the block device open on *fd*.

        Raises:
            OSError: If the query fails or is unsupported.

        """
        ...  # pragma: no cover


def _ioctl(fd: int, request: int, fmt: str) -> int:
    import fcntl  # noqa: PLC0415  POSIX-only

    buf = fcntl.ioctl(fd, request, bytes(struct.calcsize(fmt)))
    (value,) = struct.unpack(fmt, buf)
    return value


class LinuxBlockDeviceSize:
    """Query device capacity with ``BLKGETSIZE64``."""

    def query(self, fd: int) -> int:
        """Return the device size in bytes."""
        return _ioctl(fd, _BLKGETSIZE64, "@Q")


class DarwinBlockDeviceSize:
    """Query device capacity as block size times block count."""

    def query(self, fd: int) -> int:
        """Return the device size in bytes."""
        block_size = _ioctl(fd, _DKIOCGETBLOCKSIZE, "@I")
        block_count = _ioctl(fd, _DKIOCGETBLOCKCOUNT, "@Q")
        return block_size * block_count


class UnsupportedDeviceSize:
    """Device size query for platforms without a known ioctl."""

    def query(self, _fd: int) -> int:
        """Raise ``ENOSYS``."""
        msg = f"block device size queries are not supported on {sys.platform}"
        raise OSError(errno.ENOSYS, msg)


def default_device_size_query() -> DeviceSizeQuery:
    """Return the device size query for the running platform."""
    if sys.platform.startswith("linux"):
        return LinuxBlockDeviceSize()
    if sys.platform == "darwin":
        return DarwinBlockDeviceSize()
    return UnsupportedDeviceSize()
