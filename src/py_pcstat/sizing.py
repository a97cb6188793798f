"""Size resolution — how many bytes of the target should be probed?

For a regular file the answer is simply ``st_size``.  Block devices are
the exception: ``stat`` reports a nominal size (usually 0), and only a
device-specific query yields the addressable capacity.  Probing the
wrong length would either miss most of the device or map past its end.
"""

import os
import stat

from py_pcstat.errors import DeviceSizeError, StatError
from py_pcstat.platform.devsize import DeviceSizeQuery, default_device_size_query


def is_block_device(path: str) -> bool:
    """Return True if *path* names a block device.

    Raises:
        OSError: If the path cannot be inspected.

    """
    return stat.S_ISBLK(os.stat(path).st_mode)


class SizeResolver:
    """Resolve the authoritative byte length of an open target."""

    def __init__(self, device_size: DeviceSizeQuery | None = None) -> None:
        """Create a resolver.

        Args:
            device_size: Block device size query; defaults to the one
                for the running platform.

        """
        self._device_size = device_size if device_size is not None else default_device_size_query()

    def resolve(self, fd: int, path: str, fd_stat: os.stat_result) -> int:
        """Return the number of bytes to probe.

        Args:
            fd: The open handle of the target.
            path: The target's path, as given by the caller.
            fd_stat: ``fstat`` of *fd*, taken after opening.

        Raises:
            StatError: If the path cannot be inspected.
            DeviceSizeError: If the target is a block device whose size
                cannot be queried.

        """
        try:
            block = is_block_device(path)
        except OSError as e:
            msg = f"could not inspect {path!r}: {e}"
            raise StatError(msg, path=path) from e

        if not block:
            return fd_stat.st_size

        try:
            return self._device_size.query(fd)
        except OSError as e:
            msg = f"could not query block device size of {path!r}: {e}"
            raise DeviceSizeError(msg, path=path) from e
