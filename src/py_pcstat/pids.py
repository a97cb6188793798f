"""Discover the files a running process has mapped.

Every process on Linux exposes its address space layout in
``/proc/<pid>/maps``, one mapping per line::

    address           perms offset  dev   inode   pathname
    7f2c4e5d1000-7f2c4e5f3000 r--p 00000000 08:01 1311 /usr/lib/libc.so.6

File-backed mappings carry an absolute path in the last column.  The
rest are anonymous (no path) or pseudo mappings such as ``[heap]``,
``[stack]`` and ``[vdso]``.  Files unlinked after mapping show up with
a `` (deleted)`` suffix; they cannot be reopened by path, so they are
skipped.
"""

from pathlib import Path

_PATH_COLUMN = 5
_DELETED_SUFFIX = " (deleted)"


class ProcMapsError(Exception):
    """Raise when a process's memory map cannot be read."""


def parse_maps(text: str) -> list[str]:
    """Return the unique file paths in a ``maps`` listing.

    Paths are returned in order of first appearance.

    Args:
        text: Contents of a ``/proc/<pid>/maps`` file.

    """
    seen: dict[str, None] = {}
    for line in text.splitlines():
        parts = line.split(maxsplit=_PATH_COLUMN)
        if len(parts) <= _PATH_COLUMN:
            continue
        path = parts[_PATH_COLUMN]
        if not path.startswith("/") or path.endswith(_DELETED_SUFFIX):
            continue
        seen.setdefault(path, None)
    return list(seen)


def files_mapped_by(pid: int, proc_root: str = "/proc") -> list[str]:
    """Return the files mapped into process *pid*.

    Args:
        pid: The process id.
        proc_root: Mount point of procfs.

    Raises:
        ProcMapsError: If the process's maps cannot be read.

    """
    maps = Path(proc_root) / str(pid) / "maps"
    try:
        text = maps.read_text()
    except OSError as e:
        msg = f"could not read memory map of pid {pid}: {e}"
        raise ProcMapsError(msg) from e
    return parse_maps(text)
