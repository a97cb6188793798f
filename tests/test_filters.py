"""Tests for the built-in filter hooks."""

import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import pytest

from py_pcstat.filters import FilterError, allow_all, chain, max_size, regular_files_only

LIMIT = 100


@contextmanager
def _opened(path: Path | str) -> Iterator[int]:
    """Open *path* read-only for the duration of the block."""
    fd = os.open(path, os.O_RDONLY)
    try:
        yield fd
    finally:
        os.close(fd)


def _file(tmp_path: Path, size: int) -> Path:
    path = tmp_path / f"f{size}"
    path.write_bytes(b"x" * size)
    return path


class TestAllowAll:
    """Verify the default filter."""

    def test_accepts(self, tmp_path: Path) -> None:
        """allow_all should never raise."""
        with _opened(_file(tmp_path, 1)) as fd:
            allow_all(fd)


class TestRegularFilesOnly:
    """Verify the file-type filter."""

    def test_accepts_regular_file(self, tmp_path: Path) -> None:
        """Regular files pass."""
        with _opened(_file(tmp_path, 1)) as fd:
            regular_files_only(fd)

    def test_rejects_directory(self, tmp_path: Path) -> None:
        """Directories are rejected."""
        with _opened(tmp_path) as fd, pytest.raises(FilterError):
            regular_files_only(fd)

    @pytest.mark.skipif(not os.path.exists("/dev/null"), reason="needs /dev/null")
    def test_rejects_character_device(self) -> None:
        """Character devices are rejected."""
        with _opened("/dev/null") as fd, pytest.raises(FilterError, match="not a regular"):
            regular_files_only(fd)


class TestMaxSize:
    """Verify the size ceiling filter."""

    def test_accepts_at_limit(self, tmp_path: Path) -> None:
        """A file exactly at the limit passes."""
        with _opened(_file(tmp_path, LIMIT)) as fd:
            max_size(LIMIT)(fd)

    def test_rejects_above_limit(self, tmp_path: Path) -> None:
        """A file above the limit is rejected."""
        with _opened(_file(tmp_path, LIMIT + 1)) as fd, pytest.raises(FilterError, match="exceeds"):
            max_size(LIMIT)(fd)

    def test_negative_limit(self) -> None:
        """Negative limits make no sense."""
        with pytest.raises(ValueError, match="non-negative"):
            max_size(-1)


class TestChain:
    """Verify filter composition."""

    def test_first_rejection_wins(self, tmp_path: Path) -> None:
        """Filters run in order and the first failure propagates."""
        calls: list[str] = []

        def first(_fd: int) -> None:
            calls.append("first")
            msg = "first"
            raise FilterError(msg)

        def second(_fd: int) -> None:
            calls.append("second")

        with _opened(_file(tmp_path, 1)) as fd, pytest.raises(FilterError, match="first"):
            chain(first, second)(fd)
        assert calls == ["first"]

    def test_all_accept(self, tmp_path: Path) -> None:
        """A chain of accepting filters accepts."""
        with _opened(_file(tmp_path, 1)) as fd:
            chain(allow_all, regular_files_only, max_size(LIMIT))(fd)
