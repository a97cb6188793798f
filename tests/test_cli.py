"""Tests for the ``py-pcstat`` command-line front-end.

``main`` returns an exit status instead of exiting, and a prober with a
stub residency provider is injected so the output is deterministic.
"""

import json
import os
from pathlib import Path

import pytest

from py_pcstat.cli import EXIT_OK, EXIT_SKIPPED, EXIT_USAGE, build_filter, main
from py_pcstat.config import FORMAT_VAR, MAX_SIZE_VAR
from py_pcstat.filters import FilterError, allow_all
from py_pcstat.logging import Logger
from py_pcstat.pids import ProcMapsError
from py_pcstat.platform.residency import ResidencyReport, page_count
from py_pcstat.probe import Prober

PAGE_SIZE = 4096


class AllCachedResidency:
    """Residency stub reporting every page as cached."""

    def query(self, _fd: int, length: int) -> ResidencyReport | None:
        """Report all pages of ``[0, length)`` as resident."""
        if length == 0:
            return None
        return ResidencyReport(cached=page_count(length, PAGE_SIZE), miss=0)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the caller's environment out of the CLI defaults."""
    monkeypatch.delenv(FORMAT_VAR, raising=False)
    monkeypatch.delenv(MAX_SIZE_VAR, raising=False)


@pytest.fixture
def prober() -> Prober:
    """Return a logging prober with a stub residency provider."""
    return Prober(residency=AllCachedResidency(), logger=Logger())


@pytest.fixture
def data_file(tmp_path: Path) -> Path:
    """Return a two-page file."""
    path = tmp_path / "data.bin"
    path.write_bytes(b"x" * 2 * PAGE_SIZE)
    return path


class TestOutput:
    """Verify output formats."""

    def test_table(
        self, prober: Prober, data_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """The default output is a table with one row per file."""
        assert main([str(data_file)], prober=prober) == EXIT_OK
        out = capsys.readouterr().out
        assert "Name" in out
        assert str(data_file) in out
        assert "100.000" in out

    def test_json(
        self, prober: Prober, data_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """--json prints an array of records."""
        assert main(["--json", str(data_file)], prober=prober) == EXIT_OK
        data = json.loads(capsys.readouterr().out)
        assert data[0]["filename"] == str(data_file)
        assert data[0]["pages"] == 2

    def test_terse_nohdr_bname(
        self, prober: Prober, data_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """--terse --nohdr --bname prints bare CSV rows with basenames."""
        assert main(["--terse", "--nohdr", "--bname", str(data_file)], prober=prober) == EXIT_OK
        out = capsys.readouterr().out.strip()
        assert out.startswith("data.bin,8192,")
        assert out.endswith(",2,2,100.000")

    def test_format_from_environment(
        self,
        prober: Prober,
        data_file: Path,
        capsys: pytest.CaptureFixture[str],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """PY_PCSTAT_FORMAT sets the default format."""
        monkeypatch.setenv(FORMAT_VAR, "json")
        main([str(data_file)], prober=prober)
        assert json.loads(capsys.readouterr().out)[0]["cached"] == 2


class TestErrors:
    """Verify skipped files and usage errors."""

    def test_missing_file_is_skipped(
        self,
        prober: Prober,
        data_file: Path,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """A failing path is reported and the rest are still probed."""
        missing = tmp_path / "missing"
        assert main([str(missing), str(data_file)], prober=prober) == EXIT_SKIPPED
        captured = capsys.readouterr()
        assert f"skipping {str(missing)!r}" in captured.err
        assert str(data_file) in captured.out

    def test_directory_is_skipped(
        self, prober: Prober, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Directories are skipped with an error."""
        assert main([str(tmp_path)], prober=prober) == EXIT_SKIPPED
        assert "directory" in capsys.readouterr().err

    def test_no_files(self, prober: Prober, capsys: pytest.CaptureFixture[str]) -> None:
        """Running without files is a usage error."""
        assert main([], prober=prober) == EXIT_USAGE
        assert "no files" in capsys.readouterr().err

    def test_bad_environment(
        self, prober: Prober, data_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """An invalid environment default is a usage error."""
        monkeypatch.setenv(MAX_SIZE_VAR, "huge")
        assert main([str(data_file)], prober=prober) == EXIT_USAGE

    def test_max_size_skips_large_files(
        self, prober: Prober, data_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """--max-size rejects files above the ceiling."""
        assert main(["--max-size", "10", str(data_file)], prober=prober) == EXIT_SKIPPED
        assert "exceeds" in capsys.readouterr().err

    @pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="needs os.mkfifo")
    def test_regular_only_skips_fifo(
        self,
        prober: Prober,
        data_file: Path,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """--regular-only skips a FIFO without blocking and reports the rest."""
        fifo = tmp_path / "pipe"
        os.mkfifo(fifo)
        argv = ["--regular-only", str(fifo), str(data_file)]
        assert main(argv, prober=prober) == EXIT_SKIPPED
        captured = capsys.readouterr()
        assert "not a regular file" in captured.err
        assert str(data_file) in captured.out

    def test_unreadable_pid(
        self, prober: Prober, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """An unreadable process map is reported."""

        def no_maps(pid: int) -> list[str]:
            msg = f"could not read memory map of pid {pid}"
            raise ProcMapsError(msg)

        monkeypatch.setattr("py_pcstat.cli.files_mapped_by", no_maps)
        assert main(["--pid", "99999"], prober=prober) == EXIT_SKIPPED
        assert "pid 99999" in capsys.readouterr().err


class TestPidAndVerbose:
    """Verify --pid and --verbose."""

    def test_pid_files_are_probed(
        self,
        prober: Prober,
        data_file: Path,
        capsys: pytest.CaptureFixture[str],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Files mapped by the process are appended to the file list."""
        monkeypatch.setattr("py_pcstat.cli.files_mapped_by", lambda _pid: [str(data_file)])
        assert main(["--json", "--pid", "1"], prober=prober) == EXIT_OK
        data = json.loads(capsys.readouterr().out)
        assert [d["filename"] for d in data] == [str(data_file)]

    def test_verbose_prints_log(
        self, prober: Prober, data_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """-v prints INFO entries, -vv adds DEBUG entries."""
        main(["-v", str(data_file)], prober=prober)
        err = capsys.readouterr().err
        assert "[INFO] probe" in err
        assert "[DEBUG]" not in err

        main(["-vv", str(data_file)], prober=prober)
        assert "[DEBUG] probe" in capsys.readouterr().err


class TestBuildFilter:
    """Verify filter selection."""

    def test_no_options_allows_all(self) -> None:
        """Without options the default filter is used."""
        assert build_filter(regular_only=False, limit=None) is allow_all

    def test_limit(self, tmp_path: Path) -> None:
        """A size limit builds a rejecting filter."""
        path = tmp_path / "f"
        path.write_bytes(b"xx")
        check = build_filter(regular_only=True, limit=1)
        fd = os.open(path, os.O_RDONLY)
        try:
            with pytest.raises(FilterError):
                check(fd)
        finally:
            os.close(fd)
