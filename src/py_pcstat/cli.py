"""Command-line front-end: ``py-pcstat FILE...``.

Probes each file in turn and prints one table (or CSV, or JSON) with a
row per file.  A file that cannot be probed is reported on stderr as
``skipping '<path>': <reason>`` and the remaining files are still
probed; the exit status is 1 if any file was skipped.

``main()`` takes an argument list and returns an exit status so it can
be tested directly.  ``run()`` is the console entry point.
"""

import argparse
import sys
from collections.abc import Sequence

from py_pcstat.config import ConfigError, load_config
from py_pcstat.errors import ProbeError
from py_pcstat.filters import Filter, allow_all, chain, max_size, regular_files_only
from py_pcstat.logging import Logger, LogLevel
from py_pcstat.output import OutputFormat, render, with_basenames
from py_pcstat.pids import ProcMapsError, files_mapped_by
from py_pcstat.probe import Prober
from py_pcstat.status import PcStatus

EXIT_OK = 0
EXIT_SKIPPED = 1
EXIT_USAGE = 2

_VERBOSE_LEVELS = {1: LogLevel.INFO, 2: LogLevel.DEBUG}


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for ``py-pcstat``."""
    parser = argparse.ArgumentParser(
        prog="py-pcstat",
        description="Report how much of each file is resident in the page cache.",
    )
    parser.add_argument("files", nargs="*", metavar="FILE", help="files or block devices to probe")
    fmt = parser.add_mutually_exclusive_group()
    fmt.add_argument("--json", action="store_true", help="print a JSON array")
    fmt.add_argument("--terse", action="store_true", help="print CSV")
    parser.add_argument("--nohdr", action="store_true", help="omit the header row")
    parser.add_argument("--bname", action="store_true", help="show file basenames only")
    parser.add_argument("--pid", type=int, help="also probe the files mapped by this process")
    parser.add_argument("--max-size", type=int, metavar="BYTES", help="skip files larger than this")
    parser.add_argument(
        "--regular-only",
        action="store_true",
        help="skip anything that is not a regular file or block device",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="print the probe log to stderr (repeat for more detail)",
    )
    return parser


def build_filter(*, regular_only: bool, limit: int | None) -> Filter:
    """Combine the filters selected on the command line."""
    filters: list[Filter] = []
    if regular_only:
        filters.append(regular_files_only)
    if limit is not None:
        filters.append(max_size(limit))
    if not filters:
        return allow_all
    return chain(*filters)


def main(argv: Sequence[str] | None = None, *, prober: Prober | None = None) -> int:
    """Run the CLI and return its exit status.

    Args:
        argv: Command-line arguments (defaults to ``sys.argv[1:]``).
        prober: Prober to use; a logging one is created if omitted.

    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config()
    except ConfigError as e:
        print(f"py-pcstat: {e}", file=sys.stderr)  # noqa: T201
        return EXIT_USAGE

    paths: list[str] = list(args.files)
    if args.pid is not None:
        try:
            paths.extend(files_mapped_by(args.pid))
        except ProcMapsError as e:
            print(f"py-pcstat: {e}", file=sys.stderr)  # noqa: T201
            return EXIT_SKIPPED
    if not paths:
        parser.print_usage(sys.stderr)
        print("py-pcstat: no files to probe", file=sys.stderr)  # noqa: T201
        return EXIT_USAGE

    if args.json:
        output_format = OutputFormat.JSON
    elif args.terse:
        output_format = OutputFormat.TERSE
    else:
        output_format = config.output_format

    limit = args.max_size if args.max_size is not None else config.max_size
    try:
        path_filter = build_filter(regular_only=args.regular_only, limit=limit)
    except ValueError as e:
        print(f"py-pcstat: {e}", file=sys.stderr)  # noqa: T201
        return EXIT_USAGE

    if prober is None:
        prober = Prober(logger=Logger())

    statuses: list[PcStatus] = []
    exit_code = EXIT_OK
    for path in paths:
        try:
            statuses.append(prober.probe(path, path_filter))
        except ProbeError as e:
            print(f"skipping {path!r}: {e}", file=sys.stderr)  # noqa: T201
            exit_code = EXIT_SKIPPED

    if args.verbose and prober.logger is not None:
        level = _VERBOSE_LEVELS.get(args.verbose, LogLevel.DEBUG)
        for entry in prober.logger.filter(min_level=level):
            print(entry, file=sys.stderr)  # noqa: T201

    if args.bname:
        statuses = with_basenames(statuses)
    if statuses or output_format is OutputFormat.JSON:
        print(render(statuses, output_format, header=not args.nohdr))  # noqa: T201
    return exit_code


def run() -> None:
    """Console entry point for ``py-pcstat``."""
    sys.exit(main())
