"""CLI defaults from environment variables.

There is no configuration file.  A few command-line defaults can be
set once in the environment instead of being repeated on every call:

- ``PY_PCSTAT_FORMAT`` — default output format (``table``, ``terse``
  or ``json``).
- ``PY_PCSTAT_MAX_SIZE`` — default size ceiling in bytes; files larger
  than this are skipped.

Flags given on the command line always win over these defaults.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass

from py_pcstat.output import OutputFormat

FORMAT_VAR = "PY_PCSTAT_FORMAT"
MAX_SIZE_VAR = "PY_PCSTAT_MAX_SIZE"


class ConfigError(Exception):
    """Raise when an environment variable holds an invalid value."""


@dataclass(frozen=True)
class CliConfig:
    """Defaults for the command-line front-end."""

    output_format: OutputFormat = OutputFormat.TABLE
    max_size: int | None = None


def load_config(environ: Mapping[str, str] | None = None) -> CliConfig:
    """Read CLI defaults from *environ* (``os.environ`` by default).

    Raises:
        ConfigError: If a variable is set to an invalid value.

    """
    env = os.environ if environ is None else environ

    raw_format = env.get(FORMAT_VAR, "").strip().lower()
    try:
        output_format = OutputFormat(raw_format) if raw_format else OutputFormat.TABLE
    except ValueError as e:
        choices = ", ".join(f.value for f in OutputFormat)
        msg = f"{FORMAT_VAR}={raw_format!r}: expected one of {choices}"
        raise ConfigError(msg) from e

    raw_size = env.get(MAX_SIZE_VAR, "").strip()
    max_size: int | None = None
    if raw_size:
        try:
            max_size = int(raw_size)
        except ValueError as e:
            msg = f"{MAX_SIZE_VAR}={raw_size!r}: not an integer"
            raise ConfigError(msg) from e
        if max_size < 0:
            msg = f"{MAX_SIZE_VAR}={raw_size!r}: must be non-negative"
            raise ConfigError(msg)

    return CliConfig(output_format=output_format, max_size=max_size)
