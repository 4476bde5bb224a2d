import logging
import re
import tempfile
import warnings
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from .exceptions import ParseWarning, ToolInvocationError
from .model import DiscoveryConfig
from .toolchain import CommandResult, run_command

DEFINE_PATTERN = re.compile(r"^#define\s+(\S+)(?:\s+(.*?))?\s*$")


def aggregate_source(headers: List[str]) -> str:
    """C source that does nothing but include every header, in order."""
    return "".join(f"#include <{header}>\n" for header in headers)


def write_aggregate_source(config: DiscoveryConfig, directory: str) -> Path:
    """Write the aggregated translation unit into ``directory``."""
    path = Path(directory) / f"c-macros{config.source_suffix}"
    path.write_text(aggregate_source(config.headers), encoding="utf-8")
    logging.debug(f"Wrote {len(config.headers)} include(s) to {path}")
    return path


def parse_define_line(line: str) -> Optional[Tuple[str, str]]:
    """Split ``#define NAME raw text`` into (name, raw text).

    Valueless macros yield an empty raw text.  Returns None if the line is
    not a #define at all.
    """
    match = DEFINE_PATTERN.match(line)
    if not match:
        return None
    name, raw_value = match.groups()
    return name, raw_value or ""


def is_function_like(name: str) -> bool:
    return "(" in name or ")" in name


def preprocessor_command(config: DiscoveryConfig, source: Path) -> List[str]:
    return [*config.cc, *config.ppflags, *config.cflags, *config.extra_cflags, str(source)]


def expand_macros(
    config: DiscoveryConfig,
    runner: Callable[[List[str]], CommandResult] = run_command,
) -> str:
    """Dump every macro visible after including the configured headers."""
    logging.debug(f"Extracting macros from headers: {', '.join(config.headers)}")

    with tempfile.TemporaryDirectory(prefix="c-macros-") as tmpdir:
        source = write_aggregate_source(config, tmpdir)
        command = preprocessor_command(config, source)
        result = runner(command)

    if not result.ok:
        logging.error(f"Preprocessor failed: {' '.join(command)}")
        if result.signal:
            logging.error(f"Preprocessor killed by signal {result.signal}")
        if result.stderr:
            logging.error(result.stderr.rstrip())
        raise ToolInvocationError(command, result.stderr, result.returncode)

    logging.debug(f"Extracted {len(result.stdout.splitlines())} macro definitions")
    return result.stdout


def enumerate_macros(
    config: DiscoveryConfig,
    runner: Callable[[List[str]], CommandResult] = run_command,
) -> List[Tuple[str, str]]:
    """Return (name, raw value) for every object-like macro passing the filter.

    Order follows the preprocessor output.  Raises ToolInvocationError if
    the preprocessor fails; nothing is returned in that case.
    """
    expanded = expand_macros(config, runner)

    macros = []
    skipped = 0

    for line in expanded.splitlines():
        if not line.strip():
            continue

        parsed = parse_define_line(line)
        if parsed is None:
            logging.warning(f"unable to parse line: {line}")
            warnings.warn(f"unable to parse line: {line}", ParseWarning, stacklevel=2)
            continue

        name, raw_value = parsed
        if is_function_like(name):
            logging.debug(f"Skipping function-like macro: {name}")
            continue
        if not config.accepts(name):
            skipped += 1
            continue

        macros.append((name, raw_value))

    logging.debug(f"Kept {len(macros)} macros, {skipped} rejected by filter")
    return macros
