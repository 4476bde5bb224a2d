import argparse
import shlex
from typing import List, Optional

from .model import DiscoveryConfig


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Find the macros defined by C/C++ headers and compute their values."
    )
    parser.add_argument(
        "headers",
        nargs="+",
        help="Headers to include, in order (e.g. stdio.h sys/stat.h)",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical"],
        default="info",
        help="Set logging level (default: info)",
    )
    parser.add_argument(
        "--lang", choices=["c", "c++"], default="c", help="Header language (default: c)"
    )
    parser.add_argument(
        "--cc",
        help="C compiler command (default: the compiler Python was built with)",
    )
    parser.add_argument(
        "--cflags", help="Compiler flags (default: the flags Python was built with)"
    )
    parser.add_argument(
        "--extra-cflags",
        default="",
        help="Additional compiler flags, e.g. --extra-cflags='-I/opt/foo/include'",
    )
    parser.add_argument(
        "--filter",
        help="Only keep macros whose name matches this regular expression "
        "(default: names not starting with '_')",
    )
    parser.add_argument(
        "--include-underscore",
        action="store_true",
        help="Keep macros starting with '_' as well",
    )
    parser.add_argument(
        "--resolve",
        action="store_true",
        help="Compile probes for every macro whose type is not obvious from its text",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of probes to build in parallel with --resolve (default: 1)",
    )
    parser.add_argument(
        "--output",
        "-o",
        default="-",
        help="Output file path, '-' for stdout (default: '-')",
    )
    parser.add_argument(
        "--format",
        choices=["json", "text", "header"],
        default="json",
        help="Output format (default: json)",
    )

    return parser.parse_args(argv)


def config_from_arguments(args: argparse.Namespace) -> DiscoveryConfig:
    options = {
        "headers": args.headers,
        "lang": args.lang,
        "extra_cflags": shlex.split(args.extra_cflags),
    }
    if args.cc:
        options["cc"] = shlex.split(args.cc)
    if args.cflags is not None:
        options["cflags"] = shlex.split(args.cflags)
    if args.filter:
        options["filter"] = args.filter
    elif args.include_underscore:
        options["filter"] = ""

    return DiscoveryConfig(**options)
