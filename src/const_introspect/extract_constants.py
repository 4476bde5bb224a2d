#!/usr/bin/env python3

import logging
import sys
import warnings

from .cli import config_from_arguments, parse_arguments
from .exceptions import ConfigurationError, ParseWarning, ToolInvocationError
from .logging_utils import setup_logging
from .macros import Macros, resolve_all
from .model import ConstantType
from .output_formatter import (
    format_output_header,
    format_output_json,
    format_output_text,
    write_output,
)

FORMATTERS = {
    "json": format_output_json,
    "text": format_output_text,
    "header": format_output_header,
}


def main(argv=None):
    """Discover the constants of the given headers and write them out."""
    args = parse_arguments(argv)

    setup_logging(args.log_level)
    # Unparseable lines are already logged one by one.
    warnings.simplefilter("ignore", ParseWarning)

    try:
        config = config_from_arguments(args)
    except ConfigurationError as e:
        logging.fatal(str(e))
        sys.exit(1)

    logging.info("Starting constant discovery")
    logging.info(f"Using compiler: {' '.join(config.cc)}")

    macros = Macros(config)
    try:
        constants = macros.run()
    except ToolInvocationError as e:
        logging.fatal(f"Failed to enumerate macros: {e}")
        if e.stderr:
            logging.error(e.stderr.rstrip())
        sys.exit(1)

    # Output formatters read type and value, so without --resolve only the
    # constants classified from their text are emitted.
    if args.resolve:
        constants = resolve_all(constants, workers=args.workers)
    else:
        constants = [constant for constant in constants if constant.is_resolved]

    counts = {}
    for constant in constants:
        counts[constant.type] = counts.get(constant.type, 0) + 1
    for constant_type in ConstantType:
        if constant_type in counts:
            logging.debug(f"  - {constant_type}: {counts[constant_type]}")

    output_content = FORMATTERS[args.format](config, constants)
    write_output(output_content, args.output, args.format)

    logging.info(f"Successfully processed {len(constants)} constants")


if __name__ == "__main__":
    main()
