import json
import logging
import math
import os
from collections import defaultdict
from typing import List

from .dataclass_serialization import ConstantJSONEncoder, to_serializable
from .model import Constant, ConstantType, DiscoveryConfig


def format_output_json(config: DiscoveryConfig, constants: List[Constant]) -> str:
    """Format the run configuration and constants as JSON."""
    logging.info("Formatting constants as JSON")

    output_dict = {
        "config": to_serializable(config),
        "constants": [constant.to_dict() for constant in constants],
    }

    return json.dumps(output_dict, cls=ConstantJSONEncoder, indent=2)


def _display(value) -> str:
    return "N/A" if value is None else str(value)


def ascii_table(headers: List[str], rows: List[List[str]]) -> List[str]:
    lines = []

    # Calculate column widths (add padding)
    col_widths = [len(header) for header in headers]
    for row in rows:
        for i, cell in enumerate(row):
            col_widths[i] = max(col_widths[i], len(cell))
    col_widths = [width + 2 for width in col_widths]

    lines.append("+" + "+".join("-" * width for width in col_widths) + "+")
    lines.append(
        "|" + "".join(f" {headers[i]:{col_widths[i]-2}} |" for i in range(len(headers)))
    )
    lines.append("+" + "+".join("=" * width for width in col_widths) + "+")
    for row in rows:
        lines.append(
            "|" + "".join(f" {row[i]:{col_widths[i]-2}} |" for i in range(len(row)))
        )
    lines.append("+" + "+".join("-" * width for width in col_widths) + "+")

    return lines


def format_output_text(config: DiscoveryConfig, constants: List[Constant]) -> str:
    """Format constants as plain text tables, one per type."""
    logging.info("Formatting constants as structured text")

    lines = ["CONSTANT DEFINITIONS", ""]
    lines.append(f"Headers: {', '.join(config.headers)} ({config.lang})")
    lines.append("")

    by_type = defaultdict(list)
    for constant in constants:
        by_type[constant.type].append(constant)

    for constant_type in ConstantType:
        group = by_type.get(constant_type)
        if not group:
            continue

        title = f"{constant_type.value} ({len(group)} constants)"
        lines.append(title)
        lines.append("=" * len(title))
        lines.append("")

        rows = [
            [constant.name, _display(constant.value), _display(constant.raw_value)]
            for constant in group
        ]
        lines.extend(ascii_table(["Name", "Value", "Raw Value"], rows))
        lines.append("")

    return "\n".join(lines)


def c_string_literal(text: str) -> str:
    escaped = []
    for char in text:
        if char in ('"', "\\"):
            escaped.append("\\" + char)
        elif char == "\n":
            escaped.append("\\n")
        elif char == "\t":
            escaped.append("\\t")
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            escaped.append(f"\\{ord(char):03o}")
        else:
            escaped.append(char)
    return '"' + "".join(escaped) + '"'


def is_reproducible(constant: Constant) -> bool:
    """False for float and double values C has no literal for (inf, nan)."""
    if constant.type in (ConstantType.FLOAT, ConstantType.DOUBLE):
        return math.isfinite(float(constant.value))
    return True


def c_literal(constant: Constant) -> str:
    """Render a resolved constant's value as a C literal."""
    constant_type = constant.type
    value = constant.value

    if constant_type is ConstantType.INT:
        return str(value)
    if constant_type is ConstantType.LONG:
        return f"{value}L"
    if constant_type is ConstantType.FLOAT:
        return f"{value}f"
    if constant_type is ConstantType.DOUBLE:
        text = str(value)
        return text if any(c in text for c in ".eE") else text + ".0"
    if constant_type is ConstantType.STRING:
        return c_string_literal(value)
    raise ValueError(f"No C literal for {constant_type} constant {constant.name}")


def format_output_header(config: DiscoveryConfig, constants: List[Constant]) -> str:
    """Format resolved constants as a C header of literal #defines."""
    logging.info("Formatting constants as a C header")

    lines = [
        "/* Automatically generated constant definitions */",
        f"/* from: {', '.join(config.headers)} */",
        "#ifndef _CONST_INTROSPECT_H",
        "#define _CONST_INTROSPECT_H",
        "",
    ]

    for constant in constants:
        constant_type = constant.type
        if constant_type is ConstantType.OTHER:
            lines.append(f"/* {constant.name}: not a constant */")
        elif constant_type is ConstantType.POINTER:
            lines.append(f"/* {constant.name}: pointer, value not reproducible */")
        elif constant.value is None:
            lines.append(f"/* {constant.name}: {constant_type} with unknown value */")
        elif not is_reproducible(constant):
            lines.append(f"/* {constant.name}: {constant_type} {constant.value} has no C literal */")
        else:
            lines.append(f"#define {constant.name} {c_literal(constant)}")

    lines.extend(["", "#endif /* _CONST_INTROSPECT_H */", ""])

    return "\n".join(lines)


def write_output(content: str, output_path: str, format_type: str) -> None:
    """Write content to output file or stdout with appropriate extension."""
    if output_path == "-":
        print(content)
        logging.info("Wrote output to stdout")
        return

    if "." in os.path.basename(output_path):
        output_path = os.path.splitext(output_path)[0]

    if format_type == "json":
        output_path += ".json"
    elif format_type == "text":
        output_path += ".txt"
    elif format_type == "header":
        output_path += ".h"

    with open(output_path, "w") as f:
        f.write(content)
    logging.info(f"Wrote output to {output_path}")
