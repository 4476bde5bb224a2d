import re
from dataclasses import dataclass
from typing import Optional, Union

from .model import ConstantType

# Ordered; the first pattern that matches wins.
INTEGER_PATTERN = re.compile(r"^-?([1-9][0-9]*|0[0-7]*)$")
STRING_PATTERN = re.compile(r'^"([A-Za-z0-9_]+)"$')
DECIMAL_PATTERN = re.compile(r"^([0-9]+\.[0-9]+)([Ff]?)$")


@dataclass(frozen=True)
class Classification:
    type: ConstantType
    value: Union[int, str]


def parse_integer(text: str) -> int:
    """Parse a decimal or (leading zero) octal C integer literal."""
    negative = text.startswith("-")
    digits = text.lstrip("-")
    base = 8 if digits.startswith("0") else 10
    number = int(digits, base)
    return -number if negative else number


def classify(raw_value: Optional[str]) -> Optional[Classification]:
    """Classify a macro's raw text without invoking the compiler.

    Returns None when the text is not a plain literal, in which case the
    compiler has to be asked.  Decimal literals keep their text so no
    precision is lost converting through a binary float.
    """
    if raw_value is None:
        return None

    text = raw_value.strip()

    if INTEGER_PATTERN.match(text):
        return Classification(ConstantType.INT, parse_integer(text))

    match = STRING_PATTERN.match(text)
    if match:
        return Classification(ConstantType.STRING, match.group(1))

    match = DECIMAL_PATTERN.match(text)
    if match:
        number, suffix = match.groups()
        constant_type = ConstantType.FLOAT if suffix else ConstantType.DOUBLE
        return Classification(constant_type, number)

    return None
