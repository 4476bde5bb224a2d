import ctypes
from typing import Any, Optional

from .model import ConstantType

# Return type of the generated compute_expression_value function.
C_TYPES = {
    ConstantType.INT: "int",
    ConstantType.LONG: "long",
    ConstantType.FLOAT: "float",
    ConstantType.DOUBLE: "double",
    ConstantType.STRING: "const char *",
    ConstantType.POINTER: "void *",
}

RESTYPES = {
    ConstantType.INT: ctypes.c_int,
    ConstantType.LONG: ctypes.c_long,
    ConstantType.FLOAT: ctypes.c_float,
    ConstantType.DOUBLE: ctypes.c_double,
    ConstantType.STRING: ctypes.c_char_p,
    ConstantType.POINTER: ctypes.c_void_p,
}

# Tags returned by compute_expression_type, keyed by the C type that selected them.
GENERIC_ASSOCIATIONS = [
    ("float", ConstantType.FLOAT),
    ("double", ConstantType.DOUBLE),
    ("char *", ConstantType.STRING),
    ("void *", ConstantType.POINTER),
    ("int", ConstantType.INT),
    ("long", ConstantType.LONG),
]


def c_type_for(constant_type: ConstantType) -> str:
    try:
        return C_TYPES[constant_type]
    except KeyError:
        raise ValueError(f"No C type for constant type '{constant_type}'")


def restype_for(constant_type: ConstantType):
    try:
        return RESTYPES[constant_type]
    except KeyError:
        raise ValueError(f"No ctypes return type for constant type '{constant_type}'")


def decode_native(constant_type: ConstantType, raw: Any) -> Optional[Any]:
    """Turn what ctypes handed back into the host value for ``constant_type``.

    Strings come back as bytes; a pointer is an opaque address (None when
    null) that must never be dereferenced.
    """
    if constant_type is ConstantType.STRING:
        if raw is None:
            return None
        return raw.decode("utf-8", errors="replace")
    return raw
