import re
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Pattern, Union

from .exceptions import ConfigurationError
from .toolchain import default_cc, default_cflags


class ConstantType(Enum):
    INT = "int"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    STRING = "string"
    POINTER = "pointer"
    OTHER = "other"

    @classmethod
    def from_tag(cls, tag: Union[str, "ConstantType"]) -> "ConstantType":
        if isinstance(tag, cls):
            return tag
        try:
            return cls(tag)
        except ValueError:
            tags = ", ".join(member.value for member in cls)
            raise ConfigurationError("type", f"{tag!r} is not one of: {tags}")

    def __str__(self):
        return self.value


LANGUAGES = ("c", "c++")

NameFilter = Union[Callable[[str], bool], str, Pattern]


def public_name(name: str) -> bool:
    """Default macro name filter: skip names starting with an underscore."""
    return not name.startswith("_")


def _check_list(option: str, value: Any) -> List[str]:
    if not isinstance(value, list):
        raise ConfigurationError(option, f"expected a list, got {type(value).__name__}")
    return list(value)


@dataclass(frozen=True)
class DiscoveryConfig:
    """Options for one discovery run.  Never mutated once constructed."""

    headers: List[str] = field(default_factory=list)
    lang: str = "c"
    cc: List[str] = field(default_factory=default_cc)
    ppflags: Optional[List[str]] = None
    cflags: List[str] = field(default_factory=default_cflags)
    extra_cflags: List[str] = field(default_factory=list)
    filter: NameFilter = public_name

    def __post_init__(self):
        if self.lang not in LANGUAGES:
            raise ConfigurationError("lang", f"{self.lang!r} should be one of c or c++")

        for option in ("headers", "cc", "cflags", "extra_cflags"):
            object.__setattr__(self, option, _check_list(option, getattr(self, option)))

        if self.ppflags is None:
            object.__setattr__(self, "ppflags", ["-dM", "-E", "-x", self.lang])
        else:
            object.__setattr__(self, "ppflags", _check_list("ppflags", self.ppflags))

        if isinstance(self.filter, str):
            object.__setattr__(self, "filter", re.compile(self.filter))
        elif not (callable(self.filter) or isinstance(self.filter, re.Pattern)):
            raise ConfigurationError("filter", "expected a predicate or a regular expression")

    @property
    def source_suffix(self) -> str:
        return ".c" if self.lang == "c" else ".cxx"

    def accepts(self, name: str) -> bool:
        if isinstance(self.filter, re.Pattern):
            return self.filter.search(name) is not None
        return bool(self.filter(name))


_NOT_COMPUTED = object()


class Constant:
    """A single C/C++ constant (usually a macro) found in a set of headers.

    ``type`` and ``value`` are computed on first access and cached.  When
    the raw value was already classified from its text both are known up
    front; otherwise the resolver is asked to compile a probe.  A constant
    whose type turns out to be ``other`` has no value.
    """

    def __init__(
        self,
        name: str,
        raw_value: Optional[str] = None,
        type: Union[str, ConstantType, None] = None,
        value: Any = _NOT_COMPUTED,
        resolver=None,
        expression: Optional[str] = None,
    ):
        self.name = name
        self.raw_value = raw_value
        self.expression = expression if expression is not None else name
        # Non-owning; only used to compute type and value on demand.
        self.resolver = resolver

        self._type = _NOT_COMPUTED if type is None else ConstantType.from_tag(type)
        if self._type is ConstantType.OTHER:
            value = None
        self._value = value
        self._lock = threading.RLock()

    @property
    def type(self) -> ConstantType:
        with self._lock:
            if self._type is _NOT_COMPUTED:
                if self.resolver is None:
                    self._type = ConstantType.OTHER
                else:
                    self._type = self.resolver.resolve_type(self.expression)
            return self._type

    @property
    def value(self) -> Any:
        with self._lock:
            if self._value is _NOT_COMPUTED:
                constant_type = self.type
                if constant_type is ConstantType.OTHER or self.resolver is None:
                    self._value = None
                else:
                    self._value = self.resolver.resolve_value(
                        constant_type, self.expression
                    )
            return self._value

    @property
    def is_resolved(self) -> bool:
        return self._type is not _NOT_COMPUTED and self._value is not _NOT_COMPUTED

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "raw_value": self.raw_value,
            "type": self.type.value,
            "value": self.value,
        }

    def __repr__(self):
        constant_type = "?" if self._type is _NOT_COMPUTED else self._type.value
        return f"Constant(name={self.name!r}, raw_value={self.raw_value!r}, type={constant_type})"
