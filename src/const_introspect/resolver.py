import ctypes
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from .exceptions import ResolutionFailure
from .model import ConstantType, DiscoveryConfig
from .probe import ProbeBuilder, ProbeTemplates
from .toolchain import CommandResult, run_command
from .type_utils import GENERIC_ASSOCIATIONS, c_type_for, decode_native, restype_for


class Resolver(ABC):
    """Answers type and value questions about a C expression."""

    @abstractmethod
    def resolve_type(self, expression: str) -> ConstantType:
        """Type of ``expression``, or ConstantType.OTHER if it has none we support."""

    @abstractmethod
    def resolve_value(self, constant_type: ConstantType, expression: str) -> Optional[Any]:
        """Value of ``expression`` as ``constant_type``, or None if unknown."""


TAGS = {tag.value: tag for _, tag in GENERIC_ASSOCIATIONS}


class CompilerResolver(Resolver):
    """Resolves expressions by compiling and calling a probe for each question.

    Nothing is cached here; each call builds, loads and deletes its own
    probe, so calls for different expressions may run in parallel.
    """

    def __init__(
        self,
        config: DiscoveryConfig,
        timeout: Optional[float] = None,
        runner: Callable[..., CommandResult] = run_command,
    ):
        self.config = config
        self.builder = ProbeBuilder(
            config,
            templates=ProbeTemplates(config.lang, config.headers),
            timeout=timeout,
            runner=runner,
        )

    def resolve_type(self, expression: str) -> ConstantType:
        try:
            raw = self.builder.call(
                "compute-expression-type", "cet", ctypes.c_char_p, expression
            )
        except ResolutionFailure as e:
            logging.debug(f"{e}; treating as other")
            if e.stderr:
                logging.debug(e.stderr.rstrip())
            return ConstantType.OTHER

        tag = raw.decode("ascii", errors="replace") if raw is not None else None
        constant_type = TAGS.get(tag)
        if constant_type is None:
            logging.debug(f"Unexpected type tag {tag!r} for '{expression}'")
            return ConstantType.OTHER

        logging.debug(f"Resolved type of '{expression}': {constant_type}")
        return constant_type

    def resolve_value(self, constant_type: ConstantType, expression: str) -> Optional[Any]:
        constant_type = ConstantType.from_tag(constant_type)
        if constant_type is ConstantType.OTHER:
            raise ValueError(f"cannot compute a value of type other for '{expression}'")

        try:
            raw = self.builder.call(
                "compute-expression-value",
                "cev",
                restype_for(constant_type),
                expression,
                ctype=c_type_for(constant_type),
            )
        except ResolutionFailure as e:
            logging.debug(f"{e}; value unknown")
            if e.stderr:
                logging.debug(e.stderr.rstrip())
            return None

        value = decode_native(constant_type, raw)
        logging.debug(f"Resolved value of '{expression}' ({constant_type}): {value!r}")
        return value
