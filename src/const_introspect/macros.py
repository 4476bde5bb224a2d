import logging
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Iterable, List, Optional

from .classifier import classify
from .header_utils import enumerate_macros
from .model import Constant, ConstantType, DiscoveryConfig
from .resolver import CompilerResolver, Resolver
from .toolchain import run_command


class Macros:
    """Find the macros defined by a set of C/C++ headers and compute their values.

    Example::

        macros = Macros.from_options(headers=["foo.h"])
        for constant in macros.run():
            print(constant.name, constant.type, constant.value)
    """

    def __init__(
        self,
        config: DiscoveryConfig,
        resolver: Optional[Resolver] = None,
        runner=run_command,
    ):
        self.config = config
        self.resolver = resolver or CompilerResolver(config, runner=runner)
        self.runner = runner

    @classmethod
    def from_options(cls, resolver: Optional[Resolver] = None, **options: Any) -> "Macros":
        return cls(DiscoveryConfig(**options), resolver=resolver)

    def run(self) -> List[Constant]:
        """Run the preprocessor and return one Constant per surviving macro.

        Plain literals are classified from their text right away; anything
        else is resolved through the compiler when its type or value is
        first read.
        """
        logging.info(f"Processing headers: {', '.join(self.config.headers)}")

        constants = []
        classified = 0

        for name, raw_value in enumerate_macros(self.config, self.runner):
            classification = classify(raw_value)
            if classification is None:
                constants.append(
                    Constant(name, raw_value=raw_value, resolver=self.resolver)
                )
                continue

            classified += 1
            constants.append(
                Constant(
                    name,
                    raw_value=raw_value,
                    type=classification.type,
                    value=classification.value,
                    resolver=self.resolver,
                )
            )

        logging.info(
            f"Found {len(constants)} macros, {classified} classified from their text"
        )
        return constants

    def discover(self) -> Dict[str, Constant]:
        """Same as run(), keyed by macro name in preprocessor order."""
        return OrderedDict((constant.name, constant) for constant in self.run())

    def compute_expression_type(self, expression: str) -> ConstantType:
        """Type of a C expression: int, long, float, double, string, pointer or other."""
        return self.resolver.resolve_type(expression)

    def compute_expression_value(self, constant_type, expression: str) -> Optional[Any]:
        """Value of a C expression of a known (non-other) type, None if unknown."""
        return self.resolver.resolve_value(ConstantType.from_tag(constant_type), expression)

    def constant_for_expression(self, expression: str, name: Optional[str] = None) -> Constant:
        """A lazily resolved Constant for a bare expression rather than a macro."""
        return Constant(
            name or expression,
            raw_value=expression,
            resolver=self.resolver,
            expression=expression,
        )


def _resolve(constant: Constant) -> Constant:
    constant.type
    constant.value
    return constant


def resolve_all(constants: Iterable[Constant], workers: int = 1) -> List[Constant]:
    """Force type and value of every constant, optionally on a thread pool."""
    constants = list(constants)
    pending = sum(1 for constant in constants if not constant.is_resolved)
    logging.info(f"Resolving {pending} constants with {workers} worker(s)")

    if workers <= 1:
        return [_resolve(constant) for constant in constants]

    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(_resolve, constants))
