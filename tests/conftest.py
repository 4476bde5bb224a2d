import logging
import os
import sys

import pytest

# Add src directory to path before any local imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

# fmt: off
from const_introspect.model import ConstantType  # noqa: E402
from const_introspect.resolver import Resolver  # noqa: E402
# fmt: on


class FakeResolver(Resolver):
    """Returns canned answers and records every question it was asked."""

    def __init__(self, types=None, values=None):
        self.types = types or {}
        self.values = values or {}
        self.type_calls = []
        self.value_calls = []

    def resolve_type(self, expression):
        self.type_calls.append(expression)
        return self.types.get(expression, ConstantType.OTHER)

    def resolve_value(self, constant_type, expression):
        self.value_calls.append((constant_type, expression))
        return self.values.get(expression)


@pytest.fixture
def fake_resolver():
    return FakeResolver


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """Undo the global logging changes ``main()`` makes via ``setup_logging``."""
    root = logging.getLogger()
    level = root.level
    handlers = root.handlers[:]
    yield
    root.setLevel(level)
    root.handlers[:] = handlers
