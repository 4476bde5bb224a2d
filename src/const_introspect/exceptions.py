"""
Exception hierarchy for const_introspect.

Fatal errors (bad configuration, a broken preprocessor run) propagate to the
caller.  ResolutionFailure never leaves the resolver: it is downgraded to the
``other`` type or an absent value there.
"""

from typing import List, Optional


class ConstIntrospectError(Exception):
    """Base exception for all const_introspect errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(ConstIntrospectError):
    """Invalid discovery option or type tag."""

    def __init__(self, option: str, reason: str):
        super().__init__(
            f"Invalid value for '{option}': {reason}",
            details={"option": option, "reason": reason},
        )
        self.option = option


class ToolInvocationError(ConstIntrospectError):
    """The preprocessor exited non-zero or was killed by a signal."""

    def __init__(self, command: List[str], stderr: str, returncode: int):
        if returncode < 0:
            status = f"killed by signal {-returncode}"
        else:
            status = f"exited with status {returncode}"
        super().__init__(
            f"command: {' '.join(command)} failed ({status})",
            details={"command": command, "stderr": stderr, "returncode": returncode},
        )
        self.command = command
        self.stderr = stderr
        self.returncode = returncode


class ResolutionFailure(ConstIntrospectError):
    """A probe could not be built, loaded or called."""

    def __init__(
        self,
        stage: str,
        expression: str,
        reason: str,
        stderr: Optional[str] = None,
    ):
        super().__init__(
            f"Unable to {stage} probe for '{expression}': {reason}",
            details={"stage": stage, "expression": expression, "stderr": stderr},
        )
        self.stage = stage
        self.expression = expression
        self.stderr = stderr


class ParseWarning(UserWarning):
    """A preprocessor output line did not look like a #define."""
