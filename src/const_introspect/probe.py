"""
Probe programs: tiny translation units that ask the compiler one question.

A probe includes the configured headers and defines a single exported
function with no parameters.  ProbeBuilder writes it to a private temporary
directory, builds a shared object, loads it with ctypes, calls the function
once and removes everything again before returning.
"""

import ctypes
import itertools
import logging
import os
import tempfile
import threading
from pathlib import Path
from string import Template
from typing import Any, Callable, List, Optional

from .exceptions import ResolutionFailure
from .model import DiscoveryConfig
from .toolchain import CommandResult, run_command

C_TEMPLATES = {
    "compute-expression-type": Template(
        """\
${includes}
const char *
compute_expression_type(void)
{
  return _Generic(
    ${expression},
    float    : "float",
    double   : "double",
    char *   : "string",
    void *   : "pointer",
    int      : "int",
    long     : "long"
  );
}
"""
    ),
    "compute-expression-value": Template(
        """\
${includes}
${ctype}
compute_expression_value(void)
{
  return ${expression};
}
"""
    ),
}

# C++ has no _Generic; an explicitly specialized template plays the same
# role and fails to compile for any other type.
CXX_TEMPLATES = {
    "compute-expression-type": Template(
        """\
${includes}
#include <type_traits>

template <typename T> struct compute_expression_tag;
template <> struct compute_expression_tag<float> { static const char *name() { return "float"; } };
template <> struct compute_expression_tag<double> { static const char *name() { return "double"; } };
template <> struct compute_expression_tag<char *> { static const char *name() { return "string"; } };
template <> struct compute_expression_tag<const char *> { static const char *name() { return "string"; } };
template <> struct compute_expression_tag<void *> { static const char *name() { return "pointer"; } };
template <> struct compute_expression_tag<int> { static const char *name() { return "int"; } };
template <> struct compute_expression_tag<long> { static const char *name() { return "long"; } };

extern "C" const char *
compute_expression_type(void)
{
  return compute_expression_tag<std::decay<decltype(${expression})>::type>::name();
}
"""
    ),
    "compute-expression-value": Template(
        """\
${includes}
extern "C" ${ctype}
compute_expression_value(void)
{
  return ${expression};
}
"""
    ),
}


class ProbeTemplates:
    """Renders probe sources for one language and header list."""

    def __init__(self, lang: str, headers: List[str]):
        self.lang = lang
        self.headers = list(headers)
        self._templates = C_TEMPLATES if lang == "c" else CXX_TEMPLATES

    @property
    def includes(self) -> str:
        return "\n".join(f"#include <{header}>" for header in self.headers)

    def render(self, name: str, **args: str) -> str:
        try:
            template = self._templates[name]
        except KeyError:
            raise ValueError(f"no such template: {name}")
        return template.substitute(includes=self.includes, **args)


_counter = itertools.count(1)
_counter_lock = threading.Lock()


def unique_name(prefix: str) -> str:
    """A name no other probe in any process on this machine is using."""
    with _counter_lock:
        sequence = next(_counter)
    return f"{prefix}{os.getpid()}{sequence}"


def _unload(library: ctypes.CDLL) -> None:
    dl = ctypes.CDLL(None)
    dlclose = getattr(dl, "dlclose", None)
    if dlclose is None:
        return
    dlclose.argtypes = [ctypes.c_void_p]
    dlclose.restype = ctypes.c_int
    dlclose(library._handle)


class ProbeBuilder:
    def __init__(
        self,
        config: DiscoveryConfig,
        templates: Optional[ProbeTemplates] = None,
        timeout: Optional[float] = None,
        runner: Callable[..., CommandResult] = run_command,
    ):
        self.config = config
        self.templates = templates or ProbeTemplates(config.lang, config.headers)
        self.timeout = timeout
        self.runner = runner

    def build_command(self, source: Path, library: Path) -> List[str]:
        return [
            *self.config.cc,
            *self.config.cflags,
            *self.config.extra_cflags,
            "-shared",
            "-fPIC",
            "-o",
            str(library),
            str(source),
        ]

    def call(
        self,
        template: str,
        libname: str,
        restype: Any,
        expression: str,
        **args: str,
    ) -> Any:
        """Build the probe, call its exported function once and clean up.

        Raises ResolutionFailure if the probe does not build, load or export
        the expected symbol.
        """
        export = template.replace("-", "_")
        source_text = self.templates.render(template, expression=expression, **args)
        name = unique_name(libname)

        with tempfile.TemporaryDirectory(prefix=f"{template}-{name}-") as tmpdir:
            source = Path(tmpdir) / f"{template}{self.config.source_suffix}"
            source.write_text(source_text, encoding="utf-8")
            library = Path(tmpdir) / f"lib{name}.so"

            result = self.runner(self.build_command(source, library), timeout=self.timeout)
            if not result.ok:
                raise ResolutionFailure(
                    "build",
                    expression,
                    f"compiler exited with status {result.returncode}",
                    stderr=result.stderr,
                )

            try:
                handle = ctypes.CDLL(str(library))
            except OSError as e:
                raise ResolutionFailure("load", expression, str(e))

            try:
                function = getattr(handle, export)
            except AttributeError:
                _unload(handle)
                raise ResolutionFailure("load", expression, f"symbol {export} not exported")

            function.argtypes = []
            function.restype = restype
            try:
                value = function()
            finally:
                _unload(handle)

        logging.debug(f"Probe {name} for '{expression}' returned {value!r}")
        return value
