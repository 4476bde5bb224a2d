import signal
import sys

from const_introspect.toolchain import CommandResult, run_command

LATIN1_SCRIPT = (
    "import sys; "
    "sys.stdout.buffer.write(b'#define NAME \"caf\\xe9\"\\n'); "
    "sys.stderr.buffer.write(b'error: undeclared_caf\\xe9\\n'); "
    "sys.exit(1)"
)


def test_run_command_tolerates_non_utf8_output():
    """Bytes that are not UTF-8 are replaced rather than raising."""
    result = run_command([sys.executable, "-c", LATIN1_SCRIPT])
    assert result.returncode == 1
    assert not result.ok
    assert result.stdout == '#define NAME "caf\ufffd"\n'
    assert result.stderr == "error: undeclared_caf\ufffd\n"


def test_run_command_missing_executable():
    result = run_command(["does-not-exist-anywhere-cc"])
    assert result.returncode == 127
    assert result.signal == 0


def test_command_result_signal():
    """A negative return code means the process was killed by that signal."""
    killed = CommandResult(["cc"], "", "", -signal.SIGKILL)
    assert killed.signal == signal.SIGKILL
    assert not killed.ok
    assert CommandResult(["cc"], "", "", 1).signal == 0
