import logging
import shlex
import shutil
import signal
import subprocess
import sysconfig
from dataclasses import dataclass
from typing import List, Optional, Tuple


@dataclass
class CommandResult:
    command: List[str]
    stdout: str
    stderr: str
    returncode: int

    @property
    def signal(self) -> int:
        """Signal number that terminated the process, or 0."""
        return -self.returncode if self.returncode < 0 else 0

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def host_toolchain() -> Tuple[List[str], List[str]]:
    """Return the (cc, cflags) the running interpreter was built with.

    Falls back to plain ``cc`` without flags when the configured compiler
    is not available on this machine.
    """
    cc = shlex.split(sysconfig.get_config_var("CC") or "")
    cflags = shlex.split(sysconfig.get_config_var("CFLAGS") or "")

    if cc and shutil.which(cc[0]):
        logging.debug(f"Using host compiler: {' '.join(cc)}")
        return cc, cflags

    logging.debug(f"Host compiler {cc[:1]} not found, falling back to 'cc'")
    return ["cc"], []


def default_cc() -> List[str]:
    return host_toolchain()[0]


def default_cflags() -> List[str]:
    return host_toolchain()[1]


def run_command(
    command: List[str], timeout: Optional[float] = None
) -> CommandResult:
    """Run a command, capturing stdout and stderr.

    Output is decoded as UTF-8 with undecodable bytes replaced, since
    headers may carry other encodings.  A missing executable is reported as
    returncode 127 and an expired timeout as -SIGKILL.
    """
    logging.debug(f"Running command: {' '.join(command)}")

    try:
        proc = subprocess.run(
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except FileNotFoundError as e:
        logging.debug(f"Executable not found: {e}")
        return CommandResult(command, "", str(e), 127)
    except subprocess.TimeoutExpired as e:
        logging.debug(f"Command timed out after {timeout}s")
        stderr = e.stderr or ""
        if isinstance(stderr, bytes):
            stderr = stderr.decode(errors="replace")
        return CommandResult(command, "", stderr, -signal.SIGKILL)

    return CommandResult(command, proc.stdout, proc.stderr, proc.returncode)
