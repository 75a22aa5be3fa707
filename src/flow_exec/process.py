"""Subprocess launch + concurrent stdout/stderr capture.

Each launch spawns the child with stdin closed and starts two drain threads,
one per output pipe. The drains and the waiting caller share one
``threading.Condition``; ``run`` returns only once the child has exited and
both drains have finished, in whichever order those happen.
"""

import os
import subprocess
import threading
from dataclasses import dataclass, field
from typing import NamedTuple

from flow_exec import log

_CHUNK_SIZE = 8192


class RunError(RuntimeError):
    """Host-level failure while launching or waiting on a child process."""


class LaunchError(RunError):
    """The child process could not be spawned."""


class CommandFailedError(RuntimeError):
    def __init__(self, returncode: int, stdout: str, stderr: str):
        super().__init__(
            f"Exec process returned {returncode}.  StdOut:\n{stdout}\nStdErr:\n{stderr}"
        )
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


@dataclass(frozen=True)
class Result:
    returncode: int
    stdout: str
    stderr: str

    def ensure_ok(self) -> None:
        """Raise CommandFailedError on a non-zero exit."""
        if self.returncode != 0:
            raise CommandFailedError(self.returncode, self.stdout, self.stderr)


@dataclass
class DrainState:
    chunks: list[str] = field(default_factory=list)
    finished: bool = False
    error: Exception | None = None

    @property
    def text(self) -> str:
        return "".join(self.chunks)


class Launched(NamedTuple):
    proc: subprocess.Popen
    stdout: DrainState
    stderr: DrainState
    cond: threading.Condition


def _drain(stream, state: DrainState, cond: threading.Condition) -> None:
    """Read *stream* to EOF into *state*, then signal *cond*.

    Read errors are logged and swallowed; whatever was read before the error
    is kept. The stream is closed after the completion signal.
    """
    with stream:
        try:
            for chunk in iter(lambda: stream.read(_CHUNK_SIZE), ""):
                state.chunks.append(chunk)
        except (OSError, ValueError) as e:
            state.error = e
            log.error(f"Error reading from stream: {e}")
        finally:
            with cond:
                state.finished = True
                cond.notify_all()


def split_command(cmd: str) -> list[str]:
    """Split on whitespace runs. No quoting: use an argv for arguments with spaces."""
    return cmd.split()


def parse_env(entries: list[str]) -> dict[str, str]:
    """Parse ``KEY=VALUE`` strings; entries without a key or value are skipped."""
    env = {}
    for entry in entries:
        key, sep, value = entry.partition("=")
        if sep and key and value:
            env[key] = value
    return env


def launch(
    args: list[str],
    env: dict[str, str] | None = None,
    cwd: str | None = None,
    capture: bool = True,
) -> Launched:
    """Spawn *args* with stdin closed and start draining stdout/stderr.

    *env* is merged over the inherited environment. With ``capture=False``
    the output goes to the null device, no drains are started and both
    DrainStates are already finished. Raises LaunchError when the host
    cannot spawn the process.
    """
    if not args:
        raise ValueError("Cannot launch an empty command")

    log.debug(f"Exec {list(args)}")

    merged_env = None
    if env is not None:
        merged_env = {**os.environ, **env}

    sink = subprocess.PIPE if capture else subprocess.DEVNULL
    try:
        proc = subprocess.Popen(
            list(args),
            stdin=subprocess.PIPE,
            stdout=sink,
            stderr=sink,
            text=True,
            errors="replace",
            env=merged_env,
            cwd=cwd,
        )
    except OSError as e:
        raise LaunchError(f"Failed to launch {args[0]}: {e}") from e

    proc.stdin.close()

    cond = threading.Condition()
    out_state = DrainState(finished=not capture)
    err_state = DrainState(finished=not capture)
    if not capture:
        return Launched(proc=proc, stdout=out_state, stderr=err_state, cond=cond)

    for name, stream, state in (
        ("stdout", proc.stdout, out_state),
        ("stderr", proc.stderr, err_state),
    ):
        threading.Thread(
            target=_drain,
            args=(stream, state, cond),
            name=f"drain-{proc.pid}-{name}",
            daemon=True,
        ).start()

    return Launched(proc=proc, stdout=out_state, stderr=err_state, cond=cond)


def run(args: list[str], env: dict[str, str] | None = None, cwd: str | None = None) -> Result:
    """Run a command and capture output. A non-zero exit is not an error."""
    launched = launch(args, env=env, cwd=cwd)

    try:
        returncode = launched.proc.wait()
    except OSError as e:
        raise RunError(f"Failed waiting on {args[0]}: {e}") from e

    # Output can still be in flight after the child exits.
    with launched.cond:
        launched.cond.wait_for(lambda: launched.stdout.finished and launched.stderr.finished)

    log.debug(f"Exec finished with status {returncode}")
    return Result(
        returncode=returncode,
        stdout=launched.stdout.text,
        stderr=launched.stderr.text,
    )


def run_async(
    args: list[str],
    env: dict[str, str] | None = None,
    cwd: str | None = None,
    capture: bool = True,
) -> None:
    """Launch a command and return immediately. The outcome is not observable.

    Pass ``capture=False`` when the caller may exit before the child: piped
    output would then have no reader and the child's writes would fail.
    """
    launched = launch(args, env=env, cwd=cwd, capture=capture)
    # Reap the child so it doesn't linger as a zombie.
    threading.Thread(
        target=launched.proc.wait,
        name=f"reap-{launched.proc.pid}",
        daemon=True,
    ).start()


def run_command(command: str, env: dict[str, str] | None = None, cwd: str | None = None) -> Result:
    return run(split_command(command), env=env, cwd=cwd)


def run_async_command(
    command: str, env: dict[str, str] | None = None, cwd: str | None = None
) -> None:
    run_async(split_command(command), env=env, cwd=cwd)
