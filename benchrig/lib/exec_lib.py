"""
External command execution.

run_cmd() covers build-time tool invocations: blocking, no time bound,
output streamed live. run_bounded() covers benchmark processes: output
streamed into a results sink, with a wall-clock bound in normal mode.

Copyright 2025 Advanced Micro Devices, Inc.
All rights reserved.
"""

from typing import List, Mapping, Optional, TextIO
import logging
import queue
import shlex
import subprocess
import sys
import threading

from benchrig.lib.errors import RunProcessError, RunTimeoutError, TerminationError

log = logging.getLogger(__name__)

# Short benchmarks take about a minute, long ones about ten.
RUN_TIMEOUT = 30 * 60

# Seconds a killed process's remaining output may still reach the results sink.
DRAIN_TIMEOUT = 5


class CommandError(Exception):
    """An external command could not be started or exited non-zero."""

    def __init__(self, cmd: List[str], returncode: Optional[int] = None, reason: Optional[str] = None):
        self.cmd = list(cmd)
        self.returncode = returncode
        if reason is None:
            reason = f"exit status {returncode}"
        super().__init__(f"{shlex.join(self.cmd)}: {reason}")


def trace_command(cmd: List[str], cwd: Optional[str] = None, env: Optional[Mapping[str, str]] = None):
    """Log a command line before it runs."""
    line = shlex.join(cmd)
    if cwd:
        log.info(f"cmd = {line} (in {cwd})")
    else:
        log.info(f"cmd = {line}")
    if env is not None:
        log.debug("env = " + " ".join(f"{k}={v}" for k, v in env.items()))


def start_process(
    cmd: List[str], cwd: Optional[str] = None, env: Optional[Mapping[str, str]] = None
) -> subprocess.Popen:
    """Start cmd with stdout and stderr merged into a single text pipe."""
    trace_command(cmd, cwd, env)
    return subprocess.Popen(
        cmd,
        cwd=cwd,
        env=env,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        errors="replace",
        bufsize=1,
    )


def _stream_and_wait(process: subprocess.Popen, sink: TextIO) -> int:
    """
    Copy process output to sink line by line, then wait for exit.

    If the sink fails the process is killed and reaped before the error
    propagates, so it never outlives the caller.
    """
    # Line by line so partial output survives a kill.
    try:
        with process.stdout:
            for line in process.stdout:
                sink.write(line)
                sink.flush()
    except Exception:
        process.kill()
        process.wait()
        raise
    return process.wait()


class _SinkGate:
    """Forwards writes to a sink until closed; later writes are dropped."""

    def __init__(self, sink: TextIO):
        self._sink = sink
        self._lock = threading.Lock()

    def write(self, data: str):
        with self._lock:
            if self._sink is not None:
                self._sink.write(data)

    def flush(self):
        with self._lock:
            if self._sink is not None:
                self._sink.flush()

    def close(self):
        with self._lock:
            self._sink = None


def run_cmd(
    cmd: List[str],
    cwd: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    output: Optional[TextIO] = None,
):
    """
    Run cmd to completion, streaming its output to `output` (stdout by default).

    Raises:
        CommandError: if cmd cannot be started, exits non-zero, or its output cannot be written.
    """
    if output is None:
        output = sys.stdout
    try:
        process = start_process(cmd, cwd=cwd, env=env)
    except OSError as e:
        raise CommandError(cmd, reason=str(e)) from e
    try:
        returncode = _stream_and_wait(process, output)
    except Exception as e:
        raise CommandError(cmd, reason=f"error writing output: {e}") from e
    if returncode != 0:
        raise CommandError(cmd, returncode=returncode)


def _check_exit(cmd: List[str], returncode: int):
    if returncode != 0:
        raise RunProcessError(f"{shlex.join(cmd)}: exit status {returncode}", returncode=returncode)


def _wait_into(process: subprocess.Popen, sink: TextIO, handoff: "queue.Queue"):
    try:
        outcome = _stream_and_wait(process, sink)
    except Exception as e:
        outcome = e
    handoff.put(outcome)


def run_bounded(
    cmd: List[str],
    results: TextIO,
    short: bool = False,
    timeout: float = RUN_TIMEOUT,
    env: Optional[Mapping[str, str]] = None,
    cwd: Optional[str] = None,
):
    """
    Run one benchmark process with its combined output streamed to `results`.

    In short mode the call blocks until the process exits. Otherwise the
    process races a wall-clock timer: a background waiter hands the exit
    status over a single-slot queue, and if the timer wins the process is
    killed.

    Args:
        cmd: Fully composed command line.
        results: Text sink receiving stdout and stderr as they are produced.
        short: Block without a time bound.
        timeout: Seconds allowed in normal mode.
        env: Environment for the child process.
        cwd: Working directory for the child process.

    Raises:
        RunProcessError: spawn failure, non-zero exit, or results sink failure (the process is killed first).
        RunTimeoutError: timeout elapsed and the process was killed.
        TerminationError: timeout elapsed and the kill itself failed.
    """
    try:
        process = start_process(cmd, cwd=cwd, env=env)
    except OSError as e:
        raise RunProcessError(f"failed to start {cmd[0]}: {e}") from e

    if short:
        try:
            returncode = _stream_and_wait(process, results)
        except Exception as e:
            raise RunProcessError(f"{shlex.join(cmd)}: error writing results: {e}") from e
        _check_exit(cmd, returncode)
        return

    gate = _SinkGate(results)
    handoff = queue.Queue(maxsize=1)
    waiter = threading.Thread(
        target=_wait_into, args=(process, gate, handoff), name=f"wait-{process.pid}", daemon=True
    )
    waiter.start()

    try:
        outcome = handoff.get(timeout=timeout)
    except queue.Empty:
        log.warning(f"Process {process.pid} exceeded {timeout}s, killing it")
        try:
            process.kill()
        except OSError as e:
            gate.close()
            raise TerminationError(f"timeout, error killing process {process.pid}: {e}") from e
        process.wait()
        # Grandchildren may hold the pipe open; stop forwarding once the drain window ends.
        waiter.join(DRAIN_TIMEOUT)
        gate.close()
        raise RunTimeoutError(f"timeout after {timeout}s")

    if isinstance(outcome, BaseException):
        raise RunProcessError(f"{shlex.join(cmd)}: {outcome}") from outcome
    _check_exit(cmd, outcome)
