"""
Server process runner shared by subprocess-based backends.
"""
import asyncio
import logging
import os
import stat
from dataclasses import dataclass, field
from typing import List, Optional, TextIO

from unified_inference.config.settings import settings
from unified_inference.errors import BackendExitedError, BackendLaunchError


@dataclass
class RunnerConfig:
    """Everything needed to launch one backend server process."""

    backend_name: str
    socket: str
    binary_path: str
    args: List[str]
    logger: logging.Logger
    server_log_writer: TextIO
    sandbox_path: Optional[str] = None
    env: dict = field(default_factory=dict)
    shutdown_grace_period: Optional[float] = None


def remove_stale_socket(socket: str, logger: logging.Logger):
    """Remove a leftover Unix socket file at the given path, if any."""
    try:
        st = os.lstat(socket)
    except OSError:
        return
    if not stat.S_ISSOCK(st.st_mode):
        return
    try:
        os.remove(socket)
    except OSError as e:
        logger.warning(f"Failed to remove stale socket {socket}: {e}")


async def _pump_output(stream: asyncio.StreamReader, writer: TextIO):
    """Copy process output to the server log sink line by line."""
    while True:
        line = await stream.readline()
        if not line:
            break
        writer.write(line.decode("utf-8", errors="replace"))
    writer.flush()


async def _terminate(process: asyncio.subprocess.Process, grace_period: float, logger: logging.Logger):
    """Stop the process gracefully, killing it after the grace period."""
    if process.returncode is not None:
        return
    try:
        process.terminate()
    except ProcessLookupError:
        return
    try:
        await asyncio.wait_for(process.wait(), timeout=grace_period)
    except asyncio.TimeoutError:
        logger.warning(f"Process {process.pid} did not stop gracefully, killing")
        try:
            process.kill()
        except ProcessLookupError:
            pass
        await process.wait()


async def run_backend(config: RunnerConfig):
    """
    Run a backend server process until it exits or the task is cancelled.

    Output of the process is streamed to config.server_log_writer. On
    cancellation the process is terminated and reaped before CancelledError
    propagates.

    Raises:
        BackendLaunchError: if the process cannot be started
        BackendExitedError: if the process exits on its own
    """
    logger = config.logger
    grace_period = config.shutdown_grace_period
    if grace_period is None:
        grace_period = settings.shutdown_grace_period

    remove_stale_socket(config.socket, logger)

    env = {**os.environ, **config.env}
    if config.sandbox_path:
        env["PATH"] = config.sandbox_path + os.pathsep + env.get("PATH", "")

    logger.info(f"Starting {config.backend_name} server on {config.socket}")
    logger.debug(f"Command: {config.binary_path} {' '.join(config.args)}")

    try:
        process = await asyncio.create_subprocess_exec(
            config.binary_path,
            *config.args,
            cwd=config.sandbox_path or None,
            env=env,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
    except OSError as e:
        raise BackendLaunchError(f"unable to start {config.backend_name}: {e}") from e

    logger.info(f"{config.backend_name} server started (PID: {process.pid})")
    pump = asyncio.create_task(_pump_output(process.stdout, config.server_log_writer))

    try:
        returncode = await process.wait()
        await pump
    except asyncio.CancelledError:
        logger.info(f"Stopping {config.backend_name} server (PID: {process.pid})")
        await _terminate(process, grace_period, logger)
        pump.cancel()
        try:
            await pump
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.warning(f"{config.backend_name} log streaming failed: {e}")
        raise

    logger.error(f"{config.backend_name} server exited with code {returncode}")
    raise BackendExitedError(
        f"{config.backend_name} terminated unexpectedly with exit code {returncode}",
        returncode=returncode,
    )
