"""
SGLang backend: installation detection and server launch.

SGLang is found in one of two layouts:

* a prebuilt environment shipped in the Docker image, with a ``sglang``
  launcher under ``sglang_dir`` and a ``version`` file next to it;
* a host Python interpreter with the ``sglang`` package importable.

The prebuilt layout always wins when present.
"""
import asyncio
import logging
import os
import shutil
import threading
from enum import Enum
from typing import Callable, Optional, TextIO

import httpx

from unified_inference import diskusage
from unified_inference.backends.base import Backend, BackendConfiguration, BackendMode, RequiredMemory
from unified_inference.backends.runner import RunnerConfig, run_backend
from unified_inference.backends.sglang_config import SGLangConfig
from unified_inference.config.settings import settings
from unified_inference.errors import (
    DiskUsageError,
    EngineNotFoundError,
    PackageNotInstalledError,
    ProbeFailedError,
    UnsupportedPlatformError,
)
from unified_inference.log import LoggerWriter
from unified_inference.platform_support import supports_sglang

logger = logging.getLogger(__name__)

NAME = "sglang"

STATUS_NOT_INSTALLED = "not installed"
STATUS_NOT_FOUND = "SGLang binary not found"
STATUS_PACKAGE_MISSING = "sglang package not installed"
STATUS_VERSION_UNKNOWN = "running sglang version: unknown"

INSTALL_HINT = 'pip install "sglang[all]"'


class Topology(str, Enum):
    """Installation layout detected by install()."""

    DOCKER_PREBUILT = "docker_prebuilt"
    HOST_PYTHON = "host_python"
    NOT_FOUND = "not_found"


def _running_status(version: str) -> str:
    return f"running sglang version: {version}"


class SGLangBackend(Backend):
    """SGLang-based backend for the orchestrator."""

    def __init__(
        self,
        model_manager,
        server_log: Optional[TextIO] = None,
        config: Optional[SGLangConfig] = None,
        sglang_dir: Optional[str] = None,
        python_executable: Optional[str] = None,
        platform_check: Optional[Callable[[], bool]] = None,
    ):
        """
        Args:
            model_manager: Bundle lookup exposing get_bundle(name)
            server_log: Sink for the server process output
            config: Base arguments for every invocation
            sglang_dir: Directory of the prebuilt installation
            python_executable: Interpreter name or path for host installs
            platform_check: Predicate telling whether SGLang can run here
        """
        self.model_manager = model_manager
        self.server_log = server_log or LoggerWriter(logging.getLogger(f"{__name__}.server"))
        self.config = config or SGLangConfig()
        self.sglang_dir = sglang_dir or settings.sglang_dir
        self.python_executable = python_executable or settings.python_executable
        self.platform_check = platform_check or supports_sglang

        self._lock = threading.Lock()
        self._status = STATUS_NOT_INSTALLED
        self._topology: Optional[Topology] = None
        self._python_path: Optional[str] = None

    @property
    def name(self) -> str:
        return NAME

    @property
    def status(self) -> str:
        with self._lock:
            return self._status

    @property
    def topology(self) -> Optional[Topology]:
        """Layout found by the last install(), None before the first call."""
        with self._lock:
            return self._topology

    @property
    def python_path(self) -> Optional[str]:
        with self._lock:
            return self._python_path

    @property
    def binary_path(self) -> str:
        return os.path.join(self.sglang_dir, settings.sglang_binary_name)

    @property
    def version_path(self) -> str:
        return os.path.join(os.path.dirname(os.path.normpath(self.sglang_dir)), "version")

    def _set_state(self, status: str, topology: Topology, python_path: Optional[str] = None):
        with self._lock:
            self._status = status
            self._topology = topology
            self._python_path = python_path

    def uses_external_model_management(self) -> bool:
        return False

    async def install(self, http_client: Optional[httpx.AsyncClient] = None):
        """
        Detect which SGLang installation is usable.

        Re-probes on every call and overwrites the previous state.

        Raises:
            UnsupportedPlatformError: if SGLang cannot run on this platform
            ProbeFailedError: if the prebuilt binary cannot be checked
            EngineNotFoundError: if no interpreter is available
            PackageNotInstalledError: if the interpreter lacks the sglang package
        """
        if not self.platform_check():
            raise UnsupportedPlatformError("SGLang is not supported on this platform")

        try:
            os.stat(self.binary_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise ProbeFailedError(f"failed to check SGLang binary: {e}") from e
        else:
            self._set_state(self._read_version_file(), Topology.DOCKER_PREBUILT)
            logger.info(f"Using prebuilt SGLang at {self.binary_path}")
            return

        await self._install_host_python()

    def _read_version_file(self) -> str:
        try:
            with open(self.version_path, "r") as f:
                version = f.read().strip()
        except OSError as e:
            logger.warning(f"could not get sglang version: {e}")
            return STATUS_VERSION_UNKNOWN
        return _running_status(version)

    async def _install_host_python(self):
        python_path = shutil.which(self.python_executable)
        if python_path is None:
            self._set_state(STATUS_NOT_FOUND, Topology.NOT_FOUND)
            raise EngineNotFoundError(STATUS_NOT_FOUND)

        returncode, _ = await _run_python(python_path, "import sglang")
        if returncode != 0:
            self._set_state(STATUS_PACKAGE_MISSING, Topology.NOT_FOUND, python_path)
            logger.warning(f"sglang package not found. Install with: {INSTALL_HINT}")
            raise PackageNotInstalledError(
                f"sglang package not installed for {python_path} (exit code {returncode})"
            )

        returncode, output = await _run_python(python_path, "import sglang; print(sglang.__version__)")
        if returncode != 0:
            logger.warning(f"could not get sglang version: exit code {returncode}")
            status = STATUS_VERSION_UNKNOWN
        else:
            status = _running_status(output.strip())

        self._set_state(status, Topology.HOST_PYTHON, python_path)
        logger.info(f"Using host SGLang package via {python_path}")

    async def run(
        self,
        socket: str,
        model: str,
        model_ref: str,
        mode: BackendMode,
        config: Optional[BackendConfiguration] = None,
    ):
        """
        Serve a model with SGLang until cancelled.

        Raises:
            UnsupportedPlatformError: if SGLang cannot run on this platform
            ModelNotFoundError: if the model bundle is unknown
            MissingArtifactError: if the bundle has no safetensors file
            UnsupportedModeError: if SGLang cannot serve the mode
            EngineNotFoundError: if no SGLang installation is available
            BackendLaunchError: if the server cannot be started
            BackendExitedError: if the server exits on its own
        """
        if not self.platform_check():
            logger.warning("SGLang backend is not supported on this platform")
            raise UnsupportedPlatformError("SGLang is not supported on this platform")

        bundle = self.model_manager.get_bundle(model)
        args = self.config.get_args(bundle, socket, mode, config)

        # Run-scoped identifiers
        args.extend(["--served-model-name", model, model_ref])

        # Prefer the prebuilt install; the host interpreter runs unsandboxed
        binary_path = self.binary_path
        sandbox_path: Optional[str] = self.sglang_dir
        if not os.path.exists(binary_path):
            binary_path = self.python_path
            sandbox_path = None
        if not binary_path:
            raise EngineNotFoundError(STATUS_NOT_FOUND)

        await run_backend(RunnerConfig(
            backend_name="SGLang",
            socket=socket,
            binary_path=binary_path,
            sandbox_path=sandbox_path,
            args=args,
            logger=logger,
            server_log_writer=self.server_log,
        ))

    def get_disk_usage(self) -> int:
        """Size of the prebuilt installation; host installs report 0."""
        if not os.path.isdir(self.sglang_dir):
            return 0
        try:
            return diskusage.size(self.sglang_dir)
        except OSError as e:
            raise DiskUsageError(f"error while getting store size: {e}") from e

    async def get_required_memory_for_model(
        self,
        model: str,
        config: Optional[BackendConfiguration] = None,
    ) -> RequiredMemory:
        """
        Placeholder estimate; SGLang's footprint is not computed from the model.

        Raises:
            UnsupportedPlatformError: if SGLang cannot run on this platform
        """
        if not self.platform_check():
            raise UnsupportedPlatformError("SGLang is not supported on this platform")

        # TODO: derive from the bundle's parameter count and dtype
        return RequiredMemory(ram=1, vram=1)


async def _run_python(python_path: str, code: str):
    """Run a snippet with the given interpreter, returning (returncode, stdout)."""
    try:
        process = await asyncio.create_subprocess_exec(
            python_path,
            "-c",
            code,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.DEVNULL,
        )
    except OSError as e:
        logger.debug(f"Failed to execute {python_path}: {e}")
        return -1, ""

    try:
        stdout, _ = await process.communicate()
    except asyncio.CancelledError:
        if process.returncode is None:
            process.kill()
            await process.wait()
        raise
    return process.returncode, stdout.decode("utf-8", errors="replace")
