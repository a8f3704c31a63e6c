"""
Structured backend errors.

Every failure the adapter reports derives from BackendError and carries a
stable code, so callers can branch on the class or on the code.
"""
from typing import Optional
from pydantic import BaseModel


class ErrorDetail(BaseModel):
    """Structured error detail."""
    code: str
    message: str
    hint: Optional[str] = None


class BackendError(Exception):
    """Base class for all backend errors."""

    code = "BACKEND_ERROR"

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.hint = hint

    def to_detail(self) -> ErrorDetail:
        return ErrorDetail(code=self.code, message=self.message, hint=self.hint)


class UnsupportedPlatformError(BackendError):
    """The current platform cannot run this engine."""
    code = "UNSUPPORTED_PLATFORM"


class EngineNotFoundError(BackendError):
    """Neither a prebuilt binary nor a usable interpreter was found."""
    code = "ENGINE_NOT_FOUND"


class PackageNotInstalledError(BackendError):
    """An interpreter was found but the engine package cannot be imported."""
    code = "PACKAGE_NOT_INSTALLED"


class MissingArtifactError(BackendError):
    """The model bundle has no usable weights path."""
    code = "MISSING_ARTIFACT"


class UnsupportedModeError(BackendError):
    """The requested operating mode is not supported by the engine."""
    code = "UNSUPPORTED_MODE"


class ModelNotFoundError(BackendError):
    """The model bundle is not registered."""
    code = "MODEL_NOT_FOUND"


class ProbeFailedError(BackendError):
    """An I/O error prevented installation detection."""
    code = "PROBE_FAILED"


class DiskUsageError(BackendError):
    """Measuring the installation footprint failed."""
    code = "DISK_USAGE_FAILED"


class BackendLaunchError(BackendError):
    """The server process could not be started."""
    code = "BACKEND_LAUNCH_FAILED"


class BackendExitedError(BackendError):
    """The server process exited on its own."""

    code = "BACKEND_EXITED"

    def __init__(self, message: str, returncode: Optional[int] = None, hint: Optional[str] = None):
        super().__init__(message, hint=hint)
        self.returncode = returncode
