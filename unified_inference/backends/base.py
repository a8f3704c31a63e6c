"""
Abstract base class for inference engine backends.
"""
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional

import httpx
from pydantic import BaseModel, Field


class BackendMode(str, Enum):
    """Serving capability requested for a run."""

    COMPLETION = "completion"
    EMBEDDING = "embedding"
    RERANKING = "reranking"


class BackendConfiguration(BaseModel):
    """Caller-supplied tuning overrides for a run."""

    context_size: Optional[int] = Field(None, description="Context length override (ignored unless > 0)")
    runtime_flags: List[str] = Field(default_factory=list, description="Raw flags passed through verbatim")


class RequiredMemory(BaseModel):
    """Estimated memory needed to serve a model, in bytes."""

    ram: int
    vram: int


class Backend(ABC):
    """Contract every inference engine backend implements for the orchestrator."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Constant backend identifier."""
        pass

    def uses_external_model_management(self) -> bool:
        """Whether the engine fetches and stores models itself."""
        return False

    @abstractmethod
    async def install(self, http_client: Optional[httpx.AsyncClient] = None):
        """
        Probe the environment and make the engine ready to run.

        Raises:
            BackendError: if the engine cannot be used here
        """
        pass

    @abstractmethod
    async def run(
        self,
        socket: str,
        model: str,
        model_ref: str,
        mode: BackendMode,
        config: Optional[BackendConfiguration] = None,
    ):
        """
        Serve a model until the task is cancelled or the server exits.

        Raises:
            BackendError: if the server cannot be launched or exits
        """
        pass

    @property
    @abstractmethod
    def status(self) -> str:
        """Human-readable installation status."""
        pass

    @abstractmethod
    def get_disk_usage(self) -> int:
        """Bytes used by the engine installation."""
        pass

    @abstractmethod
    async def get_required_memory_for_model(
        self,
        model: str,
        config: Optional[BackendConfiguration] = None,
    ) -> RequiredMemory:
        """Estimate memory needed to serve the model."""
        pass
