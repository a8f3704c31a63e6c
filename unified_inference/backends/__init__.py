"""Inference engine backends."""
from .base import Backend, BackendConfiguration, BackendMode, RequiredMemory
from .sglang import SGLangBackend, Topology
from .sglang_config import SGLangConfig

__all__ = [
    "Backend",
    "BackendConfiguration",
    "BackendMode",
    "RequiredMemory",
    "SGLangBackend",
    "SGLangConfig",
    "Topology",
]
