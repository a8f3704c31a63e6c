"""Configuration module."""
from .settings import settings, Settings
from .models import ModelBundle, ModelRegistry, RuntimeConfig

__all__ = ["settings", "Settings", "ModelBundle", "ModelRegistry", "RuntimeConfig"]
