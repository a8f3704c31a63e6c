"""
Model bundle registry loader and definitions.
"""
import os
import yaml
from pathlib import Path
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, validator

from unified_inference.errors import ModelNotFoundError


class RuntimeConfig(BaseModel):
    """Runtime configuration declared by a model bundle."""

    context_size: Optional[int] = Field(None, description="Declared context length in tokens")

    @validator("context_size")
    def validate_context_size(cls, v):
        if v is not None and v <= 0:
            raise ValueError("context_size must be positive")
        return v


class ModelBundle(BaseModel):
    """A named model bundle with its on-disk artifacts."""

    name: str = Field(..., description="Unique model identifier")
    safetensors_path: str = Field("", description="Path to a safetensors weights file")
    runtime_config: RuntimeConfig = Field(default_factory=RuntimeConfig)

    class Config:
        extra = "allow"  # Allow additional fields for other backends


class ModelRegistry:
    """Registry of model bundles loaded from YAML."""

    def __init__(self, config_path: str):
        self.config_path = Path(config_path)
        self.models: Dict[str, ModelBundle] = {}
        self._load()

    def _load(self):
        """Load bundles from YAML file."""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Model config not found: {self.config_path}")

        with open(self.config_path, "r") as f:
            data = yaml.safe_load(f)

        if not data or "models" not in data:
            raise ValueError("Invalid models.yaml: missing 'models' key")

        base_dir = self.config_path.parent
        for model_data in data["models"]:
            bundle = ModelBundle(**model_data)

            # Relative weight paths are relative to the registry file
            if bundle.safetensors_path and not os.path.isabs(bundle.safetensors_path):
                bundle.safetensors_path = str(base_dir / bundle.safetensors_path)

            self.models[bundle.name] = bundle

    def get(self, name: str) -> Optional[ModelBundle]:
        """Get bundle by name."""
        return self.models.get(name)

    def get_bundle(self, name: str) -> ModelBundle:
        """Get bundle by name, raising ModelNotFoundError if unknown."""
        bundle = self.models.get(name)
        if bundle is None:
            raise ModelNotFoundError(
                f"Model '{name}' is not registered",
                hint=f"Available models: {', '.join(sorted(self.models)) or 'none'}",
            )
        return bundle

    def list_models(self) -> List[ModelBundle]:
        """List all bundles."""
        return list(self.models.values())

    def reload(self):
        """Reload bundles from YAML."""
        self.models.clear()
        self._load()
