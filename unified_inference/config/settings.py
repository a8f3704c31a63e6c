"""
Global settings for the SGLang backend adapter.
"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Deployment configuration, overridable via UNIFIED_INFERENCE_* env vars."""

    # Prebuilt (Docker image) installation
    sglang_dir: str = "/opt/sglang-env/bin"
    sglang_binary_name: str = "sglang"

    # Host installation: interpreter looked up on PATH
    python_executable: str = "python3"

    # Model bundle registry
    models_config_path: str = "/app/config/models.yaml"

    # Process lifecycle
    shutdown_grace_period: int = 30  # seconds between SIGTERM and SIGKILL

    # Logging
    log_level: str = "INFO"

    class Config:
        env_prefix = "UNIFIED_INFERENCE_"
        case_sensitive = False


settings = Settings()
