"""
Command-line construction for the SGLang server.
"""
import os
from typing import List, Optional

from unified_inference.backends.base import BackendConfiguration, BackendMode
from unified_inference.config.models import ModelBundle, RuntimeConfig
from unified_inference.errors import MissingArtifactError, UnsupportedModeError

# SGLang runs as a Python module: python -m sglang.launch_server
LAUNCH_MODULE = ["-m", "sglang.launch_server"]


class SGLangConfig:
    """Configuration for the SGLang backend."""

    def __init__(self, args: Optional[List[str]] = None):
        # Base arguments prepended to every invocation
        self.args: List[str] = list(args or [])

    def get_args(
        self,
        bundle: ModelBundle,
        socket: str,
        mode: BackendMode,
        config: Optional[BackendConfiguration] = None,
    ) -> List[str]:
        """
        Build the SGLang server arguments for a model bundle.

        Args:
            bundle: Model bundle to serve
            socket: Address the server binds to
            mode: Requested serving capability
            config: Optional caller overrides

        Returns:
            Ordered argument list, excluding the executable

        Raises:
            MissingArtifactError: if the bundle has no safetensors file
            UnsupportedModeError: if SGLang cannot serve the mode
        """
        args = list(self.args)
        args.extend(LAUNCH_MODULE)

        # SGLang loads a model directory, not a single weights file
        safetensors_path = bundle.safetensors_path
        if not safetensors_path:
            raise MissingArtifactError("safetensors path required by SGLang backend")
        model_path = os.path.dirname(safetensors_path)

        args.extend(["--model-path", model_path])
        args.extend(["--host", socket])

        if mode == BackendMode.COMPLETION:
            pass  # default capability
        elif mode == BackendMode.EMBEDDING:
            args.append("--is-embedding")
        elif mode == BackendMode.RERANKING:
            raise UnsupportedModeError("reranking mode not supported by SGLang backend")
        else:
            raise UnsupportedModeError(
                f"unsupported backend mode '{getattr(mode, 'value', mode)}'"
            )

        context_length = get_context_length(bundle.runtime_config, config)
        if context_length is not None:
            args.extend(["--context-length", str(context_length)])

        # Passthrough flags go last so they cannot precede structured ones
        if config is not None:
            args.extend(config.runtime_flags)

        return args


def get_context_length(
    model_config: RuntimeConfig,
    backend_config: Optional[BackendConfiguration],
) -> Optional[int]:
    """
    Resolve the context length to pass to SGLang.

    The bundle's declared value takes precedence over the caller override.
    Returns None when neither is set so SGLang derives it from the model.
    """
    if model_config.context_size is not None:
        return model_config.context_size
    if backend_config is not None and backend_config.context_size and backend_config.context_size > 0:
        return backend_config.context_size
    return None
