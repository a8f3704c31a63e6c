"""
Pytest configuration and shared fixtures.
"""
import os
import stat
import pytest

from unified_inference.config.models import ModelBundle, RuntimeConfig


def write_script(path, body: str) -> str:
    """Write an executable shell script and return its path."""
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(path)


@pytest.fixture
def bundle():
    """Bundle with a weights file and no declared context size."""
    return ModelBundle(name="smollm2", safetensors_path="/models/smollm2/model.safetensors")


@pytest.fixture
def bundle_with_context():
    """Bundle declaring an 8192-token context."""
    return ModelBundle(
        name="qwen3",
        safetensors_path="/models/qwen3/model-00001-of-00002.safetensors",
        runtime_config=RuntimeConfig(context_size=8192),
    )


@pytest.fixture
def prebuilt_dir(tmp_path):
    """Prebuilt SGLang layout: <env>/bin/sglang plus <env>/version."""
    env_dir = tmp_path / "sglang-env"
    bin_dir = env_dir / "bin"
    bin_dir.mkdir(parents=True)
    write_script(bin_dir / "sglang", "exit 0\n")
    (env_dir / "version").write_text("0.4.9.post2\n")
    return str(bin_dir)


@pytest.fixture
def missing_dir(tmp_path):
    """Prebuilt directory that does not exist."""
    return str(tmp_path / "absent" / "bin")


@pytest.fixture
def fake_python(tmp_path):
    """Interpreter stand-in where sglang imports and reports a version."""
    return write_script(
        tmp_path / "python3",
        'case "$2" in\n'
        '  *__version__*) echo "0.5.0rc1" ;;\n'
        "esac\n"
        "exit 0\n",
    )


@pytest.fixture
def python_without_sglang(tmp_path):
    """Interpreter stand-in where importing sglang fails."""
    return write_script(
        tmp_path / "python3",
        'echo "ModuleNotFoundError: No module named \'sglang\'" >&2\n'
        "exit 1\n",
    )


@pytest.fixture
def python_without_version(tmp_path):
    """Interpreter stand-in where sglang imports but the version query fails."""
    return write_script(
        tmp_path / "python3",
        'case "$2" in\n'
        "  *__version__*) exit 1 ;;\n"
        "esac\n"
        "exit 0\n",
    )


@pytest.fixture
def models_yaml(tmp_path):
    """Registry file with one absolute, one relative and one weightless bundle."""
    path = tmp_path / "models.yaml"
    path.write_text(
        "models:\n"
        "  - name: smollm2\n"
        "    safetensors_path: /models/smollm2/model.safetensors\n"
        "    runtime_config:\n"
        "      context_size: 8192\n"
        "  - name: local\n"
        "    safetensors_path: weights/local/model.safetensors\n"
        "  - name: empty\n"
    )
    return str(path)


@pytest.fixture
def clean_env(monkeypatch):
    """Drop UNIFIED_INFERENCE_* variables that would leak into Settings."""
    for key in list(os.environ):
        if key.startswith("UNIFIED_INFERENCE_"):
            monkeypatch.delenv(key)
