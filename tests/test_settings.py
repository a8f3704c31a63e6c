"""
Tests for settings and small filesystem helpers.
"""
import pytest

from unified_inference import diskusage
from unified_inference.config.settings import Settings


@pytest.mark.unit
class TestSettings:
    """Test environment-driven configuration."""

    def test_defaults(self, clean_env):
        s = Settings()
        assert s.sglang_dir == "/opt/sglang-env/bin"
        assert s.python_executable == "python3"
        assert s.shutdown_grace_period == 30

    def test_env_override(self, clean_env, monkeypatch):
        monkeypatch.setenv("UNIFIED_INFERENCE_SGLANG_DIR", "/srv/sglang/bin")
        monkeypatch.setenv("UNIFIED_INFERENCE_PYTHON_EXECUTABLE", "python3.11")
        s = Settings()
        assert s.sglang_dir == "/srv/sglang/bin"
        assert s.python_executable == "python3.11"


@pytest.mark.unit
class TestDiskUsage:
    """Test recursive size measurement."""

    def test_size_counts_nested_files(self, tmp_path):
        (tmp_path / "a" / "b").mkdir(parents=True)
        (tmp_path / "one").write_bytes(b"1" * 10)
        (tmp_path / "a" / "two").write_bytes(b"2" * 20)
        (tmp_path / "a" / "b" / "three").write_bytes(b"3" * 30)
        assert diskusage.size(str(tmp_path)) == 60

    def test_symlinks_not_followed(self, tmp_path):
        target = tmp_path / "outside"
        target.write_bytes(b"x" * 500)
        tree = tmp_path / "tree"
        tree.mkdir()
        (tree / "file").write_bytes(b"x" * 5)
        (tree / "link").symlink_to(target)
        assert diskusage.size(str(tree)) == 5

    def test_missing_dir_raises(self, tmp_path):
        with pytest.raises(OSError):
            diskusage.size(str(tmp_path / "missing"))
