"""
Platform capability checks.
"""
import sys


def supports_sglang() -> bool:
    """SGLang ships Linux wheels only."""
    return sys.platform.startswith("linux")
