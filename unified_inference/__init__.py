"""unified-inference SGLang backend adapter."""

__version__ = "0.1.0"
