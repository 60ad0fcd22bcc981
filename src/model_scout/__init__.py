"""model-scout: discover and rank GGUF model artifacts with an offline cache."""

__version__ = "0.1.0"
