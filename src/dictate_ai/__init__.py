"""dictate-ai: AI enhancement backends and on-device model lifecycle for dictation."""

__version__ = "0.1.0"

# Default loopback endpoints for the local daemons
DEFAULT_OLLAMA_URL = "http://localhost:11434"
DEFAULT_LMSTUDIO_URL = "http://localhost:1234"

from dictate_ai.logging import configure_logging, get_logger

__all__ = [
    "__version__",
    "DEFAULT_LMSTUDIO_URL",
    "DEFAULT_OLLAMA_URL",
    "configure_logging",
    "get_logger",
]
