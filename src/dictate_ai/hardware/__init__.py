"""Hardware detection module for dictate-ai.

Detects Apple Silicon unified memory, used to recommend a transcription model.
"""

from dictate_ai.hardware.apple_silicon import AppleSiliconInfo, detect_hardware, get_memory_gb

__all__ = [
    "AppleSiliconInfo",
    "detect_hardware",
    "get_memory_gb",
]
