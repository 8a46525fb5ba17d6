"""Apple Silicon hardware detection.

Reads chip name, unified memory and core count through sysctl. CoreML
transcription models only run on Apple Silicon, so anything else is reported
as an error and callers fall back to conservative defaults.
"""

import subprocess
from dataclasses import dataclass

from dictate_ai.logging import get_logger

_logger = get_logger("Hardware.apple_silicon")


@dataclass
class AppleSiliconInfo:
    """Information about Apple Silicon hardware."""

    chip_name: str  # e.g., "Apple M4 Max"
    memory_gb: float  # Unified memory in GB
    cpu_cores: int

    @property
    def memory_bytes(self) -> int:
        """Memory in bytes."""
        return int(self.memory_gb * 1024 * 1024 * 1024)

    def __str__(self) -> str:
        return f"{self.chip_name} | {self.memory_gb:.0f}GB | {self.cpu_cores} CPU"


def _run_sysctl(key: str) -> str | None:
    """Run sysctl command and return value."""
    try:
        result = subprocess.run(
            ["sysctl", "-n", key],
            capture_output=True,
            text=True,
            timeout=5,
        )
        if result.returncode == 0:
            return result.stdout.strip()
    except (OSError, subprocess.SubprocessError) as e:
        _logger.debug("sysctl {} failed: {}", key, e)
    return None


def detect_hardware() -> AppleSiliconInfo:
    """Detect Apple Silicon hardware capabilities.

    Returns:
        AppleSiliconInfo with detected hardware specs.

    Raises:
        RuntimeError: If not running on Apple Silicon.
    """
    chip_name = _run_sysctl("machdep.cpu.brand_string") or "Unknown"

    if "apple" not in chip_name.lower():
        raise RuntimeError(f"Not running on Apple Silicon: {chip_name}")

    mem_bytes = _run_sysctl("hw.memsize")
    memory_gb = int(mem_bytes) / (1024**3) if mem_bytes else 8.0
    cpu_cores = int(_run_sysctl("hw.ncpu") or "8")

    info = AppleSiliconInfo(chip_name=chip_name, memory_gb=memory_gb, cpu_cores=cpu_cores)
    _logger.info("Detected hardware: {}", info)
    return info


def get_memory_gb() -> float | None:
    """Unified memory in GB, or None when not on Apple Silicon."""
    try:
        return detect_hardware().memory_gb
    except RuntimeError as e:
        _logger.info("Hardware detection unavailable: {}", e)
        return None
