"""Data models for on-device transcription models.

Defines Pydantic models for the raw model catalog, the curated subset and
the warm-status indicator.
"""

from enum import Enum

from pydantic import BaseModel, Field

DEFAULT_TRANSCRIPTION_MODEL = "openai_whisper-large-v3-v20240930"


class ModelWarmStatus(str, Enum):
    """Whether the selected model is resident in memory."""

    COLD = "cold"  # Not loaded
    WARMING = "warming"  # Loading / prewarming
    WARM = "warm"  # Loaded and ready


class ModelInfo(BaseModel):
    """Entry of the full downloadable-model catalog."""

    name: str
    is_downloaded: bool = False


class CuratedModelInfo(BaseModel):
    """Hand-picked model with quality ratings.

    is_downloaded is derived from the repository on every fetch and is never
    read from the curated definitions file.
    """

    display_name: str
    internal_name: str = Field(description="Join key into the downloadable catalog")
    size_label: str = ""
    accuracy_stars: int = Field(default=0, ge=0, le=5)
    speed_stars: int = Field(default=0, ge=0, le=5)
    storage_size_label: str = ""
    is_downloaded: bool = Field(default=False, exclude=True)


class RecommendedModels(BaseModel):
    """Models recommended for the current hardware."""

    default: str = DEFAULT_TRANSCRIPTION_MODEL
    supported: list[str] = Field(default_factory=list)
