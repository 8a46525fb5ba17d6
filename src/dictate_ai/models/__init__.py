"""Models module for dictate-ai.

On-device transcription model catalog, curated list and storage.
"""

from dictate_ai.models.curated import (
    FALLBACK_CURATED_MODELS,
    join_download_status,
    load_curated_models,
)
from dictate_ai.models.repository import (
    WHISPERKIT_REPO,
    HuggingFaceModelRepository,
    ModelRepository,
    recommend_for_memory,
)
from dictate_ai.models.schema import (
    DEFAULT_TRANSCRIPTION_MODEL,
    CuratedModelInfo,
    ModelInfo,
    ModelWarmStatus,
    RecommendedModels,
)

__all__ = [
    "DEFAULT_TRANSCRIPTION_MODEL",
    "FALLBACK_CURATED_MODELS",
    "WHISPERKIT_REPO",
    "CuratedModelInfo",
    "HuggingFaceModelRepository",
    "ModelInfo",
    "ModelRepository",
    "ModelWarmStatus",
    "RecommendedModels",
    "join_download_status",
    "load_curated_models",
    "recommend_for_memory",
]
