"""Curated transcription model list.

Definitions ship as package data in ``dictate_ai/data/models.json``. The
download flag is never read from the file; it is joined in from the full
catalog on every fetch.
"""

from importlib.resources import files
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from dictate_ai.logging import get_logger
from dictate_ai.models.schema import CuratedModelInfo, ModelInfo

_logger = get_logger("Models.curated")

_CURATED_LIST = TypeAdapter(list[CuratedModelInfo])

FALLBACK_CURATED_MODELS = [
    CuratedModelInfo(
        display_name="Small",
        internal_name="openai_whisper-tiny-v3-v20240930",
        size_label="Small",
        accuracy_stars=2,
        speed_stars=4,
        storage_size_label="100MB",
    ),
    CuratedModelInfo(
        display_name="Medium",
        internal_name="openai_whisper-medium-v3-v20240930",
        size_label="Medium",
        accuracy_stars=3,
        speed_stars=3,
        storage_size_label="500MB",
    ),
    CuratedModelInfo(
        display_name="Large",
        internal_name="openai_whisper-large-v3-v20240930",
        size_label="Large",
        accuracy_stars=4,
        speed_stars=2,
        storage_size_label="1GB",
    ),
]


def load_curated_models(path: Path | None = None) -> list[CuratedModelInfo]:
    """Load curated definitions, falling back to a built-in list.

    Args:
        path: Explicit definitions file. Defaults to the packaged models.json.

    Returns:
        Curated models with is_downloaded cleared.
    """
    try:
        if path is not None:
            raw = path.read_text()
        else:
            raw = files("dictate_ai").joinpath("data/models.json").read_text()
        models = _CURATED_LIST.validate_json(raw)
    except (OSError, ValidationError) as e:
        _logger.warning("Curated model list unavailable, using fallback: {}", e)
        models = FALLBACK_CURATED_MODELS

    return [m.model_copy(update={"is_downloaded": False}) for m in models]


def join_download_status(
    curated: list[CuratedModelInfo],
    available: list[ModelInfo],
) -> list[CuratedModelInfo]:
    """Copy download flags from the full catalog onto curated entries by name."""
    downloaded = {info.name for info in available if info.is_downloaded}
    return [
        m.model_copy(update={"is_downloaded": m.internal_name in downloaded})
        for m in curated
    ]
