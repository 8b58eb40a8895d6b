"""Image model catalog and generation settings schema."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

AspectRatio = Literal["16:9", "4:3", "1:1", "9:16"]


@dataclass(slots=True, frozen=True)
class ImageModel:
    """A text-to-image model offered by the backend provider."""

    id: str
    name: str
    provider: str = "togetherai"
    default_steps: int = 4
    description: str = ""


@dataclass(slots=True, frozen=True)
class ImageDimensions:
    width: int
    height: int


IMAGE_MODELS: List[ImageModel] = [
    ImageModel(
        id="google/flash-image-2.5",
        name="Gemini Flash Image 2.5",
        description="Fast, efficient image generation",
    ),
    ImageModel(
        id="ByteDance-Seed/Seedream-4.0",
        name="Seedream 4.0",
        description="High quality generation with fine detail",
    ),
    ImageModel(
        id="black-forest-labs/FLUX.1-schnell",
        name="FLUX.1 Schnell",
        description="Fast, high quality generation (paid)",
    ),
]

ASPECT_RATIOS: Dict[str, ImageDimensions] = {
    "16:9": ImageDimensions(width=1344, height=768),
    "4:3": ImageDimensions(width=1024, height=768),
    "1:1": ImageDimensions(width=1024, height=1024),
    "9:16": ImageDimensions(width=768, height=1344),
}

ASPECT_RATIO_LABELS: Dict[str, str] = {
    "16:9": "Landscape (16:9)",
    "4:3": "Classic (4:3)",
    "1:1": "Square (1:1)",
    "9:16": "Portrait (9:16)",
}

DEFAULT_IMAGE_MODEL_ID = "google/flash-image-2.5"
DEFAULT_ASPECT_RATIO: AspectRatio = "16:9"
DEFAULT_STEPS = 4
MIN_STEPS = 4
MAX_STEPS = 50


class ImageGenerationSettings(BaseModel):
    """Per-user generation preferences, validated on construction."""

    model_config = ConfigDict(protected_namespaces=())

    model_id: str = Field(min_length=1)
    prompt_template: str = Field(min_length=1)
    aspect_ratio: AspectRatio
    steps: int = Field(ge=MIN_STEPS, le=MAX_STEPS)
    auto_generate: bool


def get_image_dimensions(aspect_ratio: str) -> ImageDimensions:
    """Return pixel dimensions for an aspect ratio."""
    try:
        return ASPECT_RATIOS[aspect_ratio]
    except KeyError as exc:
        raise KeyError(f"Unsupported aspect ratio '{aspect_ratio}'") from exc


def get_image_model(model_id: str) -> Optional[ImageModel]:
    for model in IMAGE_MODELS:
        if model.id == model_id:
            return model
    return None


def get_default_steps(model_id: str) -> int:
    model = get_image_model(model_id)
    return model.default_steps if model is not None else DEFAULT_STEPS


def is_valid_image_model(model_id: str) -> bool:
    return get_image_model(model_id) is not None


def get_short_model_name(model_id: str) -> str:
    """Return a compact display name, e.g. "Gemini Flash"."""
    model = get_image_model(model_id)
    if model is None:
        return model_id
    if "flash-image" in model_id:
        return "Gemini Flash"
    if "Seedream" in model_id:
        return "Seedream 4.0"
    if "FLUX.1-schnell" in model_id:
        return "FLUX Schnell"
    return model.name


def describe_image_settings(settings: ImageGenerationSettings) -> str:
    """One-line summary such as "Gemini Flash · Landscape (16:9) · 1344×768 · 4 steps"."""
    dimensions = get_image_dimensions(settings.aspect_ratio)
    return " · ".join(
        [
            get_short_model_name(settings.model_id),
            ASPECT_RATIO_LABELS.get(settings.aspect_ratio, settings.aspect_ratio),
            f"{dimensions.width}×{dimensions.height}",
            f"{settings.steps} steps",
        ]
    )
