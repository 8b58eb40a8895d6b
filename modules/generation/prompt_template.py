"""Default image prompt and template interpolation."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from modules.generation.image_models import (
    DEFAULT_ASPECT_RATIO,
    DEFAULT_IMAGE_MODEL_ID,
    DEFAULT_STEPS,
    ImageGenerationSettings,
)

SUMMARY_PLACEHOLDER = "{{summary}}"

DEFAULT_IMAGE_PROMPT = (
    "Artful still life symbolising the day.\n"
    "The most important elements of the following summary shown as objects on a table.\n"
    "Subtle hints at the mood of the day. Editorial illustration, fine textures, clear shapes, "
    "calm background, high quality, no text.\n"
    "\n"
    "Summary:\n"
    f"{SUMMARY_PLACEHOLDER}"
)

PROMPT_VARIABLES = {
    SUMMARY_PLACEHOLDER: "The summary of the day or reflection",
}

DEFAULT_SETTINGS: dict[str, Any] = {
    "model_id": DEFAULT_IMAGE_MODEL_ID,
    "prompt_template": DEFAULT_IMAGE_PROMPT,
    "aspect_ratio": DEFAULT_ASPECT_RATIO,
    "steps": DEFAULT_STEPS,
    "auto_generate": True,
}


def interpolate_image_prompt(template: str, summary: str) -> str:
    """Replace every summary placeholder with the stripped summary text."""
    return template.replace(SUMMARY_PLACEHOLDER, summary.strip())


def validate_prompt_template(template: str) -> bool:
    """Return True when the template contains the summary placeholder."""
    return SUMMARY_PLACEHOLDER in template


def describe_prompt_variables() -> str:
    return "; ".join(f"{name}: {hint}" for name, hint in PROMPT_VARIABLES.items())


def merge_with_defaults(user_settings: Optional[Mapping[str, Any]]) -> ImageGenerationSettings:
    """Fill missing or empty fields of ``user_settings`` from the defaults.

    String fields fall back when empty; ``steps`` and ``auto_generate`` only
    when absent. Raises ``pydantic.ValidationError`` for out-of-range values.
    """
    if not user_settings:
        return ImageGenerationSettings(**DEFAULT_SETTINGS)

    merged = dict(DEFAULT_SETTINGS)
    for key in ("model_id", "prompt_template", "aspect_ratio"):
        value = user_settings.get(key)
        if value:
            merged[key] = value
    for key in ("steps", "auto_generate"):
        value = user_settings.get(key)
        if value is not None:
            merged[key] = value
    return ImageGenerationSettings(**merged)
