"""Configuration helpers for the Journal Image Studio project."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from modules.generation.image_models import ImageGenerationSettings, get_default_steps, is_valid_image_model
from modules.generation.prompt_template import merge_with_defaults

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AppConfig:
    """Centralized application configuration."""

    api_base_url: str = "http://localhost:3000"
    request_timeout: float = 120.0
    user_id: Optional[str] = None
    log_dir: Path = Path("logs")
    log_level: str = "INFO"
    http_log_level: str = "WARNING"
    image_settings: ImageGenerationSettings = field(default_factory=lambda: merge_with_defaults(None))
    metadata: dict[str, Any] = field(default_factory=dict)


def _load_env_file(path: Path) -> None:
    """Populate environment variables from a simple KEY=VALUE .env file."""
    if not path.exists():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ[key.strip()] = value.strip()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_bool(name: str) -> Optional[bool]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _load_image_settings() -> ImageGenerationSettings:
    """Merge IMAGE_* overrides over the default generation settings."""
    overrides: dict[str, Any] = {}
    model_id = os.getenv("IMAGE_MODEL_ID")
    if model_id:
        if not is_valid_image_model(model_id):
            logger.warning("IMAGE_MODEL_ID %s is not in the model catalog", model_id)
        overrides["model_id"] = model_id
        overrides["steps"] = get_default_steps(model_id)
    aspect_ratio = os.getenv("IMAGE_ASPECT_RATIO")
    if aspect_ratio:
        overrides["aspect_ratio"] = aspect_ratio
    steps = os.getenv("IMAGE_STEPS")
    if steps and steps.strip().isdigit():
        overrides["steps"] = int(steps)
    auto_generate = _env_bool("IMAGE_AUTO_GENERATE")
    if auto_generate is not None:
        overrides["auto_generate"] = auto_generate
    template = os.getenv("IMAGE_PROMPT_TEMPLATE")
    if template:
        # .env files cannot hold raw newlines
        overrides["prompt_template"] = template.replace("\\n", "\n")

    try:
        return merge_with_defaults(overrides)
    except ValidationError as exc:
        logger.warning("Ignoring invalid IMAGE_* settings: %s", exc)
        return merge_with_defaults(None)


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Return an AppConfig instance with environment-aware settings."""
    env_path = Path(config_path) if config_path else Path(".env")
    _load_env_file(env_path)

    api_base_url = os.getenv("JOURNAL_API_BASE_URL", "http://localhost:3000").rstrip("/")
    user_id = os.getenv("JOURNAL_USER_ID") or None
    log_dir = Path(os.getenv("LOG_DIR", "logs")).expanduser()

    metadata: dict[str, Any] = {}
    if config_path:
        metadata["config_path"] = str(env_path)

    return AppConfig(
        api_base_url=api_base_url,
        request_timeout=_env_float("JOURNAL_API_TIMEOUT", 120.0),
        user_id=user_id,
        log_dir=log_dir,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        http_log_level=os.getenv("HTTP_LOG_LEVEL", "WARNING"),
        image_settings=_load_image_settings(),
        metadata=metadata,
    )
