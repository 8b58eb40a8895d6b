"""Callback implementations for the Gradio interface."""

from __future__ import annotations

from typing import Any, Callable, Optional

from config.settings import AppConfig
from modules.generation.image_models import get_short_model_name
from modules.generation.prompt_template import interpolate_image_prompt, validate_prompt_template
from modules.services.image_api import GeneratedImagesClient
from modules.services.image_records import GeneratedImage
from modules.state.image_state import ImageGenerationState, ImagesBackend, StateSnapshot

GalleryItem = tuple[str, str]
CallbackResult = tuple[ImageGenerationState, list[GalleryItem], str]


def build_callbacks(
    config: AppConfig,
    client_factory: Optional[Callable[[], ImagesBackend]] = None,
) -> dict[str, Any]:
    """Return a dictionary of Gradio callback functions.

    Each session keeps its own ``ImageGenerationState`` in a ``gr.State``;
    callbacks receive it, act on it and hand it back with the widget values.
    """

    factory = client_factory or (lambda: GeneratedImagesClient.from_config(config))

    def _ensure_state(state: Optional[ImageGenerationState]) -> ImageGenerationState:
        if state is None or state.closed:
            return ImageGenerationState(factory())
        return state

    def _image_source(image: GeneratedImage) -> Optional[str]:
        if not image.url:
            return None
        if image.url.startswith(("http://", "https://")):
            return image.url
        return f"{config.api_base_url}{image.url}"

    def _caption(image: GeneratedImage) -> str:
        parts = []
        if image.model:
            parts.append(get_short_model_name(image.model))
        if image.created_at is not None:
            parts.append(image.created_at.strftime("%d.%m.%y"))
        return " · ".join(parts)

    def _gallery(snapshot: StateSnapshot) -> list[GalleryItem]:
        items: list[GalleryItem] = []
        for image in snapshot.images:
            source = _image_source(image)
            if source:
                items.append((source, _caption(image)))
        return items

    def _status(snapshot: StateSnapshot) -> str:
        if snapshot.error:
            return f"Error: {snapshot.error}"
        if snapshot.is_generating:
            return "Generating image..."
        if snapshot.is_loading:
            return "Loading images..."
        if snapshot.entity_id is None:
            return "Select a journal entry."
        if not snapshot.images:
            return "No images yet."
        count = len(snapshot.images)
        return f"{count} image{'s' if count != 1 else ''}."

    def _result(state: ImageGenerationState, message: Optional[str] = None) -> CallbackResult:
        snapshot = state.snapshot()
        return state, _gallery(snapshot), message or _status(snapshot)

    def _should_auto_generate(snapshot: StateSnapshot, summary: str) -> bool:
        if not config.image_settings.auto_generate or not summary.strip():
            return False
        return snapshot.fetched and not snapshot.images and snapshot.error is None

    async def on_select_entity(
        state: Optional[ImageGenerationState],
        entity_id: str,
        summary: str = "",
    ) -> CallbackResult:
        current = _ensure_state(state)
        previous = current.entity_id
        await current.set_entity((entity_id or "").strip() or None)
        # entries without images get one as soon as they are opened
        if current.entity_id != previous and _should_auto_generate(current.snapshot(), summary or ""):
            await current.generate(summary)
        return _result(current)

    def on_preview_prompt(template: str, summary: str) -> tuple[str, str]:
        template = template or config.image_settings.prompt_template
        if not validate_prompt_template(template):
            return template, "The template has no {{summary}} placeholder; the summary will not be included."
        return interpolate_image_prompt(template, summary or ""), "Prompt preview updated."

    async def on_generate(
        state: Optional[ImageGenerationState],
        summary: str,
        custom_prompt: str,
    ) -> CallbackResult:
        current = _ensure_state(state)
        if current.entity_id is None:
            return _result(current, "Select a journal entry first.")
        if not (summary or "").strip():
            return _result(current, "Write a summary before generating an image.")
        if current.is_generating:
            return _result(current, "An image is already being generated.")

        await current.generate(summary, (custom_prompt or "").strip() or None)
        return _result(current)

    def on_pick_image(state: Optional[ImageGenerationState], index: Optional[float]) -> str:
        current = _ensure_state(state)
        images = current.images
        if index is None:
            return ""
        position = int(index)
        if not 0 <= position < len(images):
            return ""
        return images[position].id

    async def on_delete(state: Optional[ImageGenerationState], image_id: str) -> CallbackResult:
        current = _ensure_state(state)
        if not image_id:
            return _result(current, "Select an image to delete.")
        await current.delete(image_id)
        return _result(current)

    async def on_refresh(state: Optional[ImageGenerationState]) -> CallbackResult:
        current = _ensure_state(state)
        await current.refetch()
        return _result(current)

    return {
        "on_select_entity": on_select_entity,
        "on_preview_prompt": on_preview_prompt,
        "on_generate": on_generate,
        "on_pick_image": on_pick_image,
        "on_delete": on_delete,
        "on_refresh": on_refresh,
    }
