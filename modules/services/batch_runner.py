"""Generate images for many journal entries in one run."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from modules.generation.prompt_template import interpolate_image_prompt
from modules.state.image_state import ImageGenerationState
from modules.ui.progress import BatchProgress

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BatchEntry:
    """One journal entry to illustrate."""

    entity_id: str
    summary: str
    title: Optional[str] = None


def load_entries(path: Path) -> List[BatchEntry]:
    """Read ``[{"entityId": ..., "summary": ..., "title": ...}, ...]`` from JSON."""
    with path.open("r", encoding="utf-8") as fp:
        data = json.load(fp)
    entries: List[BatchEntry] = []
    for item in data:
        if not isinstance(item, dict) or not item.get("entityId"):
            logger.warning("Skipping batch item without entityId: %r", item)
            continue
        entries.append(
            BatchEntry(
                entity_id=str(item["entityId"]),
                summary=str(item.get("summary") or ""),
                title=item.get("title"),
            )
        )
    return entries


async def run_batch(
    entries: Iterable[BatchEntry],
    state: ImageGenerationState,
    prompt_template: Optional[str] = None,
    on_progress: Optional[Callable[[BatchProgress], None]] = None,
) -> BatchProgress:
    """Generate one image per entry, sequentially, through ``state``."""
    items = list(entries)
    progress = BatchProgress(total=len(items))

    for entry in items:
        progress.advance(title=entry.title or entry.entity_id, step="image")
        if on_progress is not None:
            on_progress(progress)

        await state.set_entity(entry.entity_id)
        custom_prompt = interpolate_image_prompt(prompt_template, entry.summary) if prompt_template else None
        if await state.generate(entry.summary, custom_prompt):
            progress.record_success()
        else:
            progress.record_error()
            logger.warning("No image for %s: %s", entry.entity_id, state.error or "skipped")

    progress.current_title = None
    progress.current_step = None
    if on_progress is not None:
        on_progress(progress)
    return progress
