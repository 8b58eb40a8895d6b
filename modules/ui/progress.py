"""Progress tracking for batch image generation."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

STEP_LABELS = {
    "title": "Generating title",
    "content": "Improving text",
    "analysis": "Writing analysis",
    "summary": "Writing summary",
    "image": "Generating image",
}


@dataclass(slots=True)
class BatchProgress:
    """Counters shown while a batch of entries is processed."""

    total: int
    current: int = 0
    current_title: Optional[str] = None
    current_step: Optional[str] = None
    success_count: int = 0
    error_count: int = 0

    @property
    def percent(self) -> int:
        if self.total <= 0:
            return 0
        # halves round up
        return math.floor(self.current / self.total * 100 + 0.5)

    @property
    def done(self) -> bool:
        return self.current >= self.total

    def step_label(self) -> Optional[str]:
        if self.current_step is None:
            return None
        return STEP_LABELS.get(self.current_step, self.current_step)

    def advance(self, title: Optional[str] = None, step: Optional[str] = None) -> None:
        """Move on to the next entry."""
        self.current = min(self.current + 1, self.total)
        self.current_title = title
        self.current_step = step

    def record_success(self) -> None:
        self.success_count += 1

    def record_error(self) -> None:
        self.error_count += 1

    def render_markdown(self) -> str:
        lines = [
            "### Processing",
            f"Entry **{self.current}** of **{self.total}** ({self.percent}%)",
        ]
        if self.current_title:
            lines.append(f'Current: "{self.current_title}"')
            label = self.step_label()
            if label:
                lines.append(f"Step: {label}...")
        lines.append(f"✅ {self.success_count} succeeded · ❌ {self.error_count} failed")
        return "\n\n".join(lines)
