"""Generate images for a list of journal entries."""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from config.settings import load_config
from modules.services.batch_runner import load_entries, run_batch
from modules.services.image_api import GeneratedImagesClient
from modules.state.image_state import ImageGenerationState
from modules.utils.logging import setup_logging


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate one image per journal entry.")
    parser.add_argument("entries", type=Path, help="JSON file with entityId/summary/title objects")
    parser.add_argument("--config", default=None, help="Path to a .env file")
    parser.add_argument(
        "--use-template",
        action="store_true",
        help="Interpolate the configured prompt template locally instead of the stored one",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    config = load_config(args.config)
    logger = setup_logging(config)

    client = GeneratedImagesClient.from_config(config)
    state = ImageGenerationState(client)
    template = config.image_settings.prompt_template if args.use_template else None

    def _report(progress) -> None:
        logger.info(
            "[%d/%d %d%%] %s (ok=%d, failed=%d)",
            progress.current,
            progress.total,
            progress.percent,
            progress.current_title or "done",
            progress.success_count,
            progress.error_count,
        )

    try:
        progress = asyncio.run(run_batch(load_entries(args.entries), state, template, on_progress=_report))
    finally:
        state.close()
        client.close()
    raise SystemExit(1 if progress.error_count else 0)


if __name__ == "__main__":
    main()
