"""Gradio UI callback tests."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from fakes import E1, IMG_A, DummyImagesClient, make_image
from config.settings import AppConfig
from modules.services.errors import ImageApiError
from modules.services.image_records import GeneratedImage
from modules.ui import callbacks


def build_callbacks(client: DummyImagesClient, config: AppConfig | None = None):
    config = config or AppConfig(api_base_url="http://journal.test")
    return callbacks.build_callbacks(config, client_factory=lambda: client)


def test_on_select_entity_loads_gallery():
    client = DummyImagesClient({E1: [IMG_A]})
    cb = build_callbacks(client)["on_select_entity"]

    state, gallery, status = asyncio.run(cb(None, f"  {E1} "))

    assert state.entity_id == E1
    assert gallery == [("http://journal.test/a.png", "01.05.24")]
    assert status == "1 image."
    assert client.list_calls == [E1]


def test_on_select_entity_reports_load_error():
    client = DummyImagesClient()
    client.list_error = ImageApiError("Failed to fetch images", 500)
    cb = build_callbacks(client)["on_select_entity"]

    _, gallery, status = asyncio.run(cb(None, E1))

    assert gallery == []
    assert status == "Error: Failed to fetch images"


def test_on_generate_appends_to_gallery_with_model_caption():
    client = DummyImagesClient({E1: []})
    client.next_images = [
        GeneratedImage(
            id="b",
            url="https://cdn.test/b.png",
            created_at=datetime(2024, 6, 2, tzinfo=timezone.utc),
            model="google/flash-image-2.5",
        )
    ]
    cb_map = build_callbacks(client)

    async def scenario():
        state, _, _ = await cb_map["on_select_entity"](None, E1)
        return await cb_map["on_generate"](state, "Went swimming", "  ")

    state, gallery, status = asyncio.run(scenario())

    assert gallery == [("https://cdn.test/b.png", "Gemini Flash · 02.06.24")]
    assert status == "1 image."
    assert client.generate_calls == [(E1, "Went swimming", None)]
    assert state.is_generating is False


def test_on_generate_requires_entity_and_summary():
    client = DummyImagesClient({E1: []})
    cb_map = build_callbacks(client)

    _, _, status = asyncio.run(cb_map["on_generate"](None, "summary", ""))
    assert "Select a journal entry" in status

    async def scenario():
        state, _, _ = await cb_map["on_select_entity"](None, E1)
        return await cb_map["on_generate"](state, "   ", "")

    _, _, status = asyncio.run(scenario())
    assert "Write a summary" in status
    assert client.generate_calls == []


def test_on_generate_surfaces_failure():
    client = DummyImagesClient({E1: [IMG_A]})
    client.generate_error = ImageApiError("Missing TOGETHERAI_API_KEY", 500)
    cb_map = build_callbacks(client)

    async def scenario():
        state, _, _ = await cb_map["on_select_entity"](None, E1)
        return await cb_map["on_generate"](state, "summary", "")

    _, gallery, status = asyncio.run(scenario())

    assert len(gallery) == 1
    assert status == "Error: Missing TOGETHERAI_API_KEY"


def test_on_preview_prompt_interpolates_summary():
    cb = build_callbacks(DummyImagesClient())["on_preview_prompt"]

    prompt, message = cb("Draw {{summary}}", " a quiet morning ")

    assert prompt == "Draw a quiet morning"
    assert "updated" in message


def test_on_preview_prompt_warns_without_placeholder():
    cb = build_callbacks(DummyImagesClient())["on_preview_prompt"]

    prompt, message = cb("Draw a cat", "summary")

    assert prompt == "Draw a cat"
    assert "placeholder" in message


def test_on_preview_prompt_falls_back_to_configured_template():
    config = AppConfig()
    cb = build_callbacks(DummyImagesClient(), config)["on_preview_prompt"]

    prompt, _ = cb("", "Rainy day")

    assert prompt.endswith("Rainy day")


def test_pick_and_delete_image():
    client = DummyImagesClient({E1: [IMG_A, make_image("b")]})
    cb_map = build_callbacks(client)

    async def scenario():
        state, _, _ = await cb_map["on_select_entity"](None, E1)
        image_id = cb_map["on_pick_image"](state, 1.0)
        assert image_id == "b"
        assert cb_map["on_pick_image"](state, 5) == ""
        return await cb_map["on_delete"](state, image_id)

    _, gallery, status = asyncio.run(scenario())

    assert client.delete_calls == ["b"]
    assert gallery == [("http://journal.test/a.png", "01.05.24")]
    assert status == "1 image."


def test_on_delete_without_selection():
    client = DummyImagesClient({E1: [IMG_A]})
    cb = build_callbacks(client)["on_delete"]

    _, _, status = asyncio.run(cb(None, ""))

    assert "Select an image" in status
    assert client.delete_calls == []


def test_on_refresh_reloads_current_entity():
    client = DummyImagesClient({E1: []})
    cb_map = build_callbacks(client)

    async def scenario():
        state, _, _ = await cb_map["on_select_entity"](None, E1)
        client.images[E1] = [IMG_A]
        return await cb_map["on_refresh"](state)

    _, gallery, _ = asyncio.run(scenario())

    assert len(gallery) == 1
    assert client.list_calls == [E1, E1]


def test_selecting_entry_without_images_generates_one():
    client = DummyImagesClient({E1: []})
    client.next_images = [IMG_A]
    cb = build_callbacks(client)["on_select_entity"]

    state, gallery, status = asyncio.run(cb(None, E1, "Went swimming"))

    assert client.generate_calls == [(E1, "Went swimming", None)]
    assert len(gallery) == 1
    assert status == "1 image."

    # same entry again: no second image
    asyncio.run(cb(state, E1, "Went swimming"))
    assert len(client.generate_calls) == 1


def test_auto_generate_respects_settings_and_existing_images():
    disabled = AppConfig(api_base_url="http://journal.test")
    disabled.image_settings = disabled.image_settings.model_copy(update={"auto_generate": False})
    client = DummyImagesClient({E1: []})
    asyncio.run(build_callbacks(client, disabled)["on_select_entity"](None, E1, "Went swimming"))

    populated = DummyImagesClient({E1: [IMG_A]})
    asyncio.run(build_callbacks(populated)["on_select_entity"](None, E1, "Went swimming"))

    assert client.generate_calls == []
    assert populated.generate_calls == []
