"""Gradio layout hosting one image generation state per session."""

from __future__ import annotations

from typing import Any

try:
    import gradio as gr
except ImportError:  # pragma: no cover
    gr = None  # type: ignore

from config.settings import AppConfig
from modules.generation.image_models import describe_image_settings
from modules.generation.prompt_template import describe_prompt_variables
from modules.ui.callbacks import build_callbacks


def build_app(config: AppConfig) -> Any:
    """Compose and return the Gradio application."""
    if gr is None:
        raise RuntimeError("Gradio is not installed; install the project dependencies first.")

    callbacks_map = build_callbacks(config)

    def _selected_index(evt: gr.SelectData) -> int:
        return int(evt.index)

    with gr.Blocks(title="Journal Image Studio") as demo:
        gr.Markdown("## Journal Image Studio")
        gr.Markdown(f"Image settings: {describe_image_settings(config.image_settings)}")
        session_state = gr.State(None)

        with gr.Row():
            with gr.Column():
                entity_id = gr.Textbox(label="Journal entry id", placeholder="UUID of the entry")
                load_btn = gr.Button("Load images")
                summary = gr.Textbox(
                    label="Summary",
                    lines=5,
                    placeholder="Summary of the day; inserted into the prompt template",
                )
                template = gr.Textbox(
                    label=f"Prompt template ({describe_prompt_variables()})",
                    lines=6,
                    value=config.image_settings.prompt_template,
                )
                preview_btn = gr.Button("Preview prompt")
                custom_prompt = gr.Textbox(
                    label="Final prompt (editable, leave empty to use the stored template)",
                    lines=6,
                )
                generate_btn = gr.Button("Generate image", variant="primary")

            with gr.Column():
                gallery = gr.Gallery(label="Generated images", columns=2)
                selected_image = gr.Textbox(label="Selected image id", interactive=False)
                selected_index = gr.Number(visible=False, precision=0)
                with gr.Row():
                    refresh_btn = gr.Button("Refresh")
                    delete_btn = gr.Button("Delete selected image", variant="stop")
                status = gr.Markdown("Select a journal entry.")

        outputs = [session_state, gallery, status]

        load_btn.click(
            fn=callbacks_map["on_select_entity"],
            inputs=[session_state, entity_id, summary],
            outputs=outputs,
        )
        entity_id.submit(
            fn=callbacks_map["on_select_entity"],
            inputs=[session_state, entity_id, summary],
            outputs=outputs,
        )
        preview_btn.click(
            fn=callbacks_map["on_preview_prompt"],
            inputs=[template, summary],
            outputs=[custom_prompt, status],
        )
        generate_btn.click(
            fn=callbacks_map["on_generate"],
            inputs=[session_state, summary, custom_prompt],
            outputs=outputs,
        )
        gallery.select(fn=_selected_index, inputs=None, outputs=selected_index).then(
            fn=callbacks_map["on_pick_image"],
            inputs=[session_state, selected_index],
            outputs=selected_image,
        )
        refresh_btn.click(
            fn=callbacks_map["on_refresh"],
            inputs=[session_state],
            outputs=outputs,
        )
        delete_btn.click(
            fn=callbacks_map["on_delete"],
            inputs=[session_state, selected_image],
            outputs=outputs,
        )

    return demo
