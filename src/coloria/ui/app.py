"""Gradio UI for ColorIA."""

import logging

import gradio as gr

from coloria.core.records import SortOption

from .handlers import (
    SORT_CHOICES,
    cancel_delete,
    change_sort,
    clear_search,
    close_viewer,
    confirm_delete,
    deselect_all,
    download_generated,
    download_selected,
    download_viewer_image,
    generate_image,
    load_library,
    next_page,
    open_viewer,
    previous_page,
    request_delete,
    save_to_library,
    search_library,
    select_all,
    set_viewport_width,
    sign_in,
    sign_out,
    sign_up,
    update_page_selection,
    viewer_key,
    viewer_next,
    viewer_previous,
)
from .models import DELETE_CONFIRMATION, SEARCH_PLACEHOLDER, UIState
from .state import cleanup_ui_state

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Forwards the viewport width and the viewer keys to the hidden inputs.
# Keys carry a timestamp so pressing the same key twice is still a change.
PAGE_SCRIPT = """
<script>
(() => {
  const push = (id, value) => {
    const el = document.querySelector(`#${id} textarea, #${id} input`);
    if (!el) return false;
    el.value = value;
    el.dispatchEvent(new Event("input", { bubbles: true }));
    return true;
  };
  let lastWidth = null;
  const reportWidth = () => {
    const width = window.innerWidth;
    if (width !== lastWidth && push("viewport-width", String(width))) lastWidth = width;
  };
  window.addEventListener("resize", reportWidth);
  setInterval(reportWidth, 1000);
  document.addEventListener("keydown", (event) => {
    if (!["Escape", "ArrowLeft", "ArrowRight"].includes(event.key)) return;
    const tag = (event.target.tagName || "").toLowerCase();
    if (tag === "input" || tag === "textarea") return;
    push("viewer-key", `${event.key}|${Date.now()}`);
  });
})();
</script>
"""


def create_ui() -> tuple[gr.Blocks, str]:
    """Create the Gradio UI.

    Returns:
        Tuple of (Gradio Blocks app, custom CSS string)
    """
    custom_css = """
    .library-viewer {
        border: 1px solid #374151;
        border-radius: 6px;
        padding: 12px;
    }
    .delete-confirm {
        border: 1px solid #b91c1c;
        border-radius: 6px;
        padding: 12px;
    }
    """

    app = gr.Blocks(title="ColorIA")

    with app:
        # Session state - one instance per user, torn down with the session
        ui_state = gr.State(UIState(), delete_callback=cleanup_ui_state)

        gr.Markdown(
            """
            # ColorIA
            ### What do you want to draw?
            """
        )

        with gr.Tabs():
            with gr.Tab("Account", id="account_tab"):
                create_account_tab(ui_state)

            with gr.Tab("Generate", id="generate_tab"):
                create_generation_tab(ui_state)

            with gr.Tab("Library", id="library_tab") as library_tab:
                library_outputs = create_library_tab(ui_state)

                # Refetch whenever the tab is opened
                library_tab.select(
                    fn=load_library,
                    inputs=[ui_state],
                    outputs=library_outputs,
                )

    return app, custom_css


def create_account_tab(ui_state):
    """Create the sign in / sign up tab.

    Args:
        ui_state: UI state component
    """
    account_info = gr.Markdown("*Not signed in.*")
    auth_status = gr.Markdown("")

    with gr.Row():
        with gr.Column():
            gr.Markdown("### Welcome Back")
            email_input = gr.Textbox(label="Email", type="email")
            password_input = gr.Textbox(label="Password", type="password")
            sign_in_btn = gr.Button("Sign In", variant="primary")

        with gr.Column():
            gr.Markdown("### Sign Up")
            full_name_input = gr.Textbox(label="Full Name")
            signup_email_input = gr.Textbox(label="Email", type="email")
            signup_password_input = gr.Textbox(label="Password", type="password")
            confirm_password_input = gr.Textbox(label="Confirm Password", type="password")
            sign_up_btn = gr.Button("Create Account")

    sign_out_btn = gr.Button("Sign Out", size="sm")

    sign_in_btn.click(
        fn=sign_in,
        inputs=[email_input, password_input, ui_state],
        outputs=[auth_status, account_info, ui_state],
    )

    sign_up_btn.click(
        fn=sign_up,
        inputs=[
            full_name_input,
            signup_email_input,
            signup_password_input,
            confirm_password_input,
            ui_state,
        ],
        outputs=[auth_status, account_info, ui_state],
    )

    sign_out_btn.click(
        fn=sign_out,
        inputs=[ui_state],
        outputs=[auth_status, account_info, ui_state],
    )


def create_generation_tab(ui_state):
    """Create the prompt-to-image tab.

    Args:
        ui_state: UI state component
    """
    with gr.Row():
        with gr.Column(scale=1):
            prompt_input = gr.Textbox(
                label="Prompt",
                placeholder="Describe the image you want to create...",
                lines=3,
            )
            generate_btn = gr.Button("Generate", variant="primary")

            with gr.Row():
                save_btn = gr.Button("Save to Library", interactive=False)
                download_btn = gr.Button("Download")

            info_output = gr.Markdown("*Generated image will appear here*")
            download_file = gr.File(label="Download", visible=False)

        with gr.Column(scale=1):
            image_output = gr.Image(label="Generated Image", type="filepath", height=512)

    generate_btn.click(
        fn=generate_image,
        inputs=[prompt_input, ui_state],
        outputs=[image_output, info_output, save_btn, ui_state],
    )

    prompt_input.submit(
        fn=generate_image,
        inputs=[prompt_input, ui_state],
        outputs=[image_output, info_output, save_btn, ui_state],
    )

    save_btn.click(
        fn=save_to_library,
        inputs=[ui_state],
        outputs=[info_output, save_btn, ui_state],
    )

    download_btn.click(
        fn=download_generated,
        inputs=[ui_state],
        outputs=[download_file, info_output, ui_state],
    )


def create_library_tab(ui_state):
    """Create the library tab UI.

    Args:
        ui_state: UI state component

    Returns:
        List of components every library handler renders into, in
        ``LIBRARY_OUTPUTS`` order, followed by ``ui_state``
    """
    with gr.Row():
        search_input = gr.Textbox(
            label="Search",
            placeholder=SEARCH_PLACEHOLDER,
            elem_id="library-search",
            scale=4,
        )
        clear_search_btn = gr.Button("Clear", size="sm", scale=1)
        sort_dropdown = gr.Dropdown(
            label="Sort",
            choices=SORT_CHOICES,
            value=SortOption.NEWEST.label,
            scale=2,
        )

    with gr.Row():
        select_all_btn = gr.Button("Select All", size="sm")
        deselect_all_btn = gr.Button("Deselect All", size="sm")
        selection_info = gr.Markdown("")

    with gr.Row(visible=False) as bulk_actions:
        download_selected_btn = gr.Button("Download Selected", size="sm")
        delete_selected_btn = gr.Button("Delete Selected", size="sm", variant="stop")

    with gr.Group(visible=False, elem_classes="delete-confirm") as confirm_group:
        gr.Markdown(DELETE_CONFIRMATION)
        with gr.Row():
            confirm_delete_btn = gr.Button("Delete", variant="stop", size="sm")
            cancel_delete_btn = gr.Button("Cancel", size="sm")

    library_status = gr.Markdown("")
    bulk_file = gr.File(label="Download", visible=False)

    with gr.Row():
        with gr.Column(scale=2):
            gallery = gr.Gallery(
                label="Library",
                columns=3,
                height=600,
                object_fit="cover",
                allow_preview=False,
                show_label=False,
            )
            selection = gr.CheckboxGroup(label="Select", choices=[])

            with gr.Row():
                prev_page_btn = gr.Button("Previous", size="sm", interactive=False)
                page_label = gr.Markdown("")
                next_page_btn = gr.Button("Next", size="sm", interactive=False)

        with gr.Column(scale=1, visible=False, elem_classes="library-viewer") as viewer:
            viewer_image = gr.Image(label="Image", show_label=False, height=400)
            with gr.Row():
                viewer_prev_btn = gr.Button("←", size="sm")
                viewer_close_btn = gr.Button("Close", size="sm")
                viewer_next_btn = gr.Button("→", size="sm")
            viewer_details = gr.Markdown("")
            viewer_download_btn = gr.Button("Download", size="sm")
            viewer_file = gr.File(label="Download", visible=False)

    # Inputs written by PAGE_SCRIPT; present in the DOM but not displayed
    viewport_width = gr.Textbox(elem_id="viewport-width", visible="hidden")
    viewer_key_input = gr.Textbox(elem_id="viewer-key", visible="hidden")

    library_outputs = [
        gallery,
        selection,
        page_label,
        prev_page_btn,
        next_page_btn,
        selection_info,
        bulk_actions,
        viewer,
        viewer_image,
        viewer_details,
        viewer_prev_btn,
        viewer_next_btn,
        library_status,
        ui_state,
    ]

    # Event handlers for the library

    # Search: every keystroke must reach the debouncer, which collapses
    # overlapping calls, so events neither wait nor queue behind each other.
    search_input.input(
        fn=search_library,
        inputs=[search_input, ui_state],
        outputs=library_outputs,
        trigger_mode="multiple",
        concurrency_limit=None,
        show_progress="hidden",
    )

    clear_search_btn.click(
        fn=clear_search,
        inputs=[ui_state],
        outputs=[search_input, *library_outputs],
    )

    sort_dropdown.change(
        fn=change_sort,
        inputs=[sort_dropdown, ui_state],
        outputs=library_outputs,
    )

    viewport_width.change(
        fn=set_viewport_width,
        inputs=[viewport_width, ui_state],
        outputs=library_outputs,
        show_progress="hidden",
    )

    # Pagination
    prev_page_btn.click(fn=previous_page, inputs=[ui_state], outputs=library_outputs)
    next_page_btn.click(fn=next_page, inputs=[ui_state], outputs=library_outputs)

    # Selection
    selection.input(
        fn=update_page_selection,
        inputs=[selection, ui_state],
        outputs=library_outputs,
    )
    select_all_btn.click(fn=select_all, inputs=[ui_state], outputs=library_outputs)
    deselect_all_btn.click(fn=deselect_all, inputs=[ui_state], outputs=library_outputs)

    # Bulk actions
    download_selected_btn.click(
        fn=download_selected,
        inputs=[ui_state],
        outputs=[bulk_file, *library_outputs],
    )
    delete_selected_btn.click(
        fn=request_delete,
        inputs=[ui_state],
        outputs=[confirm_group, *library_outputs],
    )
    confirm_delete_btn.click(
        fn=confirm_delete,
        inputs=[ui_state],
        outputs=[confirm_group, *library_outputs],
    )
    cancel_delete_btn.click(
        fn=cancel_delete,
        inputs=[ui_state],
        outputs=[confirm_group, *library_outputs],
    )

    # Viewer - uses gr.SelectData for the clicked grid index
    gallery.select(fn=open_viewer, inputs=[ui_state], outputs=library_outputs)
    viewer_prev_btn.click(fn=viewer_previous, inputs=[ui_state], outputs=library_outputs)
    viewer_next_btn.click(fn=viewer_next, inputs=[ui_state], outputs=library_outputs)
    viewer_close_btn.click(fn=close_viewer, inputs=[ui_state], outputs=library_outputs)
    viewer_key_input.change(
        fn=viewer_key,
        inputs=[viewer_key_input, ui_state],
        outputs=library_outputs,
        show_progress="hidden",
    )
    viewer_download_btn.click(
        fn=download_viewer_image,
        inputs=[ui_state],
        outputs=[viewer_file, library_status, ui_state],
    )

    return library_outputs

