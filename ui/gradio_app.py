import logging
from typing import Optional

import gradio as gr

from planner.chart import PALETTE, project_chart
from planner.form_state import FormState
from planner.listing import format_list, milestone_choices, milestones_frame
from planner.store.milestone_store import StorageError
from planner.types import FIELDS, MilestoneValidationError
from ui.chart_figure import build_figure

log = logging.getLogger("ui")


def render_state(form: FormState, cfg: dict, status: str = ""):
    """Values for every output component after the session state, in the order build_app wires them."""
    chart_cfg = cfg.get("chart", {}) or {}
    milestones = form.store.list()
    chart = project_chart(milestones, chart_cfg.get("palette") or PALETTE)
    editing = form.is_editing
    return (
        "### Edit Milestone" if editing else "### Add Milestone",
        form.draft.timeline,
        form.draft.title,
        form.draft.start,
        form.draft.end,
        gr.update(value="Update" if editing else "Add"),
        gr.update(visible=editing),
        status,
        build_figure(chart, int(chart_cfg.get("height", 400))),
        format_list(milestones),
        milestones_frame(milestones).drop(columns=["id"]),
        gr.update(choices=milestone_choices(milestones), value=None),
    )


# -------- Event handlers (plain functions so they can be driven without a browser) --------
def submit(form: FormState, cfg: dict, timeline: str, title: str, start: str, end: str):
    for name, value in zip(FIELDS, (timeline, title, start, end)):
        form.set_field(name, value)
    try:
        saved = form.commit()
    except MilestoneValidationError as e:
        log.warning(f"Rejected milestone: {e.message}")
        return render_state(form, cfg, f"⚠️ {e.message}")
    except StorageError as e:
        return render_state(form, cfg, f"⚠️ {e}")
    if saved is None:
        return render_state(form, cfg, "⚠️ That milestone no longer exists; nothing was updated.")
    return render_state(form, cfg, f"✅ Saved **{saved.title}**.")


def begin_edit(form: FormState, cfg: dict, milestone_id: Optional[str]):
    m = form.store.get(milestone_id) if milestone_id else None
    if m is None:
        return render_state(form, cfg, "Pick a milestone first.")
    form.begin_edit(m)
    return render_state(form, cfg)


def cancel_edit(form: FormState, cfg: dict):
    form.cancel_edit()
    return render_state(form, cfg)


def delete(form: FormState, cfg: dict, milestone_id: Optional[str]):
    if not milestone_id:
        return render_state(form, cfg, "Pick a milestone first.")
    try:
        form.delete(milestone_id)
    except StorageError as e:
        return render_state(form, cfg, f"⚠️ {e}")
    return render_state(form, cfg, "🗑️ Milestone deleted.")


def session_handler(template: FormState, cfg: dict, handler):
    """Wrap a handler so each browser session edits through its own FormState.

    The session value starts as None; the first event creates a form sharing the
    template's store. The form is returned first so gr.State keeps it.
    """
    def run(session: Optional[FormState], *args):
        form = session if session is not None else FormState(template.store, template.default_timeline)
        return (form,) + tuple(handler(form, cfg, *args))
    return run


def build_app(form: FormState, cfg: dict) -> gr.Blocks:
    ui_cfg = cfg.get("ui", {}) or {}
    with gr.Blocks(title=ui_cfg.get("title", "Life Timeline Planner")) as app:
        gr.Markdown(f"# {ui_cfg.get('title', 'Life Timeline Planner')}")

        heading = gr.Markdown("### Add Milestone")
        with gr.Row():
            timeline = gr.Textbox(label="Timeline", placeholder="Timeline (e.g., Career)")
            title = gr.Textbox(label="Title", placeholder="Milestone Title")
            start = gr.Textbox(label="Start", placeholder="Start (YYYY-MM-DD)")
            end = gr.Textbox(label="End", placeholder="End (YYYY-MM-DD)")
        with gr.Row():
            save = gr.Button("Add", variant="primary")
            cancel = gr.Button("Cancel", visible=False)
        status = gr.Markdown("")

        chart = gr.Plot(label="Timelines")

        gr.Markdown("### Milestone List")
        listing = gr.Markdown("")
        table = gr.Dataframe(interactive=False)
        with gr.Row():
            picker = gr.Dropdown(label="Milestone", choices=[], value=None)
            edit = gr.Button("Edit")
            remove = gr.Button("Delete", variant="stop")

        session = gr.State(None)
        outputs = [session, heading, timeline, title, start, end, save, cancel, status,
                   chart, listing, table, picker]

        save.click(session_handler(form, cfg, submit), [session, timeline, title, start, end], outputs)
        cancel.click(session_handler(form, cfg, cancel_edit), [session], outputs)
        edit.click(session_handler(form, cfg, begin_edit), [session, picker], outputs)
        remove.click(session_handler(form, cfg, delete), [session, picker], outputs)
        app.load(session_handler(form, cfg, render_state), [session], outputs)

    return app


def launch_ui(form: FormState, cfg: dict):
    ui_cfg = cfg.get("ui", {}) or {}
    app = build_app(form, cfg)
    app.launch(server_name=ui_cfg.get("server_name"), server_port=ui_cfg.get("server_port"))
