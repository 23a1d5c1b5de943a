import argparse
import logging
import os

import yaml

from planner.form_state import FormState
from planner.store.backends import backend_from_config
from planner.store.milestone_store import STORAGE_KEY, MilestoneStore
from planner.types import DEFAULT_TIMELINE
from ui.gradio_app import launch_ui


def load_config(path: str = "config.yaml") -> dict:
    if not os.path.exists(path):
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def build_form(cfg: dict) -> FormState:
    storage = cfg.get("storage", {}) or {}
    store = MilestoneStore(backend_from_config(cfg), key=storage.get("key", STORAGE_KEY))
    store.load()
    default_timeline = (cfg.get("form", {}) or {}).get("default_timeline", DEFAULT_TIMELINE)
    return FormState(store, default_timeline=default_timeline)


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--config", default="config.yaml", help="Path to the YAML config")
    parser.add_argument("--storage", help="Override storage.path from the config")
    parser.add_argument("--reset", action="store_true", help="Delete all saved milestones before launching")
    args = parser.parse_args()

    cfg = load_config(args.config)
    if args.storage:
        cfg.setdefault("storage", {})["path"] = args.storage

    logging.basicConfig(
        level=getattr(logging, cfg.get("logging", {}).get("level", "INFO")),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )
    log = logging.getLogger("main")

    # 1) Open the store and restore saved milestones
    form = build_form(cfg)
    if args.reset:
        log.info("Resetting saved milestones ...")
        form.store.reset()

    # 2) Launch UI
    launch_ui(form, cfg)


if __name__ == "__main__":
    main()
