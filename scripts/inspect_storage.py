# scripts/inspect_storage.py
# Sanity check: dump what the app would load from disk and how it would chart it.
import sys

from main import load_config
from planner.chart import format_range, project_chart
from planner.store.backends import backend_from_config
from planner.store.milestone_store import STORAGE_KEY, MilestoneStore

cfg_path = sys.argv[1] if len(sys.argv) > 1 else "config.yaml"
cfg = load_config(cfg_path)

backend = backend_from_config(cfg)
key = (cfg.get("storage", {}) or {}).get("key", STORAGE_KEY)

raw = backend.get(key)
print(f"[RAW] {key}: {len(raw) if raw else 0} chars")
print("-" * 60)

store = MilestoneStore(backend, key=key)
milestones = store.load()
print(f"Loaded {len(milestones)} milestones")
for m in milestones:
    print(m.model_dump(mode="json"))

chart = project_chart(milestones, (cfg.get("chart", {}) or {}).get("palette", ()))
print("\n---- Categories ----")
print(chart.categories)

print("\n---- Series ----")
for s in chart.series:
    print(f"{s.label} [{s.color}] {len(s.segments)} segment(s)")
    for seg in s.segments:
        print("   ", seg.title, "|", format_range(seg))
