"""GUI package - interactive ipywidgets front end for choosing what to combine.

Workflow:
1. Pick a folder and scan it for exports
2. Include/exclude files one by one, or keep only one population
3. Pick an output file (optionally one file per population) and combine

Entry point:
    from harmony_combiner.gui.app import build_combiner_gui
    gui = build_combiner_gui()

The selection state (FileSelection) has no widget dependency and can be reused
by other front ends.
"""
