from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

import ipywidgets as w

from harmony_combiner.combine.stream import combine_by_population, combine_to_path
from harmony_combiner.errors import HarmonyCombinerError, NoExportFilesError
from harmony_combiner.gui.log_view import HtmlLog
from harmony_combiner.gui.selection import UNLABELED_DISPLAY, FileSelection, describe_record
from harmony_combiner.ingest.discovery import ExportDiscovery


# Keep a single active GUI instance per kernel to avoid duplicated callbacks / stacked widgets.
_ACTIVE_GUI: Optional[w.Widget] = None
_ACTIVE_HANDLER: Optional[logging.Handler] = None


def _browse_for_folder() -> Optional[str]:
    try:
        import tkinter as tk
        from tkinter import filedialog

        root = tk.Tk()
        root.withdraw()
        root.attributes("-topmost", True)
        picked = filedialog.askdirectory(title="Select folder with Harmony exports")
        root.destroy()
        return picked or None
    except Exception:
        return None


def _attach_log(log: HtmlLog) -> None:
    """Route harmony_combiner log records into the view (replacing any previous GUI handler)."""
    global _ACTIVE_HANDLER
    logger = logging.getLogger("harmony_combiner")
    if _ACTIVE_HANDLER is not None:
        logger.removeHandler(_ACTIVE_HANDLER)
    _ACTIVE_HANDLER = log.handler()
    logger.addHandler(_ACTIVE_HANDLER)
    if logger.level == logging.NOTSET:
        logger.setLevel(logging.INFO)


def _build_combiner_panel(state: Dict[str, Any]) -> w.Widget:
    """
    Build the panel widgets. state is shared with the callbacks:
      state["catalog"]   -> ExportCatalog or None
      state["selection"] -> FileSelection or None
      state["log"]       -> HtmlLog
    """
    log: HtmlLog = state.setdefault("log", HtmlLog())

    folder = w.Text(description="Folder", placeholder="Folder containing Harmony exports", layout=w.Layout(width="70%"))
    btn_browse = w.Button(description="Browse…", layout=w.Layout(width="110px"))
    btn_scan = w.Button(description="Find Files", button_style="primary", layout=w.Layout(width="120px"))

    filters = w.HBox([])
    files_box = w.VBox([], layout=w.Layout(max_height="320px", overflow_y="auto", border="1px solid #ddd"))
    status = w.HTML("<i>No folder scanned.</i>")

    out_path = w.Text(description="Output", placeholder="combined.tsv", layout=w.Layout(width="70%"))
    chk_separate = w.Checkbox(value=False, description="One file per population", indent=False)
    btn_combine = w.Button(description="Combine", button_style="success", layout=w.Layout(width="120px"))

    checkboxes: List[w.Checkbox] = []

    def _refresh_status() -> None:
        sel = state.get("selection")
        if sel is None:
            status.value = "<i>No folder scanned.</i>"
            return
        status.value = f"{sel.n_included} of {len(sel)} file(s) selected"

    def _sync_checkboxes() -> None:
        sel = state["selection"]
        for cb, flag in zip(checkboxes, sel.include):
            cb.value = flag
        _refresh_status()

    def _on_check(index: int):
        def handler(change):
            sel = state.get("selection")
            if sel is not None:
                sel.set_included(index, change["new"])
                _refresh_status()
        return handler

    def _filter_button(text: str, action) -> w.Button:
        btn = w.Button(description=text, layout=w.Layout(width="auto"))

        def _on_click(_):
            if state.get("selection") is None:
                return
            action(state["selection"])
            _sync_checkboxes()

        btn.on_click(_on_click)
        return btn

    def _rebuild_lists() -> None:
        sel: FileSelection = state["selection"]
        checkboxes.clear()
        for i, rec in enumerate(sel.records):
            cb = w.Checkbox(value=sel.include[i], description=describe_record(rec), indent=False,
                            layout=w.Layout(width="100%"))
            cb.observe(_on_check(i), names="value")
            checkboxes.append(cb)
        files_box.children = tuple(checkboxes)

        buttons = [_filter_button("All", FileSelection.include_all), _filter_button("None", FileSelection.include_none)]
        for label in sel.population_labels():
            text = label if label is not None else UNLABELED_DISPLAY
            buttons.append(_filter_button(text, lambda s, lbl=label: s.only_population(lbl)))
        filters.children = tuple(buttons)
        _refresh_status()

    def _on_browse(_):
        picked = _browse_for_folder()
        if picked is None:
            log.warning("Browse failed (headless environment). Please paste the folder path manually.")
            return
        folder.value = picked

    def _on_scan(_):
        log.clear()
        try:
            catalog = ExportDiscovery().build_catalog(Path(folder.value))
        except Exception as e:
            log.error(f"ERROR: {e!r}")
            return
        state["catalog"] = catalog
        state["selection"] = FileSelection.from_catalog(catalog)
        log.info(f"Found {len(catalog)} export(s) under {catalog.root_dir}")
        for p in catalog.skipped:
            log.warning(f"skipped (not a recognizable export): {p}")
        _rebuild_lists()

    def _on_combine(_):
        sel: Optional[FileSelection] = state.get("selection")
        if sel is None:
            log.error("Find files first.")
            return
        if not out_path.value.strip():
            log.error("Choose an output file.")
            return
        target = Path(out_path.value).expanduser()
        try:
            if chk_separate.value:
                for p in combine_by_population(sel.selected(), target):
                    log.info(f"wrote {p}")
            else:
                summary = combine_to_path(sel.selected(), target)
                log.info(f"wrote {target}: {summary.n_rows} row(s) from {summary.n_files} file(s)")
        except NoExportFilesError:
            log.error("No files selected.")
        except (HarmonyCombinerError, OSError) as e:
            log.error(f"ERROR: {e}")

    btn_browse.on_click(_on_browse)
    btn_scan.on_click(_on_scan)
    btn_combine.on_click(_on_combine)

    state["widgets"] = {
        "folder": folder,
        "scan": btn_scan,
        "filters": filters,
        "files": files_box,
        "status": status,
        "output": out_path,
        "separate": chk_separate,
        "combine": btn_combine,
    }

    return w.VBox([
        w.HBox([folder, btn_browse, btn_scan]),
        filters,
        files_box,
        status,
        w.HBox([out_path, chk_separate, btn_combine]),
        log.widget,
    ])


def build_combiner_gui() -> w.Widget:
    """Notebook front end: scan a folder, choose files, write the combined table."""
    global _ACTIVE_GUI

    if _ACTIVE_GUI is not None:
        try:
            _ACTIVE_GUI.close()
        except Exception:
            pass
        _ACTIVE_GUI = None

    state: Dict[str, Any] = {"catalog": None, "selection": None, "log": HtmlLog()}
    _attach_log(state["log"])
    gui = _build_combiner_panel(state)
    _ACTIVE_GUI = gui
    return gui
