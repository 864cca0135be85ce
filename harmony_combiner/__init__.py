"""Harmony Combiner -- merge exported lab-instrument plate tables into one table.

Harmony exports one tab-separated text file per plate/measurement/evaluation.
The files share a layout (a key/value preamble, a ``[Data]`` sentinel, a header
row, then data rows) but their column sets drift between export runs.

This package provides tools for:
- Discovering candidate export files (``PlateResults.txt``, ``Objects_Population*.txt``)
- Scanning each file's preamble into a :class:`FileRecord`
- Reconciling divergent column sets into one canonical header
- Streaming every data row into a single tab-separated output

Key principles:
- Streaming only: output is produced line by line, never by loading whole files
- Lenient scanning: files that do not look like exports are skipped, not fatal
- Deterministic output: file order, then line order, canonical columns sorted

Main subpackages:
- ingest: String interning, preamble scanning, file discovery
- combine: Header reconciliation and the streaming combiner
- models: Data models (FileRecord, Population, ExportCatalog, HeaderReconciliation)
- gui: Interactive ipywidgets selection front end
"""

__all__ = []
