"""Ingest package - string interning, preamble scanning and file discovery.

This package handles:
- Interning strings repeated across a batch (database ids, population labels, column names)
- Scanning an export file's preamble and header row into a FileRecord
- Discovering candidate export files under a folder and building an ExportCatalog

Key classes:
- StringInterner: run-scoped string table, one per batch
- MetadataScanner: reads one file up to its header row, returns FileRecord or None
- ExportDiscovery: walks a folder and builds an ExportCatalog

Design principle:
- Unrecognizable files are skipped, never fatal
- The scanner stops reading at the header row; data rows are left for the combiner
"""
from .interner import StringInterner
from .metadata import MetadataScanner, ScannerConfig, open_export
from .discovery import (
    DiscoveryConfig,
    ExportDiscovery,
    is_candidate_export,
    iter_candidate_exports,
    iter_export_records,
    scan_exports,
)

__all__ = [
    "StringInterner",
    "MetadataScanner",
    "ScannerConfig",
    "open_export",
    "DiscoveryConfig",
    "ExportDiscovery",
    "is_candidate_export",
    "iter_candidate_exports",
    "iter_export_records",
    "scan_exports",
]
