"""Combine package - header reconciliation and streaming output.

Design principle:
  - Ingest produces FileRecords (metadata + header + data offset), never data rows.
  - Combining re-reads each file from its data offset and writes unified rows
    straight to the sink, so memory stays proportional to one line.

Two paths:
  - fast path: every file has the same column set; rows are copied verbatim
  - slow path: rows are re-projected onto the canonical header via column maps
"""

from .headers import HeaderReconciler, canonical_header, reconcile_headers
from .stream import (
    CombineConfig,
    CombineSummary,
    StreamCombiner,
    combine_by_population,
    combine_to_path,
)

__all__ = [
    "HeaderReconciler",
    "canonical_header",
    "reconcile_headers",
    "CombineConfig",
    "CombineSummary",
    "StreamCombiner",
    "combine_by_population",
    "combine_to_path",
]
