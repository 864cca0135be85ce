"""Exceptions raised by the combiner.

Malformed input files are *not* errors: the scanner skips them. Only usage
errors, internal inconsistencies and combine-time I/O failures reach the caller.
"""
from __future__ import annotations


class HarmonyCombinerError(Exception):
    """Base class for all combiner errors."""


class NoExportFilesError(HarmonyCombinerError, ValueError):
    """Nothing to combine: zero files discovered or zero files selected."""


class OutputPathError(HarmonyCombinerError, ValueError):
    """The output path cannot be used to derive per-population file names."""


class HeaderReconciliationError(HarmonyCombinerError, RuntimeError):
    """
    A file column could not be located in the canonical header.

    The canonical header is built as a superset of every file's columns, so this
    signals a defect in header construction, never a data-quality problem.
    """

    def __init__(self, column: str, path, canonical) -> None:
        self.column = column
        self.path = path
        self.canonical = tuple(canonical)
        super().__init__(
            f"column {column!r} of {path} is missing from the combined header "
            f"({len(self.canonical)} columns)"
        )
