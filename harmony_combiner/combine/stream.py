from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Dict, Iterable, Iterator, List, Optional, Sequence
import logging

from harmony_combiner.combine.headers import HeaderReconciler
from harmony_combiner.errors import HeaderReconciliationError, NoExportFilesError, OutputPathError
from harmony_combiner.ingest.metadata import open_export
from harmony_combiner.models.reconciliation import HeaderReconciliation
from harmony_combiner.models.records import COMMON_FIELD_HEADER, FileRecord


_LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class CombineConfig:
    """
    Output configuration.

    population_fallback:
      Written in the Population column for files without a population label.
    separate_fallback:
      File-name label used by combine_by_population() for unlabeled files.
    encoding:
      Used both to read the exports and to encode the output stream.
    """
    population_fallback: str = "Well"
    separate_fallback: str = "WellData"
    encoding: str = "utf-8"
    line_terminator: str = "\n"


@dataclass(frozen=True)
class CombineSummary:
    n_files: int
    n_rows: int
    n_columns: int
    fast_path: bool


def _file_label(label: str) -> str:
    return label.replace("/", "_").replace("\\", "_")


def _order_map(rec: FileRecord, header: Sequence[str]) -> List[int]:
    index: Dict[str, int] = {}
    for i, name in enumerate(header):
        index.setdefault(name, i)
    try:
        return [index[name] for name in rec.headers]
    except KeyError as e:
        raise HeaderReconciliationError(e.args[0], rec.path, header) from None


class StreamCombiner:
    """
    Writes the combined table for a selection of FileRecords to a binary sink.

    Output:
      - one header line: COMMON_FIELD_HEADER then the reconciled data columns
      - for each record, in order: every non-blank data line, prefixed with the
        record's common fields

    Each file is re-opened and skipped to its data_start line; nothing beyond the
    current line is held in memory. The first I/O error aborts the whole combine
    and propagates; whatever was already written to the sink is left in place.
    """

    def __init__(self, config: Optional[CombineConfig] = None):
        self.config = config or CombineConfig()

    def combine(
        self,
        records: Iterable[FileRecord],
        sink: BinaryIO,
        reconciliation: Optional[HeaderReconciliation] = None,
    ) -> CombineSummary:
        selected = list(records)
        if not selected:
            raise NoExportFilesError("no export files selected for combining")

        if reconciliation is None:
            reconciliation = HeaderReconciler().reconcile(selected)
        elif not reconciliation.matches([rec.path for rec in selected]):
            raise ValueError(
                f"reconciliation was computed for a different selection than the {len(selected)} selected file(s)"
            )

        self._write_fields(sink, COMMON_FIELD_HEADER + tuple(reconciliation.header))

        n_rows = 0
        for i, rec in enumerate(selected):
            prefix = "\t".join(rec.common_fields(self.config.population_fallback))
            if reconciliation.fast_path and tuple(rec.headers) == tuple(reconciliation.header):
                n = self._copy_verbatim(rec, prefix, sink)
            elif reconciliation.fast_path:
                # Same column set in another order: reorder instead of copying.
                cmap = _order_map(rec, reconciliation.header)
                n = self._copy_mapped(rec, prefix, cmap, reconciliation.width, sink)
            else:
                cmap = reconciliation.column_map(i).tolist()
                n = self._copy_mapped(rec, prefix, cmap, reconciliation.width, sink)
            _LOG.debug("%s: %d row(s)", rec.path, n)
            n_rows += n

        _LOG.info(
            "combined %d file(s), %d row(s), %d data column(s) (%s)",
            len(selected), n_rows, reconciliation.width,
            "same columns" if reconciliation.fast_path else "reconciled columns",
        )
        return CombineSummary(
            n_files=len(selected),
            n_rows=n_rows,
            n_columns=reconciliation.width,
            fast_path=reconciliation.fast_path,
        )

    def _data_lines(self, rec: FileRecord) -> Iterator[str]:
        """Non-blank lines after the header row, without line terminators."""
        with open_export(rec.path, self.config.encoding) as fh:
            for i, raw_line in enumerate(fh):
                if i < rec.data_start:
                    continue
                line = raw_line.rstrip("\r\n")
                if not line.strip():
                    continue
                yield line

    def _copy_verbatim(self, rec: FileRecord, prefix: str, sink: BinaryIO) -> int:
        n = 0
        for line in self._data_lines(rec):
            self._write_line(sink, f"{prefix}\t{line.strip()}")
            n += 1
        return n

    def _copy_mapped(self, rec: FileRecord, prefix: str, cmap: Sequence[int], width: int, sink: BinaryIO) -> int:
        n = 0
        for line in self._data_lines(rec):
            row = [""] * width
            # Extra cells beyond the file's header are dropped.
            for value, pos in zip(line.split("\t"), cmap):
                row[pos] = value
            self._write_line(sink, prefix + "\t" + "\t".join(row))
            n += 1
        return n

    def _write_fields(self, sink: BinaryIO, fields: Sequence[str]) -> None:
        self._write_line(sink, "\t".join(fields))

    def _write_line(self, sink: BinaryIO, text: str) -> None:
        sink.write((text + self.config.line_terminator).encode(self.config.encoding))


def combine_to_path(
    records: Iterable[FileRecord],
    out_path: str | Path,
    config: Optional[CombineConfig] = None,
    reconciliation: Optional[HeaderReconciliation] = None,
) -> CombineSummary:
    """Combine into a file; an empty selection fails before the file is created."""
    selected = list(records)
    if not selected:
        raise NoExportFilesError("no export files selected for combining")
    with open(Path(out_path), "wb") as fh:
        return StreamCombiner(config).combine(selected, fh, reconciliation)


def combine_by_population(
    records: Iterable[FileRecord],
    out_path: str | Path,
    config: Optional[CombineConfig] = None,
) -> List[Path]:
    """
    Write one combined file per population next to out_path.

    Files are named ``<out stem>_<population>.tsv``; unlabeled files go to
    ``<out stem>_<separate_fallback>.tsv``. Path separators in a label become
    ``_``. Groups keep first-seen order and are reconciled independently.
    """
    cfg = config or CombineConfig()
    selected = list(records)
    if not selected:
        raise NoExportFilesError("no export files selected for combining")

    out = Path(out_path)
    if not out.stem:
        raise OutputPathError(f"No file stem for output <{out}>")

    groups: Dict[str, List[FileRecord]] = {}
    for rec in selected:
        groups.setdefault(_file_label(rec.population.display(cfg.separate_fallback)), []).append(rec)

    written: List[Path] = []
    for label, group in groups.items():
        target = out.with_name(f"{out.stem}_{label}.tsv")
        summary = combine_to_path(group, target, cfg)
        _LOG.info("population %r: %d file(s), %d row(s) -> %s", label, summary.n_files, summary.n_rows, target)
        written.append(target)
    return written
