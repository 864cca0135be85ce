from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Set, Tuple
import logging

import numpy as np

from harmony_combiner.errors import HeaderReconciliationError
from harmony_combiner.models.reconciliation import HeaderReconciliation
from harmony_combiner.models.records import FileRecord


_LOG = logging.getLogger(__name__)


def _novel_columns(records: Sequence[FileRecord]) -> Set[str]:
    """Columns present in some file but absent from the first (base) file."""
    base = set(records[0].headers)
    diffs: Set[str] = set()
    for rec in records[1:]:
        diffs |= base.symmetric_difference(rec.headers)
    # Drop base columns that only went missing in later files; they stay in base order.
    return diffs - base


def canonical_header(records: Sequence[FileRecord]) -> Tuple[str, ...]:
    """
    Ordered union of all columns: the first file's header in its own order,
    then every other column sorted lexicographically. Names are unique.
    """
    if not records:
        return ()
    base = list(dict.fromkeys(records[0].headers))
    return tuple(base + sorted(_novel_columns(records)))


class HeaderReconciler:
    """
    Computes the output header and per-file column maps for a batch of records.

    reconcile() returns None for an empty batch. Callers must treat that as a
    usage error (nothing to combine).
    """

    def reconcile(self, records: Sequence[FileRecord]) -> Optional[HeaderReconciliation]:
        if not records:
            return None

        for rec in records:
            if rec.duplicate_headers:
                _LOG.warning(
                    "%s: repeated column name(s) %s; only the last cell of each is kept when realigned",
                    rec.path, ", ".join(rec.duplicate_headers),
                )

        paths = tuple(rec.path for rec in records)
        if self._same_column_sets(records):
            _LOG.debug("all %d file(s) share one column set; verbatim copy", len(records))
            return HeaderReconciliation(header=tuple(records[0].headers), paths=paths)

        header = canonical_header(records)
        index: Dict[str, int] = {name: i for i, name in enumerate(header)}
        maps: List[np.ndarray] = []
        for rec in records:
            positions = []
            for name in rec.headers:
                pos = index.get(name)
                if pos is None:
                    raise HeaderReconciliationError(name, rec.path, header)
                positions.append(pos)
            maps.append(np.asarray(positions, dtype=np.intp))

        _LOG.debug(
            "reconciled %d file(s): %d base column(s), %d canonical column(s)",
            len(records), len(records[0].headers), len(header),
        )
        return HeaderReconciliation(header=header, column_maps=tuple(maps), paths=paths)

    @staticmethod
    def _same_column_sets(records: Sequence[FileRecord]) -> bool:
        base = set(records[0].headers)
        return all(set(rec.headers) == base for rec in records[1:])


def reconcile_headers(records: Sequence[FileRecord]) -> Optional[HeaderReconciliation]:
    return HeaderReconciler().reconcile(records)
