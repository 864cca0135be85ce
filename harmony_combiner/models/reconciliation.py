from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple

import numpy as np


@dataclass(frozen=True, eq=False)
class HeaderReconciliation:
    """
    Result of reconciling the headers of a batch of export files.

    header:
      Output data columns. On the fast path this is the first file's header;
      otherwise it is the canonical header (base order, then novel columns sorted).
    column_maps:
      None on the fast path (all files share the same column set, rows are copied
      verbatim). Otherwise one int array per file, aligned with the record list:
      column_maps[i][j] is the canonical index of column j of file i.
    paths:
      Paths of the reconciled files, in record order. Empty when unknown.
    """
    header: Tuple[str, ...]
    column_maps: Optional[Tuple[np.ndarray, ...]] = None
    paths: Tuple[Path, ...] = ()

    @property
    def fast_path(self) -> bool:
        return self.column_maps is None

    @property
    def width(self) -> int:
        return len(self.header)

    def column_map(self, index: int) -> np.ndarray:
        if self.column_maps is None:
            raise ValueError("No column maps on the fast path; rows are copied verbatim.")
        return self.column_maps[index]

    def matches(self, paths: Sequence[Path]) -> bool:
        """True if this result can be applied to files at ``paths`` in that order."""
        paths = tuple(paths)
        if self.paths:
            return self.paths == paths
        return self.column_maps is None or len(self.column_maps) == len(paths)
