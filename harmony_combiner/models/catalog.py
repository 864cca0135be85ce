from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import pandas as pd

from harmony_combiner.models.records import FileRecord


@dataclass(frozen=True)
class ExportCatalog:
    """
    Discovery output: every export found under a folder, in enumeration order.

    Notes
    - records only holds files whose preamble scanned completely.
    - skipped lists candidate files that were not recognizable exports (missing
      keys, no [Data] section, unreadable). They are reported, never fatal.
    """
    root_dir: Path
    records: Tuple[FileRecord, ...]
    skipped: Tuple[Path, ...] = ()

    def __len__(self) -> int:
        return len(self.records)

    @property
    def populations(self) -> List[Optional[str]]:
        """Distinct population labels in first-seen order (None for unlabeled files)."""
        seen: List[Optional[str]] = []
        for rec in self.records:
            label = rec.population.label
            if label not in seen:
                seen.append(label)
        return seen

    def records_for_population(self, label: Optional[str]) -> List[FileRecord]:
        return [r for r in self.records if r.population.label == label]

    def to_frame(self) -> pd.DataFrame:
        """One row per scanned record, for display or custom selection."""
        columns = [
            "path",
            "plate_name",
            "measurement",
            "evaluation",
            "evaluation_signature",
            "population",
            "database_name",
            "database_location",
            "n_columns",
            "data_start",
        ]
        rows = [
            {
                "path": str(r.path),
                "plate_name": r.plate_name,
                "measurement": r.measurement,
                "evaluation": r.evaluation,
                "evaluation_signature": r.evaluation_signature,
                "population": r.population.label,
                "database_name": r.database_name,
                "database_location": r.database_location,
                "n_columns": r.n_columns,
                "data_start": r.data_start,
            }
            for r in self.records
        ]
        return pd.DataFrame(rows, columns=columns)
