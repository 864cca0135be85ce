from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from harmony_combiner.models.catalog import ExportCatalog
from harmony_combiner.models.records import FileRecord


# Label shown for files without a population in selection lists and filter buttons.
UNLABELED_DISPLAY = "Well Data"


@dataclass
class FileSelection:
    """
    Per-file include flags over the records of one catalog.

    Records keep discovery order; selected() returns the included ones in that order.
    """
    records: Tuple[FileRecord, ...] = ()
    include: List[bool] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.records = tuple(self.records)
        if not self.include:
            self.include = [True] * len(self.records)
        if len(self.include) != len(self.records):
            raise ValueError("include flags must match the number of records")

    @classmethod
    def from_catalog(cls, catalog: ExportCatalog, include: bool = True) -> "FileSelection":
        return cls(records=catalog.records, include=[include] * len(catalog.records))

    def __len__(self) -> int:
        return len(self.records)

    @property
    def n_included(self) -> int:
        return sum(1 for flag in self.include if flag)

    def set_included(self, index: int, value: bool) -> None:
        self.include[index] = bool(value)

    def toggle(self, index: int) -> bool:
        self.include[index] = not self.include[index]
        return self.include[index]

    def include_all(self) -> None:
        self.include = [True] * len(self.records)

    def include_none(self) -> None:
        self.include = [False] * len(self.records)

    def only_population(self, label: Optional[str]) -> None:
        """Include exactly the files whose population label equals label (None = unlabeled)."""
        self.include = [rec.population.label == label for rec in self.records]

    def population_labels(self) -> List[Optional[str]]:
        seen: List[Optional[str]] = []
        for rec in self.records:
            if rec.population.label not in seen:
                seen.append(rec.population.label)
        return seen

    def selected(self) -> List[FileRecord]:
        return [rec for rec, flag in zip(self.records, self.include) if flag]


def describe_record(rec: FileRecord) -> str:
    """One-line label for a record in a selection list."""
    pop = rec.population.display(UNLABELED_DISPLAY)
    return f"{rec.plate_name}  M{rec.measurement} E{rec.evaluation}  [{pop}]  {rec.path.name}"
