from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple


# Output columns prefixed to every combined row, in order.
COMMON_FIELD_HEADER: Tuple[str, ...] = (
    "Plate Name",
    "Measurement",
    "Evaluation",
    "Evaluation Signature",
    "Population",
)


@dataclass(frozen=True)
class Population:
    """
    Optional population label of an export file.

    Two states:
      - unlabeled: the preamble had no ``Population`` key (label is None)
      - named: the preamble carried a label (possibly an empty string)

    Formatting of the unlabeled case is left to the caller (the combiner writes
    a fallback literal such as "Well").
    """
    label: Optional[str] = None

    @classmethod
    def named(cls, label: str) -> "Population":
        return cls(label=str(label))

    @property
    def is_named(self) -> bool:
        return self.label is not None

    def display(self, fallback: str) -> str:
        return self.label if self.label is not None else fallback


UNLABELED = Population()


@dataclass(frozen=True)
class FileRecord:
    """
    Metadata for one successfully scanned export file.

    Notes
    - headers holds the data-column names in file order (never empty).
    - data_start is the 0-based physical line index of the first data row, i.e.
      the number of lines to skip before data begins.
    - database_name, database_location, population label and headers are shared
      (interned) strings within one scan batch.
    - headers may repeat a name. When rows are placed under a reconciled header
      the last cell carrying a repeated name wins; see duplicate_headers.
    """
    path: Path
    database_name: str
    database_location: str
    evaluation_signature: str
    plate_name: str
    measurement: int
    evaluation: int
    headers: Tuple[str, ...]
    data_start: int
    population: Population = UNLABELED

    def __post_init__(self) -> None:
        if not self.headers:
            raise ValueError(f"FileRecord for {self.path} has an empty header row.")
        if self.data_start < 1:
            raise ValueError(f"FileRecord for {self.path}: data_start must be >= 1, got {self.data_start}.")

    @property
    def n_columns(self) -> int:
        return len(self.headers)

    @property
    def duplicate_headers(self) -> Tuple[str, ...]:
        """Column names that occur more than once in headers, in order of first repeat."""
        seen = set()
        dupes = {}
        for name in self.headers:
            if name in seen:
                dupes[name] = None
            seen.add(name)
        return tuple(dupes)

    def common_fields(self, population_fallback: str = "Well") -> Tuple[str, str, str, str, str]:
        """Values written under COMMON_FIELD_HEADER for every row of this file."""
        return (
            self.plate_name,
            str(self.measurement),
            str(self.evaluation),
            self.evaluation_signature,
            self.population.display(population_fallback),
        )
