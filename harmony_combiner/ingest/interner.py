from __future__ import annotations

from typing import Dict


class StringInterner:
    """
    Run-scoped string table.

    get(text) returns the first string ever stored that is equal to text, so all
    records of one batch share a single object per distinct database name,
    population label or column name. There is no eviction; drop the interner
    with the batch.

    Not thread-safe: give each concurrent scan its own interner.
    """

    def __init__(self) -> None:
        self._table: Dict[str, str] = {}

    def get(self, text: str) -> str:
        return self._table.setdefault(text, text)

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, text: object) -> bool:
        return text in self._table
