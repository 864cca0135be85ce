from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple

import pytest


def make_export_text(
    headers: Sequence[str],
    rows: Iterable[Sequence[str]] = (),
    *,
    plate: str = "P1",
    measurement: str = "Measurement 1",
    evaluation: str = "Evaluation2",
    population: Optional[str] = None,
    signature: str = "Sig1",
    db_name: str = "d1",
    db_location: str = "loc1",
    location_key: str = "Database Location",
    drop: Tuple[str, ...] = (),
    extra_preamble: Sequence[Tuple[str, str]] = (),
) -> str:
    """Text of a synthetic Harmony export (preamble, blank line, [Data], header, rows)."""
    preamble = [
        ("Database Name", db_name),
        (location_key, db_location),
        ("Evaluation Signature", signature),
        ("Plate Name", plate),
        ("Measurement", measurement),
        ("Evaluation", evaluation),
    ]
    if population is not None:
        preamble.append(("Population", population))
    preamble.extend(extra_preamble)

    lines = [f"{k}\t{v}" for k, v in preamble if k not in drop]
    lines.append("")
    lines.append("[Data]")
    lines.append("\t".join(headers))
    lines.extend("\t".join(r) for r in rows)
    return "\n".join(lines) + "\n"


def _write_export(path: Path, headers: Sequence[str], rows: Iterable[Sequence[str]] = (), **kwargs) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(make_export_text(headers, rows, **kwargs), encoding="utf-8")
    return path


@pytest.fixture
def write_export():
    """write_export(path, headers, rows, **preamble) -> path"""
    return _write_export
