from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, TextIO, Tuple
import re

from harmony_combiner.ingest.interner import StringInterner
from harmony_combiner.models.records import FileRecord, Population


_UINT_RE = re.compile(r"\+?[0-9]+")
_TRAILING_UINT_RE = re.compile(r"[0-9]+$")
_U32_MAX = 2**32 - 1


@dataclass(frozen=True)
class ScannerConfig:
    """
    Scanner configuration for Harmony text exports.

    sentinel:
      Line separating the key/value preamble from the data section.
    evaluation_prefix_len:
      Number of leading characters dropped from the ``Evaluation`` value before
      parsing the integer (the value looks like ``Evaluation2``, the label being
      exactly 10 characters).
    encoding:
      Text encoding of the exports. Undecodable files are skipped.
    """
    sentinel: str = "[Data]"
    evaluation_prefix_len: int = 10
    encoding: str = "utf-8"


def open_export(path: str | Path, encoding: str = "utf-8") -> TextIO:
    """Open an export for sequential line reading (scanner and combiner share this)."""
    return open(path, "r", encoding=encoding)


def _parse_u32(text: str) -> Optional[int]:
    if not _UINT_RE.fullmatch(text):
        return None
    value = int(text)
    return value if value <= _U32_MAX else None


@dataclass
class _PartialRecord:
    """Fields collected while reading one preamble; every slot starts empty."""
    database_name: Optional[str] = None
    database_location: Optional[str] = None
    evaluation_signature: Optional[str] = None
    plate_name: Optional[str] = None
    measurement: Optional[int] = None
    evaluation: Optional[int] = None
    population: Optional[str] = None
    headers: Optional[Tuple[str, ...]] = None
    data_start: Optional[int] = None

    def finalize(self, path: Path) -> Optional[FileRecord]:
        required = (
            self.database_name,
            self.database_location,
            self.evaluation_signature,
            self.plate_name,
            self.measurement,
            self.evaluation,
            self.headers,
            self.data_start,
        )
        if any(v is None for v in required):
            return None
        return FileRecord(
            path=path,
            database_name=self.database_name,
            database_location=self.database_location,
            evaluation_signature=self.evaluation_signature,
            plate_name=self.plate_name,
            measurement=self.measurement,
            evaluation=self.evaluation,
            headers=self.headers,
            data_start=self.data_start,
            population=Population() if self.population is None else Population.named(self.population),
        )


class MetadataScanner:
    """
    Reads the preamble and header row of one Harmony export:

      Database Name<TAB>...
      Database Location<TAB>...        (or Database Link)
      Evaluation Signature<TAB>...
      Plate Name<TAB>...
      Measurement<TAB>Measurement 1
      Evaluation<TAB>Evaluation2
      Population<TAB>...               (optional)
      [Data]
      <col 1><TAB><col 2>...
      <data rows>

    Lines are read one at a time and reading stops right after the header row.
    scan() returns None whenever the file is not a recognizable export: a
    required key is missing or unparsable, a preamble line has no tab, there is
    no [Data] section or no header row, or the file cannot be opened/decoded.
    """

    def __init__(self, interner: Optional[StringInterner] = None, config: Optional[ScannerConfig] = None):
        self.interner = interner if interner is not None else StringInterner()
        self.config = config or ScannerConfig()
        self._handlers: Dict[str, Callable[[_PartialRecord, str], None]] = {
            "Database Name": self._set_database_name,
            "Database Location": self._set_database_location,
            "Database Link": self._set_database_location,
            "Evaluation Signature": self._set_evaluation_signature,
            "Plate Name": self._set_plate_name,
            "Measurement": self._set_measurement,
            "Evaluation": self._set_evaluation,
            "Population": self._set_population,
        }

    def scan(self, path: str | Path) -> Optional[FileRecord]:
        p = Path(path)
        try:
            with open_export(p, self.config.encoding) as fh:
                partial = self._read_until_header(fh)
        except (OSError, UnicodeDecodeError):
            return None
        if partial is None:
            return None
        return partial.finalize(p)

    def scan_many(self, paths) -> List[FileRecord]:
        """Scan paths in order, dropping the ones that are not exports."""
        out: List[FileRecord] = []
        for p in paths:
            rec = self.scan(p)
            if rec is not None:
                out.append(rec)
        return out

    def _read_until_header(self, fh: TextIO) -> Optional[_PartialRecord]:
        partial = _PartialRecord()
        in_data = False
        for i, raw_line in enumerate(fh):
            line = raw_line.strip()
            if line == self.config.sentinel:
                in_data = True
                continue
            if not line:
                continue
            if not in_data:
                if not self._apply_key_value(partial, line):
                    return None
                continue
            partial.headers = tuple(self.interner.get(col) for col in line.split("\t"))
            partial.data_start = i + 1
            break
        return partial

    def _apply_key_value(self, partial: _PartialRecord, line: str) -> bool:
        parts = line.split("\t")
        if len(parts) < 2:
            return False
        key, value = parts[0], parts[1]
        handler = self._handlers.get(key)
        if handler is not None:
            handler(partial, value)
        return True

    # -------------------------
    # Preamble keys
    # -------------------------
    def _set_database_name(self, partial: _PartialRecord, value: str) -> None:
        partial.database_name = self.interner.get(value)

    def _set_database_location(self, partial: _PartialRecord, value: str) -> None:
        partial.database_location = self.interner.get(value)

    def _set_evaluation_signature(self, partial: _PartialRecord, value: str) -> None:
        partial.evaluation_signature = value

    def _set_plate_name(self, partial: _PartialRecord, value: str) -> None:
        partial.plate_name = value

    def _set_measurement(self, partial: _PartialRecord, value: str) -> None:
        # "Measurement 3" -> 3
        tokens = value.split(" ")
        partial.measurement = _parse_u32(tokens[1]) if len(tokens) > 1 else None

    def _set_evaluation(self, partial: _PartialRecord, value: str) -> None:
        # "Evaluation2" -> 2. The label is dropped by width, not validated; the
        # integer is the digit run ending the remainder.
        m = _TRAILING_UINT_RE.search(value[self.config.evaluation_prefix_len:])
        partial.evaluation = _parse_u32(m.group(0)) if m else None

    def _set_population(self, partial: _PartialRecord, value: str) -> None:
        partial.population = self.interner.get(value)
