from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Tuple
import logging
import os

from harmony_combiner.ingest.interner import StringInterner
from harmony_combiner.ingest.metadata import MetadataScanner, ScannerConfig
from harmony_combiner.models.catalog import ExportCatalog
from harmony_combiner.models.records import FileRecord


_LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiscoveryConfig:
    """
    Which files count as candidate Harmony exports.

    A candidate is a regular file whose suffix equals ``extension`` (case-sensitive)
    and whose stem either equals one of ``exact_stems`` or starts with one of
    ``stem_prefixes``. Both families are processed independently; no attempt is
    made to pair a PlateResults file with the Objects_Population files next to it.
    """
    extension: str = ".txt"
    exact_stems: Tuple[str, ...] = ("PlateResults",)
    stem_prefixes: Tuple[str, ...] = ("Objects_Population",)
    recursive: bool = True


def is_candidate_export(path: Path, config: Optional[DiscoveryConfig] = None) -> bool:
    cfg = config or DiscoveryConfig()
    p = Path(path)
    if not p.is_file() or p.suffix != cfg.extension:
        return False
    stem = p.stem
    return stem in cfg.exact_stems or stem.startswith(cfg.stem_prefixes)


def iter_candidate_exports(root: str | Path, config: Optional[DiscoveryConfig] = None) -> Iterator[Path]:
    """
    Yield candidate export files under root in a stable order.

    Directories and file names are visited sorted by name. If root is itself a
    file, it is yielded when it is a candidate.
    """
    cfg = config or DiscoveryConfig()
    base = Path(root).expanduser()
    if not base.exists():
        raise FileNotFoundError(f"Not found: {base}")
    if base.is_file():
        if is_candidate_export(base, cfg):
            yield base
        return

    for dirpath, dirnames, filenames in os.walk(base):
        dirnames.sort()
        if not cfg.recursive:
            dirnames[:] = []
        for name in sorted(filenames):
            p = Path(dirpath) / name
            if is_candidate_export(p, cfg):
                yield p


def iter_export_records(
    root: str | Path,
    *,
    config: Optional[DiscoveryConfig] = None,
    scanner_config: Optional[ScannerConfig] = None,
) -> Iterator[FileRecord]:
    """Lazily scan every candidate under root, yielding only recognizable exports."""
    scanner = MetadataScanner(StringInterner(), scanner_config)
    for p in iter_candidate_exports(root, config):
        rec = scanner.scan(p)
        if rec is None:
            _LOG.debug("skipped %s: not a recognizable export", p)
            continue
        yield rec


@dataclass
class ExportDiscovery:
    """
    Build an ExportCatalog for a folder.

    Each build_catalog() call owns a fresh StringInterner, so catalogs built
    concurrently (e.g. one per worker thread) never share mutable state.
    """
    config: Optional[DiscoveryConfig] = None
    scanner_config: Optional[ScannerConfig] = None

    def build_catalog(self, root: str | Path) -> ExportCatalog:
        base = Path(root).expanduser().resolve()
        scanner = MetadataScanner(StringInterner(), self.scanner_config)

        records: List[FileRecord] = []
        skipped: List[Path] = []
        for p in iter_candidate_exports(base, self.config):
            rec = scanner.scan(p)
            if rec is None:
                _LOG.debug("skipped %s: not a recognizable export", p)
                skipped.append(p)
            else:
                records.append(rec)

        _LOG.info(
            "scanned %s: %d export(s), %d skipped, %d distinct strings",
            base, len(records), len(skipped), len(scanner.interner),
        )
        return ExportCatalog(root_dir=base, records=tuple(records), skipped=tuple(skipped))


def scan_exports(root: str | Path, config: Optional[DiscoveryConfig] = None) -> ExportCatalog:
    return ExportDiscovery(config=config).build_catalog(root)
