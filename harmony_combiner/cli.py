from __future__ import annotations

from typing import Optional, Sequence
import logging
import sys

from harmony_combiner.combine.stream import CombineConfig, StreamCombiner, combine_by_population, combine_to_path
from harmony_combiner.errors import HarmonyCombinerError, HeaderReconciliationError
from harmony_combiner.ingest.discovery import scan_exports


def build_parser():
    import argparse
    import textwrap

    p = argparse.ArgumentParser(
        prog="harmony-combine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=textwrap.dedent(
            """\
            Combine exported Harmony data files into a single TSV file.

            The input folder is searched recursively for PlateResults.txt and
            Objects_Population*.txt exports. Files whose column sets differ are
            reconciled onto one header; missing cells are left empty.
            """
        ),
    )
    p.add_argument("input", help="Directory to search for Harmony files")
    p.add_argument("output", nargs="?", default=None, help="Output file name (default: stdout)")
    p.add_argument(
        "-s", "--separate",
        action="store_true",
        help="Create a separate output file per population (<output stem>_<population>.tsv); requires OUTPUT",
    )
    p.add_argument("--list", action="store_true", help="List the recognized exports instead of combining")
    p.add_argument("--population-fallback", default="Well", help="Population written for unlabeled files")
    verbosity = p.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Log per-file details")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    p = build_parser()
    ns = p.parse_args(list(argv) if argv is not None else None)
    if ns.separate and ns.output is None:
        p.error("--separate requires an OUTPUT file name")

    level = logging.DEBUG if ns.verbose else (logging.WARNING if ns.quiet else logging.INFO)
    logging.basicConfig(level=level, format="[%(levelname)s] %(name)s: %(message)s", stream=sys.stderr)

    try:
        catalog = scan_exports(ns.input)
    except FileNotFoundError as e:
        print(f"[error] {e}", file=sys.stderr)
        return 1

    if catalog.skipped and not ns.quiet:
        print(f"[warn] skipped {len(catalog.skipped)} file(s) that are not recognizable exports", file=sys.stderr)

    if ns.list:
        print(catalog.to_frame().to_string(index=False))
        return 0

    if not catalog.records:
        print(f"[error] did not find any harmony files in {catalog.root_dir}", file=sys.stderr)
        return 1

    cfg = CombineConfig(population_fallback=ns.population_fallback)
    try:
        if ns.separate:
            for path in combine_by_population(catalog.records, ns.output, cfg):
                print(f"[info] wrote {path}", file=sys.stderr)
        elif ns.output is not None:
            summary = combine_to_path(catalog.records, ns.output, cfg)
            print(f"[info] wrote {ns.output}: {summary.n_rows} row(s) from {summary.n_files} file(s)", file=sys.stderr)
        else:
            sink = sys.stdout.buffer
            StreamCombiner(cfg).combine(catalog.records, sink)
            sink.flush()
    except HeaderReconciliationError as e:
        print(f"[error] internal error while reconciling headers: {e}", file=sys.stderr)
        return 2
    except (HarmonyCombinerError, OSError) as e:
        print(f"[error] combining files: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
