import unittest
import tempfile
from pathlib import Path

from harmony_combiner.ingest.interner import StringInterner
from harmony_combiner.ingest.metadata import MetadataScanner, ScannerConfig
from harmony_combiner.models.records import Population


PREAMBLE = [
    "Database Name\td1",
    "Database Location\tloc1",
    "Evaluation Signature\tSig1",
    "Plate Name\tP1",
    "Measurement\tMeasurement 7",
    "Evaluation\tEvaluation3",
]


class TestMetadataScanner(unittest.TestCase):
    def _write(self, root: Path, name: str, lines) -> Path:
        p = root / name
        p.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return p

    def test_full_preamble(self):
        with tempfile.TemporaryDirectory() as d:
            p = self._write(Path(d), "PlateResults.txt", PREAMBLE + ["Population\tNuclei", "", "[Data]", "Name\tScore", "Ann\t1"])
            rec = MetadataScanner().scan(p)
            self.assertIsNotNone(rec)
            self.assertEqual(rec.path, p)
            self.assertEqual(rec.database_name, "d1")
            self.assertEqual(rec.database_location, "loc1")
            self.assertEqual(rec.evaluation_signature, "Sig1")
            self.assertEqual(rec.plate_name, "P1")
            self.assertEqual(rec.measurement, 7)
            self.assertEqual(rec.evaluation, 3)
            self.assertEqual(rec.population, Population.named("Nuclei"))
            self.assertEqual(rec.headers, ("Name", "Score"))
            # lines 0..6 preamble, 7 blank, 8 [Data], 9 header -> data on line 10
            self.assertEqual(rec.data_start, 10)

    def test_population_absent_is_unlabeled(self):
        with tempfile.TemporaryDirectory() as d:
            p = self._write(Path(d), "PlateResults.txt", PREAMBLE + ["[Data]", "Name", "Ann"])
            rec = MetadataScanner().scan(p)
            self.assertFalse(rec.population.is_named)
            self.assertEqual(rec.population.display("Well"), "Well")
            self.assertEqual(rec.common_fields(), ("P1", "7", "3", "Sig1", "Well"))

    def test_database_link_alias(self):
        with tempfile.TemporaryDirectory() as d:
            lines = [ln.replace("Database Location", "Database Link") for ln in PREAMBLE]
            p = self._write(Path(d), "PlateResults.txt", lines + ["[Data]", "Name"])
            rec = MetadataScanner().scan(p)
            self.assertEqual(rec.database_location, "loc1")

    def test_blank_lines_after_sentinel_and_unknown_keys(self):
        with tempfile.TemporaryDirectory() as d:
            lines = ["Operator\tsomeone", ""] + PREAMBLE + ["", "[Data]", "", "", "A\tB\tC", "1\t2\t3"]
            p = self._write(Path(d), "PlateResults.txt", lines)
            rec = MetadataScanner().scan(p)
            self.assertEqual(rec.headers, ("A", "B", "C"))
            self.assertEqual(rec.data_start, 13)

    def test_missing_required_key_excludes_file(self):
        with tempfile.TemporaryDirectory() as d:
            for key in ("Database Name", "Database Location", "Evaluation Signature", "Plate Name", "Measurement", "Evaluation"):
                lines = [ln for ln in PREAMBLE if not ln.startswith(key + "\t")]
                p = self._write(Path(d), "PlateResults.txt", lines + ["[Data]", "Name", "Ann"])
                self.assertIsNone(MetadataScanner().scan(p), key)

    def test_missing_sentinel_or_header_excludes_file(self):
        with tempfile.TemporaryDirectory() as d:
            root = Path(d)
            no_sentinel = self._write(root, "a.txt", PREAMBLE)
            no_header = self._write(root, "b.txt", PREAMBLE + ["[Data]", "", ""])
            scanner = MetadataScanner()
            self.assertIsNone(scanner.scan(no_sentinel))
            self.assertIsNone(scanner.scan(no_header))

    def test_preamble_line_without_tab_excludes_file(self):
        with tempfile.TemporaryDirectory() as d:
            p = self._write(Path(d), "PlateResults.txt", PREAMBLE + ["Some free text", "[Data]", "Name"])
            self.assertIsNone(MetadataScanner().scan(p))

    def test_unparsable_numbers_exclude_file(self):
        with tempfile.TemporaryDirectory() as d:
            root = Path(d)
            bad_meas = [ln if not ln.startswith("Measurement") else "Measurement\tMeasurement" for ln in PREAMBLE]
            bad_eval = [ln if not ln.startswith("Evaluation\t") else "Evaluation\tEval" for ln in PREAMBLE]
            neg_meas = [ln if not ln.startswith("Measurement") else "Measurement\tMeasurement -1" for ln in PREAMBLE]
            scanner = MetadataScanner()
            for i, lines in enumerate((bad_meas, bad_eval, neg_meas)):
                p = self._write(root, f"f{i}.txt", lines + ["[Data]", "Name"])
                self.assertIsNone(scanner.scan(p))

    def test_evaluation_drops_fixed_width_label(self):
        with tempfile.TemporaryDirectory() as d:
            root = Path(d)
            scanner = MetadataScanner()
            for value, expected in (("Evaluation12", 12), ("EvaluationXX2", 2), ("Evaluatio 45", 45)):
                lines = [ln if not ln.startswith("Evaluation\t") else f"Evaluation\t{value}" for ln in PREAMBLE]
                p = self._write(root, "PlateResults.txt", lines + ["[Data]", "Name"])
                self.assertEqual(scanner.scan(p).evaluation, expected, value)

    def test_custom_prefix_length(self):
        with tempfile.TemporaryDirectory() as d:
            lines = [ln if not ln.startswith("Evaluation\t") else "Evaluation\tEv5" for ln in PREAMBLE]
            p = self._write(Path(d), "PlateResults.txt", lines + ["[Data]", "Name"])
            self.assertIsNone(MetadataScanner().scan(p))
            rec = MetadataScanner(config=ScannerConfig(evaluation_prefix_len=2)).scan(p)
            self.assertEqual(rec.evaluation, 5)

    def test_unreadable_files_are_excluded(self):
        with tempfile.TemporaryDirectory() as d:
            root = Path(d)
            scanner = MetadataScanner()
            self.assertIsNone(scanner.scan(root / "missing.txt"))
            latin = root / "latin.txt"
            latin.write_bytes(("\n".join(PREAMBLE) + "\n[Data]\nCaf\xe9\n").encode("latin-1"))
            self.assertIsNone(scanner.scan(latin))

    def test_interned_strings_shared_across_files(self):
        with tempfile.TemporaryDirectory() as d:
            root = Path(d)
            a = self._write(root, "a.txt", PREAMBLE + ["Population\tNuclei", "[Data]", "Name\tScore"])
            b = self._write(root, "b.txt", PREAMBLE + ["Population\tNuclei", "[Data]", "Score\tName"])
            scanner = MetadataScanner(StringInterner())
            ra, rb = scanner.scan_many([a, b, root / "missing.txt"])
            self.assertIs(ra.database_name, rb.database_name)
            self.assertIs(ra.database_location, rb.database_location)
            self.assertIs(ra.population.label, rb.population.label)
            self.assertIs(ra.headers[0], rb.headers[1])
            self.assertIs(ra.headers[1], rb.headers[0])


if __name__ == "__main__":
    unittest.main()
