"""Tests for run artifact writers."""

import json
import tempfile
import unittest
from pathlib import Path

from core.run_artifacts import write_diagnostics_log, write_elements_json, write_run_report


class TestRunArtifacts(unittest.TestCase):
    def test_write_run_report(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_run_report(
                report={"status": "success", "value": 1},
                run_id="run-123",
                output_dir=tmpdir,
            )
            self.assertTrue(Path(path).is_file())
            payload = json.loads(Path(path).read_text(encoding="utf-8"))
            self.assertEqual(payload["run_id"], "run-123")
            self.assertEqual(payload["status"], "success")
            self.assertEqual(payload["value"], 1)
            self.assertIn("timestamp_utc", payload)

    def test_write_elements_json(self) -> None:
        elements = [{"name": "add", "kind": "Method"}, {"name": "Größe", "kind": "Enum"}]
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "nested" / "output.json"
            count = write_elements_json(elements, str(path))
            text = path.read_text(encoding="utf-8")

        self.assertEqual(count, 2)
        self.assertTrue(text.endswith("\n"))
        self.assertIn("Größe", text)
        self.assertEqual(json.loads(text), elements)

    def test_write_empty_elements_json(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "output.json"
            self.assertEqual(write_elements_json([], str(path)), 0)
            self.assertEqual(json.loads(path.read_text(encoding="utf-8")), [])

    def test_unserializable_element_leaves_previous_output(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "output.json"
            path.write_text("[]\n", encoding="utf-8")
            with self.assertRaises(TypeError):
                write_elements_json([{"bad": object()}], str(path))
            self.assertEqual(path.read_text(encoding="utf-8"), "[]\n")

    def test_write_diagnostics_log(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "errors.log"
            count = write_diagnostics_log(["ERROR: one: a", "ERROR: two: b\n"], str(path))
            lines = path.read_text(encoding="utf-8").splitlines()

        self.assertEqual(count, 2)
        self.assertEqual(lines, ["ERROR: one: a", "ERROR: two: b"])


if __name__ == "__main__":
    unittest.main()
