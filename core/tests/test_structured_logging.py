"""Tests for structured logging context helpers."""

import logging
import unittest

from core.structured_logging import (
    _RunContextFilter,
    get_phase,
    get_run_id,
    phase_scope,
    set_run_id,
)


class TestStructuredLogging(unittest.TestCase):
    def test_set_run_id_explicit(self) -> None:
        self.assertEqual(set_run_id("run-abc"), "run-abc")
        self.assertEqual(get_run_id(), "run-abc")

    def test_set_run_id_generated(self) -> None:
        value = set_run_id()
        self.assertTrue(value)
        self.assertEqual(get_run_id(), value)

    def test_phase_scope_restores_previous(self) -> None:
        before = get_phase()
        with phase_scope("extract"):
            self.assertEqual(get_phase(), "extract")
            with phase_scope("write"):
                self.assertEqual(get_phase(), "write")
            self.assertEqual(get_phase(), "extract")
        self.assertEqual(get_phase(), before)

    def test_filter_injects_context(self) -> None:
        set_run_id("run-xyz")
        record = logging.LogRecord("t", logging.INFO, __file__, 1, "msg", None, None)
        with phase_scope("discover"):
            self.assertTrue(_RunContextFilter().filter(record))
        self.assertEqual(record.run_id, "run-xyz")
        self.assertEqual(record.phase, "discover")


if __name__ == "__main__":
    unittest.main()
