"""
Unit tests for schema_scanner.py

Exercises the per-line state machine directly as well as whole-file scans.
"""

import unittest

from extraction.diagnostics import DiagnosticKind
from extraction.models import ElementKind
from extraction.schema_scanner import (
    count_delimiters,
    finish_scan,
    initial_state,
    scan_line,
    scan_schema_source,
)


USER_PROTO = """syntax = "proto3";
package acme.api;

// A user record.
// Second line.
message User {
  string name = 1;
  string open_brace = 2 [json_name = "{"];
}

enum Status {
  UNKNOWN = 0;
}
"""


def _scan(text: str):
    return scan_schema_source(text, "protos/test.proto", "test.proto")


class TestCountDelimiters(unittest.TestCase):
    """Test comment- and string-aware delimiter counting."""

    def test_plain(self):
        self.assertEqual(count_delimiters("message A { enum B { } }"), (2, 2))

    def test_line_comment(self):
        self.assertEqual(count_delimiters("int32 a = 1; // }"), (0, 0))

    def test_block_comment_on_same_line(self):
        self.assertEqual(count_delimiters("/* { */ }"), (0, 1))

    def test_unterminated_block_comment_hides_rest_of_line(self):
        self.assertEqual(count_delimiters("} /* { {"), (0, 1))

    def test_double_quoted_string(self):
        self.assertEqual(count_delimiters('option x = "{"; }'), (0, 1))

    def test_single_quoted_string(self):
        self.assertEqual(count_delimiters("option x = '}'; {"), (1, 0))

    def test_escaped_quote_does_not_close_string(self):
        self.assertEqual(count_delimiters('x = "a\\"{" }'), (0, 1))


class TestScanLine(unittest.TestCase):
    """Test the pure per-line transition function."""

    def test_open_and_close(self):
        state = initial_state("a.proto", "a.proto")

        step = scan_line(state, "message A {", 1)
        self.assertIsNone(step.element)
        self.assertIsNone(step.diagnostic)
        self.assertTrue(step.state.in_block)
        self.assertEqual(step.state.brace_balance, 1)

        step = scan_line(step.state, "  int32 x = 1;", 2)
        self.assertTrue(step.state.in_block)
        self.assertEqual(step.state.brace_balance, 1)

        step = scan_line(step.state, "}", 3)
        self.assertFalse(step.state.in_block)
        self.assertEqual(step.state.brace_balance, 0)
        self.assertEqual(step.element.name, "A")
        self.assertEqual(step.element.end_line, 3)

    def test_state_is_not_mutated(self):
        state = initial_state("a.proto", "a.proto")
        scan_line(state, "// doc", 1)
        self.assertEqual(state.pending_comments, ())

    def test_comment_queue(self):
        state = initial_state("a.proto", "a.proto")
        state = scan_line(state, "// one", 1).state
        state = scan_line(state, "  //  two  ", 2).state
        self.assertEqual([c.text for c in state.pending_comments], ["one", "two"])

    def test_finish_scan_idle(self):
        self.assertIsNone(finish_scan(initial_state("a.proto", "a.proto")))

    def test_finish_scan_in_block(self):
        state = scan_line(initial_state("a.proto", "a.proto"), "enum E {", 5).state
        diagnostic = finish_scan(state)
        self.assertEqual(diagnostic.kind, DiagnosticKind.UNTERMINATED_BLOCK)
        self.assertIn("'E'", diagnostic.message)
        self.assertIn("line 5", diagnostic.message)


class TestScanSchemaSource(unittest.TestCase):
    """Test whole-file scanning."""

    def test_documented_message_and_enum(self):
        result = _scan(USER_PROTO)

        self.assertEqual(result.diagnostics, [])
        self.assertEqual([e.name for e in result.elements], ["User", "Status"])

        user, status = result.elements
        self.assertEqual(user.kind, ElementKind.MESSAGE)
        self.assertEqual(user.declaration_line, 6)
        self.assertEqual(user.start_line, 4)
        self.assertEqual(user.end_line, 9)
        self.assertEqual(user.documentation, "A user record.\nSecond line.")
        self.assertEqual(user.context.module, "acme.api")
        self.assertIsNone(user.signature)
        self.assertIsNone(user.context.enclosing_type_name)

        self.assertEqual(status.kind, ElementKind.ENUM)
        self.assertEqual(status.declaration_line, 11)
        self.assertEqual(status.start_line, 11)
        self.assertEqual(status.end_line, 13)
        self.assertIsNone(status.documentation)
        self.assertEqual(status.context.module, "acme.api")

    def test_snippet_is_verbatim_line_range(self):
        lines = USER_PROTO.split("\n")
        for element in _scan(USER_PROTO).elements:
            expected = "".join(
                f"{line}\n" for line in lines[element.start_line - 1:element.end_line]
            )
            self.assertEqual(element.context.snippet, expected)

    def test_single_line_block(self):
        result = _scan("message Foo { }\n")

        self.assertEqual(len(result.elements), 1)
        foo = result.elements[0]
        self.assertEqual(foo.name, "Foo")
        self.assertEqual(foo.kind, ElementKind.MESSAGE)
        self.assertEqual(foo.start_line, foo.end_line)
        self.assertEqual(foo.context.snippet, "message Foo { }\n")

    def test_string_braces_do_not_close_block(self):
        text = (
            "message Template {\n"
            '  string body = 1 [json_name = "}}"];\n'
            "  string other = 2;\n"
            "}\n"
        )
        result = _scan(text)
        self.assertEqual(len(result.elements), 1)
        self.assertEqual(result.elements[0].end_line, 4)

    def test_nested_blocks_form_one_element(self):
        text = (
            "message Outer {\n"
            "  message Inner {\n"
            "    int32 a = 1;\n"
            "  }\n"
            "  enum Kind { A = 0; }\n"
            "  Inner inner = 1;\n"
            "}\n"
        )
        result = _scan(text)
        self.assertEqual([e.name for e in result.elements], ["Outer"])
        self.assertEqual(result.elements[0].end_line, 7)

    def test_nested_block_on_opening_line(self):
        result = _scan("message A { message B { } }\nmessage C {}\n")
        self.assertEqual([e.name for e in result.elements], ["A", "C"])
        self.assertEqual(result.diagnostics, [])

    def test_block_comment_on_one_line_inside_block(self):
        text = "message A { /* } */\n  int32 x = 1;\n}\n"
        result = _scan(text)
        self.assertEqual(len(result.elements), 1)
        self.assertEqual(result.elements[0].end_line, 3)

    def test_over_closed_block_is_discarded_and_scan_continues(self):
        text = (
            "message Bad {\n"
            "  int32 a = 1;\n"
            "}}\n"
            "// Still found.\n"
            "message Good {\n"
            "}\n"
        )
        result = _scan(text)

        self.assertEqual(len(result.diagnostics), 1)
        diagnostic = result.diagnostics[0]
        self.assertEqual(diagnostic.kind, DiagnosticKind.UNBALANCED_BLOCK)
        self.assertEqual(diagnostic.line, 3)
        self.assertIn("'Bad'", diagnostic.message)
        self.assertIn("line 1", diagnostic.message)
        self.assertEqual(diagnostic.file_path, "protos/test.proto")

        self.assertEqual([e.name for e in result.elements], ["Good"])
        self.assertEqual(result.elements[0].documentation, "Still found.")
        self.assertEqual(result.elements[0].start_line, 4)

    def test_over_closed_single_line_block(self):
        result = _scan("message Bad { } }\nenum Fine { X = 0; }\n")
        self.assertEqual(len(result.diagnostics), 1)
        self.assertEqual([e.name for e in result.elements], ["Fine"])

    def test_unterminated_block(self):
        result = _scan("message Open {\n  int32 a = 1;\n")

        self.assertEqual(result.elements, [])
        self.assertEqual(len(result.diagnostics), 1)
        diagnostic = result.diagnostics[0]
        self.assertEqual(diagnostic.kind, DiagnosticKind.UNTERMINATED_BLOCK)
        self.assertIn("'Open'", diagnostic.message)
        self.assertIn("line 1", diagnostic.message)

    def test_comments_before_unrelated_statement_are_dropped(self):
        text = (
            "// Not documentation.\n"
            "option java_package = \"com.acme\";\n"
            "message A {\n"
            "}\n"
        )
        a = _scan(text).elements[0]
        self.assertIsNone(a.documentation)
        self.assertEqual(a.start_line, 3)

    def test_comment_run_must_touch_block(self):
        text = "// Header.\n\nmessage A {}\n"
        a = _scan(text).elements[0]
        self.assertIsNone(a.documentation)
        self.assertEqual(a.start_line, a.declaration_line)

    def test_first_package_wins(self):
        text = "package first;\npackage second;\nmessage A {}\n"
        self.assertEqual(_scan(text).elements[0].context.module, "first")

    def test_no_package(self):
        self.assertIsNone(_scan("enum E { A = 0; }\n").elements[0].context.module)

    def test_keyword_must_open_block_on_same_line(self):
        text = "message A\n{\n}\n"
        result = _scan(text)
        self.assertEqual(result.elements, [])
        self.assertEqual(result.diagnostics, [])

    def test_indented_block_start(self):
        result = _scan("  enum Color {\n    RED = 0;\n  }\n")
        self.assertEqual(result.elements[0].name, "Color")
        self.assertEqual(result.elements[0].end_line, 3)

    def test_empty_file(self):
        result = _scan("")
        self.assertEqual(result.elements, [])
        self.assertEqual(result.diagnostics, [])


if __name__ == "__main__":
    unittest.main()
