"""Tests for nesting depth tracking."""

from quality_insight.detectors import extract_metrics, track_nesting
from quality_insight.scanning import BlockMap


class TestTrackNesting:
    """Whole-unit and per-function depth."""

    def test_empty(self):
        result = track_nesting(BlockMap(stacks=()))
        assert result.max_depth == 0
        assert result.deepest_line is None

    def test_function_depth(self, prepare):
        text = (
            "function f() {\n"
            "  if (a) {\n"
            "    for (;;) {\n"
            "      x();\n"
            "    }\n"
            "  }\n"
            "}\n"
        )
        source, blocks = prepare(text, "javascript")
        functions = extract_metrics(source).functions
        result = track_nesting(blocks, functions)
        assert result.max_depth == 2
        assert result.deepest_line == 3
        measured = result.for_function(functions[0])
        assert measured.depth == 2
        assert measured.deepest_line == 3

    def test_depth_is_relative_to_declaration(self, prepare):
        text = (
            "if (a) {\n"
            "  function g() {\n"
            "    if (b) {\n"
            "      y();\n"
            "    }\n"
            "  }\n"
            "}\n"
        )
        source, blocks = prepare(text, "javascript")
        functions = extract_metrics(source).functions
        result = track_nesting(blocks, functions)
        assert result.max_depth == 2
        assert result.for_function(functions[0]).depth == 1

    def test_python_depth(self, prepare):
        text = "for a in b:\n    while c:\n        if d:\n            pass\n"
        _, blocks = prepare(text, "python")
        result = track_nesting(blocks)
        assert result.max_depth == 3
        assert result.line_depths == (1, 2, 3, 3)
