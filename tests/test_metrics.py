"""Tests for the metrics extractor."""

import pytest

from quality_insight.detectors import EMPTY_METRICS, extract_metrics


class TestLineCounts:
    """Lines of code and comment density."""

    def test_empty_input(self, prepare):
        source, _ = prepare("")
        assert extract_metrics(source) is EMPTY_METRICS

    def test_counts(self, prepare):
        source, _ = prepare("// header\nint a = 1;\n\nint b = 2; // note\n")
        metrics = extract_metrics(source)
        assert metrics.total_lines == 4
        assert metrics.lines_of_code == 2
        assert metrics.comment_lines == 2
        assert metrics.comment_ratio == pytest.approx(2 / 3)

    def test_no_functions_falls_back_to_loc(self, prepare):
        source, _ = prepare("a = 1\nb = 2\nc = 3\n")
        metrics = extract_metrics(source)
        assert metrics.function_count == 0
        assert metrics.average_function_length == 3.0
        assert metrics.max_function_length == 3


class TestFunctionDetection:
    """Function spans and parameters per language."""

    def test_javascript_functions(self, prepare):
        text = (
            "function add(a, b) {\n"
            "  return a + b;\n"
            "}\n"
            "\n"
            "function sub(a, b) {\n"
            "  return a - b;\n"
            "}\n"
        )
        source, _ = prepare(text, "javascript")
        metrics = extract_metrics(source)
        assert [(f.name, f.start_line, f.end_line) for f in metrics.functions] == [
            ("add", 1, 3),
            ("sub", 5, 7),
        ]
        assert metrics.functions[0].parameters == ("a", "b")
        # Untyped JavaScript parameters may be null or undefined.
        assert metrics.functions[0].nullable_parameters == ("a", "b")
        assert metrics.average_function_length == 3.0

    def test_control_statements_are_not_functions(self, prepare):
        source, _ = prepare("if (x) {\n}\nwhile (y) {\n}\n", "javascript")
        assert extract_metrics(source).function_count == 0

    def test_c_prototype_is_not_a_function(self, prepare):
        source, _ = prepare("int compute(int a);\n", "c")
        assert extract_metrics(source).function_count == 0

    def test_python_parameters(self, prepare):
        text = "def greet(name: str, title: Optional[str] = None, *args):\n    return name\n"
        source, _ = prepare(text, "python")
        fn = extract_metrics(source).functions[0]
        assert fn.name == "greet"
        assert (fn.start_line, fn.end_line) == (1, 2)
        assert fn.parameters == ("name", "title", "args")
        assert fn.nullable_parameters == ("title",)

    def test_python_skips_self(self, prepare):
        text = "class Box:\n    def size(self, unit):\n        return unit\n"
        source, _ = prepare(text, "python")
        metrics = extract_metrics(source)
        assert metrics.classes == (("Box", 1),)
        assert metrics.functions[0].parameters == ("unit",)

    def test_java_reference_parameters_are_nullable(self, prepare):
        text = "public int sum(int a, String label) {\n  return a;\n}\n"
        source, _ = prepare(text, "java")
        fn = extract_metrics(source).functions[0]
        assert fn.name == "sum"
        assert fn.parameters == ("a", "label")
        assert fn.nullable_parameters == ("label",)

    def test_ruby_def_end(self, prepare):
        text = "def hello(name)\n  if name\n    puts name\n  end\nend\n"
        source, _ = prepare(text, "ruby")
        fn = extract_metrics(source).functions[0]
        assert (fn.name, fn.start_line, fn.end_line) == ("hello", 1, 5)
