"""Tests for documentation coverage."""

from quality_insight.detectors import analyze_documentation, extract_metrics


def _coverage(prepare, text, language="generic"):
    source, _ = prepare(text, language)
    metrics = extract_metrics(source)
    return analyze_documentation(source, metrics.functions, metrics.classes)


class TestDocumentation:
    """Leading comments and docstrings."""

    def test_no_declarations_is_neutral(self, prepare):
        result = _coverage(prepare, "x = 1\n")
        assert result.coverage_percent == 50.0
        assert result.declarations == 0

    def test_leading_comment(self, prepare):
        text = (
            "// Adds numbers\n"
            "function add(a, b) {\n"
            "  return a + b;\n"
            "}\n"
            "\n"
            "function sub(a, b) {\n"
            "  return a - b;\n"
            "}\n"
        )
        result = _coverage(prepare, text, "javascript")
        assert result.coverage_percent == 50.0
        assert result.undocumented == (("sub", 6),)

    def test_python_docstring(self, prepare, guarded_python):
        result = _coverage(prepare, guarded_python, "python")
        assert result.coverage_percent == 100.0

    def test_annotations_are_skipped(self, prepare):
        text = "/** Runs the job. */\n@Override\npublic void run() {\n}\n"
        result = _coverage(prepare, text, "java")
        assert result.declarations == 1
        assert result.coverage_percent == 100.0

    def test_undocumented_class(self, prepare):
        result = _coverage(prepare, "class Widget {\n}\n", "javascript")
        assert result.coverage_percent == 0.0
        assert result.undocumented == (("Widget", 1),)
