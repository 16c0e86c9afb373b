"""Tests for cyclomatic complexity counting."""

from quality_insight.detectors import count_complexity, extract_metrics
from quality_insight.models import FunctionSpan


class TestCountComplexity:
    """Decision tokens per language."""

    def test_empty_is_one(self, prepare):
        source, _ = prepare("")
        assert count_complexity(source).total == 1

    def test_branches_and_logical_operators(self, prepare):
        source, _ = prepare("if (a && b) {\n} else if (c || d) {\n}\n")
        assert count_complexity(source).total == 5

    def test_comments_and_strings_ignored(self, prepare):
        source, _ = prepare('x = "if while for"; // if for\n')
        assert count_complexity(source).total == 1

    def test_python_keywords(self, prepare):
        text = (
            "def f(a):\n"
            "    if a and b:\n"
            "        return 1\n"
            "    elif c or d:\n"
            "        return 2\n"
            "    for x in y:\n"
            "        pass\n"
        )
        source, _ = prepare(text, "python")
        functions = extract_metrics(source).functions
        result = count_complexity(source, functions)
        assert result.total == 6
        assert result.per_function == {"f@1": 6}

    def test_per_function_values(self, prepare):
        text = "function a() {\n  if (x) { y(); }\n}\nfunction b() {\n  return 1;\n}\n"
        source, _ = prepare(text, "javascript")
        functions = extract_metrics(source).functions
        result = count_complexity(source, functions)
        assert result.total == 2
        assert result.per_function == {"a@1": 2, "b@4": 1}

    def test_unknown_function_defaults_to_one(self, prepare):
        source, _ = prepare("x = 1\n")
        result = count_complexity(source)
        assert result.for_function(FunctionSpan("ghost", 1, 1)) == 1
