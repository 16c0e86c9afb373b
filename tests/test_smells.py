"""Tests for maintainability smells."""

import pytest

from quality_insight.detectors import (
    analyze_documentation,
    count_complexity,
    detect_duplication,
    detect_smells,
    extract_metrics,
)
from quality_insight.detectors.smells import (
    RULE_COMPLEX_FUNCTION,
    RULE_DEBUG_OUTPUT,
    RULE_DUPLICATE,
    RULE_EMPTY_CATCH,
    RULE_LONG_FUNCTION,
    RULE_MAGIC_NUMBER,
    RULE_MISSING_DOCS,
    RULE_MIXED_NAMING,
    RULE_PARAMETERS,
    RULE_SHORT_NAME,
    RULE_TODO,
)
from quality_insight.models import IssueCategory, Severity


@pytest.fixture
def smells(prepare):
    """smells(text, language, rule=None) -> issues, optionally filtered by rule."""

    def _smells(text, language="generic", rule=None):
        source, blocks = prepare(text, language)
        metrics = extract_metrics(source)
        issues = detect_smells(
            source,
            metrics.functions,
            metrics.classes,
            count_complexity(source, metrics.functions),
            detect_duplication(source),
            analyze_documentation(source, metrics.functions, metrics.classes),
            block_map=blocks,
        )
        if rule is not None:
            issues = [i for i in issues if i.rule == rule]
        return issues

    return _smells


class TestFunctionSize:
    """Length, parameter count and per-function complexity."""

    def test_long_function_major(self, smells, deeply_nested_function):
        issues = smells(deeply_nested_function, "javascript", rule=RULE_LONG_FUNCTION)
        assert [i.description for i in issues] == ["Function 'process' is too long (300 lines)"]
        assert issues[0].severity is Severity.MAJOR
        assert issues[0].category is IssueCategory.STRUCTURE

    def test_long_function_minor(self, smells):
        body = "".join(f"  step{i}();\n" for i in range(38))
        text = "function medium() {\n" + body + "}\n"
        issues = smells(text, "javascript", rule=RULE_LONG_FUNCTION)
        assert len(issues) == 1
        assert issues[0].severity is Severity.MINOR

    def test_too_many_parameters(self, smells):
        text = "function build(a, b, c, d, e, f) {\n  return a;\n}\n"
        issues = smells(text, "javascript", rule=RULE_PARAMETERS)
        assert [i.description for i in issues] == ["Function 'build' has too many parameters (6)"]

    def test_complex_function(self, smells):
        body = "".join(f"  if (flag{i}) {{ run{i}(); }}\n" for i in range(16))
        text = "function decide(v) {\n" + body + "}\n"
        issues = smells(text, "javascript", rule=RULE_COMPLEX_FUNCTION)
        assert [i.description for i in issues] == ["Function 'decide' is too complex (complexity 17)"]
        assert issues[0].severity is Severity.MINOR


class TestReadability:
    """Magic numbers, debug output and TODO markers."""

    def test_magic_number(self, smells):
        issues = smells("timeout = delay * 3600\n", rule=RULE_MAGIC_NUMBER)
        assert [i.description for i in issues] == ["Magic number 3600 should be a named constant"]
        assert issues[0].category is IssueCategory.READABILITY

    def test_decimal_magic_number(self, smells):
        issues = smells("rate = base * 0.75\n", rule=RULE_MAGIC_NUMBER)
        assert [i.description for i in issues] == ["Magic number 0.75 should be a named constant"]

    def test_ordinary_numbers_and_constants(self, smells):
        text = "x = y * 2\nMAX_RETRIES = 3600\nconst LIMIT = 42;\n"
        assert smells(text, rule=RULE_MAGIC_NUMBER) == []

    def test_digits_inside_identifiers(self, smells):
        assert smells("value2 = item404\n", rule=RULE_MAGIC_NUMBER) == []

    def test_debug_output(self, smells):
        issues = smells("console.log(value);\n", "javascript", rule=RULE_DEBUG_OUTPUT)
        assert [i.description for i in issues] == ["Debug output statement left in code"]

    def test_todo_comment(self, smells):
        text = "// TODO: handle errors\nrun();\n// FIXME later\n"
        issues = smells(text, rule=RULE_TODO)
        assert [i.description for i in issues] == [
            "TODO comment marks unfinished work",
            "FIXME comment marks unfinished work",
        ]
        assert [i.line for i in issues] == [1, 3]


class TestNaming:
    """Short and inconsistent names."""

    def test_short_variable(self, smells):
        issues = smells("int q = compute();\nint i = 0;\n", "java", rule=RULE_SHORT_NAME)
        assert [i.description for i in issues] == ["Variable name 'q' is not descriptive"]
        assert issues[0].category is IssueCategory.NAMING

    def test_python_short_assignment(self, smells):
        issues = smells("q = 1\nq = 2\nfor x in items:\n    pass\n", "python", rule=RULE_SHORT_NAME)
        assert len(issues) == 1

    def test_mixed_naming(self, smells):
        text = (
            "function getValue() {\n}\n"
            "function set_value() {\n}\n"
            "function loadData() {\n}\n"
        )
        issues = smells(text, "javascript", rule=RULE_MIXED_NAMING)
        assert [i.description for i in issues] == ["Function names mix camelCase and snake_case"]
        assert issues[0].line == 3

    def test_consistent_naming(self, smells):
        text = "function getValue() {\n}\nfunction loadData() {\n}\n"
        assert smells(text, "javascript", rule=RULE_MIXED_NAMING) == []


class TestEmptyCatch:
    """Handlers that swallow errors."""

    def test_brace_catch(self, smells):
        text = "try {\n  run();\n} catch (e) {\n}\n"
        issues = smells(text, "javascript", rule=RULE_EMPTY_CATCH)
        assert [i.line for i in issues] == [3]
        assert issues[0].category is IssueCategory.EXCEPTION
        assert issues[0].severity is Severity.MAJOR

    def test_one_line_catch(self, smells):
        issues = smells("try { run(); } catch (e) {}\n", "javascript", rule=RULE_EMPTY_CATCH)
        assert len(issues) == 1

    def test_python_pass(self, smells):
        text = "try:\n    run()\nexcept ValueError:\n    pass\n"
        assert len(smells(text, "python", rule=RULE_EMPTY_CATCH)) == 1

    def test_python_handled(self, smells):
        text = "try:\n    run()\nexcept ValueError as err:\n    log(err)\n"
        assert smells(text, "python", rule=RULE_EMPTY_CATCH) == []

    def test_ruby_rescue(self, smells):
        text = "begin\n  run\nrescue\nend\n"
        assert len(smells(text, "ruby", rule=RULE_EMPTY_CATCH)) == 1


class TestDocsAndDuplicates:
    """Missing documentation and duplicated blocks."""

    def test_long_undocumented_function(self, smells, deeply_nested_function):
        issues = smells(deeply_nested_function, "javascript", rule=RULE_MISSING_DOCS)
        assert [i.description for i in issues] == ["Function 'process' lacks documentation"]

    def test_short_function_needs_no_docs(self, smells):
        text = "function add(a, b) {\n  return a + b;\n}\n"
        assert smells(text, "javascript", rule=RULE_MISSING_DOCS) == []

    def test_undocumented_class(self, smells):
        issues = smells("class Widget {\n}\n", "javascript", rule=RULE_MISSING_DOCS)
        assert [i.description for i in issues] == ["Class 'Widget' lacks documentation"]

    def test_duplicate_block(self, smells, duplicated_block):
        issues = smells(duplicated_block, rule=RULE_DUPLICATE)
        assert [i.description for i in issues] == ["Duplicated block of 10 lines repeats line 1"]
        assert issues[0].line == 11
        assert issues[0].severity is Severity.MAJOR
