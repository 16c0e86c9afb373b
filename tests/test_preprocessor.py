"""Tests for lexical preprocessing."""

from quality_insight.scanning import LANGUAGES, preprocess


def _pre(text, language="generic"):
    return preprocess(text, LANGUAGES[language])


class TestLineStructure:
    """Line numbering and views."""

    def test_empty_input_has_no_lines(self):
        assert len(_pre("")) == 0

    def test_trailing_newline_does_not_add_a_line(self):
        source = _pre("a = 1\nb = 2\n")
        assert len(source) == 2
        assert source.line(2).raw == "b = 2"

    def test_crlf_is_normalized(self):
        source = _pre("a = 1\r\nb = 2")
        assert [ln.raw for ln in source.lines] == ["a = 1", "b = 2"]

    def test_tabs_expand_for_indent(self):
        source = _pre("\tvalue = 1")
        assert source.line(1).indent == 4

    def test_blank_line_flags(self):
        source = _pre("a = 1\n\n// note")
        assert source.line(2).is_blank
        assert source.line(3).is_comment_only
        assert not source.line(3).has_code

    def test_span_is_inclusive(self):
        source = _pre("a\nb\nc\nd")
        assert [ln.number for ln in source.span(2, 3)] == [2, 3]


class TestCommentsAndStrings:
    """Comments and string contents never reach the code view."""

    def test_line_comment_split(self):
        line = _pre('x = "a // b" // trailing note').line(1)
        assert line.code == 'x = ""'
        assert line.comment == "trailing note"

    def test_escaped_quote_stays_inside_string(self):
        line = _pre('s = "say \\"hi\\" // not a comment"').line(1)
        assert line.code == 's = ""'
        assert line.comment == ""

    def test_block_comment_spans_lines(self):
        source = _pre("int a = 1; /* start\n still */ int b = 2;", "java")
        assert source.line(1).code == "int a = 1;"
        assert source.line(1).comment == "start"
        assert source.line(2).comment == "still"
        assert source.line(2).stripped == "int b = 2;"

    def test_python_docstring_is_comment(self):
        source = _pre('def f():\n    """Doc text."""\n    return 1\n', "python")
        assert source.line(2).is_comment_only
        assert source.line(2).comment == "Doc text."

    def test_python_hash_comment(self):
        line = _pre("total = 0  # running sum", "python").line(1)
        assert line.stripped == "total = 0"
        assert line.comment == "running sum"

    def test_template_literal_spans_lines(self):
        source = _pre("const s = `line one\nif (x) {`;\nfoo();", "javascript")
        assert "if" not in source.line(2).code
        assert source.line(2).code == "`;"
        assert source.line(3).code == "foo();"

    def test_directive_is_code_not_comment(self):
        source = _pre("#include <stdio.h>\n# a real comment")
        assert source.line(1).stripped == "#include <stdio.h>"
        assert source.line(2).is_comment_only

    def test_keywords_in_comments_do_not_survive(self):
        line = _pre("call(); // if while for").line(1)
        assert "if" not in line.code
