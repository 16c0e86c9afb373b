"""Tests for the block map."""


class TestBraceBlocks:
    """Brace languages."""

    def test_nested_control_blocks(self, prepare):
        _, blocks = prepare("if (a) {\n  while (b) {\n    x();\n  }\n}\n")
        assert blocks.kinds_at(1) == ("if",)
        assert blocks.kinds_at(3) == ("if", "loop")
        assert blocks.depth_at(3) == 2

    def test_function_braces_do_not_count(self, prepare):
        _, blocks = prepare("function f() {\n  x();\n}\n")
        assert blocks.kinds_at(2) == ("other",)
        assert blocks.depth_at(2) == 0

    def test_else_is_conditional(self, prepare):
        _, blocks = prepare("if (a) {\n  x();\n} else {\n  y();\n}\n")
        assert blocks.kinds_at(4) == ("else",)
        assert blocks.in_conditional(4)

    def test_try_and_catch_are_error_handling(self, prepare):
        _, blocks = prepare("try {\n  risky();\n} catch (e) {\n  handle(e);\n}\nafter();\n")
        assert blocks.in_error_handling(2)
        assert blocks.in_error_handling(4)
        assert not blocks.in_error_handling(6)

    def test_semicolons_inside_for_header(self, prepare):
        _, blocks = prepare("for (i = 0; i < n; i++) {\n  x();\n}\n")
        assert blocks.kinds_at(2) == ("loop",)

    def test_out_of_range_line(self, prepare):
        _, blocks = prepare("x();\n")
        assert blocks.kinds_at(99) == ()
        assert blocks.depth_at(0) == 0


class TestIndentBlocks:
    """Python uses indentation."""

    def test_python_nesting(self, prepare):
        text = (
            "def f():\n"
            "    if a:\n"
            "        for x in y:\n"
            "            pass\n"
            "    return 1\n"
        )
        _, blocks = prepare(text, "python")
        assert blocks.kinds_at(4) == ("other", "if", "loop")
        assert blocks.depth_at(4) == 2
        assert blocks.kinds_at(5) == ("other",)

    def test_try_except(self, prepare):
        text = "try:\n    risky()\nexcept ValueError:\n    handle()\n"
        _, blocks = prepare(text, "python")
        assert blocks.in_error_handling(2)
        assert blocks.in_error_handling(4)


class TestKeywordBlocks:
    """Ruby closes blocks with ``end``."""

    def test_ruby_nesting(self, prepare):
        text = "def run\n  if ready\n    go\n  end\nend\n"
        _, blocks = prepare(text, "ruby")
        assert blocks.kinds_at(3) == ("other", "if")
        assert blocks.depth_at(3) == 1
        assert blocks.kinds_at(5) == ("other",)
