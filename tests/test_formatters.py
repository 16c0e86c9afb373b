"""Tests for the output formatters."""

import io
import json

import pytest
from rich.console import Console

from quality_insight import analyze
from quality_insight.formatters import JsonFormatter, QuietFormatter, RichFormatter, get_formatter


@pytest.fixture
def clean_report():
    return analyze("")


@pytest.fixture
def risky_report(unguarded_division):
    return analyze(unguarded_division)


class TestJsonFormatter:
    def test_structure(self, risky_report):
        data = json.loads(JsonFormatter().format(risky_report, "calc.txt"))
        assert data["source"] == "calc.txt"
        assert data["reliability"]["grade"] == "D"
        assert data["violations"]["major"] == 1
        assert data["issues"][0]["rule"] == "unchecked-division"

    def test_render_prints(self, clean_report, capsys):
        JsonFormatter().render(clean_report)
        assert json.loads(capsys.readouterr().out)["source"] == "<stdin>"


class TestQuietFormatter:
    def test_one_line(self, clean_report):
        assert QuietFormatter().format(clean_report, "app.py") == (
            "app.py: complexity=A maintainability=A reliability=A debt=0.0%"
        )


class TestRichFormatter:
    """Text export and console rendering."""

    def test_format_contains_sections(self, risky_report):
        text = RichFormatter().format(risky_report, "calc.txt")
        assert "calc.txt" in text
        assert "Reliability" in text
        assert "Issues (1)" in text
        assert "Suggested improvements:" in text

    def test_clean_report_has_no_issue_table(self, clean_report):
        text = RichFormatter().format(clean_report)
        assert "Issues (" not in text
        assert "Suggested improvements:" not in text

    def test_render_to_console(self, risky_report):
        buffer = io.StringIO()
        RichFormatter(console=Console(file=buffer, width=120)).render(risky_report, "[calc].txt")
        assert "[calc].txt" in buffer.getvalue()

    def test_issue_limit(self, risky_report):
        text = RichFormatter(max_issues=0).format(risky_report)
        assert "1 more not shown" in text


class TestGetFormatter:
    def test_known(self):
        assert isinstance(get_formatter("json"), JsonFormatter)
        assert isinstance(get_formatter("quiet"), QuietFormatter)

    def test_unknown(self):
        with pytest.raises(ValueError):
            get_formatter("xml")
