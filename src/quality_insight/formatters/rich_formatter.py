"""Rich terminal formatter for Quality Insight."""

import io
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..models import AnalysisReport, Grade, Rating, Severity
from .base import BaseFormatter

_GRADE_STYLE = {
    Grade.A: "green bold",
    Grade.B: "cyan bold",
    Grade.C: "yellow bold",
    Grade.D: "red bold",
}

_SEVERITY_STYLE = {
    Severity.MINOR: "dim",
    Severity.MAJOR: "yellow",
    Severity.CRITICAL: "red",
    Severity.BLOCKER: "red bold",
}


def _grade_label(grade: Grade) -> str:
    style = _GRADE_STYLE[grade]
    return f"[{style}]{grade.value}[/{style}]"


class RichFormatter(BaseFormatter):
    """Rich terminal output: grade summary, metrics table and issue list."""

    def __init__(self, console: Optional[Console] = None, max_issues: int = 30):
        self.console = console or Console(stderr=True)
        self.max_issues = max_issues

    def render(self, report: AnalysisReport, source: str = "<stdin>") -> None:
        self._print(self.console, report, source)

    def format(self, report: AnalysisReport, source: str = "<stdin>") -> str:
        buffer = Console(file=io.StringIO(), record=True, width=110)
        self._print(buffer, report, source)
        return buffer.export_text()

    def _print(self, console: Console, report: AnalysisReport, source: str) -> None:
        console.print(self._summary_panel(report, source))
        console.print(self._metrics_table(report))
        if report.issues:
            console.print(self._issues_table(report))
        self._print_improvements(console, report)

    def _summary_panel(self, report: AnalysisReport, source: str) -> Panel:
        rows = []
        for name, rating in (
            ("Complexity", report.complexity),
            ("Maintainability", report.maintainability),
            ("Reliability", report.reliability),
        ):
            rows.append(self._rating_line(name, rating))
        debt = report.technical_debt
        rows.append(
            f"[bold]{'Technical debt':16s}[/bold] {_grade_label(debt.grade)}  "
            f"{debt.total_minutes} min ({debt.debt_ratio_percent:.1f}%)"
        )
        violations = report.violations
        rows.append(
            f"[bold]{'Violations':16s}[/bold] "
            f"[yellow]{violations.major} major[/yellow], [dim]{violations.minor} minor[/dim]"
        )
        return Panel(
            "\n".join(rows),
            title=f"[bold cyan]{escape(source)}[/bold cyan] [dim]({report.language})[/dim]",
            expand=False,
        )

    @staticmethod
    def _rating_line(name: str, rating: Rating) -> str:
        warning = " [red]![/red]" if rating.warning_flag else ""
        return (
            f"[bold]{name:16s}[/bold] {_grade_label(rating.grade)}{warning}  "
            f"{rating.score:5.1f}  {rating.description} [dim]- {escape(rating.reason)}[/dim]"
        )

    @staticmethod
    def _metrics_table(report: AnalysisReport) -> Table:
        m = report.metrics
        table = Table(title="Metrics", show_header=False, expand=False)
        table.add_column("Metric", style="bold")
        table.add_column("Value", justify="right")
        table.add_row("Lines (code / total)", f"{m.lines_of_code} / {m.total_lines}")
        table.add_row("Comment ratio", f"{m.comment_ratio:.0%}")
        table.add_row("Functions / classes", f"{m.function_count} / {m.class_count}")
        table.add_row("Longest function", f"{m.max_function_length} lines")
        table.add_row(
            "Cyclomatic complexity",
            f"{m.cyclomatic_complexity_raw} (adjusted {m.adjusted_complexity:.1f})",
        )
        table.add_row("Max nesting depth", str(m.max_nesting_depth))
        table.add_row("Duplication", f"{m.duplication_percent:.1f}%")
        table.add_row("Documentation coverage", f"{m.documentation_coverage_percent:.0f}%")
        return table

    def _issues_table(self, report: AnalysisReport) -> Table:
        table = Table(title=f"Issues ({len(report.issues)})", expand=False)
        table.add_column("Line", justify="right", style="dim")
        table.add_column("Severity")
        table.add_column("Category")
        table.add_column("Description")
        for issue in report.issues[:self.max_issues]:
            style = _SEVERITY_STYLE[issue.severity]
            table.add_row(
                str(issue.line) if issue.line else "-",
                f"[{style}]{issue.severity.value}[/{style}]",
                issue.category.value,
                escape(issue.description),
            )
        if len(report.issues) > self.max_issues:
            table.caption = f"{len(report.issues) - self.max_issues} more not shown"
        return table

    @staticmethod
    def _print_improvements(console: Console, report: AnalysisReport) -> None:
        suggestions = []
        for rating in (report.reliability, report.maintainability, report.complexity):
            for item in rating.improvements:
                if item not in suggestions:
                    suggestions.append(item)
        if not suggestions:
            return
        console.print("[bold]Suggested improvements:[/bold]")
        for item in suggestions:
            console.print(f"  - {escape(item)}")
