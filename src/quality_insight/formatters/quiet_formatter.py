"""Quiet formatter: one line of grades."""

from ..models import AnalysisReport
from .base import BaseFormatter


class QuietFormatter(BaseFormatter):
    """Render just the three grades and the debt ratio."""

    def render(self, report: AnalysisReport, source: str = "<stdin>") -> None:
        print(self.format(report, source))

    def format(self, report: AnalysisReport, source: str = "<stdin>") -> str:
        return (
            f"{source}: complexity={report.complexity.grade.value} "
            f"maintainability={report.maintainability.grade.value} "
            f"reliability={report.reliability.grade.value} "
            f"debt={report.technical_debt.debt_ratio_percent:.1f}%"
        )
