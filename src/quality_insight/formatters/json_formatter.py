"""JSON formatter for Quality Insight."""

import json
from typing import Any, Dict, Optional

from ..models import AnalysisReport
from .base import BaseFormatter


class JsonFormatter(BaseFormatter):
    """Render the report as JSON.

    ``extra`` entries (e.g. reviewer feedback) are merged into the top-level object.
    """

    def __init__(self, extra: Optional[Dict[str, Any]] = None):
        self.extra = dict(extra or {})

    def render(self, report: AnalysisReport, source: str = "<stdin>") -> None:
        print(self.format(report, source))

    def format(self, report: AnalysisReport, source: str = "<stdin>") -> str:
        data = {"source": source, **report.to_dict(), **self.extra}
        return json.dumps(data, indent=2)
