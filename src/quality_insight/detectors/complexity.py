"""Complexity counter: cyclomatic complexity from decision tokens."""

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, Sequence

from ..logging_config import get_logger
from ..models import FunctionSpan
from ..scanning.preprocessor import PreprocessedSource, SourceLine
from .metrics import _compile_all

logger = get_logger(__name__)


@dataclass(frozen=True)
class ComplexityResult:
    """Whole-unit cyclomatic complexity plus one value per function name@line."""

    total: int = 1
    per_function: Dict[str, int] = field(default_factory=dict)

    def for_function(self, fn: FunctionSpan) -> int:
        return self.per_function.get(function_key(fn), 1)


def function_key(fn: FunctionSpan) -> str:
    return f"{fn.name}@{fn.start_line}"


def _decision_points(lines: Iterable[SourceLine], patterns: Sequence[re.Pattern]) -> int:
    count = 0
    for line in lines:
        if not line.has_code:
            continue
        for pattern in patterns:
            count += len(pattern.findall(line.code))
    return count


def count_complexity(
    source: PreprocessedSource, functions: Sequence[FunctionSpan] = ()
) -> ComplexityResult:
    """
    McCabe-style count: 1 + one per decision construct and logical operator.

    Tokens come from the language profile, so keywords inside comments and
    strings never count. The result is always at least 1.
    """
    patterns = _compile_all(tuple(source.profile.decision_patterns))
    total = 1 + _decision_points(source.lines, patterns)

    per_function = {
        function_key(fn): 1 + _decision_points(source.span(fn.start_line, fn.end_line), patterns)
        for fn in functions
    }

    logger.debug(f"complexity: total={total}, functions={len(per_function)}")
    return ComplexityResult(total=total, per_function=per_function)
