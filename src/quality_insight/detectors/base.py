"""Helpers shared by the detectors."""

import re
from typing import Optional, Sequence, Tuple

from ..models import FunctionSpan, Issue, IssueCategory, Severity
from ..scanning.blocks import BlockMap
from ..scoring.debt import remediation_minutes

_TEST_NAME = re.compile(r"^(?:test|Test)|_test$|Test$|_spec$|Spec$")
_UTIL_NAME = re.compile(r"util|helper", re.IGNORECASE)


def new_issue(
    category: IssueCategory,
    severity: Severity,
    description: str,
    line: Optional[int] = None,
    rule: str = "",
    context: Tuple[str, ...] = (),
    snippet: str = "",
) -> Issue:
    """Build an Issue with its remediation estimate filled in."""
    return Issue(
        category=category,
        severity=severity,
        description=description,
        line=line,
        remediation_minutes=remediation_minutes(category, severity),
        rule=rule,
        context=context,
        snippet=snippet.strip()[:200],
    )


def enclosing_function(functions: Sequence[FunctionSpan], line: int) -> Optional[FunctionSpan]:
    """Innermost function containing ``line``."""
    best: Optional[FunctionSpan] = None
    for fn in functions:
        if fn.contains(line) and (best is None or fn.length < best.length):
            best = fn
    return best


def context_tags(
    line: int,
    block_map: Optional[BlockMap],
    functions: Sequence[FunctionSpan],
) -> Tuple[str, ...]:
    """Tags describing the code around ``line`` (sorted, deduplicated)."""
    tags = set()
    if block_map is not None:
        if block_map.in_error_handling(line):
            tags.add("try")
        if block_map.in_conditional(line):
            tags.add("conditional")
    fn = enclosing_function(functions, line)
    if fn is not None:
        if _TEST_NAME.search(fn.name):
            tags.add("test")
        if _UTIL_NAME.search(fn.name):
            tags.add("util")
    return tuple(sorted(tags))
