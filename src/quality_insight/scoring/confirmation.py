"""Confirmation of critical issues.

Detection reports candidates; this step decides which critical issues are
certain enough to override the reliability grade.
"""

from typing import Iterable, List

from ..models import Issue

CRASH_KEYWORDS = (
    "null pointer",
    "divide by zero",
    "division by zero",
    "array index out of bounds",
    "buffer overflow",
    "memory leak",
    "segmentation fault",
    "stack overflow",
    "infinite recursion",
    "deadlock",
    "race condition",
    "crash",
    "fatal error",
)

# Rules that only fire when no guard was found on any path to the line.
STRUCTURAL_RULES = frozenset({"unchecked-division", "unchecked-index", "unguarded-dereference"})


def is_confirmed_critical(issue: Issue) -> bool:
    """True for a critical/blocker issue that names a crash or is structurally unguarded."""
    if not issue.severity.is_critical:
        return False
    description = issue.description.lower()
    if any(keyword in description for keyword in CRASH_KEYWORDS):
        return True
    return issue.rule in STRUCTURAL_RULES and "try" not in issue.context


def confirmed_criticals(issues: Iterable[Issue]) -> List[Issue]:
    return [issue for issue in issues if is_confirmed_critical(issue)]
