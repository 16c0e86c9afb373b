"""Documentation analyzer: share of declarations preceded by a comment."""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from ..models import FunctionSpan
from ..scanning.preprocessor import PreprocessedSource, SourceLine

DOCSTRING_PREFIXES = ('"""', "'''", 'r"""', "r'''", 'u"""', "u'''")
_ANNOTATION_PREFIXES = ("@", "#[", "[")
# Lines scanned after a declaration when looking for a docstring.
_DOCSTRING_SEARCH = 12


@dataclass(frozen=True)
class DocumentationResult:
    coverage_percent: float
    declarations: int = 0
    documented: int = 0
    undocumented: Tuple[Tuple[str, int], ...] = ()


def analyze_documentation(
    source: PreprocessedSource,
    functions: Sequence[FunctionSpan],
    classes: Sequence[Tuple[str, int]],
    lookback: int = 3,
    neutral: float = 50.0,
) -> DocumentationResult:
    """Coverage of functions and classes by leading comments or docstrings.

    With no declarations at all the coverage is ``neutral`` rather than 0,
    so a snippet of plain statements is not punished for missing docs.
    """
    declarations = {fn.start_line: fn.name for fn in functions}
    for name, line in classes:
        declarations.setdefault(line, name)

    if not declarations:
        return DocumentationResult(coverage_percent=neutral)

    documented = 0
    undocumented: List[Tuple[str, int]] = []
    for line, name in sorted(declarations.items()):
        if _has_leading_comment(source, line, lookback) or (
            source.profile.docstrings and _has_docstring(source, line)
        ):
            documented += 1
        else:
            undocumented.append((name, line))

    return DocumentationResult(
        coverage_percent=documented / len(declarations) * 100.0,
        declarations=len(declarations),
        documented=documented,
        undocumented=tuple(undocumented),
    )


def _has_leading_comment(source: PreprocessedSource, line: int, lookback: int) -> bool:
    remaining = lookback
    number = line - 1
    while number >= 1 and remaining > 0:
        above: SourceLine = source.line(number)
        number -= 1
        if above.stripped.startswith(_ANNOTATION_PREFIXES):
            continue
        if above.is_comment_only:
            return True
        if above.has_code:
            return False
        remaining -= 1
    return False


def _has_docstring(source: PreprocessedSource, line: int) -> bool:
    balance = 0
    signature_done = False
    for current in source.span(line, line + _DOCSTRING_SEARCH):
        if not signature_done:
            balance += current.code.count("(") - current.code.count(")")
            if balance <= 0 and current.stripped.endswith(":"):
                signature_done = True
            continue
        if current.is_blank:
            continue
        return current.is_comment_only and current.raw.lstrip().startswith(DOCSTRING_PREFIXES)
    return False
