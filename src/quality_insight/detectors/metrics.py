"""Metrics extractor: line counts, comment density, function and class spans."""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Pattern, Tuple

import numpy as np

from ..logging_config import get_logger
from ..models import FunctionSpan
from ..scanning.languages import LanguageProfile
from ..scanning.preprocessor import PreprocessedSource, SourceLine

logger = get_logger(__name__)

# Words that function patterns can pick up from control statements and calls.
NOT_FUNCTION_NAMES = frozenset({
    "if", "for", "while", "switch", "catch", "return", "else", "do", "new",
    "sizeof", "with", "elif", "until", "unless", "synchronized", "function",
    "typeof", "await", "yield", "throw", "case", "foreach", "using", "lock",
    "delete", "assert", "print", "match", "loop", "select", "defer", "go",
})

_IDENT = re.compile(r"[A-Za-z_$][\w$]*")
_ANNOTATED_PARAM = re.compile(
    r"^\s*[*&]*\s*(?:mut\s+)?(?:\.\.\.)?(?P<name>[A-Za-z_$][\w$]*)\s*(?P<optional>\?)?\s*:(?!:)\s*(?P<type>.*)$"
)
_DEFAULT_VALUE = re.compile(r"(?<![=!<>])=(?![=>])")
_SKIPPED_PARAMS = frozenset({"self", "cls", "this", "void", "mut"})
_RUBY_END = re.compile(r"\bend\s*$")
_RUBY_DO = re.compile(r"\bdo\s*(?:\|[^|]*\|)?\s*$")
_RUBY_OPENERS = frozenset({
    "if", "unless", "while", "until", "for", "case", "begin", "def", "class", "module",
})

# Brace languages must open the body within this many lines of the header.
_MAX_HEADER_LINES = 3


@dataclass(frozen=True)
class SourceMetrics:
    total_lines: int
    lines_of_code: int
    comment_lines: int
    comment_ratio: float
    functions: Tuple[FunctionSpan, ...]
    classes: Tuple[Tuple[str, int], ...]
    average_function_length: float
    max_function_length: int

    @property
    def function_count(self) -> int:
        return len(self.functions)

    @property
    def class_count(self) -> int:
        return len(self.classes)


EMPTY_METRICS = SourceMetrics(
    total_lines=0,
    lines_of_code=0,
    comment_lines=0,
    comment_ratio=0.0,
    functions=(),
    classes=(),
    average_function_length=0.0,
    max_function_length=0,
)


@lru_cache(maxsize=64)
def _compile_all(patterns: Tuple[str, ...], flags: int = 0) -> Tuple[Pattern, ...]:
    return tuple(re.compile(p, flags) for p in patterns)


def extract_metrics(source: PreprocessedSource) -> SourceMetrics:
    """Count lines, comments, functions and classes of a preprocessed unit."""
    lines = source.lines
    if not lines:
        return EMPTY_METRICS

    loc = sum(1 for ln in lines if ln.has_code)
    comment_lines = sum(1 for ln in lines if ln.comment)
    non_blank = sum(1 for ln in lines if not ln.is_blank)
    comment_ratio = comment_lines / non_blank if non_blank else 0.0

    functions = find_functions(source)
    classes = find_classes(source)

    if functions:
        lengths = [fn.length for fn in functions]
        average = float(np.mean(lengths))
        longest = int(np.max(lengths))
    else:
        average = float(loc)
        longest = loc

    logger.debug(
        f"metrics: {len(lines)} lines, {loc} LOC, {len(functions)} functions, {len(classes)} classes"
    )

    return SourceMetrics(
        total_lines=len(lines),
        lines_of_code=loc,
        comment_lines=comment_lines,
        comment_ratio=comment_ratio,
        functions=functions,
        classes=classes,
        average_function_length=average,
        max_function_length=longest,
    )


def find_classes(source: PreprocessedSource) -> Tuple[Tuple[str, int], ...]:
    patterns = _compile_all(tuple(source.profile.class_patterns))
    found: List[Tuple[str, int]] = []
    for line in source.code_lines():
        for pattern in patterns:
            match = pattern.search(line.code)
            if match:
                found.append((match.group("name"), line.number))
                break
    return tuple(found)


def find_functions(source: PreprocessedSource) -> Tuple[FunctionSpan, ...]:
    """Detect function declarations and the lines their bodies cover."""
    profile = source.profile
    patterns = _compile_all(tuple(profile.function_patterns))
    spans: List[FunctionSpan] = []

    for line in source.code_lines():
        for pattern in patterns:
            match = pattern.search(line.code)
            if not match or match.group("name") in NOT_FUNCTION_NAMES:
                continue
            end = _find_end(source, line, match.start())
            if end is None:
                continue
            params_text = _collect_params(source, line, match)
            names, nullable = parse_parameters(params_text, profile)
            spans.append(
                FunctionSpan(
                    name=match.group("name"),
                    start_line=line.number,
                    end_line=end,
                    parameters=names,
                    nullable_parameters=nullable,
                )
            )
            break

    return tuple(spans)


def _find_end(source: PreprocessedSource, decl: SourceLine, offset: int) -> Optional[int]:
    mode = source.profile.nesting_mode
    if mode == "indent":
        return _indent_end(source, decl)
    if mode == "keyword":
        return _keyword_end(source, decl)
    return _brace_end(source, decl, offset)


def _brace_end(source: PreprocessedSource, decl: SourceLine, offset: int) -> Optional[int]:
    depth = 0
    paren = 0
    opened = False
    for line in source.lines[decl.number - 1:]:
        code = line.code[offset:] if line.number == decl.number else line.code
        for ch in code:
            if ch == "(":
                paren += 1
            elif ch == ")":
                paren = max(0, paren - 1)
            elif ch == ";" and not opened and paren == 0:
                return None
            elif ch == "{":
                depth += 1
                opened = True
            elif ch == "}" and opened:
                depth -= 1
                if depth == 0:
                    return line.number
        if not opened and line.number - decl.number >= _MAX_HEADER_LINES - 1:
            return None
    return source.lines[-1].number if opened else None


def _indent_end(source: PreprocessedSource, decl: SourceLine) -> int:
    # The signature may span lines; it ends where parentheses balance.
    balance = 0
    signature_end = decl
    for line in source.lines[decl.number - 1:]:
        balance += line.code.count("(") - line.code.count(")")
        signature_end = line
        if balance <= 0:
            break

    if not signature_end.stripped.endswith(":"):
        return signature_end.number

    end = signature_end.number
    for line in source.lines[signature_end.number:]:
        if not line.has_code:
            continue
        if line.indent <= decl.indent:
            break
        end = line.number
    return end


def _keyword_end(source: PreprocessedSource, decl: SourceLine) -> int:
    if _RUBY_END.search(decl.stripped):
        return decl.number
    depth = 1
    for line in source.lines[decl.number:]:
        if not line.has_code:
            continue
        stripped = line.stripped
        first = _IDENT.match(stripped)
        word = first.group(0) if first else ""
        if word == "end":
            depth -= 1
            if depth == 0:
                return line.number
        elif word in _RUBY_OPENERS and not _RUBY_END.search(stripped):
            depth += 1
        elif _RUBY_DO.search(stripped):
            depth += 1
    return source.lines[-1].number


def _collect_params(source: PreprocessedSource, decl: SourceLine, match) -> str:
    text = match.group("params") or ""
    start = match.start("params")
    if start < 0 or ")" in decl.code[start:] or "(" not in decl.code[:start + 1]:
        return text
    # Parameter list continues on the following lines.
    parts = [decl.code[start:]]
    for line in source.lines[decl.number:decl.number + 20]:
        if ")" in line.code:
            parts.append(line.code[:line.code.index(")")])
            break
        parts.append(line.code)
    return ",".join(parts)


def _split_top_level(text: str) -> List[str]:
    pieces: List[str] = []
    depth = 0
    current: List[str] = []
    for ch in text:
        if ch in "([{<":
            depth += 1
        elif ch in ")]}>":
            depth = max(0, depth - 1)
        if ch == "," and depth == 0:
            pieces.append("".join(current))
            current = []
        else:
            current.append(ch)
    pieces.append("".join(current))
    return pieces


def parse_parameters(
    text: str, profile: LanguageProfile
) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
    """Return (parameter names, names that may legitimately be null)."""
    names: List[str] = []
    nullable: List[str] = []
    for piece in _split_top_level(text):
        piece = piece.strip()
        if not piece:
            continue

        default: Optional[str] = None
        eq = _DEFAULT_VALUE.search(piece)
        if eq:
            default = piece[eq.end():].strip()
            piece = piece[:eq.start()].strip()

        annotated = _ANNOTATED_PARAM.match(piece)
        if annotated:
            name = annotated.group("name")
            annotation = (annotated.group("optional") or "") + annotated.group("type")
        else:
            tokens = _IDENT.findall(piece)
            if not tokens:
                continue
            if profile.parameter_name_position == "last":
                name = tokens[-1]
                annotation = piece[:piece.rfind(name)]
            else:
                name = tokens[0]
                annotation = piece[piece.find(name) + len(name):]

        if name in _SKIPPED_PARAMS:
            continue
        names.append(name)
        if _is_nullable(annotation, default, profile):
            nullable.append(name)

    return tuple(names), tuple(nullable)


def _is_nullable(annotation: str, default: Optional[str], profile: LanguageProfile) -> bool:
    if default is not None and default in profile.null_literals:
        return True
    annotation = annotation.strip()
    if not annotation:
        return profile.parameters_nullable_by_default
    if any(marker in annotation for marker in profile.nullable_type_markers):
        return True
    words = set(re.findall(r"\w+", annotation))
    if words & set(profile.non_nullable_types) and "[" not in annotation:
        return False
    # Reference types in Java-like languages can always be null.
    return profile.parameter_name_position == "last" and profile.parameters_nullable_by_default
