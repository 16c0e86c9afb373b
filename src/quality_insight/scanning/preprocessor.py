"""Lexical preprocessing: strip comments and string contents, keep line numbers.

Every detector works on the ``code`` view of a line, so keywords inside
comments or string literals never count as signals. String literals are
collapsed to an empty pair of delimiters (``"hello"`` becomes ``""``) so
operators and call shapes around them survive.
"""

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from .languages import LanguageProfile

TAB_WIDTH = 4

_DIRECTIVE = re.compile(r"#(?:include|define|undef|ifdef|ifndef|if|elif|else|endif|pragma|error)\b")


@dataclass(frozen=True)
class SourceLine:
    """One physical line in three views: raw text, code-only and comment-only."""

    number: int
    raw: str
    code: str
    comment: str
    indent: int

    @property
    def is_blank(self) -> bool:
        return not self.raw.strip()

    @property
    def has_code(self) -> bool:
        return bool(self.code.strip())

    @property
    def is_comment_only(self) -> bool:
        return not self.has_code and bool(self.comment.strip())

    @property
    def stripped(self) -> str:
        return self.code.strip()


@dataclass(frozen=True)
class PreprocessedSource:
    """Result of preprocessing one source unit."""

    profile: LanguageProfile
    lines: Tuple[SourceLine, ...]

    def __len__(self) -> int:
        return len(self.lines)

    def line(self, number: int) -> SourceLine:
        return self.lines[number - 1]

    def code_lines(self) -> Iterator[SourceLine]:
        return (ln for ln in self.lines if ln.has_code)

    def span(self, start: int, end: int) -> Tuple[SourceLine, ...]:
        """Lines ``start..end`` (1-based, inclusive)."""
        return self.lines[max(0, start - 1):max(0, end)]


def _indent_of(raw: str) -> int:
    expanded = raw.expandtabs(TAB_WIDTH)
    return len(expanded) - len(expanded.lstrip(" "))


class _Scanner:
    """Character-level state machine driven by a language profile."""

    def __init__(self, profile: LanguageProfile):
        self.profile = profile
        # Longest tokens first so '"""' wins over '"'.
        self.block_starts = sorted(profile.block_comments, key=lambda p: -len(p[0]))
        self.line_markers = sorted(profile.line_comments, key=len, reverse=True)

    def split(self, text: str) -> Tuple[List[str], List[str]]:
        code_lines: List[str] = []
        comment_lines: List[str] = []
        code: List[str] = []
        comment: List[str] = []

        block_end: Optional[str] = None
        string_delim: Optional[str] = None
        in_line_comment = False

        i = 0
        n = len(text)
        while i < n:
            ch = text[i]

            if ch == "\n":
                code_lines.append("".join(code))
                comment_lines.append("".join(comment))
                code, comment = [], []
                in_line_comment = False
                # Single-line string delimiters never span lines.
                if string_delim is not None and string_delim not in self.profile.multiline_delimiters:
                    string_delim = None
                i += 1
                continue

            if in_line_comment:
                comment.append(ch)
                i += 1
                continue

            if block_end is not None:
                if text.startswith(block_end, i):
                    i += len(block_end)
                    block_end = None
                else:
                    comment.append(ch)
                    i += 1
                continue

            if string_delim is not None:
                if ch == self.profile.escape_char and i + 1 < n and text[i + 1] != "\n":
                    i += 2
                    continue
                if ch == string_delim:
                    code.append(ch)
                    string_delim = None
                i += 1
                continue

            matched_block = self._match_block(text, i)
            if matched_block is not None:
                start, end = matched_block
                block_end = end
                i += len(start)
                continue

            marker = self._match_line_comment(text, i, code)
            if marker is not None:
                in_line_comment = True
                i += len(marker)
                continue

            if ch in self.profile.string_delimiters or ch in self.profile.multiline_delimiters:
                string_delim = ch
                code.append(ch)
                i += 1
                continue

            code.append(ch)
            i += 1

        code_lines.append("".join(code))
        comment_lines.append("".join(comment))
        return code_lines, comment_lines

    def _match_block(self, text: str, i: int) -> Optional[Tuple[str, str]]:
        for start, end in self.block_starts:
            if text.startswith(start, i):
                return start, end
        return None

    def _match_line_comment(self, text: str, i: int, code: List[str]) -> Optional[str]:
        for marker in self.line_markers:
            if not text.startswith(marker, i):
                continue
            if self._is_directive(text, i, code):
                continue
            return marker
        return None

    def _is_directive(self, text: str, i: int, code: List[str]) -> bool:
        """'#include' and friends are code, not comments."""
        prefix = self.profile.directive_prefix
        if not prefix or not text.startswith(prefix, i) or "".join(code).strip():
            return False
        return _DIRECTIVE.match(text, i) is not None


def preprocess(text: str, profile: LanguageProfile) -> PreprocessedSource:
    """Split ``text`` into SourceLines with comments and string contents removed.

    Never raises; empty input yields zero lines.
    """
    if not text:
        return PreprocessedSource(profile=profile, lines=())

    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    if normalized.endswith("\n"):
        normalized = normalized[:-1]

    raw_lines = normalized.split("\n")
    code_lines, comment_lines = _Scanner(profile).split(normalized)

    lines = tuple(
        SourceLine(
            number=idx + 1,
            raw=raw,
            code=code.rstrip(),
            comment=comment.strip(),
            indent=_indent_of(raw),
        )
        for idx, (raw, code, comment) in enumerate(zip(raw_lines, code_lines, comment_lines))
    )
    return PreprocessedSource(profile=profile, lines=lines)
