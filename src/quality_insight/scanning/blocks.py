"""Block structure: which control-flow blocks enclose each line.

The map is derived once per analysis from the preprocessed code and shared
read-only by the nesting tracker and the risk scanner.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .languages import CONDITIONAL_KINDS, CONTROL_KINDS, ERROR_HANDLING_KINDS
from .preprocessor import PreprocessedSource

_WORD = re.compile(r"[A-Za-z_]\w*")
_RUBY_DO = re.compile(r"\bdo\s*(?:\|[^|]*\|)?\s*$")
_RUBY_CONTINUATIONS = frozenset({"elsif", "else", "when", "rescue", "ensure"})


@dataclass(frozen=True)
class BlockMap:
    """Per-line stack of enclosing block kinds (outermost first).

    Lines are 1-based; ``stacks[0]`` belongs to line 1. A block header line
    carries the block it opens.
    """

    stacks: Tuple[Tuple[str, ...], ...]

    def kinds_at(self, line: int) -> Tuple[str, ...]:
        if 1 <= line <= len(self.stacks):
            return self.stacks[line - 1]
        return ()

    def depth_at(self, line: int) -> int:
        return sum(1 for kind in self.kinds_at(line) if kind in CONTROL_KINDS)

    def in_error_handling(self, line: int) -> bool:
        return any(kind in ERROR_HANDLING_KINDS for kind in self.kinds_at(line))

    def in_conditional(self, line: int) -> bool:
        return any(kind in CONDITIONAL_KINDS for kind in self.kinds_at(line))


def build_block_map(source: PreprocessedSource) -> BlockMap:
    mode = source.profile.nesting_mode
    if mode == "indent":
        stacks = _indent_blocks(source)
    elif mode == "keyword":
        stacks = _keyword_blocks(source)
    else:
        stacks = _brace_blocks(source)
    return BlockMap(stacks=tuple(stacks))


def _brace_blocks(source: PreprocessedSource) -> List[Tuple[str, ...]]:
    keywords = source.profile.block_keywords
    stacks: List[Tuple[str, ...]] = []
    stack: List[str] = []
    pending: Optional[str] = None

    for line in source.lines:
        deepest: Tuple[str, ...] = tuple(stack)
        code = line.code
        paren = 0
        i = 0
        while i < len(code):
            ch = code[i]
            if ch.isalpha() or ch == "_":
                match = _WORD.match(code, i)
                word = match.group(0)
                preceded_by_dot = i > 0 and code[i - 1] == "."
                if word in keywords and not preceded_by_dot:
                    pending = keywords[word]
                i = match.end()
                continue
            if ch == "(":
                paren += 1
            elif ch == ")":
                paren = max(0, paren - 1)
            elif ch == ";" and paren == 0:
                pending = None
            elif ch == "{":
                stack.append(pending or "other")
                pending = None
                if len(stack) > len(deepest):
                    deepest = tuple(stack)
            elif ch == "}":
                if stack:
                    stack.pop()
            i += 1
        stacks.append(deepest)

    return stacks


def _indent_blocks(source: PreprocessedSource) -> List[Tuple[str, ...]]:
    keywords = source.profile.block_keywords
    stacks: List[Tuple[str, ...]] = []
    stack: List[Tuple[int, str]] = []

    for line in source.lines:
        if not line.has_code:
            stacks.append(tuple(kind for _, kind in stack))
            continue

        while stack and stack[-1][0] >= line.indent:
            stack.pop()

        stripped = line.stripped
        if stripped.endswith(":"):
            first = _WORD.match(stripped)
            kind = keywords.get(first.group(0), "other") if first else "other"
            stack.append((line.indent, kind))

        stacks.append(tuple(kind for _, kind in stack))

    return stacks


def _keyword_blocks(source: PreprocessedSource) -> List[Tuple[str, ...]]:
    keywords = source.profile.block_keywords
    stacks: List[Tuple[str, ...]] = []
    stack: List[str] = []
    openers = {word for word in keywords if word not in _RUBY_CONTINUATIONS}

    for line in source.lines:
        stripped = line.stripped
        first_match = _WORD.match(stripped)
        first = first_match.group(0) if first_match else ""

        if first == "end":
            stacks.append(tuple(stack))
            if stack:
                stack.pop()
            continue

        if first in _RUBY_CONTINUATIONS and stack:
            stack[-1] = keywords.get(first, stack[-1])
        elif first in openers and not re.search(r"\bend\s*$", stripped):
            stack.append(keywords[first])
        elif _RUBY_DO.search(stripped):
            stack.append("loop")

        stacks.append(tuple(stack))

    return stacks

