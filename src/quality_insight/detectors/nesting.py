"""Nesting tracker: control-flow block depth, whole unit and per function."""

from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Tuple

from ..models import FunctionSpan
from ..scanning.blocks import BlockMap
from .complexity import function_key


@dataclass(frozen=True)
class FunctionNesting:
    depth: int
    deepest_line: Optional[int]


@dataclass(frozen=True)
class NestingResult:
    max_depth: int = 0
    deepest_line: Optional[int] = None
    line_depths: Tuple[int, ...] = ()
    per_function: Dict[str, FunctionNesting] = field(default_factory=dict)

    def for_function(self, fn: FunctionSpan) -> FunctionNesting:
        return self.per_function.get(function_key(fn), FunctionNesting(0, None))


def track_nesting(block_map: BlockMap, functions: Sequence[FunctionSpan] = ()) -> NestingResult:
    """Measure how deeply control structures nest.

    Only control-flow blocks count (if/else, loops, switch, try/catch/finally);
    braces of functions, classes and literals do not. Function depth is
    relative to the block the function is declared in.
    """
    depths = tuple(block_map.depth_at(n) for n in range(1, len(block_map.stacks) + 1))
    if not depths:
        return NestingResult()

    max_depth = max(depths)
    deepest_line = depths.index(max_depth) + 1 if max_depth > 0 else None

    per_function: Dict[str, FunctionNesting] = {}
    for fn in functions:
        base = block_map.depth_at(fn.start_line) if fn.start_line <= len(depths) else 0
        best = 0
        best_line: Optional[int] = None
        for number in range(fn.start_line, min(fn.end_line, len(depths)) + 1):
            relative = depths[number - 1] - base
            if relative > best:
                best = relative
                best_line = number
        per_function[function_key(fn)] = FunctionNesting(best, best_line)

    return NestingResult(
        max_depth=max_depth,
        deepest_line=deepest_line,
        line_depths=depths,
        per_function=per_function,
    )
