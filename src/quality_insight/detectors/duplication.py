"""Duplication detector: repeated windows of significant lines."""

from dataclasses import dataclass
from typing import Dict, List, Set, Tuple

from ..logging_config import get_logger
from ..math import safe_percent
from ..models import DuplicateBlock
from ..scanning.preprocessor import PreprocessedSource

logger = get_logger(__name__)


@dataclass(frozen=True)
class DuplicationResult:
    duplicated_lines: int = 0
    total_lines: int = 0
    duplication_percent: float = 0.0
    blocks: Tuple[DuplicateBlock, ...] = ()


def detect_duplication(
    source: PreprocessedSource, window: int = 6, min_chars: int = 50
) -> DuplicationResult:
    """
    Find windows of ``window`` consecutive significant lines that repeat an
    earlier, non-overlapping window.

    Significant lines are trimmed, comment-free and non-blank, with inner
    whitespace collapsed. Windows shorter than ``min_chars`` characters
    (closing braces, ``else:`` and the like) never count. Each duplicated
    line is counted once, so the percentage cannot exceed 100 and repeated
    calls on the same input agree. The seen-window table lives only for the
    duration of the call.
    """
    significant = [(ln.number, " ".join(ln.stripped.split())) for ln in source.code_lines()]
    total = len(significant)
    if total < window * 2:
        return DuplicationResult(total_lines=total)

    first_seen: Dict[str, int] = {}
    origin: Dict[int, int] = {}
    marked: Set[int] = set()

    for start in range(total - window + 1):
        key = "\n".join(text for _, text in significant[start:start + window])
        if len(key) < min_chars:
            continue
        earlier = first_seen.get(key)
        if earlier is None:
            first_seen[key] = start
            continue
        if start < earlier + window:
            continue
        origin.setdefault(start, earlier)
        marked.update(range(start, start + window))

    blocks = _coalesce(sorted(marked), origin, significant)
    percent = safe_percent(len(marked), total)

    if marked:
        logger.debug(f"duplication: {len(marked)}/{total} lines in {len(blocks)} blocks")

    return DuplicationResult(
        duplicated_lines=len(marked),
        total_lines=total,
        duplication_percent=percent,
        blocks=blocks,
    )


def _coalesce(
    indices: List[int], origin: Dict[int, int], significant: List[Tuple[int, str]]
) -> Tuple[DuplicateBlock, ...]:
    blocks: List[DuplicateBlock] = []
    run_start = None
    previous = None
    for index in indices + [None]:
        if index is not None and previous is not None and index == previous + 1:
            previous = index
            continue
        if run_start is not None:
            source_index = origin.get(run_start, run_start)
            blocks.append(
                DuplicateBlock(
                    first_line=significant[source_index][0],
                    duplicate_line=significant[run_start][0],
                    length=previous - run_start + 1,
                )
            )
        run_start = index
        previous = index
    return tuple(blocks)
