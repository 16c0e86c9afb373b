"""Maintainability smells: size, naming, readability and swallowed errors."""

import re
from collections import Counter
from typing import Dict, List, Optional, Sequence

from ..config import DEFAULT_THRESHOLDS, ThresholdConfig
from ..logging_config import get_logger
from ..models import FunctionSpan, Issue, IssueCategory, Severity
from ..scanning.blocks import BlockMap
from ..scanning.preprocessor import PreprocessedSource, SourceLine
from .base import context_tags, new_issue
from .complexity import ComplexityResult
from .documentation import DocumentationResult
from .duplication import DuplicationResult

logger = get_logger(__name__)

RULE_LONG_FUNCTION = "long-function"
RULE_PARAMETERS = "long-parameter-list"
RULE_COMPLEX_FUNCTION = "complex-function"
RULE_MAGIC_NUMBER = "magic-number"
RULE_DEBUG_OUTPUT = "debug-output"
RULE_TODO = "todo-comment"
RULE_SHORT_NAME = "short-name"
RULE_MIXED_NAMING = "mixed-naming"
RULE_EMPTY_CATCH = "empty-catch"
RULE_MISSING_DOCS = "missing-docs"
RULE_DUPLICATE = "duplicate-block"

_NUMBER = re.compile(r"(?<![\w.$])-?\d+(?:\.\d+)?(?![\w.])")
_ORDINARY_NUMBERS = frozenset({0.0, 1.0, -1.0, 2.0, 10.0, 100.0})
_CONSTANT_DEFINITION = re.compile(
    r"^\s*(?:export\s+)?(?:const|final|static\s+final|static\s+readonly|readonly|enum)\b"
    r"|^\s*(?:(?:public|private|protected|static|final)\s+)+\w+\s+[A-Z][A-Z0-9_]*\s*="
    r"|^\s*[A-Z][A-Z0-9_]*\s*(?::[^=]+)?(?::=|=)(?!=)"
    r"|^\s*#\s*define\b"
)
_DEBUG_OUTPUT = re.compile(
    r"\bconsole\.(?:log|debug|trace|dir)\s*\(|\bSystem\.(?:out|err)\.print\w*\s*\("
    r"|\bdebugger\b|\.printStackTrace\s*\(|\bbinding\.pry\b|\bpdb\.set_trace\s*\(|\bbreakpoint\s*\(\s*\)"
)
_TODO = re.compile(r"\b(TODO|FIXME|HACK|XXX)\b")
_TYPED_DECLARATION = re.compile(
    r"\b(?:let|var|const|int|float|double|char|long|short|auto|bool|boolean|String|val)\s+"
    r"(?P<name>[A-Za-z])\s*(?:[=;,:)]|$)"
)
_PLAIN_ASSIGNMENT = re.compile(r"^\s*(?P<name>[A-Za-z])\s*(?::=|=)(?!=)")
_CONVENTIONAL_SHORT_NAMES = frozenset({"i", "j", "k", "x", "y", "z", "n", "m", "_", "e"})
_CAMEL_CASE = re.compile(r"^[a-z][a-z0-9]*[A-Z][A-Za-z0-9]*$")
_SNAKE_CASE = re.compile(r"^[a-z][a-z0-9]*(?:_[a-z0-9]+)+$")

_BRACE_CATCH = re.compile(r"\bcatch\b[^{]*\{(?P<rest>.*)$")
_PY_EXCEPT = re.compile(r"^except\b[^:]*:\s*(?P<rest>.*)$")
_EMPTY_BODY = frozenset({"", "pass", "..."})


class SmellDetector:
    """Collects maintainability smells from the detector outputs of one unit."""

    def __init__(
        self,
        source: PreprocessedSource,
        functions: Sequence[FunctionSpan],
        classes: Sequence,
        complexity: ComplexityResult,
        duplication: DuplicationResult,
        documentation: DocumentationResult,
        block_map: Optional[BlockMap] = None,
        thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
    ):
        self.source = source
        self.functions = tuple(functions)
        self.classes = tuple(classes)
        self.complexity = complexity
        self.duplication = duplication
        self.documentation = documentation
        self.block_map = block_map
        self.thresholds = thresholds
        self.code_lines = [ln for ln in source.lines if ln.has_code]

    def detect(self) -> List[Issue]:
        issues: List[Issue] = []
        issues.extend(self.check_function_size())
        issues.extend(self.check_magic_numbers())
        issues.extend(self.check_debug_output())
        issues.extend(self.check_todo_comments())
        issues.extend(self.check_short_names())
        issues.extend(self.check_mixed_naming())
        issues.extend(self.check_empty_catch())
        issues.extend(self.check_missing_docs())
        issues.extend(self.check_duplicates())
        logger.debug(f"smells: {len(issues)} issues")
        return issues

    def _issue(self, category, severity, description, line: SourceLine, rule: str) -> Issue:
        return new_issue(
            category,
            severity,
            description,
            line=line.number,
            rule=rule,
            context=context_tags(line.number, self.block_map, self.functions),
            snippet=line.raw,
        )

    def check_function_size(self) -> List[Issue]:
        """Long bodies, long parameter lists and complex functions."""
        t = self.thresholds
        issues: List[Issue] = []
        for fn in self.functions:
            decl = self.source.line(fn.start_line)

            if fn.length > t.long_function_minor:
                severity = Severity.MAJOR if fn.length > t.long_function_major else Severity.MINOR
                issues.append(self._issue(
                    IssueCategory.STRUCTURE, severity,
                    f"Function '{fn.name}' is too long ({fn.length} lines)",
                    decl, RULE_LONG_FUNCTION,
                ))

            if fn.parameter_count > t.max_parameters:
                issues.append(self._issue(
                    IssueCategory.STRUCTURE, Severity.MINOR,
                    f"Function '{fn.name}' has too many parameters ({fn.parameter_count})",
                    decl, RULE_PARAMETERS,
                ))

            value = self.complexity.for_function(fn)
            if value > t.function_complexity_minor:
                severity = (
                    Severity.MAJOR if value > t.function_complexity_major else Severity.MINOR
                )
                issues.append(self._issue(
                    IssueCategory.STRUCTURE, severity,
                    f"Function '{fn.name}' is too complex (complexity {value})",
                    decl, RULE_COMPLEX_FUNCTION,
                ))
        return issues

    def check_magic_numbers(self) -> List[Issue]:
        declaration_lines = {fn.start_line for fn in self.functions}
        prefix = self.source.profile.directive_prefix
        issues: List[Issue] = []
        for line in self.code_lines:
            if line.number in declaration_lines or _CONSTANT_DEFINITION.search(line.code):
                continue
            if prefix and line.stripped.startswith(prefix):
                continue
            for match in _NUMBER.finditer(line.code):
                if float(match.group(0)) in _ORDINARY_NUMBERS:
                    continue
                issues.append(self._issue(
                    IssueCategory.READABILITY, Severity.MINOR,
                    f"Magic number {match.group(0)} should be a named constant",
                    line, RULE_MAGIC_NUMBER,
                ))
                break
        return issues

    def check_debug_output(self) -> List[Issue]:
        return [
            self._issue(
                IssueCategory.READABILITY, Severity.MINOR,
                "Debug output statement left in code",
                line, RULE_DEBUG_OUTPUT,
            )
            for line in self.code_lines
            if _DEBUG_OUTPUT.search(line.code)
        ]

    def check_todo_comments(self) -> List[Issue]:
        issues: List[Issue] = []
        for line in self.source.lines:
            match = _TODO.search(line.comment)
            if match:
                issues.append(self._issue(
                    IssueCategory.READABILITY, Severity.MINOR,
                    f"{match.group(1)} comment marks unfinished work",
                    line, RULE_TODO,
                ))
        return issues

    def check_short_names(self) -> List[Issue]:
        """Single-letter variables, except loop counters and coordinates."""
        issues: List[Issue] = []
        seen = set()
        for line in self.code_lines:
            if re.match(r"^\s*for\b", line.code):
                continue
            match = _TYPED_DECLARATION.search(line.code) or _PLAIN_ASSIGNMENT.match(line.code)
            if not match:
                continue
            name = match.group("name")
            if name in _CONVENTIONAL_SHORT_NAMES or name in seen:
                continue
            seen.add(name)
            issues.append(self._issue(
                IssueCategory.NAMING, Severity.MINOR,
                f"Variable name '{name}' is not descriptive",
                line, RULE_SHORT_NAME,
            ))
        return issues

    def check_mixed_naming(self) -> List[Issue]:
        styles: Dict[str, List[FunctionSpan]] = {"camelCase": [], "snake_case": []}
        for fn in self.functions:
            if _CAMEL_CASE.match(fn.name):
                styles["camelCase"].append(fn)
            elif _SNAKE_CASE.match(fn.name):
                styles["snake_case"].append(fn)
        if not styles["camelCase"] or not styles["snake_case"]:
            return []

        counts = Counter({style: len(fns) for style, fns in styles.items()})
        minority = counts.most_common()[-1][0]
        first = styles[minority][0]
        return [self._issue(
            IssueCategory.NAMING, Severity.MINOR,
            "Function names mix camelCase and snake_case",
            self.source.line(first.start_line), RULE_MIXED_NAMING,
        )]

    def check_empty_catch(self) -> List[Issue]:
        """Handlers whose body holds nothing but comments or ``pass``."""
        mode = self.source.profile.nesting_mode
        issues: List[Issue] = []
        for index, line in enumerate(self.code_lines):
            if mode == "indent":
                empty = self._empty_except(index, line)
            elif mode == "keyword":
                empty = self._empty_rescue(index, line)
            else:
                empty = self._empty_brace_catch(index, line)
            if empty:
                issues.append(self._issue(
                    IssueCategory.EXCEPTION, Severity.MAJOR,
                    "Empty catch block silently swallows errors",
                    line, RULE_EMPTY_CATCH,
                ))
        return issues

    def _empty_brace_catch(self, index: int, line: SourceLine) -> bool:
        match = _BRACE_CATCH.search(line.code)
        if not match:
            return False
        rest = match.group("rest").strip()
        if rest:
            return rest.startswith("}")
        following = self.code_lines[index + 1:index + 2]
        return bool(following) and following[0].stripped.startswith("}")

    def _empty_except(self, index: int, line: SourceLine) -> bool:
        match = _PY_EXCEPT.match(line.stripped)
        if not match:
            return False
        rest = match.group("rest").strip()
        if rest:
            return rest in _EMPTY_BODY
        body = []
        for following in self.code_lines[index + 1:]:
            if following.indent <= line.indent:
                break
            body.append(following.stripped)
        return all(statement in _EMPTY_BODY for statement in body)

    def _empty_rescue(self, index: int, line: SourceLine) -> bool:
        if not re.match(r"^rescue\b", line.stripped):
            return False
        following = self.code_lines[index + 1:index + 2]
        return bool(following) and re.match(
            r"^(?:end|ensure|else|rescue)\b", following[0].stripped
        ) is not None

    def check_missing_docs(self) -> List[Issue]:
        by_line = {fn.start_line: fn for fn in self.functions}
        issues: List[Issue] = []
        for name, line_number in self.documentation.undocumented:
            fn = by_line.get(line_number)
            if fn is not None:
                if fn.length <= self.thresholds.long_function_minor:
                    continue
                description = f"Function '{name}' lacks documentation"
            else:
                description = f"Class '{name}' lacks documentation"
            issues.append(self._issue(
                IssueCategory.READABILITY, Severity.MINOR, description,
                self.source.line(line_number), RULE_MISSING_DOCS,
            ))
        return issues

    def check_duplicates(self) -> List[Issue]:
        severity = Severity.MAJOR if self.duplication.duplication_percent > 10 else Severity.MINOR
        return [
            self._issue(
                IssueCategory.STRUCTURE, severity,
                f"Duplicated block of {block.length} lines repeats line {block.first_line}",
                self.source.line(block.duplicate_line), RULE_DUPLICATE,
            )
            for block in self.duplication.blocks
        ]


def detect_smells(
    source: PreprocessedSource,
    functions: Sequence[FunctionSpan],
    classes: Sequence,
    complexity: ComplexityResult,
    duplication: DuplicationResult,
    documentation: DocumentationResult,
    block_map: Optional[BlockMap] = None,
    thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
) -> List[Issue]:
    """Run every smell check and return the issues found."""
    return SmellDetector(
        source, functions, classes, complexity, duplication, documentation,
        block_map=block_map, thresholds=thresholds,
    ).detect()
