"""Risk pattern scanner: runtime and exception-handling hazards.

Rules run in a fixed order over comment- and string-free code. Each rule
looks for a risky construct and then for evidence that it is guarded
(a zero check, a bounds check, a null check, an enclosing try block). Only
unguarded constructs become issues.
"""

import re
from typing import Callable, Iterable, List, Optional, Sequence, Set, Tuple

from ..logging_config import get_logger
from ..models import FunctionSpan, Issue, IssueCategory, Severity
from ..scanning.blocks import BlockMap
from ..scanning.preprocessor import PreprocessedSource, SourceLine
from .base import context_tags, enclosing_function, new_issue
from .nesting import NestingResult

logger = get_logger(__name__)

RULE_DIVISION = "unchecked-division"
RULE_INDEX = "unchecked-index"
RULE_DEREFERENCE = "unguarded-dereference"
RULE_RISKY_CALL = "unhandled-risky-call"
RULE_INPUT = "unvalidated-input"
RULE_RESOURCE = "resource-leak"
RULE_NESTING = "deep-nesting"
RULE_DEAD_CODE = "dead-code"

_NULLS = r"(?:null|None|nil|undefined|NULL|nullptr)"
_CRASH_WORDS = ("crash", "abort", "corrupt", "fatal")

# ── Division ───────────────────────────────────────────────────────

_NUMBER = r"0[xXbBoO][\da-fA-F_]+[uUlL]*|\d[\d_]*(?:\.\d+)?(?:[eE][-+]?\d+)?[fFlLuUdD]*"
_DIVISION = re.compile(
    r"(?<=[\w)\]])\s*(?P<op>//|/|%)=?\s*"
    r"(?P<divisor>\(|[A-Za-z_$][\w$]*(?:\s*\.\s*[A-Za-z_$][\w$]*)*(?:\s*\([^()]*\))?|" + _NUMBER + r")"
)
_NUMBER_LITERAL = re.compile(_NUMBER)
_REGEX_LITERAL_CONTEXT = re.compile(r"\b(?:return|typeof|case|in|of)\s*$")
_SAFE_DIVISOR_EXPR = re.compile(
    r"\|\|\s*[1-9]|\bor\s+[1-9]|\?\?\s*[1-9]|\bmax\s*\(|Math\.max\s*\(|\bclamp\s*\("
)
_RECEIVER_WORDS = frozenset({"self", "this", "Math"})
_SIZE_MEMBERS = frozenset({"length", "size", "count"})

# ── Index ──────────────────────────────────────────────────────────

_INDEX = re.compile(
    r"(?P<recv>[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*)\s*\[\s*"
    r"(?P<idx>[A-Za-z_$][\w$]*)\s*(?P<offset>[-+]\s*\d+)?\s*\]"
)
_TYPE_NAMES = frozenset({
    "int", "str", "float", "bool", "bytes", "object", "Any", "T", "K", "V",
    "string", "number", "boolean", "list", "dict", "tuple", "set", "type",
    "List", "Dict", "Tuple", "Set", "Optional", "Union", "Callable", "Iterable",
    "Sequence", "Mapping", "Type", "Literal", "Array", "Record", "Partial",
})
_C_ARRAY_DECLARATION = re.compile(
    r"^\s*(?:const\s+|static\s+|unsigned\s+)*"
    r"(?:int|char|float|double|long|short|bool|byte|String|auto|size_t|uint\w*)\b[^=]*\["
)
_MAPPING_INIT = r"\s*(?::[^=]*)?=\s*(?:\{|dict\s*\(|defaultdict\s*\(|Counter\s*\(|OrderedDict\s*\(|new\s+(?:Hash|Tree|Linked)?Map\b|make\s*\(\s*map\b|map\[)"

# ── Dereference ────────────────────────────────────────────────────

_ASSIGNMENT = re.compile(
    r"^(?:(?:const|let|var|final|auto|val)\s+)?(?:[\w<>\[\],]+\s+)?"
    r"(?P<name>[A-Za-z_$][\w$]*)\s*(?::[^=]+)?(?::=|=)(?!=)\s*(?:await\s+)?(?P<value>.+)$"
)
_NULLABLE_VALUE = re.compile(
    r"^" + _NULLS + r"\b"
    r"|\.(?:find|findOne|getElementById|querySelector|match|exec|search|getAttribute|getItem|getenv)\s*\("
    r"|(?<!requests)(?<!session)(?<!client)(?<!axios)(?<!http)\.get\s*\("
    r"|\bre\.(?:match|search|fullmatch)\s*\("
    r"|\bgetenv\s*\("
)

# ── Risky calls ────────────────────────────────────────────────────

_RISKY_CALLS: Tuple[Tuple[str, "re.Pattern", str], ...] = (
    (
        "parse",
        re.compile(
            r"\bJSON\.parse\s*\(|\bjson\.loads?\s*\(|\b(?:Integer|Long|Double|Float)\.(?:parse|valueOf)\w*\s*\("
            r"|\b(?:yaml\.(?:safe_)?load|pickle\.loads?)\s*\(|\bstrconv\.(?:Atoi|Parse\w+)\s*\("
            r"|\.unwrap\s*\(\s*\)|\bint\s*\(\s*input\s*\("
        ),
        "Parsing call without error handling fails on malformed input",
    ),
    (
        "file",
        re.compile(
            r"(?<![\w.])open\s*\(|\bfs\.\w+Sync\s*\(|\bnew\s+File(?:Input|Output)Stream\s*\("
            r"|\bnew\s+File(?:Reader|Writer)\s*\(|\bFiles\.(?:read|write|lines|newBuffered)\w*\s*\("
            r"|\bfopen\s*\(|\bos\.(?:Open|ReadFile|Create)\s*\(|\bioutil\.ReadFile\s*\("
            r"|\bFile\.(?:open|read|write)\s*\(|\bFile::(?:open|create)\s*\(|\bfs::read\w*\s*\("
        ),
        "File operation without error handling",
    ),
    (
        "network",
        re.compile(
            r"(?<![\w.])fetch\s*\(|\baxios(?:\.\w+)?\s*\(|\brequests\.\w+\s*\(|\burlopen\s*\("
            r"|\bhttp\.(?:get|request|Get|Post)\s*\(|\bnew\s+Socket\s*\(|\bsocket\.socket\s*\("
            r"|\bnew\s+XMLHttpRequest\s*\("
        ),
        "Network call without error handling",
    ),
)
_ERROR_HANDLED = re.compile(
    r"\.catch\s*\(|\berr\s*!=\s*nil|\bif\s+err\b|\)\s*\?|\.ok\s*\(\s*\)|\.unwrap_or\w*\s*\("
    r"|\brescue\b|\.then\s*\([^)]*,|\bexcept\b"
)
# Lines after a risky call searched for an error check.
_ERROR_CHECK_WINDOW = 3

# ── Input ──────────────────────────────────────────────────────────

_INPUT_READ = re.compile(
    r"(?<![\w.])input\s*\(|\braw_input\s*\(|\bsys\.stdin\b|(?<![\w.])prompt\s*\("
    r"|(?<![\w.])readline\s*\(|\breadline\.createInterface\b|\bprocess\.stdin\b"
    r"|\bnew\s+Scanner\s*\(\s*System\.in|\bscanf\s*\(|(?<![\w.])gets\b|\bfmt\.Scan\w*\s*\("
    r"|\bread_line\s*\("
)
_INPUT_VALIDATION = re.compile(
    r"\btry\b|\bexcept\b|\bcatch\b|\brescue\b|\bis(?:digit|numeric|decimal|alpha|alnum)\s*\("
    r"|\bisNaN\s*\(|\bNumber\.is(?:Finite|Integer|NaN)\s*\(|\bhasNext\w*\s*\(|\.test\s*\("
    r"|\bre\.(?:match|fullmatch|search)\s*\(|\bvalidat\w*|\berr\s*!=\s*nil|\.is_ok\s*\("
    r"|\bscanf\s*\([^)]*\)\s*(?:!=|==|<|>)|\bmatch\?\s*\(|=~"
)

# ── Resources ──────────────────────────────────────────────────────

_RESOURCES: Tuple[Tuple["re.Pattern", str], ...] = (
    (re.compile(r"(?P<name>[A-Za-z_]\w*)\s*=\s*open\s*\("), r"\b{name}\.close\s*\("),
    (
        re.compile(
            r"(?P<name>[A-Za-z_]\w*)\s*=\s*new\s+(?:FileInputStream|FileOutputStream|FileReader|"
            r"FileWriter|BufferedReader|BufferedWriter|PrintWriter|Scanner|Socket|ServerSocket|"
            r"RandomAccessFile|ZipFile)\b"
        ),
        r"\b{name}\.close\s*\(",
    ),
    (re.compile(r"(?P<name>[A-Za-z_]\w*)\s*=\s*(?:\([^)]*\)\s*)?fopen\s*\("), r"\bfclose\s*\(\s*{name}\b"),
    (
        re.compile(r"(?P<name>[A-Za-z_]\w*)\s*=\s*(?:\([^)]*\)\s*)?(?:malloc|calloc|realloc)\s*\("),
        r"\bfree\s*\(\s*{name}\b",
    ),
    (
        re.compile(
            r"(?P<name>[A-Za-z_]\w*)\s*,\s*\w+\s*:?=\s*(?:os\.(?:Open|Create|OpenFile)|net\.Dial\w*|sql\.Open)\s*\("
        ),
        r"\b{name}\.Close\s*\(",
    ),
    (
        re.compile(
            r"(?P<name>[A-Za-z_$][\w$]*)\s*=\s*fs\.(?:openSync|createReadStream|createWriteStream)\s*\("
        ),
        r"\b{name}\.(?:close|end|destroy)\s*\(|\bfs\.closeSync\s*\(\s*{name}\b",
    ),
    (
        re.compile(
            r"(?P<name>[A-Za-z_]\w*)\s*=\s*(?:socket\.socket|sqlite3\.connect|psycopg2\.connect)\s*\("
        ),
        r"\b{name}\.close\s*\(",
    ),
)
_MANAGED_ACQUISITION = re.compile(r"\btry\s*\(|\bwith\b|\busing\s*\(|\bdefer\b")

# ── Dead code ──────────────────────────────────────────────────────

_TERMINATOR = re.compile(
    r"^(?P<kw>return|break|continue|throw|raise|panic|os\.Exit|sys\.exit|System\.exit)\b"
)
_CONTINUATION = re.compile(
    r"^(?:[}\])]|case\b|default\b|else\b|elif\b|elsif\b|except\b|catch\b|finally\b|end\b"
    r"|rescue\b|ensure\b|when\b|#)"
)
_OPEN_ENDINGS = ("(", "[", "{", ",", "\\", "+", "-", "*", "/", "=", "&", "|", ".", "?", ":")


def _term(text: str) -> str:
    return r"(?<![\w$.])" + re.escape(text) + r"(?![\w$])"


def _compact(code: str) -> str:
    return re.sub(r"\s*([.()\[\]])\s*", r"\1", code)


def _truthiness_check(term: str) -> str:
    return (
        r"\b(?:if|elif|while|unless|assert|guard)\b[\s(!]*(?:not\s+)?" + term
        + r"\s*(?:\)|:|\{|&&|\|\||\band\b|\bor\b|\belse\b|\bthen\b|$)"
    )


class RiskScanner:
    """Runs the ordered risk rules over one preprocessed unit."""

    def __init__(
        self,
        source: PreprocessedSource,
        block_map: BlockMap,
        functions: Sequence[FunctionSpan],
        nesting: NestingResult,
        nesting_warn_depth: int = 3,
        nesting_major_depth: int = 5,
    ):
        self.source = source
        self.profile = source.profile
        self.block_map = block_map
        self.functions = tuple(functions)
        self.nesting = nesting
        self.nesting_warn_depth = nesting_warn_depth
        self.nesting_major_depth = nesting_major_depth
        self.code_lines = [ln for ln in source.lines if ln.has_code and not self._is_directive(ln)]

    @property
    def rules(self) -> List[Callable[[], List[Issue]]]:
        return [
            self.check_division,
            self.check_index,
            self.check_dereference,
            self.check_risky_calls,
            self.check_input_validation,
            self.check_resources,
            self.check_nesting,
            self.check_dead_code,
        ]

    def scan(self) -> List[Issue]:
        issues: List[Issue] = []
        for rule in self.rules:
            issues.extend(rule())
        logger.debug(f"risk scan: {len(issues)} issues")
        return issues

    # ── helpers ────────────────────────────────────────────────────

    def _is_directive(self, line: SourceLine) -> bool:
        prefix = self.profile.directive_prefix
        return bool(prefix) and line.stripped.startswith(prefix)

    def _scope(self, line: int) -> List[SourceLine]:
        fn = enclosing_function(self.functions, line)
        if fn is None:
            return self.code_lines
        return [ln for ln in self.code_lines if fn.contains(ln.number)]

    def _guarded(self, patterns: Iterable[str], scope: Iterable[SourceLine], upto: int) -> bool:
        compiled = [re.compile(p) for p in patterns]
        for ln in scope:
            if ln.number > upto:
                break
            compact = _compact(ln.code)
            if any(p.search(compact) for p in compiled):
                return True
        return False

    def _issue(
        self,
        category: IssueCategory,
        severity: Severity,
        description: str,
        line: SourceLine,
        rule: str,
    ) -> Issue:
        return new_issue(
            category,
            severity,
            description,
            line=line.number,
            rule=rule,
            context=context_tags(line.number, self.block_map, self.functions),
            snippet=line.raw,
        )

    def _scope_key(self, line: int) -> Optional[int]:
        fn = enclosing_function(self.functions, line)
        return fn.start_line if fn else None

    # ── rules ──────────────────────────────────────────────────────

    def check_division(self) -> List[Issue]:
        """Division or modulo by a value that may be zero."""
        issues: List[Issue] = []
        reported: Set[Tuple[Optional[int], str]] = set()

        for line in self.code_lines:
            code = line.code
            for match in _DIVISION.finditer(code):
                if _REGEX_LITERAL_CONTEXT.search(code[:match.start("op")]):
                    continue
                divisor = match.group("divisor")
                if divisor == "(":
                    divisor = _balanced(code, match.start("divisor"))
                    if divisor is None or _SAFE_DIVISOR_EXPR.search(divisor):
                        continue
                    # `fmt % (a, b)` formats a string
                    if match.group("op") == "%" and _has_top_level_comma(divisor):
                        continue
                divisor = re.sub(r"\s+", "", divisor)

                value = _literal_value(divisor)
                if value is not None:
                    if value != 0.0:
                        continue
                    description = "Division by literal zero always fails at runtime"
                else:
                    terms = _divisor_terms(divisor)
                    if not terms:
                        continue
                    if self._zero_guarded(terms, line):
                        continue
                    description = f"Unchecked division by '{divisor}' fails when it is zero"

                key = (self._scope_key(line.number), divisor)
                if key in reported:
                    continue
                reported.add(key)
                issues.append(
                    self._issue(IssueCategory.RUNTIME, Severity.CRITICAL, description, line, RULE_DIVISION)
                )
        return issues

    def _zero_guarded(self, terms: Sequence[str], line: SourceLine) -> bool:
        patterns: List[str] = []
        for text in terms:
            t = _term(_compact(text))
            patterns.extend([
                t + r"\s*(?:!==?|===?|>=?|<=?)\s*-?\d",
                r"\d\s*(?:!==?|===?|>=?|<=?)\s*" + t,
                _truthiness_check(t),
                t + r"\s*(?:&&|\band\b|\?(?![.?]))",
                r"\bmax\s*\([^)]*" + t,
                t + r"\s*(?:\|\||\bor\b|\?\?)\s*[1-9]",
            ])
        return self._guarded(patterns, self._scope(line.number), line.number)

    def check_index(self) -> List[Issue]:
        """Indexed access whose index is neither loop-bounded nor range-checked."""
        issues: List[Issue] = []
        reported: Set[Tuple[Optional[int], str, str]] = set()

        for line in self.code_lines:
            if _C_ARRAY_DECLARATION.match(line.code):
                continue
            for match in _INDEX.finditer(line.code):
                recv, idx = match.group("recv"), match.group("idx")
                offset = re.sub(r"\s+", "", match.group("offset") or "")
                if recv in _TYPE_NAMES or idx in _TYPE_NAMES or recv[:1].isupper():
                    continue
                if recv.split(".")[0] in self.profile.safe_globals - {"self", "this"}:
                    continue
                key = (self._scope_key(line.number), recv, idx + offset)
                if key in reported:
                    continue
                scope = self._scope(line.number)
                if self._is_mapping(recv, scope):
                    continue
                if self._index_guarded(recv, idx, offset, line, scope):
                    continue
                reported.add(key)
                if offset:
                    description = f"Index '{idx}{offset}' on '{recv}' may fall outside its bounds"
                else:
                    description = f"Index '{idx}' used on '{recv}' without a bounds check"
                issues.append(
                    self._issue(IssueCategory.RUNTIME, Severity.MAJOR, description, line, RULE_INDEX)
                )
        return issues

    def _is_mapping(self, recv: str, scope: Sequence[SourceLine]) -> bool:
        pattern = re.compile(r"(?<![\w$])" + re.escape(recv) + _MAPPING_INIT)
        candidates = list(scope) + [ln for ln in self.code_lines if ln.indent == 0]
        return any(pattern.search(ln.code) for ln in candidates)

    def _index_guarded(
        self, recv: str, idx: str, offset: str, line: SourceLine, scope: Sequence[SourceLine]
    ) -> bool:
        i = _term(idx)
        r = _term(recv)
        if offset.startswith("-"):
            patterns = [
                r"\brange\(\s*[1-9]",
                r"\bfor\s*\(.*" + i + r"\s*=\s*[1-9]",
                i + r"\s*[-+]\s*\d+\s*(?:<|<=|>|>=)",
                i + r"\s*(?:>|>=)\s*[1-9]",
            ]
        elif offset:
            patterns = [
                r"\brange\(.*-\s*\d",
                i + r"\s*[-+]\s*\d+\s*(?:<|<=|>|>=)",
                i + r"\s*(?:<|<=)\s*[\w$.()]+\s*-\s*\d",
            ]
        else:
            patterns = [
                r"\bfor\s*\(\s*(?:let|var|const|int|size_t|auto|long|unsigned)?\s*" + i + r"\s*=",
                r"\bfor\s+" + i + r"\s+in\b",
                r"\bfor\s+\(?\s*" + i + r"\s*,",
                r"\bfor\s*\(\s*(?:const|let|var)\s+" + i + r"\s+(?:in|of)\b",
                r"\bfor\s+" + i + r"\s*(?:,\s*\w+\s*)?:?=\s*range\b",
                r"\|\s*\w+\s*,\s*" + i + r"\s*\|",
                r"forEach\(\s*\(?\s*\w+\s*,\s*" + i,
                i + r"\s*(?:<|<=|>|>=)(?![<>])",
                r"(?<![<>])(?:<|<=|>|>=)\s*" + i,
                i + r"\s+(?:not\s+)?in\s+",
                r"\.(?:has|containsKey|hasOwnProperty|includes|contains|get|count)\(\s*" + i,
                r"\b(?:if|while)\b[\s(!]*(?:not\s+)?" + r + r"\s*(?:\.length\s*)?(?:\)|:|\{|&&|\band\b)",
            ]
        return self._guarded(patterns, scope, line.number)

    def check_dereference(self) -> List[Issue]:
        """Member access on a possibly-null receiver with no null check before it."""
        issues: List[Issue] = []
        if not self.profile.null_literals:
            return issues

        reported: Set[Tuple[Optional[int], str]] = set()
        for fn_start, scope, candidates in self._nullable_candidates():
            for name, since in candidates:
                if name in self.profile.safe_globals:
                    continue
                access = self._member_access(name)
                for line in scope:
                    if line.number < since:
                        continue
                    match = access.search(line.code)
                    if not match:
                        continue
                    if self._null_checked(name, scope, line.number):
                        break
                    key = (fn_start, name)
                    if key in reported:
                        break
                    reported.add(key)
                    crash_prone = any(word in line.raw.lower() for word in _CRASH_WORDS)
                    severity = Severity.CRITICAL if crash_prone else Severity.MAJOR
                    description = f"'{name}' is dereferenced without a null check"
                    if crash_prone:
                        description += " on a crash-prone path"
                    issues.append(
                        self._issue(IssueCategory.RUNTIME, severity, description, line, RULE_DEREFERENCE)
                    )
                    break
        return issues

    def _nullable_candidates(self):
        scopes: List[Tuple[Optional[int], List[SourceLine], List[Tuple[str, int]]]] = []
        if self.functions:
            for fn in self.functions:
                scope = [ln for ln in self.code_lines if fn.contains(ln.number)]
                candidates = [(p, fn.start_line + 1) for p in fn.nullable_parameters]
                candidates.extend(self._nullable_locals(scope))
                scopes.append((fn.start_line, scope, candidates))
        else:
            scopes.append((None, self.code_lines, self._nullable_locals(self.code_lines)))
        return scopes

    def _nullable_locals(self, scope: Sequence[SourceLine]) -> List[Tuple[str, int]]:
        found: List[Tuple[str, int]] = []
        seen: Set[str] = set()
        for line in scope:
            match = _ASSIGNMENT.match(line.stripped)
            if not match or match.group("name") in seen:
                continue
            if _NULLABLE_VALUE.search(match.group("value")):
                seen.add(match.group("name"))
                found.append((match.group("name"), line.number + 1))
        return found

    def _member_access(self, name: str) -> "re.Pattern":
        operators = "|".join(re.escape(op) for op in self.profile.member_operators)
        return re.compile(r"(?<![\w$.?&])" + re.escape(name) + r"\s*(?:" + operators + r")\s*[A-Za-z_$]")

    def _null_checked(self, name: str, scope: Sequence[SourceLine], upto: int) -> bool:
        t = _term(name)
        patterns = [
            t + r"\s*(?:!==?|===?|\bis\s+not\b|\bis\b)\s*" + _NULLS,
            _NULLS + r"\s*(?:!==?|===?)\s*" + t,
            _truthiness_check(t),
            t + r"\s*(?:&&|\band\b|\?\?|\|\||\bor\b)",
            r"(?:requireNonNull|isinstance|assert|typeof|nonNull|hasattr|isset)\s*\(?\s*" + t,
            r"@(?:NonNull|NotNull|Nonnull)\b[^,)]*" + t,
            t + r"\s*(?:\?\.|&\.)",
            t + r"\.(?:is_none|is_some|nil\?)",
            r"^\s*" + re.escape(name) + r"\s*(?::=|=)(?!=)\s*(?!" + _NULLS + r"\b)(?!.*(?:\.get|\.find|getenv)\()",
        ]
        return self._guarded(patterns, scope, upto)

    def check_risky_calls(self) -> List[Issue]:
        """Parse, file and network calls outside any error handling."""
        issues: List[Issue] = []
        for index, line in enumerate(self.code_lines):
            if self.block_map.in_error_handling(line.number):
                continue
            for _kind, pattern, description in _RISKY_CALLS:
                if not pattern.search(line.code):
                    continue
                window = self.code_lines[index:index + 1 + _ERROR_CHECK_WINDOW]
                if any(_ERROR_HANDLED.search(ln.code) for ln in window):
                    break
                issues.append(
                    self._issue(IssueCategory.EXCEPTION, Severity.MAJOR, description, line, RULE_RISKY_CALL)
                )
                break
        return issues

    def check_input_validation(self) -> List[Issue]:
        """User input read in a unit that never validates anything."""
        reads = [ln for ln in self.code_lines if _INPUT_READ.search(ln.code)]
        if not reads:
            return []
        if any(_INPUT_VALIDATION.search(ln.code) for ln in self.code_lines):
            return []
        return [
            self._issue(
                IssueCategory.EXCEPTION,
                Severity.MAJOR,
                "User input is used without validation",
                line,
                RULE_INPUT,
            )
            for line in reads
        ]

    def check_resources(self) -> List[Issue]:
        """Resources acquired without a matching close/free."""
        issues: List[Issue] = []
        for line in self.code_lines:
            if _MANAGED_ACQUISITION.search(line.code):
                continue
            for pattern, release in _RESOURCES:
                match = pattern.search(line.code)
                if not match:
                    continue
                name = match.group("name")
                released = re.compile(release.format(name=re.escape(name)))
                if any(released.search(ln.code) for ln in self.code_lines):
                    break
                issues.append(
                    self._issue(
                        IssueCategory.RUNTIME,
                        Severity.MAJOR,
                        f"'{name}' is acquired but never released",
                        line,
                        RULE_RESOURCE,
                    )
                )
                break
        return issues

    def check_nesting(self) -> List[Issue]:
        """Functions (or top-level code) nested deeper than the warning depth."""
        issues: List[Issue] = []
        flagged_lines: Set[int] = set()

        for fn in sorted(self.functions, key=lambda f: f.length):
            measured = self.nesting.for_function(fn)
            if measured.depth <= self.nesting_warn_depth or measured.deepest_line in flagged_lines:
                continue
            flagged_lines.add(measured.deepest_line)
            issues.append(self._nesting_issue(measured.depth, measured.deepest_line, f"'{fn.name}'"))

        depths = self.nesting.line_depths
        top_level = [
            (depths[n - 1], n)
            for n in range(1, len(depths) + 1)
            if enclosing_function(self.functions, n) is None
        ]
        if top_level:
            depth, line = max(top_level, key=lambda pair: (pair[0], -pair[1]))
            if depth > self.nesting_warn_depth and line not in flagged_lines:
                issues.append(self._nesting_issue(depth, line, "top-level code"))

        return issues

    def _nesting_issue(self, depth: int, line_number: int, where: str) -> Issue:
        severity = Severity.MAJOR if depth >= self.nesting_major_depth else Severity.MINOR
        line = self.source.line(line_number)
        return new_issue(
            IssueCategory.STRUCTURE,
            severity,
            f"Excessive nesting depth of {depth} levels in {where}",
            line=line_number,
            rule=RULE_NESTING,
            context=context_tags(line_number, self.block_map, self.functions),
            snippet=line.raw,
        )

    def check_dead_code(self) -> List[Issue]:
        """Statements that follow return/break/continue/throw at the same level."""
        issues: List[Issue] = []
        for index, line in enumerate(self.code_lines[:-1]):
            match = _TERMINATOR.match(line.stripped)
            if not match or line.stripped.endswith(_OPEN_ENDINGS):
                continue
            following = self.code_lines[index + 1]
            if following.indent != line.indent or _CONTINUATION.match(following.stripped):
                continue
            issues.append(
                self._issue(
                    IssueCategory.STRUCTURE,
                    Severity.MINOR,
                    f"Unreachable code after '{match.group('kw')}'",
                    following,
                    RULE_DEAD_CODE,
                )
            )
        return issues


def _balanced(code: str, start: int) -> Optional[str]:
    depth = 0
    for pos in range(start, len(code)):
        if code[pos] == "(":
            depth += 1
        elif code[pos] == ")":
            depth -= 1
            if depth == 0:
                return code[start:pos + 1]
    return None


def _has_top_level_comma(expr: str) -> bool:
    depth = 0
    for ch in expr[1:-1]:
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth -= 1
        elif ch == "," and depth == 0:
            return True
    return False


def _literal_value(divisor: str) -> Optional[float]:
    """Numeric value of a (possibly parenthesized) literal divisor, else None."""
    text = divisor
    while text.startswith("(") and text.endswith(")"):
        text = text[1:-1]
    if not _NUMBER_LITERAL.fullmatch(text):
        return None
    text = text.replace("_", "")
    try:
        if text[:2].lower() in ("0x", "0b", "0o"):
            return float(int(text.rstrip("uUlL"), 0))
        return float(text.rstrip("fFlLuUdD"))
    except ValueError:
        return None


def _divisor_terms(divisor: str) -> List[str]:
    """The divisor itself plus the identifiers a guard could name instead.

    Callees (``len``, ``max``) and receivers (``self``) are not terms; a
    size member (``items.length``) gives way to its owner.
    """
    names: List[Tuple[str, bool]] = []
    for match in re.finditer(r"[A-Za-z_$][\w$]*", divisor):
        word = match.group(0)
        if word in _RECEIVER_WORDS or divisor[match.end():].lstrip().startswith("("):
            continue
        names.append((word, divisor[:match.start()].rstrip().endswith(".")))
    if len(names) > 1:
        names = [(w, member) for w, member in names if not (member and w in _SIZE_MEMBERS)]
    idents = [word for word, _ in names]
    if not idents:
        return []
    terms = [divisor]
    if divisor.startswith("(") and divisor.endswith(")"):
        terms.append(divisor[1:-1])
    terms.extend(idents)
    return terms


def scan_risks(
    source: PreprocessedSource,
    block_map: BlockMap,
    functions: Sequence[FunctionSpan],
    nesting: NestingResult,
    nesting_warn_depth: int = 3,
    nesting_major_depth: int = 5,
) -> List[Issue]:
    """Run every risk rule in order and return the issues found."""
    return RiskScanner(
        source,
        block_map,
        functions,
        nesting,
        nesting_warn_depth=nesting_warn_depth,
        nesting_major_depth=nesting_major_depth,
    ).scan()
