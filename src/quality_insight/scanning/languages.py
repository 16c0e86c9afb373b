"""Language profiles: the single source of truth for all language patterns.

Adding a new language:
  1. Add a LanguageProfile entry to LANGUAGES below.
  2. Optionally register extra tags in its ``aliases``.
Every detector reads its tokens from the profile, never from the tag.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from ..exceptions import UnsupportedLanguageError
from ..logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class LanguageProfile:
    """Everything the detectors need to know about a language."""

    name: str
    aliases: Tuple[str, ...] = ()

    # Lexical syntax
    line_comments: Tuple[str, ...] = ("//",)
    block_comments: Tuple[Tuple[str, str], ...] = (("/*", "*/"),)
    string_delimiters: Tuple[str, ...] = ('"', "'")
    multiline_delimiters: Tuple[str, ...] = ()
    escape_char: str = "\\"

    # Decision points; each regex match adds 1 to cyclomatic complexity.
    decision_patterns: List[str] = field(default_factory=list)

    # Function detection. Each regex must define the groups ``name`` and ``params``.
    function_patterns: List[str] = field(default_factory=list)

    # Class-like declarations. Each regex must define the group ``name``.
    class_patterns: List[str] = field(default_factory=list)

    # Block structure: "brace" ({ }), "indent" (trailing colon) or "keyword" (... end)
    nesting_mode: str = "brace"
    block_keywords: Dict[str, str] = field(default_factory=dict)

    # Parameters: where the name sits when there is no ``name: type`` annotation
    parameter_name_position: str = "first"  # "first" | "last"
    non_nullable_types: Tuple[str, ...] = ()
    nullable_type_markers: Tuple[str, ...] = ()
    parameters_nullable_by_default: bool = True

    null_literals: Tuple[str, ...] = ("null",)
    safe_globals: frozenset = frozenset()
    member_operators: Tuple[str, ...] = (".",)
    docstrings: bool = False
    directive_prefix: str = ""


# ── Re-usable building blocks ──────────────────────────────────────

_LOGICAL_OPS = [r"&&", r"\|\|"]
_TERNARY = r"(?<![<?])\?(?![.?:=>,)\]])(?!\s*(?:extends|super)\b)"

_C_FAMILY_DECISIONS = [
    r"\bif\b",
    r"\bfor\b",
    r"\bwhile\b",
    r"\bcase\b",
    r"\bdefault\s*:",
    r"\bcatch\b",
    *_LOGICAL_OPS,
    _TERNARY,
]

_BRACE_BLOCKS = {
    "if": "if",
    "else": "else",
    "for": "loop",
    "foreach": "loop",
    "while": "loop",
    "do": "loop",
    "switch": "switch",
    "try": "try",
    "catch": "catch",
    "finally": "finally",
}

_COMMON_JS_GLOBALS = frozenset({
    "console", "Math", "JSON", "Object", "Array", "Number", "String", "Boolean",
    "Promise", "Date", "Symbol", "Reflect", "Intl", "Map", "Set", "Error",
    "window", "document", "process", "module", "exports", "require",
    "globalThis", "navigator", "localStorage", "this", "super",
})

_C_PRIMITIVES = (
    "int", "long", "short", "char", "float", "double", "bool", "boolean",
    "byte", "unsigned", "signed", "size_t", "void", "uint8_t", "uint16_t",
    "uint32_t", "uint64_t", "int8_t", "int16_t", "int32_t", "int64_t",
)


# ── Language definitions ───────────────────────────────────────────

LANGUAGES: Dict[str, LanguageProfile] = {
    "python": LanguageProfile(
        name="python",
        aliases=("py", "python3", "py3"),
        line_comments=("#",),
        block_comments=(('"""', '"""'), ("'''", "'''")),
        string_delimiters=('"', "'"),
        decision_patterns=[
            r"\bif\b",
            r"\belif\b",
            r"\bfor\b",
            r"\bwhile\b",
            r"\bexcept\b",
            r"\bcase\b",
            r"\band\b",
            r"\bor\b",
        ],
        function_patterns=[
            r"^\s*(?:async\s+)?def\s+(?P<name>\w+)\s*\((?P<params>[^)]*)",
        ],
        class_patterns=[r"^\s*class\s+(?P<name>\w+)"],
        nesting_mode="indent",
        block_keywords={
            "if": "if",
            "elif": "else",
            "else": "else",
            "for": "loop",
            "while": "loop",
            "try": "try",
            "except": "catch",
            "finally": "finally",
            "match": "switch",
        },
        parameter_name_position="first",
        nullable_type_markers=("Optional", "None", "Any"),
        parameters_nullable_by_default=False,
        null_literals=("None",),
        safe_globals=frozenset({
            "self", "cls", "super", "os", "sys", "math", "re", "json", "str",
            "int", "float", "list", "dict", "set", "tuple", "bytes", "logging",
            "typing", "collections", "itertools", "functools", "datetime",
            "time", "random", "pathlib", "np", "pd",
        }),
        docstrings=True,
    ),
    "javascript": LanguageProfile(
        name="javascript",
        aliases=("js", "jsx", "typescript", "ts", "tsx", "node", "mjs"),
        string_delimiters=('"', "'"),
        multiline_delimiters=("`",),
        decision_patterns=[*_C_FAMILY_DECISIONS, r"\?\."],
        function_patterns=[
            r"\bfunction\s*\*?\s*(?P<name>[A-Za-z_$][\w$]*)\s*\((?P<params>[^)]*)\)",
            r"\b(?:const|let|var)\s+(?P<name>[A-Za-z_$][\w$]*)\s*(?::[^=]+)?=\s*(?:async\s+)?"
            r"(?:function\b[^(]*)?\((?P<params>[^)]*)\)\s*(?::\s*[^={]+)?(?:=>|\{)",
            r"\b(?:const|let|var)\s+(?P<name>[A-Za-z_$][\w$]*)\s*=\s*(?:async\s+)?"
            r"(?P<params>[A-Za-z_$][\w$]*)\s*=>",
            r"^\s*(?:(?:public|private|protected|static|async|readonly|get|set)\s+)*"
            r"(?P<name>[A-Za-z_$][\w$]*)\s*\((?P<params>[^)]*)\)\s*(?::\s*[^{]+)?\{\s*$",
        ],
        class_patterns=[r"\b(?:class|interface|enum)\s+(?P<name>[A-Za-z_$][\w$]*)"],
        nesting_mode="brace",
        block_keywords=dict(_BRACE_BLOCKS),
        parameter_name_position="first",
        nullable_type_markers=("null", "undefined", "any", "?"),
        parameters_nullable_by_default=True,
        null_literals=("null", "undefined"),
        safe_globals=_COMMON_JS_GLOBALS,
    ),
    "java": LanguageProfile(
        name="java",
        aliases=("kotlin", "csharp", "c#", "cs", "scala"),
        string_delimiters=('"', "'"),
        decision_patterns=[*_C_FAMILY_DECISIONS, r"\bthrows\b"],
        function_patterns=[
            r"^\s*(?:@\w+\s+)*(?:(?:public|private|protected|static|final|abstract|"
            r"synchronized|native|default|override|virtual|async)\s+)*"
            r"(?:<[^>]+>\s+)?(?:[\w<>\[\],.?]+\s+)?(?P<name>\w+)\s*\((?P<params>[^)]*)\)"
            r"\s*(?:throws\s+[\w.,\s]+)?\s*\{?\s*$",
        ],
        class_patterns=[r"\b(?:class|interface|enum|record)\s+(?P<name>\w+)"],
        nesting_mode="brace",
        block_keywords=dict(_BRACE_BLOCKS),
        parameter_name_position="last",
        non_nullable_types=_C_PRIMITIVES,
        parameters_nullable_by_default=True,
        null_literals=("null",),
        safe_globals=frozenset({
            "System", "Math", "String", "Integer", "Long", "Double", "Boolean",
            "Arrays", "Collections", "List", "Map", "Set", "Objects", "Optional",
            "Thread", "this", "super", "Console",
        }),
    ),
    "c": LanguageProfile(
        name="c",
        aliases=("cpp", "c++", "cc", "cxx", "h", "hpp", "objective-c"),
        string_delimiters=('"', "'"),
        decision_patterns=list(_C_FAMILY_DECISIONS),
        function_patterns=[
            r"^\s*(?:(?:static|inline|extern|const|unsigned|signed|struct|virtual|"
            r"constexpr)\s+)*[\w:<>]+[\s*&]+(?P<name>[\w:~]+)\s*\((?P<params>[^)]*)\)"
            r"\s*(?:const\s*)?(?:noexcept\s*)?\{?\s*$",
        ],
        class_patterns=[r"^\s*(?:typedef\s+)?(?:struct|class|union)\s+(?P<name>\w+)\s*\{?\s*$"],
        nesting_mode="brace",
        block_keywords=dict(_BRACE_BLOCKS),
        parameter_name_position="last",
        non_nullable_types=_C_PRIMITIVES,
        nullable_type_markers=("*",),
        parameters_nullable_by_default=False,
        null_literals=("NULL", "nullptr"),
        safe_globals=frozenset({"std", "this"}),
        member_operators=(".", "->"),
        directive_prefix="#",
    ),
    "go": LanguageProfile(
        name="go",
        aliases=("golang",),
        string_delimiters=('"', "'"),
        multiline_delimiters=("`",),
        decision_patterns=[
            r"\bif\b",
            r"\bfor\b",
            r"\bcase\b",
            r"\bdefault\s*:",
            *_LOGICAL_OPS,
        ],
        function_patterns=[
            r"^\s*func\s+(?:\([^)]*\)\s*)?(?P<name>\w+)\s*(?:\[[^\]]*\])?\s*\((?P<params>[^)]*)\)",
        ],
        class_patterns=[r"^\s*type\s+(?P<name>\w+)\s+(?:struct|interface)\b"],
        nesting_mode="brace",
        block_keywords={
            "if": "if",
            "else": "else",
            "for": "loop",
            "switch": "switch",
            "select": "switch",
        },
        parameter_name_position="first",
        nullable_type_markers=("*",),
        parameters_nullable_by_default=False,
        null_literals=("nil",),
        safe_globals=frozenset({
            "fmt", "os", "strings", "strconv", "errors", "time", "math", "http",
            "json", "log", "sync", "context", "io", "bytes", "sort",
        }),
    ),
    "rust": LanguageProfile(
        name="rust",
        aliases=("rs",),
        string_delimiters=('"',),
        decision_patterns=[
            r"\bif\b",
            r"\bfor\b",
            r"\bwhile\b",
            r"=>",
            *_LOGICAL_OPS,
        ],
        function_patterns=[
            r"^\s*(?:pub(?:\([^)]*\))?\s+)?(?:const\s+)?(?:async\s+)?(?:unsafe\s+)?"
            r"fn\s+(?P<name>\w+)\s*(?:<[^>]*>)?\s*\((?P<params>[^)]*)\)",
        ],
        class_patterns=[
            r"^\s*(?:pub(?:\([^)]*\))?\s+)?(?:struct|enum|trait)\s+(?P<name>\w+)",
        ],
        nesting_mode="brace",
        block_keywords={
            "if": "if",
            "else": "else",
            "for": "loop",
            "while": "loop",
            "loop": "loop",
            "match": "switch",
        },
        parameters_nullable_by_default=False,
        null_literals=(),
        safe_globals=frozenset({"self", "Self", "std", "Vec", "String", "Option", "Result", "Box"}),
    ),
    "ruby": LanguageProfile(
        name="ruby",
        aliases=("rb",),
        line_comments=("#",),
        block_comments=(("=begin", "=end"),),
        string_delimiters=('"', "'"),
        decision_patterns=[
            r"\bif\b",
            r"\belsif\b",
            r"\bunless\b",
            r"\bwhile\b",
            r"\buntil\b",
            r"\bfor\b",
            r"\bwhen\b",
            r"\brescue\b",
            r"\band\b",
            r"\bor\b",
            *_LOGICAL_OPS,
            _TERNARY,
        ],
        function_patterns=[
            r"^\s*def\s+(?:self\.)?(?P<name>[\w?!]+)\s*(?:\((?P<params>[^)]*)\))?",
        ],
        class_patterns=[r"^\s*(?:class|module)\s+(?P<name>[\w:]+)"],
        nesting_mode="keyword",
        block_keywords={
            "if": "if",
            "unless": "if",
            "elsif": "else",
            "else": "else",
            "while": "loop",
            "until": "loop",
            "for": "loop",
            "case": "switch",
            "begin": "try",
            "rescue": "catch",
            "ensure": "finally",
            "def": "other",
            "class": "other",
            "module": "other",
        },
        parameter_name_position="first",
        parameters_nullable_by_default=True,
        null_literals=("nil",),
        safe_globals=frozenset({"self", "Math", "File", "JSON", "Time", "Kernel"}),
    ),
    "generic": LanguageProfile(
        name="generic",
        aliases=("universal", "text", "plaintext", "unknown", ""),
        directive_prefix="#",
        line_comments=("//", "#"),
        string_delimiters=('"', "'"),
        multiline_delimiters=("`",),
        decision_patterns=[
            *_C_FAMILY_DECISIONS,
            r"\belif\b",
            r"\bexcept\b",
        ],
        function_patterns=[
            r"\bfunction\s+(?P<name>[A-Za-z_$][\w$]*)\s*\((?P<params>[^)]*)\)",
            r"^\s*(?:async\s+)?def\s+(?P<name>\w+)\s*\((?P<params>[^)]*)",
            r"^\s*func\s+(?:\([^)]*\)\s*)?(?P<name>\w+)\s*\((?P<params>[^)]*)\)",
            r"^\s*(?:(?:public|private|protected|static|final)\s+)*[\w<>\[\]]+\s+"
            r"(?P<name>\w+)\s*\((?P<params>[^)]*)\)\s*\{\s*$",
        ],
        class_patterns=[r"\b(?:class|struct|interface)\s+(?P<name>\w+)"],
        nesting_mode="brace",
        block_keywords=dict(_BRACE_BLOCKS),
        parameter_name_position="last",
        non_nullable_types=_C_PRIMITIVES,
        parameters_nullable_by_default=True,
        null_literals=("null", "undefined", "None", "nil", "NULL"),
        safe_globals=_COMMON_JS_GLOBALS | {"self", "System", "Math", "std"},
    ),
}

DEFAULT_LANGUAGE = "generic"

# Control-flow kinds that count towards nesting depth.
CONTROL_KINDS = frozenset({"if", "else", "loop", "switch", "try", "catch", "finally"})
CONDITIONAL_KINDS = frozenset({"if", "else", "switch"})
ERROR_HANDLING_KINDS = frozenset({"try", "catch", "finally"})

_ALIAS_INDEX: Dict[str, str] = {}
for _name, _profile in LANGUAGES.items():
    _ALIAS_INDEX[_name] = _name
    for _alias in _profile.aliases:
        _ALIAS_INDEX[_alias] = _name


def supported_languages() -> List[str]:
    return sorted(LANGUAGES)


def get_language_profile(tag: str) -> LanguageProfile:
    """Strict lookup by name or alias.

    Raises:
        UnsupportedLanguageError: If the tag is unknown
    """
    key = (tag or "").strip().lower()
    if key not in _ALIAS_INDEX:
        raise UnsupportedLanguageError(tag, supported_languages())
    return LANGUAGES[_ALIAS_INDEX[key]]


def resolve_profile(tag: str) -> LanguageProfile:
    """Lenient lookup: unknown or missing tags fall back to the generic profile."""
    try:
        return get_language_profile(tag)
    except UnsupportedLanguageError:
        logger.debug(f"Unknown language tag {tag!r}, using {DEFAULT_LANGUAGE} profile")
        return LANGUAGES[DEFAULT_LANGUAGE]
