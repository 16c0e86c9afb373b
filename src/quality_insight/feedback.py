"""LLM collaborators: narrative feedback, test case generation and dry runs.

These talk to an OpenAI-compatible chat endpoint and sit outside the
analysis engine. Every public function degrades to a placeholder value
instead of raising; failures are logged at WARNING.
"""

import json
import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from openai import OpenAI, OpenAIError

from .config import AnalysisConfig
from .exceptions import CollaboratorError
from .logging_config import get_logger
from .models import AnalysisReport

logger = get_logger(__name__)

NO_SUGGESTIONS = "No suggestions generated."
EXECUTION_FAILED = "Execution Failed"
API_KEY_ENV = "OPENAI_API_KEY"

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")
_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


@dataclass(frozen=True)
class NarrativeFeedback:
    suggestions: str = NO_SUGGESTIONS
    best_practices: List[str] = field(default_factory=list)
    corrected_code: Optional[str] = None


@dataclass(frozen=True)
class TestCase:
    __test__ = False  # not a pytest class

    input: str
    expected_output: str
    description: str = ""
    actual_output: Optional[str] = None
    passed: Optional[bool] = None


def create_client(config: Optional[AnalysisConfig] = None) -> OpenAI:
    """Build a chat client from the environment and ``config``.

    Raises:
        CollaboratorError: If the client cannot be constructed (e.g. no API key)
    """
    config = config or AnalysisConfig()
    try:
        return OpenAI(
            api_key=os.environ.get(API_KEY_ENV),
            base_url=config.llm_base_url,
            timeout=config.llm_timeout_seconds,
        )
    except OpenAIError as e:
        raise CollaboratorError("create_client", str(e)) from e


def chat(
    messages: List[Dict[str, str]],
    client: Optional[OpenAI] = None,
    config: Optional[AnalysisConfig] = None,
    temperature: float = 0.2,
) -> str:
    """
    Send messages and return the response text.

    Raises:
        CollaboratorError: On transport errors or an empty response
    """
    config = config or AnalysisConfig()
    client = client or create_client(config)
    try:
        response = client.chat.completions.create(
            model=config.llm_model,
            messages=messages,
            temperature=temperature,
        )
        content = response.choices[0].message.content
    except (OpenAIError, IndexError, AttributeError) as e:
        raise CollaboratorError("chat", str(e)) from e
    if not content or not content.strip():
        raise CollaboratorError("chat", "empty response")
    return content.strip()


def _parse_json_object(text: str) -> Dict[str, Any]:
    cleaned = _CODE_FENCE.sub("", text.strip())
    match = _JSON_OBJECT.search(cleaned)
    if not match:
        raise CollaboratorError("parse", "no JSON object in response")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise CollaboratorError("parse", str(e)) from e
    if not isinstance(data, dict):
        raise CollaboratorError("parse", "response is not a JSON object")
    return data


def _report_summary(report: AnalysisReport) -> str:
    lines = [
        f"Language: {report.language}",
        f"Complexity: {report.complexity.grade.value} ({report.complexity.reason})",
        f"Maintainability: {report.maintainability.grade.value} ({report.maintainability.reason})",
        f"Reliability: {report.reliability.grade.value} ({report.reliability.reason})",
        f"Technical debt: {report.technical_debt.debt_ratio_percent:.1f}%",
        "Issues:",
    ]
    lines.extend(f"- {detail}" for detail in report.violations.details[:20])
    return "\n".join(lines)


def generate_narrative_feedback(
    code: str,
    report: AnalysisReport,
    client: Optional[OpenAI] = None,
    config: Optional[AnalysisConfig] = None,
) -> NarrativeFeedback:
    """Ask a reviewer model for suggestions and, if possible, corrected code."""
    system = (
        "You are a senior software code reviewer. Based on the code and the analysis "
        "summary, reply with a JSON object: "
        '{"suggestions": "<markdown summary of key issues>", '
        '"best_practices": ["..."], "corrected_code": "<full corrected code or empty>"}. '
        "Only suggest valid improvements."
    )
    user = f"{_report_summary(report)}\n\nCode:\n{code}"
    try:
        data = _parse_json_object(chat(
            [{"role": "system", "content": system}, {"role": "user", "content": user}],
            client=client,
            config=config,
        ))
    except CollaboratorError as e:
        logger.warning(f"Narrative feedback unavailable: {e}")
        return NarrativeFeedback()

    suggestions = data.get("suggestions")
    practices = data.get("best_practices")
    corrected = data.get("corrected_code")
    return NarrativeFeedback(
        suggestions=suggestions if isinstance(suggestions, str) and suggestions.strip() else NO_SUGGESTIONS,
        best_practices=[p for p in practices if isinstance(p, str)] if isinstance(practices, list) else [],
        corrected_code=corrected if isinstance(corrected, str) and corrected.strip() else None,
    )


def generate_test_cases(
    code: str,
    language: str,
    client: Optional[OpenAI] = None,
    config: Optional[AnalysisConfig] = None,
    count: int = 3,
) -> List[TestCase]:
    """Ask for ``count`` test cases (simple, edge and corner cases first)."""
    system = (
        f"You are a test case generator. For the following {language} code, generate "
        f"{count} test cases: a simple case, an edge case and a corner case first. Reply "
        'with a JSON object: {"test_cases": [{"input": "...", "expected_output": "...", '
        '"description": "..."}]}.'
    )
    try:
        data = _parse_json_object(chat(
            [{"role": "system", "content": system}, {"role": "user", "content": code}],
            client=client,
            config=config,
        ))
    except CollaboratorError as e:
        logger.warning(f"Test case generation failed: {e}")
        return []

    entries = data.get("test_cases")
    if not isinstance(entries, list):
        logger.warning("Test case generation returned no test case list")
        return []

    cases: List[TestCase] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        given = entry.get("input")
        expected = entry.get("expected_output")
        if given is None or expected is None:
            continue
        cases.append(TestCase(
            input=str(given),
            expected_output=str(expected),
            description=str(entry.get("description") or ""),
        ))
    return cases[:count]


def execute_against_reference(
    code: str,
    input: str,
    language: str = "generic",
    client: Optional[OpenAI] = None,
    config: Optional[AnalysisConfig] = None,
) -> str:
    """Simulated execution: the model dry-runs ``code`` on ``input``."""
    system = (
        f"You are a code dry-runner. Simulate executing the following {language} code "
        "with the provided input and return only the output. Do not explain and do not "
        "show code."
    )
    user = f"Code:\n{code}\n\nInput:\n{input}"
    try:
        return chat(
            [{"role": "system", "content": system}, {"role": "user", "content": user}],
            client=client,
            config=config,
            temperature=0.0,
        )
    except CollaboratorError as e:
        logger.warning(f"Reference execution failed: {e}")
        return EXECUTION_FAILED


def _normalize_output(output: str) -> str:
    return re.sub(r"\s+", "", output).lower()


def evaluate_test_cases(
    code: str,
    language: str,
    client: Optional[OpenAI] = None,
    config: Optional[AnalysisConfig] = None,
) -> List[TestCase]:
    """Generate test cases, dry-run each one and mark it passed or failed.

    Outputs are compared ignoring whitespace and case.
    """
    evaluated: List[TestCase] = []
    for case in generate_test_cases(code, language, client=client, config=config):
        actual = execute_against_reference(
            code, case.input, language=language, client=client, config=config
        )
        evaluated.append(TestCase(
            input=case.input,
            expected_output=case.expected_output,
            description=case.description,
            actual_output=actual,
            passed=actual != EXECUTION_FAILED
            and _normalize_output(actual) == _normalize_output(case.expected_output),
        ))
    return evaluated
