"""Shared test fixtures for Quality Insight tests."""

import pytest

from quality_insight.config import AnalysisConfig
from quality_insight.scanning import LANGUAGES, build_block_map, preprocess


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


def _prepare(text, language="generic"):
    source = preprocess(text, LANGUAGES[language])
    return source, build_block_map(source)


@pytest.fixture
def prepare():
    """Preprocess text and build its block map: prepare(text, language) -> (source, block_map)."""
    return _prepare


@pytest.fixture
def default_config():
    """Sequential, uncached engine configuration."""
    return AnalysisConfig()


@pytest.fixture
def guarded_python():
    """Small documented Python function with a zero guard."""
    return (
        "def safe_divide(total, count):\n"
        '    """Divide total by count, returning 0 when count is zero."""\n'
        "    if count == 0:\n"
        "        return 0\n"
        "    return total / count\n"
    )


@pytest.fixture
def unguarded_division():
    return "result = total / count\n"


@pytest.fixture
def deeply_nested_function():
    """A 300-line JavaScript function with six nested ifs."""
    lines = ["function process() {"]
    lines.append("  let counter0 = start;")
    for i in range(1, 285):
        lines.append(f"  let counter{i} = counter{i - 1} + step;")
    indent = "  "
    for level in range(6):
        lines.append(f"{indent}if (ready{level}) {{")
        indent += "  "
    lines.append(f"{indent}finish(counter284);")
    for level in range(6):
        indent = indent[:-2]
        lines.append(f"{indent}}}")
    lines.append("}")
    return "\n".join(lines) + "\n"


@pytest.fixture
def duplicated_block():
    """Ten distinct statements followed by the same ten statements."""
    block = [
        f"accumulated_value_{i} = compute_something_expensive(input_{i}, factor_{i})"
        for i in range(10)
    ]
    return "\n".join(block + block) + "\n"
