"""Tests for language profiles and lookup."""

import re

import pytest

from quality_insight.exceptions import UnsupportedLanguageError
from quality_insight.scanning import (
    LANGUAGES,
    get_language_profile,
    resolve_profile,
    supported_languages,
)


class TestLookup:
    """Strict and lenient profile lookup."""

    def test_alias_resolves(self):
        assert get_language_profile("py").name == "python"
        assert get_language_profile("TS").name == "javascript"
        assert get_language_profile("golang").name == "go"

    def test_name_resolves_to_itself(self):
        for name in LANGUAGES:
            assert get_language_profile(name).name == name

    def test_strict_lookup_raises(self):
        with pytest.raises(UnsupportedLanguageError) as exc_info:
            get_language_profile("cobol")
        assert exc_info.value.language == "cobol"
        assert "python" in exc_info.value.supported_languages

    def test_lenient_lookup_falls_back(self):
        assert resolve_profile("cobol").name == "generic"
        assert resolve_profile(None).name == "generic"
        assert resolve_profile("").name == "generic"

    def test_supported_languages_sorted(self):
        names = supported_languages()
        assert names == sorted(names)
        assert {"python", "javascript", "java", "c", "go", "rust", "ruby", "generic"} <= set(names)


class TestProfiles:
    """Every profile is internally consistent."""

    @pytest.mark.parametrize("name", sorted(LANGUAGES))
    def test_function_patterns_name_groups(self, name):
        for pattern in LANGUAGES[name].function_patterns:
            groups = re.compile(pattern).groupindex
            assert "name" in groups
            assert "params" in groups

    @pytest.mark.parametrize("name", sorted(LANGUAGES))
    def test_class_patterns_name_group(self, name):
        for pattern in LANGUAGES[name].class_patterns:
            assert "name" in re.compile(pattern).groupindex

    @pytest.mark.parametrize("name", sorted(LANGUAGES))
    def test_decision_patterns_compile(self, name):
        for pattern in LANGUAGES[name].decision_patterns:
            re.compile(pattern)

    def test_nesting_modes(self):
        assert LANGUAGES["python"].nesting_mode == "indent"
        assert LANGUAGES["ruby"].nesting_mode == "keyword"
        assert LANGUAGES["java"].nesting_mode == "brace"
