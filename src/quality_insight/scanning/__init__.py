"""Language profiles, lexical preprocessing and block structure."""

from .blocks import BlockMap, build_block_map
from .languages import LANGUAGES, LanguageProfile, get_language_profile, resolve_profile, supported_languages
from .preprocessor import PreprocessedSource, SourceLine, preprocess

__all__ = [
    "BlockMap",
    "build_block_map",
    "LANGUAGES",
    "LanguageProfile",
    "get_language_profile",
    "resolve_profile",
    "supported_languages",
    "PreprocessedSource",
    "SourceLine",
    "preprocess",
]
