"""Shared fixtures for Tessera tests."""

from pathlib import Path

import pytest

from tessera import Grammar, compile_grammar, grammar_from_file

FIXTURES = Path(__file__).resolve().parent / "fixtures"
OSF_GRAMMAR_PATH = FIXTURES / "osf.tmLanguage.json"


@pytest.fixture(scope="session")
def osf_grammar() -> Grammar:
    """The OSF dialogue grammar, compiled once per session."""
    return grammar_from_file(OSF_GRAMMAR_PATH)


@pytest.fixture(scope="session")
def block_grammar() -> Grammar:
    """Small grammar with nested, line-spanning regions."""
    return compile_grammar(
        {
            "scopeName": "source.block",
            "patterns": [{"include": "#block"}, {"include": "#word"}],
            "repository": {
                "block": {
                    "begin": r"\{",
                    "end": r"\}",
                    "name": "meta.block",
                    "beginCaptures": {"0": {"name": "punctuation.block.begin"}},
                    "endCaptures": {"0": {"name": "punctuation.block.end"}},
                    "patterns": [{"include": "$self"}],
                },
                "word": {"match": r"[a-z]+", "name": "variable"},
            },
        }
    )
