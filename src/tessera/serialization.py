"""JSON I/O: grammar documents in, token snapshots out.

Grammars are authored elsewhere (often YAML) and shipped as the JSON
form of a TextMate grammar; converting between authoring formats is not
Tessera's job. This module reads that JSON and writes tokens in a
deterministic JSON shape (sorted keys) suitable for snapshot tests.

Example:
    from tessera.serialization import grammar_from_file, tokens_to_json

    grammar = grammar_from_file("syntaxes/osf.tmLanguage.json")
    result = grammar.tokenize_line("apiVersion: dialogue/v1")
    print(tokens_to_json(result.tokens, "apiVersion: dialogue/v1"))

Thread Safety:
    All functions are pure — safe to call from any thread.

"""

import json
from collections.abc import Iterable
from os import PathLike
from pathlib import Path
from typing import Any

from tessera.compiler import compile_grammar
from tessera.errors import GrammarError
from tessera.grammar import Grammar
from tessera.regex import RegexEngine
from tessera.tokens import LineTokens, ScopedToken


def load_raw_grammar(path: str | PathLike[str]) -> dict[str, Any]:
    """Read a JSON grammar document from disk.

    Raises:
        GrammarError: If the file is not valid JSON or not an object
        OSError: If the file cannot be read
    """
    text = Path(path).read_text(encoding="utf-8")
    return _parse(text, str(path))


def grammar_from_json(text: str, *, engine: RegexEngine | None = None) -> Grammar:
    """Compile a grammar from its JSON text."""
    return compile_grammar(_parse(text, None), engine=engine)


def grammar_from_file(
    path: str | PathLike[str],
    *,
    engine: RegexEngine | None = None,
) -> Grammar:
    """Compile a grammar from a JSON file."""
    return compile_grammar(load_raw_grammar(path), engine=engine)


def _parse(text: str, source: str | None) -> dict[str, Any]:
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise GrammarError(f"invalid JSON: {e}", source) from e
    if not isinstance(raw, dict):
        raise GrammarError("grammar document must be a JSON object", source)
    return raw


def token_to_dict(token: ScopedToken, line: str | None = None) -> dict[str, Any]:
    """Convert a token to a JSON-compatible dict.

    Args:
        token: Token to convert
        line: Line the token came from; adds a ``text`` field when given
    """
    result: dict[str, Any] = {
        "start": token.start,
        "end": token.end,
        "scopes": list(token.scopes),
    }
    if line is not None:
        result["text"] = token.text(line)
    return result


def tokens_to_dict(
    tokens: Iterable[ScopedToken],
    line: str | None = None,
) -> list[dict[str, Any]]:
    """Convert a token sequence to a list of dicts."""
    return [token_to_dict(t, line) for t in tokens]


def tokens_to_json(
    tokens: Iterable[ScopedToken],
    line: str | None = None,
    *,
    indent: int | None = None,
) -> str:
    """Serialize tokens to deterministic JSON."""
    return json.dumps(tokens_to_dict(tokens, line), sort_keys=True, indent=indent)


def line_tokens_to_dict(result: LineTokens, line: str | None = None) -> dict[str, Any]:
    """Snapshot form of a tokenize result: tokens plus the open contexts."""
    return {
        "tokens": tokens_to_dict(result.tokens, line),
        "stack": [frame.context for frame in result.stack.frames],
    }


__all__ = [
    "grammar_from_file",
    "grammar_from_json",
    "line_tokens_to_dict",
    "load_raw_grammar",
    "token_to_dict",
    "tokens_to_dict",
    "tokens_to_json",
]
