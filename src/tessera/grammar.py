"""Compiled, immutable grammar.

A Grammar is built once by ``compile_grammar`` and never changes after.
It owns the context table (name -> Context), the rule table (id -> Rule)
and the regex engine its patterns were compiled with.

Thread Safety:
    Immutable after creation. Safe to share across threads and to
    tokenize many documents against concurrently.

Example:
    >>> grammar = compile_grammar({"scopeName": "source.demo", "patterns": []})
    >>> grammar.tokenize_line("hello").tokens
    (ScopedToken(0:5, source.demo),)

"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from tessera.rules import ROOT_CONTEXT, Context, Rule
from tessera.stack import INITIAL, ContextStack

if TYPE_CHECKING:
    from tessera.regex import RegexEngine
    from tessera.tokens import LineTokens


class Grammar:
    """Immutable set of contexts and rules for one language."""

    __slots__ = ("_scope_name", "_name", "_contexts", "_rules", "_engine")

    def __init__(
        self,
        scope_name: str,
        contexts: dict[str, Context],
        rules: tuple[Rule, ...],
        engine: RegexEngine,
        name: str | None = None,
    ) -> None:
        """Initialize grammar with pre-built tables.

        Use compile_grammar() to create instances.
        """
        self._scope_name = scope_name
        self._name = name
        self._contexts = MappingProxyType(dict(contexts))
        self._rules = rules
        self._engine = engine

    @property
    def scope_name(self) -> str:
        """Root scope (e.g., "source.osf")."""
        return self._scope_name

    @property
    def name(self) -> str | None:
        """Human-readable language name, if the document gave one."""
        return self._name

    @property
    def engine(self) -> RegexEngine:
        return self._engine

    @property
    def contexts(self) -> Mapping[str, Context]:
        """Read-only view of the context table."""
        return self._contexts

    @property
    def root(self) -> Context:
        """The root context ("$self")."""
        return self._contexts[ROOT_CONTEXT]

    @property
    def rules(self) -> tuple[Rule, ...]:
        """All compiled rules, indexed by rule id."""
        return self._rules

    def context(self, name: str) -> Context | None:
        """Get context by name, None if the grammar has no such context."""
        return self._contexts.get(name)

    def rule(self, rule_id: int) -> Rule | None:
        """Get rule by id, None if out of range."""
        if 0 <= rule_id < len(self._rules):
            return self._rules[rule_id]
        return None

    def tokenize_line(self, line: str, stack: ContextStack = INITIAL) -> LineTokens:
        """Tokenize one line against this grammar.

        Args:
            line: Line text without its line terminator
            stack: Stack returned for the previous line (INITIAL for the first)

        Returns:
            Tokens covering the line and the stack for the next line
        """
        from tessera.tokenizer import tokenize_line

        return tokenize_line(self, line, stack)

    def __contains__(self, name: str) -> bool:
        return name in self._contexts

    def __repr__(self) -> str:
        return (
            f"Grammar({self._scope_name!r}, contexts={len(self._contexts)}, "
            f"rules={len(self._rules)})"
        )
