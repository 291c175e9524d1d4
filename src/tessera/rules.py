"""Compiled rule model.

A grammar is a table of named contexts; each context is an ordered tuple
of rules. Rules come in two variants:

- MatchRule: one pattern, scoped as a whole and split by captures
- BeginEndRule: a region opened by ``begin`` and closed by ``end`` that
  pushes its own inner context and may span lines

Inner contexts are referenced by name and looked up in the grammar's
context table, so self-referencing grammars form no ownership cycles.

Thread Safety:
    All classes are frozen dataclasses; matchers are immutable compiled
    patterns. Safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# (group index, scope name) pairs sorted by group index
CaptureMap = tuple[tuple[int, str], ...]

ROOT_CONTEXT = "$self"


@dataclass(frozen=True, slots=True)
class MatchRule:
    """Single-pattern classifier.

    Attributes:
        id: Index in the grammar's rule table
        source: Pattern source text
        matcher: Compiled pattern handle from the regex engine
        scope: Scope appended for the whole match (None = no extra scope)
        captures: Scopes for individual capture groups

    """

    id: int
    source: str
    matcher: Any = field(compare=False, repr=False)
    scope: str | None = None
    captures: CaptureMap = ()


@dataclass(frozen=True, slots=True)
class BeginEndRule:
    """Region delimited by a begin and an end pattern.

    Attributes:
        id: Index in the grammar's rule table
        begin_source: Begin pattern source text
        begin: Compiled begin pattern
        end_source: End pattern source text
        end: Compiled end pattern, or None when end_source refers back to
            begin captures and must be bound when the region opens
        inner: Name of the context scanned between begin and end
        scope: Scope for the whole region, delimiters included
        content_scope: Extra scope for the text between the delimiters
        begin_captures: Capture scopes for the begin match
        end_captures: Capture scopes for the end match
        apply_end_last: Inner rules win ties against the end pattern

    """

    id: int
    begin_source: str
    begin: Any = field(compare=False, repr=False)
    end_source: str = ""
    end: Any = field(default=None, compare=False, repr=False)
    inner: str = ROOT_CONTEXT
    scope: str | None = None
    content_scope: str | None = None
    begin_captures: CaptureMap = ()
    end_captures: CaptureMap = ()
    apply_end_last: bool = False

    @property
    def binds_end(self) -> bool:
        """True when the end pattern is built from the begin match."""
        return self.end is None


Rule = MatchRule | BeginEndRule


@dataclass(frozen=True, slots=True)
class Context:
    """A named, ordered list of rules with includes already expanded.

    Attributes:
        name: Context name ("$self", "#key", or "@<rule id>")
        rules: Rules in priority order

    """

    name: str
    rules: tuple[Rule, ...] = ()

    def __len__(self) -> int:
        return len(self.rules)


__all__ = [
    "ROOT_CONTEXT",
    "BeginEndRule",
    "CaptureMap",
    "Context",
    "MatchRule",
    "Rule",
]
