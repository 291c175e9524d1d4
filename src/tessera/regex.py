"""Regex capability consumed by the compiler and tokenizer.

The engine only needs two operations: compile a pattern into an opaque
matcher, and search a line from an offset. PythonRegexEngine implements
them over the standard ``re`` module; any other engine (an Oniguruma
binding, for instance) can be passed to ``compile_grammar`` as long as it
follows the RegexEngine protocol.

Search semantics:
    Offsets are absolute into the line. ``^`` only matches at the real
    start of the line even when the search begins later, and lookbehind
    assertions see the text before the cursor.

Thread Safety:
    PythonRegexEngine holds no state; compiled patterns are immutable.

"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

# Same shape as TextMate engines: \1 .. \99 in an end pattern refers to
# the begin match of the same rule.
_BACK_REFERENCE = re.compile(r"\\(\d+)")


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Outcome of a successful search.

    Attributes:
        start: Absolute start offset of the match
        end: Absolute end offset of the match (exclusive)
        groups: Span per group, index 0 being the whole match.
            None for groups that did not participate.

    """

    start: int
    end: int
    groups: tuple[tuple[int, int] | None, ...]

    @property
    def is_empty(self) -> bool:
        """True for zero-width matches."""
        return self.start == self.end


class RegexEngine(Protocol):
    """Protocol for the regex capability.

    Contract:
        - compile() MUST raise ValueError for invalid syntax
        - search() MUST NOT raise for any text or offset within the text
    """

    def compile(self, pattern: str) -> Any:
        """Compile pattern into a matcher handle."""
        ...

    def search(self, matcher: Any, text: str, start: int) -> MatchResult | None:
        """Find the first match at or after start."""
        ...


class PythonRegexEngine:
    """RegexEngine backed by the standard library ``re`` module."""

    __slots__ = ()

    def compile(self, pattern: str) -> re.Pattern[str]:
        try:
            return re.compile(pattern)
        except re.error as e:
            raise ValueError(str(e)) from e

    def search(self, matcher: re.Pattern[str], text: str, start: int) -> MatchResult | None:
        m = matcher.search(text, start)
        if m is None:
            return None
        groups: list[tuple[int, int] | None] = []
        for i in range(matcher.groups + 1):
            span = m.span(i)
            groups.append(None if span[0] < 0 else span)
        return MatchResult(m.start(), m.end(), tuple(groups))


DEFAULT_ENGINE = PythonRegexEngine()


def has_back_references(pattern: str) -> bool:
    """Check whether an end pattern refers to begin captures."""
    return _BACK_REFERENCE.search(pattern) is not None


def resolve_back_references(
    pattern: str,
    line: str,
    groups: Sequence[tuple[int, int] | None],
) -> str:
    """Substitute ``\\N`` with the escaped text of begin capture N.

    Groups that did not participate, or do not exist, become empty.

    Example:
        >>> resolve_back_references(r"^\\1$", "<<EOF", [(0, 5), (2, 5)])
        '^EOF$'

    """

    def replace(m: re.Match[str]) -> str:
        index = int(m.group(1))
        if index < len(groups) and groups[index] is not None:
            start, end = groups[index]  # type: ignore[misc]
            return re.escape(line[start:end])
        return ""

    return _BACK_REFERENCE.sub(replace, pattern)


def blank_back_references(pattern: str) -> str:
    """Replace every back-reference with an empty group, for syntax validation."""
    return _BACK_REFERENCE.sub("(?:)", pattern)


__all__ = [
    "DEFAULT_ENGINE",
    "MatchResult",
    "PythonRegexEngine",
    "RegexEngine",
    "blank_back_references",
    "has_back_references",
    "resolve_back_references",
]
