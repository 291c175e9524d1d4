"""ScopedToken and LineTokens definitions.

The tokenizer produces, per line, a tuple of ScopedToken covering the
line from offset 0 to its length without gaps, plus the stack to feed
into the next line.

Thread Safety:
    Both classes are frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from tessera.stack import ContextStack


@dataclass(frozen=True, slots=True)
class ScopedToken:
    """A span of a line and its scope path.

    Attributes:
        start: Start offset in the line
        end: End offset in the line (exclusive)
        scopes: Scope path, root first and most specific last

    """

    start: int
    end: int
    scopes: tuple[str, ...]

    @property
    def scope(self) -> str:
        """Most specific scope name."""
        return self.scopes[-1]

    def __len__(self) -> int:
        return self.end - self.start

    def text(self, line: str) -> str:
        """Slice this token out of the line it was produced from."""
        return line[self.start : self.end]

    def __repr__(self) -> str:
        """Compact repr for debugging."""
        return f"ScopedToken({self.start}:{self.end}, {' '.join(self.scopes)})"


@dataclass(frozen=True, slots=True)
class LineTokens:
    """Result of tokenizing one line.

    Attributes:
        tokens: Contiguous tokens covering the line
        stack: Stack to pass when tokenizing the next line

    """

    tokens: tuple[ScopedToken, ...]
    stack: ContextStack

    def __iter__(self) -> Iterator[ScopedToken]:
        return iter(self.tokens)

    def __len__(self) -> int:
        return len(self.tokens)

    def __getitem__(self, index: int) -> ScopedToken:
        return self.tokens[index]


__all__ = ["LineTokens", "ScopedToken"]
