"""Context stack: the state carried from one line to the next.

The stack holds one frame per open BeginEnd region, outermost first. An
empty stack is the initial state of a document: only the grammar's root
scope applies.

Usage:
    result = grammar.tokenize_line(first_line)            # INITIAL stack
    result = grammar.tokenize_line(next_line, result.stack)

Stacks are values. push() and pop() return new stacks and never touch
the receiver, so a caller can keep the stack of every line around and
re-tokenize from any of them.

Thread Safety:
    Frozen dataclasses; safe to share. A document still has to feed its
    lines in order, since line N+1 needs the stack produced by line N.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class StackFrame:
    """One open region.

    Attributes:
        rule_id: Id of the BeginEnd rule that opened the region
        context: Name of the context scanned inside the region
        end_source: End pattern with begin back-references bound
        end: Compiled end pattern (not part of equality)
        name_scopes: Scope path for the begin and end delimiters
        scopes: Scope path for the content (adds the content scope)

    """

    rule_id: int
    context: str
    end_source: str
    end: Any = field(compare=False, repr=False)
    name_scopes: tuple[str, ...] = ()
    scopes: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ContextStack:
    """Immutable stack of open regions, innermost last.

    Invariant: frames[-1] is the innermost region; an empty tuple is the
    initial state.

    """

    frames: tuple[StackFrame, ...] = ()

    @property
    def top(self) -> StackFrame | None:
        """Innermost open region, or None for the initial state."""
        return self.frames[-1] if self.frames else None

    @property
    def depth(self) -> int:
        """Number of open regions."""
        return len(self.frames)

    @property
    def is_initial(self) -> bool:
        return not self.frames

    def push(self, frame: StackFrame) -> ContextStack:
        """Return a new stack with frame on top."""
        return ContextStack((*self.frames, frame))

    def pop(self) -> ContextStack:
        """Return a new stack without the innermost frame.

        Popping the initial stack returns it unchanged.
        """
        if not self.frames:
            return self
        return ContextStack(self.frames[:-1])

    def scopes(self, root_scope: str) -> tuple[str, ...]:
        """Scope path of text inside the innermost region."""
        top = self.top
        return top.scopes if top is not None else (root_scope,)

    def __len__(self) -> int:
        return len(self.frames)

    def __repr__(self) -> str:
        path = " > ".join(f.context for f in self.frames) or "<initial>"
        return f"ContextStack({path})"


INITIAL = ContextStack()


__all__ = ["INITIAL", "ContextStack", "StackFrame"]
