"""Exception classes for Tessera.

All errors are raised while loading a grammar. Tokenizing a line has no
error channel: any line, with any stack, yields a covering token sequence.
"""

from __future__ import annotations


class TesseraError(Exception):
    """Base exception for all Tessera errors.

    Subclass this for specific error categories.
    """

    pass


class GrammarError(TesseraError):
    """A grammar document could not be compiled.

    Raised for structurally malformed documents; the more specific
    subclasses cover bad patterns and include resolution.
    """

    def __init__(
        self,
        message: str,
        context: str | None = None,
        rule: int | None = None,
    ) -> None:
        """Initialize grammar error with optional location.

        Args:
            message: Error description
            context: Name of the context being compiled (e.g., "#strings")
            rule: Position of the offending rule inside that context
        """
        self.message = message
        self.context = context
        self.rule = rule

        location = ""
        if context is not None:
            location = context
            if rule is not None:
                location += f"[{rule}]"
            location += ": "

        super().__init__(f"{location}{message}")


class InvalidPattern(GrammarError):
    """A rule pattern failed to compile with the regex engine."""

    def __init__(
        self,
        pattern: str,
        reason: str,
        context: str | None = None,
        rule: int | None = None,
    ) -> None:
        """Initialize invalid pattern error.

        Args:
            pattern: The offending pattern source
            reason: Message reported by the regex engine
            context: Context holding the rule
            rule: Position of the rule inside the context
        """
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"invalid pattern {pattern!r}: {reason}", context, rule)


class UnresolvedReference(GrammarError):
    """An include names a context that does not exist."""

    def __init__(self, reference: str, context: str | None = None) -> None:
        """Initialize unresolved reference error.

        Args:
            reference: The include target as written (e.g., "#missing")
            context: Context containing the include
        """
        self.reference = reference
        super().__init__(f"unresolved include {reference!r}", context)


class CyclicReference(GrammarError):
    """Include resolution returned to a context it was still expanding."""

    def __init__(self, chain: tuple[str, ...]) -> None:
        """Initialize cyclic reference error.

        Args:
            chain: Context names along the include cycle, first repeated last
        """
        self.chain = chain
        super().__init__("cyclic include " + " -> ".join(chain), chain[0])


class RegistryError(TesseraError):
    """A grammar loader failed while the registry was resolving a scope."""

    def __init__(self, scope_name: str, message: str) -> None:
        """Initialize registry error.

        Args:
            scope_name: Scope name being loaded (e.g., "source.osf")
            message: Description of the failure
        """
        self.scope_name = scope_name
        super().__init__(f"Grammar '{scope_name}': {message}")
