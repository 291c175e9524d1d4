"""Tessera TokenizeAccumulator — opt-in profiling for line tokenization.

This module provides accumulated metrics during tokenization:
- Lines and tokens produced
- Scan iterations and regex probes
- Forced advances taken by the zero-width loop guard

Zero overhead when disabled (get_tokenize_accumulator() returns None).

Example:
    from tessera.profiling import profiled_tokenize

    with profiled_tokenize() as metrics:
        grammar.tokenize_line("apiVersion: dialogue/v1")

    print(metrics.summary())
    # {"total_ms": 0.1, "lines": 1, "tokens": 3, "iterations": 1, ...}

"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from time import perf_counter
from typing import Any


@dataclass
class TokenizeAccumulator:
    """Accumulated metrics during line tokenization.

    Attributes:
        start_time: Profiling start timestamp.
        lines: Number of lines tokenized.
        characters: Total length of the lines tokenized.
        tokens: Number of tokens produced.
        iterations: Scan loop iterations across all lines.
        probes: Regex searches run across all lines.
        forced_advances: Times the loop guard had to step past a
            non-advancing match cycle.

    """

    start_time: float = field(default_factory=perf_counter)
    lines: int = 0
    characters: int = 0
    tokens: int = 0
    iterations: int = 0
    probes: int = 0
    forced_advances: int = 0

    def record_line(self, length: int, token_count: int) -> None:
        """Record one finished line.

        Args:
            length: Length of the line.
            token_count: Number of tokens produced for it.

        """
        self.lines += 1
        self.characters += length
        self.tokens += token_count

    @property
    def total_duration_ms(self) -> float:
        """Total profiling duration in milliseconds."""
        return (perf_counter() - self.start_time) * 1000

    def summary(self) -> dict[str, Any]:
        """Get summary of tokenize metrics."""
        return {
            "total_ms": round(self.total_duration_ms, 2),
            "lines": self.lines,
            "characters": self.characters,
            "tokens": self.tokens,
            "iterations": self.iterations,
            "probes": self.probes,
            "forced_advances": self.forced_advances,
        }


_accumulator: ContextVar[TokenizeAccumulator | None] = ContextVar(
    "tokenize_accumulator",
    default=None,
)


def get_tokenize_accumulator() -> TokenizeAccumulator | None:
    """Get current accumulator (None if profiling disabled)."""
    return _accumulator.get()


@contextmanager
def profiled_tokenize() -> Iterator[TokenizeAccumulator]:
    """Context manager for profiled tokenization.

    Creates a TokenizeAccumulator and makes it available via
    get_tokenize_accumulator() for the duration of the with block.

    Yields:
        TokenizeAccumulator that will be populated during tokenize calls.

    """
    acc = TokenizeAccumulator()
    token: Token[TokenizeAccumulator | None] = _accumulator.set(acc)
    try:
        yield acc
    finally:
        _accumulator.reset(token)
