"""Line-by-line driver with incremental re-tokenization.

The tokenizer only knows about single lines. This module threads the
stack through a whole document and keeps, per line, the tokens and the
stack at the end of that line.

After an edit, lines are re-tokenized from the first changed line. Once
a line past the edited range ends with the same stack it ended with
before, every later line would tokenize identically, so the pass stops
there.

Usage:
    doc = DocumentTokenizer(grammar)
    doc.set_text(source)
    tokens = doc.tokens_for(3)

    # Replace lines 3..4 (end exclusive) with one new line
    changed = doc.edit(3, 5, ["new text"])

Thread Safety:
    DocumentTokenizer is mutable and not thread-safe; use one per document.
    ``tokenize_lines`` is a pure generator.

"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Sequence

from tessera.grammar import Grammar
from tessera.stack import INITIAL, ContextStack
from tessera.tokenizer import tokenize_line
from tessera.tokens import LineTokens, ScopedToken
from tessera.utils.logger import get_logger

logger = get_logger(__name__)

# Only these terminate a line; form feeds and Unicode separators are content
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def tokenize_lines(
    grammar: Grammar,
    lines: Iterable[str],
    stack: ContextStack = INITIAL,
) -> Iterator[LineTokens]:
    """Tokenize consecutive lines, threading the stack between them.

    Args:
        grammar: Compiled grammar
        lines: Lines without terminators
        stack: Stack before the first line

    Yields:
        LineTokens for each line in order
    """
    for line in lines:
        result = tokenize_line(grammar, line, stack)
        stack = result.stack
        yield result


class DocumentTokenizer:
    """Per-document token and end-stack cache.

    Invariant: len(lines) == len(results); results[i].stack is the stack
    at the end of line i.

    """

    __slots__ = ("_grammar", "_lines", "_results")

    def __init__(self, grammar: Grammar, text: str = "") -> None:
        self._grammar = grammar
        self._lines: list[str] = []
        self._results: list[LineTokens] = []
        self.set_text(text)

    @property
    def grammar(self) -> Grammar:
        return self._grammar

    @property
    def lines(self) -> tuple[str, ...]:
        return tuple(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def set_text(self, text: str) -> None:
        """Replace the whole document and tokenize every line.

        Lines are split on \\n, \\r\\n and \\r. A trailing terminator leaves
        an empty last line, and empty text is one empty line.
        """
        self._lines = _LINE_BREAK.split(text)
        self._results = list(tokenize_lines(self._grammar, self._lines))

    def tokens_for(self, line_no: int) -> tuple[ScopedToken, ...]:
        """Tokens of a line (0-indexed)."""
        return self._results[line_no].tokens

    def end_stack(self, line_no: int) -> ContextStack:
        """Stack at the end of a line (0-indexed)."""
        return self._results[line_no].stack

    def start_stack(self, line_no: int) -> ContextStack:
        """Stack at the start of a line (0-indexed)."""
        return self._results[line_no - 1].stack if line_no > 0 else INITIAL

    def edit(self, start: int, end: int, new_lines: Sequence[str]) -> range:
        """Replace lines [start, end) and re-tokenize what changed.

        Args:
            start: First replaced line (0-indexed)
            end: One past the last replaced line; start == end inserts
            new_lines: Replacement lines

        Returns:
            Range of line numbers (in the new document) that were
            re-tokenized

        Raises:
            IndexError: If the range lies outside the document
        """
        if start < 0 or end < start or end > len(self._lines):
            raise IndexError(f"edit range {start}:{end} outside 0:{len(self._lines)}")

        # End stacks of the lines that survive the edit, keyed by new index
        old_tail = self._results[end:]
        self._lines[start:end] = new_lines
        self._results[start:end] = [None] * len(new_lines)  # type: ignore[list-item]
        del self._results[start + len(new_lines) :]

        edited_end = start + len(new_lines)
        stack = self.start_stack(start)
        line_no = start
        while line_no < len(self._lines):
            result = tokenize_line(self._grammar, self._lines[line_no], stack)
            stack = result.stack
            if line_no >= edited_end:
                previous = old_tail[line_no - edited_end]
                if previous.stack == stack:
                    # Same end state as before: the rest is unchanged
                    self._results.append(result)
                    self._results.extend(old_tail[line_no - edited_end + 1 :])
                    logger.debug("Re-tokenized lines %d..%d", start, line_no)
                    return range(start, line_no + 1)
                self._results.append(result)
            else:
                self._results[line_no] = result
            line_no += 1

        logger.debug("Re-tokenized lines %d..%d", start, len(self._lines) - 1)
        return range(start, len(self._lines))
