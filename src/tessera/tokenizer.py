"""Line tokenizer: the matching engine.

For one line and the stack left by the previous line, repeatedly:

1. Collect candidates: the innermost region's end pattern plus the rules
   of the innermost context (the root context when no region is open).
2. Search each candidate from the cursor; the earliest start wins. On a
   tie the end pattern wins, unless its rule asked for
   ``applyEndPatternLast``; among rules the first declared wins.
3. Emit a gap token for unmatched text before the winner, under the
   current scope path.
4. Apply the winner: an end match closes the region (pop), a match rule
   is projected through its captures, a begin match is projected and
   opens its region (push).

When nothing matches, the rest of the line becomes one token under the
current scope path. Regions left open at the end of the line stay on the
returned stack, which is how constructs span lines.

Termination:
    Every advancing iteration moves the cursor forward. A zero-width match
    rule steps one character. Zero-width begin/end matches do not move the
    cursor, so the (depth, innermost rule) states seen at the cursor are
    recorded; a repeat forces a one-character step. Stack depth is capped
    by TokenizeConfig.max_stack_depth, so the states are finite.

Failure Semantics:
    There is none. Any line with any stack yields tokens that cover
    [0, len(line)) without gaps or overlaps. Frames that do not belong to
    the grammar (a grammar swapped under a live document) reset the line
    to the initial state.

Thread Safety:
    LineTokenizer instances are single-use and hold only per-line state.
    Grammars and stacks are immutable.

"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from tessera.captures import extend_scopes, project_captures
from tessera.config import get_tokenize_config
from tessera.grammar import Grammar
from tessera.profiling import get_tokenize_accumulator
from tessera.regex import MatchResult, blank_back_references, resolve_back_references
from tessera.rules import BeginEndRule, MatchRule, Rule
from tessera.stack import INITIAL, ContextStack, StackFrame
from tessera.tokens import LineTokens, ScopedToken
from tessera.utils.logger import get_logger

logger = get_logger(__name__)


class LineTokenizer:
    """Single-use tokenizer for one line.

    Usage:
        >>> result = LineTokenizer(grammar, "apiVersion: dialogue/v1").tokenize()
        >>> [t.scope for t in result.tokens]
        ['entity.name.tag.osf', 'meta.header.osf', 'string.unquoted.value.osf']

    """

    __slots__ = (
        "_grammar",
        "_engine",
        "_line",
        "_line_len",
        "_pos",
        "_stack",
        "_tokens",
        "_config",
        "_accumulator",
    )

    def __init__(self, grammar: Grammar, line: str, stack: ContextStack = INITIAL) -> None:
        """Initialize tokenizer.

        Args:
            grammar: Compiled grammar
            line: Line text without its terminator
            stack: Stack returned for the previous line
        """
        self._grammar = grammar
        self._engine = grammar.engine
        self._line = line
        self._line_len = len(line)
        self._pos = 0
        self._tokens: list[ScopedToken] = []
        self._config = get_tokenize_config()
        self._accumulator = get_tokenize_accumulator()
        self._stack = self._resume(stack)

    def tokenize(self) -> LineTokens:
        """Tokenize the line.

        Returns:
            Tokens covering the line and the stack for the next line
        """
        line_len = self._line_len
        limit = self._config.max_line_length
        if limit is not None and line_len > limit:
            logger.debug("Line of %d chars exceeds max_line_length %d", line_len, limit)
            self._emit(0, line_len, self._scopes())
            return self._finish()

        acc = self._accumulator
        seen: set[tuple[int, int]] = set()
        while True:
            if acc is not None:
                acc.iterations += 1

            before = self._pos
            found = self._find_next()
            if found is None:
                self._emit(self._pos, line_len, self._scopes())
                self._pos = line_len
                break

            rule, match = found
            if match.start > self._pos:
                self._emit(self._pos, match.start, self._scopes())
                self._pos = match.start

            if rule is None:
                self._close(match)
            elif isinstance(rule, MatchRule):
                self._apply_match(rule, match)
            else:
                self._open(rule, match)

            if self._pos > before:
                seen.clear()
                continue

            # No progress: zero-width match at the cursor
            top = self._stack.top
            state = (self._stack.depth, top.rule_id if top is not None else -1)
            if isinstance(rule, MatchRule) or state in seen:
                if self._pos >= line_len:
                    break
                self._force_advance()
                seen.clear()
            else:
                seen.add(state)

        return self._finish()

    # =========================================================================
    # Candidate search
    # =========================================================================

    def _find_next(self) -> tuple[Rule | None, MatchResult] | None:
        """Find the winning candidate from the cursor.

        Returns:
            (rule, match), where rule is None when the innermost region's
            end pattern won, or None when nothing matches
        """
        pos = self._pos
        top = self._stack.top
        if top is None:
            context = self._grammar.root
            end_matcher = None
            end_last = False
        else:
            context = self._grammar.contexts[top.context]
            end_matcher = top.end
            opener = self._grammar.rules[top.rule_id]
            end_last = isinstance(opener, BeginEndRule) and opener.apply_end_last

        best: MatchResult | None = None
        best_rule: Rule | None = None

        if end_matcher is not None and not end_last:
            best = self._search(end_matcher)
            if best is not None and best.start == pos:
                return None, best

        for rule in context.rules:
            matcher = rule.matcher if isinstance(rule, MatchRule) else rule.begin
            m = self._search(matcher)
            if m is None:
                continue
            if best is None or m.start < best.start:
                best, best_rule = m, rule
                if m.start == pos:
                    break

        if end_matcher is not None and end_last:
            m = self._search(end_matcher)
            if m is not None and (best is None or m.start < best.start):
                best, best_rule = m, None

        if best is None:
            return None
        return best_rule, best

    def _search(self, matcher: Any) -> MatchResult | None:
        if self._accumulator is not None:
            self._accumulator.probes += 1
        return self._engine.search(matcher, self._line, self._pos)

    # =========================================================================
    # Rule application
    # =========================================================================

    def _apply_match(self, rule: MatchRule, match: MatchResult) -> None:
        if match.is_empty:
            return
        scopes = extend_scopes(self._scopes(), rule.scope)
        self._emit_all(project_captures(match.start, match.end, match.groups, rule.captures, scopes))
        self._pos = match.end

    def _open(self, rule: BeginEndRule, match: MatchResult) -> None:
        """Apply a begin match: project it and push the rule's region."""
        name_scopes = extend_scopes(self._scopes(), rule.scope)
        self._emit_all(
            project_captures(match.start, match.end, match.groups, rule.begin_captures, name_scopes)
        )
        self._pos = match.end

        if self._stack.depth >= self._config.max_stack_depth:
            logger.debug(
                "Stack depth limit %d reached; %r does not open a region",
                self._config.max_stack_depth,
                rule.begin_source,
            )
            return

        end_source = rule.end_source
        end = rule.end
        if rule.binds_end:
            end_source = resolve_back_references(rule.end_source, self._line, match.groups)
            try:
                end = self._engine.compile(end_source)
            except ValueError:
                logger.debug("Bound end pattern %r failed to compile", end_source, exc_info=True)
                end_source = blank_back_references(rule.end_source)
                end = self._engine.compile(end_source)

        self._stack = self._stack.push(
            StackFrame(
                rule_id=rule.id,
                context=rule.inner,
                end_source=end_source,
                end=end,
                name_scopes=name_scopes,
                scopes=extend_scopes(name_scopes, rule.content_scope),
            )
        )

    def _close(self, match: MatchResult) -> None:
        """Apply an end match: project it and pop the innermost region."""
        top = self._stack.top
        assert top is not None
        rule = self._grammar.rules[top.rule_id]
        captures = rule.end_captures if isinstance(rule, BeginEndRule) else ()
        self._emit_all(
            project_captures(match.start, match.end, match.groups, captures, top.name_scopes)
        )
        self._stack = self._stack.pop()
        self._pos = match.end

    def _force_advance(self) -> None:
        """Step one character under the current scope path."""
        self._emit(self._pos, self._pos + 1, self._scopes())
        self._pos += 1
        if self._accumulator is not None:
            self._accumulator.forced_advances += 1

    # =========================================================================
    # State helpers
    # =========================================================================

    def _resume(self, stack: ContextStack) -> ContextStack:
        """Validate an incoming stack against this grammar.

        End matchers are always taken from this grammar, never from the
        frame: a fixed end comes from the rule, a bound end is recompiled
        from the frame's source with this grammar's engine. Any frame
        whose rule, context, end pattern or root scope does not match
        sends the line back to the initial state.
        """
        grammar = self._grammar
        frames: list[StackFrame] = []
        changed = False
        for frame in stack.frames:
            rule = grammar.rule(frame.rule_id)
            end = self._frame_end(rule, frame)
            if (
                end is None
                or not isinstance(rule, BeginEndRule)
                or rule.inner != frame.context
                or frame.context not in grammar
                or not frame.name_scopes
                or frame.name_scopes[0] != grammar.scope_name
            ):
                logger.debug(
                    "Frame %s does not belong to %s; resuming from the initial state",
                    frame.context,
                    grammar.scope_name,
                )
                return INITIAL
            if end is not frame.end:
                frame = replace(frame, end=end)
                changed = True
            frames.append(frame)
        return ContextStack(tuple(frames)) if changed else stack

    def _frame_end(self, rule: Rule | None, frame: StackFrame) -> Any:
        """Matcher for a frame's end pattern under this grammar, or None."""
        if not isinstance(rule, BeginEndRule):
            return None
        if not rule.binds_end:
            return rule.end if frame.end_source == rule.end_source else None
        try:
            return self._engine.compile(frame.end_source)
        except ValueError:
            return None

    def _scopes(self) -> tuple[str, ...]:
        return self._stack.scopes(self._grammar.scope_name)

    def _emit(self, start: int, end: int, scopes: tuple[str, ...]) -> None:
        """Append a token, merging it into the previous one on equal scopes."""
        if start >= end:
            return
        tokens = self._tokens
        if tokens and tokens[-1].scopes == scopes and tokens[-1].end == start:
            tokens[-1] = ScopedToken(tokens[-1].start, end, scopes)
        else:
            tokens.append(ScopedToken(start, end, scopes))

    def _emit_all(self, tokens: list[ScopedToken]) -> None:
        for token in tokens:
            self._emit(token.start, token.end, token.scopes)

    def _finish(self) -> LineTokens:
        tokens = tuple(self._tokens)
        if self._accumulator is not None:
            self._accumulator.record_line(self._line_len, len(tokens))
        return LineTokens(tokens, self._stack)


def tokenize_line(grammar: Grammar, line: str, stack: ContextStack = INITIAL) -> LineTokens:
    """Tokenize one line.

    Args:
        grammar: Compiled grammar
        line: Line text without its terminator
        stack: Stack returned for the previous line (INITIAL for the first)

    Returns:
        Tokens covering the line and the stack for the next line

    Example:
        >>> result = tokenize_line(grammar, '"open string')
        >>> result.stack.depth
        1

    """
    return LineTokenizer(grammar, line, stack).tokenize()


__all__ = ["LineTokenizer", "tokenize_line"]
