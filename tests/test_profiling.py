"""Tests for tessera.profiling, the tokenize profiling API."""

from tessera import Grammar, compile_grammar, tokenize_line
from tessera.profiling import (
    TokenizeAccumulator,
    get_tokenize_accumulator,
    profiled_tokenize,
)


class TestGetTokenizeAccumulator:
    def test_returns_none_when_disabled(self) -> None:
        assert get_tokenize_accumulator() is None

    def test_returns_none_outside_context(self) -> None:
        with profiled_tokenize():
            pass
        assert get_tokenize_accumulator() is None


class TestProfiledTokenize:
    def test_yields_accumulator(self) -> None:
        with profiled_tokenize() as acc:
            assert isinstance(acc, TokenizeAccumulator)
            assert get_tokenize_accumulator() is acc

    def test_records_lines(self, osf_grammar: Grammar) -> None:
        with profiled_tokenize() as acc:
            tokenize_line(osf_grammar, "apiVersion: dialogue/v1")
            tokenize_line(osf_grammar, "node start:")
        assert acc.lines == 2
        assert acc.characters == len("apiVersion: dialogue/v1") + len("node start:")
        assert acc.tokens == 3 + 4
        assert acc.iterations >= 2
        assert acc.probes > 0

    def test_counts_forced_advances(self) -> None:
        grammar = compile_grammar({"scopeName": "source.t", "patterns": [{"match": "(?=a)"}]})
        with profiled_tokenize() as acc:
            tokenize_line(grammar, "aaa")
        assert acc.forced_advances == 3

    def test_no_recording_outside_context(self, osf_grammar: Grammar) -> None:
        with profiled_tokenize() as acc:
            pass
        tokenize_line(osf_grammar, "node start:")
        assert acc.lines == 0


class TestSummary:
    def test_empty_summary(self) -> None:
        summary = TokenizeAccumulator().summary()
        assert summary["lines"] == 0
        assert summary["tokens"] == 0
        assert summary["forced_advances"] == 0

    def test_summary_keys(self, block_grammar: Grammar) -> None:
        with profiled_tokenize() as acc:
            tokenize_line(block_grammar, "{a}")
        summary = acc.summary()
        assert set(summary) == {
            "total_ms",
            "lines",
            "characters",
            "tokens",
            "iterations",
            "probes",
            "forced_advances",
        }
        assert summary["lines"] == 1
        assert summary["characters"] == 3
