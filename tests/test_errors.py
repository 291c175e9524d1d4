"""Error construction and formatting tests."""

import pytest

from tessera.errors import (
    CyclicReference,
    GrammarError,
    InvalidPattern,
    RegistryError,
    TesseraError,
    UnresolvedReference,
)

# =========================================================================
# GrammarError
# =========================================================================


class TestGrammarErrorFormatting:
    """Verify GrammarError produces well-formatted messages."""

    def test_message_only(self) -> None:
        err = GrammarError("grammar has no scopeName")
        assert str(err) == "grammar has no scopeName"
        assert err.context is None
        assert err.rule is None

    def test_with_context(self) -> None:
        err = GrammarError("patterns must be a list", "#strings")
        assert str(err) == "#strings: patterns must be a list"

    def test_with_context_and_rule(self) -> None:
        err = GrammarError("rule must be a mapping", "$self", 3)
        assert str(err) == "$self[3]: rule must be a mapping"

    def test_is_tessera_error(self) -> None:
        assert isinstance(GrammarError("x"), TesseraError)


# =========================================================================
# Load-time error classes
# =========================================================================


class TestLoadErrors:
    """The three load-time failure classes."""

    def test_invalid_pattern(self) -> None:
        err = InvalidPattern("(", "missing ), unterminated subpattern", "$self", 0)
        assert err.pattern == "("
        assert "missing )" in err.reason
        assert str(err).startswith("$self[0]: invalid pattern '('")
        assert isinstance(err, GrammarError)

    def test_unresolved_reference(self) -> None:
        err = UnresolvedReference("#nope", "#strings")
        assert err.reference == "#nope"
        assert "'#nope'" in str(err)
        assert isinstance(err, GrammarError)

    def test_cyclic_reference(self) -> None:
        err = CyclicReference(("#a", "#b", "#a"))
        assert err.chain == ("#a", "#b", "#a")
        assert "#a -> #b -> #a" in str(err)
        assert err.context == "#a"
        assert isinstance(err, GrammarError)

    @pytest.mark.parametrize(
        "err",
        [
            InvalidPattern("[", "bad"),
            UnresolvedReference("#x"),
            CyclicReference(("#x", "#x")),
        ],
    )
    def test_catchable_as_base(self, err: GrammarError) -> None:
        with pytest.raises(TesseraError):
            raise err


class TestRegistryError:
    def test_basic_format(self) -> None:
        err = RegistryError("source.osf", "loader failed: boom")
        assert str(err) == "Grammar 'source.osf': loader failed: boom"
        assert err.scope_name == "source.osf"
        assert isinstance(err, TesseraError)
