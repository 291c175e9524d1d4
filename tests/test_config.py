"""Tests for ContextVar-based tokenize configuration.

Validates thread isolation, context manager behavior and the limits the
config puts on a tokenize call.
"""

from threading import Thread

import pytest

from tessera import (
    Grammar,
    TokenizeConfig,
    get_tokenize_config,
    reset_tokenize_config,
    set_tokenize_config,
    tokenize_config_context,
    tokenize_line,
)


class TestTokenizeConfigDataclass:
    """Test TokenizeConfig frozen dataclass behavior."""

    def test_default_values(self) -> None:
        config = TokenizeConfig()
        assert config.max_stack_depth == 100
        assert config.max_line_length is None

    def test_immutability(self) -> None:
        config = TokenizeConfig()
        with pytest.raises(AttributeError):
            config.max_stack_depth = 5  # type: ignore[misc]

    def test_from_dict_ignores_unknown_keys(self) -> None:
        config = TokenizeConfig.from_dict({"max_line_length": 80, "theme": "dark"})
        assert config.max_line_length == 80
        assert config.max_stack_depth == 100

    def test_from_dict_empty(self) -> None:
        assert TokenizeConfig.from_dict({}) == TokenizeConfig()


class TestContextVarFunctions:
    """Test get/set/reset functions."""

    def test_default(self) -> None:
        assert get_tokenize_config() == TokenizeConfig()

    def test_set_and_reset(self) -> None:
        set_tokenize_config(TokenizeConfig(max_stack_depth=3))
        try:
            assert get_tokenize_config().max_stack_depth == 3
        finally:
            reset_tokenize_config()
        assert get_tokenize_config().max_stack_depth == 100

    def test_context_manager_restores(self) -> None:
        with tokenize_config_context(TokenizeConfig(max_line_length=10)):
            assert get_tokenize_config().max_line_length == 10
        assert get_tokenize_config().max_line_length is None

    def test_context_manager_restores_on_error(self) -> None:
        with pytest.raises(RuntimeError), tokenize_config_context(TokenizeConfig(max_stack_depth=1)):
            raise RuntimeError("boom")
        assert get_tokenize_config().max_stack_depth == 100

    def test_nested_contexts(self) -> None:
        with tokenize_config_context(TokenizeConfig(max_stack_depth=5)):
            with tokenize_config_context(TokenizeConfig(max_stack_depth=2)):
                assert get_tokenize_config().max_stack_depth == 2
            assert get_tokenize_config().max_stack_depth == 5


class TestThreadIsolation:
    def test_config_does_not_leak_between_threads(self, block_grammar: Grammar) -> None:
        """A limit set in one thread does not apply in another."""
        depths: dict[str, int] = {}

        def limited() -> None:
            with tokenize_config_context(TokenizeConfig(max_stack_depth=1)):
                depths["limited"] = tokenize_line(block_grammar, "{{{").stack.depth

        def unlimited() -> None:
            depths["unlimited"] = tokenize_line(block_grammar, "{{{").stack.depth

        threads = [Thread(target=limited), Thread(target=unlimited)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert depths == {"limited": 1, "unlimited": 3}
