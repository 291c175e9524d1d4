"""ContextVar-based tokenize configuration for Tessera.

Grammars stay immutable and shareable, so the limits that bound a single
tokenize call are not stored on them. They live in a ContextVar instead.

Thread Safety:
    Each thread (and each asyncio task) sees its own value. Setting a limit
    in one never changes what another tokenizes with.

Usage:
    from tessera.config import TokenizeConfig, tokenize_config_context

    with tokenize_config_context(TokenizeConfig(max_line_length=20_000)):
        result = grammar.tokenize_line(line)

"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, fields


@dataclass(frozen=True, slots=True)
class TokenizeConfig:
    """Immutable tokenize configuration.

    Attributes:
        max_stack_depth: Deepest context stack a begin match may push to.
            A begin match at the limit is still scoped but opens no context.
        max_line_length: Lines longer than this are not scanned; they yield
            one token under the current scope path and keep the stack.
            None disables the limit.

    """

    max_stack_depth: int = 100
    max_line_length: int | None = None

    @classmethod
    def from_dict(cls, config_dict: dict) -> "TokenizeConfig":
        """Create TokenizeConfig from dictionary.

        Keys that are not TokenizeConfig fields are dropped, so a settings
        file can carry unrelated entries.

        Args:
            config_dict: Mapping of field name to value

        Returns:
            TokenizeConfig with the given fields set

        Example:
            >>> config = TokenizeConfig.from_dict({
            ...     "max_stack_depth": 32,
            ...     "unknown_key": "ignored",
            ... })
            >>> config.max_stack_depth
            32

        """
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in config_dict.items() if k in known})


_DEFAULT_CONFIG: TokenizeConfig = TokenizeConfig()

_tokenize_config: ContextVar[TokenizeConfig] = ContextVar(
    "tokenize_config",
    default=_DEFAULT_CONFIG,
)


def get_tokenize_config() -> TokenizeConfig:
    """Get current tokenize configuration (thread-local).

    Returns:
        The active TokenizeConfig for this thread/context.

    """
    return _tokenize_config.get()


def set_tokenize_config(config: TokenizeConfig) -> None:
    """Set tokenize configuration for current context.

    Args:
        config: TokenizeConfig instance to use for this context.

    """
    _tokenize_config.set(config)


def reset_tokenize_config() -> None:
    """Restore the default limits for the current context."""
    _tokenize_config.set(_DEFAULT_CONFIG)


@contextmanager
def tokenize_config_context(config: TokenizeConfig) -> Iterator[None]:
    """Apply config for the duration of a with block.

    Args:
        config: TokenizeConfig to use within the context.

    Yields:
        None

    Example:
        >>> with tokenize_config_context(TokenizeConfig(max_stack_depth=8)):
        ...     result = grammar.tokenize_line("((((((((((")

    The previous config comes back on exit, including when the block
    raises.

    """
    token = _tokenize_config.set(config)
    try:
        yield
    finally:
        _tokenize_config.reset(token)


__all__ = [
    "TokenizeConfig",
    "get_tokenize_config",
    "reset_tokenize_config",
    "set_tokenize_config",
    "tokenize_config_context",
]
