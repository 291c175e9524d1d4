"""Grammar registry: load grammars by scope name.

The registry asks a loader callback for the raw document of a scope name
the first time that scope is requested, compiles it, and keeps the
compiled Grammar in memory for later requests. Nothing is persisted.

Thread Safety:
    Lookups and loads are guarded by a reentrant lock, so a loader may
    itself call load_grammar or add_grammar on the same registry (to
    pull in a grammar it embeds). Compiled grammars are immutable and
    shared freely once returned.

Example:
    >>> def loader(scope_name):
    ...     if scope_name == "source.osf":
    ...         return load_raw_grammar("syntaxes/osf.tmLanguage.json")
    ...     return None
    >>> registry = GrammarRegistry(loader)
    >>> grammar = registry.load_grammar("source.osf")
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from typing import Any

from tessera.compiler import compile_grammar
from tessera.errors import RegistryError
from tessera.grammar import Grammar
from tessera.regex import RegexEngine
from tessera.utils.hashing import hash_grammar
from tessera.utils.logger import get_logger

logger = get_logger(__name__)

GrammarLoader = Callable[[str], Mapping[str, Any] | None]


class GrammarRegistry:
    """In-memory cache of compiled grammars keyed by scope name."""

    __slots__ = ("_loader", "_engine", "_grammars", "_fingerprints", "_lock")

    def __init__(
        self,
        loader: GrammarLoader | None = None,
        *,
        engine: RegexEngine | None = None,
    ) -> None:
        """Initialize registry.

        Args:
            loader: Callback returning the raw document for a scope name,
                or None when the scope is unknown
            engine: Regex engine used to compile every grammar
        """
        self._loader = loader
        self._engine = engine
        self._grammars: dict[str, Grammar] = {}
        self._fingerprints: dict[str, str] = {}
        self._lock = threading.RLock()

    def add_grammar(self, raw: Mapping[str, Any]) -> Grammar:
        """Compile and register a raw document under its scopeName.

        Registering an identical document again returns the grammar
        already compiled for it.

        Raises:
            GrammarError: If the document does not compile
        """
        digest = hash_grammar(raw)
        with self._lock:
            scope_name = raw.get("scopeName") if isinstance(raw, Mapping) else None
            if isinstance(scope_name, str) and self._fingerprints.get(scope_name) == digest:
                return self._grammars[scope_name]
            grammar = compile_grammar(raw, engine=self._engine)
            self._store(grammar, digest)
            return grammar

    def load_grammar(self, scope_name: str) -> Grammar | None:
        """Get the grammar for a scope name, loading it on first use.

        Returns:
            Compiled grammar, or None if the loader does not know the scope

        Raises:
            RegistryError: If the loader fails or returns a document for
                another scope
            GrammarError: If the loaded document does not compile
        """
        with self._lock:
            grammar = self._grammars.get(scope_name)
            if grammar is not None:
                return grammar

            raw = self._load_raw(scope_name)
            if raw is None:
                logger.warning("Unknown scope name: %s", scope_name)
                return None
            if not isinstance(raw, Mapping):
                raise RegistryError(scope_name, "loader did not return a mapping")
            if raw.get("scopeName") != scope_name:
                raise RegistryError(
                    scope_name,
                    f"loader returned a grammar for {raw.get('scopeName')!r}",
                )

            grammar = compile_grammar(raw, engine=self._engine)
            self._store(grammar, hash_grammar(raw))
            logger.debug("Loaded grammar %s", scope_name)
            return grammar

    def _load_raw(self, scope_name: str) -> Mapping[str, Any] | None:
        if self._loader is None:
            return None
        try:
            return self._loader(scope_name)
        except Exception as e:
            raise RegistryError(scope_name, f"loader failed: {e}") from e

    def _store(self, grammar: Grammar, digest: str) -> None:
        self._grammars[grammar.scope_name] = grammar
        self._fingerprints[grammar.scope_name] = digest

    def has(self, scope_name: str) -> bool:
        """Check if a grammar for scope_name has been compiled."""
        return scope_name in self._grammars

    @property
    def scope_names(self) -> frozenset[str]:
        """Scope names of all compiled grammars."""
        return frozenset(self._grammars)

    def __contains__(self, scope_name: str) -> bool:
        return self.has(scope_name)

    def __len__(self) -> int:
        return len(self._grammars)
