"""
Tessera — TextMate-style line tokenizer for Python

Assigns hierarchical scope labels to every character of a line using a
declarative grammar of regex rules and nested contexts, carrying the
open contexts from one line to the next.

Quick Start:
    >>> from tessera import compile_grammar
    >>> grammar = compile_grammar({
    ...     "scopeName": "source.demo",
    ...     "patterns": [
    ...         {"begin": '"', "end": '"', "name": "string.quoted.double"},
    ...     ],
    ... })
    >>> result = grammar.tokenize_line('say "hi')
    >>> [t.scopes for t in result.tokens]
    [('source.demo',), ('source.demo', 'string.quoted.double')]
    >>> result = grammar.tokenize_line('there" now', result.stack)
    >>> result.stack.depth
    0

Whole documents:
    >>> from tessera import DocumentTokenizer
    >>> doc = DocumentTokenizer(grammar, source_text)
    >>> doc.edit(3, 4, ["replacement line"])

Installation:
    pip install tessera              # Engine (zero deps)
    pip install tessera[test]        # + pytest and hypothesis
"""

from tessera.captures import project_captures
from tessera.compiler import GrammarCompiler, compile_grammar
from tessera.config import (
    TokenizeConfig,
    get_tokenize_config,
    reset_tokenize_config,
    set_tokenize_config,
    tokenize_config_context,
)
from tessera.document import DocumentTokenizer, tokenize_lines
from tessera.errors import (
    CyclicReference,
    GrammarError,
    InvalidPattern,
    RegistryError,
    TesseraError,
    UnresolvedReference,
)
from tessera.grammar import Grammar
from tessera.profiling import TokenizeAccumulator, get_tokenize_accumulator, profiled_tokenize
from tessera.regex import MatchResult, PythonRegexEngine, RegexEngine
from tessera.registry import GrammarRegistry
from tessera.rules import BeginEndRule, Context, MatchRule, Rule
from tessera.serialization import (
    grammar_from_file,
    grammar_from_json,
    load_raw_grammar,
    tokens_to_dict,
    tokens_to_json,
)
from tessera.stack import INITIAL, ContextStack, StackFrame
from tessera.tokenizer import LineTokenizer, tokenize_line
from tessera.tokens import LineTokens, ScopedToken

__version__ = "0.1.0"

__all__ = [
    # Core API
    "compile_grammar",
    "tokenize_line",
    "tokenize_lines",
    "project_captures",
    # Grammar model
    "Grammar",
    "GrammarCompiler",
    "Context",
    "Rule",
    "MatchRule",
    "BeginEndRule",
    # State and results
    "INITIAL",
    "ContextStack",
    "StackFrame",
    "LineTokens",
    "ScopedToken",
    "LineTokenizer",
    "DocumentTokenizer",
    # Regex capability
    "RegexEngine",
    "PythonRegexEngine",
    "MatchResult",
    # Loading
    "GrammarRegistry",
    "grammar_from_file",
    "grammar_from_json",
    "load_raw_grammar",
    "tokens_to_dict",
    "tokens_to_json",
    # Configuration
    "TokenizeConfig",
    "get_tokenize_config",
    "set_tokenize_config",
    "reset_tokenize_config",
    "tokenize_config_context",
    # Profiling
    "TokenizeAccumulator",
    "get_tokenize_accumulator",
    "profiled_tokenize",
    # Errors
    "TesseraError",
    "GrammarError",
    "InvalidPattern",
    "UnresolvedReference",
    "CyclicReference",
    "RegistryError",
    "__version__",
]
