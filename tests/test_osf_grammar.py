"""End-to-end tokenization with the OSF dialogue grammar fixture."""

from tessera import INITIAL, Grammar, tokenize_line, tokenize_lines

OSF = "source.osf"
STRING = "string.quoted.double.osf"


def _spans(grammar: Grammar, line: str, stack=INITIAL) -> list[tuple[int, int, tuple[str, ...]]]:
    return [(t.start, t.end, t.scopes) for t in tokenize_line(grammar, line, stack).tokens]


class TestHeaderLines:
    def test_header(self, osf_grammar: Grammar) -> None:
        """Key, separator and value get separate tokens."""
        result = tokenize_line(osf_grammar, "apiVersion: dialogue/v1")
        assert [(t.start, t.end, t.scopes) for t in result.tokens] == [
            (0, 10, (OSF, "meta.header.osf", "entity.name.tag.osf")),
            (10, 12, (OSF, "meta.header.osf")),
            (12, 23, (OSF, "meta.header.osf", "string.unquoted.value.osf")),
        ]
        assert result.stack.is_initial

    def test_header_text_slices(self, osf_grammar: Grammar) -> None:
        line = "apiVersion: dialogue/v1"
        result = tokenize_line(osf_grammar, line)
        assert [t.text(line) for t in result] == ["apiVersion", ": ", "dialogue/v1"]


class TestNodeDeclarations:
    def test_node_declaration(self, osf_grammar: Grammar) -> None:
        assert _spans(osf_grammar, "node node_1:") == [
            (0, 4, (OSF, "meta.node.declaration.osf", "keyword.control.osf")),
            (4, 5, (OSF, "meta.node.declaration.osf")),
            (5, 11, (OSF, "meta.node.declaration.osf", "entity.name.function.osf")),
            (11, 12, (OSF, "meta.node.declaration.osf")),
        ]


class TestProperties:
    def test_property_with_value(self, osf_grammar: Grammar) -> None:
        assert _spans(osf_grammar, "  character: none") == [
            (0, 2, (OSF, "meta.property.osf")),
            (2, 11, (OSF, "meta.property.osf", "entity.name.tag.osf")),
            (11, 13, (OSF, "meta.property.osf")),
            (13, 17, (OSF, "meta.property.osf", "string.unquoted.value.osf")),
        ]

    def test_property_with_string(self, osf_grammar: Grammar) -> None:
        """A quoted value falls through to the key rule and a string region."""
        line = '  message: "Hello World!"'
        result = tokenize_line(osf_grammar, line)
        assert [(t.start, t.end, t.scopes) for t in result.tokens] == [
            (0, 2, (OSF, "meta.property.osf")),
            (2, 9, (OSF, "meta.property.osf", "entity.name.tag.osf")),
            (9, 10, (OSF, "meta.property.osf")),
            (10, 11, (OSF,)),
            (11, 12, (OSF, STRING, "punctuation.definition.string.begin.osf")),
            (12, 24, (OSF, STRING)),
            (24, 25, (OSF, STRING, "punctuation.definition.string.end.osf")),
        ]
        assert result.stack.is_initial

    def test_text_block(self, osf_grammar: Grammar) -> None:
        line = "        The sun was setting..."
        assert _spans(osf_grammar, line) == [
            (0, len(line), (OSF, "string.unquoted.block.osf")),
        ]


class TestStrings:
    def test_escaped_quotes_stay_inside(self, osf_grammar: Grammar) -> None:
        """Escapes are tokenized and do not end the string."""
        result = tokenize_line(osf_grammar, r'"Say \"Hi!\""')
        escape = (OSF, STRING, "constant.character.escape.osf")
        assert [(t.start, t.end, t.scopes) for t in result.tokens] == [
            (0, 1, (OSF, STRING, "punctuation.definition.string.begin.osf")),
            (1, 5, (OSF, STRING)),
            (5, 7, escape),
            (7, 10, (OSF, STRING)),
            (10, 12, escape),
            (12, 13, (OSF, STRING, "punctuation.definition.string.end.osf")),
        ]
        assert result.stack == INITIAL

    def test_unterminated_string_spans_lines(self, osf_grammar: Grammar) -> None:
        first = tokenize_line(osf_grammar, '  line: "first part')
        assert first.stack.depth == 1
        second = tokenize_line(osf_grammar, 'second part"', first.stack)
        assert second.tokens[0].scopes == (OSF, STRING)
        assert second.tokens[-1].scope == "punctuation.definition.string.end.osf"
        assert second.stack.is_initial

    def test_triple_string_block(self, osf_grammar: Grammar) -> None:
        """Indented text inside a triple string is string content, not a text block."""
        lines = ['  text: """', "    Once upon a time", '"""', "node next:"]
        results = list(tokenize_lines(osf_grammar, lines))
        assert [r.stack.depth for r in results] == [1, 1, 0, 0]
        body = results[1].tokens
        assert [(t.start, t.end, t.scopes) for t in body] == [
            (0, 20, (OSF, "string.quoted.triple.osf")),
        ]
        assert results[3].tokens[0].scope == "keyword.control.osf"


class TestComments:
    def test_comment_line(self, osf_grammar: Grammar) -> None:
        assert _spans(osf_grammar, "# a comment") == [
            (0, 1, (OSF, "comment.line.number-sign.osf", "punctuation.definition.comment.osf")),
            (1, 11, (OSF, "comment.line.number-sign.osf")),
        ]

    def test_blank_line(self, osf_grammar: Grammar) -> None:
        result = tokenize_line(osf_grammar, "")
        assert result.tokens == ()
        assert result.stack is INITIAL
