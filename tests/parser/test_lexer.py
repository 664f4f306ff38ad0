# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the proto lexical scanner."""

import pytest

from protobuild.parser.lexer import LexerError, Token, TokenType, tokenize

# ###############
# Test Helpers
# ###############


def _tokens_no_eof(source: str) -> list[Token]:
    """Return all tokens except the terminal EOF token."""
    result = tokenize(source)
    assert result[-1].type == TokenType.EOF
    return result[:-1]


def _types(source: str) -> list[TokenType]:
    return [tok.type for tok in _tokens_no_eof(source)]


def _values(source: str) -> list[str]:
    return [tok.value for tok in _tokens_no_eof(source)]


# ###############
# EOF Handling
# ###############


class TestEof:
    def test_empty_string_produces_eof(self) -> None:
        tokens = tokenize("")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.EOF
        assert (tokens[0].line, tokens[0].column) == (1, 1)

    def test_comments_and_whitespace_only_produce_eof(self) -> None:
        tokens = tokenize("  // line\n/* block\n comment */\t\n")
        assert [t.type for t in tokens] == [TokenType.EOF]


# ###############
# Keywords and Identifiers
# ###############


class TestKeywords:
    @pytest.mark.parametrize(
        "word,expected",
        [
            ("syntax", TokenType.SYNTAX),
            ("edition", TokenType.EDITION),
            ("package", TokenType.PACKAGE),
            ("import", TokenType.IMPORT),
            ("public", TokenType.PUBLIC),
            ("weak", TokenType.WEAK),
            ("option", TokenType.OPTION),
            ("message", TokenType.MESSAGE),
            ("enum", TokenType.ENUM),
            ("service", TokenType.SERVICE),
            ("extend", TokenType.EXTEND),
        ],
    )
    def test_keyword(self, word: str, expected: TokenType) -> None:
        assert _types(word) == [expected]

    def test_other_words_are_identifiers(self) -> None:
        assert _types("rpc returns stream repeated") == [TokenType.IDENTIFIER] * 4

    def test_identifier_with_underscore_and_digits(self) -> None:
        assert _values("_go_package2") == ["_go_package2"]

    def test_keyword_prefix_is_identifier(self) -> None:
        assert _types("packages") == [TokenType.IDENTIFIER]


# ###############
# Symbols
# ###############


class TestSymbols:
    def test_all_single_character_symbols(self) -> None:
        assert _types("{ } ( ) [ ] < > , . : ; = - + /") == [
            TokenType.LBRACE,
            TokenType.RBRACE,
            TokenType.LPAREN,
            TokenType.RPAREN,
            TokenType.LBRACKET,
            TokenType.RBRACKET,
            TokenType.LANGLE,
            TokenType.RANGLE,
            TokenType.COMMA,
            TokenType.DOT,
            TokenType.COLON,
            TokenType.SEMICOLON,
            TokenType.EQUALS,
            TokenType.MINUS,
            TokenType.PLUS,
            TokenType.SLASH,
        ]

    def test_dotted_name(self) -> None:
        assert _values("foo.bar") == ["foo", ".", "bar"]

    def test_unexpected_character(self) -> None:
        with pytest.raises(LexerError, match="Unexpected character") as exc_info:
            tokenize("package a;\n  @")
        assert exc_info.value.line == 2
        assert exc_info.value.column == 3


# ###############
# String Literals
# ###############


class TestStrings:
    def test_double_quoted(self) -> None:
        tokens = _tokens_no_eof('"pkg/a/a.proto"')
        assert tokens[0].type == TokenType.STRING
        assert tokens[0].value == "pkg/a/a.proto"

    def test_single_quoted(self) -> None:
        assert _values("'proto3'") == ["proto3"]

    def test_simple_escapes_are_decoded(self) -> None:
        assert _values(r'"a\"b\n\\"') == ['a"b\n\\']

    def test_other_escapes_are_kept_verbatim(self) -> None:
        assert _values(r'"\x41"') == ["\\x41"]

    def test_unterminated_string(self) -> None:
        with pytest.raises(LexerError, match="Unterminated string literal"):
            tokenize('"abc')

    def test_newline_inside_string_is_an_error(self) -> None:
        with pytest.raises(LexerError, match="Unterminated string literal"):
            tokenize('"abc\n"')

    def test_comment_markers_inside_string_are_content(self) -> None:
        assert _values('"//not a comment"') == ["//not a comment"]


# ###############
# Number Literals
# ###############


class TestNumbers:
    @pytest.mark.parametrize("literal", ["0", "42", "0x1F", "017", "1.5", "1.5e-3", "2E+10", "1e5"])
    def test_number_is_carried_as_text(self, literal: str) -> None:
        tokens = _tokens_no_eof(literal)
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.NUMBER
        assert tokens[0].value == literal

    def test_leading_dot_number(self) -> None:
        assert _types(".5") == [TokenType.NUMBER]

    def test_hex_does_not_take_sign(self) -> None:
        assert _values("0x1E-1") == ["0x1E", "-", "1"]

    def test_negative_number_is_minus_then_number(self) -> None:
        assert _types("-5") == [TokenType.MINUS, TokenType.NUMBER]


# ###############
# Comments and Positions
# ###############


class TestCommentsAndPositions:
    def test_line_comment_is_skipped(self) -> None:
        assert _values("package // trailing\nfoo") == ["package", "foo"]

    def test_block_comment_is_skipped(self) -> None:
        assert _values("a /* b */ c") == ["a", "c"]

    def test_unterminated_block_comment(self) -> None:
        with pytest.raises(LexerError, match="Unterminated block comment"):
            tokenize("/* never closed")

    def test_token_positions(self) -> None:
        tokens = _tokens_no_eof('syntax = "proto3";\nimport "a.proto";')
        import_tok = tokens[4]
        assert import_tok.type == TokenType.IMPORT
        assert (import_tok.line, import_tok.column) == (2, 1)
        assert (tokens[5].line, tokens[5].column) == (2, 8)

    def test_lexer_error_reason_has_no_location(self) -> None:
        with pytest.raises(LexerError) as exc_info:
            tokenize("#")
        assert exc_info.value.reason == "Unexpected character: '#'"
        assert str(exc_info.value).startswith("Line 1, column 1:")
