# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Recursive-descent parser for .proto files.

Only the file-level structure is interpreted: syntax/edition, package,
imports and options. Message, enum, service and extend blocks are recorded
by name and their bodies are skipped.
"""

from __future__ import annotations

from pathlib import Path

from protobuild.model.entities import ProtoFile, ProtoOption
from protobuild.parser.lexer import LexerError, Token, TokenType, tokenize

# ###############
# Public Interface
# ###############


class ParseError(Exception):
    """Raised when the parser encounters a syntactically invalid construct.

    Attributes:
        line: 1-based line number of the error.
        column: 1-based column number of the error.
        filename: Identity of the file being parsed.
        reason: The human-readable cause without location prefix.
    """

    def __init__(self, message: str, line: int, column: int, filename: str = "<string>") -> None:
        super().__init__(f"{filename}: Line {line}, column {column}: {message}")
        self.reason = message
        self.line = line
        self.column = column
        self.filename = filename


def parse(source: str, *, directory: str = "", basename: str = "<string>") -> ProtoFile:
    """Parse proto source text into a :class:`ProtoFile`.

    Args:
        source: The full text of a .proto file.
        directory: Workspace-relative directory of the file.
        basename: File name used for identity and error messages.

    Returns:
        An immutable ProtoFile describing the file.

    Raises:
        ParseError: If the source is lexically or syntactically invalid, or
            declares more than one package.
    """
    filename = f"{directory}/{basename}" if directory else basename
    try:
        tokens = tokenize(source)
    except LexerError as exc:
        raise ParseError(exc.reason, exc.line, exc.column, filename) from exc
    return _Parser(tokens, directory, basename, filename).parse()


def parse_file(path: Path, directory: str = "") -> ProtoFile:
    """Read and parse the .proto file at *path*.

    Raises:
        ParseError: If the file cannot be read or parsed.
    """
    filename = f"{directory}/{path.name}" if directory else path.name
    try:
        source = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ParseError(f"cannot read file: {exc}", 1, 1, filename) from exc
    return parse(source, directory=directory, basename=path.name)


# ################
# Implementation
# ################

# Keywords are contextual in proto; these may appear wherever a name is expected.
_KEYWORD_TYPES: frozenset[TokenType] = frozenset(
    {
        TokenType.SYNTAX,
        TokenType.EDITION,
        TokenType.PACKAGE,
        TokenType.IMPORT,
        TokenType.PUBLIC,
        TokenType.WEAK,
        TokenType.OPTION,
        TokenType.MESSAGE,
        TokenType.ENUM,
        TokenType.SERVICE,
        TokenType.EXTEND,
    }
)

_BLOCK_TYPES: dict[TokenType, str] = {
    TokenType.MESSAGE: "message",
    TokenType.ENUM: "enum",
    TokenType.SERVICE: "service",
    TokenType.EXTEND: "extend",
}


class _Parser:
    """Recursive-descent parser for proto token streams."""

    def __init__(self, tokens: list[Token], directory: str, basename: str, filename: str) -> None:
        self._tokens = tokens
        self._pos = 0
        self._directory = directory
        self._basename = basename
        self._filename = filename
        self._syntax: str | None = None
        self._edition: str | None = None
        self._package: str | None = None
        self._imports: list[str] = []
        self._options: list[ProtoOption] = []
        self._messages: list[str] = []
        self._enums: list[str] = []
        self._services: list[str] = []

    def parse(self) -> ProtoFile:
        """Parse the full token stream and return a ProtoFile."""
        while not self._at_end():
            self._parse_top_level()
        return ProtoFile(
            directory=self._directory,
            basename=self._basename,
            syntax=self._syntax,
            edition=self._edition,
            package=self._package,
            imports=tuple(self._imports),
            options=tuple(self._options),
            messages=tuple(self._messages),
            enums=tuple(self._enums),
            services=tuple(self._services),
        )

    # ------------------------------------------------------------------
    # Token access helpers
    # ------------------------------------------------------------------

    def _current(self) -> Token:
        """Return the current (un-consumed) token."""
        return self._tokens[self._pos]

    def _peek_type(self) -> TokenType:
        return self._tokens[self._pos].type

    def _at_end(self) -> bool:
        return self._peek_type() == TokenType.EOF

    def _advance(self) -> Token:
        """Consume and return the current token, stopping at EOF."""
        tok = self._tokens[self._pos]
        if self._pos < len(self._tokens) - 1:
            self._pos += 1
        return tok

    def _error(self, message: str, tok: Token) -> ParseError:
        return ParseError(message, tok.line, tok.column, self._filename)

    def _expect(self, *types: TokenType) -> Token:
        """Consume the current token if it matches any of the given types.

        Raises ParseError if the current token does not match.
        """
        tok = self._current()
        if tok.type not in types:
            expected = ", ".join(repr(t.value) for t in types)
            got = "end of file" if tok.type == TokenType.EOF else repr(tok.value)
            raise self._error(f"Expected {expected}, got {got}", tok)
        return self._advance()

    def _check(self, *types: TokenType) -> bool:
        return self._peek_type() in types

    def _expect_name_token(self) -> Token:
        """Consume the current token as a name, accepting keywords in name positions."""
        tok = self._current()
        if tok.type != TokenType.IDENTIFIER and tok.type not in _KEYWORD_TYPES:
            got = "end of file" if tok.type == TokenType.EOF else repr(tok.value)
            raise self._error(f"Expected identifier, got {got}", tok)
        return self._advance()

    # ------------------------------------------------------------------
    # Top-level statements
    # ------------------------------------------------------------------

    def _parse_top_level(self) -> None:
        """Parse one top-level statement."""
        tok = self._current()
        if tok.type == TokenType.SEMICOLON:
            self._advance()
        elif tok.type == TokenType.SYNTAX:
            if self._syntax is not None:
                raise self._error("Duplicate 'syntax' statement", tok)
            self._syntax = self._parse_string_assignment(TokenType.SYNTAX)
        elif tok.type == TokenType.EDITION:
            if self._edition is not None:
                raise self._error("Duplicate 'edition' statement", tok)
            self._edition = self._parse_string_assignment(TokenType.EDITION)
        elif tok.type == TokenType.PACKAGE:
            if self._package is not None:
                raise self._error(
                    f"Duplicate 'package' statement (package {self._package!r} already declared)",
                    tok,
                )
            self._package = self._parse_package()
        elif tok.type == TokenType.IMPORT:
            self._imports.append(self._parse_import())
        elif tok.type == TokenType.OPTION:
            self._options.append(self._parse_option())
        elif tok.type in _BLOCK_TYPES:
            self._parse_block()
        else:
            got = "end of file" if tok.type == TokenType.EOF else repr(tok.value)
            raise self._error(f"Unexpected token {got} at top level", tok)

    def _parse_string_assignment(self, keyword: TokenType) -> str:
        """Parse: <keyword> = "<value>";"""
        self._expect(keyword)
        self._expect(TokenType.EQUALS)
        value = self._parse_string_literal()
        self._expect(TokenType.SEMICOLON)
        return value

    def _parse_package(self) -> str:
        """Parse: package <full.ident>;"""
        self._expect(TokenType.PACKAGE)
        name = self._parse_full_ident()
        self._expect(TokenType.SEMICOLON)
        return name

    def _parse_import(self) -> str:
        """Parse: import [public|weak] "<path>";"""
        self._expect(TokenType.IMPORT)
        if self._check(TokenType.PUBLIC, TokenType.WEAK):
            self._advance()
        path = self._parse_string_literal()
        self._expect(TokenType.SEMICOLON)
        return path

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------

    def _parse_option(self) -> ProtoOption:
        """Parse: option <name> = <constant>;"""
        self._expect(TokenType.OPTION)
        name = self._parse_option_name()
        self._expect(TokenType.EQUALS)
        value = self._parse_constant()
        self._expect(TokenType.SEMICOLON)
        return ProtoOption(name=name, value=value)

    def _parse_option_name(self) -> str:
        """Parse an option name such as ``go_package`` or ``(my.ext).field``."""
        parts: list[str] = [self._parse_option_name_part()]
        while self._check(TokenType.DOT):
            self._advance()
            parts.append(self._parse_option_name_part())
        return ".".join(parts)

    def _parse_option_name_part(self) -> str:
        if self._check(TokenType.LPAREN):
            self._advance()
            leading_dot = ""
            if self._check(TokenType.DOT):
                self._advance()
                leading_dot = "."
            ident = self._parse_full_ident()
            self._expect(TokenType.RPAREN)
            return f"({leading_dot}{ident})"
        return self._expect_name_token().value

    def _parse_constant(self) -> str:
        """Parse an option value and return it as text."""
        tok = self._current()
        if tok.type == TokenType.STRING:
            return self._parse_string_literal()
        if tok.type in (TokenType.MINUS, TokenType.PLUS):
            sign = self._advance().value
            operand = self._expect(TokenType.NUMBER, TokenType.IDENTIFIER)
            return ("-" if sign == "-" else "") + operand.value
        if tok.type == TokenType.NUMBER:
            return self._advance().value
        if tok.type == TokenType.LBRACE:
            return self._parse_aggregate()
        if tok.type == TokenType.IDENTIFIER or tok.type in _KEYWORD_TYPES:
            return self._parse_full_ident()
        got = "end of file" if tok.type == TokenType.EOF else repr(tok.value)
        raise self._error(f"Expected option value, got {got}", tok)

    def _parse_aggregate(self) -> str:
        """Consume a brace-delimited aggregate value and return its token text."""
        open_tok = self._expect(TokenType.LBRACE)
        parts: list[str] = ["{"]
        depth = 1
        while depth > 0:
            tok = self._current()
            if tok.type == TokenType.EOF:
                raise self._error("Unterminated aggregate option value", open_tok)
            self._advance()
            if tok.type == TokenType.LBRACE:
                depth += 1
            elif tok.type == TokenType.RBRACE:
                depth -= 1
            parts.append(_token_text(tok))
        return " ".join(parts)

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def _parse_block(self) -> None:
        """Parse: message|enum|service|extend <Name> { ... } and record the name."""
        keyword = self._advance()
        if keyword.type == TokenType.EXTEND:
            self._parse_type_name()
        else:
            name = self._expect_name_token().value
            if keyword.type == TokenType.MESSAGE:
                self._messages.append(name)
            elif keyword.type == TokenType.ENUM:
                self._enums.append(name)
            else:
                self._services.append(name)
        self._skip_body(_BLOCK_TYPES[keyword.type], keyword)

    def _skip_body(self, what: str, start: Token) -> None:
        """Consume a brace-delimited body, including nested braces."""
        self._expect(TokenType.LBRACE)
        depth = 1
        while depth > 0:
            tok = self._current()
            if tok.type == TokenType.EOF:
                raise self._error(f"Unterminated {what} body", start)
            self._advance()
            if tok.type == TokenType.LBRACE:
                depth += 1
            elif tok.type == TokenType.RBRACE:
                depth -= 1

    # ------------------------------------------------------------------
    # Common parsers
    # ------------------------------------------------------------------

    def _parse_full_ident(self) -> str:
        """Parse: ident ( "." ident )*"""
        parts: list[str] = [self._expect_name_token().value]
        while self._check(TokenType.DOT):
            self._advance()
            parts.append(self._expect_name_token().value)
        return ".".join(parts)

    def _parse_type_name(self) -> str:
        """Parse: [ "." ] full_ident"""
        prefix = ""
        if self._check(TokenType.DOT):
            self._advance()
            prefix = "."
        return prefix + self._parse_full_ident()

    def _parse_string_literal(self) -> str:
        """Parse one or more adjacent string literals and concatenate them."""
        parts: list[str] = [self._expect(TokenType.STRING).value]
        while self._check(TokenType.STRING):
            parts.append(self._advance().value)
        return "".join(parts)


def _token_text(tok: Token) -> str:
    if tok.type == TokenType.STRING:
        escaped = tok.value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return tok.value
