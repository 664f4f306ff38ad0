# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexer and parser for .proto files."""

from protobuild.parser.lexer import LexerError
from protobuild.parser.parser import ParseError, parse, parse_file

__all__ = [
    "parse",
    "parse_file",
    "ParseError",
    "LexerError",
]
