"""
RobotML Compiler Package.

This package contains the static side of RobotML:
- Lexer: Tokenizes RobotML source code
- Parser: Produces an Abstract Syntax Tree from tokens
- Linker: Resolves variable and function references in the tree
- AST: Node definitions for the syntax tree
- ast_json: Langium-shaped JSON (de)serialisation of the tree
- ScopeTable: Compile-time symbol table
- TypeChecker: Type inference and checking, reported as diagnostics
"""

from __future__ import annotations

from typing import Optional

from robotml.compiler.ast_nodes import Program
from robotml.compiler.ast_json import load_program, program_from_obj, program_to_obj
from robotml.compiler.diagnostics import (
    Diagnostic,
    DiagnosticSeverity,
    DiagnosticSink,
    format_all,
    format_diagnostic,
)
from robotml.compiler.lexer import Lexer, tokenize
from robotml.compiler.linker import Linker, link
from robotml.compiler.parser import Parser
from robotml.compiler.scope import ScopeTable, Symbol
from robotml.compiler.type_checker import TypeChecker, check
from robotml.compiler.types import RobotType, is_compatible


def parse_source(source: str, filename: Optional[str] = None) -> Program:
    """
    Lex, parse and link RobotML source code.

    Args:
        source: RobotML source code
        filename: Optional filename recorded in source locations

    Returns:
        A linked Program

    Raises:
        LexerError: On an invalid character or unterminated comment
        ParserError: On a syntax error
    """
    tokens = Lexer(source, filename).tokenize()
    program = Parser(tokens, source).parse()
    return link(program)


__all__ = [
    "parse_source",
    "tokenize",
    "Lexer",
    "Parser",
    "Linker",
    "link",
    "Program",
    "program_from_obj",
    "program_to_obj",
    "load_program",
    "RobotType",
    "is_compatible",
    "ScopeTable",
    "Symbol",
    "TypeChecker",
    "check",
    "Diagnostic",
    "DiagnosticSeverity",
    "DiagnosticSink",
    "format_diagnostic",
    "format_all",
]
