"""Syntax trees of the two surface grammars that relcomp translates.

The `sqlast` module contains the syntax tree of SQL statements, the `raast` module the syntax tree of native relational
algebra expressions. Both share the value expressions, column references, aggregates and ordering specifications defined
here. Since the parser runs outside of Python, the `loader` module re-creates the syntax trees from the parser's JSON output.
"""
from __future__ import annotations

from . import raast, sqlast
from ._common import (
    AggregateFunctionAst,
    AstHeader,
    ColumnNameAst,
    JoinConditionAst,
    NamedColumnExpr,
    OrderByEntry,
    RelalgAstHeader,
    ValueExprAst,
)
from .loader import ParserError, load_code_info, load_relalg_ast, load_sql_ast, load_value_expr

__all__ = [
    "raast", "sqlast",
    "AggregateFunctionAst", "AstHeader", "ColumnNameAst", "JoinConditionAst", "NamedColumnExpr", "OrderByEntry",
    "RelalgAstHeader", "ValueExprAst",
    "ParserError", "load_code_info", "load_relalg_ast", "load_sql_ast", "load_value_expr",
]
