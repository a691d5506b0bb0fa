"""Evaluable value expressions that are contained in the operators of the operator tree.

There are just two kinds of expressions: `ValueExprColumnValue` references a column of the input relation and
`ValueExprGeneric` applies a function (or an operator) to its arguments. Literal values are modelled as generic expressions
with the special function *constant* whose arguments are the literal values themselves. All other functions receive nested
expressions as arguments.

Each expression carries the source position and the parenthesization of the syntax node it was translated from. Both are
only used for error messages and pretty-printing and never affect evaluation. Expressions are immutable.
"""
from __future__ import annotations

import abc
import typing
from collections.abc import Generator, Sequence
from typing import Any, Optional

from ._core import CodeInfo, Column, DataType, VisitorResult
from .util.jsonize import jsondict

BINARY_OPERATORS = frozenset({"=", "!=", "<>", "<", "<=", ">", ">=", "+", "-", "*", "/", "%", "||",
                              "and", "or", "xor", "like", "ilike"})
"""Functions that are rendered in infix notation."""


class ValueExpr(abc.ABC):
    """Common base class of all value expressions.

    Parameters
    ----------
    datatype : DataType
        The result type of the expression
    func : str
        The function that computes the expression
    code_info : Optional[CodeInfo], optional
        The source position of the expression
    wrapped_in_parentheses : bool, optional
        Whether the expression was wrapped in parentheses in the source text
    """

    def __init__(self, datatype: DataType, func: str, *, code_info: Optional[CodeInfo] = None,
                 wrapped_in_parentheses: bool = False) -> None:
        self._datatype = datatype
        self._func = func
        self._code_info = code_info
        self._wrapped_in_parentheses = wrapped_in_parentheses

    @property
    def datatype(self) -> DataType:
        return self._datatype

    @property
    def func(self) -> str:
        return self._func

    @property
    def code_info(self) -> Optional[CodeInfo]:
        return self._code_info

    @property
    def wrapped_in_parentheses(self) -> bool:
        return self._wrapped_in_parentheses

    @abc.abstractmethod
    def iterchildren(self) -> Sequence[ValueExpr]:
        """Provides all expressions that are directly nested in this expression. Literal arguments are not included."""
        raise NotImplementedError

    def dfs_walk(self) -> Generator[ValueExpr, None, None]:
        """Provides the current expression and all nested expressions in depth-first order."""
        yield self
        for child in self.iterchildren():
            yield from child.dfs_walk()

    def columns(self) -> set[Column]:
        """Provides all columns that are referenced anywhere in the expression."""
        return {expr.column for expr in self.dfs_walk() if isinstance(expr, ValueExprColumnValue)}

    @abc.abstractmethod
    def accept_visitor(self, visitor: ValueExprVisitor[VisitorResult]) -> VisitorResult:
        raise NotImplementedError

    @abc.abstractmethod
    def __json__(self) -> jsondict:
        raise NotImplementedError

    def __eq__(self, other: object) -> bool:
        return (isinstance(other, type(self))
                and self._datatype == other._datatype and self._func == other._func
                and self._code_info == other._code_info
                and self._wrapped_in_parentheses == other._wrapped_in_parentheses)

    def __hash__(self) -> int:
        return hash((self._datatype, self._func))

    def __str__(self) -> str:
        return self.accept_visitor(_ExpressionFormatter())


class ValueExprColumnValue(ValueExpr):
    """References the value of a column of the current tuple.

    Parameters
    ----------
    column_name : str | int
        The name of the column, or its 1-based position
    rel_alias : Optional[str]
        The relation that provides the column, if the reference is qualified
    """

    def __init__(self, column_name: str | int, rel_alias: Optional[str], *, code_info: Optional[CodeInfo] = None,
                 wrapped_in_parentheses: bool = False) -> None:
        super().__init__("null", "columnValue", code_info=code_info, wrapped_in_parentheses=wrapped_in_parentheses)
        self._column = Column(column_name, rel_alias)

    @property
    def column(self) -> Column:
        return self._column

    @property
    def column_name(self) -> str | int:
        return self._column.name

    @property
    def rel_alias(self) -> Optional[str]:
        return self._column.rel_alias

    def iterchildren(self) -> Sequence[ValueExpr]:
        return []

    def accept_visitor(self, visitor: ValueExprVisitor[VisitorResult]) -> VisitorResult:
        return visitor.visit_column_value(self)

    def __json__(self) -> jsondict:
        return {"type": "columnValue", "column": self._column, "codeInfo": self._code_info,
                "wrappedInParentheses": self._wrapped_in_parentheses}

    def __eq__(self, other: object) -> bool:
        return super().__eq__(other) and self._column == other._column

    def __hash__(self) -> int:
        return hash(self._column)

    def __repr__(self) -> str:
        return f"ValueExprColumnValue({self._column!r})"


class ValueExprGeneric(ValueExpr):
    """Applies a function or operator to a list of arguments.

    Parameters
    ----------
    datatype : DataType
        The result type
    func : str
        The function to apply. For *constant*, the arguments are the literal values, otherwise they are nested
        expressions.
    args : Sequence[ValueExpr | Any]
        The arguments
    """

    def __init__(self, datatype: DataType, func: str, args: Sequence[ValueExpr | Any] = (), *,
                 code_info: Optional[CodeInfo] = None, wrapped_in_parentheses: bool = False) -> None:
        super().__init__(datatype, func, code_info=code_info, wrapped_in_parentheses=wrapped_in_parentheses)
        self._args = tuple(args)

    @property
    def args(self) -> Sequence[ValueExpr | Any]:
        return self._args

    def is_constant(self) -> bool:
        return self._func == "constant"

    def iterchildren(self) -> Sequence[ValueExpr]:
        if self.is_constant():
            return []
        return [arg for arg in self._args if isinstance(arg, ValueExpr)]

    def accept_visitor(self, visitor: ValueExprVisitor[VisitorResult]) -> VisitorResult:
        return visitor.visit_generic(self)

    def __json__(self) -> jsondict:
        return {"type": "generic", "datatype": self._datatype, "func": self._func, "args": list(self._args),
                "codeInfo": self._code_info, "wrappedInParentheses": self._wrapped_in_parentheses}

    def __eq__(self, other: object) -> bool:
        return super().__eq__(other) and self._args == other._args

    def __hash__(self) -> int:
        return hash((self._datatype, self._func, len(self._args)))

    def __repr__(self) -> str:
        return f"ValueExprGeneric({self._datatype!r}, {self._func!r}, {list(self._args)!r})"


class ValueExprVisitor(abc.ABC, typing.Generic[VisitorResult]):
    """Basic visitor to operate on arbitrary value expressions."""

    @abc.abstractmethod
    def visit_column_value(self, expr: ValueExprColumnValue) -> VisitorResult:
        raise NotImplementedError

    @abc.abstractmethod
    def visit_generic(self, expr: ValueExprGeneric) -> VisitorResult:
        raise NotImplementedError


def _format_literal(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return "'" + value.replace("'", "''") + "'"
    return str(value)


class _ExpressionFormatter(ValueExprVisitor[str]):
    """Renders expressions in a compact, SQL-like notation, e.g. ``R.a + 1 > 42``."""

    def visit_column_value(self, expr: ValueExprColumnValue) -> str:
        return self._wrap(expr, str(expr.column))

    def visit_generic(self, expr: ValueExprGeneric) -> str:
        if expr.is_constant():
            rendered = ", ".join(_format_literal(arg) for arg in expr.args)
        elif expr.func in BINARY_OPERATORS and len(expr.args) == 2:
            left, right = (arg.accept_visitor(self) for arg in expr.args)
            rendered = f"{left} {expr.func} {right}"
        elif expr.func == "not" and len(expr.args) == 1:
            rendered = f"not {expr.args[0].accept_visitor(self)}"
        else:
            args = ", ".join(arg.accept_visitor(self) if isinstance(arg, ValueExpr) else _format_literal(arg)
                             for arg in expr.args)
            rendered = f"{expr.func}({args})"
        return self._wrap(expr, rendered)

    def _wrap(self, expr: ValueExpr, rendered: str) -> str:
        return f"({rendered})" if expr.wrapped_in_parentheses else rendered
