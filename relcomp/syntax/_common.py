"""Syntax nodes that are shared by the SQL and the relational algebra grammar."""
from __future__ import annotations

import dataclasses
from collections.abc import Mapping, Sequence
from typing import Any, Optional

from .._core import CodeInfo, ColumnName, DataType


@dataclasses.dataclass(frozen=True, kw_only=True)
class AstHeader:
    """Annotations that the parser attaches to every syntax node.

    Attributes
    ----------
    code_info : Optional[CodeInfo]
        The source position of the node. The parser guarantees this to be set; translating a node without position is an
        internal-consistency failure.
    wrapped_in_parentheses : bool
        Whether the node was wrapped in parentheses in the source text. This never affects the evaluation order.
    """
    code_info: Optional[CodeInfo] = None
    wrapped_in_parentheses: bool = False


@dataclasses.dataclass(frozen=True, kw_only=True)
class RelalgAstHeader(AstHeader):
    """Annotations of relational algebra syntax nodes, which can additionally declare metadata for the produced tree node."""
    metadata: Mapping[str, Any] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass(frozen=True)
class ValueExprAst(AstHeader):
    """A typed value expression.

    Attributes
    ----------
    datatype : DataType
        The result type of the expression, e.g. *number*. Expressions of unknown type use *null*.
    func : str
        The function or operator that is applied, e.g. ``+`` or ``upper``. Two functions are special: *constant* nodes
        contain literal values as arguments and *columnValue* nodes (with datatype *null*) reference a column via the
        arguments ``(column name, relation alias)``.
    args : Sequence[Any]
        The arguments of the function. These are literal values for constants and columns, and nested expressions
        otherwise.
    """
    datatype: DataType
    func: str
    args: Sequence[Any] = ()

    def is_column_value(self) -> bool:
        return self.datatype == "null" and self.func == "columnValue"

    def is_constant(self) -> bool:
        return self.func == "constant"


@dataclasses.dataclass(frozen=True)
class ColumnNameAst(AstHeader):
    """A (possibly qualified) column reference."""
    name: ColumnName
    rel_alias: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class NamedColumnExpr(AstHeader):
    """A computed column, i.e. a value expression whose result is exposed under a new name."""
    name: ColumnName
    rel_alias: Optional[str]
    child: ValueExprAst


@dataclasses.dataclass(frozen=True)
class AggregateFunctionAst(AstHeader):
    """An aggregate function call such as ``SUM(a) AS total``.

    Attributes
    ----------
    aggregate : str
        The aggregate function, e.g. *SUM* or *COUNT_ALL* for ``COUNT(*)``
    column : Optional[ColumnNameAst]
        The aggregated column. *None* for aggregates that do not take a column.
    name : str
        The name of the output column that contains the aggregated value
    """
    aggregate: str
    column: Optional[ColumnNameAst]
    name: str


@dataclasses.dataclass(frozen=True)
class OrderByEntry(AstHeader):
    """One entry of an ordering specification."""
    column: ColumnNameAst
    asc: bool = True


JoinConditionAst = Optional[ValueExprAst | Sequence[str]]
"""The raw condition of a join: absent, a list of column names or a boolean expression."""
