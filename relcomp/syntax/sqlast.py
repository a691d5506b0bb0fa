"""Syntax tree of the SQL grammar.

The node types of this module form a closed family: `SqlNode` lists all node kinds that can appear as relational input in a
SQL syntax tree. The translator handles each of them, and type checkers flag any kind that is added here without being
handled there.
"""
from __future__ import annotations

import dataclasses
from collections.abc import Sequence
from typing import Optional

from ._common import (
    AstHeader,
    AggregateFunctionAst,
    ColumnNameAst,
    JoinConditionAst,
    NamedColumnExpr,
    OrderByEntry,
    ValueExprAst,
)


@dataclasses.dataclass(frozen=True)
class SelectColumn(AstHeader):
    """A plain column of the SELECT list. If an `alias` is given, the column is renamed (``SELECT a AS x``)."""
    name: str | int
    rel_alias: Optional[str] = None
    alias: Optional[str] = None

    def is_wildcard(self) -> bool:
        """Checks, whether this is the unqualified ``*``."""
        return self.name == "*" and self.rel_alias is None


SelectItem = SelectColumn | AggregateFunctionAst | NamedColumnExpr
"""All kinds of entries of a SELECT list."""


@dataclasses.dataclass(frozen=True)
class SelectClause(AstHeader):
    distinct: bool
    arg: Sequence[SelectItem]


@dataclasses.dataclass(frozen=True)
class ConditionClause(AstHeader):
    """A WHERE or HAVING clause. The clause has its own position, which differs from the one of the condition."""
    arg: ValueExprAst


@dataclasses.dataclass(frozen=True)
class Relation(AstHeader):
    name: str
    rel_alias: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class Statement(AstHeader):
    """A complete *SELECT* statement.

    Attributes
    ----------
    select : SelectClause
        The SELECT list
    from_ : SqlNode
        The FROM clause, which can be an arbitrary relational expression
    where : Optional[ConditionClause]
        The filter condition, if any
    group_by : Optional[Sequence[ColumnNameAst]]
        The grouping columns. *None* if the statement does not contain a GROUP BY clause.
    having : Optional[ConditionClause]
        The filter condition on groups, if any
    num_aggregation_columns : int
        The number of aggregate function calls in the SELECT list, as counted by the parser
    """
    select: SelectClause
    from_: SqlNode
    where: Optional[ConditionClause] = None
    group_by: Optional[Sequence[ColumnNameAst]] = None
    having: Optional[ConditionClause] = None
    num_aggregation_columns: int = 0


@dataclasses.dataclass(frozen=True)
class RenameRelation(AstHeader):
    child: SqlNode
    new_rel_alias: str


@dataclasses.dataclass(frozen=True)
class RelationFromSubstatement(AstHeader):
    """A nested statement in the FROM clause: ``(SELECT ...) AS alias``."""
    statement: SqlNode
    rel_alias: str


@dataclasses.dataclass(frozen=True)
class InnerJoin(AstHeader):
    child: SqlNode
    child2: SqlNode
    cond: JoinConditionAst = None


@dataclasses.dataclass(frozen=True)
class LeftOuterJoin(AstHeader):
    child: SqlNode
    child2: SqlNode
    cond: JoinConditionAst = None


@dataclasses.dataclass(frozen=True)
class RightOuterJoin(AstHeader):
    child: SqlNode
    child2: SqlNode
    cond: JoinConditionAst = None


@dataclasses.dataclass(frozen=True)
class FullOuterJoin(AstHeader):
    child: SqlNode
    child2: SqlNode
    cond: JoinConditionAst = None


@dataclasses.dataclass(frozen=True)
class CrossJoin(AstHeader):
    child: SqlNode
    child2: SqlNode


@dataclasses.dataclass(frozen=True)
class NaturalJoin(AstHeader):
    child: SqlNode
    child2: SqlNode


@dataclasses.dataclass(frozen=True)
class Union(AstHeader):
    child: SqlNode
    child2: SqlNode
    all: bool = False


@dataclasses.dataclass(frozen=True)
class Intersect(AstHeader):
    child: SqlNode
    child2: SqlNode
    all: bool = False


@dataclasses.dataclass(frozen=True)
class Except(AstHeader):
    child: SqlNode
    child2: SqlNode
    all: bool = False


@dataclasses.dataclass(frozen=True)
class OrderBy(AstHeader):
    child: SqlNode
    arg: Sequence[OrderByEntry]


LIMIT_ALL = -1
"""Value of `Limit.limit` for ``LIMIT ALL``, i.e. only an offset is applied."""


@dataclasses.dataclass(frozen=True)
class Limit(AstHeader):
    child: SqlNode
    limit: int
    offset: int = 0

    def is_limit_all(self) -> bool:
        return self.limit == LIMIT_ALL


SqlNode = (Relation | Statement | RenameRelation | RelationFromSubstatement
           | InnerJoin | LeftOuterJoin | RightOuterJoin | FullOuterJoin | CrossJoin | NaturalJoin
           | Union | Intersect | Except | OrderBy | Limit)
"""All node kinds of a SQL syntax tree."""


@dataclasses.dataclass(frozen=True)
class SqlRoot:
    """The root of a SQL syntax tree, as produced by the parser. The actual query is the `child`."""
    child: SqlNode


__all__ = [
    "SelectColumn", "SelectItem", "SelectClause", "ConditionClause",
    "Relation", "Statement", "RenameRelation", "RelationFromSubstatement",
    "InnerJoin", "LeftOuterJoin", "RightOuterJoin", "FullOuterJoin", "CrossJoin", "NaturalJoin",
    "Union", "Intersect", "Except", "OrderBy", "Limit", "LIMIT_ALL",
    "SqlNode", "SqlRoot",
    "ColumnNameAst", "AggregateFunctionAst", "NamedColumnExpr", "OrderByEntry", "ValueExprAst",
]
