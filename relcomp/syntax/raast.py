"""Syntax tree of the native relational algebra grammar.

In contrast to SQL, the relational algebra grammar already consists of primitive operators. Therefore, each node kind of this
module corresponds to exactly one kind of operator in the operator tree. All nodes can declare metadata that is copied onto
the operator that is produced for them.
"""
from __future__ import annotations

import dataclasses
from collections.abc import Sequence
from typing import Any, Optional

from .._core import DataType
from ._common import (
    AggregateFunctionAst,
    ColumnNameAst,
    JoinConditionAst,
    NamedColumnExpr,
    OrderByEntry,
    RelalgAstHeader,
    ValueExprAst,
)


@dataclasses.dataclass(frozen=True)
class Relation(RelalgAstHeader):
    name: str


@dataclasses.dataclass(frozen=True)
class TableColumn:
    """The declaration of one column of an inline table, e.g. ``R.a:number``."""
    name: str
    rel_alias: Optional[str]
    type: DataType


@dataclasses.dataclass(frozen=True)
class Table(RelalgAstHeader):
    """An inline relation that is defined directly in the query, along with its schema and all of its rows."""
    name: str
    columns: Sequence[TableColumn]
    rows: Sequence[Sequence[Any]] = ()


@dataclasses.dataclass(frozen=True)
class Selection(RelalgAstHeader):
    child: RelalgNode
    arg: ValueExprAst


@dataclasses.dataclass(frozen=True)
class Projection(RelalgAstHeader):
    child: RelalgNode
    arg: Sequence[ColumnNameAst | NamedColumnExpr]


@dataclasses.dataclass(frozen=True)
class OrderBy(RelalgAstHeader):
    child: RelalgNode
    arg: Sequence[OrderByEntry]


@dataclasses.dataclass(frozen=True)
class GroupBy(RelalgAstHeader):
    child: RelalgNode
    group: Sequence[ColumnNameAst]
    aggregate: Sequence[AggregateFunctionAst]


@dataclasses.dataclass(frozen=True)
class ColumnRenaming:
    """Renames the column `src` to `dst`."""
    src: ColumnNameAst
    dst: str


@dataclasses.dataclass(frozen=True)
class RenameColumns(RelalgAstHeader):
    child: RelalgNode
    arg: Sequence[ColumnRenaming]


@dataclasses.dataclass(frozen=True)
class RenameRelation(RelalgAstHeader):
    child: RelalgNode
    new_rel_alias: str


@dataclasses.dataclass(frozen=True)
class Union(RelalgAstHeader):
    child: RelalgNode
    child2: RelalgNode


@dataclasses.dataclass(frozen=True)
class Intersect(RelalgAstHeader):
    child: RelalgNode
    child2: RelalgNode


@dataclasses.dataclass(frozen=True)
class Difference(RelalgAstHeader):
    child: RelalgNode
    child2: RelalgNode


@dataclasses.dataclass(frozen=True)
class Division(RelalgAstHeader):
    child: RelalgNode
    child2: RelalgNode


@dataclasses.dataclass(frozen=True)
class ThetaJoin(RelalgAstHeader):
    child: RelalgNode
    child2: RelalgNode
    arg: ValueExprAst


@dataclasses.dataclass(frozen=True)
class CrossJoin(RelalgAstHeader):
    child: RelalgNode
    child2: RelalgNode


@dataclasses.dataclass(frozen=True)
class NaturalJoin(RelalgAstHeader):
    child: RelalgNode
    child2: RelalgNode


@dataclasses.dataclass(frozen=True)
class LeftSemiJoin(RelalgAstHeader):
    child: RelalgNode
    child2: RelalgNode


@dataclasses.dataclass(frozen=True)
class RightSemiJoin(RelalgAstHeader):
    child: RelalgNode
    child2: RelalgNode


@dataclasses.dataclass(frozen=True)
class AntiJoin(RelalgAstHeader):
    child: RelalgNode
    child2: RelalgNode


@dataclasses.dataclass(frozen=True)
class LeftOuterJoin(RelalgAstHeader):
    child: RelalgNode
    child2: RelalgNode
    arg: JoinConditionAst = None


@dataclasses.dataclass(frozen=True)
class RightOuterJoin(RelalgAstHeader):
    child: RelalgNode
    child2: RelalgNode
    arg: JoinConditionAst = None


@dataclasses.dataclass(frozen=True)
class FullOuterJoin(RelalgAstHeader):
    child: RelalgNode
    child2: RelalgNode
    arg: JoinConditionAst = None


RelalgNode = (Relation | Table | Selection | Projection | OrderBy | GroupBy | RenameColumns | RenameRelation
              | Union | Intersect | Difference | Division
              | ThetaJoin | CrossJoin | NaturalJoin | LeftSemiJoin | RightSemiJoin | AntiJoin
              | LeftOuterJoin | RightOuterJoin | FullOuterJoin)
"""All node kinds of a relational algebra syntax tree."""


@dataclasses.dataclass(frozen=True)
class RelalgRoot:
    """The root of a relational algebra syntax tree, as produced by the parser. The actual expression is the `child`."""
    child: RelalgNode


__all__ = [
    "Relation", "TableColumn", "Table", "Selection", "Projection", "OrderBy", "GroupBy",
    "ColumnRenaming", "RenameColumns", "RenameRelation",
    "Union", "Intersect", "Difference", "Division",
    "ThetaJoin", "CrossJoin", "NaturalJoin", "LeftSemiJoin", "RightSemiJoin", "AntiJoin",
    "LeftOuterJoin", "RightOuterJoin", "FullOuterJoin",
    "RelalgNode", "RelalgRoot",
    "ColumnNameAst", "AggregateFunctionAst", "NamedColumnExpr", "OrderByEntry", "ValueExprAst",
]
