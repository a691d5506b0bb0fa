from __future__ import annotations

import abc
import unittest
from collections.abc import Iterable, Sequence
from typing import Any, Optional

import pandas as pd

from relcomp import CodeInfo, Relation, Schema, SchemaColumn
from relcomp.relalg import RANode
from relcomp.syntax import AggregateFunctionAst, ColumnNameAst, NamedColumnExpr, OrderByEntry, ValueExprAst, raast, sqlast


def code(text: str, *, offset: int = 0) -> CodeInfo:
    """Shorthand to create the source position of a syntax node."""
    return CodeInfo.of_text(text, offset=offset)


def make_catalog() -> dict[str, Relation]:
    """Provides a small catalog with the relations *R(a, b, c)*, *S(b, d)* and *T(a, b, c)*.

    *R* and *T* have the same column types, which makes them suitable for set operations.
    """
    r = Relation.from_df("R", pd.DataFrame({"a": [1, 2, 3], "b": ["x", "y", "z"], "c": [10, 20, 10]}))
    s = Relation("S", Schema([SchemaColumn("b", "S", "string"), SchemaColumn("d", "S", "number")]),
                 [("x", 100), ("y", 200)])
    t = Relation.from_df("T", pd.DataFrame({"a": [1, 4], "b": ["x", "w"], "c": [10, 40]}))
    return {"R": r, "S": s, "T": t}


# value expressions

def col_value(name: str, rel_alias: Optional[str] = None) -> ValueExprAst:
    text = f"{rel_alias}.{name}" if rel_alias else name
    return ValueExprAst("null", "columnValue", (name, rel_alias), code_info=code(text))


def const(value: Any, datatype: str = "number") -> ValueExprAst:
    return ValueExprAst(datatype, "constant", (value,), code_info=code(repr(value)))


def binop(op: str, left: ValueExprAst, right: ValueExprAst, *, datatype: str = "boolean",
          wrapped: bool = False) -> ValueExprAst:
    return ValueExprAst(datatype, op, (left, right), code_info=code(f"{left.code_info.text} {op} {right.code_info.text}"),
                        wrapped_in_parentheses=wrapped)


# SQL syntax trees

def relation(name: str, alias: Optional[str] = None) -> sqlast.Relation:
    return sqlast.Relation(name, alias, code_info=code(f"{name} {alias}" if alias else name))


def column(name: str | int, rel_alias: Optional[str] = None, alias: Optional[str] = None) -> sqlast.SelectColumn:
    return sqlast.SelectColumn(name, rel_alias, alias, code_info=code(str(name)))


def star() -> sqlast.SelectColumn:
    return column("*")


def count_all(name: str = "count") -> AggregateFunctionAst:
    return AggregateFunctionAst("COUNT_ALL", None, name, code_info=code(f"COUNT(*) AS {name}"))


def aggregate(func: str, col: str, name: str, rel_alias: Optional[str] = None) -> AggregateFunctionAst:
    return AggregateFunctionAst(func, ColumnNameAst(col, rel_alias, code_info=code(col)), name,
                                code_info=code(f"{func}({col}) AS {name}"))


def named_expr(name: str, expr: ValueExprAst) -> NamedColumnExpr:
    return NamedColumnExpr(name, None, expr, code_info=code(f"{expr.code_info.text} AS {name}"))


def group_column(name: str, rel_alias: Optional[str] = None) -> ColumnNameAst:
    return ColumnNameAst(name, rel_alias, code_info=code(name))


def condition(arg: ValueExprAst, keyword: str = "WHERE") -> sqlast.ConditionClause:
    return sqlast.ConditionClause(arg, code_info=code(f"{keyword} {arg.code_info.text}"))


def statement(items: Sequence[sqlast.SelectItem], from_: sqlast.SqlNode, *, distinct: bool = False,
              where: Optional[ValueExprAst] = None, group_by: Optional[Iterable[ColumnNameAst]] = None,
              having: Optional[ValueExprAst] = None, wrapped: bool = False) -> sqlast.Statement:
    """Builds a *SELECT* statement. The number of aggregate columns is derived from the SELECT list."""
    select = sqlast.SelectClause(distinct, tuple(items), code_info=code("SELECT ..."))
    return sqlast.Statement(select, from_,
                            where=condition(where) if where is not None else None,
                            group_by=tuple(group_by) if group_by is not None else None,
                            having=condition(having, "HAVING") if having is not None else None,
                            num_aggregation_columns=sum(1 for item in items if isinstance(item, AggregateFunctionAst)),
                            code_info=code("SELECT ... FROM ..."), wrapped_in_parentheses=wrapped)


def limit(child: sqlast.SqlNode, limit_: int, offset: int = 0) -> sqlast.Limit:
    return sqlast.Limit(child, limit_, offset, code_info=code(f"LIMIT {limit_} OFFSET {offset}"))


def order_entry(name: str, asc: bool = True, rel_alias: Optional[str] = None) -> OrderByEntry:
    return OrderByEntry(ColumnNameAst(name, rel_alias, code_info=code(name)), asc, code_info=code(name))


def sql_root(child: sqlast.SqlNode) -> sqlast.SqlRoot:
    return sqlast.SqlRoot(child)


# relational algebra syntax trees

def ra_relation(name: str, **metadata: Any) -> raast.Relation:
    return raast.Relation(name, code_info=code(name), metadata=metadata)


def ra_column(name: str, rel_alias: Optional[str] = None) -> ColumnNameAst:
    return ColumnNameAst(name, rel_alias, code_info=code(name))


class TranslationTestCase(unittest.TestCase, abc.ABC):
    """Abstract test case that provides assertions on the structure of operator trees."""

    def assertNodeType(self, node: RANode, expected_type: type, message: str = "") -> None:
        """Assertion that fails if the operator is not exactly of the expected type."""
        if type(node) is not expected_type:
            default_msg = f"Expected {expected_type.__name__} node, but got {node.node_type}: {node}"
            raise AssertionError(default_msg if not message else f"{message} :: {default_msg}")

    def assertFullyAnnotated(self, root: RANode) -> None:
        """Assertion that fails if any operator or any expression of the tree does not have a source position."""
        for node in root.dfs_walk():
            self.assertIsNotNone(node.code_info, f"Operator without source position: {node}")
            for expression in node.expressions():
                for expr in expression.dfs_walk():
                    self.assertIsNotNone(expr.code_info, f"Expression without source position: {expr!r}")

    def assertWarnings(self, node: RANode, *message_keys: str) -> None:
        """Assertion that fails if the operator does not carry exactly the given warnings (in this order)."""
        actual_keys = [warning.message_key for warning in node.warnings]
        self.assertEqual(list(message_keys), actual_keys)
