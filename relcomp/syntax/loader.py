"""Re-creates syntax trees from the JSON documents emitted by the parser.

The parser is not part of relcomp. It produces its syntax trees as JSON objects whose nodes are tagged by a *type* field and
use camelCase keys (e.g. *relAlias*, *child2*, *codeInfo*, *wrappedInParentheses*, *metaData*). The loaders in this module
turn such documents into the frozen dataclasses of the `sqlast` and `raast` modules.
"""
from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from typing import Any, Optional

from .._core import CodeInfo, SourceLocation
from . import raast, sqlast
from ._common import AggregateFunctionAst, ColumnNameAst, JoinConditionAst, NamedColumnExpr, OrderByEntry, ValueExprAst


class ParserError(RuntimeError):
    """An error that is raised when a parser document cannot be loaded."""

    def __init__(self, msg: str) -> None:
        super().__init__(msg)


def _as_json(json_data: dict | str) -> dict:
    """Accepts both JSON dictionaries and their string encoding."""
    json_data = json_data if isinstance(json_data, dict) else json.loads(json_data)
    if not isinstance(json_data, dict):
        raise ParserError(f"Expected a JSON object, but got {json_data!r}")
    return json_data


def _require(json_data: Mapping[str, Any], key: str) -> Any:
    if key not in json_data:
        raise ParserError(f"Node of type '{json_data.get('type')}' is missing the '{key}' attribute: {json_data}")
    return json_data[key]


def _load_location(json_data: Mapping[str, Any]) -> SourceLocation:
    return SourceLocation(json_data.get("offset", 0), json_data.get("line", 1), json_data.get("column", 1))


def load_code_info(json_data: Optional[dict]) -> Optional[CodeInfo]:
    """Re-creates a source position record.

    The parser nests the start and end positions in a *location* object. Flat documents that contain *start* and *end*
    directly are accepted as well. If no data is given, *None* is returned.
    """
    if not json_data:
        return None
    location = json_data.get("location", json_data)
    if "start" not in location or "end" not in location:
        raise ParserError(f"Code info without start or end position: {json_data}")
    return CodeInfo(json_data.get("text", ""), _load_location(location["start"]), _load_location(location["end"]))


def _header(json_data: Mapping[str, Any]) -> dict[str, Any]:
    return {"code_info": load_code_info(json_data.get("codeInfo")),
            "wrapped_in_parentheses": bool(json_data.get("wrappedInParentheses", False))}


def _relalg_header(json_data: Mapping[str, Any]) -> dict[str, Any]:
    header = _header(json_data)
    header["metadata"] = dict(json_data.get("metaData") or {})
    return header


def load_value_expr(json_data: dict | str) -> ValueExprAst:
    """Re-creates a value expression and all of its nested arguments.

    Arguments of *constant* and *columnValue* expressions are literal values and are kept as-is. For all other functions,
    each argument that is a JSON object is loaded as a nested expression.
    """
    json_data = _as_json(json_data)
    func = _require(json_data, "func")
    raw_args = json_data.get("args", [])
    if func in ("constant", "columnValue"):
        args = tuple(raw_args)
    else:
        args = tuple(load_value_expr(arg) if isinstance(arg, dict) else arg for arg in raw_args)
    return ValueExprAst(_require(json_data, "datatype"), func, args, **_header(json_data))


def _load_column(json_data: Optional[dict]) -> Optional[ColumnNameAst]:
    if json_data is None:
        return None
    return ColumnNameAst(_require(json_data, "name"), json_data.get("relAlias"), **_header(json_data))


def _load_named_column_expr(json_data: dict) -> NamedColumnExpr:
    return NamedColumnExpr(_require(json_data, "name"), json_data.get("relAlias"),
                           load_value_expr(_require(json_data, "child")), **_header(json_data))


def _load_aggregate(json_data: dict) -> AggregateFunctionAst:
    return AggregateFunctionAst(_require(json_data, "aggFunction"), _load_column(json_data.get("col")),
                                _require(json_data, "name"), **_header(json_data))


def _load_order_entries(raw_entries: list | dict) -> tuple[OrderByEntry, ...]:
    # the SQL grammar wraps the entries in a {"value": [...]} object, the relational algebra grammar does not
    entries = raw_entries["value"] if isinstance(raw_entries, dict) else raw_entries
    return tuple(OrderByEntry(_load_column(_require(entry, "col")), bool(entry.get("asc", True)), **_header(entry))
                 for entry in entries)


def _load_join_condition(raw_condition: Optional[dict | list]) -> JoinConditionAst:
    if raw_condition is None:
        return None
    if isinstance(raw_condition, list):
        return tuple(raw_condition)
    return load_value_expr(raw_condition)


def _load_condition_clause(json_data: Optional[dict]) -> Optional[sqlast.ConditionClause]:
    if json_data is None:
        return None
    return sqlast.ConditionClause(load_value_expr(_require(json_data, "arg")), **_header(json_data))


def _load_select_item(json_data: dict) -> sqlast.SelectItem:
    match json_data.get("type"):
        case "column" | "columnName":
            return sqlast.SelectColumn(_require(json_data, "name"), json_data.get("relAlias"), json_data.get("alias"),
                                       **_header(json_data))
        case "aggFunction":
            return _load_aggregate(json_data)
        case "namedColumnExpr":
            return _load_named_column_expr(json_data)
        case unknown_type:
            raise ParserError(f"Unknown SELECT list entry '{unknown_type}': {json_data}")


def _load_select(json_data: dict) -> sqlast.SelectClause:
    items = tuple(_load_select_item(item) for item in _require(json_data, "arg"))
    return sqlast.SelectClause(bool(json_data.get("distinct", False)), items, **_header(json_data))


def _load_statement(json_data: dict) -> sqlast.Statement:
    raw_group_by = json_data.get("groupBy")
    group_by = None if raw_group_by is None else tuple(_load_column(col) for col in raw_group_by)
    return sqlast.Statement(_load_select(_require(json_data, "select")),
                            load_sql_node(_require(json_data, "from")),
                            where=_load_condition_clause(json_data.get("where")),
                            group_by=group_by,
                            having=_load_condition_clause(json_data.get("having")),
                            num_aggregation_columns=json_data.get("numAggregationColumns", 0),
                            **_header(json_data))


_SqlBinaryLoader = Callable[[dict, sqlast.SqlNode, sqlast.SqlNode], sqlast.SqlNode]

_SQL_BINARY_NODES: dict[str, _SqlBinaryLoader] = {
    "innerJoin": lambda d, l, r: sqlast.InnerJoin(l, r, _load_join_condition(d.get("cond")), **_header(d)),
    "leftOuterJoin": lambda d, l, r: sqlast.LeftOuterJoin(l, r, _load_join_condition(d.get("cond")), **_header(d)),
    "rightOuterJoin": lambda d, l, r: sqlast.RightOuterJoin(l, r, _load_join_condition(d.get("cond")), **_header(d)),
    "fullOuterJoin": lambda d, l, r: sqlast.FullOuterJoin(l, r, _load_join_condition(d.get("cond")), **_header(d)),
    "crossJoin": lambda d, l, r: sqlast.CrossJoin(l, r, **_header(d)),
    "naturalJoin": lambda d, l, r: sqlast.NaturalJoin(l, r, **_header(d)),
    "union": lambda d, l, r: sqlast.Union(l, r, bool(d.get("all", False)), **_header(d)),
    "intersect": lambda d, l, r: sqlast.Intersect(l, r, bool(d.get("all", False)), **_header(d)),
    "except": lambda d, l, r: sqlast.Except(l, r, bool(d.get("all", False)), **_header(d)),
}


def load_sql_node(json_data: dict | str) -> sqlast.SqlNode:
    """Re-creates an arbitrary node of a SQL syntax tree, including all of its children.

    Raises
    ------
    ParserError
        If the node type is unknown or a required attribute is missing
    """
    json_data = _as_json(json_data)
    node_type = _require(json_data, "type")
    if node_type in _SQL_BINARY_NODES:
        left, right = load_sql_node(_require(json_data, "child")), load_sql_node(_require(json_data, "child2"))
        return _SQL_BINARY_NODES[node_type](json_data, left, right)

    match node_type:
        case "relation":
            return sqlast.Relation(_require(json_data, "name"), json_data.get("relAlias"), **_header(json_data))
        case "statement":
            return _load_statement(json_data)
        case "renameRelation":
            return sqlast.RenameRelation(load_sql_node(_require(json_data, "child")), _require(json_data, "newRelAlias"),
                                         **_header(json_data))
        case "relationFromSubstatement":
            return sqlast.RelationFromSubstatement(load_sql_node(_require(json_data, "statement")),
                                                   _require(json_data, "relAlias"), **_header(json_data))
        case "orderBy":
            return sqlast.OrderBy(load_sql_node(_require(json_data, "child")),
                                  _load_order_entries(_require(json_data, "arg")), **_header(json_data))
        case "limit":
            return sqlast.Limit(load_sql_node(_require(json_data, "child")), _require(json_data, "limit"),
                                json_data.get("offset", 0), **_header(json_data))
        case _:
            raise ParserError(f"Unknown SQL node type '{node_type}'")


def load_sql_ast(json_data: dict | str) -> sqlast.SqlRoot:
    """Re-creates an entire SQL syntax tree from the root document of the parser.

    Parameters
    ----------
    json_data : dict | str
        Either the JSON dictionary, or a string encoding of the dictionary (which will be parsed by *json.loads*)

    Returns
    -------
    sqlast.SqlRoot
        The root of the syntax tree

    Raises
    ------
    ParserError
        If the document is malformed
    """
    json_data = _as_json(json_data)
    return sqlast.SqlRoot(load_sql_node(_require(json_data, "child")))


def _load_table(json_data: dict) -> raast.Table:
    columns = tuple(raast.TableColumn(_require(col, "name"), col.get("relAlias"), col.get("type", "null"))
                    for col in _require(json_data, "columns"))
    rows = tuple(tuple(row) for row in json_data.get("rows", []))
    return raast.Table(_require(json_data, "name"), columns, rows, **_relalg_header(json_data))


def _load_projection_entry(json_data: dict) -> ColumnNameAst | NamedColumnExpr:
    match json_data.get("type"):
        case "columnName" | "column":
            return _load_column(json_data)
        case "namedColumnExpr":
            return _load_named_column_expr(json_data)
        case unknown_type:
            raise ParserError(f"Unknown projection entry '{unknown_type}': {json_data}")


_RelalgBinaryLoader = Callable[[dict, raast.RelalgNode, raast.RelalgNode], raast.RelalgNode]

_RELALG_BINARY_NODES: dict[str, _RelalgBinaryLoader] = {
    "union": lambda d, l, r: raast.Union(l, r, **_relalg_header(d)),
    "intersect": lambda d, l, r: raast.Intersect(l, r, **_relalg_header(d)),
    "difference": lambda d, l, r: raast.Difference(l, r, **_relalg_header(d)),
    "division": lambda d, l, r: raast.Division(l, r, **_relalg_header(d)),
    "thetaJoin": lambda d, l, r: raast.ThetaJoin(l, r, load_value_expr(_require(d, "arg")), **_relalg_header(d)),
    "crossJoin": lambda d, l, r: raast.CrossJoin(l, r, **_relalg_header(d)),
    "naturalJoin": lambda d, l, r: raast.NaturalJoin(l, r, **_relalg_header(d)),
    "leftSemiJoin": lambda d, l, r: raast.LeftSemiJoin(l, r, **_relalg_header(d)),
    "rightSemiJoin": lambda d, l, r: raast.RightSemiJoin(l, r, **_relalg_header(d)),
    "antiJoin": lambda d, l, r: raast.AntiJoin(l, r, **_relalg_header(d)),
    "leftOuterJoin": lambda d, l, r: raast.LeftOuterJoin(l, r, _load_join_condition(d.get("arg")), **_relalg_header(d)),
    "rightOuterJoin": lambda d, l, r: raast.RightOuterJoin(l, r, _load_join_condition(d.get("arg")),
                                                           **_relalg_header(d)),
    "fullOuterJoin": lambda d, l, r: raast.FullOuterJoin(l, r, _load_join_condition(d.get("arg")), **_relalg_header(d)),
}


def load_relalg_node(json_data: dict | str) -> raast.RelalgNode:
    """Re-creates an arbitrary node of a relational algebra syntax tree, including all of its children.

    Raises
    ------
    ParserError
        If the node type is unknown or a required attribute is missing
    """
    json_data = _as_json(json_data)
    node_type = _require(json_data, "type")
    if node_type in _RELALG_BINARY_NODES:
        left, right = load_relalg_node(_require(json_data, "child")), load_relalg_node(_require(json_data, "child2"))
        return _RELALG_BINARY_NODES[node_type](json_data, left, right)

    match node_type:
        case "relation":
            return raast.Relation(_require(json_data, "name"), **_relalg_header(json_data))
        case "table":
            return _load_table(json_data)
        case "selection":
            return raast.Selection(load_relalg_node(_require(json_data, "child")),
                                   load_value_expr(_require(json_data, "arg")), **_relalg_header(json_data))
        case "projection":
            entries = tuple(_load_projection_entry(entry) for entry in _require(json_data, "arg"))
            return raast.Projection(load_relalg_node(_require(json_data, "child")), entries, **_relalg_header(json_data))
        case "orderBy":
            return raast.OrderBy(load_relalg_node(_require(json_data, "child")),
                                 _load_order_entries(_require(json_data, "arg")), **_relalg_header(json_data))
        case "groupBy":
            group = tuple(_load_column(col) for col in json_data.get("group", []))
            aggregates = tuple(_load_aggregate(agg) for agg in json_data.get("aggregate", []))
            return raast.GroupBy(load_relalg_node(_require(json_data, "child")), group, aggregates,
                                 **_relalg_header(json_data))
        case "renameColumns":
            renamings = tuple(raast.ColumnRenaming(_load_column(_require(entry, "src")), _require(entry, "dst"))
                              for entry in _require(json_data, "arg"))
            return raast.RenameColumns(load_relalg_node(_require(json_data, "child")), renamings,
                                       **_relalg_header(json_data))
        case "renameRelation":
            return raast.RenameRelation(load_relalg_node(_require(json_data, "child")),
                                        _require(json_data, "newRelAlias"), **_relalg_header(json_data))
        case _:
            raise ParserError(f"Unknown relational algebra node type '{node_type}'")


def load_relalg_ast(json_data: dict | str) -> raast.RelalgRoot:
    """Re-creates an entire relational algebra syntax tree from the root document of the parser.

    Parameters
    ----------
    json_data : dict | str
        Either the JSON dictionary, or a string encoding of the dictionary (which will be parsed by *json.loads*)

    Returns
    -------
    raast.RelalgRoot
        The root of the syntax tree

    Raises
    ------
    ParserError
        If the document is malformed
    """
    json_data = _as_json(json_data)
    return raast.RelalgRoot(load_relalg_node(_require(json_data, "child")))
