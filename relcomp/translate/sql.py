"""Translates SQL syntax trees into operator trees.

The central part of the translation is the compilation of *SELECT* statements. SQL describes the different parts of a
statement declaratively, but the operator tree needs an explicit order of operators. Therefore, the clauses of each
statement are translated in their logical evaluation order and each clause wraps the operator tree of the previous clauses:

1. the *FROM* clause forms the initial tree. It is checked for schema conflicts immediately.
2. the *WHERE* clause adds a `Selection`
3. aggregate functions in the *SELECT* list add a `GroupBy`. If there is a *GROUP BY* clause but no aggregates, a
   `Projection` to the grouping columns is used instead.
4. the *HAVING* clause adds another `Selection`
5. the *SELECT* list adds a `Projection`, unless it is just ``*``
6. column aliases in the *SELECT* list add a `RenameColumns` layer on top of the projection

All other SQL constructs map to a single operator each. The only exception is *LIMIT*/*OFFSET*, which does not have an operator
of its own. Instead, it is compiled into a selection on the ``rownum()`` pseudo-column: ``LIMIT l OFFSET o`` becomes
``rownum() > o and rownum() <= l + o`` and ``LIMIT ALL OFFSET o`` becomes ``rownum() > o``.

Notes
-----
The *rownum* lowering only works if the executor numbers the rows of the selection's input relation in a stable order,
i.e. in the order that is established by an *ORDER BY* clause below the selection (if there is one). Defining this order is
the responsibility of the executor.

Since only set semantics are supported, ``UNION ALL`` and its siblings are translated like their plain counterparts. The
affected operators receive an advisory warning, just like statements that do not use *SELECT DISTINCT*.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Optional

from .. import messages
from .._core import CodeInfo, Column
from ..errors import TranslationError
from ..expressions import ValueExpr, ValueExprGeneric
from ..relalg import (
    AggregateFunction,
    ColumnRenaming,
    CrossJoin,
    Difference,
    FullOuterJoin,
    GroupBy,
    InnerJoin,
    Intersect,
    LeftOuterJoin,
    NaturalJoinCondition,
    OrderBy,
    Projection,
    ProjectionColumn,
    RANode,
    Relation,
    RenameColumns,
    RenameRelation,
    RightOuterJoin,
    Selection,
    Union,
)
from ..syntax import AggregateFunctionAst, NamedColumnExpr, sqlast
from ._common import (
    DefaultSettings,
    TranslationSettings,
    annotate,
    assert_exhaustive,
    make_translation_logger,
    parse_join_condition,
    require_code_info,
    translate_value_expr,
    verify_annotations,
)


def _rownum(code_info: CodeInfo) -> ValueExpr:
    return ValueExprGeneric("number", "rownum", [], code_info=code_info)


def _constant(value: int, code_info: CodeInfo) -> ValueExpr:
    return ValueExprGeneric("number", "constant", [value], code_info=code_info)


def limit_condition(limit: int, offset: int, code_info: CodeInfo) -> ValueExpr:
    """Builds the *rownum* condition that implements a *LIMIT*/*OFFSET* clause.

    Parameters
    ----------
    limit : int
        The maximum number of rows. `sqlast.LIMIT_ALL` (i.e. *-1*) means that the number of rows is not restricted.
    offset : int
        The number of rows to skip
    code_info : CodeInfo
        The source position of the clause. This is used for all parts of the condition.

    Returns
    -------
    ValueExpr
        ``rownum() > offset`` if there is no limit, ``rownum() > offset and rownum() <= limit + offset`` otherwise
    """
    offset_condition = ValueExprGeneric("boolean", ">", [_rownum(code_info), _constant(offset, code_info)],
                                        code_info=code_info)
    if limit == sqlast.LIMIT_ALL:
        return offset_condition

    upper_bound = ValueExprGeneric("boolean", "<=", [_rownum(code_info), _constant(limit + offset, code_info)],
                                  code_info=code_info)
    return ValueExprGeneric("boolean", "and", [offset_condition, upper_bound], code_info=code_info)


def _is_renamed_column(item: sqlast.SelectItem) -> bool:
    return isinstance(item, sqlast.SelectColumn) and bool(item.alias)


class _SqlTranslator:
    """Performs the translation of a single SQL syntax tree. Each translation uses a fresh translator."""

    def __init__(self, relations: Mapping[str, Relation], settings: TranslationSettings) -> None:
        self._relations = relations
        self._settings = settings
        self._log = make_translation_logger(settings)

    def translate(self, node: sqlast.SqlNode) -> RANode:
        match node:
            case sqlast.Relation(name, rel_alias):
                result = self._lookup_relation(node)
                if rel_alias:
                    result.header.code_info = require_code_info(node)
                    result = RenameRelation(result, rel_alias)

            case sqlast.Statement():
                result = self._statement(node)
                if not node.select.distinct:
                    result.add_warning(messages.DISTINCT_MISSING, node.code_info)

            case sqlast.RenameRelation(child, new_rel_alias):
                result = RenameRelation(self.translate(child), new_rel_alias)

            case sqlast.RelationFromSubstatement(statement, rel_alias):
                result = RenameRelation(self.translate(statement), rel_alias)

            case sqlast.InnerJoin(child, child2, cond):
                result = InnerJoin(self.translate(child), self.translate(child2), parse_join_condition(cond))
            case sqlast.LeftOuterJoin(child, child2, cond):
                result = LeftOuterJoin(self.translate(child), self.translate(child2), parse_join_condition(cond))
            case sqlast.RightOuterJoin(child, child2, cond):
                result = RightOuterJoin(self.translate(child), self.translate(child2), parse_join_condition(cond))
            case sqlast.FullOuterJoin(child, child2, cond):
                result = FullOuterJoin(self.translate(child), self.translate(child2), parse_join_condition(cond))

            case sqlast.CrossJoin(child, child2):
                result = CrossJoin(self.translate(child), self.translate(child2))
            case sqlast.NaturalJoin(child, child2):
                result = InnerJoin(self.translate(child), self.translate(child2), NaturalJoinCondition())

            case sqlast.Union(child, child2, all_):
                result = Union(self.translate(child), self.translate(child2))
                self._check_all_flag(result, node, all_)
            case sqlast.Intersect(child, child2, all_):
                result = Intersect(self.translate(child), self.translate(child2))
                self._check_all_flag(result, node, all_)
            case sqlast.Except(child, child2, all_):
                result = Difference(self.translate(child), self.translate(child2))
                self._check_all_flag(result, node, all_)

            case sqlast.OrderBy(child, entries):
                columns = [Column(entry.column.name, entry.column.rel_alias) for entry in entries]
                ascending = [entry.asc for entry in entries]
                result = OrderBy(self.translate(child), columns, ascending)

            case sqlast.Limit(child, limit, offset):
                condition = limit_condition(limit, offset, require_code_info(node))
                self._log("Lowering LIMIT", "ALL" if node.is_limit_all() else limit, "OFFSET", offset, "to", condition)
                result = Selection(self.translate(child), condition)

            case _:
                assert_exhaustive(node, "SQL")

        return annotate(result, node)

    def _lookup_relation(self, node: sqlast.Relation) -> Relation:
        relation = self._relations.get(node.name)
        if relation is None:
            raise TranslationError(messages.RELATION_NOT_FOUND, {"name": node.name}, node.code_info)
        self._log("Resolved relation", node.name, "at", node.code_info)
        return relation.copy()

    def _check_all_flag(self, node: RANode, ast_node: sqlast.Union | sqlast.Intersect | sqlast.Except,
                        all_: bool) -> None:
        if all_:
            node.add_warning(messages.IGNORED_ALL_ON_SET_OPERATORS, ast_node.code_info)

    def _check(self, root: RANode) -> None:
        if self._settings.check_schemas:
            root.check()

    def _selection(self, root: RANode, clause: sqlast.ConditionClause) -> RANode:
        self._check(root)
        return annotate(Selection(root, translate_value_expr(clause.arg)), clause)

    def _statement(self, statement: sqlast.Statement) -> RANode:
        select_items = statement.select.arg

        root = annotate(self.translate(statement.from_), statement.from_)
        self._check(root)
        self._log("FROM clause translated to", root)

        if statement.where is not None:
            root = self._selection(root, statement.where)
            self._log("WHERE clause translated to", root)

        aggregates = [AggregateFunction(item.aggregate,
                                        Column(item.column.name, item.column.rel_alias) if item.column else None,
                                        item.name)
                      for item in select_items if isinstance(item, AggregateFunctionAst)]
        if statement.group_by is not None or statement.num_aggregation_columns > 0 or aggregates:
            group_columns = [Column(col.name, col.rel_alias) for col in statement.group_by or []]
            if aggregates:
                root = GroupBy(root, group_columns, aggregates)
            else:
                root = Projection(root, group_columns)
            annotate(root, statement)
            self._log("Grouping translated to", root)

        if statement.having is not None:
            root = self._selection(root, statement.having)
            self._log("HAVING clause translated to", root)

        if len(select_items) == 1 and isinstance(select_items[0], sqlast.SelectColumn) and select_items[0].is_wildcard():
            self._log("SELECT * does not require a projection")
        else:
            root = annotate(Projection(root, [self._projection_column(item) for item in select_items]), statement.select)
            self._log("SELECT list translated to", root)

        renamings = [ColumnRenaming(item.alias, Column(item.name, item.rel_alias))
                     for item in select_items if _is_renamed_column(item)]
        if renamings:
            root = annotate(RenameColumns(root, renamings), statement.select)
            self._log("Column aliases translated to", root)

        return root

    def _projection_column(self, item: sqlast.SelectItem) -> Column | ProjectionColumn:
        match item:
            case AggregateFunctionAst():
                # the aggregate is provided by the GroupBy under its output name
                return Column(item.name, None)
            case NamedColumnExpr(name, rel_alias, child):
                return ProjectionColumn(name, rel_alias, translate_value_expr(child))
            case sqlast.SelectColumn(name, rel_alias):
                return Column(name, rel_alias)
            case _:
                assert_exhaustive(item, "SELECT list")


def relalg_from_sql_ast(root: sqlast.SqlRoot | sqlast.SqlNode, relations: Mapping[str, Relation], *,
                        settings: Optional[TranslationSettings] = None) -> RANode:
    """Translates a SQL syntax tree into an operator tree.

    Parameters
    ----------
    root : sqlast.SqlRoot | sqlast.SqlNode
        The syntax tree. This can either be the root as produced by the parser, or any relational node of the tree.
    relations : Mapping[str, Relation]
        The catalog of all relations that can be referenced by the query. The relations are never modified. Instead, each
        reference to a relation produces an independent copy.
    settings : Optional[TranslationSettings], optional
        Configures the translation. If omitted, the default settings are used.

    Returns
    -------
    RANode
        The root of the operator tree

    Raises
    ------
    TranslationError
        If the query references an unknown relation, or if the schema check detects a conflict
    LogicError
        If the syntax tree is malformed, e.g. if a node does not have a source position
    """
    settings = settings if settings is not None else DefaultSettings
    node = root.child if isinstance(root, sqlast.SqlRoot) else root
    result = _SqlTranslator(relations, settings).translate(node)
    if settings.verify_annotations:
        verify_annotations(result)
    return result
