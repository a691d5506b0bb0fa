"""Translates syntax trees of the native relational algebra grammar into operator trees.

Since the relational algebra grammar already consists of the primitive operators, this translation is much simpler than the
translation of SQL: each syntax node is translated into exactly one operator. All operators receive the annotations of
their syntax node, including the metadata that the node declares.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Optional

from .. import messages
from .._core import Column
from ..errors import TranslationError
from ..relalg import (
    AggregateFunction,
    AntiJoin,
    ColumnRenaming,
    CrossJoin,
    Difference,
    Division,
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
    SemiJoin,
    ThetaJoinCondition,
    Union,
)
from ..schema import Schema, SchemaColumn
from ..syntax import ColumnNameAst, NamedColumnExpr, raast
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


def _column(col: ColumnNameAst) -> Column:
    return Column(col.name, col.rel_alias)


class _RelalgAstTranslator:
    """Performs the translation of a single relational algebra syntax tree."""

    def __init__(self, relations: Mapping[str, Relation], settings: TranslationSettings) -> None:
        self._relations = relations
        self._log = make_translation_logger(settings)

    def translate(self, node: raast.RelalgNode) -> RANode:
        match node:
            case raast.Relation(name):
                relation = self._relations.get(name)
                if relation is None:
                    raise TranslationError(messages.RELATION_NOT_FOUND, {"name": name}, node.code_info)
                self._log("Resolved relation", name, "at", node.code_info)
                result = relation.copy()

            case raast.Table():
                result = self._inline_relation(node)

            case raast.Selection(child, arg):
                result = Selection(self.translate(child), translate_value_expr(arg))

            case raast.Projection(child, arg):
                result = Projection(self.translate(child), [self._projection_column(col) for col in arg])

            case raast.OrderBy(child, entries):
                columns = [_column(entry.column) for entry in entries]
                ascending = [entry.asc for entry in entries]
                result = OrderBy(self.translate(child), columns, ascending)

            case raast.GroupBy(child, group, aggregate):
                aggregates = [AggregateFunction(agg.aggregate, _column(agg.column) if agg.column else None, agg.name)
                              for agg in aggregate]
                result = GroupBy(self.translate(child), [_column(col) for col in group], aggregates)

            case raast.RenameColumns(child, arg):
                renamings = [ColumnRenaming(renaming.dst, _column(renaming.src)) for renaming in arg]
                result = RenameColumns(self.translate(child), renamings)

            case raast.RenameRelation(child, new_rel_alias):
                result = RenameRelation(self.translate(child), new_rel_alias)

            case raast.Union(child, child2):
                result = Union(self.translate(child), self.translate(child2))
            case raast.Intersect(child, child2):
                result = Intersect(self.translate(child), self.translate(child2))
            case raast.Difference(child, child2):
                result = Difference(self.translate(child), self.translate(child2))
            case raast.Division(child, child2):
                result = Division(self.translate(child), self.translate(child2))

            case raast.ThetaJoin(child, child2, arg):
                condition = ThetaJoinCondition(translate_value_expr(arg))
                result = InnerJoin(self.translate(child), self.translate(child2), condition)
            case raast.CrossJoin(child, child2):
                result = CrossJoin(self.translate(child), self.translate(child2))
            case raast.NaturalJoin(child, child2):
                result = InnerJoin(self.translate(child), self.translate(child2), NaturalJoinCondition())

            case raast.LeftSemiJoin(child, child2):
                result = SemiJoin(self.translate(child), self.translate(child2), left=True)
            case raast.RightSemiJoin(child, child2):
                result = SemiJoin(self.translate(child), self.translate(child2), left=False)
            case raast.AntiJoin(child, child2):
                result = AntiJoin(self.translate(child), self.translate(child2))

            case raast.LeftOuterJoin(child, child2, arg):
                result = LeftOuterJoin(self.translate(child), self.translate(child2), parse_join_condition(arg))
            case raast.RightOuterJoin(child, child2, arg):
                result = RightOuterJoin(self.translate(child), self.translate(child2), parse_join_condition(arg))
            case raast.FullOuterJoin(child, child2, arg):
                result = FullOuterJoin(self.translate(child), self.translate(child2), parse_join_condition(arg))

            case _:
                assert_exhaustive(node, "relational algebra")

        return annotate(result, node)

    def _inline_relation(self, table: raast.Table) -> Relation:
        schema = Schema(SchemaColumn(col.name, col.rel_alias, col.type) for col in table.columns)
        relation = Relation(table.name)
        relation.set_schema(schema, adopt_name_as_alias=True)
        relation.add_rows(table.rows)
        relation.metadata["isInlineRelation"] = True
        relation.metadata["inlineRelationDefinition"] = require_code_info(table).text
        self._log("Created inline relation", table.name, "with", len(table.rows), "rows")
        return relation

    def _projection_column(self, col: ColumnNameAst | NamedColumnExpr) -> Column | ProjectionColumn:
        match col:
            case ColumnNameAst():
                return _column(col)
            case NamedColumnExpr(name, rel_alias, child):
                return ProjectionColumn(name, rel_alias, translate_value_expr(child))
            case _:
                assert_exhaustive(col, "projection")


def relalg_from_relalg_ast_node(node: raast.RelalgNode, relations: Mapping[str, Relation], *,
                                settings: Optional[TranslationSettings] = None) -> RANode:
    """Translates a (sub-)tree of a relational algebra syntax tree into an operator tree.

    Parameters
    ----------
    node : raast.RelalgNode
        The root of the tree to translate
    relations : Mapping[str, Relation]
        The catalog of all relations that can be referenced. The relations are never modified. Instead, each reference to a
        relation produces an independent copy.
    settings : Optional[TranslationSettings], optional
        Configures the translation. If omitted, the default settings are used.

    Returns
    -------
    RANode
        The root of the operator tree

    Raises
    ------
    TranslationError
        If the expression references an unknown relation
    LogicError
        If the syntax tree is malformed, e.g. if a node does not have a source position
    """
    settings = settings if settings is not None else DefaultSettings
    result = _RelalgAstTranslator(relations, settings).translate(node)
    if settings.verify_annotations:
        verify_annotations(result)
    return result


def relalg_from_relalg_ast(root: raast.RelalgRoot, relations: Mapping[str, Relation], *,
                           settings: Optional[TranslationSettings] = None) -> RANode:
    """Translates a complete relational algebra syntax tree, as produced by the parser, into an operator tree.

    See Also
    --------
    relalg_from_relalg_ast_node
    """
    return relalg_from_relalg_ast_node(root.child, relations, settings=settings)
