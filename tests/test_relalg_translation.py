"""Tests for the translation of native relational algebra syntax trees into operator trees."""
from __future__ import annotations

import unittest

from relcomp import messages
from relcomp._core import Column
from relcomp.errors import TranslationError
from relcomp.relalg import (
    AggregateFunction,
    AntiJoin,
    ColumnRenaming,
    CrossJoin,
    Division,
    FullOuterJoin,
    GroupBy,
    InnerJoin,
    NaturalJoinCondition,
    OrderBy,
    Projection,
    ProjectionColumn,
    Relation,
    RenameColumns,
    RenameRelation,
    RightOuterJoin,
    Selection,
    SemiJoin,
    ThetaJoinCondition,
)
from relcomp.syntax import AggregateFunctionAst, NamedColumnExpr, OrderByEntry, raast
from relcomp.translate import relalg_from_relalg_ast, relalg_from_relalg_ast_node
from tests import regression_suite as rs


def _binary(node_type: type, left: raast.RelalgNode, right: raast.RelalgNode, *args, **kwargs) -> raast.RelalgNode:
    return node_type(left, right, *args, code_info=rs.code(node_type.__name__), **kwargs)


class NodeMappingTests(rs.TranslationTestCase):
    def setUp(self) -> None:
        self.catalog = rs.make_catalog()

    def test_relation(self):
        root = relalg_from_relalg_ast(raast.RelalgRoot(rs.ra_relation("R")), self.catalog)

        self.assertNodeType(root, Relation)
        self.assertIsNot(self.catalog["R"], root)
        self.assertEqual(rs.code("R"), root.code_info)

    def test_missing_relation(self):
        with self.assertRaises(TranslationError) as ctx:
            relalg_from_relalg_ast_node(rs.ra_relation("ghost"), self.catalog)
        self.assertEqual(messages.RELATION_NOT_FOUND, ctx.exception.message_key)
        self.assertEqual({"name": "ghost"}, ctx.exception.params)
        self.assertEqual(rs.code("ghost"), ctx.exception.code_info)

    def test_selection(self):
        condition = rs.binop(">", rs.col_value("a"), rs.const(1))
        node = raast.Selection(rs.ra_relation("R"), condition, code_info=rs.code("σ a > 1 (R)"))
        root = relalg_from_relalg_ast_node(node, self.catalog)

        self.assertNodeType(root, Selection)
        self.assertEqual("a > 1", str(root.condition))
        self.assertEqual(node.code_info, root.code_info)
        self.assertFullyAnnotated(root)

    def test_projection(self):
        expr = rs.binop("*", rs.col_value("a"), rs.const(2), datatype="number")
        node = raast.Projection(rs.ra_relation("R"),
                                (rs.ra_column("b", "R"), NamedColumnExpr("double", None, expr, code_info=rs.code("a*2"))),
                                code_info=rs.code("π b, a*2 → double (R)"))
        root = relalg_from_relalg_ast_node(node, self.catalog)

        self.assertNodeType(root, Projection)
        first, second = root.columns
        self.assertEqual(Column("b", "R"), first)
        self.assertIsInstance(second, ProjectionColumn)
        self.assertEqual("double", second.name)
        self.assertEqual([("b", "string"), ("double", "number")], [(col.name, col.type) for col in root.schema()])

    def test_order_by(self):
        entries = (OrderByEntry(rs.ra_column("c"), False, code_info=rs.code("c desc")),
                   OrderByEntry(rs.ra_column("a"), True, code_info=rs.code("a asc")))
        node = raast.OrderBy(rs.ra_relation("R"), entries, code_info=rs.code("τ c desc, a asc (R)"))
        root = relalg_from_relalg_ast_node(node, self.catalog)

        self.assertNodeType(root, OrderBy)
        self.assertEqual((Column("c"), Column("a")), root.columns)
        self.assertEqual((False, True), root.ascending)

    def test_group_by(self):
        aggregates = (AggregateFunctionAst("SUM", rs.ra_column("a"), "total", code_info=rs.code("sum(a)→total")),
                      AggregateFunctionAst("COUNT_ALL", None, "n", code_info=rs.code("count(*)→n")))
        node = raast.GroupBy(rs.ra_relation("R"), (rs.ra_column("c"),), aggregates, code_info=rs.code("γ c; ... (R)"))
        root = relalg_from_relalg_ast_node(node, self.catalog)

        self.assertNodeType(root, GroupBy)
        self.assertEqual((Column("c"),), root.group_columns)
        self.assertEqual((AggregateFunction("SUM", Column("a"), "total"), AggregateFunction("COUNT_ALL", None, "n")),
                         root.aggregates)
        self.assertEqual(["c", "total", "n"], root.schema().names())

    def test_rename_columns_keeps_source_order(self):
        renamings = (raast.ColumnRenaming(rs.ra_column("b"), "y"), raast.ColumnRenaming(rs.ra_column("a"), "x"))
        node = raast.RenameColumns(rs.ra_relation("R"), renamings, code_info=rs.code("ρ y←b, x←a (R)"))
        root = relalg_from_relalg_ast_node(node, self.catalog)

        self.assertNodeType(root, RenameColumns)
        self.assertEqual((ColumnRenaming("y", Column("b")), ColumnRenaming("x", Column("a"))), root.renamings)
        self.assertEqual(["x", "y", "c"], root.schema().names())

    def test_rename_relation(self):
        node = raast.RenameRelation(rs.ra_relation("R"), "Q", code_info=rs.code("ρ Q (R)"))
        root = relalg_from_relalg_ast_node(node, self.catalog)

        self.assertNodeType(root, RenameRelation)
        self.assertEqual({"Q"}, {col.rel_alias for col in root.schema()})

    def test_joins(self):
        cases = [
            (raast.CrossJoin, (), CrossJoin),
            (raast.NaturalJoin, (), InnerJoin),
            (raast.AntiJoin, (), AntiJoin),
            (raast.Division, (), Division),
        ]
        for ast_type, args, expected_type in cases:
            with self.subTest(ast_type=ast_type.__name__):
                node = _binary(ast_type, rs.ra_relation("R"), rs.ra_relation("S"), *args)
                root = relalg_from_relalg_ast_node(node, self.catalog)
                self.assertNodeType(root, expected_type)
                self.assertNodeType(root.left_input, Relation)
                self.assertNodeType(root.right_input, Relation)

    def test_natural_join_condition(self):
        root = relalg_from_relalg_ast_node(_binary(raast.NaturalJoin, rs.ra_relation("R"), rs.ra_relation("S")),
                                           self.catalog)
        self.assertEqual(NaturalJoinCondition(None), root.condition)

    def test_theta_join(self):
        condition = rs.binop("<", rs.col_value("a", "R"), rs.col_value("d", "S"))
        root = relalg_from_relalg_ast_node(_binary(raast.ThetaJoin, rs.ra_relation("R"), rs.ra_relation("S"), condition),
                                           self.catalog)

        self.assertNodeType(root, InnerJoin)
        self.assertIsInstance(root.condition, ThetaJoinCondition)
        self.assertEqual("R.a < S.d", str(root.condition))
        self.assertFullyAnnotated(root)

    def test_semi_joins(self):
        left = relalg_from_relalg_ast_node(_binary(raast.LeftSemiJoin, rs.ra_relation("R"), rs.ra_relation("S")),
                                           self.catalog)
        right = relalg_from_relalg_ast_node(_binary(raast.RightSemiJoin, rs.ra_relation("R"), rs.ra_relation("S")),
                                            self.catalog)

        self.assertNodeType(left, SemiJoin)
        self.assertTrue(left.left)
        self.assertEqual(["a", "b", "c"], left.schema().names())
        self.assertNodeType(right, SemiJoin)
        self.assertFalse(right.left)
        self.assertEqual(["b", "d"], right.schema().names())

    def test_outer_joins_take_full_join_condition(self):
        natural = relalg_from_relalg_ast_node(_binary(raast.FullOuterJoin, rs.ra_relation("R"), rs.ra_relation("S")),
                                              self.catalog)
        self.assertNodeType(natural, FullOuterJoin)
        self.assertEqual(NaturalJoinCondition(), natural.condition)

        restricted = relalg_from_relalg_ast_node(_binary(raast.RightOuterJoin, rs.ra_relation("R"),
                                                         rs.ra_relation("S"), ("b",)),
                                                 self.catalog)
        self.assertNodeType(restricted, RightOuterJoin)
        self.assertEqual(NaturalJoinCondition(("b",)), restricted.condition)

        theta_condition = rs.binop("=", rs.col_value("b", "R"), rs.col_value("b", "S"))
        theta = relalg_from_relalg_ast_node(_binary(raast.LeftOuterJoin, rs.ra_relation("R"), rs.ra_relation("S"),
                                                    theta_condition),
                                            self.catalog)
        self.assertIsInstance(theta.condition, ThetaJoinCondition)


class InlineRelationTests(rs.TranslationTestCase):
    def _table(self) -> raast.Table:
        text = "{ T.a:number, b:string\n 1, 'x'\n 2, 'y' }"
        columns = (raast.TableColumn("a", "T", "number"), raast.TableColumn("b", None, "string"))
        return raast.Table("T", columns, ((1, "x"), (2, "y")), code_info=rs.code(text))

    def test_inline_relation(self):
        table = self._table()
        root = relalg_from_relalg_ast_node(table, {})

        self.assertNodeType(root, Relation)
        self.assertEqual("T", root.name)
        self.assertEqual(((1, "x"), (2, "y")), root.rows)
        self.assertEqual([("a", "T", "number"), ("b", "T", "string")],
                         [(col.name, col.rel_alias, col.type) for col in root.schema()])
        self.assertTrue(root.metadata["isInlineRelation"])
        self.assertEqual(table.code_info.text, root.metadata["inlineRelationDefinition"])

    def test_inline_relation_as_data_frame(self):
        df = relalg_from_relalg_ast_node(self._table(), {}).to_df()
        self.assertEqual(["a", "b"], list(df.columns))
        self.assertEqual(["x", "y"], list(df["b"]))


class AnnotationTests(rs.TranslationTestCase):
    def setUp(self) -> None:
        self.catalog = rs.make_catalog()

    def test_metadata_is_copied(self):
        node = raast.Selection(rs.ra_relation("R", source="catalog"),
                               rs.binop("=", rs.col_value("b"), rs.const("x", "string")),
                               code_info=rs.code("σ b = 'x' (R)"), metadata={"step": 1})
        root = relalg_from_relalg_ast_node(node, self.catalog)

        self.assertEqual({"step": 1}, root.metadata)
        self.assertEqual({"source": "catalog"}, root.input_node.metadata)
        self.assertEqual({}, self.catalog["R"].metadata)

    def test_parentheses_are_mirrored(self):
        condition = rs.binop("=", rs.col_value("a"), rs.const(1), wrapped=True)
        node = raast.Selection(rs.ra_relation("R"), condition, code_info=rs.code("(σ (a = 1) (R))"),
                               wrapped_in_parentheses=True)
        root = relalg_from_relalg_ast_node(node, self.catalog)

        self.assertTrue(root.wrapped_in_parentheses)
        self.assertFalse(root.input_node.wrapped_in_parentheses)
        self.assertTrue(root.condition.wrapped_in_parentheses)
        self.assertEqual("(a = 1)", str(root.condition))

    def test_determinism(self):
        node = _binary(raast.NaturalJoin, rs.ra_relation("R"), rs.ra_relation("S"))
        self.assertEqual(relalg_from_relalg_ast_node(node, self.catalog), relalg_from_relalg_ast_node(node, self.catalog))

    def test_no_advisories(self):
        node = _binary(raast.Union, rs.ra_relation("R"), rs.ra_relation("T"))
        root = relalg_from_relalg_ast_node(node, self.catalog)
        self.assertWarnings(root)


if __name__ == "__main__":
    unittest.main()
