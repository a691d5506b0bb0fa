"""Tests for re-creating syntax trees from parser documents, and for translating the loaded trees end-to-end."""
from __future__ import annotations

import json
import pathlib
import unittest

from relcomp import messages, relalg_from_relalg_ast, relalg_from_sql_ast
from relcomp._core import CodeInfo, SourceLocation
from relcomp.errors import TranslationError
from relcomp.relalg import OrderBy, Projection, Relation, Selection
from relcomp.syntax import ParserError, load_code_info, load_relalg_ast, load_sql_ast, load_value_expr, raast, sqlast
from tests import regression_suite as rs

FixtureDir = pathlib.Path(__file__).parent / "fixtures"


def _load_fixture(name: str) -> dict:
    with open(FixtureDir / name, "r") as fixture_file:
        return json.load(fixture_file)


class CodeInfoLoaderTests(unittest.TestCase):
    def test_nested_location(self) -> None:
        code_info = load_code_info({"text": "R", "location": {"start": {"offset": 4, "line": 2, "column": 1},
                                                          "end": {"offset": 5, "line": 2, "column": 2}}})
        self.assertEqual(CodeInfo("R", SourceLocation(4, 2, 1), SourceLocation(5, 2, 2)), code_info)
        self.assertEqual("2:1-2:2", str(code_info))

    def test_flat_location(self) -> None:
        code_info = load_code_info({"text": "R", "start": {"offset": 0, "line": 1, "column": 1},
                                    "end": {"offset": 1, "line": 1, "column": 2}})
        self.assertEqual(1, code_info.end.offset)

    def test_missing_code_info(self) -> None:
        self.assertIsNone(load_code_info(None))
        self.assertIsNone(load_code_info({}))

    def test_incomplete_code_info(self) -> None:
        with self.assertRaises(ParserError):
            load_code_info({"text": "R", "location": {"start": {"offset": 0}}})


class SqlLoaderTests(unittest.TestCase):
    def test_fixture_structure(self) -> None:
        root = load_sql_ast(_load_fixture("sql_limit.json"))

        limit = root.child
        self.assertIsInstance(limit, sqlast.Limit)
        self.assertEqual((2, 1), (limit.limit, limit.offset))
        self.assertIsInstance(limit.child, sqlast.OrderBy)

        statement = limit.child.child
        self.assertIsInstance(statement, sqlast.Statement)
        self.assertTrue(statement.select.distinct)
        self.assertEqual(["a", "b"], [item.name for item in statement.select.arg])
        self.assertEqual(sqlast.Relation("R", None, code_info=statement.from_.code_info), statement.from_)
        self.assertIsNone(statement.where)

    def test_accepts_string_documents(self) -> None:
        document = _load_fixture("sql_limit.json")
        self.assertEqual(load_sql_ast(document), load_sql_ast(json.dumps(document)))

    def test_unknown_node_type(self) -> None:
        with self.assertRaises(ParserError):
            load_sql_ast({"child": {"type": "pivot", "child": {"type": "relation", "name": "R"}}})

    def test_missing_attribute(self) -> None:
        with self.assertRaises(ParserError):
            load_sql_ast({"child": {"type": "relation"}})

    def test_set_operation_flags(self) -> None:
        document = {"child": {"type": "union", "all": True,
                              "child": {"type": "relation", "name": "R"},
                              "child2": {"type": "relation", "name": "T"}}}
        union = load_sql_ast(document).child
        self.assertIsInstance(union, sqlast.Union)
        self.assertTrue(union.all)

    def test_join_condition_as_column_list(self) -> None:
        document = {"child": {"type": "innerJoin", "cond": ["b"],
                              "child": {"type": "relation", "name": "R"},
                              "child2": {"type": "relation", "name": "S"}}}
        self.assertEqual(("b",), load_sql_ast(document).child.cond)


class RelalgLoaderTests(unittest.TestCase):
    def test_fixture_structure(self) -> None:
        root = load_relalg_ast(_load_fixture("relalg_table.json"))

        selection = root.child
        self.assertIsInstance(selection, raast.Selection)
        self.assertEqual({"fromVariable": "Q"}, selection.metadata)
        self.assertEqual(5, selection.code_info.end.line)

        table = selection.child
        self.assertIsInstance(table, raast.Table)
        self.assertEqual(((1, "x"), (2, "y")), table.rows)
        self.assertEqual(raast.TableColumn("b", None, "string"), table.columns[1])

    def test_value_expression_arguments(self) -> None:
        expr = load_value_expr({"datatype": "boolean", "func": "=",
                                "args": [{"datatype": "null", "func": "columnValue", "args": ["a", "R"]},
                                         {"datatype": "number", "func": "constant", "args": [3]}],
                                "wrappedInParentheses": True})
        self.assertTrue(expr.wrapped_in_parentheses)
        column, constant = expr.args
        self.assertTrue(column.is_column_value())
        self.assertEqual(("a", "R"), column.args)
        self.assertEqual((3,), constant.args)

    def test_constant_with_object_argument(self) -> None:
        expr = load_value_expr({"datatype": "date", "func": "constant", "args": [{"year": 2020}]})
        self.assertEqual(({"year": 2020},), expr.args)

    def test_unknown_node_type(self) -> None:
        with self.assertRaises(ParserError):
            load_relalg_ast({"child": {"type": "transitiveClosure", "child": {"type": "relation", "name": "R"}}})

    def test_non_object_document(self) -> None:
        with self.assertRaises(ParserError):
            load_relalg_ast("[1, 2, 3]")


class EndToEndTests(rs.TranslationTestCase):
    def setUp(self) -> None:
        self.catalog = rs.make_catalog()

    def test_sql_with_limit(self) -> None:
        root = relalg_from_sql_ast(load_sql_ast(_load_fixture("sql_limit.json")), self.catalog)

        self.assertNodeType(root, Selection)
        self.assertEqual("rownum() > 1 and rownum() <= 3", str(root.condition))
        self.assertEqual("LIMIT 2 OFFSET 1", root.code_info.text)
        self.assertNodeType(root.input_node, OrderBy)
        self.assertNodeType(root.input_node.input_node, Projection)
        self.assertNodeType(root.input_node.input_node.input_node, Relation)
        self.assertWarnings(root.input_node.input_node)
        self.assertFullyAnnotated(root)
        root.check()

    def test_relalg_with_inline_table(self) -> None:
        root = relalg_from_relalg_ast(load_relalg_ast(_load_fixture("relalg_table.json")), {})

        self.assertNodeType(root, Selection)
        self.assertEqual({"fromVariable": "Q"}, root.metadata)
        table = root.input_node
        self.assertNodeType(table, Relation)
        self.assertTrue(table.metadata["isInlineRelation"])
        self.assertTrue(table.metadata["inlineRelationDefinition"].startswith("{"))
        self.assertEqual(["Q", "Q"], [col.rel_alias for col in table.schema()])
        root.check()

    def test_unknown_relation_in_document(self) -> None:
        document = {"child": {"type": "relation", "name": "ghost",
                              "codeInfo": {"text": "ghost", "location": {"start": {"offset": 0, "line": 1, "column": 1},
                                                                         "end": {"offset": 5, "line": 1, "column": 6}}}}}
        with self.assertRaises(TranslationError) as ctx:
            relalg_from_relalg_ast(load_relalg_ast(document), self.catalog)
        self.assertEqual(messages.RELATION_NOT_FOUND, ctx.exception.message_key)
        self.assertEqual(6, ctx.exception.code_info.end.column)


if __name__ == "__main__":
    unittest.main()
