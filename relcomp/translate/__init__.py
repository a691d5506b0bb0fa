"""The translators turn syntax trees into operator trees.

There is one translator per surface grammar: `relalg_from_sql_ast` compiles SQL statements and `relalg_from_relalg_ast`
translates native relational algebra expressions. Both share the translation of value expressions and join conditions, as
well as the annotation of the produced operators with source positions.
"""
from ._common import (
    DefaultSettings,
    TranslationSettings,
    annotate,
    parse_join_condition,
    translate_value_expr,
    verify_annotations,
)
from .native import relalg_from_relalg_ast, relalg_from_relalg_ast_node
from .sql import limit_condition, relalg_from_sql_ast

__all__ = [
    "DefaultSettings",
    "TranslationSettings",
    "annotate",
    "parse_join_condition",
    "translate_value_expr",
    "verify_annotations",
    "relalg_from_relalg_ast",
    "relalg_from_relalg_ast_node",
    "limit_condition",
    "relalg_from_sql_ast",
]
