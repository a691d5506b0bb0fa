"""relcomp - the logical-plan compiler of a relational algebra teaching environment.

relcomp converts queries into relational algebra operator trees. Queries can be written in two different surface grammars:
a SQL dialect and a native relational algebra notation. Both are parsed outside of relcomp (see `syntax.loader` for how
the parser output is loaded) and translated into the very same kind of operator tree, which is then handed to an executor
or a renderer.

On a high level, relcomp is structured as follows:

- the `syntax` package contains the syntax trees of both grammars
- the `relalg` module contains the operator tree, the `expressions` module the value expressions that are used by the
  operators and the `schema` module the schemas of the relations
- the `translate` package contains the translators. Their main entry points `relalg_from_sql_ast` and
  `relalg_from_relalg_ast` are also available directly from this package.
- the `errors` and `messages` modules define how problems are reported. Problems that are caused by the query are raised
  as `TranslationError`, which carries a message key and parameters rather than a final text. Defects of relcomp or its
  parser are raised as `LogicError`.
- the `util` package contains algorithms and types that do not belong to the translation itself

A typical usage looks like this:

.. code-block:: python

    import relcomp

    students = relcomp.Relation.from_df("students", students_df)
    root = relcomp.relalg_from_sql_ast(relcomp.syntax.load_sql_ast(parser_output), {"students": students})
    print(root.inspect())
"""
from __future__ import annotations

from . import errors, expressions, messages, relalg, schema, syntax, translate, util
from ._core import CodeInfo, Column, Diagnostic, NodeHeader, SourceLocation
from .errors import LogicError, TranslationError, UnsupportedConstructError
from .relalg import RANode, Relation
from .schema import Schema, SchemaColumn
from .translate import TranslationSettings, relalg_from_relalg_ast, relalg_from_sql_ast

__version__ = "0.3.0"

__all__ = [
    "errors", "expressions", "messages", "relalg", "schema", "syntax", "translate", "util",
    "CodeInfo", "Column", "Diagnostic", "NodeHeader", "SourceLocation",
    "LogicError", "TranslationError", "UnsupportedConstructError",
    "RANode", "Relation", "Schema", "SchemaColumn",
    "TranslationSettings", "relalg_from_relalg_ast", "relalg_from_sql_ast",
]
