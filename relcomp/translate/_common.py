"""Building blocks that are shared by the SQL translator and the relational algebra translator."""
from __future__ import annotations

import dataclasses
import sys
from collections.abc import Callable
from typing import IO, Never, Optional, TypeVar

from .. import util
from .._core import SUPPORTED_DATATYPES, CodeInfo
from ..errors import InvariantViolationError, UnsupportedConstructError
from ..expressions import ValueExpr, ValueExprColumnValue, ValueExprGeneric
from ..relalg import JoinCondition, NaturalJoinCondition, RANode, ThetaJoinCondition
from ..syntax import AstHeader, JoinConditionAst, RelalgAstHeader, ValueExprAst

NodeType = TypeVar("NodeType", bound=RANode)


@dataclasses.dataclass(frozen=True)
class TranslationSettings:
    """Captures the configurable aspects of a translation.

    The defaults perform all checks and do not produce any log output.

    Attributes
    ----------
    verbose : bool
        Whether the individual translation steps should be logged. Off by default.
    check_schemas : bool
        Whether the SQL translator should run the structural self-check of intermediate operator trees before adding
        selections. This surfaces schema conflicts as early as possible. On by default.

        Each check derives the schema of the entire subtree again, which includes all nested statements. The total cost is
        therefore quadratic in the nesting depth of the query. Disable the check for deeply nested, generated queries.
    verify_annotations : bool
        Whether the final operator tree should be checked for nodes and expressions without source position. A missing
        source position indicates a defect in the translator or the parser. On by default.
    log_file : IO[str]
        Where to write the log output to. Defaults to *stderr*.
    """
    verbose: bool = False
    check_schemas: bool = True
    verify_annotations: bool = True
    log_file: IO[str] = sys.stderr


DefaultSettings = TranslationSettings()


def make_translation_logger(settings: TranslationSettings) -> Callable:
    """Creates the logger that reports the individual translation steps, as configured in the settings."""
    return util.make_logger(settings.verbose, file=settings.log_file, prefix=util.timestamp)


def require_code_info(ast_node: AstHeader) -> CodeInfo:
    """Provides the source position of a syntax node.

    Raises
    ------
    InvariantViolationError
        If the node does not have a source position. The parser guarantees this information for all nodes, so this is
        a defect rather than a user error.
    """
    if ast_node.code_info is None:
        raise InvariantViolationError(f"Syntax node without source position: {type(ast_node).__name__}")
    return ast_node.code_info


def annotate(node: NodeType, ast_node: AstHeader, *, code_info: Optional[CodeInfo] = None) -> NodeType:
    """Attaches the annotations of a syntax node to the operator that was created for it.

    This sets the source position, the parenthesization and (for relational algebra nodes) copies all declared metadata.
    Annotating a node multiple times is allowed: the last source position wins and metadata entries are merged.

    Parameters
    ----------
    node : NodeType
        The operator to annotate
    ast_node : AstHeader
        The syntax node that the operator was created for
    code_info : Optional[CodeInfo], optional
        A source position that should be used instead of the one of the syntax node

    Returns
    -------
    NodeType
        The annotated operator. This is the same object as `node`.

    Raises
    ------
    InvariantViolationError
        If neither an explicit source position is given, nor the syntax node has one
    """
    header = node.header
    header.code_info = code_info if code_info is not None else require_code_info(ast_node)
    if ast_node.wrapped_in_parentheses:
        header.wrapped_in_parentheses = True
    if isinstance(ast_node, RelalgAstHeader):
        header.metadata.update(ast_node.metadata)
    return node


def assert_exhaustive(node: Never, family: str) -> Never:
    """Marks the unreachable default branch of a `match` over a closed family of syntax nodes.

    Type checkers report an error for each call of this function that can actually be reached with a valid node, i.e. if a
    node kind of the family is not handled. At runtime, this can only happen if the syntax tree was built incorrectly.
    """
    raise UnsupportedConstructError(f"{family} node {type(node).__name__}")


def translate_value_expr(node: ValueExprAst) -> ValueExpr:
    """Converts a value expression syntax tree into an evaluable expression.

    Column values are translated into column references. All other nodes become generic expressions: for constants, the
    arguments are taken as literal values, otherwise each argument is translated recursively. Source positions and the
    parenthesization are mirrored exactly.

    Parameters
    ----------
    node : ValueExprAst
        The expression to translate

    Returns
    -------
    ValueExpr
        The expression

    Raises
    ------
    UnsupportedConstructError
        If the expression uses a datatype that cannot be translated
    """
    if node.is_column_value():
        column_name = node.args[0]
        rel_alias = node.args[1] if len(node.args) > 1 else None
        return ValueExprColumnValue(column_name, rel_alias, code_info=node.code_info,
                                    wrapped_in_parentheses=node.wrapped_in_parentheses)

    if node.datatype not in SUPPORTED_DATATYPES:
        raise UnsupportedConstructError(f"value expressions of datatype '{node.datatype}'")

    if node.is_constant():
        args = list(node.args)
    else:
        args = [translate_value_expr(arg) for arg in node.args]
    return ValueExprGeneric(node.datatype, node.func, args, code_info=node.code_info,
                            wrapped_in_parentheses=node.wrapped_in_parentheses)


def parse_join_condition(condition: JoinConditionAst) -> JoinCondition:
    """Normalizes the raw condition of a join.

    Parameters
    ----------
    condition : JoinConditionAst
        The condition as specified in the query. If absent, the join is a natural join over all shared columns. A list of
        column names restricts the natural join to these columns. A boolean expression turns the join into a theta join.

    Returns
    -------
    JoinCondition
        The normalized condition
    """
    match condition:
        case None:
            return NaturalJoinCondition()
        case ValueExprAst():
            return ThetaJoinCondition(translate_value_expr(condition))
        case [*columns]:
            return NaturalJoinCondition(tuple(columns))
        case _:
            raise UnsupportedConstructError(f"join condition {condition!r}")


def verify_annotations(root: RANode) -> None:
    """Ensures that all nodes of an operator tree, as well as all of their expressions, carry a source position.

    Raises
    ------
    InvariantViolationError
        If a node or an expression without source position is found
    """
    for node in root.dfs_walk():
        if node.code_info is None:
            raise InvariantViolationError(f"Operator without source position: {node!r}")
        for expression in node.expressions():
            for expr in expression.dfs_walk():
                if expr.code_info is None:
                    raise InvariantViolationError(f"Expression without source position: {expr!r} in {node}", node.code_info)
