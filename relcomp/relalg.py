"""relalg provides the operator tree that both translators produce.

The central component of the operator tree is the `RANode` class. All relational operators inherit from this abstract class.
In contrast to the syntax trees, the operator tree is independent of the surface grammar that a query was written in: a join
that was written as ``R NATURAL JOIN S`` in SQL and as ``R ⨝ S`` in relational algebra results in the very same
`InnerJoin` node.

Each node embeds exactly one `NodeHeader` which stores the source position of the syntax node that the operator was
created for, arbitrary metadata, advisory warnings and the parenthesization of the source text. The header is filled by the
translators after the node has been constructed. Afterwards, the only modification that is allowed is appending warnings.

Every node owns its children exclusively, i.e. the operator graph is always a tree. Base relations from a catalog are
copied before they become part of a tree, which ensures that two references to the same catalog relation do not alias each
other. The `RANode.check` method verifies the tree structure and derives the schemas of all nodes. Schema conflicts (such
as duplicate columns in a cross product) are reported as `TranslationError`.

Notice that the operator tree only describes *what* should be computed. Evaluating the operators is the responsibility of an
executor and not part of relcomp.
"""
from __future__ import annotations

import abc
import copy
import dataclasses
import typing
from collections.abc import Generator, Iterable, Sequence
from typing import Any, Optional

import pandas as pd

from . import messages
from ._core import CodeInfo, Column, ColumnName, Diagnostic, NodeHeader, VisitorResult
from .errors import InvariantViolationError, StateError, TranslationError
from .expressions import ValueExpr, ValueExprColumnValue
from .schema import Schema, SchemaColumn
from .util import df as df_utils
from .util import networkx as nx_utils
from .util.jsonize import jsondict


@dataclasses.dataclass(frozen=True)
class NaturalJoinCondition:
    """Joins two relations on the equality of their shared columns.

    Attributes
    ----------
    restrict_to_columns : Optional[tuple[str, ...]]
        The columns that should be compared. If *None*, all columns that are contained in both relations are used.
    """
    restrict_to_columns: Optional[tuple[str, ...]] = None

    def __json__(self) -> jsondict:
        return {"type": "natural", "restrictToColumns": self.restrict_to_columns}

    def __str__(self) -> str:
        return ", ".join(self.restrict_to_columns) if self.restrict_to_columns else ""


@dataclasses.dataclass(frozen=True)
class ThetaJoinCondition:
    """Joins two relations based on an arbitrary boolean expression."""
    join_expression: ValueExpr

    def __json__(self) -> jsondict:
        return {"type": "theta", "joinExpression": self.join_expression}

    def __str__(self) -> str:
        return str(self.join_expression)


JoinCondition = NaturalJoinCondition | ThetaJoinCondition
"""The qualifier of a join: either a natural join condition or a theta join condition."""


@dataclasses.dataclass(frozen=True)
class ProjectionColumn:
    """A computed column of a projection: the result of `child` is provided as column `name` of relation `rel_alias`."""
    name: ColumnName
    rel_alias: Optional[str]
    child: ValueExpr

    def __json__(self) -> jsondict:
        return {"name": self.name, "relAlias": self.rel_alias, "child": self.child}

    def __str__(self) -> str:
        name = f"{self.rel_alias}.{self.name}" if self.rel_alias else str(self.name)
        return f"{self.child} → {name}"


@dataclasses.dataclass(frozen=True)
class AggregateFunction:
    """An aggregate function that is calculated by a `GroupBy` node.

    Attributes
    ----------
    aggregate : str
        The function, e.g. *SUM*. ``COUNT(*)`` is represented as *COUNT_ALL* without a column.
    column : Optional[Column]
        The aggregated column, if any
    name : str
        The name of the column that contains the aggregated value. This column does not belong to any relation.
    """
    aggregate: str
    column: Optional[Column]
    name: str

    def __json__(self) -> jsondict:
        return {"aggregate": self.aggregate, "column": self.column, "name": self.name}

    def __str__(self) -> str:
        arg = "*" if self.column is None else str(self.column)
        return f"{self.aggregate.lower()}({arg}) → {self.name}"


@dataclasses.dataclass(frozen=True)
class ColumnRenaming:
    """Renames `column` to `new_name`. The relation of the column stays the same."""
    new_name: str
    column: Column

    def __json__(self) -> jsondict:
        return {"newName": self.new_name, "column": self.column}

    def __str__(self) -> str:
        return f"{self.new_name} ← {self.column}"


class RANode(abc.ABC):
    """Models a fundamental operator of the operator tree. All specific operators like selection or joins inherit from it.

    Each node owns a `NodeHeader` that is created empty and filled by the translators. The header is part of the
    structural equality of nodes: two trees are only considered equal if they were produced from equal syntax trees.
    """

    def __init__(self) -> None:
        self._header = NodeHeader()
        self._node_type = type(self).__name__

    @property
    def node_type(self) -> str:
        """Get the current operator as a string.

        Returns
        -------
        str
            The operator name
        """
        return self._node_type

    @property
    def header(self) -> NodeHeader:
        """Get the annotations of the current node.

        Returns
        -------
        NodeHeader
            The header. This is the actual header object, not a copy.
        """
        return self._header

    @property
    def code_info(self) -> Optional[CodeInfo]:
        return self._header.code_info

    @property
    def metadata(self) -> dict[str, Any]:
        return self._header.metadata

    @property
    def warnings(self) -> Sequence[Diagnostic]:
        return tuple(self._header.warnings)

    @property
    def wrapped_in_parentheses(self) -> bool:
        return self._header.wrapped_in_parentheses

    def add_warning(self, message_key: str, code_info: Optional[CodeInfo] = None, **params: Any) -> None:
        """Attaches an advisory warning to the current node.

        Warnings do not change the structure of the tree. They are intended to be displayed next to the result.

        Parameters
        ----------
        message_key : str
            Identifies the warning message
        code_info : Optional[CodeInfo], optional
            The part of the query that caused the warning
        **params : Any
            Substitution parameters of the message
        """
        self._header.warnings.append(Diagnostic(message_key, code_info, params))

    @abc.abstractmethod
    def children(self) -> Sequence[RANode]:
        """Provides all input nodes of the current operator.

        Returns
        -------
        Sequence[RANode]
            The input nodes. For base relations, the sequence is empty, otherwise the children are provided from left to
            right.
        """
        raise NotImplementedError

    def expressions(self) -> Sequence[ValueExpr]:
        """Provides all value expressions that are directly contained in the current operator (e.g. selection conditions).

        Returns
        -------
        Sequence[ValueExpr]
            The expressions. Nested expressions are not provided separately.
        """
        return []

    @abc.abstractmethod
    def accept_visitor(self, visitor: RelNodeVisitor[VisitorResult]) -> VisitorResult:
        """Enables processing of the current operator tree by a visitor.

        Parameters
        ----------
        visitor : RelNodeVisitor[VisitorResult]
            The visitor
        """
        raise NotImplementedError

    def dfs_walk(self) -> Generator[RANode, None, None]:
        """Performs a depth-first search on the operator tree.

        This produces the subtree induced by the current node. The current node is also included in the output.

        Yields
        ------
        Generator[RANode, None, None]
            All nodes of the subtree induced by the current node.
        """
        yield self
        for child in self.children():
            yield from child.dfs_walk()

    def schema(self) -> Schema:
        """Derives the schema of the relation that is produced by the current operator.

        Returns
        -------
        Schema
            The output schema

        Raises
        ------
        TranslationError
            If the schemas of the inputs cannot be combined in the way that the operators require, or if a column cannot
            be resolved.
        """
        return self.accept_visitor(_SchemaDerivation())

    def check(self) -> None:
        """Performs a structural self-check of the subtree induced by the current node.

        The check ensures that the subtree actually is a tree and that all schemas can be derived. This surfaces problems
        such as duplicate unaliased relations in a cross product before any column is referenced.

        Raises
        ------
        InvariantViolationError
            If a node is shared between multiple parents or if the subtree contains a cycle
        TranslationError
            If the schema derivation fails
        """
        graph = nx_utils.nx_from_tree(self, lambda node: node.children())
        if not nx_utils.nx_is_tree(graph):
            raise InvariantViolationError(f"Operator graph rooted at {self} is not a tree", self.code_info)
        self.schema()

    def inspect(self, *, _indentation: int = 0) -> str:
        """Provides a nice hierarchical string representation of the operator tree.

        The representation typically spans multiple lines and uses indentation to separate parent nodes from their
        children.

        Parameters
        ----------
        _indentation : int, optional
            Internal parameter that denotes how deeply recursed we are in the tree. Should not be modified by the user.

        Returns
        -------
        str
            A string representation of the operator tree
        """
        padding = " " * _indentation
        prefix = f"{padding}<- " if padding else ""
        inspections = [prefix + str(self)]
        for child in self.children():
            inspections.append(child.inspect(_indentation=_indentation + 2))
        return "\n".join(inspections)

    def _json_header(self) -> jsondict:
        return {"type": self._node_type, **self._header.__json__()}

    @abc.abstractmethod
    def __json__(self) -> jsondict:
        raise NotImplementedError

    @abc.abstractmethod
    def _recalc_hash_val(self) -> int:
        """Calculates the hash value of the current node.

        This method only needs to consider attributes that are unique to the node. The header is not included since warnings
        can be appended after the node has been created.

        Returns
        -------
        int
            The current hash value
        """
        raise NotImplementedError

    def __hash__(self) -> int:
        return hash((self._node_type, self._recalc_hash_val()))

    @abc.abstractmethod
    def __eq__(self, other: object) -> bool:
        raise NotImplementedError

    def _header_eq(self, other: RANode) -> bool:
        return type(self) is type(other) and self._header == other._header

    def __repr__(self) -> str:
        child_reprs = ", ".join(repr(child) for child in self.children())
        return f"{self.node_type}({child_reprs})"

    @abc.abstractmethod
    def __str__(self) -> str:
        raise NotImplementedError


class Relation(RANode):
    """A base relation, i.e. a named relation with a schema and (possibly) some rows.

    Relations are the leaves of each operator tree. They are usually taken from a catalog that maps relation names to
    relations and copied before they are inserted into a tree.

    Parameters
    ----------
    name : str
        The name of the relation
    schema : Optional[Schema], optional
        The schema of the relation. Can be set later on via `set_schema`.
    rows : Optional[Iterable[Sequence[Any]]], optional
        The tuples of the relation. Each row must provide one value per column of the schema.
    """

    def __init__(self, name: str, schema: Optional[Schema] = None, rows: Optional[Iterable[Sequence[Any]]] = None) -> None:
        super().__init__()
        self._name = name
        self._schema = schema
        self._rows: list[tuple[Any, ...]] = []
        if rows is not None:
            self.add_rows(rows)

    @staticmethod
    def from_df(name: str, df: pd.DataFrame) -> Relation:
        """Creates a new relation from a Pandas data frame.

        All columns of the data frame become columns of the relation and belong to the relation `name`. The column types
        are inferred from the dtypes of the data frame.

        Parameters
        ----------
        name : str
            The name of the new relation
        df : pd.DataFrame
            The data

        Returns
        -------
        Relation
            The relation
        """
        schema = Schema(SchemaColumn(str(col), name, df_utils.infer_datatype(df[col])) for col in df.columns)
        return Relation(name, schema, df_utils.df_rows(df))

    @property
    def name(self) -> str:
        return self._name

    @property
    def rows(self) -> Sequence[tuple[Any, ...]]:
        return tuple(self._rows)

    @property
    def base_schema(self) -> Optional[Schema]:
        """Get the schema that was assigned to the relation, or *None* if it does not have one yet."""
        return self._schema

    def set_schema(self, schema: Schema, *, adopt_name_as_alias: bool = False) -> None:
        """Sets the schema of the relation.

        If `adopt_name_as_alias` is enabled, all columns without a relation alias are assigned to the current relation.
        """
        if adopt_name_as_alias:
            schema = Schema(col if col.rel_alias else col.with_rel_alias(self._name) for col in schema)
        self._schema = schema

    def add_rows(self, rows: Iterable[Sequence[Any]]) -> None:
        """Appends new tuples to the relation.

        Raises
        ------
        StateError
            If the relation does not have a schema yet
        ValueError
            If a row does not provide exactly one value per column
        """
        if self._schema is None:
            raise StateError(f"Relation {self._name} does not have a schema")
        for row in rows:
            row = tuple(row)
            if len(row) != len(self._schema):
                raise ValueError(f"Row {row} does not match schema {self._schema} of relation {self._name}")
            self._rows.append(row)

    def copy(self) -> Relation:
        """Creates an independent deep copy of the relation.

        The copy does not share any state with the original relation: schema, rows and the entire header (including its
        metadata) are duplicated.
        """
        copied = Relation(self._name)
        copied._schema = self._schema.copy() if self._schema is not None else None
        copied._rows = copy.deepcopy(self._rows)
        copied._header = self._header.copy()
        return copied

    def to_df(self) -> pd.DataFrame:
        """Provides the rows of the relation as a Pandas data frame, using the column names as headers."""
        return df_utils.as_df([str(name) for name in self.schema().names()], self._rows)

    def children(self) -> Sequence[RANode]:
        return []

    def accept_visitor(self, visitor: RelNodeVisitor[VisitorResult]) -> VisitorResult:
        return visitor.visit_relation(self)

    def __json__(self) -> jsondict:
        return self._json_header() | {"name": self._name, "schema": self._schema, "rows": self._rows}

    def _recalc_hash_val(self) -> int:
        return hash(self._name)

    __hash__ = RANode.__hash__

    def __eq__(self, other: object) -> bool:
        return (self._header_eq(other)
                and self._name == other._name and self._schema == other._schema and self._rows == other._rows)

    def __repr__(self) -> str:
        return f"Relation({self._name!r})"

    def __str__(self) -> str:
        return self._name


class _UnaryNode(RANode, abc.ABC):
    """Common base class of all operators with exactly one input."""

    def __init__(self, input_node: RANode) -> None:
        super().__init__()
        self._input_node = input_node

    @property
    def input_node(self) -> RANode:
        """Get the operator that provides the input tuples.

        Returns
        -------
        RANode
            A relation
        """
        return self._input_node

    def children(self) -> Sequence[RANode]:
        return [self._input_node]


class Selection(_UnaryNode):
    """A selection filters the input relation based on an arbitrary boolean expression.

    Parameters
    ----------
    input_node : RANode
        The tuples to filter
    condition : ValueExpr
        The condition that must be satisfied by all output tuples

    Notes
    -----
    A selection is defined as

    .. math:: \\sigma_\\theta(R) := \\{ r \\in R | \\theta(r) \\}
    """

    def __init__(self, input_node: RANode, condition: ValueExpr) -> None:
        super().__init__(input_node)
        self._condition = condition

    @property
    def condition(self) -> ValueExpr:
        return self._condition

    def expressions(self) -> Sequence[ValueExpr]:
        return [self._condition]

    def accept_visitor(self, visitor: RelNodeVisitor[VisitorResult]) -> VisitorResult:
        return visitor.visit_selection(self)

    def __json__(self) -> jsondict:
        return self._json_header() | {"child": self._input_node, "condition": self._condition}

    def _recalc_hash_val(self) -> int:
        return hash((self._input_node, self._condition))

    __hash__ = RANode.__hash__

    def __eq__(self, other: object) -> bool:
        return (self._header_eq(other)
                and self._input_node == other._input_node and self._condition == other._condition)

    def __str__(self) -> str:
        return f"σ ({self._condition})"


class Projection(_UnaryNode):
    """A projection restricts the columns of the input relation and can compute new columns.

    Parameters
    ----------
    input_node : RANode
        The input relation
    columns : Sequence[Column | ProjectionColumn]
        The output columns. Plain columns are taken from the input relation (``R.*`` selects all columns of *R*),
        projection columns are computed.
    """

    def __init__(self, input_node: RANode, columns: Sequence[Column | ProjectionColumn]) -> None:
        super().__init__(input_node)
        self._columns = tuple(columns)

    @property
    def columns(self) -> Sequence[Column | ProjectionColumn]:
        return self._columns

    def expressions(self) -> Sequence[ValueExpr]:
        return [col.child for col in self._columns if isinstance(col, ProjectionColumn)]

    def accept_visitor(self, visitor: RelNodeVisitor[VisitorResult]) -> VisitorResult:
        return visitor.visit_projection(self)

    def __json__(self) -> jsondict:
        return self._json_header() | {"child": self._input_node, "columns": list(self._columns)}

    def _recalc_hash_val(self) -> int:
        return hash((self._input_node, self._columns))

    __hash__ = RANode.__hash__

    def __eq__(self, other: object) -> bool:
        return self._header_eq(other) and self._input_node == other._input_node and self._columns == other._columns

    def __str__(self) -> str:
        return f"π ({', '.join(str(col) for col in self._columns)})"


class OrderBy(_UnaryNode):
    """Sorts the input relation.

    Parameters
    ----------
    input_node : RANode
        The input relation
    columns : Sequence[Column]
        The columns to sort by, in order of their priority
    ascending : Sequence[bool]
        The sort direction of each column. Must contain exactly one entry per column.

    Raises
    ------
    ValueError
        If the number of columns and sort directions differ
    """

    def __init__(self, input_node: RANode, columns: Sequence[Column], ascending: Sequence[bool]) -> None:
        if len(columns) != len(ascending):
            raise ValueError(f"Expected one sort direction per column, but got {len(columns)} columns "
                             f"and {len(ascending)} directions")
        super().__init__(input_node)
        self._columns = tuple(columns)
        self._ascending = tuple(ascending)

    @property
    def columns(self) -> Sequence[Column]:
        return self._columns

    @property
    def ascending(self) -> Sequence[bool]:
        return self._ascending

    def accept_visitor(self, visitor: RelNodeVisitor[VisitorResult]) -> VisitorResult:
        return visitor.visit_order_by(self)

    def __json__(self) -> jsondict:
        return self._json_header() | {"child": self._input_node, "columns": list(self._columns),
                                      "ascending": list(self._ascending)}

    def _recalc_hash_val(self) -> int:
        return hash((self._input_node, self._columns, self._ascending))

    __hash__ = RANode.__hash__

    def __eq__(self, other: object) -> bool:
        return (self._header_eq(other) and self._input_node == other._input_node
                and self._columns == other._columns and self._ascending == other._ascending)

    def __str__(self) -> str:
        sortings = ", ".join(f"{col} {'asc' if asc else 'desc'}" for col, asc in zip(self._columns, self._ascending))
        return f"τ ({sortings})"


class GroupBy(_UnaryNode):
    """Groups the input relation and calculates aggregates for each group.

    The output relation consists of the grouping columns, followed by one column per aggregate function. If no grouping
    columns are given, the entire input relation forms a single group.

    Parameters
    ----------
    input_node : RANode
        The input relation
    group_columns : Sequence[Column]
        The columns that are used to form the groups. Can be empty.
    aggregates : Sequence[AggregateFunction]
        The aggregates to compute
    """

    def __init__(self, input_node: RANode, group_columns: Sequence[Column],
                 aggregates: Sequence[AggregateFunction]) -> None:
        super().__init__(input_node)
        self._group_columns = tuple(group_columns)
        self._aggregates = tuple(aggregates)

    @property
    def group_columns(self) -> Sequence[Column]:
        return self._group_columns

    @property
    def aggregates(self) -> Sequence[AggregateFunction]:
        return self._aggregates

    def accept_visitor(self, visitor: RelNodeVisitor[VisitorResult]) -> VisitorResult:
        return visitor.visit_group_by(self)

    def __json__(self) -> jsondict:
        return self._json_header() | {"child": self._input_node, "groupColumns": list(self._group_columns),
                                      "aggregates": list(self._aggregates)}

    def _recalc_hash_val(self) -> int:
        return hash((self._input_node, self._group_columns, self._aggregates))

    __hash__ = RANode.__hash__

    def __eq__(self, other: object) -> bool:
        return (self._header_eq(other) and self._input_node == other._input_node
                and self._group_columns == other._group_columns and self._aggregates == other._aggregates)

    def __str__(self) -> str:
        groups = ", ".join(str(col) for col in self._group_columns)
        aggregates = ", ".join(str(agg) for agg in self._aggregates)
        return f"γ ({groups}; {aggregates})" if groups else f"γ ({aggregates})"


class RenameColumns(_UnaryNode):
    """Provides new names for some of the columns of the input relation. All other columns are left as-is.

    Parameters
    ----------
    input_node : RANode
        The input relation
    renamings : Sequence[ColumnRenaming]
        The renamings, in the order in which they were declared
    """

    def __init__(self, input_node: RANode, renamings: Sequence[ColumnRenaming]) -> None:
        super().__init__(input_node)
        self._renamings = tuple(renamings)

    @property
    def renamings(self) -> Sequence[ColumnRenaming]:
        return self._renamings

    def accept_visitor(self, visitor: RelNodeVisitor[VisitorResult]) -> VisitorResult:
        return visitor.visit_rename_columns(self)

    def __json__(self) -> jsondict:
        return self._json_header() | {"child": self._input_node, "renamings": list(self._renamings)}

    def _recalc_hash_val(self) -> int:
        return hash((self._input_node, self._renamings))

    __hash__ = RANode.__hash__

    def __eq__(self, other: object) -> bool:
        return self._header_eq(other) and self._input_node == other._input_node and self._renamings == other._renamings

    def __str__(self) -> str:
        return f"ρ ({', '.join(str(renaming) for renaming in self._renamings)})"


class RenameRelation(_UnaryNode):
    """Assigns all columns of the input relation to a new relation `new_rel_alias`."""

    def __init__(self, input_node: RANode, new_rel_alias: str) -> None:
        super().__init__(input_node)
        self._new_rel_alias = new_rel_alias

    @property
    def new_rel_alias(self) -> str:
        return self._new_rel_alias

    def accept_visitor(self, visitor: RelNodeVisitor[VisitorResult]) -> VisitorResult:
        return visitor.visit_rename_relation(self)

    def __json__(self) -> jsondict:
        return self._json_header() | {"child": self._input_node, "newRelAlias": self._new_rel_alias}

    def _recalc_hash_val(self) -> int:
        return hash((self._input_node, self._new_rel_alias))

    __hash__ = RANode.__hash__

    def __eq__(self, other: object) -> bool:
        return (self._header_eq(other)
                and self._input_node == other._input_node and self._new_rel_alias == other._new_rel_alias)

    def __str__(self) -> str:
        return f"ρ {self._new_rel_alias}"


class _BinaryNode(RANode, abc.ABC):
    """Common base class of all operators that combine two input relations."""

    def __init__(self, left_input: RANode, right_input: RANode) -> None:
        super().__init__()
        self._left_input = left_input
        self._right_input = right_input

    @property
    def left_input(self) -> RANode:
        """Get the operator providing the first set of tuples.

        Returns
        -------
        RANode
            A relation
        """
        return self._left_input

    @property
    def right_input(self) -> RANode:
        """Get the operator providing the second set of tuples.

        Returns
        -------
        RANode
            A relation
        """
        return self._right_input

    def children(self) -> Sequence[RANode]:
        return [self._left_input, self._right_input]

    def __json__(self) -> jsondict:
        return self._json_header() | {"child": self._left_input, "child2": self._right_input}

    def _recalc_hash_val(self) -> int:
        return hash((self._left_input, self._right_input))

    __hash__ = RANode.__hash__

    def __eq__(self, other: object) -> bool:
        return (self._header_eq(other)
                and self._left_input == other._left_input and self._right_input == other._right_input)


class CrossJoin(_BinaryNode):
    """A cross join calculates the cartesian product between tuples from two relations.

    Notes
    -----
    A cross join is defined as

    .. math:: R \\times S := \\{ r \\circ s | r \\in R, s \\in S \\}
    """

    def accept_visitor(self, visitor: RelNodeVisitor[VisitorResult]) -> VisitorResult:
        return visitor.visit_cross_join(self)

    def __str__(self) -> str:
        return "⨯"


class _ConditionalJoin(_BinaryNode, abc.ABC):
    """Common base class of all joins that are qualified by a `JoinCondition`."""

    def __init__(self, left_input: RANode, right_input: RANode, condition: JoinCondition) -> None:
        super().__init__(left_input, right_input)
        self._condition = condition

    @property
    def condition(self) -> JoinCondition:
        return self._condition

    def is_natural(self) -> bool:
        return isinstance(self._condition, NaturalJoinCondition)

    def expressions(self) -> Sequence[ValueExpr]:
        if isinstance(self._condition, ThetaJoinCondition):
            return [self._condition.join_expression]
        return []

    def __json__(self) -> jsondict:
        return super().__json__() | {"condition": self._condition}

    def _recalc_hash_val(self) -> int:
        return hash((self._left_input, self._right_input, self._condition))

    __hash__ = RANode.__hash__

    def __eq__(self, other: object) -> bool:
        return super().__eq__(other) and self._condition == other._condition

    def _format(self, symbol: str) -> str:
        condition = str(self._condition)
        return f"{symbol} ({condition})" if condition else symbol


class InnerJoin(_ConditionalJoin):
    """An inner join combines all pairs of tuples that satisfy the join condition.

    Natural joins and theta joins are both represented as inner joins and only differ in their `condition`.
    """

    def accept_visitor(self, visitor: RelNodeVisitor[VisitorResult]) -> VisitorResult:
        return visitor.visit_inner_join(self)

    def __str__(self) -> str:
        return self._format("⋈")


class LeftOuterJoin(_ConditionalJoin):

    def accept_visitor(self, visitor: RelNodeVisitor[VisitorResult]) -> VisitorResult:
        return visitor.visit_left_outer_join(self)

    def __str__(self) -> str:
        return self._format("⟕")


class RightOuterJoin(_ConditionalJoin):

    def accept_visitor(self, visitor: RelNodeVisitor[VisitorResult]) -> VisitorResult:
        return visitor.visit_right_outer_join(self)

    def __str__(self) -> str:
        return self._format("⟖")


class FullOuterJoin(_ConditionalJoin):

    def accept_visitor(self, visitor: RelNodeVisitor[VisitorResult]) -> VisitorResult:
        return visitor.visit_full_outer_join(self)

    def __str__(self) -> str:
        return self._format("⟗")


class SemiJoin(_BinaryNode):
    """A semi join provides all tuples of one input that have a natural join partner in the other input.

    Parameters
    ----------
    left_input : RANode
        The first input relation
    right_input : RANode
        The second input relation
    left : bool, optional
        Whether the tuples of the left input are provided (left semi join, the default) or the tuples of the right input
        (right semi join).
    """

    def __init__(self, left_input: RANode, right_input: RANode, *, left: bool = True) -> None:
        super().__init__(left_input, right_input)
        self._left = left

    @property
    def left(self) -> bool:
        return self._left

    def accept_visitor(self, visitor: RelNodeVisitor[VisitorResult]) -> VisitorResult:
        return visitor.visit_semi_join(self)

    def __json__(self) -> jsondict:
        return super().__json__() | {"left": self._left}

    def _recalc_hash_val(self) -> int:
        return hash((self._left_input, self._right_input, self._left))

    __hash__ = RANode.__hash__

    def __eq__(self, other: object) -> bool:
        return super().__eq__(other) and self._left == other._left

    def __str__(self) -> str:
        return "⋉" if self._left else "⋊"


class AntiJoin(_BinaryNode):
    """An anti join provides all tuples of the left input that do not have a natural join partner in the right input."""

    def accept_visitor(self, visitor: RelNodeVisitor[VisitorResult]) -> VisitorResult:
        return visitor.visit_anti_join(self)

    def __str__(self) -> str:
        return "▷"


class Union(_BinaryNode):
    """A union combines the tuple sets of two relations into a single output relation.

    Both inputs must have unifiable schemas. The output uses the schema of the left input.

    Notes
    -----
    The union is defined as

    .. math:: R \\cup S := \\{ t | t \\in R \\lor t \\in S \\}
    """

    def accept_visitor(self, visitor: RelNodeVisitor[VisitorResult]) -> VisitorResult:
        return visitor.visit_union(self)

    def __str__(self) -> str:
        return "∪"


class Intersect(_BinaryNode):
    """An intersection provides all tuples that are contained in both of its input relations.

    Notes
    -----
    The intersection is defined as

    .. math:: R \\cap S := \\{ t | t \\in R \\land t \\in S \\}
    """

    def accept_visitor(self, visitor: RelNodeVisitor[VisitorResult]) -> VisitorResult:
        return visitor.visit_intersect(self)

    def __str__(self) -> str:
        return "∩"


class Difference(_BinaryNode):
    """A set difference provides all tuples of the left input that are not contained in the right input.

    Notes
    -----
    The difference is defined as

    .. math:: R \\setminus S := \\{ r \\in R | r \\notin S \\}
    """

    def accept_visitor(self, visitor: RelNodeVisitor[VisitorResult]) -> VisitorResult:
        return visitor.visit_difference(self)

    def __str__(self) -> str:
        return "−"


class Division(_BinaryNode):
    """A division provides the values of the left-only columns that are combined with *all* tuples of the right input.

    The columns of the right input must be a proper subset of the columns of the left input.
    """

    def accept_visitor(self, visitor: RelNodeVisitor[VisitorResult]) -> VisitorResult:
        return visitor.visit_division(self)

    def __str__(self) -> str:
        return "÷"


class RelNodeVisitor(abc.ABC, typing.Generic[VisitorResult]):
    """Basic visitor to operate on arbitrary operator trees.

    See Also
    --------
    RANode

    References
    ----------

    .. Visitor pattern: https://en.wikipedia.org/wiki/Visitor_pattern
    """

    @abc.abstractmethod
    def visit_relation(self, relation: Relation) -> VisitorResult:
        raise NotImplementedError

    @abc.abstractmethod
    def visit_selection(self, selection: Selection) -> VisitorResult:
        raise NotImplementedError

    @abc.abstractmethod
    def visit_projection(self, projection: Projection) -> VisitorResult:
        raise NotImplementedError

    @abc.abstractmethod
    def visit_order_by(self, order_by: OrderBy) -> VisitorResult:
        raise NotImplementedError

    @abc.abstractmethod
    def visit_group_by(self, group_by: GroupBy) -> VisitorResult:
        raise NotImplementedError

    @abc.abstractmethod
    def visit_rename_columns(self, rename: RenameColumns) -> VisitorResult:
        raise NotImplementedError

    @abc.abstractmethod
    def visit_rename_relation(self, rename: RenameRelation) -> VisitorResult:
        raise NotImplementedError

    @abc.abstractmethod
    def visit_cross_join(self, join: CrossJoin) -> VisitorResult:
        raise NotImplementedError

    @abc.abstractmethod
    def visit_inner_join(self, join: InnerJoin) -> VisitorResult:
        raise NotImplementedError

    @abc.abstractmethod
    def visit_left_outer_join(self, join: LeftOuterJoin) -> VisitorResult:
        raise NotImplementedError

    @abc.abstractmethod
    def visit_right_outer_join(self, join: RightOuterJoin) -> VisitorResult:
        raise NotImplementedError

    @abc.abstractmethod
    def visit_full_outer_join(self, join: FullOuterJoin) -> VisitorResult:
        raise NotImplementedError

    @abc.abstractmethod
    def visit_semi_join(self, join: SemiJoin) -> VisitorResult:
        raise NotImplementedError

    @abc.abstractmethod
    def visit_anti_join(self, join: AntiJoin) -> VisitorResult:
        raise NotImplementedError

    @abc.abstractmethod
    def visit_union(self, union: Union) -> VisitorResult:
        raise NotImplementedError

    @abc.abstractmethod
    def visit_intersect(self, intersect: Intersect) -> VisitorResult:
        raise NotImplementedError

    @abc.abstractmethod
    def visit_difference(self, difference: Difference) -> VisitorResult:
        raise NotImplementedError

    @abc.abstractmethod
    def visit_division(self, division: Division) -> VisitorResult:
        raise NotImplementedError


_NUMERIC_AGGREGATES = frozenset({"COUNT", "COUNT_ALL", "SUM", "AVG"})


class _SchemaDerivation(RelNodeVisitor[Schema]):
    """Computes the output schema of an operator tree bottom-up, resolving every column reference along the way."""

    def visit_relation(self, relation: Relation) -> Schema:
        if relation.base_schema is None:
            raise StateError(f"Relation {relation.name} does not have a schema")
        return relation.base_schema.copy()

    def visit_selection(self, selection: Selection) -> Schema:
        schema = selection.input_node.accept_visitor(self)
        self._resolve_expression(selection.condition, schema, selection.code_info)
        return schema

    def visit_projection(self, projection: Projection) -> Schema:
        schema = projection.input_node.accept_visitor(self)
        output = Schema()
        for col in projection.columns:
            if isinstance(col, ProjectionColumn):
                datatype = self._resolve_expression(col.child, schema, projection.code_info)
                output.add_column(col.name, col.rel_alias, datatype)
            elif col.is_wildcard():
                for schema_col in schema.select_all(col.rel_alias, code_info=projection.code_info):
                    output.add_column(schema_col.name, schema_col.rel_alias, schema_col.type)
            else:
                schema_col = schema.resolve(col, code_info=projection.code_info)
                output.add_column(schema_col.name, schema_col.rel_alias, schema_col.type)
        return output

    def visit_order_by(self, order_by: OrderBy) -> Schema:
        schema = order_by.input_node.accept_visitor(self)
        for col in order_by.columns:
            schema.index_of(col, code_info=order_by.code_info)
        return schema

    def visit_group_by(self, group_by: GroupBy) -> Schema:
        schema = group_by.input_node.accept_visitor(self)
        output = Schema(schema.resolve(col, code_info=group_by.code_info) for col in group_by.group_columns)
        for agg in group_by.aggregates:
            if agg.aggregate.upper() in _NUMERIC_AGGREGATES or agg.column is None:
                datatype = "number"
            else:
                datatype = schema.resolve(agg.column, code_info=group_by.code_info).type
            if agg.column is not None:
                schema.index_of(agg.column, code_info=group_by.code_info)
            output.add_column(agg.name, None, datatype)
        output.assert_unique(code_info=group_by.code_info)
        return output

    def visit_rename_columns(self, rename: RenameColumns) -> Schema:
        schema = rename.input_node.accept_visitor(self)
        columns = list(schema)
        for renaming in rename.renamings:
            idx = schema.index_of(renaming.column, code_info=rename.code_info)
            columns[idx] = columns[idx].renamed(renaming.new_name)
        output = Schema(columns)
        output.assert_unique(code_info=rename.code_info)
        return output

    def visit_rename_relation(self, rename: RenameRelation) -> Schema:
        return rename.input_node.accept_visitor(self).with_rel_alias(rename.new_rel_alias)

    def visit_cross_join(self, join: CrossJoin) -> Schema:
        left, right = self._visit_inputs(join)
        return left.concat(right, code_info=join.code_info)

    def visit_inner_join(self, join: InnerJoin) -> Schema:
        return self._conditional_join(join)

    def visit_left_outer_join(self, join: LeftOuterJoin) -> Schema:
        return self._conditional_join(join)

    def visit_right_outer_join(self, join: RightOuterJoin) -> Schema:
        return self._conditional_join(join)

    def visit_full_outer_join(self, join: FullOuterJoin) -> Schema:
        return self._conditional_join(join)

    def visit_semi_join(self, join: SemiJoin) -> Schema:
        left, right = self._visit_inputs(join)
        return left if join.left else right

    def visit_anti_join(self, join: AntiJoin) -> Schema:
        left, _ = self._visit_inputs(join)
        return left

    def visit_union(self, union: Union) -> Schema:
        return self._set_operation(union)

    def visit_intersect(self, intersect: Intersect) -> Schema:
        return self._set_operation(intersect)

    def visit_difference(self, difference: Difference) -> Schema:
        return self._set_operation(difference)

    def visit_division(self, division: Division) -> Schema:
        left, right = self._visit_inputs(division)
        divisor_names = set(right.names())
        left_names = set(left.names())
        if not divisor_names < left_names:
            raise TranslationError(messages.DIVISION_SCHEMA_INVALID, {"left": str(left), "right": str(right)},
                                   division.code_info)
        return Schema(col for col in left if col.name not in divisor_names)

    def _visit_inputs(self, node: _BinaryNode) -> tuple[Schema, Schema]:
        return node.left_input.accept_visitor(self), node.right_input.accept_visitor(self)

    def _conditional_join(self, join: _ConditionalJoin) -> Schema:
        left, right = self._visit_inputs(join)
        match join.condition:
            case ThetaJoinCondition(expression):
                combined = left.concat(right, code_info=join.code_info)
                self._resolve_expression(expression, combined, join.code_info)
                return combined
            case NaturalJoinCondition(restrict_to):
                shared = left.shared_names(right)
                join_columns = list(restrict_to) if restrict_to is not None else shared
                for col in join_columns:
                    if col not in shared:
                        raise TranslationError(messages.NATURAL_JOIN_COLUMN_MISSING, {"column": col}, join.code_info)
                remaining = Schema(col for col in right if col.name not in join_columns)
                return left.concat(remaining, code_info=join.code_info)
            case _:
                raise InvariantViolationError(f"Unknown join condition: {join.condition}")

    def _set_operation(self, node: _BinaryNode) -> Schema:
        left, right = self._visit_inputs(node)
        if not left.is_unifiable(right):
            raise TranslationError(messages.SCHEMAS_NOT_UNIFIABLE, {"left": str(left), "right": str(right)},
                                   node.code_info)
        return left

    def _resolve_expression(self, expression: ValueExpr, schema: Schema, code_info: Optional[CodeInfo]) -> str:
        """Ensures that all columns of the expression exist and provides the result type of the expression."""
        for expr in expression.dfs_walk():
            if isinstance(expr, ValueExprColumnValue):
                schema.index_of(expr.column, code_info=expr.code_info or code_info)
        if isinstance(expression, ValueExprColumnValue):
            return schema.resolve(expression.column).type
        return expression.datatype


__all__ = [
    "NaturalJoinCondition", "ThetaJoinCondition", "JoinCondition",
    "ProjectionColumn", "AggregateFunction", "ColumnRenaming",
    "RANode", "Relation", "Selection", "Projection", "OrderBy", "GroupBy", "RenameColumns", "RenameRelation",
    "CrossJoin", "InnerJoin", "LeftOuterJoin", "RightOuterJoin", "FullOuterJoin", "SemiJoin", "AntiJoin",
    "Union", "Intersect", "Difference", "Division",
    "RelNodeVisitor",
]
