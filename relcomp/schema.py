"""Schemas describe the columns of relations and of intermediate results in the operator tree.

The schema of a node in the operator tree is derived from the schemas of its inputs. The derivation is used by the
structural self-check of the operator tree: it surfaces conflicts such as two unaliased references to the same relation in a
cross product before any column is referenced ambiguously. All conflicts are reported as user-facing `TranslationError`s,
since they are caused by the query rather than by relcomp.
"""
from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Iterator, Sequence
from typing import Optional

from . import messages
from ._core import CodeInfo, Column, ColumnName, DataType
from .errors import TranslationError
from .util.jsonize import jsondict


@dataclasses.dataclass(frozen=True)
class SchemaColumn:
    """A single column of a schema.

    Attributes
    ----------
    name : ColumnName
        The name of the column
    rel_alias : Optional[str]
        The relation that the column belongs to. Can be *None*, e.g. for aggregated columns.
    type : DataType
        The type of the column values
    """
    name: ColumnName
    rel_alias: Optional[str]
    type: DataType = "null"

    def matches(self, column: Column) -> bool:
        """Checks, whether a (possibly unqualified) column reference refers to this column."""
        if column.rel_alias is not None and column.rel_alias != self.rel_alias:
            return False
        return column.name == self.name

    def renamed(self, name: ColumnName) -> SchemaColumn:
        return dataclasses.replace(self, name=name)

    def with_rel_alias(self, rel_alias: Optional[str]) -> SchemaColumn:
        return dataclasses.replace(self, rel_alias=rel_alias)

    def __json__(self) -> jsondict:
        return {"name": self.name, "relAlias": self.rel_alias, "type": self.type}

    def __str__(self) -> str:
        return f"{self.rel_alias}.{self.name}" if self.rel_alias else str(self.name)


class Schema:
    """An ordered collection of columns.

    Schemas are treated as immutable values once they have been constructed. All transformations produce new schema
    instances.

    Parameters
    ----------
    columns : Iterable[SchemaColumn], optional
        The columns of the schema, in order
    """

    def __init__(self, columns: Iterable[SchemaColumn] = ()) -> None:
        self._columns: list[SchemaColumn] = list(columns)

    @property
    def columns(self) -> Sequence[SchemaColumn]:
        return tuple(self._columns)

    def add_column(self, name: ColumnName, rel_alias: Optional[str], type: DataType = "null") -> None:
        """Appends a new column. This should only be used while the schema is being constructed."""
        self._columns.append(SchemaColumn(name, rel_alias, type))

    def names(self) -> list[ColumnName]:
        return [col.name for col in self._columns]

    def copy(self) -> Schema:
        return Schema(self._columns)

    def index_of(self, column: Column, *, code_info: Optional[CodeInfo] = None) -> int:
        """Determines the (0-based) position of the column that a reference refers to.

        Numeric column names are interpreted as 1-based positions.

        Raises
        ------
        TranslationError
            If no column or more than one column matches the reference
        """
        if column.is_index():
            if not 1 <= column.name <= len(self._columns):
                raise TranslationError(messages.COLUMN_INDEX_OUT_OF_RANGE,
                                       {"index": column.name, "length": len(self._columns)}, code_info)
            return column.name - 1

        candidates = [idx for idx, col in enumerate(self._columns) if col.matches(column)]
        if not candidates:
            raise TranslationError(messages.COLUMN_NOT_FOUND, {"column": str(column), "schema": str(self)}, code_info)
        if len(candidates) > 1:
            raise TranslationError(messages.COLUMN_AMBIGUOUS, {"column": str(column), "schema": str(self)}, code_info)
        return candidates[0]

    def resolve(self, column: Column, *, code_info: Optional[CodeInfo] = None) -> SchemaColumn:
        """Provides the schema column that a reference refers to. See `index_of` for details."""
        return self._columns[self.index_of(column, code_info=code_info)]

    def select_all(self, rel_alias: Optional[str] = None, *, code_info: Optional[CodeInfo] = None) -> list[SchemaColumn]:
        """Provides all columns (for ``*``) or all columns of a specific relation (for ``R.*``)."""
        if rel_alias is None:
            return list(self._columns)
        selected = [col for col in self._columns if col.rel_alias == rel_alias]
        if not selected:
            raise TranslationError(messages.COLUMN_NOT_FOUND, {"column": f"{rel_alias}.*", "schema": str(self)},
                                   code_info)
        return selected

    def with_rel_alias(self, rel_alias: str) -> Schema:
        """Provides a new schema where all columns belong to the given relation."""
        return Schema(col.with_rel_alias(rel_alias) for col in self._columns)

    def assert_unique(self, *, code_info: Optional[CodeInfo] = None) -> None:
        """Ensures that no (qualified) column is contained more than once.

        Raises
        ------
        TranslationError
            If a duplicate column is found
        """
        seen: set[tuple[Optional[str], ColumnName]] = set()
        for col in self._columns:
            key = (col.rel_alias, col.name)
            if key in seen:
                raise TranslationError(messages.COLUMN_NOT_UNIQUE, {"column": str(col), "schema": str(self)}, code_info)
            seen.add(key)

    def concat(self, other: Schema, *, code_info: Optional[CodeInfo] = None) -> Schema:
        """Provides a new schema that contains the columns of this schema, followed by the columns of the `other` schema.

        Raises
        ------
        TranslationError
            If both schemas contain the same qualified column
        """
        combined = Schema(self._columns + other._columns)
        combined.assert_unique(code_info=code_info)
        return combined

    def shared_names(self, other: Schema) -> list[ColumnName]:
        """Provides the names of all columns that are contained in both schemas, in the order of this schema."""
        other_names = set(other.names())
        shared: list[ColumnName] = []
        for name in self.names():
            if name in other_names and name not in shared:
                shared.append(name)
        return shared

    def is_unifiable(self, other: Schema) -> bool:
        """Checks, whether two schemas can be combined by a set operation.

        This is the case if both have the same number of columns and the columns have compatible types at each position.
        Columns of unknown type (*null*) are compatible with all other types.
        """
        if len(self) != len(other):
            return False
        return all(a.type == b.type or "null" in (a.type, b.type) for a, b in zip(self._columns, other._columns))

    def __len__(self) -> int:
        return len(self._columns)

    def __iter__(self) -> Iterator[SchemaColumn]:
        return iter(self._columns)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, type(self)) and self._columns == other._columns

    def __hash__(self) -> int:
        return hash(tuple(self._columns))

    def __json__(self) -> jsondict:
        return {"columns": self._columns}

    def __repr__(self) -> str:
        return f"Schema({self._columns!r})"

    def __str__(self) -> str:
        return "[" + ", ".join(str(col) for col in self._columns) + "]"
