from __future__ import annotations

import copy
import dataclasses
from collections.abc import Mapping
from typing import Any, Optional, TypeVar

from . import messages
from .util.jsonize import jsondict

VisitorResult = TypeVar("VisitorResult")
"""Result of visitor invocations."""

ColumnName = str | int
"""Columns are either referenced by their name, or by their (1-based) position in the schema of a relation."""

DataType = str
"""The datatype of a value expression or a schema column, e.g. *string*, *number*, *boolean*, *date* or *null*."""

SUPPORTED_DATATYPES = frozenset({"string", "number", "boolean", "date", "null"})
"""All datatypes that value expressions can be translated for. *null* is used for expressions of unknown type."""


@dataclasses.dataclass(frozen=True)
class SourceLocation:
    """A single point in the source text of a query.

    Attributes
    ----------
    offset : int
        The character offset from the start of the source text (0-based)
    line : int
        The line number (1-based)
    column : int
        The column within the line (1-based)
    """
    offset: int
    line: int
    column: int

    def __json__(self) -> jsondict:
        return dataclasses.asdict(self)

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclasses.dataclass(frozen=True)
class CodeInfo:
    """The source position record that the parser attaches to each syntax node.

    Attributes
    ----------
    text : str
        The source text that was parsed into the syntax node
    start : SourceLocation
        Where the text starts
    end : SourceLocation
        Where the text ends
    """
    text: str
    start: SourceLocation
    end: SourceLocation

    @staticmethod
    def of_text(text: str, *, line: int = 1, column: int = 1, offset: int = 0) -> CodeInfo:
        """Creates a code info for a single-line text that starts at a specific position."""
        start = SourceLocation(offset, line, column)
        end = SourceLocation(offset + len(text), line, column + len(text))
        return CodeInfo(text, start, end)

    def __json__(self) -> jsondict:
        return {"text": self.text, "start": self.start.__json__(), "end": self.end.__json__()}

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


class Column:
    """A column reference as it is used in the operator tree.

    Each column consists of the column name and an optional relation alias that qualifies the column. Numeric names are used
    to refer to a column by its position in the schema (starting at 1). The special name ``*`` denotes all columns of
    the (optionally qualified) relation.

    Columns are designed as immutable data objects.

    Parameters
    ----------
    name : ColumnName
        The name or the position of the column. Cannot be empty.
    rel_alias : Optional[str], optional
        The relation that provides the column. Can be *None* if the column is not qualified.

    Raises
    ------
    ValueError
        If the name is empty (or *None*)
    """

    def __init__(self, name: ColumnName, rel_alias: Optional[str] = None) -> None:
        if name is None or name == "":
            raise ValueError("Column name is required")
        self._name = name
        self._rel_alias = rel_alias if rel_alias else None
        self._hash_val = hash((self._name, self._rel_alias))

    __match_args__ = ("name", "rel_alias")

    @property
    def name(self) -> ColumnName:
        """Get the name of this column. This is guaranteed to be set and will never be empty.

        Returns
        -------
        ColumnName
            The name, or the 1-based position for index-based references
        """
        return self._name

    @property
    def rel_alias(self) -> Optional[str]:
        """Get the relation alias that qualifies this column, if specified.

        Returns
        -------
        Optional[str]
            The alias, or *None* for unqualified columns
        """
        return self._rel_alias

    def is_wildcard(self) -> bool:
        """Checks, whether this column refers to all columns of a relation (i.e. ``*`` or ``R.*``)."""
        return self._name == "*"

    def is_index(self) -> bool:
        """Checks, whether this column references a column by its position rather than by its name."""
        return isinstance(self._name, int)

    def __json__(self) -> jsondict:
        return {"name": self._name, "relAlias": self._rel_alias}

    def __hash__(self) -> int:
        return self._hash_val

    def __eq__(self, other: object) -> bool:
        return isinstance(other, type(self)) and self._name == other._name and self._rel_alias == other._rel_alias

    def __repr__(self) -> str:
        return f"Column(name={self._name!r}, rel_alias={self._rel_alias!r})"

    def __str__(self) -> str:
        name = f"[{self._name}]" if self.is_index() else str(self._name)
        return f"{self._rel_alias}.{name}" if self._rel_alias else name


@dataclasses.dataclass(frozen=True)
class Diagnostic:
    """An advisory warning that is attached to a node of the operator tree.

    Diagnostics never change the shape of the tree. They are surfaced to the user by a renderer, which also takes care of
    resolving the message key to a (localized) text.

    Attributes
    ----------
    message_key : str
        Identifies the message, e.g. *db.messages.translate.warning-distinct-missing*
    code_info : Optional[CodeInfo]
        The part of the query that caused the warning
    params : Mapping[str, Any]
        Substitution parameters of the message
    """
    message_key: str
    code_info: Optional[CodeInfo] = None
    params: Mapping[str, Any] = dataclasses.field(default_factory=dict)

    def message(self) -> str:
        """Resolves the diagnostic to a human-readable text using the default message catalog."""
        return messages.resolve(self.message_key, self.params)

    def __json__(self) -> jsondict:
        return {"messageKey": self.message_key, "params": dict(self.params), "codeInfo": self.code_info}


@dataclasses.dataclass
class NodeHeader:
    """Annotations that are shared by all nodes of the operator tree.

    Each node embeds exactly one header. The translators fill the header after the node has been constructed, using one
    shared annotation step. Apart from appending warnings, the header is not modified afterwards.

    Attributes
    ----------
    code_info : Optional[CodeInfo]
        The source position of the syntax node that produced the tree node
    metadata : dict[str, Any]
        Arbitrary key/value pairs. Metadata declared in the syntax tree is copied verbatim.
    warnings : list[Diagnostic]
        Advisory warnings, in the order in which they were raised
    wrapped_in_parentheses : bool
        Whether the source expression was wrapped in parentheses. This is purely for display purposes.
    """
    code_info: Optional[CodeInfo] = None
    metadata: dict[str, Any] = dataclasses.field(default_factory=dict)
    warnings: list[Diagnostic] = dataclasses.field(default_factory=list)
    wrapped_in_parentheses: bool = False

    def copy(self) -> NodeHeader:
        """Creates an independent copy of the header. Metadata values are copied deeply."""
        return NodeHeader(self.code_info, copy.deepcopy(self.metadata), list(self.warnings), self.wrapped_in_parentheses)

    def __json__(self) -> jsondict:
        return {"codeInfo": self.code_info, "metaData": self.metadata, "warnings": self.warnings,
                "wrappedInParentheses": self.wrapped_in_parentheses}
