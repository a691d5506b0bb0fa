"""Message keys of all diagnostics that relcomp can produce, along with a default English catalog.

The translators never compute display texts themselves. Instead, errors and warnings carry a message key along with named
substitution parameters (e.g. ``{"name": "students"}``). Turning these into (localized) texts is the responsibility of the
component that presents the diagnostics to the user. The `resolve` function provides a simple default resolution that is used
for the string representation of errors and for tests. Renderers with their own translation infrastructure can pass a
custom `MessageResolver` instead.
"""
from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Optional

MessageResolver = Callable[[str, Mapping[str, Any]], str]
"""A function that turns a message key and its parameters into a display text."""

RELATION_NOT_FOUND = "db.messages.translate.error-relation-not-found"
DISTINCT_MISSING = "db.messages.translate.warning-distinct-missing"
IGNORED_ALL_ON_SET_OPERATORS = "db.messages.translate.warning-ignored-all-on-set-operators"

COLUMN_NOT_FOUND = "db.messages.exec.error-column-not-found-name"
COLUMN_INDEX_OUT_OF_RANGE = "db.messages.exec.error-column-index-out-of-range"
COLUMN_AMBIGUOUS = "db.messages.exec.error-column-ambiguous"
COLUMN_NOT_UNIQUE = "db.messages.exec.error-column-not-unique"
SCHEMAS_NOT_UNIFIABLE = "db.messages.exec.error-schemas-not-unifiable"
NATURAL_JOIN_COLUMN_MISSING = "db.messages.exec.error-natural-join-column-missing"
DIVISION_SCHEMA_INVALID = "db.messages.exec.error-division-schema-invalid"

DEFAULT_MESSAGES: dict[str, str] = {
    RELATION_NOT_FOUND: 'cannot find relation "{name}"',
    DISTINCT_MISSING: "DISTINCT is missing: the result is evaluated with bag semantics and may contain duplicates",
    IGNORED_ALL_ON_SET_OPERATORS: "ALL is ignored for set operators: the result is computed with set semantics",
    COLUMN_NOT_FOUND: 'column "{column}" not found in {schema}',
    COLUMN_INDEX_OUT_OF_RANGE: "column index [{index}] is out of range, the schema has {length} columns",
    COLUMN_AMBIGUOUS: 'column "{column}" is ambiguous in {schema}',
    COLUMN_NOT_UNIQUE: 'column "{column}" is contained more than once in {schema}',
    SCHEMAS_NOT_UNIFIABLE: "the schemas {left} and {right} are not unifiable",
    NATURAL_JOIN_COLUMN_MISSING: 'column "{column}" used in the join condition is not part of both relations',
    DIVISION_SCHEMA_INVALID: "the schema {right} of the divisor must be a proper subset of the schema {left}",
}
"""English texts for all message keys. Parameters use `str.format` syntax."""


def resolve(message_key: str, params: Optional[Mapping[str, Any]] = None, *,
            resolver: Optional[MessageResolver] = None) -> str:
    """Turns a message key into a display text.

    Parameters
    ----------
    message_key : str
        The message to resolve
    params : Optional[Mapping[str, Any]], optional
        The substitution parameters of the message
    resolver : Optional[MessageResolver], optional
        A custom resolution strategy. If omitted, the `DEFAULT_MESSAGES` catalog is used.

    Returns
    -------
    str
        The display text. Unknown message keys resolve to the key itself, followed by the parameters.
    """
    params = dict(params) if params else {}
    if resolver is not None:
        return resolver(message_key, params)

    template = DEFAULT_MESSAGES.get(message_key)
    if template is None:
        return f"{message_key} {params}" if params else message_key
    try:
        return template.format(**params)
    except (KeyError, IndexError):
        return f"{template} {params}"
