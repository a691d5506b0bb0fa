"""JSON export of operator trees, value expressions, schemas and diagnostics.

Renderers of the operator tree usually do not live in Python. Therefore, every object that relcomp hands out implements a
`__json__` method that provides a JSON-izeable representation of the object (typically a `dict` with camelCase keys). The
`JsonizeEncoder` uses these methods to encode entire trees in one go.

Besides `__json__` objects, the encoder also understands the values that can occur in the rows of relations (dates and
times, as well as sets), and plain dataclasses such as syntax tree nodes. The inverse conversion is not supported, since
JSON does not store any type information.
"""
from __future__ import annotations

import abc
import dataclasses
import datetime
import json
from typing import IO, Any, Protocol, runtime_checkable

jsondict = dict
"""Type alias for a JSON-izeable dictionary."""


@runtime_checkable
class Jsonizable(Protocol):
    """Protocol to indicate that a certain class provides the `__json__` method."""

    @abc.abstractmethod
    def __json__(self) -> jsondict:
        raise NotImplementedError


def _camel_case(name: str) -> str:
    head, *tail = name.rstrip("_").split("_")
    return head + "".join(part.capitalize() for part in tail)


class JsonizeEncoder(json.JSONEncoder):
    """Encoder that falls back to `__json__` for all objects that the default encoder cannot handle.

    Dataclasses without a `__json__` method are encoded field by field, using camelCase names for the fields.
    """

    def default(self, obj: Any) -> Any:
        if isinstance(obj, Jsonizable):
            return obj.__json__()
        if isinstance(obj, (set, frozenset)):
            return list(obj)
        if isinstance(obj, (datetime.date, datetime.time)):
            return obj.isoformat()
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return {_camel_case(field.name): getattr(obj, field.name) for field in dataclasses.fields(obj)}
        return super().default(obj)


def to_json(obj: Any, *args, **kwargs) -> str | None:
    """Encodes an arbitrary object (e.g. the root of an operator tree) as a JSON string.

    All arguments other than the object itself are passed to `json.dumps`. *None* is not encoded at all.
    """
    if obj is None:
        return None
    kwargs.pop("cls", None)
    return json.dumps(obj, *args, cls=JsonizeEncoder, **kwargs)


def to_json_dump(obj: Any, file: IO[str], *args, **kwargs) -> None:
    """Writes the JSON encoding of an arbitrary object to a file. Arguments are passed to `json.dump`."""
    kwargs.pop("cls", None)
    json.dump(obj, file, *args, cls=JsonizeEncoder, **kwargs)
