"""Contains the errors that can be raised while translating syntax trees into operator trees.

relcomp distinguishes between two kinds of errors:

- user-facing errors, represented by `TranslationError`. These are caused by faulty queries, e.g. a reference to a relation
  that does not exist. They carry a message key, the message parameters and the source position of the offending part of
  the query, so that a renderer can show a localized message at the right spot.
- internal-consistency failures, represented by the `LogicError` hierarchy. These indicate a bug in relcomp or in the
  parser that produced the syntax tree, e.g. a syntax node without source position. They are not meant to be caught and
  handled, only to be reported and fixed.

Neither kind is ever recovered from internally: once raised, the entire translation is aborted.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from . import messages
from ._core import CodeInfo


class LogicError(RuntimeError):
    """Indicates a defect in relcomp, or in the parser that produced the syntax tree.

    Faulty queries never cause a `LogicError`. They are reported as `TranslationError`s instead.
    """


class StateError(RuntimeError):
    """Indicates that an object of the operator tree is not ready for an operation, e.g. a relation without schema."""


class InvariantViolationError(LogicError):
    """Indicates that a contract of the translators was violated, e.g. a syntax node without source position.

    Parameters
    ----------
    msg : str
        Describes the violation
    code_info : Optional[CodeInfo], optional
        The closest known source position, if any
    """

    def __init__(self, msg: str, code_info: Optional[CodeInfo] = None) -> None:
        super().__init__(msg if code_info is None else f"{msg} (at {code_info})")
        self.code_info = code_info


class TranslationError(RuntimeError):
    """Indicates that a query cannot be translated due to a problem that the user has to fix.

    Parameters
    ----------
    message_key : str
        Identifies the error message
    params : Optional[Mapping[str, Any]], optional
        Substitution parameters of the message
    code_info : Optional[CodeInfo], optional
        The part of the query that caused the error
    """

    def __init__(self, message_key: str, params: Optional[Mapping[str, Any]] = None,
                 code_info: Optional[CodeInfo] = None) -> None:
        self.message_key = message_key
        self.params: dict[str, Any] = dict(params) if params else {}
        self.code_info = code_info
        super().__init__(messages.resolve(message_key, self.params))

    def message(self, resolver: Optional[messages.MessageResolver] = None) -> str:
        """Provides the display text of the error, optionally using a custom resolution strategy."""
        return messages.resolve(self.message_key, self.params, resolver=resolver)

    def __json__(self) -> dict:
        return {"messageKey": self.message_key, "params": self.params, "codeInfo": self.code_info}


class UnsupportedConstructError(LogicError):
    """Indicates that a syntax tree contains a construct that the translators do not implement.

    Since the parser should only produce constructs that are supported, this is a defect rather than a user error.

    Parameters
    ----------
    construct : str
        A description of the construct, e.g. the name of an unknown datatype
    """

    def __init__(self, construct: str) -> None:
        super().__init__(f"Not implemented: {construct}")
        self.construct = construct


__all__ = ["TranslationError", "UnsupportedConstructError", "LogicError", "StateError", "InvariantViolationError"]
