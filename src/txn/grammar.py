"""
Transaction Line Grammar

Parsers for the two line shapes accepted by the txn command:

    comparison line:   key target operator expected_value
    sub-request line:  method key [range_end | value]

Fields are separated by single spaces. There is no quoting or escaping, so
two consecutive spaces produce an empty field.
"""

import re

from src.txn.exceptions import InvalidInputLine
from src.txn.models import (
    Comparison,
    CompareOperator,
    CompareTarget,
    CreateRevisionCompare,
    DeleteRangeRequest,
    INT64_MAX,
    INT64_MIN,
    ModRevisionCompare,
    PutRequest,
    RangeRequest,
    SubRequest,
    ValueCompare,
    VersionCompare,
)

INVALID_COMPARE = "invalid comparison line"
INVALID_REQUEST = "invalid sub-request line"

FIELD_SEPARATOR = " "

TARGET_TOKENS = {
    "ver": CompareTarget.VERSION,
    "version": CompareTarget.VERSION,
    "c": CompareTarget.CREATE_REVISION,
    "create": CompareTarget.CREATE_REVISION,
    "m": CompareTarget.MOD_REVISION,
    "mod": CompareTarget.MOD_REVISION,
    "val": CompareTarget.VALUE,
    "value": CompareTarget.VALUE,
}

OPERATOR_TOKENS = {
    "g": CompareOperator.GREATER,
    "greater": CompareOperator.GREATER,
    "e": CompareOperator.EQUAL,
    "equal": CompareOperator.EQUAL,
    "l": CompareOperator.LESS,
    "less": CompareOperator.LESS,
}

METHOD_TOKENS = {
    "r": "range",
    "range": "range",
    "p": "put",
    "put": "put",
    "d": "delete_range",
    "deleteRange": "delete_range",
}

_INT64_RE = re.compile(r"[+-]?[0-9]+")


def _encode(field: str) -> bytes:
    # undecodable stdin bytes arrive as lone surrogates; give them back as-is
    return field.encode("utf-8", "surrogateescape")


def parse_int64(text: str) -> int:
    """
    Parse a base-10 signed 64-bit integer.

    Only an optional sign followed by ASCII digits is accepted; whitespace,
    underscores and out-of-range values are rejected with ValueError.
    """
    if not _INT64_RE.fullmatch(text):
        raise ValueError(f"invalid syntax: {text!r}")
    value = int(text)
    if value < INT64_MIN or value > INT64_MAX:
        raise ValueError(f"value out of range: {text!r}")
    return value


def parse_compare(line: str) -> Comparison:
    """
    Parse a comparison line into a Comparison.

    Args:
        line: Raw line without its trailing newline

    Returns:
        One of VersionCompare, CreateRevisionCompare, ModRevisionCompare,
        ValueCompare

    Raises:
        InvalidInputLine: If the line does not match the grammar

    Example:
        >>> parse_compare("foo ver g 3")
        VersionCompare(key=b'foo', operator=<CompareOperator.GREATER: 'GREATER'>, ...)
    """
    parts = line.split(FIELD_SEPARATOR)
    if len(parts) != 4:
        raise InvalidInputLine(line, INVALID_COMPARE,
                               details=f"expected 4 fields, got {len(parts)}")

    key_field, target_field, operator_field, expected = parts

    target = TARGET_TOKENS.get(target_field)
    if target is None:
        raise InvalidInputLine(line, INVALID_COMPARE,
                               details=f"unknown target {target_field!r}")

    number = None
    if target is not CompareTarget.VALUE:
        try:
            number = parse_int64(expected)
        except ValueError as e:
            raise InvalidInputLine(line, INVALID_COMPARE, details=str(e)) from e

    operator = OPERATOR_TOKENS.get(operator_field)
    if operator is None:
        raise InvalidInputLine(line, INVALID_COMPARE,
                               details=f"unknown operator {operator_field!r}")

    key = _encode(key_field)
    if target is CompareTarget.VERSION:
        return VersionCompare(key=key, operator=operator, version=number)
    if target is CompareTarget.CREATE_REVISION:
        return CreateRevisionCompare(key=key, operator=operator, create_revision=number)
    if target is CompareTarget.MOD_REVISION:
        return ModRevisionCompare(key=key, operator=operator, mod_revision=number)
    return ValueCompare(key=key, operator=operator, value=_encode(expected))


def parse_request_op(line: str) -> SubRequest:
    """
    Parse a sub-request line into a RangeRequest, PutRequest or DeleteRangeRequest.

    The optional range end of range/delete lines is only taken when the line
    has exactly three fields. Put requires its value; fields after the third
    are ignored.

    Raises:
        InvalidInputLine: If the line does not match the grammar
    """
    parts = line.split(FIELD_SEPARATOR)
    if len(parts) < 2:
        raise InvalidInputLine(line, INVALID_REQUEST,
                               details=f"expected at least 2 fields, got {len(parts)}")

    method = METHOD_TOKENS.get(parts[0])
    key = _encode(parts[1])

    if method == "range":
        range_end = _encode(parts[2]) if len(parts) == 3 else None
        return RangeRequest(key=key, range_end=range_end)

    if method == "put":
        if len(parts) < 3:
            raise InvalidInputLine(line, INVALID_REQUEST, details="put requires a value")
        return PutRequest(key=key, value=_encode(parts[2]))

    if method == "delete_range":
        range_end = _encode(parts[2]) if len(parts) == 3 else None
        return DeleteRangeRequest(key=key, range_end=range_end)

    raise InvalidInputLine(line, INVALID_REQUEST, details=f"unknown method {parts[0]!r}")
