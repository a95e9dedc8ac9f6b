"""Tests for the error-handling helpers."""

import pytest

from SCHEMA2ERD.utils.error_handling import (
    ERDError,
    ErrorContext,
    ErrorKind,
    create_error_response,
    handle_error,
)


def test_create_error_response_shape():
    context = ErrorContext(stage="share", operation="decode")
    body = create_error_response(ValueError("bad token"), context, kind=ErrorKind.DECODE_ERROR)
    assert body["error"] == "decode_error"
    assert body["message"] == "bad token"
    assert body["stage"] == "share"
    assert "traceback" not in body


def test_empty_message_uses_exception_name():
    body = create_error_response(KeyError(), ErrorContext(stage="api", operation="parse"))
    assert body["error"] == "parse_error"
    assert body["message"] == "KeyError"


def test_traceback_only_on_request():
    try:
        raise RuntimeError("boom")
    except RuntimeError as e:
        body = handle_error(e, ErrorContext(stage="api", operation="parse"), include_traceback=True)
    assert "test_traceback_only_on_request" in body["traceback"]


def test_handle_error_reraise_wraps_in_erd_error():
    context = ErrorContext(stage="parser", operation="parse_schema", line_number=3)
    original = ValueError("unexpected token")
    with pytest.raises(ERDError) as info:
        handle_error(original, context, log_level="debug", reraise=True)
    assert info.value.original_exception is original
    assert info.value.kind == ErrorKind.PARSE_ERROR
    assert str(info.value) == "[parser:parse_schema] unexpected token"
