"""Tests for the error taxonomy."""

import pytest

from liondine.errors import (
    CacheUnavailable,
    InsufficientContent,
    InvalidCategory,
    MenuServiceError,
    SchemaInvalid,
    StructuringFailed,
    UpstreamFetchFailed,
)


@pytest.mark.parametrize(
    "cls,kind,retryable",
    [
        (InvalidCategory, "invalid_category", False),
        (UpstreamFetchFailed, "upstream_fetch_failed", True),
        (InsufficientContent, "insufficient_content", True),
        (StructuringFailed, "structuring_failed", True),
        (SchemaInvalid, "schema_invalid", True),
        (CacheUnavailable, "cache_unavailable", True),
    ],
)
def test_kinds(cls, kind, retryable):
    error = cls("boom")
    assert isinstance(error, MenuServiceError)
    assert error.kind == kind
    assert error.retryable is retryable


def test_to_dict():
    error = InvalidCategory("Invalid meal type 'brunch'")
    assert error.to_dict() == {
        "error": "invalid_category",
        "message": "Invalid meal type 'brunch'",
        "retryable": False,
    }
    assert str(error) == "Invalid meal type 'brunch'"
