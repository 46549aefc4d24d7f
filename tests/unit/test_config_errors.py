"""Tests for NotionTreeConfig, LimitPolicy and the error hierarchy."""

from __future__ import annotations

import pytest

from notiontree.config import NotionTreeConfig
from notiontree.errors import (
    ErrorCode,
    NotionTreeAuthError,
    NotionTreeConflictError,
    NotionTreeError,
    NotionTreeNetworkError,
    NotionTreeNotFoundError,
    NotionTreePermissionError,
    NotionTreeRateLimitError,
    NotionTreeRetryExhaustedError,
    NotionTreeStructureError,
    NotionTreeValidationError,
)
from notiontree.limits import DEFAULT_LIMITS, LimitPolicy


class TestNotionTreeConfig:
    def test_defaults(self):
        cfg = NotionTreeConfig(token="t")
        assert cfg.base_url == "https://api.notion.com/v1"
        assert cfg.limits == DEFAULT_LIMITS
        assert cfg.metrics is None
        assert cfg.debug_dump_payload is False

    def test_repr_masks_token(self):
        text = repr(NotionTreeConfig(token="secret_abcdef1234"))
        assert "secret_abcdef1234" not in text
        assert "...1234" in text

    def test_repr_short_token(self):
        assert "token='****'" in repr(NotionTreeConfig(token="ab"))

    def test_http_localhost_allowed(self):
        NotionTreeConfig(token="t", base_url="http://localhost:8080/v1")

    def test_http_remote_rejected(self):
        with pytest.raises(ValueError, match="insecure HTTP"):
            NotionTreeConfig(token="t", base_url="http://api.example.com")

    @pytest.mark.parametrize(
        "field,value",
        [
            ("retry_max_attempts", 0),
            ("retry_base_delay", -1.0),
            ("retry_max_delay", -1.0),
            ("rate_limit_rps", 0.0),
            ("timeout_seconds", 0.0),
        ],
    )
    def test_invalid_numbers(self, field, value):
        with pytest.raises(ValueError):
            NotionTreeConfig(token="t", **{field: value})


class TestLimitPolicy:
    def test_defaults(self):
        assert DEFAULT_LIMITS.max_slice_count == 100
        assert DEFAULT_LIMITS.max_call_node_total == 999
        assert DEFAULT_LIMITS.max_depth == 2
        assert DEFAULT_LIMITS.max_payload_bytes == 450_000
        assert DEFAULT_LIMITS.call_budget == 899

    def test_frozen(self):
        with pytest.raises(AttributeError):
            DEFAULT_LIMITS.max_depth = 5  # type: ignore[misc]

    @pytest.mark.parametrize(
        "field,value",
        [
            ("max_slice_count", 0),
            ("max_call_node_total", 0),
            ("max_depth", -1),
            ("max_payload_bytes", 0),
            ("required_child_buffer", -1),
        ],
    )
    def test_invalid(self, field, value):
        with pytest.raises(ValueError):
            LimitPolicy(**{field: value})


class TestErrors:
    @pytest.mark.parametrize(
        "cls,code",
        [
            (NotionTreeValidationError, ErrorCode.VALIDATION_ERROR),
            (NotionTreeStructureError, ErrorCode.STRUCTURE_ERROR),
            (NotionTreeAuthError, ErrorCode.AUTH_ERROR),
            (NotionTreePermissionError, ErrorCode.PERMISSION_ERROR),
            (NotionTreeNotFoundError, ErrorCode.NOT_FOUND),
            (NotionTreeConflictError, ErrorCode.CONFLICT),
            (NotionTreeRateLimitError, ErrorCode.RATE_LIMITED),
            (NotionTreeRetryExhaustedError, ErrorCode.RETRY_EXHAUSTED),
            (NotionTreeNetworkError, ErrorCode.NETWORK_ERROR),
        ],
    )
    def test_codes(self, cls, code):
        err = cls("msg", context={"k": "v"})
        assert isinstance(err, NotionTreeError)
        assert err.code == code
        assert err.context == {"k": "v"}
        assert str(err) == "msg"

    def test_cause_chained(self):
        cause = OSError("disk")
        err = NotionTreeNetworkError("wrapped", cause=cause)
        assert err.cause is cause
        assert err.__cause__ is cause

    def test_repr(self):
        err = NotionTreeStructureError("bad", context={"reason": "empty_table"})
        assert "STRUCTURE_ERROR" in repr(err)
        assert "empty_table" in repr(err)

    def test_error_code_is_str(self):
        assert ErrorCode.PROTOCOL_MISMATCH == "PROTOCOL_MISMATCH"
