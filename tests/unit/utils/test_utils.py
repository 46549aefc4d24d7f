"""Tests for utility functions.

Tests for: redact.
"""

from notiontree.utils.redact import MAX_DUMP_STRING, redact

# =========================================================================
# redact tests
# =========================================================================

class TestRedact:
    def test_sensitive_keys_masked(self):
        result = redact({"Authorization": "Bearer abc", "api_key": 123})
        assert result["Authorization"] == "Bearer <redacted>"
        assert result["api_key"] == "<redacted>"

    def test_token_scrubbed_everywhere(self):
        token = "ntn_secret_value_9876"
        payload = {"nested": [{"text": f"see {token}"}]}
        result = redact(payload, token)
        assert token not in str(result)
        assert result["nested"][0]["text"].endswith("...9876>")

    def test_long_strings_summarised(self):
        result = redact({"content": "a" * (MAX_DUMP_STRING + 1)})
        assert result["content"] == f"<text:{MAX_DUMP_STRING + 1}_chars>"

    def test_short_strings_kept(self):
        assert redact({"content": "hello"}) == {"content": "hello"}

    def test_input_not_mutated(self):
        payload = {"token": "abc", "children": [{"x": "y"}]}
        redact(payload, "abc")
        assert payload == {"token": "abc", "children": [{"x": "y"}]}

    def test_non_string_values_kept(self):
        assert redact({"count": 3, "flag": True, "none": None}) == {
            "count": 3,
            "flag": True,
            "none": None,
        }
