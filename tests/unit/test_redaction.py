from labelq.utils.error_sanitizer import sanitize_error_message
from labelq.utils.redaction import redact, sanitize_for_prompt


def test_redact_is_stable_and_opaque():
    assert redact("boss@co.com") == redact("boss@co.com")
    assert "boss" not in redact("boss@co.com")
    assert redact(None) == "hash:missing"


def test_sanitize_for_prompt_truncates_and_strips_delimiters():
    assert sanitize_for_prompt("a|b<c>{d}", max_length=100) == "abcd"
    assert sanitize_for_prompt("x" * 20, max_length=5) == "xxxxx"
    assert sanitize_for_prompt(None) == ""


def test_sanitize_error_message():
    assert sanitize_error_message("label_id is required", 400) == "label_id is required"
    assert sanitize_error_message("sqlite3.OperationalError: no such table", 400).startswith("Invalid")
    assert sanitize_error_message("anything at all", 500).startswith("An internal error")
