"""Input Normalizer — raw profile references to canonical identifiers.

Tests cover:
    - Bare handles get the canonical base prepended
    - Host variants (http, www, any case, no scheme) rewritten to https://linkedin.com
    - Tracking parameters stripped, other parameters kept
    - Sub-paths, fragments and trailing slashes dropped
    - Idempotency on canonical output
    - Structured errors for empty input, bad charset, bad scheme/host/path
    - normalize_with_analysis and batch_normalize shapes
"""

import pytest

from linkcard.core.domain_types import Err, Ok, RiskLevel
from linkcard.core.normalize_input import (
    batch_normalize, extract_username, normalize, normalize_with_analysis,
    strip_tracking_parameters,
)
from linkcard.core.validation import check_canonical_url


# ─── normalize: accepted inputs ──────────────────────────────────

@pytest.mark.parametrize("raw", [
    "john-doe",
    "  john-doe  ",
    "https://linkedin.com/in/john-doe",
    "https://www.linkedin.com/in/john-doe/",
    "http://linkedin.com/in/john-doe",
    "HTTPS://WWW.LINKEDIN.COM/in/john-doe",
    "linkedin.com/in/john-doe",
    "www.linkedin.com/in/john-doe",
    "https://www.linkedin.com/in/john-doe/details/experience/",
    "https://linkedin.com/in/john-doe#about",
    "https://linkedin.com/in/john-doe?utm_source=share&utm_medium=ios",
])
def test_normalize_produces_canonical_url(raw):
    result = normalize(raw)
    assert isinstance(result, Ok)
    assert result.value == "https://linkedin.com/in/john-doe"


def test_normalize_keeps_non_tracking_parameters_in_order():
    result = normalize(
        "https://www.linkedin.com/in/john-doe?lang=en&utm_campaign=x&tab=posts",
    )
    assert result.value == "https://linkedin.com/in/john-doe?lang=en&tab=posts"


def test_normalize_accepts_underscores_and_digits():
    assert normalize("jane_smith_42").value == "https://linkedin.com/in/jane_smith_42"


def test_normalize_is_idempotent():
    for raw in ("john-doe", "http://www.linkedin.com/in/john-doe/?lang=en&ref=x"):
        once = normalize(raw).value
        assert normalize(once).value == once


@pytest.mark.parametrize("canonical", [
    "https://linkedin.com/in/jane-doe?tab",
    "https://linkedin.com/in/jane-doe?q=a%20b",
    "https://linkedin.com/in/jane-doe?q=a+b&lang=en",
])
def test_canonical_identifier_with_query_is_unchanged(canonical):
    assert check_canonical_url(canonical) == []
    assert normalize(canonical).value == canonical


def test_encoded_tracking_name_is_still_stripped():
    assert normalize("https://linkedin.com/in/jane-doe?utm%5Fsource=x&tab").value == (
        "https://linkedin.com/in/jane-doe?tab"
    )


# ─── normalize: rejected inputs ──────────────────────────────────

@pytest.mark.parametrize("raw", ["", "   ", "///"])
def test_normalize_rejects_empty_input(raw):
    result = normalize(raw)
    assert isinstance(result, Err)
    assert result.error.code == "required"
    assert result.error.message == "LinkedIn profile is required"


@pytest.mark.parametrize("raw, code", [
    ("ab", "too_short"),
    ("a" * 101, "too_long"),
    ("john doe", "invalid_characters"),
    ("john.doe", "invalid_url"),
    ("http://example.com/in/john-doe", "invalid_scheme"),
    ("https://example.com/in/john-doe", "invalid_host"),
    ("https://linkedin.com/company/acme", "invalid_path"),
    ("https://linkedin.com/in", "invalid_path"),
    ("https://linkedin.com/in/jo", "too_short"),
    ("https://linkedin.com/in/john$doe", "invalid_characters"),
    ("ftp://linkedin.com/in/john-doe", "invalid_scheme"),
])
def test_normalize_rejects_with_structured_code(raw, code):
    result = normalize(raw)
    assert isinstance(result, Err)
    assert result.error.code == code
    assert result.error.message


def test_normalize_error_carries_field_errors():
    result = normalize("ab")
    assert result.error.path == ("input",)
    assert result.error.field_errors[0].code == "too_short"


# ─── helpers ─────────────────────────────────────────────────────

def test_strip_tracking_parameters_removes_only_listed_names():
    url = "https://linkedin.com/in/john-doe?fbclid=1&gclid=2&refId=3&keep=4"
    assert strip_tracking_parameters(url) == "https://linkedin.com/in/john-doe?keep=4"


def test_strip_tracking_parameters_returns_unparsable_input_unchanged():
    assert strip_tracking_parameters("not a url") == "not a url"


def test_extract_username_accepts_www_host():
    assert extract_username("https://www.linkedin.com/in/john-doe/") == "john-doe"


def test_extract_username_returns_none_for_other_hosts():
    assert extract_username("https://example.com/in/john-doe") is None
    assert extract_username("https://linkedin.com/company/acme") is None


# ─── normalize_with_analysis ─────────────────────────────────────

def test_analysis_reports_transformation_and_clean_profile():
    result = normalize_with_analysis("john-doe")
    assert isinstance(result, Ok)
    data = result.value
    assert data.username == "john-doe"
    assert data.was_transformed is True
    assert data.suspicion.is_suspicious is False
    assert data.suspicion.risk_level == RiskLevel.LOW


def test_analysis_of_canonical_input_is_not_transformed():
    result = normalize_with_analysis("https://linkedin.com/in/john-doe")
    assert result.value.was_transformed is False


def test_analysis_sees_tracking_parameters_before_they_are_stripped():
    result = normalize_with_analysis(
        "https://www.linkedin.com/in/john-doe?utm_source=share",
    )
    data = result.value
    assert data.normalized_url == "https://linkedin.com/in/john-doe"
    assert data.suspicion.has_tracking_params is True
    assert data.suspicion.has_unusual_parameters is True
    assert data.suspicion.risk_score == 50
    assert data.suspicion.risk_level == RiskLevel.HIGH


def test_analysis_to_dict_uses_camel_case():
    data = normalize_with_analysis("john-doe").value.to_dict()
    assert data["normalizedUrl"] == "https://linkedin.com/in/john-doe"
    assert data["originalInput"] == "john-doe"
    assert data["isSuspicious"] is False
    assert data["suspicion"]["riskLevel"] == "low"


def test_analysis_propagates_normalization_error():
    result = normalize_with_analysis("https://example.com/in/john-doe")
    assert isinstance(result, Err)
    assert result.error.code == "invalid_host"


# ─── batch_normalize ─────────────────────────────────────────────

def test_batch_normalize_reports_each_item_and_summary():
    batch = batch_normalize([
        "john-doe", "", "https://example.com/in/x", "abc",
    ])
    results = batch["results"]
    assert [r["success"] for r in results] == [True, False, False, True]
    assert results[1]["error"]["code"] == "required"
    assert batch["summary"] == {
        "total": 4, "successful": 2, "failed": 2, "suspicious": 1,
    }


def test_batch_normalize_truncates_echoed_input():
    batch = batch_normalize(["a" * 150])
    assert len(batch["results"][0]["input"]) == 100
