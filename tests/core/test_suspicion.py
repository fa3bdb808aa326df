"""Suspicion Analyzer — indicators, weighted score and risk level.

Tests cover:
    - Each indicator in isolation (tracking, unusual params, short username, unusual format)
    - Score is the weighted sum; level thresholds at 25 and 50
    - Unparsable input flags only unusual format
    - Policy overrides change weights and thresholds
    - security_recommendations has one hint per raised indicator
"""

import pytest

from linkcard.core.domain_types import RiskLevel
from linkcard.core.suspicion import (
    DEFAULT_POLICY, SuspicionPolicy, analyze, security_recommendations,
)


def test_clean_canonical_url_scores_zero():
    profile = analyze("https://linkedin.com/in/john-doe")
    assert profile.risk_score == 0
    assert profile.risk_level == RiskLevel.LOW
    assert profile.is_suspicious is False


@pytest.mark.parametrize("raw", ["", "not a url", "linkedin.com/in/john-doe"])
def test_unparsable_input_flags_only_unusual_format(raw):
    profile = analyze(raw)
    assert profile.has_unusual_format is True
    assert profile.has_tracking_params is False
    assert profile.has_unusual_parameters is False
    assert profile.has_short_username is False
    assert profile.risk_score == 35
    assert profile.risk_level == RiskLevel.MEDIUM


# ─── Individual indicators ───────────────────────────────────────

def test_tracking_parameter_alone():
    profile = analyze("https://linkedin.com/in/john-doe?gclid=abc")
    assert profile.has_tracking_params is True
    assert profile.has_unusual_parameters is False
    assert profile.risk_score == 20
    assert profile.risk_level == RiskLevel.LOW


def test_more_than_two_parameters_is_unusual():
    profile = analyze("https://linkedin.com/in/john-doe?a=1&b=2&c=3")
    assert profile.has_unusual_parameters is True
    assert profile.has_tracking_params is False
    assert profile.risk_score == 30


def test_suspicious_parameter_name_pattern_is_case_insensitive():
    profile = analyze("https://linkedin.com/in/john-doe?MyTracker=1")
    assert profile.has_unusual_parameters is True


def test_three_character_username_is_short():
    profile = analyze("https://linkedin.com/in/abc")
    assert profile.has_short_username is True
    assert profile.risk_score == 25
    assert profile.risk_level == RiskLevel.MEDIUM


@pytest.mark.parametrize("url", [
    "https://linkedin.com/in/john-doe/details",
    "https://linkedin.com/in/john-doe#top",
    "https://linkedin.com:8443/in/john-doe",
    "ftp://linkedin.com/in/john-doe",
    "https://linkedin.com/in/12345678",
    "https://linkedin.com/in/john--doe",
    "https://linkedin.com/in/john__doe",
])
def test_unusual_format_variants(url):
    profile = analyze(url)
    assert profile.has_unusual_format is True
    assert profile.risk_score >= 35


def test_all_indicators_add_up_to_high():
    profile = analyze("https://linkedin.com/in/abc?utm_source=x&ref=y&z=1#top")
    assert profile.risk_score == 20 + 30 + 25 + 35
    assert profile.risk_level == RiskLevel.HIGH


# ─── Policy ──────────────────────────────────────────────────────

@pytest.mark.parametrize("score, level", [
    (0, RiskLevel.LOW),
    (24, RiskLevel.LOW),
    (25, RiskLevel.MEDIUM),
    (49, RiskLevel.MEDIUM),
    (50, RiskLevel.HIGH),
    (110, RiskLevel.HIGH),
])
def test_default_level_thresholds(score, level):
    assert DEFAULT_POLICY.level_for(score) == level


def test_policy_override_changes_scoring():
    strict = SuspicionPolicy(tracking_weight=60, high_threshold=60)
    profile = analyze("https://linkedin.com/in/john-doe?fbclid=1", strict)
    assert profile.risk_score == 60
    assert profile.risk_level == RiskLevel.HIGH


def test_to_dict_uses_camel_case():
    data = analyze("https://linkedin.com/in/abc").to_dict()
    assert data["hasShortUsername"] is True
    assert data["riskLevel"] == "medium"
    assert data["isSuspicious"] is True


# ─── Recommendations ─────────────────────────────────────────────

def test_clean_profile_gets_single_reassurance():
    profile = analyze("https://linkedin.com/in/john-doe")
    assert security_recommendations(profile) == ["URL appears to be clean and safe"]


def test_one_recommendation_per_indicator():
    profile = analyze("https://linkedin.com/in/abc?utm_source=x&ref=y&z=1#top")
    assert len(security_recommendations(profile)) == 4
