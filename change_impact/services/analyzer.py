"""
Change Analyzer Service

This module turns a free-text change description into a structured Analysis:
matched taxonomy keywords, affected value streams, risk factors, and the
derived complexity score, estimated delay and confidence.

Matching Rules:
- The description is lowercased once; every check is plain substring
  containment against lowercase phrases. There is no tokenization or word
  boundary handling, so "sme" matches inside "assessment". The scoring constants
  were tuned against this behavior.
- Keyword and risk matches are reported in table order.
- Value streams are evaluated in VALUE_STREAM_PATTERNS order, each at most once.

Scoring Summary:
- complexity = (0.3 + keyword tier + value stream risk + risk severity
  + delay indicators + module count) * ITC phase multiplier, capped at 1.0
- delay = (stream base delay + 0.8 * worst risk delay)
  * (1 + 0.6 * complexity) * phrase multiplier, rounded, floored at 0
- confidence = 0.5 + evidence bonuses, capped at 0.95

The analyzer is a pure function of its input and the static tables in
change_impact.services.taxonomy. It never raises for string input, including
the empty string.
"""

import logging
import math
import re
from typing import List, Optional, Sequence

from change_impact.models.enums import SeverityTier
from change_impact.models.schemas import Analysis, MatchedKeywords, RiskFactor
from change_impact.services.taxonomy import (
    DELAY_INDICATORS,
    DELAY_PHRASE_MULTIPLIERS,
    MODULE_KEYWORDS,
    RISK_KEYWORDS,
    TIER_PRIORITY,
    VALUE_STREAM_PATTERNS,
    VALUE_STREAM_PROFILES,
    DEFAULT_VALUE_STREAM,
    get_itc_multiplier,
    get_keyword_bucket,
    get_value_stream_profile,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Scoring Constants
# =============================================================================

BASE_COMPLEXITY: float = 0.3

# Keyword tier contribution: weight * (1 + per_keyword * count)
KEYWORD_TIER_WEIGHTS = {
    SeverityTier.MAJOR: (0.6, 0.1),
    SeverityTier.SIGNIFICANT: (0.3, 0.1),
    SeverityTier.MINOR: (0.1, 0.05),
}

VALUE_STREAM_RISK_WEIGHT: float = 0.25
PAUSED_TASK_RISK_WEIGHT: float = 0.05
RISK_SEVERITY_WEIGHT: float = 0.3
DELAY_INDICATOR_BONUS: float = 0.2
MAX_COMPLEXITY: float = 1.0

# (minimum exclusive count, bonus), checked from largest to smallest
MODULE_COUNT_BONUSES = ((10, 0.3), (5, 0.2), (2, 0.1))

PAUSED_TASK_DELAY_WEIGHT: float = 0.8
RISK_DELAY_WEIGHT: float = 0.8
COMPLEXITY_DELAY_WEIGHT: float = 0.6

BASE_CONFIDENCE: float = 0.5
KEYWORD_CONFIDENCE_STEP: float = 0.05
MAX_KEYWORD_CONFIDENCE: float = 0.25
VALUE_STREAM_CONFIDENCE: float = 0.15
RISK_FACTOR_CONFIDENCE: float = 0.1
HIGH_COMPLEXITY_CONFIDENCE: float = 0.05
HIGH_COMPLEXITY_THRESHOLD: float = 0.7
MULTI_STREAM_CONFIDENCE: float = 0.05
MAX_CONFIDENCE: float = 0.95

ITC_PATTERN = re.compile(r"ITC([1-3]B?)", re.IGNORECASE | re.ASCII)


# =============================================================================
# Matching
# =============================================================================

def match_keywords(description: str, keywords: Sequence[str]) -> List[str]:
    """
    Return every keyword contained in the description, in keyword order.

    Matching is case-insensitive substring containment.
    """
    desc_lower = description.lower()
    return [keyword for keyword in keywords if keyword.lower() in desc_lower]


def match_taxonomy(description: str) -> MatchedKeywords:
    """Match the description against all three change definition buckets."""
    return MatchedKeywords(
        minor=match_keywords(description, get_keyword_bucket(SeverityTier.MINOR).keywords),
        significant=match_keywords(description, get_keyword_bucket(SeverityTier.SIGNIFICANT).keywords),
        major=match_keywords(description, get_keyword_bucket(SeverityTier.MAJOR).keywords),
    )


def detect_value_streams(description: str) -> List[str]:
    """
    Detect affected value streams.

    A stream is included once if any of its aliases is a substring of the
    lowercased description. Result order follows VALUE_STREAM_PATTERNS.
    """
    desc_lower = description.lower()
    streams: List[str] = []
    for stream, aliases in VALUE_STREAM_PATTERNS:
        if any(alias in desc_lower for alias in aliases):
            streams.append(stream)
    return streams


def detect_risk_factors(description: str) -> List[RiskFactor]:
    """Scan the risk keyword table and return every phrase present, in table order."""
    desc_lower = description.lower()
    return [
        RiskFactor(
            factor=keyword,
            severity=profile.severity,
            expectedDelay=profile.avg_delay,
        )
        for keyword, profile in RISK_KEYWORDS.items()
        if keyword in desc_lower
    ]


def count_module_mentions(description: str) -> int:
    """Count non-overlapping occurrences of module-related words."""
    desc_lower = description.lower()
    return sum(desc_lower.count(keyword) for keyword in MODULE_KEYWORDS)


def detect_itc_phase(description: str) -> Optional[str]:
    """
    Find the first ITC phase token (ITC1, ITC2, ITC3, ITC3B, ...).

    Returns:
        The upper-cased token, e.g. 'ITC3B', or None if absent
    """
    match = ITC_PATTERN.search(description)
    if not match:
        return None
    return f"ITC{match.group(1).upper()}"


# =============================================================================
# Scoring
# =============================================================================

def _keyword_tier_contribution(matched: MatchedKeywords) -> float:
    # Only the highest non-empty tier contributes
    for tier in TIER_PRIORITY:
        hits = getattr(matched, tier.value)
        if hits:
            weight, per_keyword = KEYWORD_TIER_WEIGHTS[tier]
            return weight * (1 + len(hits) * per_keyword)
    return 0.0


def calculate_complexity(
    description: str,
    matched: MatchedKeywords,
    value_streams: Sequence[str],
    risk_factors: Sequence[RiskFactor],
) -> float:
    """
    Calculate the synthetic complexity score in [0, 1].

    Args:
        description: Raw change description
        matched: Matched taxonomy keywords
        value_streams: Detected value stream names
        risk_factors: Detected risk factors

    Returns:
        Complexity score, capped at 1.0
    """
    complexity = BASE_COMPLEXITY
    complexity += _keyword_tier_contribution(matched)

    if value_streams:
        total_risk = 0.0
        for stream in value_streams:
            profile = get_value_stream_profile(stream)
            total_risk += profile.risk_factor + profile.paused_tasks * PAUSED_TASK_RISK_WEIGHT
        complexity += (total_risk / len(value_streams)) * VALUE_STREAM_RISK_WEIGHT

    if risk_factors:
        avg_severity = sum(risk.severity for risk in risk_factors) / len(risk_factors)
        complexity += avg_severity * RISK_SEVERITY_WEIGHT

    desc_lower = description.lower()
    if any(indicator in desc_lower for indicator in DELAY_INDICATORS):
        complexity += DELAY_INDICATOR_BONUS

    module_count = count_module_mentions(description)
    for minimum, bonus in MODULE_COUNT_BONUSES:
        if module_count > minimum:
            complexity += bonus
            break

    phase = detect_itc_phase(description)
    if phase is not None:
        complexity *= get_itc_multiplier(phase)

    return max(0.0, min(complexity, MAX_COMPLEXITY))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def estimate_delay(
    description: str,
    value_streams: Sequence[str],
    risk_factors: Sequence[RiskFactor],
    complexity_score: float,
) -> int:
    """
    Estimate the schedule delay in business days.

    Args:
        description: Raw change description (for phase/status phrase detection)
        value_streams: Detected value stream names
        risk_factors: Detected risk factors
        complexity_score: Score from calculate_complexity

    Returns:
        Non-negative whole number of business days
    """
    if value_streams:
        total_stream_delay = 0.0
        for stream in value_streams:
            profile = get_value_stream_profile(stream)
            total_stream_delay += profile.avg_delay + profile.paused_tasks * PAUSED_TASK_DELAY_WEIGHT
        total_delay = total_stream_delay / len(value_streams)
    else:
        total_delay = float(VALUE_STREAM_PROFILES[DEFAULT_VALUE_STREAM].avg_delay)

    if risk_factors:
        total_delay += max(risk.expectedDelay for risk in risk_factors) * RISK_DELAY_WEIGHT

    total_delay *= 1 + complexity_score * COMPLEXITY_DELAY_WEIGHT

    desc_lower = description.lower()
    for phrases, multiplier in DELAY_PHRASE_MULTIPLIERS:
        if any(phrase in desc_lower for phrase in phrases):
            total_delay *= multiplier
            break

    return _round_half_up(max(total_delay, 0.0))


def calculate_confidence(
    matched: MatchedKeywords,
    value_streams: Sequence[str],
    risk_factors: Sequence[RiskFactor],
    complexity_score: float,
) -> float:
    """
    Calculate how much corroborating evidence supports the analysis.

    Returns:
        Confidence in [0.5, 0.95]
    """
    confidence = BASE_CONFIDENCE

    total_keywords = matched.total
    if total_keywords > 0:
        confidence += min(total_keywords * KEYWORD_CONFIDENCE_STEP, MAX_KEYWORD_CONFIDENCE)

    if value_streams:
        confidence += VALUE_STREAM_CONFIDENCE
    if risk_factors:
        confidence += RISK_FACTOR_CONFIDENCE
    if complexity_score > HIGH_COMPLEXITY_THRESHOLD:
        confidence += HIGH_COMPLEXITY_CONFIDENCE
    if len(value_streams) > 1:
        confidence += MULTI_STREAM_CONFIDENCE

    return min(confidence, MAX_CONFIDENCE)


# =============================================================================
# Main Entry Point
# =============================================================================

def analyze_change(description: str) -> Analysis:
    """
    Analyze a change description against the taxonomy and historical tables.

    Callers are expected to reject empty input before calling; an empty
    string still yields a valid (default-driven) Analysis.

    Args:
        description: Free-text description of the proposed change

    Returns:
        Analysis with matched keywords, value streams, risk factors and
        the complexity, delay and confidence scores
    """
    matched = match_taxonomy(description)
    value_streams = detect_value_streams(description)
    risk_factors = detect_risk_factors(description)

    logger.debug(
        f"Value stream analysis: streams={value_streams} "
        f"description={description[:100]!r}"
    )

    complexity_score = calculate_complexity(description, matched, value_streams, risk_factors)
    estimated_delay = estimate_delay(description, value_streams, risk_factors, complexity_score)
    confidence = calculate_confidence(matched, value_streams, risk_factors, complexity_score)

    return Analysis(
        description=description,
        valueStreams=value_streams,
        riskFactors=risk_factors,
        matchedKeywords=matched,
        complexityScore=complexity_score,
        estimatedDelay=estimated_delay,
        confidence=confidence,
    )


__all__ = [
    "analyze_change",
    "match_keywords",
    "match_taxonomy",
    "detect_value_streams",
    "detect_risk_factors",
    "count_module_mentions",
    "detect_itc_phase",
    "calculate_complexity",
    "estimate_delay",
    "calculate_confidence",
]
