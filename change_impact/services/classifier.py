"""
Change Classifier Service

This module turns an Analysis into the final Prediction: a classification
(Minor/Significant/Major Change), a delay in business days and a justification.

Decision table (evaluated top to bottom, first match wins):

    1. Any major keyword        -> Major Change,       delay = max(estimate, 11)
    2. Any significant keyword  -> Significant Change, delay = clamp(estimate, 5, 10)
    3. Any minor keyword        -> Minor Change,       delay = min(estimate, 5)
    4. No keyword matched, fall back to the computed metrics:
       a. estimate <= 4 and complexity < 0.3 and no risk factors -> Minor Change
       b. estimate <= 10 and complexity < 0.7                    -> Significant Change
       c. otherwise                                              -> Major Change
       (fallback branches keep the estimate as-is)

Every input yields exactly one of the three classifications. Justification
wording is template text built from the matched entities; the branch taken
and the delay bounds per branch are the contract.
"""

import logging
import math
from typing import Iterable, List, Sequence

from change_impact.models.enums import ChangeClassification
from change_impact.models.schemas import Analysis, Prediction
from change_impact.services.analyzer import analyze_change


logger = logging.getLogger(__name__)


# =============================================================================
# Delay Bounds per Branch
# =============================================================================

MAJOR_MIN_DELAY: int = 11
SIGNIFICANT_MIN_DELAY: int = 5
SIGNIFICANT_MAX_DELAY: int = 10
MINOR_MAX_DELAY: int = 5

# Fallback thresholds when no taxonomy keyword matched
FALLBACK_MINOR_MAX_DELAY: int = 4
FALLBACK_MINOR_MAX_COMPLEXITY: float = 0.3
FALLBACK_SIGNIFICANT_MAX_DELAY: int = 10
FALLBACK_SIGNIFICANT_MAX_COMPLEXITY: float = 0.7

# Number of keywords / risk factors named in a justification
MAX_LISTED_ITEMS: int = 3


# =============================================================================
# Justification Helpers
# =============================================================================

def as_percent(value: float) -> int:
    """Convert a 0-1 score to a whole percentage, rounding halves up."""
    return int(math.floor(value * 100 + 0.5))


def summarize_items(items: Sequence[str], limit: int = MAX_LISTED_ITEMS) -> str:
    """
    Join up to `limit` items, noting how many were left out.

    Example:
        >>> summarize_items(['a', 'b', 'c', 'd', 'e'])
        'a, b, c and 2 more'
    """
    listed = ", ".join(items[:limit])
    remaining = len(items) - limit
    if remaining > 0:
        return f"{listed} and {remaining} more"
    return listed


def _sentences(parts: Iterable[str]) -> str:
    return " ".join(part for part in parts if part)


def _risk_names(analysis: Analysis) -> List[str]:
    return [risk.factor for risk in analysis.riskFactors]


# =============================================================================
# Branch Builders
# =============================================================================

def _major_keyword_prediction(analysis: Analysis) -> Prediction:
    keywords = analysis.matchedKeywords.major
    justification = _sentences([
        f"This request contains major change indicators: {summarize_items(keywords)}.",
        f"Affects {', '.join(analysis.valueStreams)} value streams." if analysis.valueStreams else "",
        "These changes typically require extensive coordination, approvals, "
        "and potential project restructuring.",
        f"Historical data shows similar changes taking {MAJOR_MIN_DELAY}+ days "
        "with high impact on timelines.",
    ])
    return Prediction(
        classification=ChangeClassification.MAJOR,
        daysDelay=max(analysis.estimatedDelay, MAJOR_MIN_DELAY),
        justification=justification,
    )


def _significant_keyword_prediction(analysis: Analysis) -> Prediction:
    keywords = analysis.matchedKeywords.significant
    risks = _risk_names(analysis)
    justification = _sentences([
        f"This request involves significant modifications: {', '.join(keywords[:MAX_LISTED_ITEMS])}.",
        f"Risk factors: {', '.join(risks)}." if risks else "",
        "These changes require formal review processes and may impact multiple course components.",
        f"Expected delay of {SIGNIFICANT_MIN_DELAY}-{SIGNIFICANT_MAX_DELAY} days "
        "based on similar historical changes.",
    ])
    return Prediction(
        classification=ChangeClassification.SIGNIFICANT,
        daysDelay=max(min(analysis.estimatedDelay, SIGNIFICANT_MAX_DELAY), SIGNIFICANT_MIN_DELAY),
        justification=justification,
    )


def _minor_keyword_prediction(analysis: Analysis) -> Prediction:
    keywords = analysis.matchedKeywords.minor
    justification = _sentences([
        f"This request includes minor adjustments: {', '.join(keywords[:MAX_LISTED_ITEMS])}.",
        "These changes can be implemented quickly without disrupting the overall development flow.",
        f"Historical data shows completion within 0-{MINOR_MAX_DELAY} days.",
    ])
    return Prediction(
        classification=ChangeClassification.MINOR,
        daysDelay=min(analysis.estimatedDelay, MINOR_MAX_DELAY),
        justification=justification,
    )


def _fallback_prediction(analysis: Analysis) -> Prediction:
    complexity = analysis.complexityScore
    delay = analysis.estimatedDelay
    risks = _risk_names(analysis)

    if (
        delay <= FALLBACK_MINOR_MAX_DELAY
        and complexity < FALLBACK_MINOR_MAX_COMPLEXITY
        and not risks
    ):
        return Prediction(
            classification=ChangeClassification.MINOR,
            daysDelay=delay,
            justification=(
                "Analysis indicates minimal complexity and risk. Similar changes typically "
                f"complete within {FALLBACK_MINOR_MAX_DELAY} days with no significant delays."
            ),
        )

    if delay <= FALLBACK_SIGNIFICANT_MAX_DELAY and complexity < FALLBACK_SIGNIFICANT_MAX_COMPLEXITY:
        streams = ", ".join(analysis.valueStreams) or "similar"
        return Prediction(
            classification=ChangeClassification.SIGNIFICANT,
            daysDelay=delay,
            justification=_sentences([
                f"Based on patterns from {streams} value streams, this change shows moderate complexity.",
                f"Risk factors identified: {', '.join(risks)}." if risks else "",
                "Expected timeline impact aligns with past significant changes.",
            ]),
        )

    return Prediction(
        classification=ChangeClassification.MAJOR,
        daysDelay=delay,
        justification=_sentences([
            f"Analysis indicates high complexity (score: {as_percent(complexity)}%).",
            f"Affects critical value streams: {', '.join(analysis.valueStreams)}."
            if analysis.valueStreams else "",
            f"Multiple risk factors present: {', '.join(risks[:MAX_LISTED_ITEMS])}." if risks else "",
            "Similar changes historically required extensive coordination and replanning.",
        ]),
    )


# =============================================================================
# Main Entry Points
# =============================================================================

def classify_change(analysis: Analysis) -> Prediction:
    """
    Classify an analyzed change.

    Keyword tiers take priority (major over significant over minor); only when
    no taxonomy keyword matched does the metric-threshold fallback apply.

    Args:
        analysis: Output of analyze_change

    Returns:
        Prediction without the analysis attached
    """
    matched = analysis.matchedKeywords
    if matched.major:
        return _major_keyword_prediction(analysis)
    if matched.significant:
        return _significant_keyword_prediction(analysis)
    if matched.minor:
        return _minor_keyword_prediction(analysis)
    return _fallback_prediction(analysis)


def predict_impact(description: str) -> Prediction:
    """
    Run the full pipeline: analyze_change then classify_change.

    The returned Prediction carries its Analysis for display and audit.
    """
    analysis = analyze_change(description)
    prediction = classify_change(analysis)
    logger.info(
        f"Predicted {prediction.classification.value} "
        f"({prediction.daysDelay} days, confidence {as_percent(analysis.confidence)}%)"
    )
    return prediction.model_copy(update={"analysis": analysis})


def predict_batch(descriptions: Sequence[str]) -> List[Prediction]:
    """
    Predict impact for several descriptions.

    Returns:
        Predictions in the same order as the input
    """
    return [predict_impact(description) for description in descriptions]


__all__ = [
    "classify_change",
    "predict_impact",
    "predict_batch",
    "summarize_items",
    "as_percent",
    "MAJOR_MIN_DELAY",
    "SIGNIFICANT_MIN_DELAY",
    "SIGNIFICANT_MAX_DELAY",
    "MINOR_MAX_DELAY",
]
