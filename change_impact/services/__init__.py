"""
Change Impact Services Module

This module contains the business logic of the change impact service. The
engine services are pure and stateless; the store and enhancement services
wrap external collaborators.

Services:
- taxonomy: Static keyword, value stream, risk and phase tables
- analyzer: Description -> Analysis (keywords, streams, risks, scores)
- classifier: Analysis -> Prediction (classification, delay, justification)
- records: Operator overrides and prediction store record shaping
- enhancement: AI second opinion for low-confidence predictions
- prediction_store: asyncpg adapter over training_impact_predictions

All services are designed to be consumed by the API layer (change_impact/api/).
"""

# =============================================================================
# Taxonomy Exports
# =============================================================================

from change_impact.services.taxonomy import (
    CHANGE_DEFINITIONS,
    VALUE_STREAM_PROFILES,
    VALUE_STREAM_PATTERNS,
    RISK_KEYWORDS,
    get_keyword_bucket,
    get_value_stream_profile,
    get_itc_multiplier,
)

# =============================================================================
# Analyzer Exports
# =============================================================================

from change_impact.services.analyzer import (
    analyze_change,
    match_taxonomy,
    detect_value_streams,
    detect_risk_factors,
    calculate_complexity,
    estimate_delay,
    calculate_confidence,
)

# =============================================================================
# Classifier Exports
# =============================================================================

from change_impact.services.classifier import (
    classify_change,
    predict_impact,
    predict_batch,
)

# =============================================================================
# Record Exports
# =============================================================================

from change_impact.services.records import (
    apply_override,
    build_prediction_record,
    record_from_row,
    prediction_from_record,
)

# =============================================================================
# Enhancement Exports
# =============================================================================

from change_impact.services.enhancement import (
    EnhancementResult,
    should_enhance,
    enhance_prediction,
)

# =============================================================================
# Prediction Store Exports
# =============================================================================

from change_impact.services.prediction_store import (
    save_prediction,
    list_predictions,
    get_prediction,
    get_prediction_stats,
)


__all__ = [
    # Taxonomy
    "CHANGE_DEFINITIONS",
    "VALUE_STREAM_PROFILES",
    "VALUE_STREAM_PATTERNS",
    "RISK_KEYWORDS",
    "get_keyword_bucket",
    "get_value_stream_profile",
    "get_itc_multiplier",
    # Analyzer
    "analyze_change",
    "match_taxonomy",
    "detect_value_streams",
    "detect_risk_factors",
    "calculate_complexity",
    "estimate_delay",
    "calculate_confidence",
    # Classifier
    "classify_change",
    "predict_impact",
    "predict_batch",
    # Records
    "apply_override",
    "build_prediction_record",
    "record_from_row",
    "prediction_from_record",
    # Enhancement
    "EnhancementResult",
    "should_enhance",
    "enhance_prediction",
    # Prediction store
    "save_prediction",
    "list_predictions",
    "get_prediction",
    "get_prediction_stats",
]
