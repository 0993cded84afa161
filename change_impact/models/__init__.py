"""
Package initialization file for change impact models.

This module exports all Pydantic schemas and enumerations from schemas.py and
enums.py, making them importable from change_impact.models directly.

Usage:
    from change_impact.models import (
        ChangeClassification,
        Analysis,
        Prediction,
    )
"""

# =============================================================================
# Enums
# =============================================================================

from change_impact.models.enums import (
    ChangeClassification,
    SeverityTier,
    ProjectPhase,
    RiskStatus,
)


# =============================================================================
# Schemas
# =============================================================================

from change_impact.models.schemas import (
    # Engine models
    RiskFactor,
    MatchedKeywords,
    Analysis,
    Prediction,
    # Override and persistence record models
    PredictionOverride,
    PredictionRecordCreate,
    PredictionRecord,
    # API contract models
    PredictRequest,
    PredictResponse,
    ClassificationStats,
    TaxonomyBucketResponse,
    TaxonomyResponse,
)


__all__ = [
    # Enums
    "ChangeClassification",
    "SeverityTier",
    "ProjectPhase",
    "RiskStatus",
    # Engine models
    "RiskFactor",
    "MatchedKeywords",
    "Analysis",
    "Prediction",
    # Override and persistence record models
    "PredictionOverride",
    "PredictionRecordCreate",
    "PredictionRecord",
    # API contract models
    "PredictRequest",
    "PredictResponse",
    "ClassificationStats",
    "TaxonomyBucketResponse",
    "TaxonomyResponse",
]
