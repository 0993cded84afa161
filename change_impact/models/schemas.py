"""
Pydantic request/response models for the change impact prediction service.

This module provides type-safe data validation and serialization for the
engine's structured output (Analysis, Prediction), the operator override and
persistence record shapes, and the HTTP request/response contracts.

Field names use camelCase to match the JSON contract consumed by the
dashboard and the prediction store collaborator.

All models use Pydantic v2 syntax with proper field validation and examples.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ConfigDict

from change_impact.models.enums import ChangeClassification


# =============================================================================
# Engine Models
# =============================================================================


class RiskFactor(BaseModel):
    """
    A risk phrase detected in a change description.

    Carries the historical severity (0-1) and the expected delay in business
    days associated with the phrase.
    """
    factor: str = Field(..., description="Matched risk phrase, e.g. 'blocked'")
    severity: float = Field(..., ge=0.0, le=1.0, description="Historical severity (0-1)")
    expectedDelay: int = Field(..., ge=0, description="Historical average delay in days")


class MatchedKeywords(BaseModel):
    """
    Taxonomy phrases found in a description, grouped by severity tier.

    Each list keeps taxonomy order and holds each keyword at most once.
    """
    minor: List[str] = Field(default_factory=list)
    significant: List[str] = Field(default_factory=list)
    major: List[str] = Field(default_factory=list)

    @property
    def total(self) -> int:
        """Total number of matched keywords across all three tiers."""
        return len(self.minor) + len(self.significant) + len(self.major)


class Analysis(BaseModel):
    """
    Structured analysis of a single change description.

    Built fresh for every prediction request and derived purely from the
    description and the static taxonomy tables.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "description": "Major revision to O2C billing training due to scope change in ITC3 phase",
                "valueStreams": ["O2C"],
                "riskFactors": [
                    {"factor": "scope change", "severity": 0.9, "expectedDelay": 12}
                ],
                "matchedKeywords": {"minor": [], "significant": [], "major": []},
                "complexityScore": 1.0,
                "estimatedDelay": 42,
                "confidence": 0.8,
            }
        }
    )

    description: str = Field(..., description="Raw input text")
    valueStreams: List[str] = Field(
        default_factory=list,
        description="Matched value streams in detection order, no duplicates"
    )
    riskFactors: List[RiskFactor] = Field(
        default_factory=list,
        description="Risk phrases found, in risk table order"
    )
    matchedKeywords: MatchedKeywords = Field(default_factory=MatchedKeywords)
    complexityScore: float = Field(default=0.0, ge=0.0, le=1.0)
    estimatedDelay: int = Field(default=0, ge=0, description="Estimated delay in business days")
    confidence: float = Field(default=0.0, ge=0.0, le=0.95)


class Prediction(BaseModel):
    """
    Final classification output of the engine.

    `analysis` is attached by the pipeline for display/audit and may be
    omitted when the prediction is rebuilt from a persisted record.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "classification": "Minor Change",
                "daysDelay": 5,
                "justification": "This request includes minor adjustments: typo. ...",
            }
        }
    )

    classification: ChangeClassification
    daysDelay: int = Field(..., ge=0, description="Expected schedule impact in business days")
    justification: str
    analysis: Optional[Analysis] = None


# =============================================================================
# Operator Override and Persistence Record Models
# =============================================================================


class PredictionOverride(BaseModel):
    """
    Operator edits applied to a prediction before it is saved.

    Any field left as None keeps the engine's value.
    """
    classification: Optional[ChangeClassification] = None
    daysDelay: Optional[int] = Field(default=None, ge=0)
    justification: Optional[str] = None


class PredictionRecordCreate(BaseModel):
    """
    Flattened prediction record accepted by the prediction store.

    Required fields (changeDescription, classification, daysDelay) and the
    sign of daysDelay are validated by the API layer so that a bad record
    yields a 400 with a descriptive message.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "changeDescription": "Fix typo in P2P procurement guide",
                "classification": "Minor Change",
                "daysDelay": 5,
                "justification": "This request includes minor adjustments: typo. ...",
                "complexityScore": 45,
                "confidenceLevel": 70,
                "valueStreams": ["P2P"],
                "riskFactors": [],
                "userId": "analyst@company.com",
                "sessionId": "session-123",
            }
        }
    )

    changeDescription: Optional[str] = None
    classification: Optional[str] = None
    daysDelay: Optional[int] = None
    justification: Optional[str] = None
    complexityScore: Optional[int] = Field(
        default=None,
        ge=0,
        le=100,
        description="Complexity score as a percentage (0-100)"
    )
    confidenceLevel: Optional[int] = Field(
        default=None,
        ge=0,
        le=100,
        description="Engine confidence as a percentage (0-100)"
    )
    valueStreams: List[str] = Field(default_factory=list)
    riskFactors: List[str] = Field(
        default_factory=list,
        description="Names of the detected risk factors"
    )
    userId: Optional[str] = None
    sessionId: Optional[str] = None


class PredictionRecord(PredictionRecordCreate):
    """Prediction record as stored, with its identifier and creation time."""
    id: str
    createdAt: Optional[datetime] = None


# =============================================================================
# API Contract Models
# =============================================================================


class PredictRequest(BaseModel):
    """Request body for POST /predict."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "description": "Add a completely new process module due to scope change",
                "enhance": True,
            }
        }
    )

    description: str = Field(default="", description="Free-text description of the change")
    enhance: bool = Field(
        default=True,
        description="Request an AI second opinion when engine confidence is low"
    )


class PredictResponse(BaseModel):
    """
    Response body for POST /predict.

    `prediction` is the final answer; `enginePrediction` is always the
    engine's own output so callers keep it as a fallback.
    """
    prediction: Prediction
    enginePrediction: Prediction
    analysis: Analysis
    enhanced: bool = False
    enhancementError: Optional[str] = None


class ClassificationStats(BaseModel):
    """Aggregate statistics for one classification in the prediction store."""
    classification: str
    count: int
    avgDelay: Optional[float] = None
    avgComplexity: Optional[float] = None
    avgConfidence: Optional[float] = None


class TaxonomyBucketResponse(BaseModel):
    """One keyword taxonomy bucket for display."""
    tier: str
    keywords: List[str]
    delayRange: Dict[str, int]


class TaxonomyResponse(BaseModel):
    """Reference data served by GET /predictions/taxonomy."""
    buckets: List[TaxonomyBucketResponse]
    valueStreams: List[str]
