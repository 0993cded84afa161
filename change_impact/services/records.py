"""
Prediction record shaping for the external prediction store.

The engine never talks to the store itself. Callers flatten the final
(possibly operator-edited) prediction plus a few analysis fields into a
PredictionRecordCreate, and rebuild Predictions from stored rows.

Round-trip guarantee: classification string, integer delay and justification
text survive build_prediction_record -> store row -> prediction_from_record
verbatim.
"""

from typing import Any, Mapping, Optional

from change_impact.models.enums import ChangeClassification
from change_impact.models.schemas import (
    Analysis,
    Prediction,
    PredictionOverride,
    PredictionRecord,
    PredictionRecordCreate,
)
from change_impact.services.classifier import as_percent


def apply_override(
    prediction: Prediction,
    override: Optional[PredictionOverride] = None,
) -> Prediction:
    """
    Apply operator edits to a prediction.

    Fields set on the override replace the engine's values; the input
    prediction is left untouched.
    """
    if override is None:
        return prediction.model_copy()
    updates = override.model_dump(exclude_none=True)
    return prediction.model_copy(update=updates)


def build_prediction_record(
    description: str,
    prediction: Prediction,
    analysis: Optional[Analysis] = None,
    override: Optional[PredictionOverride] = None,
    user_id: Optional[str] = None,
    session_id: Optional[str] = None,
) -> PredictionRecordCreate:
    """
    Flatten a prediction and its analysis into the store record shape.

    Args:
        description: Original change description
        prediction: Engine (or enhanced) prediction
        analysis: Analysis to extract details from; defaults to prediction.analysis
        override: Optional operator edits
        user_id: Optional user identifier
        session_id: Optional session identifier

    Returns:
        PredictionRecordCreate ready for save_prediction
    """
    final = apply_override(prediction, override)
    analysis = analysis or prediction.analysis

    record = PredictionRecordCreate(
        changeDescription=description,
        classification=final.classification.value,
        daysDelay=final.daysDelay,
        justification=final.justification,
        userId=user_id,
        sessionId=session_id,
    )
    if analysis is not None:
        record.complexityScore = as_percent(analysis.complexityScore)
        record.confidenceLevel = as_percent(analysis.confidence)
        record.valueStreams = list(analysis.valueStreams)
        record.riskFactors = [risk.factor for risk in analysis.riskFactors]
    return record


def record_from_row(row: Mapping[str, Any]) -> PredictionRecord:
    """Convert a training_impact_predictions row into a PredictionRecord."""
    return PredictionRecord(
        id=str(row.get("id", "")),
        changeDescription=row.get("change_description"),
        classification=row.get("classification"),
        daysDelay=row.get("days_delay"),
        justification=row.get("justification"),
        complexityScore=row.get("complexity_score"),
        confidenceLevel=row.get("confidence_level"),
        valueStreams=list(row.get("value_streams") or []),
        riskFactors=list(row.get("risk_factors") or []),
        userId=row.get("user_id"),
        sessionId=row.get("session_id"),
        createdAt=row.get("created_at"),
    )


def prediction_from_record(record: PredictionRecordCreate) -> Prediction:
    """
    Rebuild a Prediction from a stored record.

    Raises:
        ValueError: If the record has no classification/delay or the
            classification is not one of the three known classes
    """
    if record.classification is None or record.daysDelay is None:
        raise ValueError("Record is missing classification or daysDelay")
    return Prediction(
        classification=ChangeClassification(record.classification),
        daysDelay=record.daysDelay,
        justification=record.justification or "",
    )


__all__ = [
    "apply_override",
    "build_prediction_record",
    "record_from_row",
    "prediction_from_record",
]
