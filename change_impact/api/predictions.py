"""
FastAPI router module for change impact predictions.

Key Endpoints:
- POST /predict - Analyze and classify a change description
- POST /predictions - Save a (possibly operator-edited) prediction record
- GET /predictions - List saved predictions with optional filters
- GET /predictions/stats - Per-classification aggregates
- GET /predictions/taxonomy - Keyword buckets and value streams for display
- GET /predictions/{prediction_id} - Fetch one saved prediction

Response shapes:
- Store endpoints return { success: true, data: ... } like the dashboard expects
- POST /predict returns PredictResponse

Route order matters: /predictions/stats and /predictions/taxonomy are
registered before /predictions/{prediction_id} so they are not captured by it.

Dependencies:
- change_impact/core/dependencies.py: SettingsDep
- change_impact/services/classifier.py: predict_impact
- change_impact/services/enhancement.py: should_enhance, enhance_prediction
- change_impact/services/prediction_store.py: store operations
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from change_impact.core.dependencies import SettingsDep
from change_impact.models.enums import ChangeClassification, SeverityTier
from change_impact.models.schemas import (
    PredictionRecordCreate,
    PredictRequest,
    PredictResponse,
    TaxonomyBucketResponse,
    TaxonomyResponse,
)
from change_impact.services.classifier import predict_impact
from change_impact.services.enhancement import enhance_prediction, should_enhance
from change_impact.services.prediction_store import (
    get_prediction,
    get_prediction_stats,
    list_predictions,
    save_prediction,
)
from change_impact.services.taxonomy import (
    DEFAULT_VALUE_STREAM,
    VALUE_STREAM_PROFILES,
    get_keyword_bucket,
)


# =============================================================================
# Module Configuration
# =============================================================================

logger = logging.getLogger(__name__)

VALID_CLASSIFICATIONS = {c.value for c in ChangeClassification}


# =============================================================================
# Router Definition
# =============================================================================

router = APIRouter()


# =============================================================================
# POST /predict - Analyze and Classify
# =============================================================================


@router.post("/predict", response_model=PredictResponse)
async def predict(request: PredictRequest, settings: SettingsDep) -> PredictResponse:
    """
    Predict the schedule impact of a change description.

    The rule engine always runs. When `enhance` is set, an API key is
    configured and engine confidence is below the configured threshold, an AI
    second opinion is requested; on any failure the engine prediction is kept.

    Raises:
        HTTPException 400: If the description is empty or whitespace.

    Example Request:
        POST /predict
        {"description": "Fix typo in P2P procurement guide"}
    """
    description = request.description
    if not description or not description.strip():
        logger.warning("POST /predict rejected: empty description")
        raise HTTPException(
            status_code=400,
            detail="Please describe the change to predict its impact."
        )

    engine_prediction = predict_impact(description)
    analysis = engine_prediction.analysis

    response = PredictResponse(
        prediction=engine_prediction,
        enginePrediction=engine_prediction,
        analysis=analysis,
    )

    if (
        request.enhance
        and settings.anthropic_api_key
        and should_enhance(analysis, settings.enhancement_confidence_threshold)
    ):
        result = await enhance_prediction(
            description,
            analysis,
            engine_prediction,
            settings=settings,
        )
        response.prediction = result.prediction
        response.enhanced = result.enhanced
        response.enhancementError = result.error

    return response


# =============================================================================
# POST /predictions - Save Prediction Record
# =============================================================================


@router.post("/predictions", response_model=dict, status_code=201)
async def create_prediction(record: PredictionRecordCreate) -> dict:
    """
    Save a prediction record to the prediction store.

    Returns:
        { success: true, data: {...}, message: "Prediction saved successfully" }

    Raises:
        HTTPException 400: If changeDescription, classification or daysDelay
            is missing, daysDelay is negative, or the classification is not a
            known class.
        HTTPException 500: If the store write fails.
    """
    if (
        not record.changeDescription
        or not record.changeDescription.strip()
        or not record.classification
        or record.daysDelay is None
    ):
        logger.warning("POST /predictions rejected: missing required fields")
        raise HTTPException(
            status_code=400,
            detail="Missing required fields: changeDescription, classification, daysDelay"
        )

    if record.daysDelay < 0:
        logger.warning(f"POST /predictions rejected: negative daysDelay {record.daysDelay}")
        raise HTTPException(
            status_code=400,
            detail="daysDelay must be zero or greater"
        )

    if record.classification not in VALID_CLASSIFICATIONS:
        logger.warning(f"POST /predictions rejected: unknown classification {record.classification!r}")
        raise HTTPException(
            status_code=400,
            detail=f"classification must be one of: {', '.join(sorted(VALID_CLASSIFICATIONS))}"
        )

    try:
        saved = await save_prediction(record)
        return {
            "success": True,
            "data": saved.model_dump(mode="json"),
            "message": "Prediction saved successfully",
        }

    except Exception as e:
        logger.error(f"Error saving prediction: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Failed to save prediction"
        )


# =============================================================================
# GET /predictions - List Prediction Records
# =============================================================================


@router.get("/predictions", response_model=dict)
async def get_predictions(
    settings: SettingsDep,
    classification: Optional[str] = Query(default=None, description="Filter by classification"),
    userId: Optional[str] = Query(default=None, description="Filter by user ID"),
    limit: Optional[int] = Query(default=None, ge=1, description="Maximum records to return"),
    offset: int = Query(default=0, ge=0, description="Records to skip"),
) -> dict:
    """
    List saved predictions, newest first.

    `limit` defaults to the configured default_list_limit and is capped at
    max_list_limit.

    Returns:
        { success: true, data: [...], count: n }
    """
    effective_limit = min(limit or settings.default_list_limit, settings.max_list_limit)

    try:
        records = await list_predictions(
            classification=classification,
            user_id=userId,
            limit=effective_limit,
            offset=offset,
        )
        data = [record.model_dump(mode="json") for record in records]
        return {"success": True, "data": data, "count": len(data)}

    except Exception as e:
        logger.error(f"Error fetching predictions: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Failed to fetch predictions"
        )


# =============================================================================
# GET /predictions/stats - Aggregates per Classification
# =============================================================================


@router.get("/predictions/stats", response_model=dict)
async def get_statistics() -> dict:
    """
    Return count and average delay/complexity/confidence per classification.

    Returns:
        { success: true, data: [{classification, count, avgDelay, ...}] }
    """
    try:
        stats = await get_prediction_stats()
        return {"success": True, "data": [s.model_dump() for s in stats]}

    except Exception as e:
        logger.error(f"Error fetching statistics: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Failed to fetch statistics"
        )


# =============================================================================
# GET /predictions/taxonomy - Reference Data
# =============================================================================


@router.get("/predictions/taxonomy", response_model=TaxonomyResponse)
async def get_taxonomy() -> TaxonomyResponse:
    """Return the keyword buckets with delay ranges and the known value streams."""
    buckets = []
    for tier in SeverityTier:
        bucket = get_keyword_bucket(tier)
        buckets.append(
            TaxonomyBucketResponse(
                tier=tier.value,
                keywords=list(bucket.keywords),
                delayRange={"min": bucket.delay_range.min, "max": bucket.delay_range.max},
            )
        )
    value_streams = [name for name in VALUE_STREAM_PROFILES if name != DEFAULT_VALUE_STREAM]
    return TaxonomyResponse(buckets=buckets, valueStreams=value_streams)


# =============================================================================
# GET /predictions/{prediction_id} - Single Record
# =============================================================================


@router.get("/predictions/{prediction_id}", response_model=dict)
async def get_prediction_by_id(prediction_id: str) -> dict:
    """
    Fetch one saved prediction.

    Raises:
        HTTPException 404: If no prediction has this id.
        HTTPException 500: If the store read fails.
    """
    try:
        record = await get_prediction(prediction_id)
        if record is None:
            raise HTTPException(
                status_code=404,
                detail="Prediction not found"
            )
        return {"success": True, "data": record.model_dump(mode="json")}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching prediction {prediction_id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Failed to fetch prediction"
        )
