"""
Prediction Store Adapter

Thin async adapter over the externally managed training_impact_predictions
table. Saved predictions become training data for future tuning of the
taxonomy tables; this module only reads and writes rows.

Columns:
    id, change_description, classification, days_delay, justification,
    complexity_score, confidence_level, value_streams, risk_factors,
    user_id, session_id, created_at

Dependencies:
- change_impact/core/database.py: execute_query, execute_query_one
- change_impact/services/records.py: record_from_row
"""

import logging
from typing import Any, List, Optional

from change_impact.core.database import execute_query, execute_query_one
from change_impact.models.schemas import (
    ClassificationStats,
    PredictionRecord,
    PredictionRecordCreate,
)
from change_impact.services.records import record_from_row


logger = logging.getLogger(__name__)


# =============================================================================
# Queries
# =============================================================================

PREDICTION_COLUMNS = """
    id, change_description, classification, days_delay, justification,
    complexity_score, confidence_level, value_streams, risk_factors,
    user_id, session_id, created_at
"""

INSERT_PREDICTION_QUERY = f"""
    INSERT INTO training_impact_predictions (
        change_description, classification, days_delay, justification,
        complexity_score, confidence_level, value_streams, risk_factors,
        user_id, session_id
    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
    RETURNING {PREDICTION_COLUMNS}
"""

SELECT_PREDICTION_BY_ID_QUERY = f"""
    SELECT {PREDICTION_COLUMNS}
    FROM training_impact_predictions
    WHERE id::text = $1
"""

PREDICTION_STATS_QUERY = """
    SELECT
        classification,
        COUNT(*) AS count,
        AVG(days_delay) AS avg_delay,
        AVG(complexity_score) AS avg_complexity,
        AVG(confidence_level) AS avg_confidence
    FROM training_impact_predictions
    GROUP BY classification
    ORDER BY classification
"""


def _as_float(value: Any) -> Optional[float]:
    # AVG() comes back as Decimal
    return float(value) if value is not None else None


# =============================================================================
# Store Operations
# =============================================================================

async def save_prediction(record: PredictionRecordCreate) -> PredictionRecord:
    """
    Insert a prediction record.

    Returns:
        The stored record with its id and created_at

    Raises:
        RuntimeError: If the insert returned no row
        asyncpg.PostgresError: If the insert fails
    """
    row = await execute_query_one(
        INSERT_PREDICTION_QUERY,
        record.changeDescription,
        record.classification,
        record.daysDelay,
        record.justification,
        record.complexityScore,
        record.confidenceLevel,
        list(record.valueStreams),
        list(record.riskFactors),
        record.userId,
        record.sessionId,
    )
    if row is None:
        raise RuntimeError("Insert into training_impact_predictions returned no row")

    saved = record_from_row(dict(row))
    logger.info(f"Saved prediction {saved.id}: {saved.classification} ({saved.daysDelay} days)")
    return saved


async def list_predictions(
    classification: Optional[str] = None,
    user_id: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
) -> List[PredictionRecord]:
    """
    List stored predictions, newest first.

    Args:
        classification: Only return this classification
        user_id: Only return records saved by this user
        limit: Maximum number of records
        offset: Number of records to skip

    Returns:
        Matching records ordered by created_at descending
    """
    conditions: List[str] = []
    values: List[Any] = []

    if classification:
        values.append(classification)
        conditions.append(f"classification = ${len(values)}")
    if user_id:
        values.append(user_id)
        conditions.append(f"user_id = ${len(values)}")

    where_clause = f"WHERE {' AND '.join(conditions)}" if conditions else ""
    values.extend([limit, offset])

    query = f"""
        SELECT {PREDICTION_COLUMNS}
        FROM training_impact_predictions
        {where_clause}
        ORDER BY created_at DESC
        LIMIT ${len(values) - 1} OFFSET ${len(values)}
    """
    rows = await execute_query(query, *values)

    logger.debug(
        f"Listed {len(rows)} predictions "
        f"(classification={classification or 'any'}, userId={user_id or 'any'})"
    )
    return [record_from_row(dict(row)) for row in rows]


async def get_prediction(prediction_id: str) -> Optional[PredictionRecord]:
    """Fetch one stored prediction by id, or None if it does not exist."""
    row = await execute_query_one(SELECT_PREDICTION_BY_ID_QUERY, prediction_id)
    if row is None:
        return None
    return record_from_row(dict(row))


async def get_prediction_stats() -> List[ClassificationStats]:
    """Aggregate count and average delay/complexity/confidence per classification."""
    rows = await execute_query(PREDICTION_STATS_QUERY)
    return [
        ClassificationStats(
            classification=row["classification"],
            count=int(row["count"]),
            avgDelay=_as_float(row["avg_delay"]),
            avgComplexity=_as_float(row["avg_complexity"]),
            avgConfidence=_as_float(row["avg_confidence"]),
        )
        for row in rows
    ]


__all__ = [
    "save_prediction",
    "list_predictions",
    "get_prediction",
    "get_prediction_stats",
]
