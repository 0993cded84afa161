"""
AI Second Opinion Service

Asks an Anthropic Claude model to re-classify a change when the rule engine is
not confident about its own answer. The engine output always remains
available as the fallback: any SDK error, timeout, malformed reply or invalid
classification returns the engine prediction unchanged with enhanced=False.

Flow:
    1. should_enhance() - engine confidence below the configured threshold
    2. build_enhancement_prompt() - description plus engine analysis as context
    3. AsyncAnthropic.messages.create()
    4. parse_enhancement_response() - JSON {classification, daysDelay, justification}
"""

import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Optional

from anthropic import AsyncAnthropic

from change_impact.core.config import Settings, get_settings
from change_impact.models.enums import ChangeClassification
from change_impact.models.schemas import Analysis, Prediction
from change_impact.services.classifier import as_percent


logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

SYSTEM_PROMPT = (
    "You are an expert in ERP training change management. You classify proposed "
    "changes to training materials by their schedule impact and respond with JSON only."
)

ENHANCEMENT_TEMPERATURE: float = 0.2


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class EnhancementResult:
    """
    Outcome of an enhancement attempt.

    Attributes:
        prediction: Final prediction (enhanced, or the engine's on fallback)
        engine_prediction: The rule engine's own prediction
        enhanced: True only if the model reply was used
        error: Reason the engine prediction was kept, if any
    """
    prediction: Prediction
    engine_prediction: Prediction
    enhanced: bool = False
    error: Optional[str] = None


# =============================================================================
# Prompt and Response Handling
# =============================================================================

def should_enhance(analysis: Analysis, threshold: float) -> bool:
    """Return True when engine confidence is below the threshold."""
    return analysis.confidence < threshold


def build_enhancement_prompt(
    description: str,
    analysis: Analysis,
    prediction: Prediction,
) -> str:
    """
    Build the user prompt for the second opinion.

    The engine's analysis and initial prediction are included as context so
    the model can agree or correct with a reason.
    """
    classes = "|".join(c.value for c in ChangeClassification)
    risks = ", ".join(
        f"{risk.factor} (severity {risk.severity}, ~{risk.expectedDelay} days)"
        for risk in analysis.riskFactors
    ) or "none"
    matched = analysis.matchedKeywords

    return f"""Classify the proposed change into one of three categories: 'Minor Change', 'Significant Change', or 'Major Change', and estimate the delay in business days. Provide a brief justification based on typical impacts in ERP training projects.

Change description: "{description}"

Rule engine analysis:
- Value streams: {", ".join(analysis.valueStreams) or "none detected"}
- Risk factors: {risks}
- Matched keywords: minor={matched.minor}, significant={matched.significant}, major={matched.major}
- Complexity score: {as_percent(analysis.complexityScore)}%
- Estimated delay: {analysis.estimatedDelay} days
- Engine confidence: {as_percent(analysis.confidence)}%
- Engine prediction: {prediction.classification.value}, {prediction.daysDelay} days

Please respond in the following JSON format:
{{
  "classification": "{classes}",
  "daysDelay": number,
  "justification": "brief explanation"
}}"""


def parse_enhancement_response(text: str) -> Prediction:
    """
    Parse the model reply into a Prediction.

    Tolerates prose or code fences around the JSON object.

    Raises:
        ValueError: If no JSON object is found, the classification is not one
            of the three known classes, or daysDelay is not a number
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise ValueError("No JSON object in model response")

    try:
        payload: Any = json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in model response: {e}") from e

    if not isinstance(payload, dict):
        raise ValueError("Model response is not a JSON object")

    try:
        classification = ChangeClassification(payload.get("classification"))
    except ValueError as e:
        raise ValueError(f"Unknown classification: {payload.get('classification')!r}") from e

    raw_delay = payload.get("daysDelay")
    if isinstance(raw_delay, bool) or raw_delay is None:
        raise ValueError(f"Invalid daysDelay: {raw_delay!r}")
    try:
        delay = float(raw_delay)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid daysDelay: {raw_delay!r}") from e
    if math.isnan(delay) or math.isinf(delay):
        raise ValueError(f"Invalid daysDelay: {raw_delay!r}")

    return Prediction(
        classification=classification,
        daysDelay=max(0, int(math.floor(delay + 0.5))),
        justification=str(payload.get("justification") or ""),
    )


# =============================================================================
# Main Entry Point
# =============================================================================

async def enhance_prediction(
    description: str,
    analysis: Analysis,
    prediction: Prediction,
    settings: Optional[Settings] = None,
    client: Optional[AsyncAnthropic] = None,
) -> EnhancementResult:
    """
    Request an AI second opinion for an engine prediction.

    Never raises; failures are logged and reported through
    EnhancementResult.error.

    Args:
        description: Original change description
        analysis: Engine analysis of the description
        prediction: Engine prediction
        settings: Settings to read model options from; defaults to get_settings()
        client: Preconfigured client, left open for the caller. When omitted,
            a client is built from settings and closed after the call.

    Returns:
        EnhancementResult with the final and engine predictions
    """
    settings = settings or get_settings()

    if client is None:
        if not settings.anthropic_api_key:
            return EnhancementResult(
                prediction=prediction,
                engine_prediction=prediction,
                error="ANTHROPIC_API_KEY is not configured",
            )
        async with AsyncAnthropic(
            api_key=settings.anthropic_api_key,
            timeout=settings.enhancement_timeout_secs,
        ) as owned_client:
            return await _request_second_opinion(
                owned_client, settings, description, analysis, prediction
            )

    return await _request_second_opinion(client, settings, description, analysis, prediction)


async def _request_second_opinion(
    client: AsyncAnthropic,
    settings: Settings,
    description: str,
    analysis: Analysis,
    prediction: Prediction,
) -> EnhancementResult:
    """Send the prompt on an open client and parse the reply."""
    fallback = EnhancementResult(prediction=prediction, engine_prediction=prediction)

    try:
        response = await client.messages.create(
            model=settings.enhancement_model,
            max_tokens=settings.enhancement_max_tokens,
            temperature=ENHANCEMENT_TEMPERATURE,
            system=SYSTEM_PROMPT,
            messages=[
                {"role": "user", "content": build_enhancement_prompt(description, analysis, prediction)}
            ],
        )
        enhanced = parse_enhancement_response(response.content[0].text)
    except Exception as e:
        logger.warning(f"AI second opinion failed, keeping engine prediction: {e}")
        fallback.error = str(e)
        return fallback

    logger.info(
        f"AI second opinion: {enhanced.classification.value} ({enhanced.daysDelay} days), "
        f"engine said {prediction.classification.value} ({prediction.daysDelay} days)"
    )
    return EnhancementResult(
        prediction=enhanced.model_copy(update={"analysis": prediction.analysis or analysis}),
        engine_prediction=prediction,
        enhanced=True,
    )


__all__ = [
    "EnhancementResult",
    "should_enhance",
    "build_enhancement_prompt",
    "parse_enhancement_response",
    "enhance_prediction",
]
